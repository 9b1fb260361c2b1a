from __future__ import annotations

import argparse
import logging
import os
from typing import List, Sequence

from .board import DEFAULT_BOARD_COLUMNS, TICKET_TYPES, Card, GridRect, render_board
from .db import SqliteGameStorage
from .packer import pack
from .store import GameStore


def demo_cards() -> List[Card]:
    """One card of each ticket type, in a fixed order."""
    return [Card(id=t, title=t.capitalize(), ticket_type=t) for t in ('polaroid', 'postcard', 'widget', 'ticket', 'minimal')]


def _print_board(cards: Sequence[Card], columns: int) -> None:
    print(render_board(cards, columns))
    print()
    for card in cards:
        b = card.board
        where = f"({b.x},{b.y}) {b.w}x{b.h}" if b is not None else "unplaced"
        print(f"  {card.id:<24} {card.ticket_type:<9} {where}")


def _rect(values: Sequence[int]) -> GridRect:
    x, y, w, h = values
    return GridRect(int(x), int(y), int(w), int(h))


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description='Game journal board layout')
    parser.add_argument('--db', default=os.getenv('GAMEBOOK_DB', 'data/gamebook.db'), help='SQLite DB file path')
    parser.add_argument('--columns', type=int, default=int(os.getenv('GAMEBOOK_COLUMNS', DEFAULT_BOARD_COLUMNS)),
                        help='Board column count')
    parser.add_argument('--seed-demo', action='store_true', help='Pack one card of each ticket type and exit')
    parser.add_argument('--move', nargs=5, metavar=('ID', 'X', 'Y', 'W', 'H'),
                        help='Drop a card on an absolute target (rejected on overlap)')
    parser.add_argument('--pin', nargs=5, metavar=('ID', 'X', 'Y', 'W', 'H'),
                        help='Pin a card at a target and reflow the rest around it')
    parser.add_argument('--reorder', nargs=3, metavar=('ID', 'X', 'Y'),
                        help='Move a card in collection order towards a cell')
    parser.add_argument('--types', action='store_true', help='List ticket types')
    args = parser.parse_args(argv)

    logging.basicConfig(level=os.getenv('GAMEBOOK_LOG_LEVEL', 'INFO').upper(),
                        format='%(levelname)s %(name)s: %(message)s')

    if args.types:
        print(', '.join(TICKET_TYPES))
        return

    if args.seed_demo:
        _print_board(pack(demo_cards(), args.columns), args.columns)
        return

    store = GameStore(SqliteGameStorage(args.db), columns=args.columns)
    try:
        store.load()
        if args.move:
            card_id, *rest = args.move
            ok = store.commit_move(card_id, _rect([int(v) for v in rest]))
            print('Moved.' if ok else 'Move rejected: target occupied or unchanged.')
        if args.pin:
            card_id, *rest = args.pin
            store.pin(card_id, _rect([int(v) for v in rest]))
        if args.reorder:
            card_id, x, y = args.reorder
            res = store.reorder(card_id, int(x), int(y))
            print(f"Inserted at index {res.insertion_index}, landed at ({res.target.x},{res.target.y})")
        _print_board(store.cards, store.columns)
    finally:
        store.close()


if __name__ == '__main__':
    main()

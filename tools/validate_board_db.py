#!/usr/bin/env python3
"""
Validate a stored game board for layout plausibility and print a JSON summary.

- Decodes the stored collection (all or nothing)
- Checks for every placed card:
  * x >= 0, y >= 0, w >= 1, h >= 1
  * x + w <= columns
  * placement computed against the expected column count
- Checks that no two placements overlap

Usage:
  python tools/validate_board_db.py data/gamebook.db
  python tools/validate_board_db.py data/gamebook.db 3     # expect a 3-column board
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from gamebook import DEFAULT_BOARD_COLUMNS, Card, render_board
from gamebook_core.codec import decode_stored_cards
from gamebook_core.db import STORAGE_KEY, db_get_item


def check_cards(cards: Sequence[Card], columns: int) -> Dict[str, Any]:
    bounds: List[str] = []
    stale: List[str] = []
    unplaced: List[str] = []
    overlaps: List[Tuple[str, str, int, int]] = []
    owner: Dict[Tuple[int, int], str] = {}

    for card in cards:
        b = card.board
        if b is None:
            unplaced.append(card.id)
            continue
        if b.columns != columns:
            stale.append(card.id)
        if b.x < 0 or b.y < 0 or b.w < 1 or b.h < 1 or b.x + b.w > b.columns:
            bounds.append(card.id)
        for cell in b.rect().cells():
            prev = owner.get(cell)
            if prev is not None and prev != card.id:
                overlaps.append((prev, card.id, cell[0], cell[1]))
            owner[cell] = card.id

    return {
        "cards": len(cards),
        "columns": columns,
        "unplaced": unplaced,
        "staleColumns": stale,
        "outOfBounds": bounds,
        "overlaps": [{"a": a, "b": b, "x": x, "y": y} for a, b, x, y in overlaps[:20]],
        "overlapCount": len(overlaps),
        "ok": not (bounds or overlaps or stale),
    }


def validate(db_path: str, columns: Optional[int] = None) -> int:
    columns = columns or DEFAULT_BOARD_COLUMNS
    raw = db_get_item(db_path, STORAGE_KEY)
    if raw is None:
        print(json.dumps({"ok": False, "error": "no stored collection"}, indent=2))
        return 1
    cards = decode_stored_cards(raw)
    if cards is None:
        print(json.dumps({"ok": False, "error": "stored collection does not decode"}, indent=2))
        return 1
    summary = check_cards(cards, columns)
    print(json.dumps(summary, indent=2))
    print(render_board(cards, columns))
    return 0 if summary["ok"] else 2


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    db_path = sys.argv[1]
    columns = int(sys.argv[2]) if len(sys.argv) > 2 else None
    sys.exit(validate(db_path, columns))


if __name__ == "__main__":
    main()

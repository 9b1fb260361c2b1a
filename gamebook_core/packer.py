from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence, Set

from .board import BoardPlacement, Card, Cell, GridRect, Span, find_card
from .spans import clamp_span, effective_card_span, resolve_span


class Occupancy:
    """Cells in use during a single packing pass. Built fresh for every call."""

    def __init__(self) -> None:
        self._cells: Set[Cell] = set()

    def is_free(self, x: int, y: int, w: int, h: int) -> bool:
        for row in range(y, y + h):
            for col in range(x, x + w):
                if (col, row) in self._cells:
                    return False
        return True

    def mark(self, x: int, y: int, w: int, h: int) -> None:
        for row in range(y, y + h):
            for col in range(x, x + w):
                self._cells.add((col, row))

    def __contains__(self, cell: Cell) -> bool:
        return cell in self._cells


def _first_free_slot(occupied: Occupancy, w: int, h: int, columns: int) -> GridRect:
    """Scans rows top to bottom and columns left to right; rows grow as needed."""
    y = 0
    while True:
        for x in range(0, columns - w + 1):
            if occupied.is_free(x, y, w, h):
                return GridRect(x, y, w, h)
        y += 1


def _place(card: Card, occupied: Occupancy, columns: int) -> BoardPlacement:
    span = effective_card_span(card, columns)
    w = min(span.w, columns)
    slot = _first_free_slot(occupied, w, span.h, columns)
    occupied.mark(slot.x, slot.y, slot.w, slot.h)
    return BoardPlacement(slot.x, slot.y, slot.w, slot.h, columns)


def pack(cards: Sequence[Card], columns: int) -> List[Card]:
    """
    Assigns every card a conflict-free placement, in collection order.
    Each card takes the first free slot of its effective span, scanning row-major
    from the top-left, so the same order and column count always yield the same board.
    """
    columns = max(1, columns)
    occupied = Occupancy()
    return [replace(card, board=_place(card, occupied, columns)) for card in cards]


def pack_with_pinned(
    cards: Sequence[Card],
    pinned_card_id: str,
    pinned_target: GridRect,
    columns: int,
) -> List[Card]:
    """
    Packs the board while holding one card at a chosen slot.
    The pinned card's span is resolved from the target and its position clamped into
    the grid; every other card is then packed around it in collection order.
    """
    pinned = find_card(cards, pinned_card_id)
    if pinned is None:
        return pack(cards, columns)

    columns = max(1, columns)
    occupied = Occupancy()

    span = resolve_span(
        pinned.ticket_type,
        clamp_span(Span(pinned_target.w, pinned_target.h), columns),
        columns,
    )
    x = max(0, min(columns - span.w, pinned_target.x))
    y = max(0, pinned_target.y)
    occupied.mark(x, y, span.w, span.h)
    pinned_placement = BoardPlacement(x, y, span.w, span.h, columns)

    out: List[Card] = []
    for card in cards:
        if card.id == pinned_card_id:
            out.append(replace(card, board=pinned_placement))
        else:
            out.append(replace(card, board=_place(card, occupied, columns)))
    return out

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from .board import BoardPlacement, Card, GridCell, GridRect, Span, TicketType, find_card
from .packer import Occupancy
from .spans import card_span, resolve_span


def normalize_placement(card: Card, columns: int) -> BoardPlacement:
    """A card's current placement with its span resolved and x clamped into the grid."""
    raw = card.board.span if card.board is not None else card_span(card.ticket_type)
    span = resolve_span(card.ticket_type, raw, columns)
    max_x = max(0, columns - span.w)
    x = card.board.x if card.board is not None else 0
    y = card.board.y if card.board is not None else 0
    return BoardPlacement(max(0, min(x, max_x)), max(0, y), span.w, span.h, columns)


def normalize_target(ticket_type: Optional[TicketType], target: GridRect, columns: int) -> GridRect:
    span = resolve_span(ticket_type, Span(target.w, target.h), columns)
    max_x = max(0, columns - span.w)
    return GridRect(max(0, min(target.x, max_x)), max(0, target.y), span.w, span.h)


def get_drop_target_conflict_cells(
    cards: Sequence[Card],
    dragging_card_id: str,
    target: GridRect,
    columns: int,
) -> List[GridCell]:
    """Cells of the normalized target already held by other cards; empty means the drop is legal."""
    dragging = find_card(cards, dragging_card_id)
    if dragging is None:
        return []

    occupied = Occupancy()
    for card in cards:
        if card.id == dragging_card_id:
            continue
        p = normalize_placement(card, columns)
        occupied.mark(p.x, p.y, p.w, p.h)

    moving_to = normalize_target(dragging.ticket_type, target, columns)
    return [GridCell(x, y) for (x, y) in moving_to.cells() if (x, y) in occupied]


def commit_move_strict_no_overlap(
    cards: Sequence[Card],
    card_id: str,
    target: GridRect,
    columns: int,
) -> Sequence[Card]:
    """
    Moves one card to an absolute target if every target cell is free.

    The input collection is returned as-is (same object) when the card is unknown,
    when the move would not change its placement, or when any target cell conflicts.
    On success only the moved card's placement changes; nothing else reflows.
    """
    moving = find_card(cards, card_id)
    if moving is None:
        return cards

    moving_from = normalize_placement(moving, columns)
    rect = normalize_target(moving.ticket_type, target, columns)
    moving_to = BoardPlacement(rect.x, rect.y, rect.w, rect.h, columns)
    if moving_from == moving_to:
        return cards
    if get_drop_target_conflict_cells(cards, card_id, target, columns):
        return cards

    return [replace(card, board=moving_to) if card.id == card_id else card for card in cards]


def drag_conflict_scope(
    page_cards: Sequence[Card],
    dragging: Card,
    base_span: Span,
    columns: int,
) -> Sequence[Card]:
    """
    Makes sure conflict checks see the dragged card. During a cross-page drag the source
    card is absent from the destination page, so a copy parked at (0, 0) is appended.
    """
    if any(card.id == dragging.id for card in page_cards):
        return page_cards
    stand_in = replace(dragging, board=BoardPlacement(0, 0, base_span.w, base_span.h, columns))
    return list(page_cards) + [stand_in]

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .board import BoardPlacement, Card, GridRect, Span, find_card
from .packer import pack
from .spans import clamp_span, effective_card_span, resolve_span

_FALLBACK_TARGET = GridRect(0, 0, 1, 1)


@dataclass(frozen=True)
class InsertionResult:
    insertion_index: int
    target: GridRect


def _fallback() -> InsertionResult:
    return InsertionResult(insertion_index=0, target=_FALLBACK_TARGET)


def apply_span_override(card: Card, span_override: Optional[Span], columns: int) -> Card:
    if span_override is None:
        return card
    span = resolve_span(card.ticket_type, clamp_span(span_override, columns), columns)
    x, y = (card.board.x, card.board.y) if card.board is not None else (0, 0)
    return replace(card, board=BoardPlacement(x, y, span.w, span.h, columns))


def _preview(
    others: List[Card],
    moving: Card,
    index: int,
    columns: int,
) -> InsertionResult:
    clamped = max(0, min(index, len(others)))
    order = others[:clamped] + [moving] + others[clamped:]
    placed = pack(order, columns)[clamped]
    board = placed.board
    if board is None or placed.id != moving.id:
        return InsertionResult(clamped, _FALLBACK_TARGET)
    return InsertionResult(clamped, board.rect())


def _split(cards: Sequence[Card], card_id: str, columns: int,
           span_override: Optional[Span]) -> Optional[Tuple[Card, List[Card]]]:
    original = find_card(cards, card_id)
    if original is None:
        return None
    moving = apply_span_override(original, span_override, columns)
    others = [c for c in cards if c.id != card_id]
    return moving, others


def preview_insertion_at_index(
    cards: Sequence[Card],
    card_id: str,
    index: int,
    columns: int,
    span_override: Optional[Span] = None,
) -> InsertionResult:
    """Where a card would land if moved to `index` in collection order and the board repacked."""
    split = _split(cards, card_id, columns, span_override)
    if split is None:
        return _fallback()
    moving, others = split
    return _preview(others, moving, index, columns)


def find_best_insertion(
    cards: Sequence[Card],
    card_id: str,
    desired_x: int,
    desired_y: int,
    columns: int,
    span_override: Optional[Span] = None,
) -> InsertionResult:
    """
    Finds the collection index whose repacked board puts the card closest to (desired_x, desired_y).

    Every index from 0 to len(others) is previewed. Candidates are ranked by overlap
    area with the desired rectangle (larger first), then by Manhattan distance between
    centers (smaller first), then by insertion index (lower first).
    """
    split = _split(cards, card_id, columns, span_override)
    if split is None:
        return _fallback()
    moving, others = split

    span = effective_card_span(moving, max(1, columns))
    desired = GridRect(desired_x, desired_y, span.w, span.h)

    best: Optional[InsertionResult] = None
    best_key: Optional[Tuple[int, float, int]] = None
    for index in range(len(others) + 1):
        preview = _preview(others, moving, index, columns)
        key = (
            -desired.overlap_area(preview.target),
            desired.center_distance(preview.target),
            preview.insertion_index,
        )
        if best_key is None or key < best_key:
            best, best_key = preview, key

    return best if best is not None else _fallback()

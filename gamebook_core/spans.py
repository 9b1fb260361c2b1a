from __future__ import annotations

from typing import List, Optional, Sequence

from .board import (
    BASE_SPANS,
    LANDSCAPE_PREFERRED,
    SQUARE_BIASED,
    Card,
    Span,
    TicketType,
)

MAX_SPAN_UNITS = 4
MAX_RESOLVED_W = 2
MAX_RESOLVED_H = 2
MAX_ASPECT_RATIO = 2


def card_span(ticket_type: Optional[TicketType]) -> Span:
    """Base span of a ticket type; unknown types occupy a single cell."""
    w, h = BASE_SPANS.get(ticket_type or '', (1, 1))
    return Span(w, h)


def _orientation(w: int, h: int) -> str:
    if w > h:
        return 'wide'
    if h > w:
        return 'tall'
    return 'square'


def _max_candidate_w(columns: int) -> int:
    return min(columns, MAX_SPAN_UNITS, MAX_RESOLVED_W)


def _candidates(ticket_type: Optional[TicketType], columns: int) -> List[Span]:
    base = card_span(ticket_type)
    out: List[Span] = []
    for w in range(1, _max_candidate_w(columns) + 1):
        for h in range(1, MAX_RESOLVED_H + 1):
            if w * h < base.area:
                continue
            if max(w, h) > MAX_ASPECT_RATIO * min(w, h):
                continue
            if ticket_type in LANDSCAPE_PREFERRED and w < h:
                continue
            out.append(Span(w, h))
    return out


def _fallback(desired: Span, columns: int) -> Span:
    max_w = max(1, _max_candidate_w(columns))
    return Span(
        max(1, min(desired.w, max_w)),
        max(1, min(desired.h, MAX_RESOLVED_H)),
    )


def resolve_span(ticket_type: Optional[TicketType], desired: Span, columns: int) -> Span:
    """
    Returns the allowed span of a ticket type closest to the desired one.
    Candidates are scored by 10 * manhattan distance plus one when their orientation
    differs from the base span's (square-biased types are never penalized); the lowest
    score wins and ties go to the larger area. When nothing passes the area, aspect and
    orientation filters the desired span is clamped into range instead.
    """
    candidates = _candidates(ticket_type, columns)
    if not candidates:
        return _fallback(desired, columns)

    base = card_span(ticket_type)
    base_orientation = _orientation(base.w, base.h)

    def score(c: Span) -> int:
        distance = abs(c.w - desired.w) + abs(c.h - desired.h)
        penalty = 0
        if ticket_type not in SQUARE_BIASED and _orientation(c.w, c.h) != base_orientation:
            penalty = 1
        return 10 * distance + penalty

    return min(candidates, key=lambda c: (score(c), -c.area))


def span_presets(ticket_type: Optional[TicketType], columns: int) -> List[Span]:
    """Every span the resolver can pick for a ticket type at this column count."""
    candidates = _candidates(ticket_type, columns)
    return candidates or [_fallback(card_span(ticket_type), columns)]


def clamp_span(span: Span, columns: int) -> Span:
    return Span(
        max(1, min(span.w, min(columns, MAX_SPAN_UNITS))),
        max(1, min(span.h, MAX_SPAN_UNITS)),
    )


def effective_card_span(card: Card, columns: int) -> Span:
    """The span a card packs with: its explicit size if placed, else its base span."""
    explicit = card.board.span if card.board is not None else card_span(card.ticket_type)
    return resolve_span(card.ticket_type, clamp_span(explicit, columns), columns)


def choose_nearest_allowed_span(presets: Sequence[Span], intent: Span, fallback: Span) -> Span:
    """Snaps a drag intent onto a preset: exact match, nearest by distance, then by area delta."""
    for preset in presets:
        if preset == intent:
            return preset
    if not presets:
        return fallback

    fallback_preset = fallback if fallback in presets else presets[0]

    def rank(p: Span):
        distance = abs(p.w - intent.w) + abs(p.h - intent.h)
        area_delta = abs(p.area - intent.area)
        return (distance, area_delta, 0 if p == fallback_preset else 1)

    return min(presets, key=rank)

from __future__ import annotations

import math

HoverZone = str  # 'left', 'right', 'top', 'bottom', 'middle'

DEFAULT_EDGE_THRESHOLD = 0.22

# (max distance to a grid line, span) from tightest to loosest
_INTENT_THRESHOLDS = ((0.015, 4), (0.035, 3), (0.075, 2))


def get_axis_intent_span(pointer_offset: float, cell_stride: float, max_span: int = 4) -> int:
    """
    Maps a pointer offset along one axis to a span of 1-4 cells.
    The closer the pointer sits to a grid line (as a fraction of the stride), the
    wider the intent; thresholds are inclusive and symmetric around every line.
    """
    if not math.isfinite(pointer_offset) or not math.isfinite(cell_stride) or cell_stride <= 0:
        return 1
    normalized = pointer_offset / cell_stride
    if not math.isfinite(normalized):
        return 1
    distance = abs(normalized - round(normalized))
    cap = max(1, min(max_span, 4))
    for threshold, span in _INTENT_THRESHOLDS:
        if distance <= threshold and cap >= span:
            return span
    return 1


def get_hover_zone(
    normalized_x: float,
    normalized_y: float,
    edge_threshold: float = DEFAULT_EDGE_THRESHOLD,
) -> HoverZone:
    """Classifies a point inside a card's box as near one of its edges, or the middle."""
    x = max(0.0, min(1.0, normalized_x))
    y = max(0.0, min(1.0, normalized_y))
    edge = max(0.05, min(0.45, edge_threshold))

    # Ties resolve in this order.
    distances = [
        ('left', x),
        ('right', 1 - x),
        ('top', y),
        ('bottom', 1 - y),
    ]
    zone, distance = min(distances, key=lambda item: item[1])
    if distance <= edge:
        return zone
    return 'middle'

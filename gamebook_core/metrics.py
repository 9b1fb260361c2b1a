from __future__ import annotations

import math
from dataclasses import dataclass

from .board import DEFAULT_BOARD_COLUMNS, GridRect, Span

BOARD_GAP = 8
BOARD_SIDE_PADDING = 16
BOARD_MIN_WIDTH = 200
BOARD_MAX_WIDTH = 680
BOARD_ROW_HEIGHT_RATIO = 1.28


@dataclass(frozen=True)
class BoardMetrics:
    columns: int
    board_width: float
    cell_width: float
    row_height: float


def board_width(screen_width: float) -> float:
    available = max(BOARD_MIN_WIDTH, screen_width - BOARD_SIDE_PADDING * 2)
    return min(available, BOARD_MAX_WIDTH)


def board_metrics(screen_width: float, columns: int = DEFAULT_BOARD_COLUMNS) -> BoardMetrics:
    safe_columns = max(1, columns)
    width = board_width(screen_width)
    cell_width = (width - BOARD_GAP * (safe_columns - 1)) / safe_columns
    return BoardMetrics(
        columns=safe_columns,
        board_width=width,
        cell_width=cell_width,
        row_height=cell_width * BOARD_ROW_HEIGHT_RATIO,
    )


def cell_stride(metrics: BoardMetrics) -> float:
    """Horizontal distance between the left edges of two neighbouring columns."""
    return metrics.cell_width + BOARD_GAP


def row_stride(metrics: BoardMetrics) -> float:
    return metrics.row_height + BOARD_GAP


def target_rect_from_pixels(px: float, py: float, span: Span, metrics: BoardMetrics) -> GridRect:
    """Snaps a board-relative pixel point (card top-left) onto the nearest grid cell."""
    col = int(math.floor(px / cell_stride(metrics) + 0.5))
    row = int(math.floor(py / row_stride(metrics) + 0.5))
    max_x = max(0, metrics.columns - span.w)
    return GridRect(max(0, min(col, max_x)), max(0, row), span.w, span.h)

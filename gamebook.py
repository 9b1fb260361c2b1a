from __future__ import annotations

# Facade module that re-exports the board core.
# Used by the Flask app, the tools and the tests.
# Single-responsibility modules live under gamebook_core/*.

from gamebook_core.board import (  # noqa: F401
    BASE_SPANS,
    DEFAULT_BOARD_COLUMNS,
    DEFAULT_TICKET_TYPE,
    TICKET_TYPES,
    BoardPlacement,
    Card,
    GameNote,
    GridCell,
    GridRect,
    Span,
    find_card,
    render_board,
)
from gamebook_core.spans import (  # noqa: F401
    card_span,
    choose_nearest_allowed_span,
    clamp_span,
    effective_card_span,
    resolve_span,
    span_presets,
)
from gamebook_core.packer import pack, pack_with_pinned  # noqa: F401
from gamebook_core.insertion import (  # noqa: F401
    InsertionResult,
    find_best_insertion,
    preview_insertion_at_index,
)
from gamebook_core.engine import (  # noqa: F401
    commit_move_strict_no_overlap,
    drag_conflict_scope,
    get_drop_target_conflict_cells,
    normalize_placement,
    normalize_target,
)
from gamebook_core.intent import get_axis_intent_span, get_hover_zone  # noqa: F401
from gamebook_core.metrics import (  # noqa: F401
    BoardMetrics,
    board_metrics,
    cell_stride,
    target_rect_from_pixels,
)
from gamebook_core.codec import (  # noqa: F401
    card_to_json,
    decode_stored_cards,
    encode_cards,
)
from gamebook_core.db import (  # noqa: F401
    DecodeFailed,
    SqliteGameStorage,
    db_get_item,
    db_set_item,
)
from gamebook_core.store import ClientIdCounter, GameStore, seed_cards  # noqa: F401


def main() -> None:
    # CLI driver delegated to gamebook_core.cli
    from gamebook_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from .board import (
    DEFAULT_MOUNT_STYLE,
    DEFAULT_POSTCARD_SIDE,
    DEFAULT_TICKET_TYPE,
    MOUNT_STYLES,
    POSTCARD_SIDES,
    STATUSES,
    TICKET_TYPES,
    BoardPlacement,
    Card,
    GameNote,
)

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Raised internally when one stored entry is structurally invalid."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _grid_int(value: Any, name: str, minimum: int) -> int:
    if not _is_number(value) or value != int(value):
        raise DecodeError(f"board.{name} is not a finite integer: {value!r}")
    if int(value) < minimum:
        raise DecodeError(f"board.{name} below {minimum}: {value!r}")
    return int(value)


def _decode_board(value: Any) -> BoardPlacement:
    if not isinstance(value, dict):
        raise DecodeError("board is not an object")
    return BoardPlacement(
        x=_grid_int(value.get('x'), 'x', 0),
        y=_grid_int(value.get('y'), 'y', 0),
        w=_grid_int(value.get('w'), 'w', 1),
        h=_grid_int(value.get('h'), 'h', 1),
        columns=_grid_int(value.get('columns'), 'columns', 1),
    )


def _optional_progress(value: Dict[str, Any]) -> Optional[float]:
    if 'progress' not in value:
        return None
    progress = value['progress']
    if not _is_number(progress):
        raise DecodeError(f"progress is not a finite number: {progress!r}")
    return float(progress)


def _decode_note(value: Any) -> GameNote:
    if not isinstance(value, dict):
        raise DecodeError("note is not an object")
    note_id = value.get('id')
    timestamp = value.get('timestamp')
    where_left_off = value.get('whereLeftOff')
    quick_thought = value.get('quickThought')
    if not isinstance(note_id, str) or not _is_number(timestamp) or not isinstance(where_left_off, str):
        raise DecodeError(f"note {note_id!r} is missing id, timestamp or whereLeftOff")
    if quick_thought is not None and not isinstance(quick_thought, str):
        raise DecodeError(f"note {note_id!r} has a non-string quickThought")
    return GameNote(
        id=note_id,
        timestamp=timestamp,
        where_left_off=where_left_off,
        quick_thought=quick_thought,
        progress=_optional_progress(value),
    )


def _pick(value: Any, allowed: Sequence[str], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _decode_card(value: Any) -> Card:
    if not isinstance(value, dict):
        raise DecodeError("entry is not an object")
    card_id = value.get('id')
    title = value.get('title')
    status = value.get('status')
    notes = value.get('notes')
    if not isinstance(card_id, str) or not isinstance(title, str):
        raise DecodeError("entry is missing id or title")
    if status not in STATUSES:
        raise DecodeError(f"card {card_id!r} has unknown status {status!r}")
    if not isinstance(notes, list):
        raise DecodeError(f"card {card_id!r} has no notes list")

    image_uri = value.get('imageUri')
    playtime = value.get('playtime')
    return Card(
        id=card_id,
        title=title,
        status=status,
        notes=tuple(_decode_note(n) for n in notes),
        ticket_type=_pick(value.get('ticketType'), TICKET_TYPES, DEFAULT_TICKET_TYPE),
        mount_style=_pick(value.get('mountStyle'), MOUNT_STYLES, DEFAULT_MOUNT_STYLE),
        postcard_side=_pick(value.get('postcardSide'), POSTCARD_SIDES, DEFAULT_POSTCARD_SIDE),
        board=_decode_board(value['board']) if 'board' in value else None,
        last_note=_decode_note(value['lastNote']) if 'lastNote' in value else None,
        image_uri=image_uri if isinstance(image_uri, str) else None,
        playtime=playtime if isinstance(playtime, str) else None,
        progress=_optional_progress(value),
    )


def decode_cards(parsed: Any) -> Optional[List[Card]]:
    """Decodes an already-parsed collection, all or nothing."""
    if not isinstance(parsed, list):
        logger.warning("stored collection is not a list")
        return None
    try:
        return [_decode_card(entry) for entry in parsed]
    except DecodeError as e:
        logger.warning("rejecting stored collection: %s", e)
        return None


def decode_stored_cards(raw: str) -> Optional[List[Card]]:
    """
    Decodes a persisted collection, all or nothing.
    Returns None when the payload is not JSON, not a list, or when any single entry is
    invalid; a partly trusted collection could bring back overlapping placements.
    Unknown ticket types and styles fall back to their defaults, unknown keys are dropped.
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("stored collection is not valid JSON")
        return None
    return decode_cards(parsed)


def _note_to_json(note: GameNote) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        'id': note.id,
        'timestamp': note.timestamp,
        'whereLeftOff': note.where_left_off,
    }
    if note.quick_thought is not None:
        out['quickThought'] = note.quick_thought
    if note.progress is not None:
        out['progress'] = note.progress
    return out


def placement_to_json(board: BoardPlacement) -> Dict[str, int]:
    return {'x': board.x, 'y': board.y, 'w': board.w, 'h': board.h, 'columns': board.columns}


def card_to_json(card: Card) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        'id': card.id,
        'title': card.title,
        'status': card.status,
        'notes': [_note_to_json(n) for n in card.notes],
        'ticketType': card.ticket_type,
        'mountStyle': card.mount_style,
        'postcardSide': card.postcard_side,
    }
    if card.board is not None:
        out['board'] = placement_to_json(card.board)
    if card.last_note is not None:
        out['lastNote'] = _note_to_json(card.last_note)
    if card.image_uri is not None:
        out['imageUri'] = card.image_uri
    if card.playtime is not None:
        out['playtime'] = card.playtime
    if card.progress is not None:
        out['progress'] = card.progress
    return out


def encode_cards(cards: Sequence[Card]) -> str:
    return json.dumps([card_to_json(c) for c in cards])

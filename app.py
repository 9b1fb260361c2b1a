from __future__ import annotations

import logging
import os
import threading
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from gamebook import (
    DEFAULT_BOARD_COLUMNS,
    Card,
    GameStore,
    GridRect,
    Span,
    SqliteGameStorage,
    TICKET_TYPES,
    card_to_json,
    commit_move_strict_no_overlap,
    find_best_insertion,
    get_axis_intent_span,
    get_drop_target_conflict_cells,
    get_hover_zone,
    pack,
    pack_with_pinned,
    preview_insertion_at_index,
)
from gamebook_core.codec import decode_cards

DEFAULT_DB = os.getenv("GAMEBOOK_DB", "data/gamebook.db")
DEFAULT_COLUMNS = int(os.getenv("GAMEBOOK_COLUMNS", str(DEFAULT_BOARD_COLUMNS)))

logging.basicConfig(
    level=os.getenv("GAMEBOOK_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

_store: Optional[GameStore] = None
_store_lock = threading.Lock()


def get_store() -> GameStore:
    """Lazily opens the app-wide store on first use."""
    global _store
    with _store_lock:
        if _store is None:
            store = GameStore(SqliteGameStorage(DEFAULT_DB), columns=DEFAULT_COLUMNS)
            store.load()
            logger.info("opened board store at %s (%d cards)", DEFAULT_DB, len(store.cards))
            _store = store
        return _store


# ---------- JSON helpers ----------

def rect_from_json(obj: Dict[str, Any]) -> GridRect:
    return GridRect(x=int(obj["x"]), y=int(obj["y"]), w=int(obj["w"]), h=int(obj["h"]))


def rect_to_json(rect: GridRect) -> Dict[str, int]:
    return {"x": rect.x, "y": rect.y, "w": rect.w, "h": rect.h}


def span_from_json(obj: Optional[Dict[str, Any]]) -> Optional[Span]:
    if obj is None:
        return None
    return Span(w=int(obj["w"]), h=int(obj["h"]))


def cards_from_json(items: Any) -> List[Card]:
    cards = decode_cards(items)
    if cards is None:
        raise ValueError("games could not be decoded")
    return cards


def cards_to_json(cards: List[Card]) -> List[Dict[str, Any]]:
    return [card_to_json(c) for c in cards]


def _body() -> Dict[str, Any]:
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise ValueError("JSON object body required")
    return body


def _columns(body: Dict[str, Any]) -> int:
    return int(body.get("columns", DEFAULT_COLUMNS))


def _bad_request(e: Exception) -> Any:
    logger.info("rejected request to %s: %s", request.path, e)
    return jsonify({"ok": False, "error": f"bad request: {e}"}), 400


_PAYLOAD_ERRORS = (KeyError, TypeError, ValueError)


# ---------- Layout API ----------

@app.get("/api/board")
def api_board() -> Any:
    store = get_store()
    return jsonify({"ok": True, "columns": store.columns, "games": cards_to_json(store.cards)})


@app.post("/api/layout")
def api_layout() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        columns = _columns(body)
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    return jsonify({"ok": True, "games": cards_to_json(pack(cards, columns))})


@app.post("/api/layout/pinned")
def api_layout_pinned() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        pinned_id = str(body["pinnedId"])
        target = rect_from_json(body["target"])
        columns = _columns(body)
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    return jsonify({"ok": True, "games": cards_to_json(pack_with_pinned(cards, pinned_id, target, columns))})


@app.post("/api/insertion/preview")
def api_insertion_preview() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        game_id = str(body["gameId"])
        index = int(body["index"])
        columns = _columns(body)
        span = span_from_json(body.get("span"))
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    res = preview_insertion_at_index(cards, game_id, index, columns, span)
    return jsonify({"ok": True, "insertionIndex": res.insertion_index, "target": rect_to_json(res.target)})


@app.post("/api/insertion/best")
def api_insertion_best() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        game_id = str(body["gameId"])
        x, y = int(body["x"]), int(body["y"])
        columns = _columns(body)
        span = span_from_json(body.get("span"))
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    res = find_best_insertion(cards, game_id, x, y, columns, span)
    return jsonify({"ok": True, "insertionIndex": res.insertion_index, "target": rect_to_json(res.target)})


@app.post("/api/conflicts")
def api_conflicts() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        game_id = str(body["gameId"])
        target = rect_from_json(body["target"])
        columns = _columns(body)
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    cells = get_drop_target_conflict_cells(cards, game_id, target, columns)
    return jsonify({"ok": True, "cells": [{"x": c.x, "y": c.y} for c in cells]})


@app.post("/api/commit")
def api_commit() -> Any:
    try:
        body = _body()
        cards = cards_from_json(body["games"])
        game_id = str(body["gameId"])
        target = rect_from_json(body["target"])
        columns = _columns(body)
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    result = commit_move_strict_no_overlap(cards, game_id, target, columns)
    return jsonify({"ok": True, "committed": result is not cards, "games": cards_to_json(list(result))})


@app.post("/api/intent")
def api_intent() -> Any:
    try:
        body = _body()
        pointer = float(body["pointer"])
        stride = float(body["stride"])
        max_span = int(body.get("maxSpan", 4))
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    return jsonify({"ok": True, "span": get_axis_intent_span(pointer, stride, max_span)})


@app.post("/api/hover")
def api_hover() -> Any:
    try:
        body = _body()
        x = float(body["x"])
        y = float(body["y"])
        threshold = body.get("threshold")
        threshold = float(threshold) if threshold is not None else None
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    zone = get_hover_zone(x, y) if threshold is None else get_hover_zone(x, y, threshold)
    return jsonify({"ok": True, "zone": zone})


# ---------- Journal API (app store) ----------

@app.post("/api/games")
def api_add_game() -> Any:
    try:
        body = _body()
        title = str(body["title"]).strip()
        progress = float(body.get("progress", 0))
        where_left_off = str(body.get("whereLeftOff", ""))
        quick_thought = body.get("quickThought")
        ticket_type = str(body.get("ticketType", "polaroid"))
        if not title:
            raise ValueError("title required")
        if ticket_type not in TICKET_TYPES:
            raise ValueError(f"unknown ticket type {ticket_type!r}")
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    card = get_store().add_game_with_initial_note(
        title, progress, where_left_off,
        quick_thought=str(quick_thought) if quick_thought is not None else None,
        ticket_type=ticket_type,
    )
    return jsonify({"ok": True, "game": card_to_json(card)}), 201


@app.post("/api/games/<game_id>/notes")
def api_save_note(game_id: str) -> Any:
    try:
        body = _body()
        where_left_off = str(body["whereLeftOff"])
        quick_thought = body.get("quickThought")
        progress = body.get("progress")
        progress = float(progress) if progress is not None else None
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    note = get_store().save_note(
        game_id, where_left_off,
        quick_thought=str(quick_thought) if quick_thought is not None else None,
        progress=progress,
    )
    if note is None:
        return jsonify({"ok": False, "error": "unknown game"}), 404
    return jsonify({"ok": True, "noteId": note.id})


@app.post("/api/games/<game_id>/move")
def api_store_move(game_id: str) -> Any:
    try:
        target = rect_from_json(_body()["target"])
    except _PAYLOAD_ERRORS as e:
        return _bad_request(e)
    store = get_store()
    committed = store.commit_move(game_id, target)
    return jsonify({"ok": True, "committed": committed, "games": cards_to_json(store.cards)})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)

from __future__ import annotations

import logging
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .board import Card
from .codec import decode_stored_cards, encode_cards

logger = logging.getLogger(__name__)

STORAGE_KEY = '@gamebook/games'


def _writable_db_path(db_path: str) -> str:
    """
    Returns a path whose directory exists, creating it when needed.
    When the configured directory cannot be created the file keeps its name and moves
    to GAMEBOOK_DB_DIR, then the per-user data directory, then the system temp dir.
    """
    directory = os.path.dirname(db_path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        return db_path
    except OSError as e:
        logger.warning("cannot create %s for the board database: %s", directory, e)

    name = os.path.basename(db_path) or 'gamebook.db'
    for fallback in (
        os.getenv('GAMEBOOK_DB_DIR'),
        os.path.join(os.path.expanduser('~'), '.local', 'share', 'gamebook'),
        tempfile.gettempdir(),
    ):
        if not fallback:
            continue
        try:
            os.makedirs(fallback, exist_ok=True)
        except OSError:
            continue
        return os.path.join(fallback, name)
    return name


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the key-value table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def db_get_item(db_path: str, key: str) -> Optional[str]:
    """Reads a raw value, or None when the key was never written."""
    resolved = _writable_db_path(db_path)
    conn = sqlite3.connect(resolved)
    try:
        _ensure_db(conn)
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None
    finally:
        conn.close()


def db_set_item(db_path: str, key: str, value: str) -> None:
    resolved = _writable_db_path(db_path)
    conn = sqlite3.connect(resolved)
    try:
        _ensure_db(conn)
        conn.execute(
            "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now(timezone.utc).isoformat(timespec='seconds')),
        )
        conn.commit()
    finally:
        conn.close()


class DecodeFailed(Exception):
    """Stored collection exists but could not be decoded."""


class SqliteGameStorage:
    """Load/save contract for the card collection, backed by one SQLite key."""

    def __init__(self, db_path: str, key: str = STORAGE_KEY) -> None:
        self.db_path = db_path
        self.key = key

    def load(self) -> Optional[List[Card]]:
        """
        Returns the stored collection, or None when nothing has been stored yet.
        Raises DecodeFailed when a value exists but does not decode.
        """
        raw = db_get_item(self.db_path, self.key)
        if raw is None:
            return None
        cards = decode_stored_cards(raw)
        if cards is None:
            raise DecodeFailed(f"could not decode {self.key!r} in {self.db_path}")
        return cards

    def save(self, cards: Sequence[Card]) -> None:
        db_set_item(self.db_path, self.key, encode_cards(cards))
        logger.debug("saved %d cards to %s", len(cards), self.db_path)

from __future__ import annotations

import itertools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from .board import DEFAULT_BOARD_COLUMNS, Card, GameNote, GridRect, Span, TicketType, DEFAULT_TICKET_TYPE
from .db import DecodeFailed
from .engine import commit_move_strict_no_overlap
from .insertion import InsertionResult, apply_span_override, find_best_insertion
from .packer import pack, pack_with_pinned

logger = logging.getLogger(__name__)

IdFactory = Callable[[str], str]


class ClientIdCounter:
    """Mints ids for new cards and notes. One per store, so separate boards never share state."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def __call__(self, prefix: str) -> str:
        with self._lock:
            n = next(self._seq)
        return f"{prefix}-{int(self._clock() * 1000)}-{n}"


def seed_cards(now_ms: float) -> List[Card]:
    """The collection a fresh install starts with."""
    stardew_note = GameNote(
        id='note-1',
        timestamp=now_ms - 86400000,
        where_left_off='Just finished the Community Center bundles, heading to Ginger Island next',
        progress=0.6,
    )
    spiritfarer_note = GameNote(
        id='note-2',
        timestamp=now_ms - 172800000,
        where_left_off='Atul just left... need a moment before continuing',
        quick_thought='This game makes me feel things',
        progress=0.3,
    )
    return [
        Card(id='seed-stardew', title='Stardew Valley', playtime='24h 12m', progress=0.6,
             last_note=stardew_note),
        Card(id='seed-spiritfarer', title='Spiritfarer', playtime='8h 45m', progress=0.3,
             ticket_type='postcard', last_note=spiritfarer_note),
    ]


def _needs_layout(cards: Sequence[Card], columns: int) -> bool:
    return any(c.board is None or c.board.columns != columns for c in cards)


class GameStore:
    """
    Owns the ordered card collection of one board.

    Every edit is computed synchronously and applied in full, then the new collection
    is handed to storage on a single background worker. Saves are never awaited by the
    edit that caused them and failures are only logged; flush() waits for pending saves.
    Edits hold the store lock from reading the collection to replacing it, so
    concurrent callers (request threads) never build on a stale collection.
    """

    def __init__(
        self,
        storage,
        columns: int = DEFAULT_BOARD_COLUMNS,
        id_factory: Optional[IdFactory] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage
        self.columns = max(1, columns)
        self._clock = clock
        self._new_id = id_factory or ClientIdCounter(clock)
        self._cards: List[Card] = []
        self._pending: List[Future] = []
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='gamebook-save')

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    @property
    def pending_saves(self) -> int:
        """Saves queued or running right now."""
        with self._lock:
            return sum(1 for f in self._pending if not f.done())

    def playing(self) -> List[Card]:
        return [c for c in self._cards if c.status == 'playing']

    # ---------- persistence ----------

    def load(self) -> List[Card]:
        """Loads the collection; falls back to the seed collection when storage is empty or unreadable."""
        with self._lock:
            try:
                stored = self.storage.load()
            except DecodeFailed:
                logger.error("stored collection is unreadable; starting from seed data without overwriting it")
                self._cards = pack(seed_cards(self._clock() * 1000), self.columns)
                return self.cards

            if stored is None:
                logger.info("no stored collection; writing seed data")
                self._commit(pack(seed_cards(self._clock() * 1000), self.columns))
            elif _needs_layout(stored, self.columns):
                self._commit(pack(stored, self.columns))
            else:
                self._cards = list(stored)
            return self.cards

    def _commit(self, cards: Sequence[Card]) -> None:
        # callers hold self._lock
        self._cards = list(cards)
        snapshot = tuple(self._cards)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(self._save, snapshot))

    def _save(self, snapshot: Sequence[Card]) -> bool:
        try:
            self.storage.save(snapshot)
        except Exception:
            # not retried; the next edit saves the whole collection again
            logger.exception("saving the collection failed")
            return False
        return True

    def flush(self, timeout: Optional[float] = None) -> None:
        """Blocks until every queued save has finished (successfully or not)."""
        with self._lock:
            pending, self._pending = self._pending, []
        for future in pending:
            future.result(timeout=timeout)

    def close(self) -> None:
        self.flush()
        self._executor.shutdown(wait=True)

    # ---------- journal edits ----------

    def add_game_with_initial_note(
        self,
        title: str,
        progress: float,
        where_left_off: str,
        quick_thought: Optional[str] = None,
        ticket_type: TicketType = DEFAULT_TICKET_TYPE,
    ) -> Card:
        with self._lock:
            now_ms = self._clock() * 1000
            note = GameNote(
                id=self._new_id('note'),
                timestamp=now_ms,
                where_left_off=where_left_off.strip(),
                quick_thought=(quick_thought or '').strip() or None,
                progress=progress,
            )
            card = Card(
                id=self._new_id('game'),
                title=title.strip(),
                status='playing',
                notes=(note,),
                ticket_type=ticket_type,
                last_note=note,
                progress=progress,
            )
            self._commit(pack([card] + self._cards, self.columns))
            return next(c for c in self._cards if c.id == card.id)

    def save_note(
        self,
        card_id: str,
        where_left_off: str,
        quick_thought: Optional[str] = None,
        progress: Optional[float] = None,
    ) -> Optional[GameNote]:
        """Prepends a note to a card. Unknown ids are ignored (card removed mid-edit)."""
        with self._lock:
            if not any(c.id == card_id for c in self._cards):
                return None
            note = GameNote(
                id=self._new_id('note'),
                timestamp=self._clock() * 1000,
                where_left_off=where_left_off.strip(),
                quick_thought=(quick_thought or '').strip() or None,
                progress=progress,
            )
            updated = [
                replace(c, last_note=note, notes=(note,) + c.notes,
                        progress=progress if progress is not None else c.progress)
                if c.id == card_id else c
                for c in self._cards
            ]
            self._commit(updated)
            return note

    # ---------- board edits ----------

    def commit_move(self, card_id: str, target: GridRect) -> bool:
        """Direct drop. Returns False, with nothing saved, when the move was rejected or a no-op."""
        with self._lock:
            result = commit_move_strict_no_overlap(self._cards, card_id, target, self.columns)
            if result is self._cards:
                return False
            self._commit(result)
            return True

    def reorder(
        self,
        card_id: str,
        desired_x: int,
        desired_y: int,
        span_override: Optional[Span] = None,
    ) -> InsertionResult:
        """Moves a card in collection order to the index that lands it nearest the desired cell."""
        with self._lock:
            best = find_best_insertion(self._cards, card_id, desired_x, desired_y, self.columns, span_override)
            moving = next((c for c in self._cards if c.id == card_id), None)
            if moving is None:
                return best
            moving = apply_span_override(moving, span_override, self.columns)
            others = [c for c in self._cards if c.id != card_id]
            others.insert(best.insertion_index, moving)
            self._commit(pack(others, self.columns))
            return best

    def pin(self, card_id: str, target: GridRect) -> None:
        with self._lock:
            self._commit(pack_with_pinned(self._cards, card_id, target, self.columns))

    def set_columns(self, columns: int) -> None:
        with self._lock:
            self.columns = max(1, columns)
            self._commit(pack(self._cards, self.columns))

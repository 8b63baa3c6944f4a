"""Bounded newest-first ledger of how a goal's plan felt."""
from __future__ import annotations

import logging
import time

from pydantic import TypeAdapter

from core.models.user import FeedbackEntry, FeedbackSignal
from services.db import FEEDBACK_KEY, BlobStore

_LOG = logging.getLogger(__name__)

_LEDGER = TypeAdapter(list[FeedbackEntry])

MAX_ENTRIES = 50


class FeedbackLedger:
    def __init__(self, store: BlobStore, limit: int = MAX_ENTRIES) -> None:
        self._store = store
        self._limit = limit
        self._entries: list[FeedbackEntry] = self._load()[:limit]

    def _load(self) -> list[FeedbackEntry]:
        raw = self._store.get(FEEDBACK_KEY)
        if not raw:
            return []
        try:
            return _LEDGER.validate_json(raw)
        except ValueError:
            _LOG.warning("Discarding unreadable feedback blob")
            return []

    @property
    def entries(self) -> tuple[FeedbackEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def recent(self, n: int = 3) -> list[FeedbackEntry]:
        return self._entries[:n]

    def submit(self, signal: FeedbackSignal | str, goal: str | None) -> FeedbackEntry | None:
        """Record `signal` for `goal`; without a goal nothing happens."""
        if not goal:
            return None
        entry = FeedbackEntry(
            goal=goal,
            signal=FeedbackSignal(signal),
            timestamp=int(time.time() * 1000),
        )
        self._entries = [entry, *self._entries][: self._limit]
        self._store.set(
            FEEDBACK_KEY,
            _LEDGER.dump_json(self._entries, by_alias=True).decode(),
        )
        return entry

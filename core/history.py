"""
core/history.py
────────────────────────────────────────────────────────────────────────
Newest-first archive of meal analyses, mirrored to the blob store.

Entries are keyed by `timestamp` when merging with the cloud copy; the
key is not guaranteed unique (two scans within the same second collide)
and timestamp-less entries all share one key.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Sequence

from pydantic import TypeAdapter, ValidationError

from core.models.meal import MealAnalysisResult
from services.db import HISTORY_KEY, BlobStore

_LOG = logging.getLogger(__name__)

_ARCHIVE = TypeAdapter(list[MealAnalysisResult])

EXPORT_FILENAME = "metabolic_archive.json"


def merge_by_timestamp(
    remote: Iterable[MealAnalysisResult],
    local: Iterable[MealAnalysisResult],
) -> list[MealAnalysisResult]:
    """Remote-then-local, first occurrence of each timestamp wins."""
    seen: set[str | None] = set()
    merged: list[MealAnalysisResult] = []
    for item in [*remote, *local]:
        if item.timestamp in seen:
            continue
        seen.add(item.timestamp)
        merged.append(item)
    return merged


class HistoryStore:
    def __init__(self, store: BlobStore) -> None:
        self._store = store
        self._items: list[MealAnalysisResult] = self._load()

    # --------------- persistence --------------------------------------
    def _load(self) -> list[MealAnalysisResult]:
        raw = self._store.get(HISTORY_KEY)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except ValueError:
            _LOG.warning("Discarding unreadable history blob")
            return []
        if not isinstance(rows, list):
            _LOG.warning("Discarding history blob that is not a list")
            return []

        items: list[MealAnalysisResult] = []
        for row in rows:
            try:
                items.append(MealAnalysisResult.model_validate(row))
            except ValidationError:
                _LOG.warning("Skipping unreadable history entry")
        return items

    def _save(self) -> None:
        self._store.set(HISTORY_KEY, self.export())

    # --------------- reads --------------------------------------------
    @property
    def items(self) -> tuple[MealAnalysisResult, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def specimens(self, limit: int = 12) -> list[MealAnalysisResult]:
        """Most recent entries that still carry their inline photo."""
        with_photo = [
            r for r in self._items
            if r.image_url and r.image_url.startswith("data:image")
        ]
        return with_photo[:limit]

    # --------------- writes -------------------------------------------
    def append(self, result: MealAnalysisResult) -> None:
        self._items.insert(0, result)
        self._save()

    def merge(self, remote: Sequence[MealAnalysisResult]) -> list[MealAnalysisResult]:
        self._items = merge_by_timestamp(remote, self._items)
        self._save()
        return list(self._items)

    def clear(self, confirm: Callable[[str], bool], message: str = "Purge history?") -> bool:
        if not confirm(message):
            return False
        self._items = []
        self._store.remove(HISTORY_KEY)
        return True

    # --------------- export -------------------------------------------
    def export(self) -> str:
        return _ARCHIVE.dump_json(self._items, by_alias=True, exclude_none=True).decode()

    def export_to(self, path: str | Path = EXPORT_FILENAME) -> Path:
        out = Path(path)
        out.write_text(self.export(), encoding="utf-8")
        return out

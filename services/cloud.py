"""
services/cloud.py
────────────────────────────────────────────────────────────────────────
Best-effort mirror of the meal archive in a PostgREST-style table
(`payload` jsonb, `timestamp` text, `created_at` default now()).

Nothing here raises: a failed call is logged and reported as
"cloud unavailable" so the caller carries on with local state only.
"""
from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from core.models.meal import MealAnalysisResult

_LOG = logging.getLogger(__name__)


class CloudSync:
    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        table: str = "meal_history",
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._table = table
        self._http: httpx.Client | None = None
        if base_url and api_key:
            self._http = httpx.Client(
                base_url=base_url.rstrip("/") + "/rest/v1",
                headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
                timeout=timeout,
                transport=transport,
            )

    @property
    def configured(self) -> bool:
        return self._http is not None

    def test_connection(self) -> bool:
        if self._http is None:
            return False
        try:
            r = self._http.get(f"/{self._table}", params={"select": "timestamp", "limit": 1})
            r.raise_for_status()
        except httpx.HTTPError as e:
            _LOG.warning("Cloud sync unreachable: %s", e)
            return False
        return True

    def fetch_cloud_history(self) -> list[MealAnalysisResult]:
        if self._http is None:
            return []
        try:
            r = self._http.get(
                f"/{self._table}",
                params={"select": "payload", "order": "created_at.desc"},
            )
            r.raise_for_status()
            rows = r.json()
        except (httpx.HTTPError, ValueError) as e:
            _LOG.warning("Cloud history fetch failed: %s", e)
            return []

        out: list[MealAnalysisResult] = []
        for row in rows if isinstance(rows, list) else []:
            try:
                out.append(MealAnalysisResult.model_validate(row["payload"]))
            except (KeyError, TypeError, ValidationError):
                _LOG.warning("Skipping unreadable cloud history row")
        return out

    def sync_meal_to_cloud(self, result: MealAnalysisResult) -> bool:
        if self._http is None:
            return False
        try:
            r = self._http.post(
                f"/{self._table}",
                json={"payload": result.to_wire(), "timestamp": result.timestamp},
                headers={"Prefer": "return=minimal"},
            )
            r.raise_for_status()
        except httpx.HTTPError as e:
            _LOG.warning("Cloud sync push failed: %s", e)
            return False
        return True

    def close(self) -> None:
        if self._http is not None:
            self._http.close()

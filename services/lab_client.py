"""
services/lab_client.py
────────────────────────────────────────────────────────────────────────
Client for the lab's own endpoints, used by the UI layer.

Failures are folded into three exceptions the session can turn into UI
states: LabConnectionError (scan), KeyAuthFailed and SynthesisFailed (plan).
"""
from __future__ import annotations

from datetime import datetime
from typing import Sequence

import httpx

from core.models.meal import DayPlan, MealAnalysisResult, MealPlanRequest
from core.models.user import BioPersona, FeedbackEntry


AUTH_ERRORS = {"KEY_AUTH_FAILED", "MISSING_KEY"}


class LabClientError(RuntimeError):
    pass


class LabConnectionError(LabClientError):
    pass


class KeyAuthFailed(LabClientError):
    pass


class SynthesisFailed(LabClientError):
    pass


def _error_code(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return f"HTTP_{r.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP_{r.status_code}"


def _now_stamp() -> str:
    return datetime.now().isoformat(sep=" ", timespec="seconds")


class LabClient:
    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        # timeout=None leaves calls unbounded
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    # ───────────────────────── scan ──────────────────────────
    def analyze_meal(
        self,
        data_uri: str,
        persona: BioPersona = BioPersona.general,
        lang: str = "en",
    ) -> MealAnalysisResult:
        try:
            r = self._http.post(
                "/analyze-meal",
                json={"base64Image": data_uri, "profile": {"persona": persona.value}, "lang": lang},
            )
        except httpx.HTTPError as e:
            raise LabConnectionError(str(e)) from e
        if r.status_code != 200:
            raise LabConnectionError(_error_code(r))
        try:
            result = MealAnalysisResult.model_validate(r.json())
        except ValueError as e:
            raise LabConnectionError("malformed analysis response") from e
        return result.model_copy(update={"timestamp": _now_stamp(), "image_url": data_uri})

    # ───────────────────────── synthesis ─────────────────────
    def generate_plan(
        self,
        request: MealPlanRequest,
        lang: str = "en",
        feedback: Sequence[FeedbackEntry] = (),
    ) -> DayPlan:
        try:
            r = self._http.post(
                "/generate-plan",
                json={
                    "request": request.to_wire(),
                    "feedback": [f.to_wire() for f in feedback],
                    "lang": lang,
                },
            )
        except httpx.HTTPError as e:
            raise SynthesisFailed(str(e)) from e
        if r.status_code != 200:
            code = _error_code(r)
            if code in AUTH_ERRORS:
                raise KeyAuthFailed(code)
            raise SynthesisFailed(code)
        try:
            return DayPlan.model_validate(r.json())
        except ValueError as e:
            raise SynthesisFailed("malformed plan response") from e

    # ───────────────────────── mascot ────────────────────────
    def generate_mascot(self, prompt: str) -> str | None:
        try:
            r = self._http.post("/generate-mascot", json={"prompt": prompt})
        except httpx.HTTPError as e:
            raise LabConnectionError(str(e)) from e
        if r.status_code != 200:
            raise LabConnectionError(_error_code(r))
        try:
            body = r.json()
        except ValueError as e:
            raise LabConnectionError("malformed mascot response") from e
        if not isinstance(body, dict):
            raise LabConnectionError("malformed mascot response")
        return body.get("imageUrl")

    def close(self) -> None:
        self._http.close()

"""
core/session.py
────────────────────────────────────────────────────────────────────────
UI-facing controller: turns user actions into client calls and keeps the
per-action request state in step with the app state.

    start()            one cloud handshake, merge remote history
    analyze(photo)     compress → scan → record           (scan tracker)
    synthesize(goal)   plan for goal + persona + feedback (plan tracker)
"""
from __future__ import annotations

import logging

from core.imaging import compress_for_upload, to_data_uri
from core.models.meal import DayPlan, MealAnalysisResult, MealPlanRequest
from core.models.user import FeedbackEntry, FeedbackSignal
from core.requests import ErrorKind, RequestTracker
from core.state import AppState
from services.cloud import CloudSync
from services.lab_client import (
    KeyAuthFailed,
    LabClient,
    LabConnectionError,
    SynthesisFailed,
)

_LOG = logging.getLogger(__name__)


class LabSession:
    def __init__(
        self,
        state: AppState,
        client: LabClient,
        cloud: CloudSync | None = None,
    ) -> None:
        self.state = state
        self._client = client
        self._cloud = cloud
        self.scan = RequestTracker("scan")
        self.plan = RequestTracker("synthesis")
        self.mascot = RequestTracker("mascot")

    # ── startup ────────────────────────────────────────────────────
    def start(self) -> bool:
        if self._cloud is None:
            return False
        connected = self._cloud.test_connection()
        self.state.set_cloud_connected(connected)
        if connected:
            remote = self._cloud.fetch_cloud_history()
            if remote:
                self.state.history.merge(remote)
                _LOG.info("Merged %d cloud entries into history", len(remote))
        return connected

    # ── phase 01: scan ─────────────────────────────────────────────
    def analyze(self, photo: bytes) -> MealAnalysisResult | None:
        # unreadable photos raise ValueError before any state changes
        payload = to_data_uri(compress_for_upload(photo))
        if not self.scan.begin():
            return None
        try:
            result = self._client.analyze_meal(payload, self.state.persona, self.state.language)
            self.state.set_last_analysis(result)
            self.state.record_analysis(result, self._cloud)
        except LabConnectionError as e:
            _LOG.warning("Meal analysis failed: %s", e)
            self.scan.fail(ErrorKind.connection, str(e))
            return None
        except Exception as e:
            self.scan.fail(ErrorKind.generic, str(e))
            raise
        self.scan.succeed(result)
        return result

    def reset_scan(self) -> None:
        self.scan.reset()
        self.state.set_last_analysis(None)

    # ── phase 03: synthesis ────────────────────────────────────────
    def synthesize(self, goal: str, diet: str = "balanced") -> DayPlan | None:
        if not self.plan.begin():
            return None
        self.state.select_goal(goal)
        try:
            request = MealPlanRequest(goal=goal, diet=diet, persona=self.state.persona)
            plan = self._client.generate_plan(
                request, self.state.language, self.state.feedback.entries
            )
        except KeyAuthFailed as e:
            self.plan.fail(ErrorKind.auth, str(e))
            return None
        except SynthesisFailed as e:
            self.plan.fail(ErrorKind.generic, str(e))
            return None
        except Exception as e:
            self.plan.fail(ErrorKind.generic, str(e))
            raise
        self.plan.succeed(plan)
        return plan

    def submit_feedback(self, signal: FeedbackSignal | str) -> FeedbackEntry | None:
        return self.state.submit_feedback(signal)

    # ── mascot ─────────────────────────────────────────────────────
    def generate_mascot(self, prompt: str) -> str | None:
        if not self.mascot.begin():
            return None
        try:
            image_url = self._client.generate_mascot(prompt)
        except LabConnectionError as e:
            self.mascot.fail(ErrorKind.generic, str(e))
            return None
        except Exception as e:
            self.mascot.fail(ErrorKind.generic, str(e))
            raise
        self.mascot.succeed(image_url)
        return image_url

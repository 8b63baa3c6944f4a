"""
Session flows end-to-end against a mocked lab API: scan, synthesis error
classes, duplicate suppression, cloud startup merge.
"""
import json

import httpx
import pytest

from core.requests import ErrorKind, Phase
from core.session import LabSession
from core.state import AppState
from services.cloud import CloudSync
from services.lab_client import LabClient

from conftest import make_photo, make_result
from test_lab_client import PLAN


class _Api:
    """Mock lab API; `routes` maps endpoint name → (status, json body)."""

    def __init__(self, **routes):
        self.routes = routes
        self.calls = []

    def __call__(self, req: httpx.Request) -> httpx.Response:
        name = req.url.path.rsplit("/", 1)[-1]
        self.calls.append((name, json.loads(req.content)))
        status, body = self.routes[name.replace("-", "_")]
        return httpx.Response(status, json=body)


def _session(store, api, cloud=None) -> LabSession:
    client = LabClient("http://lab.test/api/v1", transport=httpx.MockTransport(api))
    return LabSession(AppState(store), client, cloud)


# ── scan ─────────────────────────────────────────────────────────────
def test_analyze_success_records_history(store):
    api = _Api(analyze_meal=(200, make_result().to_wire()))
    s = _session(store, api)

    result = s.analyze(make_photo((1600, 1200)))
    assert s.scan.phase is Phase.done
    assert s.state.last_analysis == result
    assert s.state.scans_count == 1
    sent_uri = api.calls[0][1]["base64Image"]
    assert sent_uri.startswith("data:image/jpeg;base64,")
    assert result.image_url == sent_uri


def test_missing_key_maps_to_connection_error(store):
    api = _Api(analyze_meal=(500, {"error": "MISSING_KEY"}))
    s = _session(store, api)

    assert s.analyze(make_photo((64, 64))) is None
    assert s.scan.phase is Phase.error
    assert s.scan.error_kind is ErrorKind.connection
    assert s.state.scans_count == 0


def test_unreadable_photo_never_reaches_api(store):
    api = _Api()
    s = _session(store, api)
    with pytest.raises(ValueError):
        s.analyze(b"not a photo")
    assert api.calls == []
    assert s.scan.phase is Phase.idle


# ── synthesis ────────────────────────────────────────────────────────
def test_synthesize_success_selects_goal(store):
    api = _Api(generate_plan=(200, PLAN))
    s = _session(store, api)
    s.state.set_persona("ATHLETE")

    plan = s.synthesize("Bio-Recovery")
    assert plan.lunch.name == "Lentil bowl"
    assert s.plan.phase is Phase.done
    assert s.state.selected_goal == "Bio-Recovery"
    assert api.calls[0][1]["request"]["persona"] == "ATHLETE"


def test_key_auth_failed_is_auth_state(store):
    api = _Api(generate_plan=(500, {"error": "KEY_AUTH_FAILED"}))
    s = _session(store, api)
    assert s.synthesize("Neural Focus") is None
    assert (s.plan.phase, s.plan.error_kind) == (Phase.error, ErrorKind.auth)


def test_other_failure_is_generic_state(store):
    api = _Api(generate_plan=(500, {"error": "FAILED"}))
    s = _session(store, api)
    assert s.synthesize("Neural Focus") is None
    assert (s.plan.phase, s.plan.error_kind) == (Phase.error, ErrorKind.generic)


def test_duplicate_synthesis_suppressed(store):
    api = _Api(generate_plan=(200, PLAN))
    s = _session(store, api)
    s.plan.begin()  # a call is already in flight
    assert s.synthesize("Immunity Boost") is None
    assert api.calls == []


def test_feedback_flows_into_next_plan(store):
    api = _Api(generate_plan=(200, PLAN))
    s = _session(store, api)

    assert s.submit_feedback("better") is None  # no goal yet
    s.synthesize("Immunity Boost")
    s.submit_feedback("much_better")
    s.synthesize("Immunity Boost")

    feedback_sent = api.calls[1][1]["feedback"]
    assert [f["signal"] for f in feedback_sent] == ["much_better"]


# ── startup ──────────────────────────────────────────────────────────
def test_start_merges_cloud_history(store):
    remote = [make_result("2026-10-02 09:00:00"), make_result("2026-10-01 08:00:00")]

    def cloud_handler(req):
        if req.url.params.get("limit") == "1":
            return httpx.Response(200, json=[])
        return httpx.Response(200, json=[{"payload": r.to_wire()} for r in remote])

    cloud = CloudSync("https://cloud.example", "k", transport=httpx.MockTransport(cloud_handler))
    s = _session(store, _Api(), cloud)
    s.state.history.append(make_result("2026-10-01 08:00:00", summary="local"))

    assert s.start() is True
    assert s.state.cloud_connected
    assert [r.timestamp for r in s.state.history.items] == [
        "2026-10-02 09:00:00",
        "2026-10-01 08:00:00",
    ]


def test_start_offline_keeps_local(store):
    cloud = CloudSync("https://cloud.example", "k", transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    s = _session(store, _Api(), cloud)
    s.state.history.append(make_result("1"))
    assert s.start() is False
    assert not s.state.cloud_connected
    assert s.state.scans_count == 1


# ── unexpected failures release the tracker ──────────────────────────
def _raw_session(store, handler) -> LabSession:
    client = LabClient("http://lab.test/api/v1", transport=httpx.MockTransport(handler))
    return LabSession(AppState(store), client)


def test_non_json_mascot_reply_is_generic_error_and_retryable(store):
    replies = [
        httpx.Response(200, text="<html>gateway</html>"),
        httpx.Response(200, json={"imageUrl": "data:image/png;base64,AA"}),
    ]
    s = _raw_session(store, lambda req: replies.pop(0))

    assert s.generate_mascot("owl") is None
    assert (s.mascot.phase, s.mascot.error_kind) == (Phase.error, ErrorKind.generic)

    assert s.generate_mascot("owl") == "data:image/png;base64,AA"
    assert s.mascot.phase is Phase.done


def test_unexpected_plan_error_fails_tracker_then_propagates(store):
    def handler(req):
        raise RuntimeError("handler blew up")

    s = _raw_session(store, handler)
    with pytest.raises(RuntimeError):
        s.synthesize("Neural Focus")
    assert (s.plan.phase, s.plan.error_kind) == (Phase.error, ErrorKind.generic)
    assert s.plan.begin() is True


def test_store_failure_during_scan_fails_tracker(store, monkeypatch):
    api = _Api(analyze_meal=(200, make_result().to_wire()))
    s = _session(store, api)

    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(s.state, "record_analysis", broken)
    with pytest.raises(OSError):
        s.analyze(make_photo((64, 64)))
    assert (s.scan.phase, s.scan.error_kind) == (Phase.error, ErrorKind.generic)
    assert not s.scan.loading

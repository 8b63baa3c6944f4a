from core.models.user import BioPersona
from core.state import AppState
from services.db import HISTORY_KEY, LANG_KEY, PERSONA_KEY, THEME_KEY

from conftest import make_result


class _CloudSpy:
    def __init__(self):
        self.pushed = []

    def sync_meal_to_cloud(self, result):
        self.pushed.append(result)
        return True


def test_defaults(store):
    s = AppState(store)
    assert s.language == "en"
    assert s.theme == "dark"
    assert s.persona is BioPersona.general
    assert s.selected_goal is None
    assert s.scans_count == 0


def test_setters_persist(store):
    s = AppState(store)
    s.set_language("ar")
    assert s.toggle_theme() == "light"
    s.set_persona("DIABETIC")

    assert store.get(LANG_KEY) == "ar"
    assert store.get(THEME_KEY) == "light"
    assert store.get(PERSONA_KEY) == "DIABETIC"

    again = AppState(store)
    assert (again.language, again.theme, again.persona) == ("ar", "light", BioPersona.diabetic)


def test_unknown_persona_blob_falls_back(store):
    store.set(PERSONA_KEY, "ASTRONAUT")
    assert AppState(store).persona is BioPersona.general


def test_record_analysis_pushes_only_when_connected(store):
    s = AppState(store)
    cloud = _CloudSpy()
    s.record_analysis(make_result("1"), cloud)
    assert cloud.pushed == []

    s.set_cloud_connected(True)
    s.record_analysis(make_result("2"), cloud)
    assert [r.timestamp for r in cloud.pushed] == ["2"]
    assert s.scans_count == 2


def test_clear_history_prompt_is_localized(store):
    s = AppState(store)
    s.record_analysis(make_result("1"))
    s.set_language("ar")
    prompts = []
    assert s.clear_history(lambda m: prompts.append(m) or True)
    assert prompts[0] != "Purge history?"
    assert store.get(HISTORY_KEY) is None


def test_feedback_uses_selected_goal(store):
    s = AppState(store)
    assert s.submit_feedback("better") is None
    assert len(s.feedback) == 0

    s.select_goal("Neural Focus")
    entry = s.submit_feedback("better")
    assert entry.goal == "Neural Focus"
    assert len(s.feedback) == 1

"""
core/state.py
────────────────────────────────────────────────────────────────────────
The application state tree, passed explicitly to whatever renders it.

Attributes are read through properties; the setter methods below are the
only mutation path. Language, theme and persona are written to the blob
store on every change, history and feedback persist through their stores.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Literal

from core.feedback import FeedbackLedger
from core.history import HistoryStore
from core.models.meal import MealAnalysisResult
from core.models.user import BioPersona, FeedbackEntry, FeedbackSignal
from services.db import LANG_KEY, PERSONA_KEY, THEME_KEY, BlobStore

if TYPE_CHECKING:
    from services.cloud import CloudSync


Theme = Literal["light", "dark"]

CLEAR_PROMPTS = {
    "en": "Purge history?",
    "ar": "هل أنت متأكد من مسح الأرشيف؟",
}


class AppState:
    def __init__(self, store: BlobStore) -> None:
        self._store = store
        self._language: str = store.get(LANG_KEY) or "en"
        self._theme: Theme = "light" if store.get(THEME_KEY) == "light" else "dark"
        self._persona = self._load_persona()
        self._selected_goal: str | None = None
        self._last_analysis: MealAnalysisResult | None = None
        self._cloud_connected = False
        self.history = HistoryStore(store)
        self.feedback = FeedbackLedger(store)

    def _load_persona(self) -> BioPersona:
        try:
            return BioPersona(self._store.get(PERSONA_KEY) or BioPersona.general)
        except ValueError:
            return BioPersona.general

    # ── read side ──────────────────────────────────────────────────
    @property
    def language(self) -> str:
        return self._language

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def persona(self) -> BioPersona:
        return self._persona

    @property
    def selected_goal(self) -> str | None:
        return self._selected_goal

    @property
    def last_analysis(self) -> MealAnalysisResult | None:
        return self._last_analysis

    @property
    def cloud_connected(self) -> bool:
        return self._cloud_connected

    @property
    def scans_count(self) -> int:
        return len(self.history)

    # ── setters ────────────────────────────────────────────────────
    def set_language(self, lang: str) -> None:
        self._language = lang
        self._store.set(LANG_KEY, lang)

    def toggle_theme(self) -> Theme:
        self._theme = "light" if self._theme == "dark" else "dark"
        self._store.set(THEME_KEY, self._theme)
        return self._theme

    def set_persona(self, persona: BioPersona | str) -> None:
        self._persona = BioPersona(persona)
        self._store.set(PERSONA_KEY, self._persona.value)

    def select_goal(self, goal: str | None) -> None:
        self._selected_goal = goal

    def set_last_analysis(self, result: MealAnalysisResult | None) -> None:
        self._last_analysis = result

    def set_cloud_connected(self, connected: bool) -> None:
        self._cloud_connected = connected

    # ── compound actions ───────────────────────────────────────────
    def record_analysis(self, result: MealAnalysisResult, cloud: "CloudSync | None" = None) -> None:
        self.history.append(result)
        if self._cloud_connected and cloud is not None:
            cloud.sync_meal_to_cloud(result)

    def clear_history(self, confirm: Callable[[str], bool]) -> bool:
        message = CLEAR_PROMPTS.get(self._language, CLEAR_PROMPTS["en"])
        return self.history.clear(confirm, message)

    def submit_feedback(self, signal: FeedbackSignal | str) -> FeedbackEntry | None:
        return self.feedback.submit(signal, self._selected_goal)

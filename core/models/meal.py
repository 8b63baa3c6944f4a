from __future__ import annotations
from typing import Literal

from pydantic import ConfigDict, Field, model_validator

from .base import CamelModel
from .user import BioPersona


# ── meal photo analysis ──────────────────────────────────────────────
class Ingredient(CamelModel):
    name: str
    calories: float


class Macros(CamelModel):
    protein: float
    carbs: float
    fat: float


class BioWarning(CamelModel):
    text: str
    risk_level: Literal["low", "medium", "high"]
    type: str


class MealAnalysisResult(CamelModel):
    ingredients: list[Ingredient]
    total_calories: float
    health_score: float = Field(..., ge=0, le=100)
    macros: Macros
    summary: str
    personalized_advice: str
    timestamp: str | None = None       # dedup key in the history archive
    image_url: str | None = None
    warnings: list[str | BioWarning] | None = None

    model_config = ConfigDict(frozen=True)


# ── plan synthesis ───────────────────────────────────────────────────
class Meal(CamelModel):
    name: str
    calories: float | str
    protein: float | str | None = None
    description: str | None = None


class DayPlan(CamelModel):
    breakfast: Meal | None = None
    lunch: Meal | None = None
    dinner: Meal | None = None
    snack: Meal | None = None
    total_calories: float | str = ""
    advice: str = ""

    @model_validator(mode="after")
    def _has_main_meals(self) -> "DayPlan":
        if self.breakfast is None and self.lunch is None and self.dinner is None:
            raise ValueError("plan has none of breakfast, lunch or dinner")
        return self


class MealPlanRequest(CamelModel):
    goal: str
    diet: str = "balanced"
    persona: BioPersona | None = None

from __future__ import annotations

from core.models.base import CamelModel
from core.models.meal import MealPlanRequest
from core.models.user import FeedbackEntry


class GeneratePlanIn(CamelModel):
    request: MealPlanRequest
    feedback: list[FeedbackEntry] = []
    lang: str = "en"

from __future__ import annotations
from enum import Enum
from typing import Literal

from pydantic import Field

from .base import CamelModel


class BioPersona(str, Enum):
    general = "GENERAL"
    athlete = "ATHLETE"
    pregnancy = "PREGNANCY"
    diabetic = "DIABETIC"


class FeedbackSignal(str, Enum):
    no_difference = "no_difference"
    better = "better"
    much_better = "much_better"


class UserHealthProfile(CamelModel):
    chronic_diseases: str | None = None
    diet_program: str | None = None
    activity_level: Literal["low", "moderate", "high"] | None = None
    persona: BioPersona = BioPersona.general


class FeedbackEntry(CamelModel):
    goal: str
    signal: FeedbackSignal
    timestamp: int = Field(..., description="epoch milliseconds")

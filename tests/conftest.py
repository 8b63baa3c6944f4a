from __future__ import annotations

import io

import pytest
from PIL import Image

from core.models.meal import MealAnalysisResult
from services.db import BlobStore


def make_result(timestamp: str | None = None, **overrides) -> MealAnalysisResult:
    data = dict(
        ingredients=[{"name": "Grilled chicken", "calories": 320}, {"name": "Rice", "calories": 210}],
        totalCalories=530,
        healthScore=78,
        macros={"protein": 42, "carbs": 55, "fat": 12},
        summary="Lean protein with a moderate carb base.",
        personalizedAdvice="Add leafy greens for fibre.",
        timestamp=timestamp,
    )
    data.update(overrides)
    return MealAnalysisResult.model_validate(data)


def make_photo(size: tuple[int, int], fmt: str = "PNG", mode: str = "RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color=(200, 120, 40, 255)[: len(mode)]).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def store() -> BlobStore:
    return BlobStore.from_url("sqlite://")

# api/v1/analyze.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.errors import ApiError
from api.v1.schemas import AnalyzeMealIn
from config import Settings, get_settings
from core.imaging import decode_data_uri
from core.models.meal import MealAnalysisResult
from core.models.user import BioPersona
from services import gemini

router = APIRouter()
_LOG = logging.getLogger(__name__)


@router.post(
    "/analyze-meal",
    response_model=MealAnalysisResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Estimate ingredients, calories and macros for a meal photo",
)
async def analyze_meal(
    body: AnalyzeMealIn,
    cfg: Settings = Depends(get_settings),
) -> MealAnalysisResult:
    try:
        gemini.ensure_key(cfg)
    except gemini.MissingKeyError:
        raise ApiError(500, "MISSING_KEY", "API key is not configured on the server.")

    if not body.base64_image:
        raise ApiError(400, "NO_IMAGE", "Please provide a valid image.")
    try:
        image, mime = decode_data_uri(body.base64_image)
    except ValueError:
        raise ApiError(400, "NO_IMAGE", "Please provide a valid image.")

    persona = body.profile.persona if body.profile else BioPersona.general
    try:
        return await gemini.analyze_meal_image(
            image, mime, cfg, persona=persona, lang=body.lang, profile=body.profile
        )
    except gemini.QuotaExceededError:
        raise ApiError(
            429,
            "QUOTA_EXCEEDED",
            "The lab is at full capacity. Please try again in a few minutes.",
        )
    except gemini.KeyAuthError as e:
        raise ApiError(500, "KEY_AUTH_FAILED", str(e))
    except Exception as e:
        _LOG.exception("Meal analysis failed")
        raise ApiError(500, "ANALYSIS_FAILED", str(e))

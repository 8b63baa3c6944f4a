# api/v1/plans.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.errors import ApiError
from api.v1.schemas import GeneratePlanIn
from config import Settings, get_settings
from core.models.meal import DayPlan
from services import gemini

router = APIRouter()
_LOG = logging.getLogger(__name__)


@router.post(
    "/generate-plan",
    response_model=DayPlan,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Synthesize a one-day plan for a goal",
)
async def generate_plan(
    body: GeneratePlanIn,
    cfg: Settings = Depends(get_settings),
) -> DayPlan:
    """
    Credential problems come back as KEY_AUTH_FAILED so the UI can offer
    to link a key; every other failure, malformed output included, is FAILED.
    """
    try:
        return await gemini.generate_meal_plan(
            body.request, cfg, lang=body.lang, feedback=body.feedback
        )
    except (gemini.MissingKeyError, gemini.KeyAuthError) as e:
        raise ApiError(500, "KEY_AUTH_FAILED", str(e))
    except Exception:
        _LOG.exception("Plan synthesis failed for goal %r", body.request.goal)
        raise ApiError(500, "FAILED")

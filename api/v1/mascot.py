# api/v1/mascot.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.errors import ApiError
from api.v1.schemas import MascotIn, MascotOut
from config import Settings, get_settings
from services import gemini

router = APIRouter()
_LOG = logging.getLogger(__name__)


@router.post(
    "/generate-mascot",
    response_model=MascotOut,
    status_code=status.HTTP_200_OK,
)
async def generate_mascot(
    body: MascotIn,
    cfg: Settings = Depends(get_settings),
) -> MascotOut:
    try:
        image_url = await gemini.generate_mascot(body.prompt, cfg)
    except gemini.MissingKeyError:
        raise ApiError(500, "MISSING_KEY")
    except Exception:
        _LOG.exception("Mascot generation failed")
        raise ApiError(500, "Failed to generate mascot")
    return MascotOut(image_url=image_url)

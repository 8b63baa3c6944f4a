from __future__ import annotations

from pydantic import Field

from core.models.base import CamelModel


class MascotIn(CamelModel):
    prompt: str = Field(..., min_length=1)


class MascotOut(CamelModel):
    image_url: str | None = None

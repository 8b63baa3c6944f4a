from __future__ import annotations

from pydantic import AliasChoices, Field

from core.models.base import CamelModel
from core.models.user import UserHealthProfile


class AnalyzeMealIn(CamelModel):
    # data: URI or bare base64; the older clients post it as `image`
    base64_image: str | None = Field(
        None, validation_alias=AliasChoices("base64Image", "image", "base64_image")
    )
    profile: UserHealthProfile | None = None
    lang: str = "en"

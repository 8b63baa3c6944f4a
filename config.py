"""
Centralised settings loader.

Every key can come from the environment or a local `.env` file.
`settings` is the process-wide singleton; FastAPI routes receive it via
`get_settings()` so tests can override it.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime ────────────────────────────────────────────────────
    env_name: str = "local"
    log_level: str = "INFO"

    # ─── Gemini ─────────────────────────────────────────────────────
    gemini_api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY", "gemini_api_key"),
    )
    vision_model: str = "gemini-3-flash-preview"
    plan_model: str = "gemini-3-pro-preview"
    image_model: str = "gemini-2.5-flash-image"
    plan_thinking_budget: int = 2000
    # seconds; unset means the provider call is unbounded
    ai_timeout_s: float | None = None

    # ─── client side (blob store, lab API, cloud sync) ──────────────
    blob_store_url: str = "sqlite:///metabolic_lab.db"
    lab_api_url: str = "http://127.0.0.1:8000/api/v1"
    lab_timeout_s: float | None = None
    cloud_sync_url: str | None = None
    cloud_sync_key: str | None = None
    cloud_sync_table: str = "meal_history"
    cloud_sync_timeout_s: float | None = None

    # allow other teammates' env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


def get_settings() -> _Settings:
    return _cached()


Settings = _Settings

settings: Settings = _cached()

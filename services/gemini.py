# services/gemini.py
import base64
import functools
import json
import logging
from typing import Sequence

from google import genai
from google.genai import types, errors as gerrors

from config import Settings
from core.models.meal import DayPlan, MealAnalysisResult, MealPlanRequest
from core.models.user import BioPersona, FeedbackEntry, UserHealthProfile
from scripts.helpers import extract_clean_json

_LOG = logging.getLogger(__name__)

LANGUAGE_NAMES = {"en": "English", "ar": "Arabic"}


# ───────────── Errors ─────────────
class ProviderError(RuntimeError):
    """Anything that kept the provider from producing a usable answer."""


class MissingKeyError(ProviderError):
    pass


class KeyAuthError(ProviderError):
    pass


class QuotaExceededError(ProviderError):
    pass


class EmptyResponseError(ProviderError):
    pass


class MalformedResponseError(ProviderError):
    pass


def _classify(exc: gerrors.APIError) -> ProviderError:
    message = (exc.message or str(exc)).lower()
    if (
        exc.code == 429
        or exc.status == "RESOURCE_EXHAUSTED"
        or "quota" in message
        or "limit" in message
    ):
        return QuotaExceededError(exc.message or "quota exceeded")
    if exc.code in (401, 403, 404) or "api key" in message:
        return KeyAuthError(exc.message or "credentials rejected")
    return ProviderError(exc.message or str(exc))


# ───────────── Client ─────────────
def ensure_key(cfg: Settings) -> str:
    if not cfg.gemini_api_key:
        raise MissingKeyError("MISSING_KEY")
    return cfg.gemini_api_key


@functools.lru_cache(maxsize=8)
def _cached_client(api_key: str, timeout_s: float | None) -> genai.Client:
    http_options = (
        types.HttpOptions(timeout=int(timeout_s * 1000)) if timeout_s else None
    )
    return genai.Client(api_key=api_key, http_options=http_options)


def _client(cfg: Settings) -> genai.Client:
    return _cached_client(ensure_key(cfg), cfg.ai_timeout_s)


async def _generate(cfg: Settings, **kwargs) -> types.GenerateContentResponse:
    try:
        return await _client(cfg).aio.models.generate_content(**kwargs)
    except gerrors.APIError as e:
        _LOG.warning("Gemini call to %s failed: %s %s", kwargs.get("model"), e.code, e.status)
        raise _classify(e) from e


def _language(lang: str | None) -> str:
    return LANGUAGE_NAMES.get(lang or "en", "English")


# ───────────── Schemas ─────────────
_NUM = types.Schema(type=types.Type.NUMBER)
_STR = types.Schema(type=types.Type.STRING)

MEAL_ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "ingredients": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={"name": _STR, "calories": _NUM},
                required=["name", "calories"],
            ),
        ),
        "totalCalories": _NUM,
        "healthScore": _NUM,
        "macros": types.Schema(
            type=types.Type.OBJECT,
            properties={"protein": _NUM, "carbs": _NUM, "fat": _NUM},
            required=["protein", "carbs", "fat"],
        ),
        "summary": _STR,
        "personalizedAdvice": _STR,
    },
    required=[
        "ingredients", "totalCalories", "healthScore",
        "macros", "summary", "personalizedAdvice",
    ],
)

_MEAL = types.Schema(
    type=types.Type.OBJECT,
    properties={"name": _STR, "calories": _STR, "protein": _STR, "description": _STR},
    required=["name", "calories"],
)

DAY_PLAN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "breakfast": _MEAL,
        "lunch": _MEAL,
        "dinner": _MEAL,
        "snack": _MEAL,
        "totalCalories": _STR,
        "advice": _STR,
    },
    required=["breakfast", "lunch", "dinner", "snack", "totalCalories", "advice"],
)


# ───────────── Prompts ─────────────
def analysis_prompt(persona: BioPersona, lang: str | None, profile: UserHealthProfile | None = None) -> str:
    if lang == "ar":
        prompt = (
            f"حلل هذه الوجبة بدقة لمستخدم بروتوكول {persona.value}. "
            "ركز على السعرات والماكروز. الرد JSON فقط."
        )
    else:
        prompt = (
            f"Analyze this meal for a {persona.value} profile. "
            "Focus on precise calories and macros. Return JSON only."
        )
    if profile and profile.chronic_diseases and profile.chronic_diseases.lower() != "none":
        prompt += f" Known conditions: {profile.chronic_diseases}."
    if profile and profile.diet_program:
        prompt += f" Diet program: {profile.diet_program}."
    return prompt


def plan_prompt(request: MealPlanRequest, lang: str | None, feedback: Sequence[FeedbackEntry]) -> str:
    persona = (request.persona or BioPersona.general).value
    history = json.dumps([f.model_dump(mode="json") for f in feedback[:3]])
    return (
        f"Synthesize a 1-day {persona} plan for goal: {request.goal} "
        f"({request.diet} diet) in {_language(lang)}. "
        f"Recent feedback on earlier plans: {history}. "
        "Return JSON with breakfast, lunch, dinner, snack, totalCalories and advice."
    )


# ───────────── Endpoints ─────────────
async def analyze_meal_image(
    image: bytes,
    mime_type: str,
    cfg: Settings,
    persona: BioPersona = BioPersona.general,
    lang: str | None = "en",
    profile: UserHealthProfile | None = None,
) -> MealAnalysisResult:
    """Estimate ingredients, calories and macros for a meal photo."""
    resp = await _generate(
        cfg,
        model=cfg.vision_model,
        contents=[
            types.Part.from_bytes(data=image, mime_type=mime_type),
            analysis_prompt(persona, lang, profile),
        ],
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=MEAL_ANALYSIS_SCHEMA,
            temperature=0.1,
        ),
    )
    if not resp.text:
        raise EmptyResponseError("EMPTY_AI_RESPONSE")
    try:
        return MealAnalysisResult.model_validate(extract_clean_json(resp.text))
    except ValueError as e:
        raise MalformedResponseError(str(e)) from e


async def generate_meal_plan(
    request: MealPlanRequest,
    cfg: Settings,
    lang: str | None = "en",
    feedback: Sequence[FeedbackEntry] = (),
) -> DayPlan:
    """One day of breakfast/lunch/dinner/snack for the requested goal."""
    resp = await _generate(
        cfg,
        model=cfg.plan_model,
        contents=plan_prompt(request, lang, feedback),
        config=types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=DAY_PLAN_SCHEMA,
            thinking_config=types.ThinkingConfig(thinking_budget=cfg.plan_thinking_budget),
        ),
    )
    if not resp.text:
        raise EmptyResponseError("EMPTY_AI_RESPONSE")
    try:
        return DayPlan.model_validate(extract_clean_json(resp.text))
    except ValueError as e:
        raise MalformedResponseError(str(e)) from e


async def generate_mascot(prompt: str, cfg: Settings) -> str | None:
    """Return the first generated image as a data URI, or None."""
    resp = await _generate(
        cfg,
        model=cfg.image_model,
        contents=(
            f"High-quality, professional, minimalist mascot icon for: {prompt}. "
            "Vector style, sharp edges, isolated on a clean white background."
        ),
        config=types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio="1:1"),
        ),
    )
    if not resp.candidates or resp.candidates[0].content is None:
        return None
    for part in resp.candidates[0].content.parts or []:
        if part.inline_data and part.inline_data.data:
            data = base64.b64encode(part.inline_data.data).decode("ascii")
            return f"data:{part.inline_data.mime_type};base64,{data}"
    return None

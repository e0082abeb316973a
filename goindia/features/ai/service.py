"""
AI task orchestration.

Builds the prompt for each task, calls the gateway, and turns the payload
into typed results. Metered tasks check the gate first and record one use
only after the call and parsing succeed.
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from goindia.core.config import settings
from goindia.core.errors import AIUpstreamError, QuotaExceededError, ValidationError
from goindia.features.ai import prompts
from goindia.features.ai.extraction import parse_json_payload
from goindia.features.ai.gateway import AIGateway
from goindia.features.food.scoring import score_nutrition
from goindia.features.usage.gate import FeatureGate
from goindia.models.fare import FareEstimate
from goindia.models.food import FoodAdvice, FoodScore, NutritionEstimate
from goindia.models.plan import Feature
from goindia.models.trip import DayPlan, TripRequest

logger = logging.getLogger("goindia")

MAX_QUESTION_CHARS = 2000
MAX_TRANSLATION_CHARS = 5000


class Translation(BaseModel):
    source: str
    target: str
    text: str
    translated: str


def _require_feature(gate: FeatureGate, feature: Feature) -> None:
    if not gate.can_use_feature(feature):
        logger.warning(
            "[ai] quota exhausted",
            extra={"user_id": gate.session.user_id, "feature": feature.value},
        )
        raise QuotaExceededError(feature.value, upgrade_url=settings.UPGRADE_URL)


def _validate(model, data: Any, what: str):
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning(f"[ai] {what} did not match the expected shape: {exc.error_count()} errors")
        raise AIUpstreamError(f"The AI assistant returned an incomplete {what}. Please try again.") from exc


async def ask_assistant(gateway: AIGateway, question: str) -> str:
    if not question or not question.strip():
        raise ValidationError("question is required")
    if len(question) > MAX_QUESTION_CHARS:
        raise ValidationError(f"question must be at most {MAX_QUESTION_CHARS} characters")
    return await gateway.query(prompts.assistant_prompt(question))


def _itinerary_days(data: Any) -> List[Any]:
    # Some models wrap the array: {"itinerary": [...]}
    if isinstance(data, dict):
        for key in ("itinerary", "days", "plan"):
            if isinstance(data.get(key), list):
                return data[key]
        if "day" in data:
            return [data]
    if isinstance(data, list):
        return data
    raise AIUpstreamError("The AI assistant returned an incomplete itinerary. Please try again.")


async def plan_trip(gateway: AIGateway, gate: FeatureGate, request: TripRequest) -> List[DayPlan]:
    _require_feature(gate, Feature.TRIP_PLANNER)

    prompt = prompts.itinerary_prompt(
        destination=request.destination,
        days=request.days,
        companions=request.companions,
        style=request.style,
        budget=request.budget,
        interests=request.interests,
    )
    raw = await gateway.query(prompt)
    days = [_validate(DayPlan, day, "itinerary") for day in _itinerary_days(parse_json_payload(raw))]
    if not days:
        raise AIUpstreamError("The AI assistant returned an empty itinerary. Please try again.")

    itinerary = []
    for day in sorted(days, key=lambda d: d.day):
        activities = [
            activity.model_copy(update={"id": activity.id or f"{day.day}-{index}"})
            for index, activity in enumerate(day.activities)
        ]
        itinerary.append(day.model_copy(update={"activities": activities}))

    gate.increment_feature_usage(Feature.TRIP_PLANNER)
    return itinerary


async def score_food(
    gateway: AIGateway,
    gate: FeatureGate,
    nutrition: Optional[NutritionEstimate] = None,
    image_base64: Optional[str] = None,
) -> FoodScore:
    """Score a dish from nutrition estimates or a photo.

    With a photo, a vision query estimates the nutrition first; the score
    itself is always computed locally.
    """
    if nutrition is None and not image_base64:
        raise ValidationError("Provide nutrition estimates or an image")
    _require_feature(gate, Feature.FOOD_SCANNER)

    if nutrition is None:
        raw = await gateway.query_with_image(prompts.food_photo_prompt(), image_base64)
        nutrition = _validate(NutritionEstimate, parse_json_payload(raw), "nutrition estimate")

    raw = await gateway.query(
        prompts.food_advice_prompt(
            nutrition.dish_label,
            nutrition.calories,
            nutrition.fat_g,
            nutrition.sodium_mg,
            nutrition.sugar_g,
            nutrition.detected_method,
        )
    )
    advice = _validate(FoodAdvice, parse_json_payload(raw), "food analysis")
    overall, breakdown = score_nutrition(nutrition)

    gate.increment_feature_usage(Feature.FOOD_SCANNER)
    return FoodScore(
        dish_label=nutrition.dish_label,
        score=overall,
        breakdown=breakdown,
        explanation=advice.explanation,
        suggestions=advice.suggestions,
    )


async def translate_text(gateway: AIGateway, text: str, source: str, target: str) -> Translation:
    if not text or not text.strip():
        raise ValidationError("text is required")
    if len(text) > MAX_TRANSLATION_CHARS:
        raise ValidationError(f"text must be at most {MAX_TRANSLATION_CHARS} characters")
    translated = await gateway.query(prompts.translation_prompt(text.strip(), source, target))
    return Translation(source=source, target=target, text=text, translated=translated.strip().strip('"“”').strip())


async def estimate_fare(gateway: AIGateway, city: str, origin: str, destination: str) -> FareEstimate:
    for name, value in (("city", city), ("from", origin), ("to", destination)):
        if not value or not value.strip():
            raise ValidationError(f"{name} is required")
    raw = await gateway.query(prompts.fare_prompt(city.strip(), origin.strip(), destination.strip()))
    data = parse_json_payload(raw)
    if isinstance(data, dict):
        # Echo the request when the model omits route fields
        data = {"city": city, "from": origin, "to": destination, **data}
    return _validate(FareEstimate, data, "fare estimate")

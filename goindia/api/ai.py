"""AI task API.

Assistant chat, trip planning, food scoring, translation and fare
estimates. Trip planning and food scoring are metered per plan.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field, field_validator

from goindia.core.auth import get_current_user_id, get_user_session
from goindia.core.errors import TripPersistenceError
from goindia.core.logging import log_event, request_id_for
from goindia.features.ai.gateway import AIGateway
from goindia.features.ai.service import (
    ask_assistant,
    estimate_fare,
    plan_trip,
    score_food,
    translate_text,
)
from goindia.features.profiles.session import UserSession
from goindia.features.trips.service import save_trip
from goindia.features.usage.gate import FeatureGate
from goindia.models.food import NutritionEstimate
from goindia.models.trip import TripRequest

# Every route requires an identity, even when the gateway is overridden
router = APIRouter(prefix="/v1/ai", tags=["ai"], dependencies=[Depends(get_current_user_id)])


def get_gateway(session: UserSession = Depends(get_user_session)) -> AIGateway:
    return AIGateway(session=session)


def get_gate(session: UserSession = Depends(get_user_session)) -> FeatureGate:
    return FeatureGate(session)


class AssistantRequest(BaseModel):
    question: str

    @field_validator("question")
    @classmethod
    def question_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("question is required")
        return value


class TripPlanRequest(TripRequest):
    save: bool = False
    title: str = ""


class FoodScoreRequest(BaseModel):
    nutrition: Optional[NutritionEstimate] = None
    image_base64: Optional[str] = None


class TranslateRequest(BaseModel):
    text: str
    source: str = "en"
    target: str = "hi"


class FareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str
    from_: str = Field(alias="from")
    to: str


def _remaining(gate: FeatureGate, feature: str) -> Optional[int]:
    for usage in gate.usage_summary():
        if usage.feature.value == feature:
            return usage.remaining
    return None


@router.post("/assistant")
async def assistant_endpoint(
    body: AssistantRequest,
    request: Request,
    gateway: AIGateway = Depends(get_gateway),
):
    answer = await ask_assistant(gateway, body.question)
    return {"data": {"answer": answer}, "request_id": request_id_for(request)}


@router.post("/trip-plan")
async def trip_plan_endpoint(
    body: TripPlanRequest,
    request: Request,
    gateway: AIGateway = Depends(get_gateway),
    gate: FeatureGate = Depends(get_gate),
):
    itinerary = await plan_trip(gateway, gate, body)
    data = {
        "itinerary": [day.model_dump() for day in itinerary],
        "remaining": _remaining(gate, "trip_planner"),
        "trip_id": None,
    }
    if body.save:
        # The use is already recorded; a failed save must not lose the itinerary
        try:
            trip = save_trip(gate.session.user_id, body.destination, itinerary, title=body.title)
        except TripPersistenceError as exc:
            log_event(
                "warning",
                "trips.save_failed",
                user_id=gate.session.user_id,
                error_code=exc.code,
            )
            data["save_error"] = exc.message
        else:
            data["trip_id"] = trip.id
    return {"data": data, "request_id": request_id_for(request)}


@router.post("/food-score")
async def food_score_endpoint(
    body: FoodScoreRequest,
    request: Request,
    gateway: AIGateway = Depends(get_gateway),
    gate: FeatureGate = Depends(get_gate),
):
    result = await score_food(gateway, gate, nutrition=body.nutrition, image_base64=body.image_base64)
    data = result.model_dump()
    data["remaining"] = _remaining(gate, "food_scanner")
    return {"data": data, "request_id": request_id_for(request)}


@router.post("/translate")
async def translate_endpoint(
    body: TranslateRequest,
    request: Request,
    gateway: AIGateway = Depends(get_gateway),
):
    result = await translate_text(gateway, body.text, body.source, body.target)
    return {"data": result.model_dump(), "request_id": request_id_for(request)}


@router.post("/fare")
async def fare_endpoint(
    body: FareRequest,
    request: Request,
    gateway: AIGateway = Depends(get_gateway),
):
    result = await estimate_fare(gateway, body.city, body.from_, body.to)
    return {"data": result.model_dump(by_alias=True), "request_id": request_id_for(request)}

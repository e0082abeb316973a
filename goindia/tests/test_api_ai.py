"""HTTP tests for the /v1/ai endpoints."""

import json

import pytest

from goindia.api import ai as ai_api
from goindia.core.errors import TripPersistenceError
from goindia.features.profiles.store import _memory_store
from goindia.models.plan import PlanTier
from goindia.models.profile import UserProfile

HEADERS = {"X-User-Id": "traveller-1"}

ITINERARY = [
    {"day": 1, "title": "Fort Kochi", "activities": [{"time": "Morning", "title": "Chinese fishing nets"}]},
    {"day": 2, "title": "Backwaters", "activities": [{"time": "Afternoon", "title": "Houseboat", "type": "hotel"}]},
]

ADVICE = {"explanation": "Light and fermented.", "suggestions": ["Go easy on the chutney"]}


def _seed(**fields):
    _memory_store.create(UserProfile(id="traveller-1", **fields))


def test_assistant_returns_answer(client, override_gateway):
    sent = override_gateway("Try appam with stew.")

    resp = client.post("/v1/ai/assistant", json={"question": "Breakfast in Kochi?"}, headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["data"] == {"answer": "Try appam with stew."}
    assert resp.json()["request_id"] == resp.headers["x-request-id"]
    assert len(sent) == 1


def test_assistant_requires_identity(client, override_gateway):
    override_gateway("unused")
    resp = client.post("/v1/ai/assistant", json={"question": "Hi"})

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


@pytest.mark.parametrize(
    "path,body",
    [
        ("/v1/ai/translate", {"text": "Where is the station?"}),
        ("/v1/ai/fare", {"city": "Delhi", "from": "Connaught Place", "to": "Red Fort"}),
        ("/v1/ai/food-score", {"nutrition": None}),
    ],
)
def test_ai_routes_require_identity(client, override_gateway, path, body):
    sent = override_gateway("unused")
    resp = client.post(path, json=body)

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"
    assert sent == []


def test_trip_plan_counts_usage_and_saves(client, override_gateway):
    _seed(trip_planner_used=8)
    override_gateway("```json\n" + json.dumps(ITINERARY) + "\n```")

    resp = client.post(
        "/v1/ai/trip-plan",
        json={"destination": "Kochi", "days": 2, "save": True},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [d["day"] for d in data["itinerary"]] == [1, 2]
    assert data["remaining"] == 1
    assert data["trip_id"]
    assert _memory_store.fetch("traveller-1").trip_planner_used == 9

    trips = client.get("/v1/trips", headers=HEADERS).json()["data"]
    assert [t["id"] for t in trips] == [data["trip_id"]]
    assert trips[0]["title"] == "2 days in Kochi"


def test_trip_plan_at_ceiling_is_quota_exceeded(client, override_gateway):
    _seed(trip_planner_used=10)
    sent = override_gateway(json.dumps(ITINERARY))

    resp = client.post("/v1/ai/trip-plan", json={"destination": "Kochi", "days": 2}, headers=HEADERS)

    assert resp.status_code == 403
    error = resp.json()["error"]
    assert error["code"] == "quota_exceeded"
    assert error["details"] == {"feature": "trip_planner", "upgrade_url": "/pricing"}
    assert sent == []


def test_trip_plan_upstream_error_keeps_credit(client, override_gateway):
    _seed(trip_planner_used=2)
    override_gateway(status_code=429, json_body={"error": {"message": "Rate limit exceeded"}})

    resp = client.post("/v1/ai/trip-plan", json={"destination": "Kochi", "days": 2}, headers=HEADERS)

    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "ai_upstream_error"
    assert resp.json()["error"]["message"] == "Rate limit exceeded"
    assert _memory_store.fetch("traveller-1").trip_planner_used == 2


def test_trip_plan_rejects_invalid_days(client, override_gateway):
    override_gateway("unused")
    resp = client.post("/v1/ai/trip-plan", json={"destination": "Kochi", "days": 0}, headers=HEADERS)

    assert resp.status_code == 422


def test_paid_user_trip_plan_is_unbounded(client, override_gateway):
    _seed(plan=PlanTier.PAID, trip_planner_used=500)
    override_gateway(json.dumps(ITINERARY))

    resp = client.post("/v1/ai/trip-plan", json={"destination": "Kochi", "days": 2}, headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["data"]["remaining"] is None


def test_food_score_with_nutrition(client, override_gateway):
    override_gateway(json.dumps(ADVICE))

    resp = client.post(
        "/v1/ai/food-score",
        json={"nutrition": {"dish_label": "Idli", "calories": 150, "fat_g": 1, "sodium_mg": 250, "sugar_g": 1}},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["score"] == 10.0
    assert data["remaining"] == 9
    assert data["suggestions"] == ADVICE["suggestions"]


def test_food_score_without_input_is_validation_error(client, override_gateway):
    override_gateway("unused")
    resp = client.post("/v1/ai/food-score", json={}, headers=HEADERS)

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_translate(client, override_gateway):
    override_gateway("வணக்கம்")

    resp = client.post("/v1/ai/translate", json={"text": "Hello", "target": "ta"}, headers=HEADERS)

    assert resp.status_code == 200
    assert resp.json()["data"]["translated"] == "வணக்கம்"
    assert resp.json()["data"]["source"] == "en"


def test_fare_uses_wire_alias(client, override_gateway):
    override_gateway(json.dumps({"distance_km": 11, "fare_estimate_inr": "₹130-200", "scam_alert": "Insist on the meter"}))

    resp = client.post(
        "/v1/ai/fare",
        json={"city": "Mumbai", "from": "CST", "to": "Gateway of India"},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["from"] == "CST"
    assert data["distance_km"] == 11
    assert data["scam_alert"] == "Insist on the meter"


def test_missing_credential_is_configuration_error(client, monkeypatch):
    from goindia.core.config import settings

    monkeypatch.setattr(settings, "OPENROUTER_API_KEY", None)
    monkeypatch.setattr(settings, "AI_PROXY_URL", None)

    resp = client.post("/v1/ai/assistant", json={"question": "Hi"}, headers=HEADERS)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "ai_not_configured"


def test_trip_plan_save_failure_still_returns_itinerary(client, override_gateway, monkeypatch):
    _seed(trip_planner_used=3)
    override_gateway(json.dumps(ITINERARY))

    def failing_save(*args, **kwargs):
        raise TripPersistenceError("Could not save your trip. Please try again.")

    monkeypatch.setattr(ai_api, "save_trip", failing_save)

    resp = client.post(
        "/v1/ai/trip-plan",
        json={"destination": "Kochi", "days": 2, "save": True},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data["itinerary"]) == 2
    assert data["trip_id"] is None
    assert data["save_error"] == "Could not save your trip. Please try again."
    # The use was recorded before the save was attempted
    assert _memory_store.fetch("traveller-1").trip_planner_used == 4
    assert data["remaining"] == 6

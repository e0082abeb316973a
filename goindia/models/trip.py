"""
goindia/models/trip.py

Itinerary shapes produced by the trip planner.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

Budget = Literal["low", "mid", "luxury"]
TravelStyle = Literal["solo", "women", "family", "backpack", "luxury", "relaxed", "adventure", "cultural"]


class Activity(BaseModel):
    id: Optional[str] = None
    time: Literal["Morning", "Afternoon", "Evening"]
    title: str
    description: str = ""
    type: Literal["spot", "hotel", "food"] = "spot"
    google_maps_link: Optional[str] = None

    @field_validator("time", mode="before")
    @classmethod
    def normalize_time(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class DayPlan(BaseModel):
    day: int = Field(ge=1)
    title: str
    activities: List[Activity] = []


class TripRequest(BaseModel):
    destination: str
    days: int = Field(ge=1, le=30)
    companions: str = "solo traveller"
    style: str = "cultural"
    budget: Optional[Budget] = None
    interests: List[str] = []

    @field_validator("destination")
    @classmethod
    def destination_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("destination is required")
        return value.strip()


class SavedTrip(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    title: str
    destination: str
    days: int
    itinerary: List[DayPlan]
    created_at: datetime

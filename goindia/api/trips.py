"""Saved trips ("My Trips")."""

from typing import List
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from goindia.core.auth import get_current_user_id
from goindia.core.logging import request_id_for
from goindia.features.trips.service import delete_trip, list_trips, save_trip
from goindia.models.trip import DayPlan

router = APIRouter(prefix="/v1/trips", tags=["trips"])


class SaveTripRequest(BaseModel):
    destination: str
    itinerary: List[DayPlan]
    title: str = ""


@router.get("")
def list_trips_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    rid = request_id_for(request)
    trips = [t.model_dump(mode="json") for t in list_trips(user_id)]
    return {"data": trips, "request_id": rid}


@router.post("")
def save_trip_endpoint(body: SaveTripRequest, request: Request, user_id: str = Depends(get_current_user_id)):
    rid = request_id_for(request)
    trip = save_trip(user_id, body.destination, body.itinerary, title=body.title)
    return {"data": trip.model_dump(mode="json"), "request_id": rid}


@router.delete("/{trip_id}")
def delete_trip_endpoint(trip_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    rid = request_id_for(request)
    delete_trip(user_id, trip_id)
    return {"data": {"deleted": trip_id}, "request_id": rid}

"""
goindia/features/trips/service.py

Saved itineraries ("My Trips").

Uses the trip_plans table when a database is configured, otherwise an
in-memory store.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import select, insert, delete
from sqlalchemy.exc import SQLAlchemyError

from goindia.core.database import get_db_session, trip_plans, is_database_configured
from goindia.core.errors import NotFoundError, TripPersistenceError, ValidationError
from goindia.models.trip import DayPlan, SavedTrip

logger = logging.getLogger("goindia")

# In-memory stub store (fallback when DB not available)
_trips_store: Dict[str, SavedTrip] = {}


def _use_persistence() -> bool:
    return is_database_configured()


def _row_to_trip(row) -> SavedTrip:
    return SavedTrip(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        destination=row.destination,
        days=row.days,
        itinerary=[DayPlan.model_validate(d) for d in row.itinerary],
        created_at=row.created_at,
    )


def _persistence_failed(action: str, user_id: str, exc: SQLAlchemyError) -> TripPersistenceError:
    logger.error(f"[trips] {action} failed for {user_id}: {exc}")
    return TripPersistenceError(f"Could not {action} your trip. Please try again.")


def save_trip(user_id: str, destination: str, itinerary: List[DayPlan], title: str = "") -> SavedTrip:
    if not itinerary:
        raise ValidationError("Cannot save an empty itinerary")
    trip = SavedTrip(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title.strip() or f"{len(itinerary)} days in {destination}",
        destination=destination,
        days=len(itinerary),
        itinerary=itinerary,
        created_at=datetime.now(timezone.utc),
    )
    if not _use_persistence():
        _trips_store[trip.id] = trip
        return trip

    try:
        with get_db_session() as session:
            session.execute(
                insert(trip_plans).values(
                    id=trip.id,
                    user_id=trip.user_id,
                    title=trip.title,
                    destination=trip.destination,
                    days=trip.days,
                    itinerary=[d.model_dump() for d in trip.itinerary],
                    created_at=trip.created_at,
                )
            )
    except SQLAlchemyError as exc:
        raise _persistence_failed("save", user_id, exc) from exc
    return trip


def list_trips(user_id: str) -> List[SavedTrip]:
    """Newest first."""
    if not _use_persistence():
        trips = [t for t in _trips_store.values() if t.user_id == user_id]
        return sorted(trips, key=lambda t: t.created_at, reverse=True)

    try:
        with get_db_session() as session:
            rows = session.execute(
                select(trip_plans)
                .where(trip_plans.c.user_id == user_id)
                .order_by(trip_plans.c.created_at.desc())
            ).all()
    except SQLAlchemyError as exc:
        raise _persistence_failed("load", user_id, exc) from exc
    return [_row_to_trip(row) for row in rows]


def delete_trip(user_id: str, trip_id: str) -> None:
    if not _use_persistence():
        trip = _trips_store.get(trip_id)
        if trip is None or trip.user_id != user_id:
            raise NotFoundError(f"Trip {trip_id} not found")
        del _trips_store[trip_id]
        return

    try:
        with get_db_session() as session:
            result = session.execute(
                delete(trip_plans)
                .where(trip_plans.c.id == trip_id)
                .where(trip_plans.c.user_id == user_id)
            )
            deleted = result.rowcount
    except SQLAlchemyError as exc:
        raise _persistence_failed("delete", user_id, exc) from exc
    if deleted == 0:
        raise NotFoundError(f"Trip {trip_id} not found")


def clear_store() -> None:
    """Clear all data (testing only)"""
    _trips_store.clear()

"""
goindia/features/profiles/store.py

Profile persistence.

- SqlProfileStore: `profiles` table via SQLAlchemy
- InMemoryProfileStore: fallback when no database is configured (dev, tests)

Both raise ProfilePersistenceError for backend failures so callers never
see driver-specific exceptions.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import select, insert, update
from sqlalchemy.exc import SQLAlchemyError

from goindia.core.database import get_db_session, profiles, is_database_configured
from goindia.core.errors import ProfilePersistenceError
from goindia.models.plan import PlanTier, Role
from goindia.models.profile import UserProfile

logger = logging.getLogger("goindia")

# Columns a client-side write may touch
WRITABLE_COLUMNS = {"plan", "role", "food_scanner_used", "trip_planner_used", "full_name", "email"}
USAGE_COLUMNS = {"food_scanner_used", "trip_planner_used"}


class ProfileStore(Protocol):
    def fetch(self, user_id: str) -> Optional[UserProfile]:
        ...

    def create(self, profile: UserProfile) -> UserProfile:
        ...

    def update(self, user_id: str, values: Dict[str, Any]) -> UserProfile:
        ...

    def increment(self, user_id: str, column: str) -> UserProfile:
        ...


def _check_columns(values: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(values) - WRITABLE_COLUMNS
    if unknown:
        raise ValueError(f"Unsupported profile columns: {', '.join(sorted(unknown))}")
    # Enums are stored by value
    return {k: (v.value if isinstance(v, (PlanTier, Role)) else v) for k, v in values.items()}


def _check_usage_column(column: str) -> str:
    if column not in USAGE_COLUMNS:
        raise ValueError(f"Not a usage counter: {column}")
    return column


class InMemoryProfileStore:
    """Dict-backed store with the same contract as SqlProfileStore."""

    def __init__(self):
        self._rows: Dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def fetch(self, user_id: str) -> Optional[UserProfile]:
        return self._rows.get(user_id)

    def create(self, profile: UserProfile) -> UserProfile:
        now = datetime.now(timezone.utc)
        with self._lock:
            if profile.id in self._rows:
                return self._rows[profile.id]
            stored = profile.model_copy(update={"created_at": profile.created_at or now, "updated_at": now})
            self._rows[profile.id] = stored
            return stored

    def update(self, user_id: str, values: Dict[str, Any]) -> UserProfile:
        clean = _check_columns(values)
        with self._lock:
            current = self._rows.get(user_id)
            if current is None:
                raise ProfilePersistenceError(f"Profile {user_id} not found")
            # model_validate re-coerces enum columns
            updated = UserProfile.model_validate(
                {**current.model_dump(), **clean, "updated_at": datetime.now(timezone.utc)}
            )
            self._rows[user_id] = updated
            return updated

    def increment(self, user_id: str, column: str) -> UserProfile:
        column = _check_usage_column(column)
        with self._lock:
            current = self._rows.get(user_id)
            if current is None:
                raise ProfilePersistenceError(f"Profile {user_id} not found")
            updated = current.model_copy(
                update={column: getattr(current, column) + 1, "updated_at": datetime.now(timezone.utc)}
            )
            self._rows[user_id] = updated
            return updated

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()


def _row_to_profile(row) -> UserProfile:
    return UserProfile(
        id=row.id,
        email=row.email,
        full_name=row.full_name,
        plan=row.plan,
        role=row.role,
        food_scanner_used=row.food_scanner_used,
        trip_planner_used=row.trip_planner_used,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlProfileStore:
    """PostgreSQL (or SQLite in tests) backed profile store."""

    def fetch(self, user_id: str) -> Optional[UserProfile]:
        try:
            with get_db_session() as session:
                row = session.execute(select(profiles).where(profiles.c.id == user_id)).first()
        except SQLAlchemyError as exc:
            logger.error(f"[profiles] fetch failed for {user_id}: {exc}")
            raise ProfilePersistenceError("Could not load your profile. Please try again.") from exc
        return _row_to_profile(row) if row else None

    def create(self, profile: UserProfile) -> UserProfile:
        now = datetime.now(timezone.utc)
        try:
            with get_db_session() as session:
                existing = session.execute(select(profiles).where(profiles.c.id == profile.id)).first()
                if existing:
                    return _row_to_profile(existing)
                session.execute(
                    insert(profiles).values(
                        id=profile.id,
                        email=profile.email,
                        full_name=profile.full_name,
                        plan=profile.plan.value,
                        role=profile.role.value,
                        food_scanner_used=profile.food_scanner_used,
                        trip_planner_used=profile.trip_planner_used,
                        created_at=profile.created_at or now,
                        updated_at=now,
                    )
                )
                row = session.execute(select(profiles).where(profiles.c.id == profile.id)).first()
        except SQLAlchemyError as exc:
            logger.error(f"[profiles] create failed for {profile.id}: {exc}")
            raise ProfilePersistenceError("Could not create your profile. Please try again.") from exc
        return _row_to_profile(row)

    def update(self, user_id: str, values: Dict[str, Any]) -> UserProfile:
        clean = _check_columns(values)
        try:
            with get_db_session() as session:
                result = session.execute(
                    update(profiles)
                    .where(profiles.c.id == user_id)
                    .values(**clean, updated_at=datetime.now(timezone.utc))
                )
                if result.rowcount == 0:
                    raise ProfilePersistenceError(f"Profile {user_id} not found")
                row = session.execute(select(profiles).where(profiles.c.id == user_id)).first()
        except SQLAlchemyError as exc:
            logger.error(f"[profiles] update failed for {user_id}: {exc}")
            raise ProfilePersistenceError("Could not save your usage. Please try again.") from exc
        return _row_to_profile(row)

    def increment(self, user_id: str, column: str) -> UserProfile:
        """Add one to a usage counter in the database, not from a cached value."""
        column = _check_usage_column(column)
        try:
            with get_db_session() as session:
                result = session.execute(
                    update(profiles)
                    .where(profiles.c.id == user_id)
                    .values({column: profiles.c[column] + 1, "updated_at": datetime.now(timezone.utc)})
                )
                if result.rowcount == 0:
                    raise ProfilePersistenceError(f"Profile {user_id} not found")
                row = session.execute(select(profiles).where(profiles.c.id == user_id)).first()
        except SQLAlchemyError as exc:
            logger.error(f"[profiles] increment failed for {user_id}: {exc}")
            raise ProfilePersistenceError("Could not save your usage. Please try again.") from exc
        return _row_to_profile(row)


# In-memory fallback shared across requests when no database is configured
_memory_store = InMemoryProfileStore()


def get_profile_store() -> ProfileStore:
    """Pick the SQL store when a database is configured."""
    if is_database_configured():
        return SqlProfileStore()
    return _memory_store


def ensure_profile(store: ProfileStore, user_id: str, email: Optional[str] = None) -> UserProfile:
    """Create a free-tier profile on first sign-in."""
    existing = store.fetch(user_id)
    if existing:
        return existing
    logger.info(f"[profiles] creating profile for {user_id}")
    return store.create(UserProfile(id=user_id, email=email))


def clear_store() -> None:
    """Clear the in-memory fallback (testing only)"""
    _memory_store.clear()

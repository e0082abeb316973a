"""
SQLAlchemy Core tables and engine lifecycle.

Storage is optional: with no DATABASE_URL the profile and trip services
keep their rows in memory (see is_database_configured).
"""
import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import JSON, Column, DateTime, Index, Integer, MetaData, String, Table, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql import func

from goindia.core.config import settings

logger = logging.getLogger("goindia")

metadata = MetaData()

# Pool settings for server databases (ignored for SQLite)
POOL_OPTIONS = {
    "poolclass": QueuePool,
    "pool_size": 10,
    "max_overflow": 20,
    "pool_timeout": 30,
    "pool_recycle": 3600,
    "pool_pre_ping": True,
}

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def get_database_url() -> Optional[str]:
    """TEST_DATABASE_URL wins over DATABASE_URL (env first, then settings)."""
    return os.getenv("TEST_DATABASE_URL") or os.getenv("DATABASE_URL") or settings.DATABASE_URL


def is_database_configured() -> bool:
    return _engine is not None or bool(get_database_url())


def init_engine(database_url: Optional[str] = None) -> Engine:
    global _engine, _SessionLocal

    url = database_url or get_database_url()
    if not url:
        raise ValueError("DATABASE_URL is not configured. Set it in the environment or goindia/.env.")

    if url.startswith("sqlite"):
        # Handlers run on worker threads
        _engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        _engine = create_engine(url, **POOL_OPTIONS)
    _SessionLocal = sessionmaker(bind=_engine, autoflush=False)
    return _engine


def dispose_engine() -> None:
    """Drop the engine so the next use re-reads configuration."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine() -> Engine:
    return _engine if _engine is not None else init_engine()


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Transactional scope: commit on success, roll back on any error."""
    if _SessionLocal is None:
        init_engine()
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables() -> None:
    """Idempotent; existing tables are left alone."""
    metadata.create_all(bind=get_engine())


def check_connection() -> bool:
    try:
        with get_engine().connect() as conn:
            conn.exec_driver_sql("SELECT 1")
    except Exception as exc:
        logger.warning(f"[database] connection check failed: {exc}")
        return False
    return True


# One row per authenticated user
profiles = Table(
    "profiles",
    metadata,
    Column("id", String(100), primary_key=True),
    Column("email", String(320), nullable=True),
    Column("full_name", Text, nullable=True),
    Column("plan", String(20), nullable=False, server_default="free"),
    Column("role", String(20), nullable=False, server_default="user"),
    Column("food_scanner_used", Integer, nullable=False, server_default="0"),
    Column("trip_planner_used", Integer, nullable=False, server_default="0"),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    Index("idx_profiles_plan", "plan"),
)

# Saved itineraries ("My Trips")
trip_plans = Table(
    "trip_plans",
    metadata,
    Column("id", String(100), primary_key=True),
    Column("user_id", String(100), nullable=False),
    Column("title", Text, nullable=False),
    Column("destination", Text, nullable=False),
    Column("days", Integer, nullable=False),
    Column("itinerary", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
    # list_trips: newest first per user
    Index("idx_trip_plans_user_created", "user_id", "created_at"),
)

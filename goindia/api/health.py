"""
Health endpoints.

Lightweight checks for operational monitoring without exposing secrets.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from goindia.core.config import settings, is_placeholder
from goindia.core.database import check_connection, is_database_configured

logger = logging.getLogger("goindia")

root_router = APIRouter(tags=["health"])


@root_router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}


@root_router.get("/readyz")
def readyz():
    """Readiness: database reachable (when configured) and an AI route available."""
    ai_ready = bool(settings.AI_PROXY_URL) or not is_placeholder(settings.OPENROUTER_API_KEY)
    if not ai_ready:
        return JSONResponse(status_code=503, content={"status": "error", "detail": "AI credential not configured"})

    if is_database_configured() and not check_connection():
        logger.error("[readyz] database unreachable")
        return JSONResponse(status_code=503, content={"status": "error", "detail": "database unreachable"})

    return {"status": "ok", "storage": "database" if is_database_configured() else "memory"}

"""
Auth utilities for the GoIndia API.

Validates Supabase-issued JWTs and extracts user_id from request context.
Falls back to X-User-Id header for local development and tests.

Administrator access is decided by the profile `role` column, never by
comparing e-mail addresses.
"""
from fastapi import Depends, Header, HTTPException, Request
from typing import Optional
import jwt
import logging

from goindia.core.config import settings
from goindia.core.errors import PermissionError
from goindia.features.profiles.session import UserSession
from goindia.features.profiles.store import get_profile_store, ensure_profile

logger = logging.getLogger("goindia")


def verify_supabase_jwt(token: str, settings_obj=None) -> Optional[str]:
    """
    Verify a Supabase access token and return its `sub` claim.

    Returns None when no JWT secret is configured (development).

    Raises:
        HTTPException 401: Invalid or expired token
    """
    cfg = settings_obj or settings
    if not cfg.SUPABASE_JWT_SECRET:
        logger.debug("No SUPABASE_JWT_SECRET configured, skipping JWT validation")
        return None

    try:
        payload = jwt.decode(
            token,
            cfg.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=cfg.SUPABASE_JWT_AUDIENCE,
            options={"verify_signature": True, "verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Development/test user ID"),
) -> str:
    """
    Extract current user ID from request context.

    Priority:
    1. Supabase JWT from Authorization header
    2. X-User-Id header (outside production)
    3. Raise 401 Unauthorized
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        user_id = verify_supabase_jwt(auth_header[7:])
        if user_id:
            return user_id

    # Header identity is for local development and tests only
    if x_user_id and settings.ENV != "production":
        return x_user_id

    raise HTTPException(
        status_code=401,
        detail="Missing Authorization (Bearer JWT) or X-User-Id header",
    )


def get_user_session(user_id: str = Depends(get_current_user_id)) -> UserSession:
    """Build the per-request session, creating the profile on first sign-in."""
    store = get_profile_store()
    profile = ensure_profile(store, user_id)
    return UserSession(user_id, store, profile)


def require_admin(session: UserSession = Depends(get_user_session)) -> UserSession:
    if not session.is_admin:
        raise PermissionError("Administrator access required")
    return session

"""Profile and feature usage API."""

from fastapi import APIRouter, Depends, Request

from goindia.core.auth import get_user_session, require_admin
from goindia.core.errors import NotFoundError, ValidationError
from goindia.core.logging import request_id_for
from goindia.features.profiles.session import UserSession
from goindia.features.usage.gate import FeatureGate, FeatureUsage
from goindia.features.usage.limits import parse_feature

router = APIRouter(tags=["usage"])


def _usage_dict(usage: FeatureUsage) -> dict:
    return {
        "feature": usage.feature.value,
        "used": usage.used,
        "limit": usage.limit,
        "remaining": usage.remaining,
        "allowed": usage.allowed,
    }


def _profile_payload(session: UserSession) -> dict:
    profile = session.profile
    gate = FeatureGate(session)
    return {
        "profile": profile.model_dump(mode="json") if profile else None,
        "is_admin": session.is_admin,
        "usage": [_usage_dict(u) for u in gate.usage_summary()],
    }


@router.get("/v1/me")
def me(request: Request, session: UserSession = Depends(get_user_session)):
    rid = request_id_for(request)
    return {"data": _profile_payload(session), "request_id": rid}


@router.get("/v1/usage")
def usage(request: Request, session: UserSession = Depends(get_user_session)):
    rid = request_id_for(request)
    gate = FeatureGate(session)
    return {"data": [_usage_dict(u) for u in gate.usage_summary()], "request_id": rid}


@router.get("/v1/usage/{feature}/check")
def check_feature(feature: str, request: Request, session: UserSession = Depends(get_user_session)):
    rid = request_id_for(request)
    try:
        parsed = parse_feature(feature)
    except ValueError as exc:
        raise ValidationError(str(exc), request_id=rid)
    allowed = FeatureGate(session).can_use_feature(parsed)
    return {"data": {"feature": parsed.value, "allowed": allowed}, "request_id": rid}


@router.get("/v1/admin/profiles/{user_id}")
def admin_profile(user_id: str, request: Request, admin: UserSession = Depends(require_admin)):
    rid = request_id_for(request)
    target = UserSession(user_id, admin.store)
    if target.load() is None:
        raise NotFoundError(f"Profile {user_id} not found", request_id=rid)
    return {"data": _profile_payload(target), "request_id": rid}

"""Pricing quotes and plan upgrades.

Payment itself happens outside this service. A user can self-upgrade only
with a coupon that brings the price to zero; otherwise the upgrade is
applied by an administrator once payment is confirmed.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from goindia.core.auth import get_user_session, require_admin
from goindia.core.errors import NotFoundError, PaymentRequiredError
from goindia.core.logging import request_id_for, log_event
from goindia.features.billing.pricing import quote
from goindia.features.profiles.session import UserSession
from goindia.features.usage.gate import FeatureGate
from goindia.models.plan import PlanTier

router = APIRouter(prefix="/v1/billing", tags=["billing"])
admin_router = APIRouter(prefix="/v1/admin", tags=["admin-billing"])


class UpgradeRequest(BaseModel):
    coupon: Optional[str] = None


@router.get("/quote")
def quote_endpoint(
    request: Request,
    coupon: Optional[str] = Query(None),
    session: UserSession = Depends(get_user_session),
):
    profile = session.profile
    result = quote(
        coupon,
        is_admin=session.is_admin,
        is_paid=profile is not None and profile.plan == PlanTier.PAID,
    )
    return {"data": result.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.post("/upgrade")
def upgrade_endpoint(
    body: UpgradeRequest,
    request: Request,
    session: UserSession = Depends(get_user_session),
):
    rid = request_id_for(request)
    result = quote(body.coupon)
    if result.price > 0:
        raise PaymentRequiredError("Payment is required to upgrade to the paid plan.", request_id=rid)

    profile = FeatureGate(session).upgrade_to_paid()
    log_event("info", "billing.upgraded", request_id=rid, user_id=session.user_id, extra={"coupon": result.coupon})
    return {"data": profile.model_dump(mode="json"), "request_id": rid}


@admin_router.post("/profiles/{user_id}/upgrade")
def admin_upgrade_endpoint(user_id: str, request: Request, admin: UserSession = Depends(require_admin)):
    """Apply a paid upgrade after payment was confirmed out of band."""
    rid = request_id_for(request)
    target = UserSession(user_id, admin.store)
    if target.load() is None:
        raise NotFoundError(f"Profile {user_id} not found", request_id=rid)
    profile = FeatureGate(target).upgrade_to_paid()
    log_event("info", "billing.admin_upgraded", request_id=rid, user_id=user_id, extra={"admin_id": admin.user_id})
    return {"data": profile.model_dump(mode="json"), "request_id": rid}

"""
goindia/models/profile.py

Cached copy of a user's profile row.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from goindia.models.plan import Feature, PlanTier, Role


class UserProfile(BaseModel):
    """
    UserProfile mirrors the `profiles` table.

    Usage counters only ever grow within a plan period; the client never
    decrements them. Plan changes come from upgrade_to_paid or an external
    process.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    plan: PlanTier = PlanTier.FREE
    role: Role = Role.USER
    food_scanner_used: int = 0
    trip_planner_used: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def usage_for(self, feature: Feature) -> int:
        return getattr(self, feature.usage_column)

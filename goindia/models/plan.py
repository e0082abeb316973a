"""
goindia/models/plan.py

Plan tiers, roles and metered features.

Plans are capability tiers only; pricing lives in features/billing.
"""

from enum import Enum


class PlanTier(str, Enum):
    FREE = "free"
    PAID = "paid"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Feature(str, Enum):
    """
    Metered capabilities.

    - food_scanner: AI food photo / nutrition analysis
    - trip_planner: AI itinerary generation
    """
    FOOD_SCANNER = "food_scanner"
    TRIP_PLANNER = "trip_planner"

    @property
    def usage_column(self) -> str:
        return f"{self.value}_used"

"""
goindia/features/usage/limits.py

Compiled-in plan limits. Not configurable at runtime.
"""

from typing import Dict, Optional, Union

from goindia.models.plan import Feature, PlanTier

UNLIMITED = -1

PLAN_LIMITS: Dict[PlanTier, Dict[Feature, int]] = {
    PlanTier.FREE: {
        Feature.FOOD_SCANNER: 10,
        Feature.TRIP_PLANNER: 10,
    },
    PlanTier.PAID: {
        Feature.FOOD_SCANNER: 300,
        Feature.TRIP_PLANNER: UNLIMITED,
    },
}


def parse_feature(value: Union[str, Feature]) -> Feature:
    """Convert a wire value to Feature; unknown names raise ValueError."""
    if isinstance(value, Feature):
        return value
    try:
        return Feature(value)
    except ValueError:
        allowed = ", ".join(f.value for f in Feature)
        raise ValueError(f"Unknown feature '{value}'. Expected one of: {allowed}")


def limit_for(plan: PlanTier, feature: Feature) -> int:
    return PLAN_LIMITS[PlanTier(plan)][feature]


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def remaining(limit: int, used: int) -> Optional[int]:
    """Remaining uses, or None when the ceiling is unbounded."""
    if is_unlimited(limit):
        return None
    return max(0, limit - used)

"""
goindia/features/usage/gate.py

Feature usage gate.

Handles:
- Per-user, per-feature ceilings by plan tier (admins bypass)
- Recording one use after a successful metered action
- Plan upgrade (tier flip only; payment is confirmed elsewhere)

"No profile" and "at limit" are ordinary False results. Only persistence
failures raise, and the cached counter is left untouched when they do.

The increment itself happens in the store, so concurrent sessions never
lose a count. The check before it is not serialized: two near-simultaneous
requests can both pass can_use_feature, so a ceiling can be overshot by a
small margin.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from goindia.core.errors import ProfilePersistenceError
from goindia.features.profiles.session import UserSession
from goindia.features.usage.limits import is_unlimited, limit_for, parse_feature, remaining
from goindia.models.plan import Feature, PlanTier
from goindia.models.profile import UserProfile

logger = logging.getLogger("goindia")


@dataclass(frozen=True)
class FeatureUsage:
    feature: Feature
    used: int
    limit: Optional[int]  # None = unbounded
    remaining: Optional[int]
    allowed: bool


class FeatureGate:
    def __init__(self, session: UserSession):
        self.session = session

    def can_use_feature(self, feature: Union[Feature, str]) -> bool:
        feature = parse_feature(feature)
        profile = self.session.profile
        if profile is None:
            return False
        if profile.is_admin:
            return True

        limit = limit_for(profile.plan, feature)
        if is_unlimited(limit):
            return True
        return profile.usage_for(feature) < limit

    def increment_feature_usage(self, feature: Union[Feature, str]) -> None:
        """Record one use of a metered feature.

        Silently does nothing when there is no profile or the feature is
        already exhausted.

        Raises:
            ProfilePersistenceError: write failed; cached profile unchanged
        """
        feature = parse_feature(feature)
        profile = self.session.profile
        if profile is None or not self.can_use_feature(feature):
            logger.warning(
                "[usage] increment skipped",
                extra={"user_id": self.session.user_id, "feature": feature.value},
            )
            return

        try:
            updated = self.session.store.increment(profile.id, feature.usage_column)
        except ProfilePersistenceError:
            logger.error(
                "[usage] increment failed",
                extra={"user_id": profile.id, "feature": feature.value, "error_code": "profile_persistence_failed"},
            )
            raise

        self.session.cache_profile(updated)
        logger.info(
            "[usage] recorded",
            extra={"user_id": profile.id, "feature": feature.value, "used": updated.usage_for(feature)},
        )

    def upgrade_to_paid(self) -> UserProfile:
        """Flip the stored plan to paid and refresh the cached profile.

        Raises:
            ProfilePersistenceError: no profile loaded, or the write failed
        """
        profile = self.session.profile
        if profile is None:
            raise ProfilePersistenceError("No profile loaded for this session", status_code=409)

        updated = self.session.store.update(profile.id, {"plan": PlanTier.PAID})
        self.session.cache_profile(updated)
        logger.info("[usage] plan upgraded", extra={"user_id": profile.id, "plan": PlanTier.PAID.value})
        return updated

    def usage_summary(self) -> List[FeatureUsage]:
        profile = self.session.profile
        summary = []
        for feature in Feature:
            if profile is None:
                summary.append(FeatureUsage(feature, 0, 0, 0, False))
                continue
            used = profile.usage_for(feature)
            limit = limit_for(profile.plan, feature)
            summary.append(
                FeatureUsage(
                    feature=feature,
                    used=used,
                    limit=None if is_unlimited(limit) else limit,
                    remaining=remaining(limit, used),
                    allowed=self.can_use_feature(feature),
                )
            )
        return summary

"""
goindia/features/profiles/session.py

Per-request session handle: who the caller is plus a cached profile.

The gateway and the gate receive this explicitly instead of reading a
process-wide "current user".
"""

from typing import Optional

from goindia.features.profiles.store import ProfileStore
from goindia.models.profile import UserProfile


class UserSession:
    def __init__(self, user_id: str, store: ProfileStore, profile: Optional[UserProfile] = None):
        self.user_id = user_id
        self.store = store
        self._profile = profile

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    @property
    def is_admin(self) -> bool:
        return self._profile is not None and self._profile.is_admin

    def load(self) -> Optional[UserProfile]:
        """Fetch and cache the profile. A missing row leaves the cache empty."""
        self._profile = self.store.fetch(self.user_id)
        return self._profile

    refresh = load

    def cache_profile(self, profile: UserProfile) -> None:
        """Replace the cached copy after a confirmed write."""
        if profile.id != self.user_id:
            raise ValueError("Cannot cache another user's profile")
        self._profile = profile

"""Tests for plan ceilings, admin bypass and usage recording."""

import pytest

from goindia.core.errors import ProfilePersistenceError
from goindia.features.profiles.session import UserSession
from goindia.features.profiles.store import InMemoryProfileStore
from goindia.features.usage.gate import FeatureGate
from goindia.models.plan import Feature, PlanTier, Role
from goindia.models.profile import UserProfile


class RecordingStore(InMemoryProfileStore):
    """Memory store that records writes and can be told to fail them."""

    def __init__(self, fail_updates: bool = False):
        super().__init__()
        self.updates = []
        self.fail_updates = fail_updates

    def update(self, user_id, values):
        self.updates.append((user_id, dict(values)))
        if self.fail_updates:
            raise ProfilePersistenceError("database unavailable")
        return super().update(user_id, values)

    def increment(self, user_id, column):
        self.updates.append((user_id, {column: "+1"}))
        if self.fail_updates:
            raise ProfilePersistenceError("database unavailable")
        return super().increment(user_id, column)


def test_no_profile_fails_closed(memory_store):
    session = UserSession("ghost", memory_store)
    session.load()
    gate = FeatureGate(session)

    assert session.profile is None
    assert gate.can_use_feature(Feature.FOOD_SCANNER) is False
    assert gate.can_use_feature("trip_planner") is False


def test_increment_without_profile_is_noop():
    store = RecordingStore()
    session = UserSession("ghost", store)
    FeatureGate(session).increment_feature_usage(Feature.TRIP_PLANNER)

    assert store.updates == []


@pytest.mark.parametrize("plan", [PlanTier.FREE, PlanTier.PAID])
def test_admin_bypasses_every_ceiling(make_session, plan):
    session = make_session(role=Role.ADMIN, plan=plan, food_scanner_used=5000, trip_planner_used=5000)
    gate = FeatureGate(session)

    for feature in Feature:
        assert gate.can_use_feature(feature) is True


@pytest.mark.parametrize(
    "feature,used,expected",
    [
        (Feature.FOOD_SCANNER, 0, True),
        (Feature.FOOD_SCANNER, 9, True),
        (Feature.FOOD_SCANNER, 10, False),
        (Feature.TRIP_PLANNER, 10, False),
        (Feature.TRIP_PLANNER, 42, False),
    ],
)
def test_free_plan_ceiling(make_session, feature, used, expected):
    session = make_session(**{feature.usage_column: used})
    assert FeatureGate(session).can_use_feature(feature) is expected


def test_paid_plan_ceilings(make_session):
    session = make_session(plan=PlanTier.PAID, food_scanner_used=300, trip_planner_used=100000)
    gate = FeatureGate(session)

    assert gate.can_use_feature(Feature.FOOD_SCANNER) is False
    assert gate.can_use_feature(Feature.TRIP_PLANNER) is True


def test_check_is_idempotent(make_session):
    store = RecordingStore()
    session = make_session(store=store, food_scanner_used=3)
    gate = FeatureGate(session)

    results = [gate.can_use_feature(Feature.FOOD_SCANNER) for _ in range(5)]

    assert results == [True] * 5
    assert session.profile.food_scanner_used == 3
    assert store.updates == []


def test_unknown_feature_rejected(make_session):
    gate = FeatureGate(make_session())
    with pytest.raises(ValueError):
        gate.can_use_feature("weather")


def test_increment_persists_and_refreshes_cache(make_session, memory_store):
    session = make_session(trip_planner_used=4)
    FeatureGate(session).increment_feature_usage(Feature.TRIP_PLANNER)

    assert session.profile.trip_planner_used == 5
    assert memory_store.fetch("traveller-1").trip_planner_used == 5
    assert session.profile.food_scanner_used == 0


def test_increment_when_exhausted_writes_nothing():
    store = RecordingStore()
    store.create(UserProfile(id="u1", food_scanner_used=10))
    session = UserSession("u1", store)
    session.load()

    FeatureGate(session).increment_feature_usage(Feature.FOOD_SCANNER)

    assert store.updates == []
    assert session.profile.food_scanner_used == 10


def test_persistence_failure_leaves_cache_unchanged(make_session):
    store = RecordingStore(fail_updates=True)
    session = make_session(store=store, food_scanner_used=2)
    gate = FeatureGate(session)

    with pytest.raises(ProfilePersistenceError):
        gate.increment_feature_usage(Feature.FOOD_SCANNER)

    assert store.updates == [("traveller-1", {"food_scanner_used": "+1"})]
    assert session.profile.food_scanner_used == 2


def test_admin_usage_is_still_recorded(make_session):
    session = make_session(role=Role.ADMIN, trip_planner_used=99)
    FeatureGate(session).increment_feature_usage("trip_planner")

    assert session.profile.trip_planner_used == 100


def test_free_user_reaches_ceiling_then_upgrades(make_session, memory_store):
    session = make_session(trip_planner_used=9)
    gate = FeatureGate(session)

    assert gate.can_use_feature(Feature.TRIP_PLANNER) is True
    gate.increment_feature_usage(Feature.TRIP_PLANNER)
    assert session.profile.trip_planner_used == 10
    assert gate.can_use_feature(Feature.TRIP_PLANNER) is False

    profile = gate.upgrade_to_paid()

    assert profile.plan == PlanTier.PAID
    assert memory_store.fetch("traveller-1").plan == PlanTier.PAID
    # Counters are kept across the upgrade
    assert session.profile.trip_planner_used == 10
    assert gate.can_use_feature(Feature.TRIP_PLANNER) is True


def test_upgrade_without_profile_raises(memory_store):
    session = UserSession("ghost", memory_store)
    with pytest.raises(ProfilePersistenceError) as exc_info:
        FeatureGate(session).upgrade_to_paid()
    assert exc_info.value.status_code == 409


def test_usage_summary_reports_limits(make_session):
    session = make_session(plan=PlanTier.PAID, food_scanner_used=12, trip_planner_used=7)
    summary = {u.feature: u for u in FeatureGate(session).usage_summary()}

    food = summary[Feature.FOOD_SCANNER]
    assert (food.used, food.limit, food.remaining, food.allowed) == (12, 300, 288, True)

    trips = summary[Feature.TRIP_PLANNER]
    assert trips.limit is None
    assert trips.remaining is None
    assert trips.allowed is True


def test_usage_summary_without_profile(memory_store):
    summary = FeatureGate(UserSession("ghost", memory_store)).usage_summary()
    assert all(not u.allowed for u in summary)


@pytest.mark.parametrize("backend", ["memory", "sql"])
def test_concurrent_sessions_do_not_lose_counts(request, make_session, backend):
    store = request.getfixturevalue("sql_store") if backend == "sql" else request.getfixturevalue("memory_store")
    first = make_session(store=store, trip_planner_used=8)
    second = UserSession("traveller-1", store)
    second.load()

    # Both sessions loaded the profile at 8 before either recorded a use
    FeatureGate(first).increment_feature_usage(Feature.TRIP_PLANNER)
    FeatureGate(second).increment_feature_usage(Feature.TRIP_PLANNER)

    assert store.fetch("traveller-1").trip_planner_used == 10
    assert second.profile.trip_planner_used == 10


def test_food_scanner_ceiling_lifts_after_upgrade(make_session):
    session = make_session(food_scanner_used=10)
    gate = FeatureGate(session)
    assert gate.can_use_feature(Feature.FOOD_SCANNER) is False

    gate.upgrade_to_paid()

    assert gate.can_use_feature(Feature.FOOD_SCANNER) is True
    summary = {u.feature: u for u in gate.usage_summary()}
    assert summary[Feature.FOOD_SCANNER].limit == 300
    assert summary[Feature.FOOD_SCANNER].remaining == 290

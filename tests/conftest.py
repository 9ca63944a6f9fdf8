import pytest

from fakes import (
    TODAY,
    FakeNotifications,
    FakeSafetyAlerts,
    FakeStatistics,
    FakeStorage,
    FakeTravelPlans,
    plan_record,
)
from safetrip.services.alert_aggregator import AlertAggregator
from safetrip.services.destination_store import DestinationStore
from safetrip.services.notification_tracker import NotificationTracker


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def plans():
    return FakeTravelPlans([
        plan_record("1", "Bangkok, Thailand", "2025-07-15", "2025-07-25"),
        plan_record("2", "Paris, France", "2025-06-25", "2025-07-05", status="active"),
        plan_record("3", "Lisbon, Portugal", "2025-08-01", "2025-08-10", alerts_enabled=False),
    ])


@pytest.fixture
def statistics():
    return FakeStatistics()


@pytest.fixture
def store(plans, storage, statistics):
    return DestinationStore("user-1", plans, storage, statistics, today=lambda: TODAY)


@pytest.fixture
def loaded_store(store):
    store.load()
    return store


@pytest.fixture
def safety():
    return FakeSafetyAlerts()


@pytest.fixture
def aggregator(safety, storage):
    return AlertAggregator("user-1", safety=safety, storage=storage, cache_expiration=60)


@pytest.fixture
def notifications_client():
    return FakeNotifications()


@pytest.fixture
def tracker(notifications_client):
    return NotificationTracker("user-1", notifications_client)

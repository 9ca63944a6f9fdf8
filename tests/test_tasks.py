import pytest

from fakes import FakeSafetyAlerts, FakeStorage
from safetrip.services.alert_aggregator import FEED_KEY, AlertAggregator
from safetrip.tasks import alerts as alert_tasks


@pytest.fixture
def feed(monkeypatch):
    storage = FakeStorage()
    safety = FakeSafetyAlerts([{"id": "1", "title": "Strike", "message": "", "destination": "Paris"}])
    monkeypatch.setattr(
        alert_tasks, "build_feed_aggregator",
        lambda: AlertAggregator(None, safety=safety, storage=storage),
    )
    return safety, storage


def test_warm_alert_feeds_fills_cache(feed):
    safety, storage = feed

    result = alert_tasks.warm_alert_feeds("Paris")

    assert result == {"location": "Paris", "alerts": 1, "failed_sources": []}
    assert storage.get(FEED_KEY.format(source="safety", location="paris"))[0]["id"] == "1"
    assert safety.called("list_alerts") == [("list_alerts", "Paris")]


def test_warm_alert_feeds_reports_failures(feed):
    safety, _ = feed
    safety.fail = {"list_alerts"}

    result = alert_tasks.warm_alert_feeds("Paris")

    assert result == {"location": "Paris", "alerts": 0, "failed_sources": ["safety"]}


def test_task_is_registered_with_celery():
    assert alert_tasks.warm_alert_feeds.name == "safetrip.tasks.alerts.warm_alert_feeds"

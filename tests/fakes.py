"""In-memory stand-ins for the remote collaborators and Redis storage."""
import copy
import json
from datetime import date, datetime, timezone

import requests

from safetrip.models.alert import Alert

TODAY = date(2025, 7, 1)


def plan_record(plan_id, name, start, end, status="planned", alerts_enabled=True, user_id="user-1"):
    return {
        "id": plan_id,
        "user_id": user_id,
        "destination": name,
        "start_date": start,
        "end_date": end,
        "status": status,
        "alerts_enabled": alerts_enabled,
    }


def make_alert(alert_id, severity="low", timestamp="2025-05-20", **fields):
    return Alert(id=alert_id, title=fields.pop("title", f"Alert {alert_id}"),
                 severity=severity, timestamp=timestamp, **fields)


def notification_record(notification_id, is_read=False, **fields):
    record = {
        "id": notification_id,
        "userId": "user-1",
        "actorId": "actor-1",
        "actorName": "Ana",
        "type": "like",
        "content": "liked your story",
        "isRead": is_read,
        "createdAt": datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc).isoformat(),
    }
    record.update(fields)
    return record


class FakeStorage:
    """Dict-backed KeyValueStore; values go through JSON like they do in Redis."""

    def __init__(self):
        self.data = {}
        self.expirations = {}

    def get(self, key):
        return copy.deepcopy(self.data.get(key))

    def set(self, key, value, expire=None):
        self.data[key] = json.loads(json.dumps(value, default=str))
        self.expirations[key] = expire
        return True

    def ping(self):
        return True


class RecordingClient:
    """Records every call and raises for the method names listed in `fail`."""

    def __init__(self):
        self.calls = []
        self.fail = set()

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise requests.ConnectionError(f"{name} failed")

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


class FakeTravelPlans(RecordingClient):

    def __init__(self, records=None):
        super().__init__()
        self.records = [dict(r) for r in records or []]
        self._next_id = 100

    def list_by_user(self, user_id):
        self._call("list_by_user", user_id)
        return [dict(r) for r in self.records]

    def create(self, user_id, fields):
        self._call("create", user_id, fields)
        record = {"id": str(self._next_id), "user_id": user_id, **fields}
        self._next_id += 1
        self.records.append(record)
        return dict(record)

    def update(self, plan_id, fields):
        self._call("update", plan_id, fields)
        for record in self.records:
            if record["id"] == plan_id:
                record.update(fields)
                return dict(record)

    def delete(self, plan_id):
        self._call("delete", plan_id)
        self.records = [r for r in self.records if r["id"] != plan_id]

    def auto_activate(self, user_id):
        self._call("auto_activate", user_id)

    def set_active(self, user_id, plan_id):
        self._call("set_active", user_id, plan_id)
        for record in self.records:
            if record["id"] == plan_id:
                record["status"] = "active"
            elif record["status"] == "active":
                record["status"] = "planned"


class FakeStatistics(RecordingClient):

    def update_user_statistics(self, user_id, updates):
        self._call("update_user_statistics", user_id, updates)


class FakeSafetyAlerts(RecordingClient):

    def __init__(self, records=None):
        super().__init__()
        self.records = list(records or [])

    def list_alerts(self, destination=None):
        self._call("list_alerts", destination)
        return [dict(r) for r in self.records]

    def mark_read(self, alert_id, user_id):
        self._call("mark_read", alert_id, user_id)


class FakeNewsFeed(RecordingClient):

    def __init__(self, articles=None):
        super().__init__()
        self.articles = list(articles or [])

    def search(self, location, max_results=10):
        self._call("search", location)
        return [dict(a) for a in self.articles]


class FakeScamFeed(RecordingClient):

    def __init__(self, reports=None):
        super().__init__()
        self.reports = list(reports or [])

    def reports_for(self, location, limit=100):
        self._call("reports_for", location)
        return [dict(r) for r in self.reports]


class FakeWeatherFeed(RecordingClient):

    def __init__(self, forecast=None):
        super().__init__()
        self.forecast_data = forecast or {}

    def forecast(self, location, days=None):
        self._call("forecast", location)
        return copy.deepcopy(self.forecast_data)


class FakeNotifications(RecordingClient):

    def __init__(self, records=None, unread=None):
        super().__init__()
        self.records = list(records or [])
        self.unread = unread

    def list_by_user(self, user_id, limit=None):
        self._call("list_by_user", user_id)
        return [dict(r) for r in self.records]

    def get_unread_count(self, user_id):
        self._call("get_unread_count", user_id)
        if self.unread is not None:
            return self.unread
        return sum(1 for r in self.records if not r["isRead"])

    def mark_read(self, notification_id):
        self._call("mark_read", notification_id)
        for record in self.records:
            if record["id"] == notification_id:
                record["isRead"] = True

    def mark_all_read(self, user_id):
        self._call("mark_all_read", user_id)
        for record in self.records:
            record["isRead"] = True

    def delete(self, notification_id):
        self._call("delete", notification_id)
        self.records = [r for r in self.records if r["id"] != notification_id]


class FakeSubscription(RecordingClient):

    def __init__(self, status=None):
        super().__init__()
        self.status = status

    def get_status(self, user_id):
        self._call("get_status", user_id)
        return self.status

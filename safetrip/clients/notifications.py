from typing import Any, Dict, List

from safetrip.clients.base import BackendClient
from safetrip.core.config import settings


class NotificationsClient(BackendClient):

    def list_by_user(self, user_id: str, limit: int = None) -> List[Dict[str, Any]]:
        params = {"user_id": user_id, "limit": limit or settings.NOTIFICATIONS_PAGE_SIZE}
        return self._request("GET", "/notifications", params=params) or []

    def get_unread_count(self, user_id: str) -> int:
        data = self._request("GET", "/notifications/unread-count", params={"user_id": user_id})
        return int((data or {}).get("count", 0))

    def mark_read(self, notification_id: str) -> None:
        self._request("PATCH", f"/notifications/{notification_id}", json={"is_read": True})

    def mark_all_read(self, user_id: str) -> None:
        self._request("POST", "/notifications/mark-all-read", json={"user_id": user_id})

    def delete(self, notification_id: str) -> None:
        self._request("DELETE", f"/notifications/{notification_id}")

"""
Notification/Read-State Tracker for social notifications.

The list and the unread counter come from two separate backend calls and
are never derived from each other, so they can disagree after a race.
"""
from typing import List, Optional

import pydantic
import requests

from safetrip.clients.notifications import NotificationsClient
from safetrip.core.exceptions import FetchError, NotFoundError, PersistenceError
from safetrip.core.logging import get_logger
from safetrip.models.notification import Notification

logger = get_logger(__name__)


class NotificationTracker:

    def __init__(self, user_id: str, client: NotificationsClient):
        self.user_id = user_id
        self.client = client

        self._notifications: List[Notification] = []
        self._unread_count = 0

    @property
    def notifications(self) -> List[Notification]:
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def load(self, user_id: Optional[str] = None) -> List[Notification]:
        """Fetch the list and the unread counter. On failure both keep their previous values."""
        if user_id is not None:
            self.user_id = user_id

        try:
            records = self.client.list_by_user(self.user_id)
            notifications = [Notification.model_validate(record) for record in records]
            unread = self.client.get_unread_count(self.user_id)
        except (requests.RequestException, pydantic.ValidationError) as e:
            logger.error(f"Error fetching notifications: {e}", extra={"user_id": self.user_id})
            raise FetchError("Could not load notifications")

        self._notifications = notifications
        self._unread_count = unread
        return self.notifications

    def mark_as_read(self, notification_id: str) -> Notification:
        """
        Flip the notification to read, then tell the backend.

        The local flip is kept when the backend call fails; PersistenceError
        tells the caller to reload.
        """
        index = self._find(notification_id)
        notification = self._notifications[index]
        if not notification.is_read:
            notification = notification.model_copy(update={"is_read": True})
            self._notifications[index] = notification
            self._unread_count = max(0, self._unread_count - 1)

        try:
            self.client.mark_read(notification_id)
        except requests.RequestException as e:
            logger.error(f"Error marking notification as read: {e}", extra={"notification_id": notification_id})
            raise PersistenceError("Notification marked as read locally but the server did not confirm it")
        return notification

    def mark_all_as_read(self, user_id: Optional[str] = None) -> List[Notification]:
        user_id = user_id or self.user_id
        try:
            self.client.mark_all_read(user_id)
        except requests.RequestException as e:
            logger.error(f"Error marking all notifications as read: {e}", extra={"user_id": user_id})
            raise PersistenceError("Could not mark notifications as read")

        self._notifications = [n.model_copy(update={"is_read": True}) for n in self._notifications]
        self._unread_count = 0
        return self.notifications

    def delete(self, notification_id: str) -> None:
        notification = self._notifications[self._find(notification_id)]

        try:
            self.client.delete(notification_id)
        except requests.RequestException as e:
            logger.error(f"Error deleting notification: {e}", extra={"notification_id": notification_id})
            raise PersistenceError("Could not delete the notification")

        self._notifications = [n for n in self._notifications if n.id != notification_id]
        if not notification.is_read:
            self._unread_count = max(0, self._unread_count - 1)

    def _find(self, notification_id: str) -> int:
        for index, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                return index
        raise NotFoundError(f"Notification with ID {notification_id} not found")

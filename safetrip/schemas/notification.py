from typing import List

from safetrip.models.notification import Notification
from safetrip.schemas.destination import CamelModel


class NotificationListResponse(CamelModel):
    notifications: List[Notification]
    unread_count: int

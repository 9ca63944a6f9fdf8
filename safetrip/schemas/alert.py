from typing import List, Optional

from safetrip.models.alert import Alert
from safetrip.models.destination import Destination
from safetrip.schemas.destination import CamelModel


class AlertFeedResponse(CamelModel):
    alerts: List[Alert]
    unread_count: int
    destination: Optional[Destination] = None
    stale: bool = False


class AlertReadResponse(CamelModel):
    id: str
    read: bool = True
    unread_count: int

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from safetrip.api.deps import get_session
from safetrip.schemas.alert import AlertFeedResponse, AlertReadResponse
from safetrip.services.session import UserSession

router = APIRouter(prefix="/alerts", tags=["Safety Alerts"])


@router.get("/", response_model=AlertFeedResponse)
def get_alerts(
        tags: Optional[List[str]] = Query(None),
        refresh: bool = False,
        session: UserSession = Depends(get_session),
):
    """Ranked alerts for the current destination, optionally narrowed by category tags."""
    # Accept both ?tags=a&tags=b and ?tags=a,b
    tags = [part.strip() for tag in tags or [] for part in tag.split(",") if part.strip()]
    alerts, stale = session.alert_feed(tags=tags, refresh=refresh)
    return AlertFeedResponse(
        alerts=alerts,
        unread_count=session.unread_alerts(),
        destination=session.store.current_destination,
        stale=stale,
    )


@router.post("/{alert_id}/read", response_model=AlertReadResponse)
def mark_alert_read(
        alert_id: str,
        optimistic: bool = False,
        session: UserSession = Depends(get_session),
):
    """
    Mark an alert as read.

    With `optimistic` the alert is flipped locally before the backend
    answers; otherwise the backend confirms first and the feed is refetched.
    """
    if not session.aggregator.loaded:
        session.alert_feed()

    if optimistic:
        session.aggregator.mark_read_local(alert_id)
    else:
        session.aggregator.mark_read(alert_id)

    return AlertReadResponse(id=alert_id, read=True, unread_count=session.unread_alerts())

from fastapi import APIRouter, Depends, status

from safetrip.api.deps import get_session
from safetrip.models.notification import Notification
from safetrip.schemas.notification import NotificationListResponse
from safetrip.services.session import UserSession

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _listing(session: UserSession) -> NotificationListResponse:
    return NotificationListResponse(
        notifications=session.tracker.notifications,
        unread_count=session.tracker.unread_count,
    )


@router.get("/", response_model=NotificationListResponse)
def get_notifications(session: UserSession = Depends(get_session)):
    """Fetch notifications and the unread counter."""
    session.tracker.load(session.user_id)
    session.notifications_loaded = True
    return _listing(session)


@router.post("/{notification_id}/read", response_model=Notification)
def mark_notification_read(notification_id: str, session: UserSession = Depends(get_session)):
    return session.ensure_notifications().mark_as_read(notification_id)


@router.post("/read-all", response_model=NotificationListResponse)
def mark_all_notifications_read(session: UserSession = Depends(get_session)):
    session.ensure_notifications().mark_all_as_read(session.user_id)
    return _listing(session)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: str, session: UserSession = Depends(get_session)):
    session.ensure_notifications().delete(notification_id)

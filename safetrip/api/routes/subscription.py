from fastapi import APIRouter, Depends

from safetrip.api.deps import get_session
from safetrip.schemas.subscription import SubscriptionResponse
from safetrip.services.session import UserSession

router = APIRouter(prefix="/subscription", tags=["Subscription"])


@router.get("/", response_model=SubscriptionResponse)
def get_subscription(session: UserSession = Depends(get_session)):
    """Billing entitlement and, during a trial, the days left."""
    service = session.subscription
    service.refresh(session.user_id)
    state = service.state()
    return SubscriptionResponse(
        state=state,
        is_subscribed=state in ("active", "trial"),
        subscription=service.status,
        trial=service.trial(),
    )

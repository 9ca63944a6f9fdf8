from typing import Optional

from safetrip.models.subscription import SubscriptionStatus, TrialStatus
from safetrip.schemas.destination import CamelModel


class SubscriptionResponse(CamelModel):
    state: str  # active, trial, expired, none
    is_subscribed: bool
    subscription: Optional[SubscriptionStatus] = None
    trial: TrialStatus

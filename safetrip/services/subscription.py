import math
from datetime import datetime, timedelta, timezone
from typing import Optional

import pydantic
import requests

from safetrip.clients.subscription import SubscriptionClient
from safetrip.core.config import settings
from safetrip.core.exceptions import FetchError
from safetrip.core.logging import get_logger
from safetrip.models.subscription import PeriodType, SubscriptionStatus, TrialStatus

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def trial_expiry(started_at: datetime) -> datetime:
    return started_at + timedelta(days=settings.TRIAL_DURATION_DAYS)


def calculate_trial_status(expires_at: Optional[datetime], now: Optional[datetime] = None) -> TrialStatus:
    """A partial day left counts as a whole day."""
    if expires_at is None:
        return TrialStatus()

    now = now or _utcnow()
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    remaining = (expires_at - now).total_seconds()
    if remaining <= 0:
        return TrialStatus(is_active=False, days_remaining=0, expires_at=expires_at, is_expired=True)

    return TrialStatus(
        is_active=True,
        days_remaining=math.ceil(remaining / SECONDS_PER_DAY),
        expires_at=expires_at,
        is_expired=False,
    )


def subscription_state(status: Optional[SubscriptionStatus], now: Optional[datetime] = None) -> str:
    """One of trial, active, expired or none."""
    if status is None or status.expires_date is None:
        return "none"

    now = now or _utcnow()
    if status.is_active(now):
        return "trial" if status.period_type == PeriodType.TRIAL else "active"
    return "expired"


class SubscriptionService:
    """Read-only view of the billing entitlement."""

    def __init__(self, client: SubscriptionClient):
        self.client = client
        self.status: Optional[SubscriptionStatus] = None

    def refresh(self, user_id: str) -> Optional[SubscriptionStatus]:
        try:
            data = self.client.get_status(user_id)
            self.status = SubscriptionStatus.model_validate(data) if data else None
        except (requests.RequestException, pydantic.ValidationError) as e:
            logger.error(f"Error fetching subscription status: {e}", extra={"user_id": user_id})
            raise FetchError("Could not load subscription status")
        return self.status

    def state(self, now: Optional[datetime] = None) -> str:
        return subscription_state(self.status, now)

    def trial(self, now: Optional[datetime] = None) -> TrialStatus:
        if self.status is None or self.status.period_type != PeriodType.TRIAL:
            return TrialStatus()
        return calculate_trial_status(self.status.expires_date, now)

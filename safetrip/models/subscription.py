from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class PeriodType(str, Enum):
    TRIAL = "trial"
    INTRO = "intro"
    NORMAL = "normal"
    NONE = "none"


class SubscriptionStatus(BaseModel):
    """Billing state mirrored from the third-party billing system."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: Optional[str] = None
    expires_date: Optional[datetime] = None
    will_renew: bool = False
    period_type: PeriodType = PeriodType.NONE

    @field_validator("expires_date")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_active(self, now: datetime) -> bool:
        return self.expires_date is not None and self.expires_date > now


class TrialStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_active: bool = False
    days_remaining: int = 0
    expires_at: Optional[datetime] = None
    is_expired: bool = False

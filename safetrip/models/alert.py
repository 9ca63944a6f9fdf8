from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Ranking weights; anything not listed sorts after "low"
SEVERITY_WEIGHTS = {
    Severity.CRITICAL.value: 4,
    Severity.HIGH.value: 3,
    Severity.MEDIUM.value: 2,
    Severity.LOW.value: 1,
}

ALERT_TYPES = (
    "weather",
    "security",
    "health",
    "transportation",
    "safety",
    "scam",
    "news",
    "event",
)


class Alert(BaseModel):
    """Unified safety, news, event or scam notice."""

    id: str
    title: str
    description: str = ""
    # Kept as free text: feeds occasionally send values outside Severity
    severity: str = Severity.LOW.value
    location: str = ""
    timestamp: datetime
    read: bool = False
    type: str = "safety"
    source: str = ""
    tips: List[str] = Field(default_factory=list)

    @field_validator("severity", "type", mode="before")
    @classmethod
    def lower_case(cls, v):
        if isinstance(v, Enum):
            v = v.value
        return str(v).strip().lower() if v is not None else v

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Feeds mix date-only and zoned timestamps; keep them comparable
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def severity_weight(severity: str) -> int:
    return SEVERITY_WEIGHTS.get(str(severity).lower(), 0)

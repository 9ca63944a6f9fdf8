from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DestinationStatus(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Destination attribute -> travel_plans column on the backend
RECORD_FIELDS = {
    "id": "id",
    "user_id": "user_id",
    "destination_name": "destination",
    "start_date": "start_date",
    "end_date": "end_date",
    "status": "status",
    "alerts_enabled": "alerts_enabled",
    "created_at": "created_at",
}


class Destination(BaseModel):
    """A traveler's trip to a place over a date range (a.k.a. travel plan)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    destination_name: str
    start_date: date
    end_date: date
    status: DestinationStatus = DestinationStatus.PLANNED
    alerts_enabled: bool = True
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Destination":
        """Build a destination from a backend travel_plans row."""
        data = {
            attr: record[column]
            for attr, column in RECORD_FIELDS.items()
            if record.get(column) is not None
        }
        data["id"] = str(record["id"])
        # Open-ended plans are stored without an end date
        data.setdefault("end_date", data.get("start_date"))
        return cls(**data)


def to_record(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Translate destination attributes into backend column names."""
    record = {}
    for attr, value in fields.items():
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        record[RECORD_FIELDS.get(attr, attr)] = value
    return record

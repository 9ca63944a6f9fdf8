from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import date

from safetrip.models.destination import Destination, DestinationStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DestinationCreate(CamelModel):
    # Everything optional so missing fields reach the store's own validation
    destination_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: DestinationStatus = DestinationStatus.PLANNED
    alerts_enabled: bool = True


class DestinationUpdate(CamelModel):
    destination_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[DestinationStatus] = None
    alerts_enabled: Optional[bool] = None


class CurrentDestination(CamelModel):
    id: Optional[str] = None


class DestinationListResponse(CamelModel):
    destinations: List[Destination]
    current: Optional[Destination] = None
    offline: bool = False
    error: Optional[str] = None

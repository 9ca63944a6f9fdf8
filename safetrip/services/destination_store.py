"""
Destination Store: the traveler's destinations and the currently active one.

Writes go to the remote travel-plans service first and are applied to the
in-memory cache only once it accepts them. Every successful change is
mirrored into local key-value storage, which `load` falls back to when the
remote service cannot be reached. Concurrent writes to the same destination
are last-write-wins.
"""
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import pydantic
import requests

from safetrip.clients.statistics import StatisticsClient
from safetrip.clients.storage import KeyValueStore
from safetrip.clients.travel_plans import TravelPlansClient
from safetrip.core.exceptions import FetchError, NotFoundError, PersistenceError, ValidationError
from safetrip.core.logging import get_logger
from safetrip.models.destination import Destination, DestinationStatus, to_record
from safetrip.schemas.destination import DestinationCreate, DestinationUpdate

logger = get_logger(__name__)

DESTINATIONS_KEY = "destinations:{user_id}"
LAST_LOCATION_KEY = "last_location:{user_id}"


def _parse(schema, data):
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(errors)


class DestinationStore:

    def __init__(
            self,
            user_id: str,
            plans: TravelPlansClient,
            storage: KeyValueStore,
            statistics: Optional[StatisticsClient] = None,
            today: Callable[[], date] = date.today,
    ):
        self.user_id = user_id
        self.plans = plans
        self.storage = storage
        self.statistics = statistics
        self.today = today

        self._destinations: List[Destination] = []
        self._current: Optional[Destination] = None
        self.last_error: Optional[FetchError] = None

    @property
    def current_destination(self) -> Optional[Destination]:
        return self._current

    @property
    def is_offline(self) -> bool:
        return self.last_error is not None

    def list_destinations(self) -> List[Destination]:
        return list(self._destinations)

    def get(self, destination_id: str) -> Destination:
        for destination in self._destinations:
            if destination.id == destination_id:
                return destination
        raise NotFoundError(f"Destination with ID {destination_id} not found")

    # Loading

    def load(self, user_id: Optional[str] = None) -> List[Destination]:
        """
        Fetch the traveler's destinations and pick the active one.

        A remote failure does not raise: the last local mirror is served
        instead (or the cache is left as is) and `last_error` is set.
        """
        if user_id is not None:
            self.user_id = user_id

        try:
            self.plans.auto_activate(self.user_id)
        except requests.RequestException as e:
            logger.warning(f"Auto-activation failed: {e}", extra={"user_id": self.user_id})

        try:
            destinations = [Destination.from_record(r) for r in self.plans.list_by_user(self.user_id)]
        except (requests.RequestException, KeyError, pydantic.ValidationError) as e:
            logger.error(f"Error fetching destinations: {e}", extra={"user_id": self.user_id})
            self.last_error = FetchError("Could not reach the travel plans service, showing saved data")
            cached = self._read_mirror()
            if cached is not None:
                self._destinations = cached
                self._current = self._select_active(cached)
            return self.list_destinations()

        self._destinations = destinations
        self._current = self._select_active(self._destinations)
        self.last_error = None
        self._mirror()

        logger.info(
            "Destinations loaded",
            extra={"user_id": self.user_id, "count": len(self._destinations)},
        )
        return self.list_destinations()

    def _select_active(self, destinations: List[Destination]) -> Optional[Destination]:
        for destination in destinations:
            if destination.status == DestinationStatus.ACTIVE:
                return destination

        today = self.today()
        upcoming = [
            d for d in destinations
            if d.status == DestinationStatus.PLANNED and d.start_date >= today
        ]
        if upcoming:
            return min(upcoming, key=lambda d: d.start_date)

        return destinations[0] if destinations else None

    # Mutations

    def add(self, data: Union[DestinationCreate, Mapping[str, Any]]) -> Destination:
        """Validate, persist remotely, then append. Ids are server-assigned."""
        new = _parse(DestinationCreate, data)
        self._validate_new(new)

        fields = new.model_dump()
        fields["destination_name"] = new.destination_name.strip()

        try:
            record = self.plans.create(self.user_id, to_record(fields))
        except requests.RequestException as e:
            logger.error(f"Error creating destination: {e}", extra={"user_id": self.user_id})
            raise PersistenceError("Could not save the destination")

        destination = Destination.from_record(record)
        self._destinations.append(destination)
        self._after_change()

        logger.info("Destination added", extra={"user_id": self.user_id, "destination_id": destination.id})
        return destination

    def _validate_new(self, new: DestinationCreate):
        if not new.destination_name or not new.destination_name.strip():
            raise ValidationError("Destination is required")
        if new.start_date is None:
            raise ValidationError("Start date is required")
        if new.end_date is None:
            raise ValidationError("End date is required")
        if new.start_date >= new.end_date:
            raise ValidationError("End date must be after start date")
        if new.start_date < self.today():
            raise ValidationError("Start date cannot be in the past")

    def remove(self, destination_id: str) -> None:
        self.get(destination_id)

        try:
            self.plans.delete(destination_id)
        except requests.RequestException as e:
            logger.error(f"Error deleting destination: {e}", extra={"destination_id": destination_id})
            raise PersistenceError("Could not delete the destination")

        self._destinations = [d for d in self._destinations if d.id != destination_id]
        if self._current is not None and self._current.id == destination_id:
            self._current = None
        self._after_change()

    def update(
            self,
            destination_id: str,
            data: Union[DestinationUpdate, Mapping[str, Any]],
    ) -> Destination:
        """
        Persist a partial update, then apply the same change locally.

        On failure nothing is rolled back locally; the caller should reload.
        """
        existing = self.get(destination_id)
        changes = _parse(DestinationUpdate, data).model_dump(exclude_unset=True)
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return existing

        start = changes.get("start_date", existing.start_date)
        end = changes.get("end_date", existing.end_date)
        if start >= end:
            raise ValidationError("End date must be after start date")

        try:
            self.plans.update(destination_id, to_record(changes))
        except requests.RequestException as e:
            logger.error(f"Error updating destination: {e}", extra={"destination_id": destination_id})
            raise PersistenceError("Could not update the destination")

        updated = self._apply(destination_id, changes)
        self._after_change()
        return updated

    def _apply(self, destination_id: str, changes: Dict[str, Any]) -> Destination:
        updated = None
        for index, destination in enumerate(self._destinations):
            if destination.id == destination_id:
                updated = destination.model_copy(update=changes)
                self._destinations[index] = updated
        if self._current is not None and self._current.id == destination_id:
            self._current = self._current.model_copy(update=changes)
        return updated

    def activate(self, destination_id: str) -> Destination:
        """
        Make one destination the only active one.

        The backend demotes the others in the same transaction, so a failure
        leaves both sides unchanged.
        """
        self.get(destination_id)

        try:
            self.plans.set_active(self.user_id, destination_id)
        except requests.RequestException as e:
            logger.error(f"Error activating destination: {e}", extra={"destination_id": destination_id})
            raise PersistenceError("Could not activate the destination")

        activated = None
        for index, destination in enumerate(self._destinations):
            if destination.id == destination_id:
                activated = destination.model_copy(update={"status": DestinationStatus.ACTIVE})
                self._destinations[index] = activated
            elif destination.status == DestinationStatus.ACTIVE:
                self._destinations[index] = destination.model_copy(
                    update={"status": DestinationStatus.PLANNED}
                )
        self._current = activated
        self._after_change()
        return activated

    def set_active(self, destination: Optional[Destination]) -> None:
        """Point the session at a destination; does not touch any status."""
        self._current = destination

    # Queries

    def get_active_alert_eligible(self) -> List[Destination]:
        today = self.today()
        return [
            d for d in self._destinations
            if d.alerts_enabled and d.status == DestinationStatus.ACTIVE and d.contains(today)
        ]

    def get_upcoming(self) -> List[Destination]:
        today = self.today()
        return [
            d for d in self._destinations
            if d.status == DestinationStatus.PLANNED and d.start_date > today
        ]

    # Local storage

    def remember_location(self, location: Dict[str, Any]) -> None:
        self.storage.set(LAST_LOCATION_KEY.format(user_id=self.user_id), location)

    def last_known_location(self) -> Optional[Dict[str, Any]]:
        return self.storage.get(LAST_LOCATION_KEY.format(user_id=self.user_id))

    def _mirror(self):
        self.storage.set(
            DESTINATIONS_KEY.format(user_id=self.user_id),
            [d.model_dump(mode="json") for d in self._destinations],
        )

    def _read_mirror(self) -> Optional[List[Destination]]:
        saved = self.storage.get(DESTINATIONS_KEY.format(user_id=self.user_id))
        if saved is None:
            return None
        try:
            return [Destination.model_validate(item) for item in saved]
        except pydantic.ValidationError:
            logger.warning("Ignoring unreadable destination mirror", extra={"user_id": self.user_id})
            return None

    def _after_change(self):
        self._mirror()
        self._sync_statistics()

    def _sync_statistics(self):
        if self.statistics is None:
            return
        try:
            self.statistics.update_user_statistics(
                self.user_id, {"travel_plans_count": len(self._destinations)}
            )
        except requests.RequestException as e:
            logger.warning(f"Error updating user statistics: {e}", extra={"user_id": self.user_id})

"""
Per-user service objects.

Each traveler gets one `UserSession` holding their Destination Store,
Alert Aggregator, Notification Tracker and subscription view. Sessions live
in a process-wide, size-bounded `SessionRegistry` and are loaded on first
use.
"""
import threading
from collections import OrderedDict
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from safetrip.clients.feeds import (
    EventsFeedClient,
    NewsFeedClient,
    SafetyAlertsClient,
    ScamFeedClient,
    WeatherFeedClient,
)
from safetrip.clients.notifications import NotificationsClient
from safetrip.clients.statistics import StatisticsClient
from safetrip.clients.storage import KeyValueStore
from safetrip.clients.subscription import SubscriptionClient
from safetrip.clients.travel_plans import TravelPlansClient
from safetrip.core.config import settings
from safetrip.core.exceptions import FetchError
from safetrip.core.logging import get_logger
from safetrip.models.alert import Alert
from safetrip.services.alert_aggregator import AlertAggregator, unread_count
from safetrip.services.destination_store import DestinationStore
from safetrip.services.notification_tracker import NotificationTracker
from safetrip.services.subscription import SubscriptionService

logger = get_logger(__name__)


class UserSession:

    def __init__(
            self,
            user_id: str,
            store: DestinationStore,
            aggregator: AlertAggregator,
            tracker: NotificationTracker,
            subscription: SubscriptionService,
    ):
        self.user_id = user_id
        self.store = store
        self.aggregator = aggregator
        self.tracker = tracker
        self.subscription = subscription
        self.notifications_loaded = False

    def start(self):
        self.store.load(self.user_id)

    def alert_feed(self, tags: Optional[Sequence[str]] = None, refresh: bool = False) -> Tuple[List[Alert], bool]:
        """
        Ranked alerts for the current destination, plus a stale flag.

        The collection is refetched on first use and when the current
        destination changed since the last fetch, going through the feed
        cache. `refresh` refetches every source regardless of the cache. A
        failed refetch serves the previous collection as stale.
        """
        destination = self.store.current_destination
        location = destination.destination_name if destination else None

        stale = False
        if refresh or not self.aggregator.loaded or self.aggregator.location != location:
            try:
                self.aggregator.refresh(location, use_cache=not refresh)
                stale = self.aggregator.is_stale
            except FetchError:
                if not self.aggregator.loaded:
                    raise
                logger.warning("Serving previous alerts", extra={"user_id": self.user_id})
                stale = True

        return self.aggregator.feed(destination, tags), stale

    def unread_alerts(self) -> int:
        """Unread alerts for the current destination, ignoring category tags."""
        return unread_count(self.aggregator.feed(self.store.current_destination))

    def ensure_notifications(self) -> NotificationTracker:
        if not self.notifications_loaded:
            self.tracker.load(self.user_id)
            self.notifications_loaded = True
        return self.tracker


SessionFactory = Callable[[str], UserSession]


def build_feed_aggregator(user_id: Optional[str] = None, storage: Optional[KeyValueStore] = None) -> AlertAggregator:
    return AlertAggregator(
        user_id,
        safety=SafetyAlertsClient(),
        storage=storage or KeyValueStore(),
        news=NewsFeedClient(),
        events=EventsFeedClient(),
        scams=ScamFeedClient(),
        weather=WeatherFeedClient(),
    )


def build_session(
        user_id: str,
        storage: Optional[KeyValueStore] = None,
        today: Callable[[], date] = date.today,
) -> UserSession:
    """Wire a session against the configured backend, feeds and Redis."""
    storage = storage or KeyValueStore()
    return UserSession(
        user_id=user_id,
        store=DestinationStore(
            user_id,
            plans=TravelPlansClient(),
            storage=storage,
            statistics=StatisticsClient(),
            today=today,
        ),
        aggregator=build_feed_aggregator(user_id, storage),
        tracker=NotificationTracker(user_id, NotificationsClient()),
        subscription=SubscriptionService(SubscriptionClient()),
    )


class _Slot:
    """A registered session and whether its first load has finished."""

    def __init__(self, session: UserSession):
        self.session = session
        self.started = threading.Event()
        self.failed = False


class SessionRegistry:
    """
    Process-wide user id -> started `UserSession` map.

    Concurrent first requests for the same traveler wait for a single load.
    Past `max_sessions`, the least recently used session is dropped; that
    traveler is loaded again from the backend on their next request.
    """

    def __init__(self, factory: SessionFactory = build_session, max_sessions: int = None):
        self.factory = factory
        self.max_sessions = max_sessions or settings.SESSION_REGISTRY_SIZE
        self._sessions: "OrderedDict[str, _Slot]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> UserSession:
        while True:
            with self._lock:
                slot = self._sessions.get(user_id)
                owner = slot is None
                if owner:
                    slot = _Slot(self.factory(user_id))
                    self._sessions[user_id] = slot
                    self._evict()
                else:
                    self._sessions.move_to_end(user_id)

            if owner:
                return self._start(user_id, slot)

            slot.started.wait()
            if not slot.failed:
                return slot.session
            # The load that was in progress failed; try a fresh session

    def _start(self, user_id: str, slot: _Slot) -> UserSession:
        try:
            slot.session.start()
        except Exception:
            slot.failed = True
            with self._lock:
                if self._sessions.get(user_id) is slot:
                    del self._sessions[user_id]
            raise
        finally:
            slot.started.set()

        logger.info("Session started", extra={"user_id": user_id, "sessions": len(self._sessions)})
        return slot.session

    def _evict(self):
        while len(self._sessions) > self.max_sessions:
            user_id, _ = self._sessions.popitem(last=False)
            logger.info("Session evicted", extra={"user_id": user_id})

    def drop(self, user_id: str) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def __len__(self):
        return len(self._sessions)

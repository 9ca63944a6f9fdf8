"""
Alert Aggregator: one ranked, de-duplicated, filterable alert feed.

Alerts come from the backend safety feed plus optional news, weather,
events and scam sources. They are normalized into `Alert` one record at a
time, cached per source in local key-value storage, then scoped to the
active destination, narrowed by category tags and ranked, in that order.
"""
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pydantic
import requests

from safetrip.clients.feeds import (
    EventsFeedClient,
    NewsFeedClient,
    SafetyAlertsClient,
    ScamFeedClient,
    WeatherFeedClient,
)
from safetrip.clients.storage import KeyValueStore
from safetrip.core.config import settings
from safetrip.core.exceptions import FetchError, NotFoundError, PersistenceError
from safetrip.core.logging import get_logger
from safetrip.models.alert import Alert, severity_weight
from safetrip.models.destination import Destination
from safetrip.services.normalizers import (
    alert_from_event,
    alert_from_news_article,
    alert_from_safety_record,
    alert_from_scam_record,
    alert_from_weather_alert,
    weather_warnings,
)

logger = get_logger(__name__)

READ_ALERTS_KEY = "read_alerts:{user_id}"
FEED_KEY = "feed:{source}:{location}"
STALE_FEED_KEY = "feed_stale:{source}:{location}"

DestinationMatcher = Callable[[Alert, Destination], bool]
Normalizer = Callable[[Any], Alert]


def location_terms(destination: Destination) -> List[str]:
    """"Bangkok, Thailand" -> ["bangkok", "thailand"]"""
    return [part.strip().lower() for part in destination.destination_name.split(",") if part.strip()]


def substring_match(alert: Alert, destination: Destination) -> bool:
    """
    Fuzzy free-text match of an alert against a destination.

    Over-matches alerts that merely mention the same place name and misses
    alerts that spell the place differently.
    """
    haystacks = (alert.location.lower(), alert.description.lower())
    return any(term in text for term in location_terms(destination) for text in haystacks)


def filter_by_destination(
        alerts: Iterable[Alert],
        destination: Optional[Destination],
        matcher: DestinationMatcher = substring_match,
) -> List[Alert]:
    if destination is None:
        return list(alerts)
    return [alert for alert in alerts if matcher(alert, destination)]


def filter_by_tags(alerts: Iterable[Alert], tags: Optional[Sequence[str]]) -> List[Alert]:
    tags = [tag.lower() for tag in (tags or []) if tag]
    if not tags:
        return list(alerts)
    return [
        alert for alert in alerts
        if any(
            tag in alert.type.lower() or tag in alert.title.lower() or tag in alert.description.lower()
            for tag in tags
        )
    ]


def rank(alerts: Iterable[Alert]) -> List[Alert]:
    """Severity first (critical > high > medium > low > unknown), newest first on ties."""
    return sorted(alerts, key=lambda a: (severity_weight(a.severity), a.timestamp), reverse=True)


def unread_count(alerts: Iterable[Alert]) -> int:
    return sum(1 for alert in alerts if not alert.read)


def deduplicate(alerts: Iterable[Alert]) -> List[Alert]:
    seen_ids = set()
    seen_headlines = set()
    result = []
    for alert in alerts:
        headline = (alert.title.casefold(), alert.location.casefold())
        if alert.id in seen_ids or headline in seen_headlines:
            continue
        seen_ids.add(alert.id)
        seen_headlines.add(headline)
        result.append(alert)
    return result


class AlertAggregator:

    def __init__(
            self,
            user_id: Optional[str],
            safety: SafetyAlertsClient,
            storage: KeyValueStore,
            news: Optional[NewsFeedClient] = None,
            events: Optional[EventsFeedClient] = None,
            scams: Optional[ScamFeedClient] = None,
            weather: Optional[WeatherFeedClient] = None,
            cache_expiration: int = None,
            matcher: DestinationMatcher = substring_match,
    ):
        self.user_id = user_id
        self.safety = safety
        self.news = news
        self.events = events
        self.scams = scams
        self.weather = weather
        self.storage = storage
        self.cache_expiration = cache_expiration or settings.FEED_CACHE_EXPIRATION
        self.matcher = matcher

        self._alerts: List[Alert] = []
        self._location: Optional[str] = None
        self.loaded = False
        self.failed_sources: List[str] = []

    @property
    def alerts(self) -> List[Alert]:
        return list(self._alerts)

    @property
    def location(self) -> Optional[str]:
        return self._location

    @property
    def is_stale(self) -> bool:
        return bool(self.failed_sources)

    # Fetching

    def _sources(self, location: Optional[str]) -> Dict[str, Tuple[Callable[[], Any], Normalizer]]:
        """Source name -> (fetch the raw records, map one record onto an Alert)."""
        sources = {
            "safety": (lambda: self.safety.list_alerts(location), alert_from_safety_record),
        }
        if location:
            if self.news is not None:
                sources["news"] = (
                    lambda: self.news.search(location),
                    partial(alert_from_news_article, location=location),
                )
            if self.weather is not None:
                sources["weather"] = (
                    lambda: weather_warnings(self.weather.forecast(location)),
                    partial(alert_from_weather_alert, location=location),
                )
            if self.events is not None:
                sources["events"] = (
                    lambda: self.events.search(location),
                    partial(alert_from_event, location=location),
                )
            if self.scams is not None:
                sources["scams"] = (lambda: self.scams.reports_for(location), alert_from_scam_record)
        return sources

    def _cached(self, key: str) -> Optional[List[Alert]]:
        saved = self.storage.get(key)
        if saved is None:
            return None
        try:
            return [Alert.model_validate(item) for item in saved]
        except pydantic.ValidationError:
            return None

    @staticmethod
    def _normalize(source: str, records: Iterable[Any], normalize: Normalizer) -> List[Alert]:
        alerts = []
        for record in records:
            try:
                alerts.append(normalize(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed {source} record: {e!r}", extra={"source": source})
        return alerts

    def _fetch_source(
            self,
            source: str,
            location: Optional[str],
            fetch: Callable[[], Any],
            normalize: Normalizer,
            use_cache: bool = True,
    ) -> Optional[List[Alert]]:
        location_key = (location or "all").lower()
        cache_key = FEED_KEY.format(source=source, location=location_key)
        stale_key = STALE_FEED_KEY.format(source=source, location=location_key)

        if use_cache:
            cached = self._cached(cache_key)
            if cached is not None:
                return cached

        try:
            alerts = self._normalize(source, fetch() or [], normalize)
        except (requests.RequestException, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Error fetching {source} alerts: {e}", extra={"location": location_key})
            self.failed_sources.append(source)
            return self._cached(stale_key)

        payload = [alert.model_dump(mode="json") for alert in alerts]
        self.storage.set(cache_key, payload, expire=self.cache_expiration)
        self.storage.set(stale_key, payload)
        return alerts

    def collect(self, location: Optional[str], use_cache: bool = True) -> List[Alert]:
        """
        Pull every source for a location without touching session state.

        With `use_cache=False` fresh cache entries are ignored; the fetched
        results are still written back.
        """
        self.failed_sources = []
        collected = []
        answered = 0
        for source, (fetch, normalize) in self._sources(location).items():
            alerts = self._fetch_source(source, location, fetch, normalize, use_cache)
            if alerts is not None:
                answered += 1
                collected.extend(alerts)

        if answered == 0:
            raise FetchError("Could not load alerts")
        return deduplicate(collected)

    def refresh(self, location: Optional[str] = None, use_cache: bool = True) -> List[Alert]:
        """
        Refetch the alert collection for a location.

        Raises FetchError (keeping the previous alerts) only when no source
        answered and nothing was cached.
        """
        alerts = self.collect(location, use_cache)
        read_ids = self._read_ids()
        self._alerts = [
            alert.model_copy(update={"read": True}) if alert.id in read_ids else alert
            for alert in alerts
        ]
        self._location = location
        self.loaded = True
        return self.alerts

    def feed(self, destination: Optional[Destination], tags: Optional[Sequence[str]] = None) -> List[Alert]:
        scoped = filter_by_destination(self._alerts, destination, self.matcher)
        return rank(filter_by_tags(scoped, tags))

    def unread_count(self) -> int:
        return unread_count(self._alerts)

    # Read state

    def mark_read(self, alert_id: str) -> List[Alert]:
        """Confirm the read remotely, then refetch everything, bypassing the feed cache."""
        self._find(alert_id)
        try:
            self.safety.mark_read(alert_id, self.user_id)
        except requests.RequestException as e:
            logger.error(f"Error marking alert as read: {e}", extra={"alert_id": alert_id})
            raise PersistenceError("Could not mark the alert as read")

        self._remember_read(alert_id)
        return self.refresh(self._location, use_cache=False)

    def mark_read_local(self, alert_id: str) -> Alert:
        """
        Flip the alert to read immediately, then tell the backend.

        A remote failure is raised but the local flip stays.
        """
        index = self._find(alert_id)
        alert = self._alerts[index].model_copy(update={"read": True})
        self._alerts[index] = alert
        self._remember_read(alert_id)

        try:
            self.safety.mark_read(alert_id, self.user_id)
        except requests.RequestException as e:
            logger.error(f"Error marking alert as read: {e}", extra={"alert_id": alert_id})
            raise PersistenceError("Alert marked as read locally but the server did not confirm it")
        return alert

    def _find(self, alert_id: str) -> int:
        for index, alert in enumerate(self._alerts):
            if alert.id == alert_id:
                return index
        raise NotFoundError(f"Alert with ID {alert_id} not found")

    def _read_ids(self) -> Set[str]:
        if not self.user_id:
            return set()
        return set(self.storage.get(READ_ALERTS_KEY.format(user_id=self.user_id)) or [])

    def _remember_read(self, alert_id: str):
        if not self.user_id:
            return
        read_ids = self._read_ids()
        read_ids.add(alert_id)
        self.storage.set(READ_ALERTS_KEY.format(user_id=self.user_id), sorted(read_ids))

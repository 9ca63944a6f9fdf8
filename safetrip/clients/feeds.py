"""
Read-only alert sources.

Each client returns the source's raw records; mapping onto the unified
Alert shape lives in `safetrip.services.normalizers`.
"""
from typing import Any, Dict, List, Optional

from safetrip.clients.base import BackendClient
from safetrip.core.config import settings


class SafetyAlertsClient(BackendClient):
    """Government/safety advisories stored by the backend."""

    def list_alerts(self, destination: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"destination": destination} if destination else None
        return self._request("GET", "/safety-alerts", params=params) or []

    def mark_read(self, alert_id: str, user_id: str) -> None:
        self._request("POST", f"/safety-alerts/{alert_id}/read", json={"user_id": user_id})


class NewsFeedClient(BackendClient):
    """GNews search for travel-safety news around a location."""

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(base_url=kwargs.pop("base_url", settings.NEWS_API_URL), api_key="", **kwargs)
        self.api_key = api_key or settings.NEWS_API_KEY

    def search(self, location: str, max_results: int = 10) -> List[Dict[str, Any]]:
        params = {
            "q": f"{location} travel safety",
            "lang": "en",
            "max": max_results,
            "token": self.api_key,
        }
        data = self._request("GET", "/search", params=params) or {}
        return data.get("articles", [])


class EventsFeedClient(BackendClient):
    """Eventbrite search for events near a location."""

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(
            base_url=kwargs.pop("base_url", settings.EVENTS_API_URL),
            api_key=api_key or settings.EVENTS_API_KEY,
            **kwargs,
        )

    def search(self, location: str, radius_km: int = None) -> List[Dict[str, Any]]:
        params = {
            "location.address": location,
            "location.within": f"{radius_km or settings.EVENTS_SEARCH_RADIUS_KM}km",
            "expand": "venue",
        }
        data = self._request("GET", "/events/search/", params=params) or {}
        return data.get("events", [])


class ScamFeedClient(BackendClient):
    """Travel-alert agent that scrapes scam and advisory reports per country."""

    def __init__(self, **kwargs):
        super().__init__(base_url=kwargs.pop("base_url", settings.ALERT_AGENT_URL), api_key="", **kwargs)

    def reports_for(self, location: str, limit: int = 100) -> List[Dict[str, Any]]:
        # "Bangkok, Thailand" -> "Thailand"
        country = location.split(",")[-1].strip()
        if not country:
            return []
        scrape = self._request("GET", f"/api/quick-alerts/{country}") or {}
        csv_file = (scrape.get("data") or {}).get("csv_file")
        if not csv_file:
            return []
        data = self._request("GET", f"/api/data/{csv_file}", params={"limit": limit}) or {}
        return data.get("data", [])


class WeatherFeedClient(BackendClient):
    """weatherapi.com forecast with official alerts, for weather warnings around a location."""

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(base_url=kwargs.pop("base_url", settings.WEATHER_API_URL), api_key="", **kwargs)
        self.api_key = api_key or settings.WEATHER_API_KEY

    def forecast(self, location: str, days: int = None) -> Dict[str, Any]:
        params = {
            "q": location,
            "days": min(days or settings.WEATHER_FORECAST_DAYS, 10),
            "aqi": "no",
            "alerts": "yes",
            "key": self.api_key,
        }
        return self._request("GET", "/forecast.json", params=params) or {}

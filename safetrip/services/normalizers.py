"""
Map source-specific feed records onto the unified Alert model.
"""
import hashlib
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from safetrip.models.alert import Alert, ALERT_TYPES, Severity

NUMERIC_SEVERITY = {
    1: Severity.LOW.value,
    2: Severity.MEDIUM.value,
    3: Severity.HIGH.value,
    4: Severity.CRITICAL.value,
}

SAFETY_TYPE_MAP = {
    "warning": "safety",
    "danger": "security",
    "info": "health",
}

NEWS_CATEGORY_TYPES = {
    "weather": "weather",
    "safety": "security",
    "travel": "transportation",
    "general": "news",
}

# Checked in order, first hit wins
NEWS_SEVERITY_RULES: Sequence[Tuple[str, Sequence[str]]] = (
    (Severity.HIGH.value, ("emergency", "urgent", "breaking", "alert", "warning",
                           "danger", "critical", "evacuation")),
    (Severity.MEDIUM.value, ("caution", "advisory", "notice", "update", "change", "disruption")),
)

TRAVEL_SAFETY_SEVERITY_RULES: Sequence[Tuple[str, Sequence[str]]] = (
    (Severity.CRITICAL.value, ("do not travel", "emergency", "evacuate")),
    (Severity.HIGH.value, ("reconsider travel", "high risk", "avoid")),
    (Severity.MEDIUM.value, ("exercise caution", "increased caution")),
)

NEWS_CATEGORY_RULES: Sequence[Tuple[str, Sequence[str]]] = (
    ("travel", ("travel", "tourism", "flight", "airport")),
    ("safety", ("safety", "security", "crime", "alert")),
    ("weather", ("weather", "storm", "hurricane", "flood")),
)


def _match_rules(text: str, rules, default: str) -> str:
    text = text.lower()
    for label, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return label
    return default


def severity_from_text(text: str) -> str:
    """Severity implied by travel-advisory wording."""
    return _match_rules(text, TRAVEL_SAFETY_SEVERITY_RULES, Severity.LOW.value)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stable_id(prefix: str, *parts: Any) -> str:
    digest = hashlib.sha1("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def alert_from_safety_record(record: Dict[str, Any]) -> Alert:
    """Backend safety_alerts row."""
    severity = record.get("severity")
    if isinstance(severity, (int, float)):
        severity = NUMERIC_SEVERITY.get(int(severity), Severity.LOW.value)

    alert_type = str(record.get("alert_type") or "").lower()
    if alert_type not in ALERT_TYPES:
        alert_type = SAFETY_TYPE_MAP.get(alert_type, "safety")

    title = record.get("title") or ""
    message = record.get("message") or ""

    return Alert(
        id=str(record["id"]),
        title=title,
        description=message,
        severity=severity or severity_from_text(f"{title} {message}"),
        location=record.get("destination") or "",
        timestamp=record.get("created_at") or _now(),
        read=bool(record.get("read", False)),
        type=alert_type,
        source=record.get("source") or "Safety advisories",
        tips=list(record.get("tips") or []),
    )


def _source_name(source: Any) -> Optional[str]:
    # GNews sends {"name": ..., "url": ...}; some mirrors send the bare name
    if isinstance(source, dict):
        return source.get("name")
    return source


def alert_from_news_article(article: Dict[str, Any], location: str) -> Alert:
    """GNews article."""
    title = article.get("title") or ""
    description = article.get("description") or article.get("content") or ""
    headline = f"{title} {description}"
    category = _match_rules(headline, NEWS_CATEGORY_RULES, "general")

    return Alert(
        id=_stable_id("news", article.get("url") or title),
        title=title,
        description=description,
        severity=_match_rules(headline, NEWS_SEVERITY_RULES, Severity.LOW.value),
        location=location,
        timestamp=article.get("publishedAt") or _now(),
        type=NEWS_CATEGORY_TYPES[category],
        source=_source_name(article.get("source")) or "News",
    )


def alert_from_event(event: Dict[str, Any], location: str) -> Alert:
    """Eventbrite event; large events matter to travelers mostly for crowds and closures."""
    venue = event.get("venue") or {}
    city = (venue.get("address") or {}).get("city")

    return Alert(
        id=f"event-{event['id']}",
        title=(event.get("name") or {}).get("text") or "",
        description=(event.get("description") or {}).get("text") or "",
        severity=Severity.LOW.value,
        location=city or venue.get("name") or location,
        timestamp=(event.get("start") or {}).get("utc") or _now(),
        type="event",
        source="Eventbrite",
    )


def _split_tips(tips: Optional[str]) -> List[str]:
    if not tips:
        return []
    return [tip.strip() for tip in re.split(r"[;\n]|\s*\|\s*", tips) if tip.strip()]


def alert_from_scam_record(record: Dict[str, Any]) -> Alert:
    """Travel-alert agent scam/advisory report."""
    severity = record.get("severity")
    if not severity:
        risk = record.get("risk_rating") or 1
        severity = NUMERIC_SEVERITY.get(min(4, max(1, round(float(risk) * 4 / 5))), Severity.LOW.value)

    scam_type = record.get("scam_type") or "Scam report"
    location = record.get("location") or ""
    reported = record.get("date_reported") or record.get("scraped_at")

    return Alert(
        id=_stable_id("scam", location, scam_type, record.get("source_url"), reported),
        title=scam_type,
        description=record.get("description") or "",
        severity=severity,
        location=location,
        timestamp=reported or _now(),
        type="scam",
        source=record.get("source_url") or "Travel alert agent",
        tips=_split_tips(record.get("prevention_tips")),
    )


# weatherapi.com official alert severities
WEATHER_SEVERITY = {
    "extreme": Severity.CRITICAL.value,
    "severe": Severity.HIGH.value,
    "moderate": Severity.MEDIUM.value,
    "minor": Severity.LOW.value,
}

EXTREME_HEAT_C = 35
FREEZING_C = 0
HIGH_UV_INDEX = 8
STRONG_WIND_KPH = 50
HEAVY_RAIN_MM = 25


def weather_warnings(forecast: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Warnings for a weatherapi.com forecast.

    Official alerts are passed through as-is. Extreme heat, freezing, high UV,
    strong wind and heavy rain in the forecast days are added in the same
    record shape.
    """
    if not forecast:
        return []

    place = forecast.get("location") or {}
    area = ", ".join(part for part in (place.get("name"), place.get("country")) if part)
    records = list((forecast.get("alerts") or {}).get("alert") or [])

    current = forecast.get("current") or {}
    observed = current.get("last_updated_epoch")

    def warning(event, severity, desc, effective=observed):
        return {"event": event, "headline": event, "severity": severity,
                "desc": desc, "areas": area, "effective": effective}

    temperature = current.get("temp_c")
    if temperature is not None:
        if temperature > EXTREME_HEAT_C:
            records.append(warning(
                "Extreme Heat Warning", Severity.HIGH.value,
                f"Very high temperature of {temperature}°C. Stay hydrated and avoid prolonged sun exposure.",
            ))
        elif temperature < FREEZING_C:
            records.append(warning(
                "Freezing Temperature Alert", Severity.MEDIUM.value,
                f"Below freezing temperature of {temperature}°C. Dress warmly and be cautious of icy conditions.",
            ))

    uv = current.get("uv")
    if uv is not None and uv >= HIGH_UV_INDEX:
        records.append(warning(
            "High UV Index Warning", Severity.MEDIUM.value,
            f"Very high UV index of {uv}. Use sunscreen and protective clothing.",
        ))

    wind = current.get("wind_kph")
    if wind is not None and wind > STRONG_WIND_KPH:
        records.append(warning(
            "Strong Wind Alert", Severity.MEDIUM.value,
            f"High wind speeds of {wind} km/h. Be cautious when driving or walking outdoors.",
        ))

    for day in (forecast.get("forecast") or {}).get("forecastday") or []:
        rain = (day.get("day") or {}).get("totalprecip_mm") or 0
        if rain > HEAVY_RAIN_MM:
            records.append(warning(
                "Heavy Rain Expected", Severity.MEDIUM.value,
                f"Heavy rainfall of {rain}mm expected. Plan indoor activities and avoid flood-prone areas.",
                effective=day.get("date"),
            ))

    return records


def alert_from_weather_alert(record: Dict[str, Any], location: str) -> Alert:
    """weatherapi.com alert, official or derived by `weather_warnings`."""
    title = record.get("headline") or record.get("event") or "Weather alert"
    severity = str(record.get("severity") or "").lower()
    effective = record.get("effective")

    return Alert(
        id=_stable_id("weather", location, title, effective),
        title=title,
        description=record.get("desc") or "",
        severity=WEATHER_SEVERITY.get(severity, severity or Severity.MEDIUM.value),
        location=record.get("areas") or location,
        timestamp=effective or _now(),
        type="weather",
        source="WeatherAPI",
        tips=_split_tips(record.get("instruction")),
    )

from datetime import datetime, timezone

import pytest

from safetrip.services.normalizers import (
    alert_from_event,
    alert_from_news_article,
    alert_from_safety_record,
    alert_from_scam_record,
    alert_from_weather_alert,
    severity_from_text,
    weather_warnings,
)


def test_safety_record_with_numeric_severity():
    alert = alert_from_safety_record({
        "id": 42,
        "title": "Civil unrest",
        "message": "Avoid the city centre",
        "severity": 4,
        "destination": "Paris",
        "alert_type": "danger",
        "created_at": "2025-05-20T10:00:00",
    })

    assert alert.id == "42"
    assert alert.severity == "critical"
    assert alert.type == "security"
    assert alert.location == "Paris"
    assert alert.timestamp == datetime(2025, 5, 20, 10, 0, tzinfo=timezone.utc)


def test_safety_record_without_severity_reads_the_wording():
    alert = alert_from_safety_record({
        "id": "7",
        "title": "Reconsider travel",
        "message": "",
        "alert_type": "weather",
    })
    assert alert.severity == "high"
    assert alert.type == "weather"
    assert alert.read is False


def test_severity_from_text():
    assert severity_from_text("Level 4: Do Not Travel") == "critical"
    assert severity_from_text("Exercise increased caution") == "medium"
    assert severity_from_text("Enjoy your stay") == "low"


def test_news_article():
    article = {
        "title": "Breaking: hurricane approaches coast",
        "description": "Storm expected tonight",
        "url": "https://news.example/hurricane",
        "publishedAt": "2025-05-21T08:00:00Z",
        "source": {"name": "Example News"},
    }
    alert = alert_from_news_article(article, "Miami, USA")

    assert alert.severity == "high"
    assert alert.type == "weather"
    assert alert.location == "Miami, USA"
    assert alert.source == "Example News"
    # Same article, same id
    assert alert_from_news_article(dict(article), "Miami, USA").id == alert.id


def test_quiet_news_article_is_low_severity():
    alert = alert_from_news_article({"title": "Museum reopens", "description": "New wing"}, "Rome")
    assert alert.severity == "low"
    assert alert.type == "news"


def test_event():
    alert = alert_from_event({
        "id": "991",
        "name": {"text": "City marathon"},
        "description": {"text": "Road closures downtown"},
        "start": {"utc": "2025-07-04T06:00:00Z"},
        "venue": {"name": "Main square", "address": {"city": "Lisbon"}},
    }, "Lisbon, Portugal")

    assert alert.id == "event-991"
    assert alert.title == "City marathon"
    assert alert.type == "event"
    assert alert.location == "Lisbon"


def test_scam_record_maps_risk_rating_and_tips():
    alert = alert_from_scam_record({
        "location": "Bangkok, Thailand",
        "scam_type": "Gem scam",
        "description": "Tuk-tuk drivers take tourists to gem shops",
        "risk_rating": 5,
        "prevention_tips": "Refuse unsolicited tours; Buy only from licensed shops",
        "source_url": "https://forum.example/thread/1",
        "date_reported": "2025-05-01",
    })

    assert alert.severity == "critical"
    assert alert.type == "scam"
    assert alert.tips == ["Refuse unsolicited tours", "Buy only from licensed shops"]
    assert alert.id.startswith("scam-")


def test_news_article_with_bare_source_name():
    alert = alert_from_news_article({"title": "Port strike", "source": "Reuters"}, "Rotterdam")
    assert alert.source == "Reuters"


def test_scam_record_with_text_risk_rating_is_rejected():
    with pytest.raises(ValueError):
        alert_from_scam_record({"scam_type": "Fake taxi", "risk_rating": "high"})


def test_weather_warnings_from_forecast():
    forecast = {
        "location": {"name": "Seville", "country": "Spain"},
        "current": {"temp_c": 41, "uv": 9, "wind_kph": 12, "last_updated_epoch": 1751356800},
        "forecast": {"forecastday": [
            {"date": "2025-07-01", "day": {"totalprecip_mm": 0}},
            {"date": "2025-07-02", "day": {"totalprecip_mm": 31.5}},
        ]},
        "alerts": {"alert": [{
            "headline": "Red warning for extreme heat",
            "severity": "Extreme",
            "areas": "Andalusia",
            "desc": "Temperatures up to 44C",
            "instruction": "Stay indoors\nDrink water",
            "effective": "2025-07-01T10:00:00+02:00",
        }]},
    }

    alerts = [alert_from_weather_alert(r, "Seville, Spain") for r in weather_warnings(forecast)]

    assert [(a.title, a.severity) for a in alerts] == [
        ("Red warning for extreme heat", "critical"),
        ("Extreme Heat Warning", "high"),
        ("High UV Index Warning", "medium"),
        ("Heavy Rain Expected", "medium"),
    ]
    assert all(a.type == "weather" for a in alerts)
    assert alerts[0].location == "Andalusia"
    assert alerts[0].tips == ["Stay indoors", "Drink water"]
    assert alerts[1].location == "Seville, Spain"
    assert alerts[3].timestamp == datetime(2025, 7, 2, tzinfo=timezone.utc)


def test_calm_forecast_has_no_warnings():
    forecast = {"current": {"temp_c": 22, "uv": 4, "wind_kph": 8}, "forecast": {"forecastday": []}}
    assert weather_warnings(forecast) == []
    assert weather_warnings({}) == []


def test_weather_alert_ids_are_stable():
    record = {"headline": "Storm", "severity": "Severe", "effective": "2025-07-01T00:00:00Z"}
    assert alert_from_weather_alert(record, "Oslo").id == alert_from_weather_alert(dict(record), "Oslo").id
    assert alert_from_weather_alert(record, "Oslo").severity == "high"

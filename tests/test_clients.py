import json
from unittest import mock

import pytest
import redis
import requests

from safetrip.clients.feeds import NewsFeedClient, ScamFeedClient, WeatherFeedClient
from safetrip.clients.notifications import NotificationsClient
from safetrip.clients.storage import KeyValueStore, create_redis_client
from safetrip.clients.travel_plans import TravelPlansClient
from safetrip.core.config import settings


def response(status_code=200, payload=None, url="http://backend.test"):
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    if payload is not None:
        resp._content = json.dumps(payload).encode()
    else:
        resp._content = b""
    return resp


@pytest.fixture
def session():
    session = mock.Mock(spec=requests.Session)
    session.headers = {}
    return session


def test_requests_are_sent_to_backend_with_key(session):
    session.request.return_value = response(payload=[{"id": 1}])
    client = TravelPlansClient(base_url="http://backend.test/", api_key="secret", timeout=3, session=session)

    assert client.list_by_user("user-1") == [{"id": 1}]

    session.request.assert_called_once_with(
        "GET", "http://backend.test/travel-plans", timeout=3, params={"user_id": "user-1"}
    )
    assert session.headers["Authorization"] == "Bearer secret"


def test_set_active_posts_to_activate_endpoint(session):
    session.request.return_value = response(payload={"id": "9", "status": "active"})
    client = TravelPlansClient(base_url="http://backend.test", api_key="", session=session)

    client.set_active("user-1", "9")

    args, kwargs = session.request.call_args
    assert args == ("POST", "http://backend.test/travel-plans/9/activate")
    assert kwargs["json"] == {"user_id": "user-1"}
    assert "Authorization" not in session.headers


def test_http_errors_raise_request_exception(session):
    session.request.return_value = response(status_code=500, payload={"error": "boom"})
    client = TravelPlansClient(base_url="http://backend.test", session=session)

    with pytest.raises(requests.RequestException):
        client.delete("9")


def test_empty_body_returns_none(session):
    session.request.return_value = response(status_code=204)
    client = NotificationsClient(base_url="http://backend.test", session=session)
    assert client.delete("n1") is None


def test_invalid_json_raises_request_exception(session):
    resp = response()
    resp._content = b"<html>"
    session.request.return_value = resp
    client = NotificationsClient(base_url="http://backend.test", session=session)

    with pytest.raises(requests.RequestException):
        client.list_by_user("user-1")


def test_unread_count_reads_count_field(session):
    session.request.return_value = response(payload={"count": 4})
    client = NotificationsClient(base_url="http://backend.test", session=session)
    assert client.get_unread_count("user-1") == 4


def test_news_search_passes_token(session):
    session.request.return_value = response(payload={"articles": [{"title": "t"}]})
    client = NewsFeedClient(api_key="news-key", base_url="https://news.test", session=session)

    assert client.search("Rome") == [{"title": "t"}]
    _, kwargs = session.request.call_args
    assert kwargs["params"]["token"] == "news-key"
    assert kwargs["params"]["q"] == "Rome travel safety"


def test_scam_feed_scrapes_then_reads_csv(session):
    session.request.side_effect = [
        response(payload={"data": {"csv_file": "thailand.csv"}}),
        response(payload={"data": [{"scam_type": "Gem scam"}]}),
    ]
    client = ScamFeedClient(base_url="http://agent.test", session=session)

    assert client.reports_for("Bangkok, Thailand") == [{"scam_type": "Gem scam"}]
    urls = [call.args[1] for call in session.request.call_args_list]
    assert urls == ["http://agent.test/api/quick-alerts/Thailand", "http://agent.test/api/data/thailand.csv"]


def test_weather_forecast_asks_for_alerts(session):
    session.request.return_value = response(payload={"current": {"temp_c": 20}})
    client = WeatherFeedClient(api_key="weather-key", base_url="https://weather.test", session=session)

    assert client.forecast("Oslo") == {"current": {"temp_c": 20}}
    args, kwargs = session.request.call_args
    assert args[1] == "https://weather.test/forecast.json"
    assert kwargs["params"]["alerts"] == "yes"
    assert kwargs["params"]["key"] == "weather-key"
    assert kwargs["params"]["days"] == 3


def test_redis_client_has_socket_timeout():
    client = create_redis_client()
    pool_kwargs = client.connection_pool.connection_kwargs
    assert pool_kwargs["socket_timeout"] == settings.REDIS_SOCKET_TIMEOUT
    assert pool_kwargs["socket_connect_timeout"] == settings.REDIS_SOCKET_TIMEOUT


def test_key_value_store_namespaces_and_serializes():
    redis_client = mock.Mock()
    store = KeyValueStore(client=redis_client, namespace="test")

    store.set("destinations:u1", [{"id": "1"}], expire=30)
    redis_client.setex.assert_called_once_with("test:destinations:u1", 30, '[{"id": "1"}]')

    redis_client.get.return_value = '{"a": 1}'
    assert store.get("k") == {"a": 1}
    redis_client.get.assert_called_with("test:k")


def test_key_value_store_treats_redis_outage_as_miss():
    redis_client = mock.Mock()
    redis_client.get.side_effect = redis.ConnectionError("down")
    redis_client.set.side_effect = redis.ConnectionError("down")
    store = KeyValueStore(client=redis_client, namespace="test")

    assert store.get("k") is None
    assert store.set("k", 1) is False

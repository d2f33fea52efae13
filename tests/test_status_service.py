import pytest
import requests
import responses

from countrydash.config import API_ENDPOINTS, WEBHOOK_COLLECTION
from countrydash.status_service import check_service, check_store, get_system_status
from countrydash.store import DocumentStore, get_client, set_client


@pytest.fixture
def store():
    previous = get_client()
    client = DocumentStore()
    set_client(client)
    yield client
    set_client(previous)


@pytest.fixture
def endpoints(monkeypatch):
    monkeypatch.setattr(API_ENDPOINTS, "countries", "https://countries.example.com")
    monkeypatch.setattr(API_ENDPOINTS, "meteo", "https://meteo.example.com")
    monkeypatch.setattr(API_ENDPOINTS, "currency", "https://currency.example.com")


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def test_get_system_status(store, endpoints, rsps):
    rsps.add(responses.GET, "https://countries.example.com/alpha/no", status=200)
    rsps.add(responses.GET, "https://meteo.example.com/v1/forecast", status=200)
    rsps.add(responses.GET, "https://currency.example.com/latest", status=200)
    store.collection(WEBHOOK_COLLECTION).document("test-webhook").set(
        {"url": "http://example.com", "event": "INVOKE", "country": "NO"}
    )

    status = get_system_status()

    assert status.countries_api == 200
    assert status.meteo_api == 200
    assert status.currency_api == 200
    assert status.notification_db == 200
    assert status.webhooks == 1
    assert status.version == "v1"
    assert status.uptime_in_seconds >= 0
    paths = {call.request.path_url for call in rsps.calls}
    assert "/alpha/no" in paths
    assert "/latest?from=EUR&to=NOK" in paths


def test_check_service_reports_status_code(rsps):
    rsps.add(responses.GET, "https://countries.example.com/alpha/no", status=404)
    assert check_service("https://countries.example.com/alpha/no") == 404


def test_check_service_unreachable(rsps):
    rsps.add(
        responses.GET,
        "https://meteo.example.com/v1/forecast",
        body=requests.ConnectionError("down"),
    )
    assert check_service("https://meteo.example.com/v1/forecast") == 503


def test_check_store_ok(store):
    assert check_store() == 200


def test_check_store_failure_without_store():
    previous = get_client()
    set_client(None)
    try:
        assert check_store() == 503
    finally:
        set_client(previous)


def test_check_store_failure_when_closed(store):
    store.close()
    assert check_store() == 503


def test_status_without_store(endpoints, rsps):
    rsps.add(responses.GET, "https://countries.example.com/alpha/no", status=200)
    rsps.add(responses.GET, "https://meteo.example.com/v1/forecast", status=500)
    rsps.add(responses.GET, "https://currency.example.com/latest", status=200)
    previous = get_client()
    set_client(None)
    try:
        status = get_system_status()
    finally:
        set_client(previous)
    assert status.notification_db == 503
    assert status.webhooks == 0
    assert status.meteo_api == 500
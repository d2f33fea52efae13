import json
import re

import pytest
import responses

from countrydash import repository
from countrydash.config import API_ENDPOINTS
from countrydash.dashboard_service import (
    DashboardService,
    DashboardServiceError,
    RealDashboardService,
    get_populated_dashboard,
)
from countrydash.models import Coordinates, DashboardConfig, FeatureConfig, Webhook
from countrydash.store import DocumentStore, get_client, set_client

COUNTRIES = "https://countries.test"
METEO = "https://meteo.test"
CURRENCY = "https://currency.test"
HOOK_URL = "https://hooks.test/notify"


@pytest.fixture
def store():
    previous = get_client()
    client = DocumentStore()
    set_client(client)
    yield client
    set_client(previous)


@pytest.fixture
def endpoints():
    saved = (API_ENDPOINTS.countries, API_ENDPOINTS.meteo, API_ENDPOINTS.currency)
    API_ENDPOINTS.countries = COUNTRIES
    API_ENDPOINTS.meteo = METEO
    API_ENDPOINTS.currency = CURRENCY
    yield API_ENDPOINTS
    API_ENDPOINTS.countries, API_ENDPOINTS.meteo, API_ENDPOINTS.currency = saved


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


ALL_FEATURES = FeatureConfig(
    capital=True,
    coordinates=True,
    population=True,
    area=True,
    temperature=True,
    precipitation=True,
    target_currencies=["USD", "EUR"],
)


def _stub_services(rsps, temperature=-5.2):
    rsps.add(
        responses.GET,
        f"{COUNTRIES}/alpha/NO",
        json=[
            {
                "capital": ["Mockville"],
                "latlng": [60.0, 10.0],
                "population": 100000,
                "area": 5432.1,
                "currencies": {"NOK": {"name": "Krone"}},
            }
        ],
    )
    rsps.add(
        responses.GET,
        f"{METEO}/v1/forecast",
        json={"current": {"temperature_2m": temperature, "precipitation": 2.1}},
    )
    rsps.add(responses.GET, f"{CURRENCY}/latest", json={"rates": {"USD": 1.1, "EUR": 0.9}})
    rsps.add(responses.POST, HOOK_URL, status=200)


def _hook_events(rsps):
    return [
        json.loads(call.request.body)["event"]
        for call in rsps.calls
        if call.request.method == "POST" and call.request.url == HOOK_URL
    ]


def test_get_populated_dashboard(store, endpoints, rsps):
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(country="Mockland", iso_code="NO", features=ALL_FEATURES)
    )
    _stub_services(rsps)

    result = get_populated_dashboard(dashboard_id)
    assert result.country == "Mockland"
    assert result.iso_code == "NO"
    assert result.features.capital == "Mockville"
    assert result.features.target_currencies["USD"] == 1.1
    assert result.features.coordinates == Coordinates(latitude=60.0, longitude=10.0)
    assert result.features.population == 100000
    assert result.features.area == 5432.1
    assert result.features.temperature == -5.2
    assert result.features.precipitation == 2.1
    assert re.fullmatch(r"\d{8} \d{2}:\d{2}", result.last_retrieval)


def test_low_temperature_and_invoke_webhooks(store, endpoints, rsps):
    repository.save_webhook(Webhook(url=HOOK_URL, event="LOW_TEMP", country="NO"))
    repository.save_webhook(Webhook(url=HOOK_URL, event="INVOKE", country=""))
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(country="Mockland", iso_code="NO", features=ALL_FEATURES)
    )
    _stub_services(rsps)

    result = get_populated_dashboard(dashboard_id)
    assert result.features.temperature == -5.2
    assert _hook_events(rsps) == ["LOW_TEMP", "INVOKE"]


def test_no_low_temperature_webhook_when_warm(store, endpoints, rsps):
    repository.save_webhook(Webhook(url=HOOK_URL, event="LOW_TEMP", country="NO"))
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(country="Mockland", iso_code="NO", features=ALL_FEATURES)
    )
    _stub_services(rsps, temperature=12.0)

    result = get_populated_dashboard(dashboard_id)
    assert result.features.temperature == 12.0
    assert _hook_events(rsps) == []


def test_weather_needs_coordinates(store, endpoints, rsps):
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(
            country="Mockland", iso_code="NO", features=FeatureConfig(temperature=True)
        )
    )
    _stub_services(rsps)

    result = get_populated_dashboard(dashboard_id)
    assert result.features.coordinates is None
    assert result.features.temperature == 0.0
    assert not any("/v1/forecast" in call.request.url for call in rsps.calls)


def test_missing_config(store):
    with pytest.raises(DashboardServiceError, match="failed to fetch dashboard config"):
        get_populated_dashboard("does-not-exist")


def test_country_failure(store, endpoints, rsps):
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(country="Mockland", iso_code="NO", features=ALL_FEATURES)
    )
    rsps.add(responses.GET, f"{COUNTRIES}/alpha/NO", status=500)
    with pytest.raises(DashboardServiceError, match="invalid country response"):
        get_populated_dashboard(dashboard_id)


def test_currency_failure(store, endpoints, rsps):
    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(
            country="Mockland",
            iso_code="NO",
            features=FeatureConfig(target_currencies=["USD"]),
        )
    )
    rsps.add(
        responses.GET,
        f"{COUNTRIES}/alpha/NO",
        json=[{"currencies": {"NOK": {"name": "Krone"}}}],
    )
    rsps.add(responses.GET, f"{CURRENCY}/latest", status=502)
    with pytest.raises(DashboardServiceError, match="failed to fetch currency"):
        get_populated_dashboard(dashboard_id)


def test_real_service_delegates(store, endpoints, rsps):
    service = RealDashboardService()
    assert service.get_enriched_dashboards() == []

    dashboard_id = repository.save_dashboard_config(
        DashboardConfig(country="Mockland", iso_code="NO", features=ALL_FEATURES)
    )
    _stub_services(rsps)
    result = service.get_populated_dashboard(dashboard_id)
    assert result.features.capital == "Mockville"

    enriched = service.get_enriched_dashboards()
    assert [dashboard.capital for dashboard in enriched] == ["Mockville"]


def test_dashboard_service_is_abstract():
    with pytest.raises(TypeError):
        DashboardService()
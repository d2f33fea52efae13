import json

import pytest
import responses

from countrydash.config import API_ENDPOINTS, ERR_NO_BASE_CURRENCY
from countrydash.fetchers import (
    FetchError,
    fetch_country_info,
    fetch_currency_rates,
    fetch_weather,
)
from countrydash.httpclient import HttpClient
from countrydash.models import CurrencyDetails

COUNTRIES = "https://countries.test"
METEO = "https://meteo.test"
CURRENCY = "https://currency.test"


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


@pytest.fixture
def client():
    with HttpClient() as http:
        yield http


def test_fetch_country_info(endpoints, rsps, client):
    rsps.add(
        responses.GET,
        f"{COUNTRIES}/alpha/XYZ",
        json=[
            {
                "capital": ["Mockville"],
                "latlng": [50.0, 20.0],
                "population": 100000,
                "area": 9876.5,
                "currencies": {"XYZ": {"name": "Mockcoin"}},
            }
        ],
    )
    info = fetch_country_info(client, "xyz")
    assert info.population == 100000
    assert info.capital == ["Mockville"]
    assert info.latlng == [50.0, 20.0]
    assert info.area == 9876.5
    assert info.currencies["XYZ"].name == "Mockcoin"


def test_fetch_country_info_empty_list(endpoints, rsps, client):
    rsps.add(responses.GET, f"{COUNTRIES}/alpha/NO", json=[])
    with pytest.raises(FetchError, match="invalid country response"):
        fetch_country_info(client, "NO")


def test_fetch_country_info_bad_status(endpoints, rsps, client):
    rsps.add(responses.GET, f"{COUNTRIES}/alpha/NO", status=404)
    with pytest.raises(FetchError, match="failed to fetch country info"):
        fetch_country_info(client, "NO")


def test_fetch_country_info_not_json(endpoints, rsps, client):
    rsps.add(responses.GET, f"{COUNTRIES}/alpha/NO", body="not json")
    with pytest.raises(FetchError):
        fetch_country_info(client, "NO")


def test_fetch_weather(endpoints, rsps, client):
    rsps.add(
        responses.GET,
        f"{METEO}/v1/forecast",
        json={"current": {"temperature_2m": 10.5, "precipitation": 0.3}},
    )
    weather = fetch_weather(client, 60.0, 10.0)
    assert weather.temperature == 10.5
    assert weather.precipitation == 0.3
    url = rsps.calls[0].request.url
    assert "latitude=60.0000" in url
    assert "longitude=10.0000" in url


def test_fetch_weather_missing_fields_are_zero(endpoints, rsps, client):
    rsps.add(responses.GET, f"{METEO}/v1/forecast", json={})
    weather = fetch_weather(client, 1.0, 2.0)
    assert (weather.temperature, weather.precipitation) == (0.0, 0.0)


def test_fetch_weather_invalid_body(endpoints, rsps, client):
    rsps.add(responses.GET, f"{METEO}/v1/forecast", body="{broken")
    with pytest.raises(FetchError, match="invalid weather response"):
        fetch_weather(client, 1.0, 2.0)


def test_fetch_currency_rates(endpoints, rsps, client):
    rsps.add(
        responses.GET,
        f"{CURRENCY}/latest",
        body=json.dumps({"rates": {"EUR": 0.9, "NOK": 10.5}}),
    )
    currencies = {"NOK": CurrencyDetails(name="Krone")}
    rates = fetch_currency_rates(client, currencies, ["USD", "EUR"])
    assert rates == {"EUR": 0.9, "NOK": 10.5}
    url = rsps.calls[0].request.url
    assert "from=NOK" in url


def test_fetch_currency_rates_without_base(endpoints, rsps, client):
    with pytest.raises(FetchError, match=ERR_NO_BASE_CURRENCY):
        fetch_currency_rates(client, {}, ["USD"])
    assert len(rsps.calls) == 0


def test_fetch_currency_rates_missing_rates(endpoints, rsps, client):
    rsps.add(responses.GET, f"{CURRENCY}/latest", json={})
    rates = fetch_currency_rates(client, {"NOK": CurrencyDetails()}, ["USD"])
    assert rates == {}


def test_fetch_currency_rates_bad_status(endpoints, rsps, client):
    rsps.add(responses.GET, f"{CURRENCY}/latest", status=500)
    with pytest.raises(FetchError, match="failed to fetch currency"):
        fetch_currency_rates(client, {"NOK": CurrencyDetails()}, ["USD"])
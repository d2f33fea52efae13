"""Lookups of country data, current weather and exchange rates from external services."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from countrydash.config import (
    API_ENDPOINTS,
    CURRENCY_LATEST_URL_FMT,
    ERR_FETCH_COUNTRY,
    ERR_FETCH_CURRENCY,
    ERR_FETCH_WEATHER,
    ERR_INVALID_COUNTRY_RESP,
    ERR_INVALID_CURRENCY_RESP,
    ERR_INVALID_WEATHER_RESP,
    ERR_NO_BASE_CURRENCY,
    OPEN_METEO_FORECAST,
    OPEN_METEO_WEATHER_URL_FMT,
    REST_COUNTRIES_BY_ALPHA,
)
from countrydash.httpclient import HttpClient, HttpClientError
from countrydash.models import CountryInfo, CurrencyDetails, WeatherData


class FetchError(Exception):
    """Raised when an external service cannot be reached or answers with unusable data."""


def _get(client: HttpClient, url: str, message: str) -> bytes:
    try:
        return client.get(url)
    except HttpClientError as exc:
        raise FetchError(f"{message}: {exc}") from exc


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(data: Mapping, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if not _is_number(value):
        raise ValueError(f"field {key!r} must be a number")
    return float(value)


def fetch_country_info(client: HttpClient, iso_code: str) -> CountryInfo:
    """Country metadata for an ISO code from the countries service."""
    url = API_ENDPOINTS.countries + REST_COUNTRIES_BY_ALPHA + iso_code.upper()
    body = _get(client, url, ERR_FETCH_COUNTRY)
    try:
        countries = json.loads(body)
        if not isinstance(countries, list):
            raise ValueError("expected a JSON array of countries")
        if not countries:
            raise ValueError("no countries in response")
        return CountryInfo.from_dict(countries[0])
    except ValueError as exc:
        raise FetchError(f"{ERR_INVALID_COUNTRY_RESP}: {exc}") from exc


def fetch_weather(client: HttpClient, lat: float, lon: float) -> WeatherData:
    """Current temperature and precipitation at the given coordinates."""
    url = OPEN_METEO_WEATHER_URL_FMT.format(API_ENDPOINTS.meteo, OPEN_METEO_FORECAST, lat, lon)
    body = _get(client, url, ERR_FETCH_WEATHER)
    try:
        result = json.loads(body)
        if not isinstance(result, Mapping):
            raise ValueError("expected a JSON object")
        current = result.get("current")
        if current is None:
            current = {}
        if not isinstance(current, Mapping):
            raise ValueError("field 'current' must be a JSON object")
        return WeatherData(
            temperature=_number(current, "temperature_2m"),
            precipitation=_number(current, "precipitation"),
        )
    except ValueError as exc:
        raise FetchError(f"{ERR_INVALID_WEATHER_RESP}: {exc}") from exc


def fetch_currency_rates(
    client: HttpClient,
    base_currencies: Mapping[str, CurrencyDetails],
    targets: Sequence[str],
) -> dict[str, float]:
    """Exchange rates from the first of ``base_currencies`` to each of ``targets``."""
    base = next(iter(base_currencies), "")
    if not base:
        raise FetchError(ERR_NO_BASE_CURRENCY)

    url = CURRENCY_LATEST_URL_FMT.format(API_ENDPOINTS.currency, base, ",".join(targets))
    body = _get(client, url, ERR_FETCH_CURRENCY)
    try:
        response = json.loads(body)
        if not isinstance(response, Mapping):
            raise ValueError("expected a JSON object")
        rates = response.get("rates")
        if rates is None:
            return {}
        if not isinstance(rates, Mapping):
            raise ValueError("field 'rates' must be a JSON object")
        if not all(_is_number(rate) for rate in rates.values()):
            raise ValueError("rates must be numbers")
        return {str(code): float(rate) for code, rate in rates.items()}
    except ValueError as exc:
        raise FetchError(f"{ERR_INVALID_CURRENCY_RESP}: {exc}") from exc
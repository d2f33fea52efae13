"""Cached country, weather and currency data kept with a timestamp in the document store."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple, TypeVar

from countrydash.cache_keys import country_cache_key
from countrydash.config import (
    COUNTRY_CACHE_COLLECTION,
    CURRENCY_CACHE_COLLECTION,
    ERR_CACHE_DECODE,
    ERR_CACHE_DECODE_CURRENCY,
    ERR_CACHE_EXPIRED,
    ERR_CACHE_EXPIRED_CURRENCY,
    ERR_CACHE_MISS,
    ERR_CACHE_MISS_CURRENCY,
    FIELD_DATA,
    TIMESTAMP_FIELD,
    WEATHER_CACHE_COLLECTION,
)
from countrydash.models import CountryInfo, WeatherData
from countrydash.store import StoreError, firestore_client

T = TypeVar("T")


class CacheError(Exception):
    """Raised when a cached value cannot be used."""


class CacheMissError(CacheError):
    """Raised when no cached value exists for a key."""


class CacheExpiredError(CacheError):
    """Raised when the cached value is older than allowed."""


class _Messages(NamedTuple):
    miss: str
    decode: str
    expired: str


_GENERIC = _Messages(ERR_CACHE_MISS, ERR_CACHE_DECODE, ERR_CACHE_EXPIRED)
_CURRENCY = _Messages(ERR_CACHE_MISS_CURRENCY, ERR_CACHE_DECODE_CURRENCY, ERR_CACHE_EXPIRED_CURRENCY)


def is_cache_expired(timestamp: datetime, max_age: timedelta) -> bool:
    """True if ``timestamp`` lies more than ``max_age`` in the past."""
    now = datetime.now(timestamp.tzinfo) if timestamp.tzinfo is not None else datetime.now()
    return now - timestamp > max_age


def _set_cache(collection: str, doc_id: str, data: Any) -> None:
    firestore_client().collection(collection).document(doc_id).set(
        {FIELD_DATA: data, TIMESTAMP_FIELD: datetime.now(timezone.utc)}
    )


def _get_cache(
    collection: str,
    doc_id: str,
    max_age: timedelta,
    decode: Callable[[Any], T],
    messages: _Messages = _GENERIC,
) -> T:
    client = firestore_client()
    try:
        snapshot = client.collection(collection).document(doc_id).get()
    except StoreError as exc:
        raise CacheMissError(messages.miss.format(doc_id, exc)) from exc

    entry = snapshot.to_dict()
    timestamp = entry.get(TIMESTAMP_FIELD)
    if timestamp is not None and not isinstance(timestamp, datetime):
        raise CacheError(messages.decode.format(doc_id, "timestamp is not a date"))
    raw = entry.get(FIELD_DATA)
    try:
        value = decode(raw)
    except ValueError as exc:
        raise CacheError(messages.decode.format(doc_id, exc)) from exc

    if timestamp is None or is_cache_expired(timestamp, max_age):
        raise CacheExpiredError(messages.expired)
    return value


def _decode_country(raw: Any) -> CountryInfo:
    return CountryInfo.from_dict(raw if raw is not None else {})


def _decode_weather(raw: Any) -> WeatherData:
    return WeatherData.from_dict(raw if raw is not None else {})


def _decode_rates(raw: Any) -> dict[str, float]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ValueError("rates must be a JSON object")
    rates = {}
    for code, rate in raw.items():
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise ValueError(f"rate for {code!r} must be a number")
        rates[str(code)] = float(rate)
    return rates


def get_cached_country_info(iso: str, max_age: timedelta) -> CountryInfo:
    """Cached country data for an ISO code, if present and fresh."""
    return _get_cache(COUNTRY_CACHE_COLLECTION, country_cache_key(iso), max_age, _decode_country)


def save_country_info_to_cache(iso: str, data: CountryInfo) -> None:
    _set_cache(COUNTRY_CACHE_COLLECTION, country_cache_key(iso), data.to_dict())


def get_cached_weather(key: str, max_age: timedelta) -> WeatherData:
    """Cached weather data under ``key``, if present and fresh."""
    return _get_cache(WEATHER_CACHE_COLLECTION, key, max_age, _decode_weather)


def save_weather_to_cache(key: str, data: WeatherData) -> None:
    _set_cache(WEATHER_CACHE_COLLECTION, key, data.to_dict())


def get_cached_currency_rates(key: str, max_age: timedelta) -> dict[str, float]:
    """Cached exchange rates under ``key``, if present and fresh."""
    return _get_cache(CURRENCY_CACHE_COLLECTION, key, max_age, _decode_rates, _CURRENCY)


def save_currency_rates_to_cache(key: str, rates: Mapping[str, float]) -> None:
    _set_cache(CURRENCY_CACHE_COLLECTION, key, dict(rates))
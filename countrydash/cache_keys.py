"""Keys under which cached country, weather and currency data are stored."""

from __future__ import annotations

from collections.abc import Iterable

from countrydash.config import CACHE_KEY_SEPARATOR, WEATHER_CACHE_KEY_FORMAT


def weather_cache_key(lat: float, lon: float) -> str:
    """Key for a weather lookup, with coordinates rounded to one decimal."""
    return WEATHER_CACHE_KEY_FORMAT.format(lat, lon)


def currency_cache_key(base: str, targets: Iterable[str]) -> str:
    """Key for exchange rates; the targets are sorted so their order does not matter."""
    return base + CACHE_KEY_SEPARATOR + CACHE_KEY_SEPARATOR.join(sorted(targets))


def country_cache_key(iso: str) -> str:
    """Normalise an ISO country code: surrounding whitespace removed, upper case."""
    return iso.strip().upper()
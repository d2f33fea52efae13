"""Enrichment of dashboards with country, weather and currency data, cached where possible."""

from __future__ import annotations

from countrydash import repository
from countrydash.cache_keys import currency_cache_key, weather_cache_key
from countrydash.cache_store import (
    CacheError,
    get_cached_country_info,
    get_cached_currency_rates,
    get_cached_weather,
    save_country_info_to_cache,
    save_currency_rates_to_cache,
    save_weather_to_cache,
)
from countrydash.config import (
    COUNTRY_CACHE_TTL,
    CURRENCY_CACHE_TTL,
    ERR_ENRICH_COUNTRY,
    ERR_ENRICH_CURRENCY,
    ERR_ENRICH_WEATHER,
    ERR_FETCH_ALL_CONFIGS,
    ERR_NO_BASE_CURRENCY,
    WEATHER_CACHE_TTL,
)
from countrydash.fetchers import (
    FetchError,
    fetch_country_info,
    fetch_currency_rates,
    fetch_weather,
)
from countrydash.httpclient import HttpClient
from countrydash.models import CountryInfo, DashboardConfig, DashboardResponse, WeatherData
from countrydash.store import StoreError


class EnrichmentError(Exception):
    """Raised when a dashboard cannot be enriched."""


def _try_save(save, *args) -> None:
    try:
        save(*args)
    except StoreError:
        pass


def get_enriched_dashboards() -> list[DashboardResponse]:
    """Every stored dashboard enriched with country, weather and currency data."""
    try:
        configs = repository.get_all_dashboard_configs()
    except (StoreError, ValueError) as exc:
        raise EnrichmentError(f"{ERR_FETCH_ALL_CONFIGS}: {exc}") from exc

    results = []
    with HttpClient() as client:
        for config in configs:
            response = DashboardResponse(country=config.country, iso_code=config.iso_code)
            try:
                info = enrich_country_data(client, config, response)
            except FetchError as exc:
                raise EnrichmentError(f"{ERR_ENRICH_COUNTRY}: {exc}") from exc
            try:
                enrich_weather_data(client, config, response)
            except FetchError as exc:
                raise EnrichmentError(f"{ERR_ENRICH_WEATHER}: {exc}") from exc
            try:
                enrich_currency_data(client, config, info, response)
            except (FetchError, EnrichmentError) as exc:
                raise EnrichmentError(f"{ERR_ENRICH_CURRENCY}: {exc}") from exc
            results.append(response)
    return results


def enrich_country_data(
    client: HttpClient, config: DashboardConfig, response: DashboardResponse
) -> CountryInfo:
    """Fill capital, coordinates, population and area; return the country data used."""
    features = config.features
    if not (features.capital or features.coordinates or features.population or features.area):
        return CountryInfo()

    try:
        info = get_cached_country_info(config.iso_code, COUNTRY_CACHE_TTL)
    except CacheError:
        info = fetch_country_info(client, config.iso_code)
        _try_save(save_country_info_to_cache, config.iso_code, info)
    sync_country_fields(config, response, info)
    return info


def sync_country_fields(
    config: DashboardConfig, response: DashboardResponse, info: CountryInfo
) -> None:
    """Copy the enabled country fields from ``info`` into ``response``."""
    features = config.features
    if features.capital and info.capital:
        response.capital = info.capital[0]
    if features.coordinates and len(info.latlng) == 2:
        response.latitude, response.longitude = info.latlng
    if features.population:
        response.population = info.population
    if features.area:
        response.area = info.area


def _apply_weather(config: DashboardConfig, response: DashboardResponse, weather: WeatherData):
    if config.features.temperature:
        response.temperature = weather.temperature
    if config.features.precipitation:
        response.precipitation = weather.precipitation


def enrich_weather_data(
    client: HttpClient, config: DashboardConfig, response: DashboardResponse
) -> None:
    """Fill temperature and precipitation at the response's coordinates."""
    if not (config.features.temperature or config.features.precipitation):
        return

    key = weather_cache_key(response.latitude, response.longitude)
    try:
        weather = get_cached_weather(key, WEATHER_CACHE_TTL)
    except CacheError:
        weather = fetch_weather(client, response.latitude, response.longitude)
        _try_save(save_weather_to_cache, key, weather)
    _apply_weather(config, response, weather)


def enrich_currency_data(
    client: HttpClient,
    config: DashboardConfig,
    country_info: CountryInfo,
    response: DashboardResponse,
) -> None:
    """Fill exchange rates from the country's currency to the configured targets."""
    targets = config.features.target_currencies
    if not targets:
        return

    base = next(iter(country_info.currencies), "")
    if not base:
        raise EnrichmentError(ERR_NO_BASE_CURRENCY)

    key = currency_cache_key(base, targets)
    try:
        rates = get_cached_currency_rates(key, CURRENCY_CACHE_TTL)
    except CacheError:
        rates = fetch_currency_rates(client, country_info.currencies, sorted(targets))
        _try_save(save_currency_rates_to_cache, key, rates)
    response.exchange_rates = rates
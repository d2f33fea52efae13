"""Dashboards filled in with live country, weather and currency data."""

from __future__ import annotations

import abc

from countrydash import notification_service, repository
from countrydash.config import (
    ERR_FETCH_CONFIG,
    ERR_FETCH_CURRENCY,
    ERR_FETCH_WEATHER,
    ERR_INVALID_COUNTRY_RESP,
    Event,
)
from countrydash.enrichment_service import get_enriched_dashboards
from countrydash.fetchers import (
    FetchError,
    fetch_country_info,
    fetch_currency_rates,
    fetch_weather,
)
from countrydash.httpclient import HttpClient
from countrydash.models import (
    Coordinates,
    DashboardResponse,
    PopulatedDashboardResponse,
    PopulatedFeatures,
)
from countrydash.store import StoreError
from countrydash.util import current_timestamp


class DashboardServiceError(Exception):
    """Raised when a populated dashboard cannot be built."""


class DashboardService(abc.ABC):
    """Operations that produce dashboards."""

    @abc.abstractmethod
    def get_populated_dashboard(self, dashboard_id: str) -> PopulatedDashboardResponse:
        """The dashboard with the given ID, filled in with live data."""

    @abc.abstractmethod
    def get_enriched_dashboards(self) -> list[DashboardResponse]:
        """Every stored dashboard, enriched."""


class RealDashboardService(DashboardService):
    """Dashboard service backed by the store and the external services."""

    def get_populated_dashboard(self, dashboard_id: str) -> PopulatedDashboardResponse:
        return get_populated_dashboard(dashboard_id)

    def get_enriched_dashboards(self) -> list[DashboardResponse]:
        return get_enriched_dashboards()


def get_populated_dashboard(dashboard_id: str) -> PopulatedDashboardResponse:
    """Build the dashboard with the given ID from its config and live data."""
    try:
        config = repository.get_dashboard_config(dashboard_id)
    except (StoreError, ValueError) as exc:
        raise DashboardServiceError(f"{ERR_FETCH_CONFIG}: {exc}") from exc

    wanted = config.features
    features = PopulatedFeatures()

    with HttpClient() as client:
        try:
            info = fetch_country_info(client, config.iso_code)
        except FetchError as exc:
            raise DashboardServiceError(f"{ERR_INVALID_COUNTRY_RESP}: {exc}") from exc

        if wanted.capital and info.capital:
            features.capital = info.capital[0]
        if wanted.coordinates and len(info.latlng) == 2:
            features.coordinates = Coordinates(latitude=info.latlng[0], longitude=info.latlng[1])
        if wanted.population:
            features.population = info.population
        if wanted.area:
            features.area = info.area

        if (wanted.temperature or wanted.precipitation) and features.coordinates is not None:
            try:
                weather = fetch_weather(
                    client, features.coordinates.latitude, features.coordinates.longitude
                )
            except FetchError as exc:
                raise DashboardServiceError(f"{ERR_FETCH_WEATHER}: {exc}") from exc
            if wanted.temperature:
                features.temperature = weather.temperature
                if weather.temperature < 0:
                    notification_service.trigger_webhooks(Event.LOW_TEMP, config.iso_code)
            if wanted.precipitation:
                features.precipitation = weather.precipitation

        if wanted.target_currencies:
            try:
                features.target_currencies = fetch_currency_rates(
                    client, info.currencies, wanted.target_currencies
                )
            except FetchError as exc:
                raise DashboardServiceError(f"{ERR_FETCH_CURRENCY}: {exc}") from exc

    response = PopulatedDashboardResponse(
        country=config.country,
        iso_code=config.iso_code,
        features=features,
        last_retrieval=current_timestamp(),
    )
    notification_service.trigger_webhooks(Event.INVOKE, config.iso_code)
    return response
"""Health report of the external services and the document store."""

from __future__ import annotations

import time

import requests

from countrydash import repository
from countrydash.config import (
    API_ENDPOINTS,
    COUNTRIES_ALPHA_NORWAY_PATH,
    CURRENCY_EUR_TO_NOK_PATH,
    METEO_FORECAST_PATH,
    STATUS_VERSION,
)
from countrydash.models import StatusReport
from countrydash.store import StoreError

STATUS_OK = 200
STATUS_SERVICE_UNAVAILABLE = 503
CHECK_TIMEOUT = 10.0

_SERVICE_START = time.monotonic()


def check_service(url: str) -> int:
    """Status code of a GET to ``url``, or 503 if the request fails."""
    try:
        response = requests.get(url, timeout=CHECK_TIMEOUT)
    except requests.RequestException:
        return STATUS_SERVICE_UNAVAILABLE
    with response:
        return response.status_code


def check_store() -> int:
    """200 if the document store answers, otherwise 503."""
    try:
        repository.ping_store()
    except StoreError:
        return STATUS_SERVICE_UNAVAILABLE
    return STATUS_OK


def get_system_status() -> StatusReport:
    """Collect API availability, store health, webhook count, version and uptime."""
    return StatusReport(
        countries_api=check_service(API_ENDPOINTS.countries + COUNTRIES_ALPHA_NORWAY_PATH),
        meteo_api=check_service(API_ENDPOINTS.meteo + METEO_FORECAST_PATH),
        currency_api=check_service(API_ENDPOINTS.currency + CURRENCY_EUR_TO_NOK_PATH),
        notification_db=check_store(),
        webhooks=repository.count_webhooks(),
        version=STATUS_VERSION,
        uptime_in_seconds=int(time.monotonic() - _SERVICE_START),
    )
"""Registration, replacement, partial update and removal of dashboard configurations."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from countrydash import notification_service, repository
from countrydash.config import (
    API_ENDPOINTS,
    ERR_CONFIG_NOT_FOUND_BY_ID,
    ERR_COUNTRY_RESPONSE_PARSE_FAILED,
    ERR_INVALID_ISO_CODE,
    ERR_INVALID_JSON_BODY_FORMAT,
    ERR_INVALID_JSON_FORMAT,
    ERR_MISSING_COUNTRY_OR_ISO_CODE,
    ERR_REST_COUNTRY_FETCH_FAILED,
    ERR_STORE_DELETE_FAILED,
    ERR_STORE_SAVE_FAILED,
    ERR_STORE_UPDATE_FAILED,
    KEY_AREA,
    KEY_CAPITAL,
    KEY_COORDINATES,
    KEY_COUNTRY,
    KEY_FEATURES,
    KEY_ID,
    KEY_ISO_CODE,
    KEY_LAST_CHANGE,
    KEY_POPULATION,
    KEY_PRECIPITATION,
    KEY_TARGET_CURRENCIES,
    KEY_TEMPERATURE,
    Event,
)
from countrydash.httpclient import HttpClient, HttpClientError
from countrydash.models import DashboardConfig, FeatureConfig, RegistrationRequest
from countrydash.store import StoreError
from countrydash.util import current_timestamp

logger = logging.getLogger(__name__)

_BOOL_FEATURES = (
    KEY_TEMPERATURE,
    KEY_PRECIPITATION,
    KEY_CAPITAL,
    KEY_COORDINATES,
    KEY_POPULATION,
    KEY_AREA,
)


class RegistrationError(Exception):
    """Raised when a dashboard configuration cannot be registered or changed."""


def _parse_object(payload: bytes | str, message: str) -> dict[str, Any]:
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise RegistrationError(message.format(exc)) from exc
    if not isinstance(data, dict):
        raise RegistrationError(message.format("expected a JSON object"))
    return data


def register_dashboard_config(payload: bytes | str) -> dict[str, str]:
    """Store a new configuration from a JSON payload; return its ID and change time."""
    data = _parse_object(payload, ERR_INVALID_JSON_FORMAT)
    try:
        request = RegistrationRequest.from_dict(data)
    except (ValueError, TypeError) as exc:
        raise RegistrationError(ERR_INVALID_JSON_FORMAT.format(exc)) from exc

    if not request.country and not request.iso_code:
        raise RegistrationError(ERR_MISSING_COUNTRY_OR_ISO_CODE)

    country_name = request.country
    if not country_name:
        with HttpClient() as client:
            country_name = get_country_name_by_iso(client, request.iso_code)

    last_change = current_timestamp()
    config = DashboardConfig.from_dict(
        {
            KEY_COUNTRY: country_name,
            KEY_ISO_CODE: request.iso_code,
            KEY_FEATURES: request.features.to_dict(),
            KEY_LAST_CHANGE: last_change,
        }
    )
    try:
        dashboard_id = repository.save_dashboard_config(config)
    except StoreError as exc:
        raise RegistrationError(ERR_STORE_SAVE_FAILED.format(exc)) from exc

    notification_service.trigger_webhooks(Event.REGISTER, request.iso_code)
    return {KEY_ID: dashboard_id, KEY_LAST_CHANGE: last_change}


def get_country_name_by_iso(client: HttpClient, iso_code: str) -> str:
    """Common name of the country with the given ISO code, from the countries service."""
    url = f"{API_ENDPOINTS.countries}/alpha/{iso_code}"
    try:
        body = client.get(url)
    except HttpClientError as exc:
        raise RegistrationError(ERR_REST_COUNTRY_FETCH_FAILED.format(exc)) from exc

    try:
        countries = json.loads(body)
    except ValueError as exc:
        raise RegistrationError(ERR_COUNTRY_RESPONSE_PARSE_FAILED.format(exc)) from exc
    if not isinstance(countries, list) or not all(isinstance(c, dict) for c in countries):
        raise RegistrationError(
            ERR_COUNTRY_RESPONSE_PARSE_FAILED.format("expected a JSON array of objects")
        )

    if not countries or countries[0].get("name") is None:
        raise RegistrationError(ERR_INVALID_ISO_CODE.format(iso_code))

    name = countries[0]["name"]
    common = name.get("common") if isinstance(name, Mapping) else None
    if not isinstance(common, str):
        raise RegistrationError(ERR_INVALID_ISO_CODE.format(iso_code))
    return common


def update_dashboard_config(dashboard_id: str, body: bytes | str) -> dict[str, str]:
    """Replace the configuration stored under ``dashboard_id`` with the JSON ``body``."""
    data = _parse_object(body, ERR_INVALID_JSON_BODY_FORMAT)
    last_change = current_timestamp()
    data[KEY_ID] = dashboard_id
    data[KEY_LAST_CHANGE] = last_change
    try:
        config = DashboardConfig.from_dict(data)
    except (ValueError, TypeError) as exc:
        raise RegistrationError(ERR_INVALID_JSON_BODY_FORMAT.format(exc)) from exc
    config.id = dashboard_id

    try:
        repository.update_dashboard_config(config)
    except StoreError as exc:
        raise RegistrationError(ERR_STORE_UPDATE_FAILED.format(exc)) from exc

    notification_service.trigger_webhooks(Event.CHANGE, config.iso_code)
    return {KEY_ID: dashboard_id, KEY_LAST_CHANGE: last_change}


def patch_dashboard_config(dashboard_id: str, patch: Mapping[str, Any]) -> dict[str, str]:
    """Apply a partial update to an existing configuration."""
    try:
        existing = repository.get_dashboard_config(dashboard_id)
    except (StoreError, ValueError) as exc:
        raise RegistrationError(ERR_CONFIG_NOT_FOUND_BY_ID.format(exc)) from exc

    data = existing.to_dict()
    country = patch.get(KEY_COUNTRY)
    if isinstance(country, str):
        data[KEY_COUNTRY] = country
    iso_code = patch.get(KEY_ISO_CODE)
    if isinstance(iso_code, str):
        data[KEY_ISO_CODE] = iso_code
    features = patch.get(KEY_FEATURES)
    if isinstance(features, dict):
        data[KEY_FEATURES] = apply_feature_patch(existing.features, features).to_dict()

    last_change = current_timestamp()
    data[KEY_LAST_CHANGE] = last_change
    updated = DashboardConfig.from_dict(data)
    updated.id = existing.id

    try:
        repository.update_dashboard_config(updated)
    except StoreError as exc:
        raise RegistrationError(ERR_STORE_UPDATE_FAILED.format(exc)) from exc

    notification_service.trigger_webhooks(Event.PATCH, updated.iso_code)
    return {KEY_ID: updated.id, KEY_LAST_CHANGE: last_change}


def apply_feature_patch(features: FeatureConfig, patch: Mapping[str, Any]) -> FeatureConfig:
    """Return ``features`` with the boolean flags and currency list found in ``patch``."""
    logger.debug("applyFeaturePatch - input: %s", patch)
    data = features.to_dict()
    for key in _BOOL_FEATURES:
        value = patch.get(key)
        if isinstance(value, bool):
            data[key] = value
    currencies = patch.get(KEY_TARGET_CURRENCIES)
    if isinstance(currencies, list):
        data[KEY_TARGET_CURRENCIES] = [item for item in currencies if isinstance(item, str)]
    updated = FeatureConfig.from_dict(data)
    logger.debug("applyFeaturePatch - updated config: %s", updated)
    return updated


def delete_registration(dashboard_id: str) -> None:
    """Remove the configuration with the given ID and notify DELETE webhooks."""
    try:
        config = repository.get_dashboard_config(dashboard_id)
    except (StoreError, ValueError) as exc:
        raise RegistrationError(ERR_CONFIG_NOT_FOUND_BY_ID.format(exc)) from exc
    try:
        repository.delete_dashboard_config(dashboard_id)
    except StoreError as exc:
        raise RegistrationError(ERR_STORE_DELETE_FAILED.format(exc)) from exc
    notification_service.trigger_webhooks(Event.DELETE, config.iso_code)
"""Routes, collection names, time limits, endpoints and message texts."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import timedelta

# Routes
DASHBOARD_REGISTRATIONS_ROUTE = "/dashboard/v1/registrations/"
DASHBOARD_REGISTRATIONS_ROUTE_BASE = "/dashboard/v1/registrations"
DASHBOARD_DASHBOARDS_ROUTE = "/dashboard/v1/dashboards/"
DASHBOARD_NOTIFICATIONS_ROUTE = "/dashboard/v1/notifications/"
DASHBOARD_STATUS_ROUTE = "/dashboard/v1/status/"
ROUTE_ROOT = "/"

# Static assets
STATIC_DIR = "static"
STATIC_INDEX_FILE = "index.html"

# Collections
DASHBOARD_COLLECTION = "dashboard_configs"
WEBHOOK_COLLECTION = "webhooks"
COUNTRY_CACHE_COLLECTION = "country_cache"
WEATHER_CACHE_COLLECTION = "weather_cache"
CURRENCY_CACHE_COLLECTION = "currency_cache"

# Cache time limits
CACHE_PURGE_INTERVAL = timedelta(hours=1)
COUNTRY_CACHE_TTL = timedelta(hours=24)
WEATHER_CACHE_TTL = timedelta(hours=2)
CURRENCY_CACHE_TTL = timedelta(hours=12)

# Cache formatting
WEATHER_CACHE_KEY_FORMAT = "{:.1f}_{:.1f}"
CACHE_KEY_SEPARATOR = "_"
TIMESTAMP_FIELD = "timestamp"
FIELD_DATA = "data"

# JSON keys
KEY_ID = "id"
KEY_LAST_CHANGE = "lastChange"
KEY_COUNTRY = "country"
KEY_ISO_CODE = "isoCode"
KEY_FEATURES = "features"
KEY_TEMPERATURE = "temperature"
KEY_PRECIPITATION = "precipitation"
KEY_CAPITAL = "capital"
KEY_COORDINATES = "coordinates"
KEY_POPULATION = "population"
KEY_AREA = "area"
KEY_TARGET_CURRENCIES = "targetCurrencies"
KEY_ERROR = "error"

# Server configuration
DEFAULT_PORT = "8080"
ENV_PORT = "PORT"
TIMESTAMP_LAYOUT = "%Y%m%d %H:%M"
DASHBOARD_ID_PATH_INDEX = 5

# Storage
DATA_ENV_VAR = "COUNTRYDASH_DATA"
DATA_DIR = "data"
DEFAULT_DATA_FILE = "store.json"

# API paths
REST_COUNTRIES_BY_ALPHA = "/alpha/"
OPEN_METEO_FORECAST = "/v1/forecast"
COUNTRIES_ALPHA_NORWAY_PATH = "/alpha/no"
METEO_FORECAST_PATH = "/v1/forecast?latitude=60&longitude=10&current=temperature_2m"
CURRENCY_EUR_TO_NOK_PATH = "/latest?from=EUR&to=NOK"

# API URL formats
OPEN_METEO_WEATHER_URL_FMT = (
    "{}{}?latitude={:.4f}&longitude={:.4f}&current=temperature_2m,precipitation"
)
CURRENCY_LATEST_URL_FMT = "{}/latest?from={}&to={}"

# Content types
CONTENT_TYPE_JSON = "application/json"
HEADER_CONTENT_TYPE = "Content-Type"

# Query operators
OPERATOR_LESS_THAN = "<"

STATUS_VERSION = "v1"


@dataclass
class ApiEndpoints:
    """Base URLs of the external services; mutable so they can be redirected."""

    countries: str = "https://restcountries.com/v3.1"
    meteo: str = "https://api.open-meteo.com"
    currency: str = "https://api.frankfurter.app"


API_ENDPOINTS = ApiEndpoints()


class Event(str, enum.Enum):
    """Webhook event types."""

    REGISTER = "REGISTER"
    DELETE = "DELETE"
    CHANGE = "CHANGE"
    INVOKE = "INVOKE"
    PATCH = "PATCH"
    LOW_TEMP = "LOW_TEMP"

    def __str__(self) -> str:
        return self.value


ALLOWED_EVENTS = frozenset(event.value for event in Event)


def is_allowed_event(name: str) -> bool:
    """Return True if ``name`` is exactly one of the supported event names."""
    return name in ALLOWED_EVENTS


# JSON and request errors
ERR_INVALID_JSON_FORMAT = "failed to parse registration JSON: {}"
ERR_INVALID_JSON_BODY_FORMAT = "failed to parse update JSON body: {}"
MSG_INVALID_JSON = "Invalid JSON body: "
MSG_INVALID_REQUEST_BODY = "Invalid request body"

# Country, ISO code and config errors
ERR_MISSING_COUNTRY_OR_ISO_CODE = "either 'country' or 'isoCode' must be provided"
ERR_INVALID_ISO_CODE = "no country found for ISO code: {}"
ERR_COUNTRY_RESPONSE_PARSE_FAILED = "failed to parse REST Countries API response: {}"
ERR_INVALID_COUNTRY_RESP = "invalid country response"
ERR_REST_COUNTRY_FETCH_FAILED = "failed to fetch country from REST API: {}"
ERR_FETCH_COUNTRY = "failed to fetch country info from REST Countries API"
ERR_FETCH_CONFIG = "failed to fetch dashboard config"
ERR_FETCH_ALL_CONFIGS = "failed to fetch all dashboard configurations"
ERR_CONFIG_NOT_FOUND_BY_ID = "dashboard config not found for ID: {}"
MSG_DASHBOARD_NOT_FOUND = "Dashboard config not found"
ERR_MSG_MISSING_OR_INVALID_DASHBOARD_ID = "Missing or invalid dashboard ID"
ERR_MSG_DASHBOARD_FETCH_FAILED = "Failed to retrieve populated dashboard: "

# HTTP errors
ERR_HTTP_GET_FAILED = "HTTP GET failed: {}"
ERR_HTTP_GET_STATUS = "HTTP GET returned status {}"
ERR_HTTP_POST_FAILED = "HTTP POST failed: {}"
ERR_HTTP_POST_STATUS = "HTTP POST returned status {}"
ERR_HTTP_READ_BODY = "failed to read response body: {}"
ERR_HTTP_POST_MARSHAL = "JSON marshalling failed: {}"

# Weather and currency
ERR_FETCH_WEATHER = "failed to fetch weather data"
ERR_INVALID_WEATHER_RESP = "invalid weather response structure"
ERR_FETCH_CURRENCY = "failed to fetch currency exchange rates"
ERR_INVALID_CURRENCY_RESP = "invalid currency response structure"
ERR_NO_BASE_CURRENCY = "no base currency found"

# Enrichment
ERR_ENRICH_COUNTRY = "failed to enrich country data"
ERR_ENRICH_WEATHER = "failed to enrich weather data"
ERR_ENRICH_CURRENCY = "failed to enrich currency data"

# Cache
ERR_CACHE_MISS = "cache miss for key {}: {}"
ERR_CACHE_DECODE = "cache decoding error for key {}: {}"
ERR_CACHE_EXPIRED = "cache expired"
ERR_CACHE_MISS_CURRENCY = "currency cache miss for key {}: {}"
ERR_CACHE_DECODE_CURRENCY = "currency cache decode error for key {}: {}"
ERR_CACHE_EXPIRED_CURRENCY = "currency cache expired"
ERR_PURGE_COUNTRY_CACHE = "Country cache purge error: {}"
ERR_PURGE_WEATHER_CACHE = "Weather cache purge error: {}"
ERR_PURGE_CURRENCY_CACHE = "Currency cache purge error: {}"

# Storage
ERR_STORE_INIT = "failed to initialize document store: {}"
ERR_STORE_NOT_INITIALIZED = "Document store is not initialized"
ERR_STORE_SAVE_FAILED = "failed to save dashboard config: {}"
ERR_STORE_UPDATE_FAILED = "failed to update dashboard config: {}"
ERR_STORE_DELETE_FAILED = "failed to delete dashboard config: {}"

# Webhooks
MSG_MISSING_WEBHOOK_FIELDS = "Missing required fields: URL or Event"
MSG_UNSUPPORTED_EVENT_TYPE = "Unsupported event type: "
MSG_WEBHOOK_SAVE_FAIL = "Failed to save webhook"
MSG_WEBHOOK_DELETE_FAIL = "Failed to delete webhook: "
MSG_WEBHOOK_FETCH_FAIL = "Failed to retrieve webhooks: "
MSG_MISSING_WEBHOOK_ID = "Missing webhook ID"
MSG_WEBHOOK_NOT_FOUND = "Webhook not found: "
ERR_FETCH_WEBHOOKS = "Failed to fetch webhooks: {}"
ERR_SEND_WEBHOOK = "Webhook {} call failed: {}"
ERR_MARSHAL_WEBHOOK = "Failed to marshal webhook payload for {}: {}"

# Dashboard flow
MSG_REGISTER_DASHBOARD_FAIL = "Failed to register dashboard: "
MSG_RETRIEVE_CONFIGS_FAIL = "Failed to retrieve configurations: "
MSG_UPDATE_CONFIG_FAIL = "Failed to update config: "
MSG_PATCH_CONFIG_FAIL = "Failed to patch config: "
MSG_DELETE_CONFIG_FAIL = "Failed to delete registration: "
MSG_DASHBOARD_SAVED = "Store write successful, new doc ID: {}"

# Cache purge logging
MSG_CACHE_PURGE_START = "Starting cache purge..."
MSG_CACHE_PURGE_DONE = "Cache purge completed. Waiting for next cycle..."
MSG_PURGE_SUCCESS = "Purged {} documents from {}"

# Webhook logging
MSG_FOUND_WEBHOOKS = "Found {} webhooks for event={}, country={}"
MSG_SENDING_WEBHOOK = "Sending webhook to: {}"
MSG_WEBHOOK_STATUS = "Webhook {} responded with status: {}"

# Server logging
MSG_SERVER_START = "Server running on port {}"
MSG_PORT_NOT_SET = "$PORT not set. Defaulting to {}"
ERR_MSG_INIT_DB = "Could not initialize database: {}"
ERR_MSG_CLOSE_STORE = "Error closing document store: {}"
ERR_MSG_SERVER_START = "Failed to start server: {}"
LOG_FALLBACK_DATA_PATH_USED = "COUNTRYDASH_DATA not set, using fallback: {}"

# Misc
ERR_MISSING_PATH_ID = "missing ID in path"
ERR_METHOD_NOT_ALLOWED = "Method not allowed"
"""Data models exchanged over HTTP and kept in the document store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _require_mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _str(data: Mapping, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _bool(data: Mapping, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _float(data: Mapping, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if not _is_number(value):
        raise ValueError(f"field {key!r} must be a number")
    return float(value)


def _int(data: Mapping, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if not _is_number(value):
        raise ValueError(f"field {key!r} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"field {key!r} must be an integer")
        return int(value)
    return value


def _list_of(data: Mapping, key: str, check, kind: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(check(item) for item in value):
        raise ValueError(f"field {key!r} must be a list of {kind}")
    return list(value)


def _str_list(data: Mapping, key: str) -> list[str]:
    return _list_of(data, key, lambda item: isinstance(item, str), "strings")


def _float_list(data: Mapping, key: str) -> list[float]:
    return [float(x) for x in _list_of(data, key, _is_number, "numbers")]


def _mapping(data: Mapping, key: str) -> Mapping:
    value = data.get(key)
    if value is None:
        return {}
    return _require_mapping(value, f"field {key!r}")


def _float_map(data: Mapping, key: str) -> dict[str, float]:
    raw = _mapping(data, key)
    if not all(_is_number(v) for v in raw.values()):
        raise ValueError(f"field {key!r} must map to numbers")
    return {str(k): float(v) for k, v in raw.items()}


def _str_map(data: Mapping, key: str) -> dict[str, str]:
    raw = _mapping(data, key)
    if not all(isinstance(v, str) for v in raw.values()):
        raise ValueError(f"field {key!r} must map to strings")
    return {str(k): v for k, v in raw.items()}


def _without_empty(pairs: dict[str, Any], optional: set[str]) -> dict[str, Any]:
    """Drop the optional keys whose values are empty or zero."""
    return {k: v for k, v in pairs.items() if k not in optional or v}


@dataclass
class FeatureConfig:
    """Optional features that can be enabled on a dashboard."""

    temperature: bool = False
    precipitation: bool = False
    capital: bool = False
    coordinates: bool = False
    population: bool = False
    area: bool = False
    target_currencies: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> FeatureConfig:
        data = _require_mapping(data, "features")
        return cls(
            temperature=_bool(data, "temperature"),
            precipitation=_bool(data, "precipitation"),
            capital=_bool(data, "capital"),
            coordinates=_bool(data, "coordinates"),
            population=_bool(data, "population"),
            area=_bool(data, "area"),
            target_currencies=_str_list(data, "targetCurrencies"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "precipitation": self.precipitation,
            "capital": self.capital,
            "coordinates": self.coordinates,
            "population": self.population,
            "area": self.area,
            "targetCurrencies": list(self.target_currencies),
        }


@dataclass
class RegistrationRequest:
    """Payload for creating a new dashboard registration."""

    country: str = ""
    iso_code: str = ""
    features: FeatureConfig = field(default_factory=FeatureConfig)

    @classmethod
    def from_dict(cls, data: Any) -> RegistrationRequest:
        data = _require_mapping(data, "registration")
        return cls(
            country=_str(data, "country"),
            iso_code=_str(data, "isoCode"),
            features=FeatureConfig.from_dict(_mapping(data, "features")),
        )


@dataclass
class DashboardConfig:
    """Saved configuration of one dashboard."""

    id: str = ""
    country: str = ""
    iso_code: str = ""
    features: FeatureConfig = field(default_factory=FeatureConfig)
    last_change: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> DashboardConfig:
        data = _require_mapping(data, "dashboard config")
        return cls(
            id=_str(data, "id"),
            country=_str(data, "country"),
            iso_code=_str(data, "isoCode"),
            features=FeatureConfig.from_dict(_mapping(data, "features")),
            last_change=_str(data, "lastChange"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "country": self.country,
            "isoCode": self.iso_code,
            "features": self.features.to_dict(),
            "lastChange": self.last_change,
        }


@dataclass
class RegistrationResponse:
    """Answer to a successful registration."""

    id: str = ""
    last_change: str = ""


@dataclass
class DashboardResponse:
    """Dashboard enriched with country, weather and currency information."""

    country: str = ""
    iso_code: str = ""
    capital: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    population: int = 0
    area: float = 0.0
    temperature: float = 0.0
    precipitation: float = 0.0
    exchange_rates: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _without_empty(
            {
                "country": self.country,
                "isoCode": self.iso_code,
                "capital": self.capital,
                "latitude": self.latitude,
                "longitude": self.longitude,
                "population": self.population,
                "area": self.area,
                "temperature": self.temperature,
                "precipitation": self.precipitation,
                "exchangeRates": dict(self.exchange_rates),
            },
            {
                "capital",
                "latitude",
                "longitude",
                "population",
                "area",
                "temperature",
                "precipitation",
                "exchangeRates",
            },
        )


@dataclass
class CountryDetails:
    """Basic country information."""

    capital: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    population: int = 0
    area: float = 0.0


@dataclass
class WeatherData:
    """Current temperature and precipitation."""

    temperature: float = 0.0
    precipitation: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> WeatherData:
        data = _require_mapping(data, "weather data")
        return cls(
            temperature=_float(data, "temperature"),
            precipitation=_float(data, "precipitation"),
        )

    def to_dict(self) -> dict[str, float]:
        return {"temperature": self.temperature, "precipitation": self.precipitation}


@dataclass
class CurrencyDetails:
    """Name and symbol of a currency."""

    name: str = ""
    symbol: str = ""


def _currencies_from(data: Mapping) -> dict[str, CurrencyDetails]:
    raw = _mapping(data, "currencies")
    currencies = {}
    for code, details in raw.items():
        details = _require_mapping(details, f"currency {code!r}")
        currencies[str(code)] = CurrencyDetails(
            name=_str(details, "name"), symbol=_str(details, "symbol")
        )
    return currencies


@dataclass
class CountryInfo:
    """One country as described by the countries API."""

    name: str = ""
    capital: list[str] = field(default_factory=list)
    latlng: list[float] = field(default_factory=list)
    population: int = 0
    area: float = 0.0
    borders: list[str] = field(default_factory=list)
    flag_png: str = ""
    languages: dict[str, str] = field(default_factory=dict)
    currencies: dict[str, CurrencyDetails] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> CountryInfo:
        data = _require_mapping(data, "country info")
        return cls(
            name=_str(_mapping(data, "name"), "common"),
            capital=_str_list(data, "capital"),
            latlng=_float_list(data, "latlng"),
            population=_int(data, "population"),
            area=_float(data, "area"),
            borders=_str_list(data, "borders"),
            flag_png=_str(_mapping(data, "flags"), "png"),
            languages=_str_map(data, "languages"),
            currencies=_currencies_from(data),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": {"common": self.name},
            "capital": list(self.capital),
            "latlng": list(self.latlng),
            "population": self.population,
            "area": self.area,
        }
        if self.borders:
            result["borders"] = list(self.borders)
        result["flags"] = {"png": self.flag_png}
        result["languages"] = dict(self.languages)
        result["currencies"] = {
            code: {"name": details.name, "symbol": details.symbol}
            for code, details in self.currencies.items()
        }
        return result


@dataclass
class ServiceStatus:
    """Health of a single external service."""

    name: str = ""
    url: str = ""
    status: str = ""
    latency: int = 0
    http_code: int = 0


@dataclass
class StatusResponse:
    """List of service health entries."""

    services: list[ServiceStatus] = field(default_factory=list)


@dataclass
class StatusReport:
    """Compact health report of the service and its dependencies."""

    countries_api: int = 0
    meteo_api: int = 0
    currency_api: int = 0
    notification_db: int = 0
    webhooks: int = 0
    version: str = ""
    uptime_in_seconds: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "countries_api": self.countries_api,
            "meteo_api": self.meteo_api,
            "currency_api": self.currency_api,
            "notification_db": self.notification_db,
            "webhooks": self.webhooks,
            "version": self.version,
            "uptime": self.uptime_in_seconds,
        }


@dataclass
class Notification:
    """Generic message sent to a client."""

    message: str = ""


@dataclass
class Coordinates:
    """A latitude and longitude pair."""

    latitude: float = 0.0
    longitude: float = 0.0


@dataclass
class PopulatedFeatures:
    """Feature values filled in from external services."""

    temperature: float = 0.0
    precipitation: float = 0.0
    capital: str = ""
    coordinates: Coordinates | None = None
    population: int = 0
    area: float = 0.0
    target_currencies: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        coords = (
            {"latitude": self.coordinates.latitude, "longitude": self.coordinates.longitude}
            if self.coordinates is not None
            else None
        )
        return _without_empty(
            {
                "temperature": self.temperature,
                "precipitation": self.precipitation,
                "capital": self.capital,
                "coordinates": coords,
                "population": self.population,
                "area": self.area,
                "targetCurrencies": dict(self.target_currencies),
            },
            {"temperature", "capital", "coordinates", "population", "area", "targetCurrencies"},
        )


def _populated_features_from(data: Mapping) -> PopulatedFeatures:
    coords_raw = data.get("coordinates")
    coordinates = None
    if coords_raw is not None:
        coords_raw = _require_mapping(coords_raw, "coordinates")
        coordinates = Coordinates(
            latitude=_float(coords_raw, "latitude"),
            longitude=_float(coords_raw, "longitude"),
        )
    return PopulatedFeatures(
        temperature=_float(data, "temperature"),
        precipitation=_float(data, "precipitation"),
        capital=_str(data, "capital"),
        coordinates=coordinates,
        population=_int(data, "population"),
        area=_float(data, "area"),
        target_currencies=_float_map(data, "targetCurrencies"),
    )


@dataclass
class PopulatedDashboardResponse:
    """Full dashboard returned by the dashboards endpoint."""

    country: str = ""
    iso_code: str = ""
    features: PopulatedFeatures = field(default_factory=PopulatedFeatures)
    last_retrieval: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> PopulatedDashboardResponse:
        data = _require_mapping(data, "dashboard")
        return cls(
            country=_str(data, "country"),
            iso_code=_str(data, "isoCode"),
            features=_populated_features_from(_mapping(data, "features")),
            last_retrieval=_str(data, "lastRetrieval"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "country": self.country,
            "isoCode": self.iso_code,
            "features": self.features.to_dict(),
            "lastRetrieval": self.last_retrieval,
        }


@dataclass
class Webhook:
    """A registered webhook listener."""

    id: str = ""
    url: str = ""
    event: str = ""
    country: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Webhook:
        data = _require_mapping(data, "webhook")
        return cls(
            id=_str(data, "id"),
            url=_str(data, "url"),
            event=_str(data, "event"),
            country=_str(data, "country"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "url": self.url, "event": self.event, "country": self.country}

    def to_document(self) -> dict[str, str]:
        """Fields kept in storage; the identifier lives in the document key."""
        return {"url": self.url, "event": self.event, "country": self.country}
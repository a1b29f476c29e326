from __future__ import annotations

import asyncio
from typing import Any, Mapping, TYPE_CHECKING, cast

from cachetools import TTLCache
from geopy.exc import (
    GeocoderQuotaExceeded,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.geocoders import get_geocoder_for_service
from geopy.geocoders.base import Geocoder

from app.core.config import get_settings
from app.core.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from app.core.config import Settings
    from geopy.location import Location

_logger = get_logger(__name__)
_cache = TTLCache(maxsize=512, ttl=60 * 60 * 24)
_cache_lock = asyncio.Lock()
_geocoder_lock = asyncio.Lock()
_geocode_call_lock = asyncio.Lock()
_geocoder: Geocoder | None = None

UNKNOWN_STREET = "Unknown street"
UNKNOWN_CITY = "Unknown city"
_STREET_KEYS = ("road", "pedestrian", "street")
_CITY_KEYS = ("city", "town", "village", "municipality")
_GOOGLE_STREET_TYPES = ("route", "pedestrian", "street_address")
_GOOGLE_CITY_TYPES = ("locality", "postal_town", "administrative_area_level_3")


class GeocodeConfigurationError(RuntimeError):
    """Raised when the geocoder cannot be configured with provided settings."""


def coordinate_label(latitude: float, longitude: float) -> str:
    """Fallback display label when no address can be resolved."""

    return f"{latitude:.4f}, {longitude:.4f}"


async def reverse_geocode(latitude: float, longitude: float) -> str | None:
    """Resolve a "street, city" label for the coordinates, or ``None``."""

    key = (round(latitude, 6), round(longitude, 6))

    async with _cache_lock:
        if key in _cache:
            _logger.info(
                "Reverse geocoding cache hit", latitude=key[0], longitude=key[1]
            )
            return _cache[key]

    _logger.info("Reverse geocoding lookup", latitude=latitude, longitude=longitude)

    try:
        location = await _reverse(latitude, longitude)
    except GeocodeConfigurationError as exc:
        _logger.error("Reverse geocoding misconfiguration", error=str(exc))
        return None
    except (GeocoderQuotaExceeded, GeocoderTimedOut) as exc:
        _logger.warning(
            "Reverse geocoding unavailable",
            reason="quota" if isinstance(exc, GeocoderQuotaExceeded) else "timeout",
        )
        return None
    except (GeocoderServiceError, GeocoderUnavailable, GeopyError, ValueError) as exc:
        _logger.warning("Reverse geocoding failed", error=str(exc))
        return None

    label = _label_from_location(location)

    if label is not None:
        async with _cache_lock:
            _cache[key] = label
    _logger.info(
        "Reverse geocoding success",
        latitude=latitude,
        longitude=longitude,
        label=label,
    )
    return label


def _label_from_location(location: "Location | None") -> str | None:
    if location is None:
        return None

    raw_obj = getattr(location, "raw", {}) or {}
    raw: Mapping[str, Any] = (
        cast(Mapping[str, Any], raw_obj) if isinstance(raw_obj, Mapping) else {}
    )

    settings = get_settings()
    label = compose_address_label(settings.geocoder_provider, raw)
    if label:
        return label

    address = getattr(location, "address", None)
    return address or None


def compose_address_label(provider: str, raw: Mapping[str, Any]) -> str | None:
    """Build a short "street, city" label from a provider's raw response."""

    if provider == "google":
        components = _google_components(raw)
    else:
        details = raw.get("address")
        components = details if isinstance(details, Mapping) else {}

    if not components:
        return None

    if provider == "google":
        street_keys, city_keys = _GOOGLE_STREET_TYPES, _GOOGLE_CITY_TYPES
    else:
        street_keys, city_keys = _STREET_KEYS, _CITY_KEYS

    street = _first_value(components, street_keys)
    city = _first_value(components, city_keys)
    return f"{street or UNKNOWN_STREET}, {city or UNKNOWN_CITY}"


def _google_components(raw: Mapping[str, Any]) -> dict[str, str]:
    components: dict[str, str] = {}
    entries = raw.get("address_components")
    if not isinstance(entries, list):
        return components
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("long_name")
        if not isinstance(name, str) or not name.strip():
            continue
        for component_type in entry.get("types") or []:
            components.setdefault(component_type, name.strip())
    return components


def _first_value(components: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = components.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


async def _reverse(latitude: float, longitude: float) -> "Location | None":
    geocoder = await _get_geocoder()
    settings = get_settings()
    kwargs: dict[str, object] = {"exactly_one": True}
    if settings.geocoder_language:
        kwargs["language"] = settings.geocoder_language
    if settings.geocoder_provider == "nominatim":
        kwargs["addressdetails"] = True
        kwargs["zoom"] = 18

    async with _geocode_call_lock:
        return await asyncio.to_thread(
            geocoder.reverse, (latitude, longitude), **kwargs
        )


async def _get_geocoder() -> Geocoder:
    global _geocoder
    async with _geocoder_lock:
        if _geocoder is None:
            settings = get_settings()
            _geocoder = _create_geocoder(settings)
        return _geocoder


def _create_geocoder(settings: "Settings") -> Geocoder:
    provider = settings.geocoder_provider
    timeout = settings.geocoder_timeout
    user_agent = settings.geocoder_user_agent or "tourmap-geocoder"

    if provider == "google":
        api_key = _require_api_key(provider, settings.geocoder_api_key)
        geocoder_cls = get_geocoder_for_service("googlev3")
        kwargs = {"api_key": api_key, "timeout": timeout, "user_agent": user_agent}
        if settings.geocoder_domain:
            kwargs["domain"] = settings.geocoder_domain
        return geocoder_cls(**kwargs)

    if provider == "nominatim":
        geocoder_cls = get_geocoder_for_service("nominatim")
        kwargs = {"user_agent": user_agent, "timeout": timeout}
        if settings.geocoder_domain:
            kwargs["domain"] = settings.geocoder_domain
        return geocoder_cls(**kwargs)

    raise GeocodeConfigurationError(f"Unsupported geocoder provider '{provider}'")


def _require_api_key(provider: str, value: str | None) -> str:
    if value and value.strip():
        return value.strip()
    raise GeocodeConfigurationError(
        f"Geocoder provider '{provider}' requires TOURMAP_GEOCODER_API_KEY to be set"
    )

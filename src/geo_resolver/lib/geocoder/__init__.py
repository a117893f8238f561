"""Geocoder library — pluggable reverse geocoding, elevation and caching.

Public API:
    - ResolvedAddress: Candidate/final address dataclass
    - AddressSource: Which resolver stage produced an address
    - BaseGeocoder: Abstract reverse geocoder interface
    - BaseElevationProvider: Abstract elevation interface
    - GeocodingProviderError: Provider transport/parse failure
    - NominatimGeocoder: OpenStreetMap Nominatim (the system geocoder)
    - GoogleMapsGeocoder: Google Maps geocoder and elevation
    - BingMapsGeocoder: Bing Maps geocoder and elevation
    - GeoNamesGeocoder: GeoNames geocoder and elevation
    - AddressCache: Persistent address/elevation cache
    - ElevationEstimator: Elevation interpolation
    - find_best_address: Best-candidate selection
    - get_geocoder: Provider factory/registry
    - get_configured_providers: Web geocoders that are enabled and configured
    - get_elevation_providers: Elevation providers that are enabled and configured
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from geo_resolver.lib.geocoder.address import AddressSource, ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseElevationProvider, BaseGeocoder, GeocodingProviderError
from geo_resolver.lib.geocoder.bing import BingMapsGeocoder
from geo_resolver.lib.geocoder.cache import AddressCache
from geo_resolver.lib.geocoder.elevation import ElevationEstimator, ElevationSample
from geo_resolver.lib.geocoder.geonames import GeoNamesGeocoder
from geo_resolver.lib.geocoder.google_maps import GoogleMapsGeocoder
from geo_resolver.lib.geocoder.nominatim import NominatimGeocoder
from geo_resolver.lib.geocoder.selection import find_best_address

if TYPE_CHECKING:
    from geo_resolver.core.config import Settings

# Provider registry: all known providers
_PROVIDERS: dict[str, type[BaseGeocoder]] = {
    "nominatim": NominatimGeocoder,
    "google": GoogleMapsGeocoder,
    "bing": BingMapsGeocoder,
    "geonames": GeoNamesGeocoder,
}


def get_available_providers() -> list[str]:
    """Return the names of all registered providers, sorted."""
    return sorted(_PROVIDERS.keys())


def get_geocoder(provider: str, **kwargs: Any) -> BaseGeocoder:
    """Get a geocoder instance by provider name.

    Args:
        provider: Provider name (e.g., "google").
        **kwargs: Additional arguments forwarded to the provider constructor
            (e.g., ``timeout=2.0``).

    Returns:
        An instance of the requested provider.

    Raises:
        ValueError: If the provider is not registered.
    """
    cls = _PROVIDERS.get(provider)
    if cls is None:
        msg = f"Unknown geocoder provider: {provider!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    return cls(**kwargs)


def _provider_configs(settings: Settings) -> dict[str, dict[str, Any]]:
    return {
        "nominatim": {
            "enabled": settings.geocoder_system_enabled,
            "kwargs": {
                "timeout": settings.geocoder_nominatim_timeout,
                "email": settings.geocoder_nominatim_email,
                "base_url": settings.geocoder_nominatim_base_url,
            },
        },
        "google": {
            "enabled": settings.geocoder_google_enabled and bool(settings.geocoder_google_api_key),
            "kwargs": {
                "api_key": settings.geocoder_google_api_key or "",
                "timeout": settings.geocoder_google_timeout,
            },
        },
        "bing": {
            "enabled": settings.geocoder_bing_enabled and bool(settings.geocoder_bing_api_key),
            "kwargs": {
                "api_key": settings.geocoder_bing_api_key or "",
                "timeout": settings.geocoder_bing_timeout,
            },
        },
        "geonames": {
            "enabled": settings.geocoder_geonames_enabled and bool(settings.geocoder_geonames_username),
            "kwargs": {
                "username": settings.geocoder_geonames_username or "",
                "timeout": settings.geocoder_geonames_timeout,
            },
        },
    }


def _configured_in_order(settings: Settings, order: list[str]) -> list[BaseGeocoder]:
    configs = _provider_configs(settings)
    providers: list[BaseGeocoder] = []
    seen: set[str] = set()

    for name in order:
        if name in seen:
            continue
        seen.add(name)
        config = configs.get(name)
        if config is None or not config.get("enabled", False):
            continue

        try:
            geocoder = get_geocoder(name, **config.get("kwargs", {}))
        except (ValueError, TypeError):
            continue
        if geocoder.is_configured:
            providers.append(geocoder)

    return providers


def get_system_geocoder(settings: Settings) -> BaseGeocoder | None:
    """Return the system (Nominatim) geocoder, or None when disabled."""
    providers = _configured_in_order(settings, ["nominatim"])
    return providers[0] if providers else None


def get_configured_providers(settings: Settings) -> list[BaseGeocoder]:
    """Get web geocoders that are enabled and properly configured.

    The system geocoder is excluded even if listed, since the resolver
    always tries it first on its own.

    Args:
        settings: Application settings.

    Returns:
        List of configured BaseGeocoder instances, in fallback order.
    """
    order = [name for name in settings.geocoder_fallback_order_list if name != "nominatim"]
    return _configured_in_order(settings, order)


def get_elevation_providers(settings: Settings) -> list[BaseElevationProvider]:
    """Get elevation providers that are enabled and configured, in fallback order."""
    return [
        provider
        for provider in _configured_in_order(settings, settings.elevation_fallback_order_list)
        if isinstance(provider, BaseElevationProvider)
    ]


__all__ = [
    "AddressCache",
    "AddressSource",
    "BaseElevationProvider",
    "BaseGeocoder",
    "BingMapsGeocoder",
    "ElevationEstimator",
    "ElevationSample",
    "GeoNamesGeocoder",
    "GeocodingProviderError",
    "GoogleMapsGeocoder",
    "NominatimGeocoder",
    "ResolvedAddress",
    "find_best_address",
    "get_available_providers",
    "get_configured_providers",
    "get_elevation_providers",
    "get_geocoder",
    "get_system_geocoder",
]

"""Bing Maps reverse geocoding and elevation provider.

Uses the Bing Maps REST Locations API
(https://learn.microsoft.com/en-us/bingmaps/rest-services/locations/find-a-location-by-point)
and Elevations API. Requires an API key.
"""

from typing import Any

import httpx
from loguru import logger

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseElevationProvider, BaseGeocoder, GeocodingProviderError

BING_LOCATIONS_URL = "https://dev.virtualearth.net/REST/v1/Locations"
BING_ELEVATION_URL = "https://dev.virtualearth.net/REST/v1/Elevation/List"
DEFAULT_TIMEOUT = 10.0


class BingMapsGeocoder(BaseGeocoder, BaseElevationProvider):
    """Bing Maps reverse geocoder and elevation provider."""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._api_key = api_key
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "bing"

    @property
    def requires_api_key(self) -> bool:
        return True

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            logger.warning("Bing Maps request timeout")
            raise GeocodingProviderError("bing", "Request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Bing Maps HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "bing",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Bing Maps connection error")
            raise GeocodingProviderError("bing", "Connection to provider failed") from e
        except Exception as e:
            logger.exception("Bing Maps unexpected error")
            raise GeocodingProviderError("bing", f"Unexpected error: {e}") from e

    @staticmethod
    def _resources(data: dict) -> list[dict]:
        status_code = data.get("statusCode")
        if status_code != 200:
            description = data.get("statusDescription", "unknown")
            raise GeocodingProviderError("bing", f"API error: {description}", status_code=status_code)
        resource_sets = data.get("resourceSets") or []
        if not resource_sets:
            return []
        return resource_sets[0].get("resources") or []

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        max_results: int = 10,
    ) -> list[ResolvedAddress]:
        """Reverse geocode a coordinate using the Bing Maps Locations API.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        params: dict[str, Any] = {"o": "json", "key": self._api_key, "maxResults": max_results}
        if language:
            params["c"] = language

        data = await self._get_json(f"{BING_LOCATIONS_URL}/{lat},{lon}", params)
        return self._parse_response(data, language, max_results)

    def _parse_response(self, data: dict, language: str | None, max_results: int) -> list[ResolvedAddress]:
        """Parse a Bing Locations response into candidates.

        Raises:
            GeocodingProviderError: When the status is not 200 or a resource is malformed.
        """
        addresses: list[ResolvedAddress] = []
        for resource in self._resources(data)[:max_results]:
            try:
                lat, lon = resource["point"]["coordinates"][:2]
                address = ResolvedAddress(
                    language=language,
                    latitude=float(lat),
                    longitude=float(lon),
                    provider=self.provider_name,
                )
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse Bing Maps response: {e}")
                raise GeocodingProviderError("bing", f"Failed to parse response: {e}") from e

            fields = resource.get("address") or {}
            address.thoroughfare = fields.get("addressLine")
            address.admin_area = fields.get("adminDistrict")
            address.sub_admin_area = fields.get("adminDistrict2")
            address.country_name = fields.get("countryRegion")
            address.locality = fields.get("locality")
            address.postal_code = fields.get("postalCode")

            formatted = fields.get("formattedAddress")
            name = resource.get("name")
            # Bing repeats the whole formatted address as the name when there is no feature
            address.feature_name = None if name == formatted else name
            if formatted:
                address.set_formatted(formatted)
            addresses.append(address)
        return addresses

    async def get_elevation(self, lat: float, lon: float) -> float | None:
        """Look up the elevation using the Bing Maps Elevations API.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        params = {"o": "json", "points": f"{lat},{lon}", "key": self._api_key}
        data = await self._get_json(BING_ELEVATION_URL, params)
        resources = self._resources(data)
        if not resources:
            return None
        elevations = resources[0].get("elevations") or []
        if not elevations:
            return None
        try:
            return float(elevations[0])
        except (ValueError, TypeError) as e:
            raise GeocodingProviderError("bing", f"Failed to parse response: {e}") from e

"""Google Maps reverse geocoding and elevation provider.

Uses the Google Maps Geocoding API
(https://developers.google.com/maps/documentation/geocoding/requests-reverse-geocoding)
and the Elevation API
(https://developers.google.com/maps/documentation/elevation/). Requires an API key.
"""

from typing import Any

import httpx
from loguru import logger

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseElevationProvider, BaseGeocoder, GeocodingProviderError

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_ELEVATION_URL = "https://maps.googleapis.com/maps/api/elevation/json"
DEFAULT_TIMEOUT = 10.0

_ERROR_STATUSES = ("REQUEST_DENIED", "OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT", "INVALID_REQUEST", "UNKNOWN_ERROR")


def _component_name(component: dict) -> str | None:
    return component.get("short_name") or component.get("long_name")


class GoogleMapsGeocoder(BaseGeocoder, BaseElevationProvider):
    """Google Maps reverse geocoder and elevation provider."""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._api_key = api_key
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "google"

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
            logger.warning("Google Maps request timeout")
            raise GeocodingProviderError("google", "Request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Google Maps HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "google",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Google Maps connection error")
            raise GeocodingProviderError("google", "Connection to provider failed") from e
        except Exception as e:
            logger.exception("Google Maps unexpected error")
            raise GeocodingProviderError("google", f"Unexpected error: {e}") from e

    @staticmethod
    def _check_status(data: dict) -> bool:
        """Return False for an empty result set; raise on API errors."""
        api_status = data.get("status", "UNKNOWN")
        if api_status == "ZERO_RESULTS":
            return False
        if api_status in _ERROR_STATUSES:
            msg = data.get("error_message", api_status)
            raise GeocodingProviderError("google", f"API error: {msg}")
        if api_status != "OK":
            raise GeocodingProviderError("google", f"Unexpected API status: {api_status}")
        return True

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        max_results: int = 10,
    ) -> list[ResolvedAddress]:
        """Reverse geocode a coordinate using the Google Maps API.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        params: dict[str, Any] = {
            "latlng": f"{lat},{lon}",
            "key": self._api_key,
        }
        if language:
            params["language"] = language

        data = await self._get_json(GOOGLE_GEOCODE_URL, params)
        return self._parse_response(data, language, max_results)

    def _parse_response(self, data: dict, language: str | None, max_results: int) -> list[ResolvedAddress]:
        """Parse a Google Maps geocoding response into candidates.

        Args:
            data: Raw JSON response from the Geocoding API.
            language: Language the results were requested in.
            max_results: Upper bound on the number of candidates.

        Returns:
            Candidates in the provider's order; results without any known
            address component are skipped.

        Raises:
            GeocodingProviderError: On API-specific error statuses or malformed results.
        """
        if not self._check_status(data):
            return []

        addresses: list[ResolvedAddress] = []
        for result in data.get("results", [])[:max_results]:
            try:
                location = result["geometry"]["location"]
                address = ResolvedAddress(
                    language=language,
                    latitude=float(location["lat"]),
                    longitude=float(location["lng"]),
                    provider=self.provider_name,
                )
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse Google Maps response: {e}")
                raise GeocodingProviderError("google", f"Failed to parse response: {e}") from e

            if self._apply_components(address, result.get("address_components", [])):
                addresses.append(address)
        return addresses

    @staticmethod
    def _apply_components(address: ResolvedAddress, components: list[dict]) -> bool:
        route: str | None = None
        street_number: str | None = None
        found = False
        for component in components:
            types = component.get("types") or []
            if not types:
                continue
            name = _component_name(component)
            match types[0]:
                case "administrative_area_level_1":
                    address.admin_area = name
                case "administrative_area_level_2":
                    address.sub_admin_area = name
                case "country":
                    address.country_code = component.get("short_name")
                    address.country_name = component.get("long_name")
                case "locality":
                    address.locality = name
                case "sublocality" | "sublocality_level_1" | "neighborhood":
                    address.sub_locality = name
                case "natural_feature" | "point_of_interest" | "establishment":
                    address.feature_name = name
                case "postal_code":
                    address.postal_code = name
                case "premise":
                    address.premises = name
                case "route":
                    route = name
                case "street_number":
                    street_number = name
                case "street_address":
                    address.address_lines.append(name or "")
                case _:
                    continue
            found = True

        if route:
            address.thoroughfare = f"{route} {street_number}" if street_number else route
        return found

    async def get_elevation(self, lat: float, lon: float) -> float | None:
        """Look up the elevation using the Google Elevation API.

        Raises:
            GeocodingProviderError: On transport, service, or API-specific errors.
        """
        params = {"locations": f"{lat},{lon}", "key": self._api_key}
        data = await self._get_json(GOOGLE_ELEVATION_URL, params)
        if not self._check_status(data):
            return None

        results = data.get("results", [])
        if not results:
            return None
        try:
            return float(results[0]["elevation"])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse Google elevation response: {e}")
            raise GeocodingProviderError("google", f"Failed to parse response: {e}") from e

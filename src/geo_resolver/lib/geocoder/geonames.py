"""GeoNames reverse geocoding and elevation provider.

Uses the GeoNames web services (https://www.geonames.org/export/web-services.html):
``findNearbyJSON`` for nearby toponyms and ``srtm3`` for elevation. Requires
a registered username.
"""

from typing import Any

import httpx
from loguru import logger

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseElevationProvider, BaseGeocoder, GeocodingProviderError

GEONAMES_BASE_URL = "https://secure.geonames.org"
DEFAULT_TIMEOUT = 10.0

# srtm3 value for points without data (e.g. over the sea)
SRTM3_NO_DATA = -32768


class GeoNamesGeocoder(BaseGeocoder, BaseElevationProvider):
    """GeoNames reverse geocoder and elevation provider."""

    def __init__(self, username: str, timeout: float = DEFAULT_TIMEOUT, base_url: str = GEONAMES_BASE_URL) -> None:
        self._username = username
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    @property
    def provider_name(self) -> str:
        return "geonames"

    @property
    def requires_api_key(self) -> bool:
        return True

    @property
    def is_configured(self) -> bool:
        return bool(self._username)

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/{path}", params=params)
                response.raise_for_status()
            return response

        except httpx.TimeoutException as e:
            logger.warning("GeoNames request timeout")
            raise GeocodingProviderError("geonames", "Request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"GeoNames HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "geonames",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("GeoNames connection error")
            raise GeocodingProviderError("geonames", "Connection to provider failed") from e
        except Exception as e:
            logger.exception("GeoNames unexpected error")
            raise GeocodingProviderError("geonames", f"Unexpected error: {e}") from e

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        max_results: int = 10,
    ) -> list[ResolvedAddress]:
        """Find nearby toponyms using the GeoNames findNearby service.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        params: dict[str, Any] = {
            "lat": lat,
            "lng": lon,
            "maxRows": max_results,
            "username": self._username,
        }
        if language:
            params["lang"] = language

        response = await self._get("findNearbyJSON", params)
        try:
            data = response.json()
        except ValueError as e:
            raise GeocodingProviderError("geonames", f"Failed to parse response: {e}") from e
        return self._parse_response(data, lat, lon, language, max_results)

    def _parse_response(
        self,
        data: dict,
        lat: float,
        lon: float,
        language: str | None,
        max_results: int,
    ) -> list[ResolvedAddress]:
        """Parse a findNearby response into candidates.

        With no toponyms, an ``ocean`` record becomes a single candidate at the
        query coordinate and an error ``status`` is raised.

        Raises:
            GeocodingProviderError: On an error status or malformed record.
        """
        records = data.get("geonames") or []
        if not records:
            ocean = data.get("ocean")
            if ocean and ocean.get("name"):
                address = ResolvedAddress(
                    language=language,
                    latitude=lat,
                    longitude=lon,
                    feature_name=ocean["name"],
                    elevation=0.0,
                    provider=self.provider_name,
                )
                address.set_formatted(ocean["name"])
                return [address]
            status = data.get("status")
            if status:
                raise GeocodingProviderError("geonames", f"API error: {status.get('message', status)}")
            return []

        addresses: list[ResolvedAddress] = []
        for record in records[:max_results]:
            try:
                elevation = record.get("elevation")
                addresses.append(
                    ResolvedAddress(
                        language=language,
                        latitude=float(record["lat"]),
                        longitude=float(record["lng"]),
                        feature_name=record.get("name"),
                        admin_area=record.get("adminName1") or None,
                        sub_admin_area=record.get("adminName2") or None,
                        country_code=record.get("countryCode"),
                        country_name=record.get("countryName"),
                        elevation=float(elevation) if elevation is not None else None,
                        provider=self.provider_name,
                    )
                )
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Failed to parse GeoNames response: {e}")
                raise GeocodingProviderError("geonames", f"Failed to parse response: {e}") from e
        return addresses

    async def get_elevation(self, lat: float, lon: float) -> float | None:
        """Look up the SRTM3 elevation; the service answers in plain text.

        Raises:
            GeocodingProviderError: On transport errors or a non-numeric reply.
        """
        params = {"lat": lat, "lng": lon, "username": self._username}
        response = await self._get("srtm3", params)
        text = response.text.strip()
        if not text:
            return None
        try:
            elevation = float(text)
        except ValueError as e:
            raise GeocodingProviderError("geonames", f"Failed to parse response: {text[:80]}") from e
        if elevation <= SRTM3_NO_DATA:
            return None
        return elevation

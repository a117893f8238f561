"""OpenStreetMap Nominatim reverse geocoder.

Uses the Nominatim reverse API (https://nominatim.org/release-docs/develop/api/Reverse/).
Serves as the "system" geocoder: free, and self-hostable by pointing
``base_url`` at a private instance. The public instance is rate-limited to 1 req/sec.
"""

import httpx
from loguru import logger

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseGeocoder, GeocodingProviderError

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "geo-resolver/0.1"

# Nominatim address keys that can hold the locality, most specific first
_LOCALITY_KEYS = ("city", "town", "village", "hamlet", "municipality")
_SUB_LOCALITY_KEYS = ("suburb", "neighbourhood", "quarter", "city_district")


def _first(address: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = address.get(key)
        if value:
            return value
    return None


class NominatimGeocoder(BaseGeocoder):
    """OpenStreetMap Nominatim reverse geocoder."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        email: str = "",
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout = timeout
        self._email = email
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent

    @property
    def provider_name(self) -> str:
        return "nominatim"

    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        max_results: int = 10,
    ) -> list[ResolvedAddress]:
        """Reverse geocode a coordinate using the Nominatim API.

        Nominatim returns at most one place per reverse query, so
        ``max_results`` only matters when it is zero.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        if max_results <= 0:
            return []

        params: dict[str, str | int | float] = {
            "lat": lat,
            "lon": lon,
            "format": "jsonv2",
            "addressdetails": 1,
        }
        if language:
            params["accept-language"] = language
        if self._email:
            params["email"] = self._email

        headers = {"User-Agent": self._user_agent}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/reverse", params=params, headers=headers)
                response.raise_for_status()

            data = response.json()
            return self._parse_response(data, language)

        except httpx.TimeoutException as e:
            logger.warning("Nominatim reverse geocoder timeout")
            raise GeocodingProviderError("nominatim", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Nominatim reverse geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "nominatim",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Nominatim reverse geocoder connection error")
            raise GeocodingProviderError("nominatim", "Connection to geocoding provider failed") from e
        except GeocodingProviderError:
            raise
        except Exception as e:
            logger.exception("Nominatim reverse geocoder unexpected error")
            raise GeocodingProviderError("nominatim", f"Unexpected error: {e}") from e

    def _parse_response(self, data: dict, language: str | None) -> list[ResolvedAddress]:
        """Parse a Nominatim reverse response into candidates.

        Args:
            data: Raw JSON object from the reverse endpoint.
            language: Language the results were requested in.

        Returns:
            A single-element list, or empty when Nominatim found nothing.
        """
        if not data or "error" in data:
            return []

        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Failed to parse Nominatim response: {e}")
            raise GeocodingProviderError("nominatim", f"Failed to parse response: {e}") from e

        address = data.get("address") or {}
        house_number = address.get("house_number")
        road = address.get("road")
        thoroughfare = f"{road} {house_number}" if road and house_number else road
        country_code = address.get("country_code")

        result = ResolvedAddress(
            language=language,
            latitude=lat,
            longitude=lon,
            feature_name=data.get("name") or None,
            premises=address.get("building"),
            thoroughfare=thoroughfare,
            sub_locality=_first(address, _SUB_LOCALITY_KEYS),
            locality=_first(address, _LOCALITY_KEYS),
            sub_admin_area=address.get("county"),
            admin_area=address.get("state"),
            postal_code=address.get("postcode"),
            country_code=country_code.upper() if country_code else None,
            country_name=address.get("country"),
            provider=self.provider_name,
        )
        display_name = data.get("display_name")
        if display_name:
            result.set_formatted(display_name)
        return [result]

"""Abstract reverse-geocoder and elevation interfaces for pluggable providers."""

from abc import ABC, abstractmethod

from geo_resolver.core.errors import GeoResolverError
from geo_resolver.lib.geocoder.address import ResolvedAddress


class GeocodingProviderError(GeoResolverError):
    """Raised when a provider experiences a transport or service error.

    Distinguishes provider failures (timeout, HTTP error, connection error)
    from a successful response with no match (which returns an empty result).

    Args:
        provider_name: Name of the failing provider.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the provider.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


class BaseGeocoder(ABC):
    """Abstract reverse geocoder interface. All address providers implement this."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this provider."""

    @property
    def requires_api_key(self) -> bool:
        """Whether this provider requires an API key to function."""
        return False

    @property
    def is_configured(self) -> bool:
        """Whether this provider has all required configuration (e.g., API keys)."""
        return True

    @abstractmethod
    async def reverse_geocode(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        max_results: int = 10,
    ) -> list[ResolvedAddress]:
        """Find addresses near a coordinate.

        Args:
            lat: WGS84 latitude.
            lon: WGS84 longitude.
            language: Preferred language tag for the results.
            max_results: Upper bound on the number of candidates.

        Returns:
            Candidate addresses, possibly empty.

        Raises:
            GeocodingProviderError: On transport or parse failure.
        """


class BaseElevationProvider(ABC):
    """Abstract elevation lookup interface."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this provider."""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def get_elevation(self, lat: float, lon: float) -> float | None:
        """Look up the elevation in metres at a coordinate.

        Returns:
            Elevation in metres, or None when the provider has no data.

        Raises:
            GeocodingProviderError: On transport or parse failure.
        """

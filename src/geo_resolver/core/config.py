"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _parse_list(value: str) -> list[str]:
    if not value.strip():
        return []
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Address cache
    cache_database_url: str = Field(
        default="sqlite+aiosqlite:///./geo-resolver.db",
        description="SQLAlchemy async URL of the embedded address/elevation cache",
    )

    @field_validator("cache_database_url")
    @classmethod
    def validate_cache_database_url(cls, v: str) -> str:
        if "+" not in v.split("://", 1)[0]:
            msg = "cache_database_url must name an async driver (e.g. sqlite+aiosqlite://)"
            raise ValueError(msg)
        return v

    # Packaged place tables
    countries_path: str = Field(
        default=str(_DATA_DIR / "countries.json"),
        description="JSON file with simplified country polygons (fixed-point vertices)",
    )
    cities_path: str = Field(
        default=str(_DATA_DIR / "cities.csv"),
        description="CSV file with predefined cities",
    )
    city_radius: float = Field(
        default=20_000.0,
        description="Maximum distance in metres for the nearest-city stage",
        gt=0,
    )

    # Geocoding: general
    geocoder_max_results: int = Field(
        default=10,
        description="Maximum candidates requested from each geocoder",
        gt=0,
    )
    geocoder_language: str = Field(
        default="en",
        description="Default language tag when the caller does not pass one",
    )
    geocoder_fallback_order: str = Field(
        default="google,bing,geonames",
        description="Comma-separated web geocoder order, tried after the system geocoder",
    )
    elevation_fallback_order: str = Field(
        default="bing,geonames,google",
        description="Comma-separated elevation provider order",
    )

    # Geocoding: system geocoder (Nominatim, self-hostable)
    geocoder_system_enabled: bool = Field(
        default=True,
        description="Enable the system reverse geocoder (Nominatim)",
    )
    geocoder_nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Nominatim base URL",
    )
    geocoder_nominatim_email: str = Field(
        default="",
        description="Email for Nominatim usage policy compliance",
    )
    geocoder_nominatim_timeout: float = Field(
        default=10.0,
        description="Nominatim request timeout in seconds",
        gt=0,
    )

    # Geocoding: Google Maps
    geocoder_google_enabled: bool = Field(
        default=False,
        description="Enable Google Maps geocoder and elevation (requires API key)",
    )
    geocoder_google_api_key: str | None = Field(
        default=None,
        description="Google Maps API key",
    )
    geocoder_google_timeout: float = Field(
        default=10.0,
        description="Google Maps request timeout in seconds",
        gt=0,
    )

    # Geocoding: Bing Maps
    geocoder_bing_enabled: bool = Field(
        default=False,
        description="Enable Bing Maps geocoder and elevation (requires API key)",
    )
    geocoder_bing_api_key: str | None = Field(
        default=None,
        description="Bing Maps API key",
    )
    geocoder_bing_timeout: float = Field(
        default=10.0,
        description="Bing Maps request timeout in seconds",
        gt=0,
    )

    # Geocoding: GeoNames
    geocoder_geonames_enabled: bool = Field(
        default=False,
        description="Enable GeoNames geocoder and elevation (requires username)",
    )
    geocoder_geonames_username: str | None = Field(
        default=None,
        description="GeoNames account username",
    )
    geocoder_geonames_timeout: float = Field(
        default=10.0,
        description="GeoNames request timeout in seconds",
        gt=0,
    )

    @property
    def geocoder_fallback_order_list(self) -> list[str]:
        """Parse web geocoder order string into a list of provider names.

        Returns:
            List of provider names in fallback order.
        """
        return _parse_list(self.geocoder_fallback_order)

    @property
    def elevation_fallback_order_list(self) -> list[str]:
        """Parse elevation provider order string into a list of provider names."""
        return _parse_list(self.elevation_fallback_order)

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )
    log_stage: str | None = Field(
        default=None,
        description="Only show log records from this resolver stage on stderr (e.g. cache, provider)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()

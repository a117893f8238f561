"""Shared test fixtures for place indexes, the address cache, and settings."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from geo_resolver.core.config import Settings
from geo_resolver.lib.geocoder.cache import AddressCache
from geo_resolver.lib.places.cities import CityEntry, CityIndex
from geo_resolver.lib.places.countries import CountryIndex
from geo_resolver.lib.places.polygon import CountryPolygon, to_fixed_point


def make_polygon(code: str, lat_min: float, lon_min: float, lat_max: float, lon_max: float) -> CountryPolygon:
    """Rectangular polygon from a degree bounding box, closed back to its first corner."""
    corners = [
        (lat_min, lon_min),
        (lat_max, lon_min),
        (lat_max, lon_max),
        (lat_min, lon_max),
        (lat_min, lon_min),
    ]
    return CountryPolygon.from_vertices(code, [(to_fixed_point(lat), to_fixed_point(lon)) for lat, lon in corners])


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test application settings with a throwaway cache and no remote providers."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        cache_database_url=f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}",
        geocoder_system_enabled=False,
    )


@pytest.fixture
def country_index() -> CountryIndex:
    """Israel and Jordan boxes that do not overlap, plus France."""
    return CountryIndex(
        [
            make_polygon("IL", 29.5, 34.2, 33.3, 35.5),
            make_polygon("JO", 29.2, 35.6, 33.4, 39.3),
            make_polygon("FR", 42.3, -4.8, 51.1, 8.2),
        ]
    )


@pytest.fixture
def city_index() -> CityIndex:
    """A handful of real cities with elevations."""
    return CityIndex(
        [
            CityEntry("Jerusalem", "IL", 31.76904, 35.21633, "Asia/Jerusalem", 786.0),
            CityEntry("Tel Aviv", "IL", 32.08088, 34.78057, "Asia/Jerusalem", 5.0),
            CityEntry("Amman", "JO", 31.95522, 35.94503, "Asia/Amman", 777.0),
            CityEntry("Paris", "FR", 48.85341, 2.3488, "Europe/Paris", 42.0),
        ]
    )


@pytest.fixture
async def address_cache(tmp_path: Path) -> AsyncGenerator[AddressCache]:
    """Address cache backed by a fresh SQLite file."""
    cache = AddressCache(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    yield cache
    await cache.close()

"""Resolver service — orchestrates the country, city, cache and provider cascade.

A resolution walks the stages in a fixed order, from the cheapest local
lookups to remote providers, and reports each better candidate as it is
found. Only invalid coordinates end a resolution early; every other failure
is logged and treated as an empty stage.
"""

from collections.abc import AsyncIterator, Callable, Sequence

from loguru import logger

from geo_resolver.core.config import Settings
from geo_resolver.lib.geocoder import (
    AddressCache,
    AddressSource,
    BaseElevationProvider,
    BaseGeocoder,
    ElevationEstimator,
    GeocodingProviderError,
    ResolvedAddress,
    find_best_address,
    get_configured_providers,
    get_elevation_providers,
    get_system_geocoder,
)
from geo_resolver.lib.geocoder.address import country_display_name
from geo_resolver.lib.geocoder.elevation import estimate_from_cache, estimate_from_cities
from geo_resolver.lib.places.cities import CityIndex, TimezoneLocation
from geo_resolver.lib.places.countries import CountryIndex
from geo_resolver.lib.places.distance import is_valid_coordinate
from geo_resolver.lib.places.loader import CsvCityDataSource, JsonPolygonDataSource

# Maximum distance to the nearest predefined city, in metres
CITY_RADIUS = 20_000.0
DEFAULT_MAX_RESULTS = 10

_provider_log = logger.bind(stage=AddressSource.PROVIDER.value)
_elevation_log = logger.bind(stage="elevation")


class AddressResolver:
    """Resolve coordinates to addresses and elevations.

    Args:
        countries: Country polygon index.
        cities: Predefined city index.
        cache: Persistent address cache, or None to run without one.
        system_geocoder: Geocoder tried first among the remote stages.
        web_geocoders: Further geocoders, in fallback order.
        elevation_providers: Remote elevation providers, in fallback order.
        city_radius: Maximum distance in metres for the nearest-city stage.
        max_results: Candidates requested from each geocoder.
    """

    def __init__(
        self,
        countries: CountryIndex,
        cities: CityIndex,
        cache: AddressCache | None = None,
        system_geocoder: BaseGeocoder | None = None,
        web_geocoders: Sequence[BaseGeocoder] = (),
        elevation_providers: Sequence[BaseElevationProvider] = (),
        *,
        city_radius: float = CITY_RADIUS,
        max_results: int = DEFAULT_MAX_RESULTS,
        estimator: ElevationEstimator | None = None,
    ) -> None:
        self.countries = countries
        self.cities = cities
        self.cache = cache
        self.system_geocoder = system_geocoder
        self.web_geocoders = list(web_geocoders)
        self.elevation_providers = list(elevation_providers)
        self.city_radius = city_radius
        self.max_results = max_results
        self.estimator = estimator or ElevationEstimator()

    @property
    def geocoders(self) -> list[BaseGeocoder]:
        """Remote geocoders in the order they are tried."""
        if self.system_geocoder is None:
            return list(self.web_geocoders)
        return [self.system_geocoder, *self.web_geocoders]

    def find_country(self, lat: float, lon: float, language: str | None = None) -> ResolvedAddress | None:
        """Country stage: the country containing (or nearest to) the coordinate."""
        polygon = self.countries.find_country(lat, lon)
        if polygon is None:
            return None
        return ResolvedAddress(
            language=language,
            latitude=lat,
            longitude=lon,
            country_code=polygon.country_code,
            country_name=country_display_name(polygon.country_code),
            source=AddressSource.COUNTRY,
        )

    def find_city(self, lat: float, lon: float, language: str | None = None) -> ResolvedAddress | None:
        """City stage: the nearest predefined city within ``city_radius``."""
        city = self.cities.find_nearest(lat, lon, max_distance=self.city_radius)
        if city is None:
            return None
        return ResolvedAddress(
            language=language,
            latitude=city.latitude,
            longitude=city.longitude,
            locality=city.name,
            country_code=city.country_code,
            country_name=country_display_name(city.country_code),
            elevation=city.elevation,
            timezone_id=city.timezone_id,
            source=AddressSource.CITY,
        )

    async def find_cached(self, lat: float, lon: float, language: str | None = None) -> ResolvedAddress | None:
        """Cache stage: the best previously resolved address nearby."""
        if self.cache is None:
            return None
        candidates = await self.cache.query_near(lat, lon, language)
        return find_best_address(lat, lon, candidates)

    async def _reverse_geocode(
        self,
        geocoder: BaseGeocoder,
        lat: float,
        lon: float,
        language: str | None,
    ) -> list[ResolvedAddress]:
        try:
            candidates = await geocoder.reverse_geocode(lat, lon, language, self.max_results)
        except GeocodingProviderError as e:
            _provider_log.warning(f"Reverse geocoder {geocoder.provider_name} failed: {e}")
            return []
        except Exception:
            _provider_log.exception(f"Reverse geocoder {geocoder.provider_name} unexpected error")
            return []
        for candidate in candidates:
            candidate.source = AddressSource.PROVIDER
            candidate.provider = candidate.provider or geocoder.provider_name
        return candidates

    async def find_remote(self, lat: float, lon: float, language: str | None = None) -> ResolvedAddress | None:
        """Provider stage: the best candidate of the first geocoder that has any."""
        for geocoder in self.geocoders:
            candidates = await self._reverse_geocode(geocoder, lat, lon, language)
            if candidates:
                _provider_log.debug(f"{geocoder.provider_name} returned {len(candidates)} candidates for {lat},{lon}")
                return find_best_address(lat, lon, candidates)
        return None

    async def iter_addresses(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        force: bool = False,
    ) -> AsyncIterator[ResolvedAddress]:
        """Yield progressively better addresses for a coordinate.

        Country and city results are yielded first. A cached address stops the
        cascade unless ``force`` is set; otherwise the remote geocoders are
        tried and the winning candidate is cached before it is yielded.
        Nothing is yielded for invalid coordinates.
        """
        if not is_valid_coordinate(lat, lon):
            logger.debug(f"Ignoring invalid coordinate {lat},{lon}")
            return

        country = self.find_country(lat, lon, language)
        if country is not None:
            yield country

        city = self.find_city(lat, lon, language)
        if city is not None:
            yield city

        cached = await self.find_cached(lat, lon, language)
        if cached is not None:
            yield cached
            if not force:
                return

        remote = await self.find_remote(lat, lon, language)
        if remote is not None:
            if self.cache is not None:
                await self.cache.insert(lat, lon, remote)
            yield remote

    async def find_address(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        on_found: Callable[[ResolvedAddress], None] | None = None,
        force: bool = False,
    ) -> ResolvedAddress | None:
        """Resolve a coordinate to its best address.

        Args:
            lat: WGS84 latitude.
            lon: WGS84 longitude.
            language: Preferred language tag, or None for any.
            on_found: Called with each progressively better address.
            force: Query the remote geocoders even after a cache hit.

        Returns:
            The last (best) address found, or None.
        """
        best: ResolvedAddress | None = None
        async for address in self.iter_addresses(lat, lon, language, force=force):
            best = address
            if on_found is not None:
                on_found(address)
        return best

    async def _remote_elevation(self, lat: float, lon: float) -> float | None:
        for provider in self.elevation_providers:
            try:
                elevation = await provider.get_elevation(lat, lon)
            except GeocodingProviderError as e:
                _elevation_log.warning(f"Elevation provider {provider.provider_name} failed: {e}")
                continue
            except Exception:
                _elevation_log.exception(f"Elevation provider {provider.provider_name} unexpected error")
                continue
            if elevation is not None:
                return elevation
        return None

    async def find_elevation(
        self,
        lat: float,
        lon: float,
        on_found: Callable[[float], None] | None = None,
    ) -> float | None:
        """Estimate the elevation at a coordinate.

        Cached samples are tried first, then city elevations, then the remote
        elevation providers. A remote result is cached.

        Returns:
            Elevation in metres, or None.
        """
        if not is_valid_coordinate(lat, lon):
            return None

        elevation: float | None = None
        if self.cache is not None:
            elevation = await estimate_from_cache(self.cache, lat, lon, self.estimator)
        if elevation is None:
            elevation = estimate_from_cities(self.cities, lat, lon, self.estimator)
        if elevation is None:
            elevation = await self._remote_elevation(lat, lon)
            if elevation is not None and self.cache is not None:
                await self.cache.insert_elevation(lat, lon, elevation)

        if elevation is not None and on_found is not None:
            on_found(elevation)
        return elevation

    def find_location_for_timezone(self, tz_id: str) -> TimezoneLocation | None:
        """Representative location for a time zone, from the city table."""
        return self.cities.find_location_for_timezone(tz_id)

    async def close(self) -> None:
        if self.cache is not None:
            await self.cache.close()


def build_resolver(settings: Settings, *, offline: bool = False) -> AddressResolver:
    """Wire a resolver from settings.

    Args:
        settings: Application settings.
        offline: Skip all remote geocoders and elevation providers.

    Returns:
        A ready AddressResolver.

    Raises:
        DataSourceError: If the packaged place tables cannot be read.
    """
    countries = CountryIndex.from_source(JsonPolygonDataSource(settings.countries_path))
    cities = CityIndex.from_source(CsvCityDataSource(settings.cities_path))
    cache = AddressCache(settings.cache_database_url)

    if offline:
        system_geocoder = None
        web_geocoders: list[BaseGeocoder] = []
        elevation_providers: list[BaseElevationProvider] = []
    else:
        system_geocoder = get_system_geocoder(settings)
        web_geocoders = get_configured_providers(settings)
        elevation_providers = get_elevation_providers(settings)

    names = [g.provider_name for g in ([system_geocoder] if system_geocoder else []) + web_geocoders]
    logger.info(f"Resolver geocoders: {', '.join(names) or 'none'}")

    return AddressResolver(
        countries,
        cities,
        cache=cache,
        system_geocoder=system_geocoder,
        web_geocoders=web_geocoders,
        elevation_providers=elevation_providers,
        city_radius=settings.city_radius,
        max_results=settings.geocoder_max_results,
    )

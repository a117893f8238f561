"""Predefined city table with nearest-city and time-zone lookups.

Cities are held in parallel lists and searched linearly; the packaged
tables are small (hundreds of rows) so no spatial index is kept.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from geo_resolver.lib.places.distance import LONGITUDE_MAX, LONGITUDE_MIN, distance_between

if TYPE_CHECKING:
    from geo_resolver.lib.places.loader import CityDataSource

LONGITUDE_GLOBE = 360.0
# Degrees of longitude per hour of UTC offset
TZ_HOUR = LONGITUDE_GLOBE / 24
TZ_HOUR_HALF = TZ_HOUR / 2


@dataclass(frozen=True)
class CityEntry:
    """One row of the predefined city table."""

    name: str
    country_code: str
    latitude: float
    longitude: float
    timezone_id: str
    elevation: float | None = None


@dataclass(frozen=True)
class TimezoneLocation:
    """A representative location for a time zone.

    ``city`` is None when no city matched and only the zone's meridian is known.
    """

    latitude: float
    longitude: float
    elevation: float | None = None
    city: CityEntry | None = None


def _standard_offset_hours(tz_id: str) -> float | None:
    try:
        zone = ZoneInfo(tz_id)
    except (ZoneInfoNotFoundError, ValueError):
        return None
    # Mid-winter in the northern hemisphere; subtract DST for the southern one.
    moment = datetime(datetime.now(UTC).year, 1, 15, 12, tzinfo=zone)
    offset = (moment.utcoffset() or timedelta(0)) - (moment.dst() or timedelta(0))
    return offset.total_seconds() / 3600


def _wrap_longitude(longitude: float) -> float:
    if longitude > LONGITUDE_MAX:
        return longitude - LONGITUDE_GLOBE
    if longitude < LONGITUDE_MIN:
        return longitude + LONGITUDE_GLOBE
    return longitude


def _in_band(longitude: float, centre: float, half_width: float) -> bool:
    west = centre - half_width
    east = centre + half_width
    if west <= longitude <= east:
        return True
    # Band crosses the antimeridian
    if east > LONGITUDE_MAX:
        return longitude <= east - LONGITUDE_GLOBE
    if west < LONGITUDE_MIN:
        return longitude >= west + LONGITUDE_GLOBE
    return False


class CityIndex:
    """Reverse lookup from a coordinate to the nearest predefined city."""

    def __init__(self, cities: Iterable[CityEntry] = ()) -> None:
        self._names: list[str] = []
        self._country_codes: list[str] = []
        self._latitudes: list[float] = []
        self._longitudes: list[float] = []
        self._timezones: list[str] = []
        self._elevations: list[float | None] = []
        for city in cities:
            self._names.append(city.name)
            self._country_codes.append(city.country_code)
            self._latitudes.append(city.latitude)
            self._longitudes.append(city.longitude)
            self._timezones.append(city.timezone_id)
            self._elevations.append(city.elevation)

    @classmethod
    def from_source(cls, source: "CityDataSource") -> "CityIndex":
        """Build the index from a city data source."""
        index = cls(source.load_cities())
        logger.info(f"City index ready with {len(index)} cities")
        return index

    def __len__(self) -> int:
        return len(self._names)

    def _entry(self, i: int) -> CityEntry:
        return CityEntry(
            name=self._names[i],
            country_code=self._country_codes[i],
            latitude=self._latitudes[i],
            longitude=self._longitudes[i],
            timezone_id=self._timezones[i],
            elevation=self._elevations[i],
        )

    def find_nearest(self, lat: float, lon: float, max_distance: float | None = None) -> CityEntry | None:
        """Find the city closest to the coordinate.

        Args:
            lat: WGS84 latitude.
            lon: WGS84 longitude.
            max_distance: Ignore cities farther than this many metres.

        Returns:
            The nearest CityEntry, or None if the table is empty or nothing is in range.
        """
        nearest = -1
        distance_min = float("inf")
        for i in range(len(self._names)):
            d = distance_between(lat, lon, self._latitudes[i], self._longitudes[i])
            if d < distance_min:
                distance_min = d
                nearest = i
        if nearest < 0:
            return None
        if max_distance is not None and distance_min > max_distance:
            return None
        return self._entry(nearest)

    def cities_within(self, lat: float, lon: float, radius: float) -> list[CityEntry]:
        """List cities within ``radius`` metres, in table order."""
        return [
            self._entry(i)
            for i in range(len(self._names))
            if distance_between(lat, lon, self._latitudes[i], self._longitudes[i]) <= radius
        ]

    def elevation_samples(self, lat: float, lon: float, radius: float) -> list[tuple[float, float]]:
        """List ``(distance, elevation)`` pairs for cities with a known elevation within ``radius``."""
        samples: list[tuple[float, float]] = []
        for i, elevation in enumerate(self._elevations):
            if elevation is None:
                continue
            d = distance_between(lat, lon, self._latitudes[i], self._longitudes[i])
            if d <= radius:
                samples.append((d, elevation))
        return samples

    def find_location_for_timezone(self, tz_id: str) -> TimezoneLocation | None:
        """Find a representative location for a time zone.

        Cities in the zone itself are preferred. Otherwise cities inside the
        longitude band of the zone's standard UTC offset are used, first
        half an hour either side and then a full hour. With several candidates
        the one nearest their centroid wins.

        Args:
            tz_id: IANA time zone id, e.g. ``Asia/Jerusalem``.

        Returns:
            The location, or None when the zone id is unknown.
        """
        offset_hours = _standard_offset_hours(tz_id)
        if offset_hours is None:
            logger.warning(f"Unknown time zone: {tz_id}")
            return None
        meridian = _wrap_longitude(TZ_HOUR * offset_hours)

        matches = [i for i, zone in enumerate(self._timezones) if zone == tz_id]
        if not matches:
            for half_width in (TZ_HOUR_HALF, TZ_HOUR):
                matches = [i for i, lon in enumerate(self._longitudes) if _in_band(lon, meridian, half_width)]
                if matches:
                    break

        if not matches:
            return TimezoneLocation(latitude=0.0, longitude=meridian)

        chosen = matches[0]
        if len(matches) > 1:
            centre_lat = sum(self._latitudes[i] for i in matches) / len(matches)
            centre_lon = sum(self._longitudes[i] for i in matches) / len(matches)
            distance_min = float("inf")
            for i in matches:
                d = distance_between(centre_lat, centre_lon, self._latitudes[i], self._longitudes[i])
                if d <= distance_min:
                    distance_min = d
                    chosen = i

        city = self._entry(chosen)
        return TimezoneLocation(
            latitude=city.latitude,
            longitude=city.longitude,
            elevation=city.elevation,
            city=city,
        )

"""Reverse lookup from a coordinate to a country over simplified borders."""

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from loguru import logger

from geo_resolver.lib.places.polygon import CountryPolygon, to_fixed_point

if TYPE_CHECKING:
    from geo_resolver.lib.places.loader import PolygonDataSource

# Maximum number of bounding boxes considered for one point
MAX_COUNTRIES_OVERLAP = 20


class CountryIndex:
    """Immutable set of country polygons searched by bounding box."""

    def __init__(self, polygons: Iterable[CountryPolygon] = ()) -> None:
        self._polygons: tuple[CountryPolygon, ...] = tuple(polygons)

    @classmethod
    def from_source(cls, source: "PolygonDataSource") -> "CountryIndex":
        """Build the index from a polygon data source, preserving source order."""
        index = cls(CountryPolygon.from_vertices(code, list(vertices)) for code, vertices in source.load_polygons())
        logger.info(f"Country index ready with {len(index)} polygons")
        return index

    def __len__(self) -> int:
        return len(self._polygons)

    @property
    def polygons(self) -> tuple[CountryPolygon, ...]:
        return self._polygons

    def find_country(self, lat: float, lon: float) -> CountryPolygon | None:
        """Find the country for a coordinate.

        Args:
            lat: WGS84 latitude.
            lon: WGS84 longitude.

        Returns:
            The best matching polygon, or None only when the index is empty.
        """
        fp_lat = to_fixed_point(lat)
        fp_lon = to_fixed_point(lon)

        matches: list[CountryPolygon] = []
        for polygon in self._polygons:
            if polygon.contains_box(fp_lat, fp_lon):
                matches.append(polygon)
                if len(matches) >= MAX_COUNTRIES_OVERLAP:
                    break

        if not matches:
            return _nearest_border(self._polygons, fp_lat, fp_lon)
        if len(matches) == 1:
            return matches[0]

        found = _nested_match(matches)
        if found is not None:
            return found
        return _nearest_border(matches, fp_lat, fp_lon)

    def find_country_code(self, lat: float, lon: float) -> str | None:
        """Shortcut for the ISO code of ``find_country``."""
        polygon = self.find_country(lat, lon)
        return polygon.country_code if polygon is not None else None


def _nested_match(matches: list[CountryPolygon]) -> CountryPolygon | None:
    """Prefer an enclave: a match whose box lies inside the current pick's box."""
    current = matches[0]
    found: CountryPolygon | None = None
    for other in matches[1:]:
        if current.contains_polygon_box(other):
            current = other
            found = other
        elif found is None and other.contains_polygon_box(current):
            found = matches[0]
    return found


def _nearest_border(polygons: Iterable[CountryPolygon], fp_lat: int, fp_lon: int) -> CountryPolygon | None:
    found: CountryPolygon | None = None
    distance_min = math.inf
    for polygon in polygons:
        distance = polygon.minimum_distance_to_borders(fp_lat, fp_lon)
        if found is None or distance < distance_min:
            distance_min = distance
            found = polygon
    return found

"""Simplified country borders and the fixed-point geometry around them.

Vertices are stored as fixed-point integers (degrees × ``FIXED_POINT_RATIO``)
so bounding-box comparisons are exact.
"""

import math
from array import array

FIXED_POINT_RATIO = 1e5

# Minimum capacity of the vertex arrays
MIN_LENGTH = 8


def to_fixed_point(degrees: float) -> int:
    """Convert degrees to a rounded fixed-point integer."""
    return int(round(degrees * FIXED_POINT_RATIO))


def from_fixed_point(value: float) -> float:
    """Convert a fixed-point value back to degrees."""
    return value / FIXED_POINT_RATIO


def point_to_line_distance(ax: float, ay: float, bx: float, by: float, px: float, py: float) -> float:
    """Distance from point ``p`` to the infinite line through ``a`` and ``b``.

    Args:
        ax: X coordinate of a point on the line.
        ay: Y coordinate of a point on the line.
        bx: X coordinate of another point on the line.
        by: Y coordinate of another point on the line.
        px: X coordinate of the point.
        py: Y coordinate of the point.

    Returns:
        The perpendicular distance, or ``math.inf`` when ``a`` and ``b`` coincide.
    """
    dx_ab = bx - ax
    dy_ab = by - ay
    normal_length = math.hypot(dx_ab, dy_ab)
    if normal_length == 0:
        return math.inf
    return abs((px - ax) * dy_ab - (py - ay) * dx_ab) / normal_length


def _grown_capacity(npoints: int) -> int:
    new_length = npoints << 1
    if new_length < MIN_LENGTH:
        return MIN_LENGTH
    if new_length & (new_length - 1):
        new_length = 1 << new_length.bit_length()
    return new_length


class CountryPolygon:
    """Country borders as a simplified polygon with a running bounding box.

    Latitudes are the Y axis and longitudes the X axis, both fixed-point.
    """

    def __init__(self, country_code: str) -> None:
        self.country_code = country_code
        self._npoints = 0
        self._latitudes = array("i")
        self._longitudes = array("i")
        self.latitude_min = math.inf
        self.latitude_max = -math.inf
        self.longitude_min = math.inf
        self.longitude_max = -math.inf

    @classmethod
    def from_vertices(cls, country_code: str, vertices: list[tuple[int, int]]) -> "CountryPolygon":
        """Build a polygon from ``(latitude, longitude)`` fixed-point pairs."""
        polygon = cls(country_code)
        for latitude, longitude in vertices:
            polygon.add_point(latitude, longitude)
        return polygon

    def __len__(self) -> int:
        return self._npoints

    def __repr__(self) -> str:
        points = ",".join(f"({lat},{lon})" for lat, lon in self.vertices)
        return f"{self.country_code}[{points}]"

    @property
    def capacity(self) -> int:
        """Allocated length of the vertex arrays."""
        return len(self._latitudes)

    @property
    def vertices(self) -> list[tuple[int, int]]:
        return list(zip(self._latitudes[: self._npoints], self._longitudes[: self._npoints], strict=True))

    @property
    def bounds(self) -> tuple[int, int, int, int] | None:
        """Bounding box as ``(lat_min, lon_min, lat_max, lon_max)``, or None when empty."""
        if not self._npoints:
            return None
        return (
            int(self.latitude_min),
            int(self.longitude_min),
            int(self.latitude_max),
            int(self.longitude_max),
        )

    def add_point(self, latitude: int, longitude: int) -> None:
        """Append a fixed-point vertex and widen the bounding box.

        Args:
            latitude: Fixed-point latitude (Y coordinate).
            longitude: Fixed-point longitude (X coordinate).
        """
        if self._npoints >= len(self._latitudes):
            new_length = _grown_capacity(self._npoints)
            padding = array("i", [0]) * (new_length - len(self._latitudes))
            self._latitudes.extend(padding)
            self._longitudes.extend(padding)
        self._latitudes[self._npoints] = latitude
        self._longitudes[self._npoints] = longitude
        self._npoints += 1
        self._update_bounds(latitude, longitude)

    def _update_bounds(self, latitude: int, longitude: int) -> None:
        self.latitude_min = min(self.latitude_min, latitude)
        self.longitude_min = min(self.longitude_min, longitude)
        self.latitude_max = max(self.latitude_max, latitude)
        self.longitude_max = max(self.longitude_max, longitude)

    def contains_box(self, latitude: int, longitude: int) -> bool:
        """Whether the fixed-point coordinate falls inside the bounding box (inclusive)."""
        return (
            self.latitude_min <= latitude <= self.latitude_max
            and self.longitude_min <= longitude <= self.longitude_max
        )

    def contains_polygon_box(self, other: "CountryPolygon") -> bool:
        """Whether ``other``'s bounding box is nested inside this one."""
        if not other._npoints or not self._npoints:
            return False
        return (
            other.latitude_min >= self.latitude_min
            and other.longitude_min >= self.longitude_min
            and other.latitude_max <= self.latitude_max
            and other.longitude_max <= self.longitude_max
        )

    def centre(self) -> tuple[int, int]:
        """Midpoint of the bounding box as ``(latitude, longitude)``."""
        if not self._npoints:
            msg = f"Polygon {self.country_code} has no vertices"
            raise ValueError(msg)
        return (
            int(self.latitude_min + self.latitude_max) // 2,
            int(self.longitude_min + self.longitude_max) // 2,
        )

    def minimum_distance_to_borders(self, latitude: int, longitude: int) -> float:
        """Minimum distance from the point to the lines through consecutive vertices.

        Only segments ``(i, i + 1)`` with ``i + 1 < n - 1`` are measured, so
        the polyline is left open: neither the closing edge back to vertex 0
        nor the final segment is considered.

        Args:
            latitude: Fixed-point latitude of the point.
            longitude: Fixed-point longitude of the point.

        Returns:
            Distance in fixed-point units, or ``math.inf`` if no segment was measured.
        """
        lats = self._latitudes
        lons = self._longitudes
        last = self._npoints - 1
        minimum = math.inf
        for i in range(last - 1):
            j = i + 1
            d = point_to_line_distance(lons[i], lats[i], lons[j], lats[j], longitude, latitude)
            if d < minimum:
                minimum = d
        return minimum

"""Coordinate validation and great-circle distances."""

import math

LATITUDE_MIN = -90.0
LATITUDE_MAX = 90.0
LONGITUDE_MIN = -180.0
LONGITUDE_MAX = 180.0

# Mean Earth radius (IUGG) in metres
EARTH_RADIUS = 6_371_008.8

# Search radii, in metres
SAME_STREET = 250.0
SAME_HOOD = 1_000.0
SAME_CITY = 15_000.0
SAME_PLATEAU = 150_000.0
SAME_PLANET = 6_000_000.0


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Whether the coordinate is finite and within WGS84 ranges."""
    if math.isnan(lat) or math.isnan(lng):
        return False
    return LATITUDE_MIN <= lat <= LATITUDE_MAX and LONGITUDE_MIN <= lng <= LONGITUDE_MAX


def validate_coordinates(lat: float, lng: float) -> None:
    """Validate that a coordinate lies on the globe.

    Args:
        lat: WGS84 latitude.
        lng: WGS84 longitude.

    Raises:
        ValueError: If either value is out of range or NaN.
    """
    if not is_valid_coordinate(lat, lng):
        msg = f"Coordinates out of range: {lat},{lng}"
        raise ValueError(msg)


def distance_between(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle (haversine) distance in metres between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

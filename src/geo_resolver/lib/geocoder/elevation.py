"""Elevation interpolation from nearby samples.

Samples come from cached elevation rows or from the predefined city table;
both reduce to ``(distance, elevation)`` pairs before estimation.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from geo_resolver.lib.places.distance import SAME_CITY, SAME_PLATEAU

if TYPE_CHECKING:
    from geo_resolver.lib.geocoder.cache import AddressCache
    from geo_resolver.lib.places.cities import CityIndex


@dataclass(frozen=True)
class ElevationSample:
    """A known elevation and its distance in metres from the query point."""

    latitude: float
    longitude: float
    elevation: float
    distance: float


class ElevationEstimator:
    """Inverse-square-distance blend of nearby elevations.

    Args:
        single_radius: A lone sample closer than this is returned as-is.
    """

    def __init__(self, single_radius: float = SAME_CITY) -> None:
        self.single_radius = single_radius

    def estimate(self, samples: Sequence[tuple[float, float]]) -> float | None:
        """Estimate an elevation from ``(distance, elevation)`` pairs.

        Each sample is weighted by ``1 - d²/S`` where ``S`` is the sum of all
        squared distances, and the weighted sum is divided by ``n - 1``.

        Returns:
            The estimate in metres, or None when there is not enough data.
        """
        n = len(samples)
        if n == 1:
            distance, elevation = samples[0]
            return elevation if distance <= self.single_radius else None
        if n < 2:
            return None

        squared = [distance * distance for distance, _ in samples]
        total = sum(squared)
        if total == 0:
            return sum(elevation for _, elevation in samples) / n

        weighted = sum((1 - d / total) * elevation for d, (_, elevation) in zip(squared, samples, strict=True))
        return weighted / (n - 1)


async def estimate_from_cache(
    cache: "AddressCache",
    lat: float,
    lon: float,
    estimator: ElevationEstimator | None = None,
) -> float | None:
    """Estimate the elevation from cached samples within the same plateau."""
    samples = await cache.query_elevation_near(lat, lon, SAME_PLATEAU)
    estimate = (estimator or ElevationEstimator()).estimate([(s.distance, s.elevation) for s in samples])
    if estimate is not None:
        logger.bind(stage="elevation").debug(f"Elevation from {len(samples)} cached samples: {estimate:.1f}m")
    return estimate


def estimate_from_cities(
    cities: "CityIndex",
    lat: float,
    lon: float,
    estimator: ElevationEstimator | None = None,
) -> float | None:
    """Estimate the elevation from city elevations.

    The nearest city within the same-city radius wins outright; otherwise
    cities within the same plateau are blended.
    """
    estimator = estimator or ElevationEstimator()
    samples = cities.elevation_samples(lat, lon, SAME_PLATEAU)
    if not samples:
        return None

    distance, elevation = min(samples, key=lambda sample: sample[0])
    if distance <= estimator.single_radius:
        return elevation
    return estimator.estimate(samples)

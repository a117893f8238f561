"""Pick the best of several candidate addresses for a query coordinate."""

from collections.abc import Sequence

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.places.distance import distance_between

# Fields checked in order when no candidate has coordinates
_SPECIFICITY = (
    "feature_name",
    "locality",
    "sub_locality",
    "admin_area",
    "sub_admin_area",
    "country_name",
)


def find_best_address(lat: float, lon: float, candidates: Sequence[ResolvedAddress]) -> ResolvedAddress | None:
    """Select the candidate that best describes the coordinate.

    The closest candidate with coordinates wins, ties going to the earlier
    one. Without any coordinates, the first candidate with the most
    specific populated field wins.

    Args:
        lat: Query latitude.
        lon: Query longitude.
        candidates: Candidates in provider order.

    Returns:
        The chosen candidate, or None for an empty sequence.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    best: ResolvedAddress | None = None
    distance_min = float("inf")
    for candidate in candidates:
        if not candidate.has_coordinates:
            continue
        d = distance_between(lat, lon, candidate.latitude, candidate.longitude)
        if best is None or d < distance_min:
            distance_min = d
            best = candidate
    if best is not None:
        return best

    for attr in _SPECIFICITY:
        for candidate in candidates:
            if getattr(candidate, attr):
                return candidate
    return candidates[0]

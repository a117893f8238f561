"""Unit tests for best-candidate selection."""

from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.selection import find_best_address

# Query point; 0.00009 degrees of latitude is roughly 10 metres
LAT, LON = 31.778, 35.235


def _at(metres_north: float, name: str) -> ResolvedAddress:
    return ResolvedAddress(latitude=LAT + metres_north / 111_195, longitude=LON, feature_name=name)


class TestFindBestAddress:
    """Tests for find_best_address."""

    def test_empty(self) -> None:
        assert find_best_address(LAT, LON, []) is None

    def test_single_candidate_is_used_as_is(self) -> None:
        only = ResolvedAddress(locality="Far away", latitude=0.0, longitude=0.0)
        assert find_best_address(LAT, LON, [only]) is only

    def test_closest_candidate_wins(self) -> None:
        candidates = [_at(10, "ten"), _at(5, "five"), _at(50, "fifty")]
        best = find_best_address(LAT, LON, candidates)
        assert best is not None
        assert best.feature_name == "five"

    def test_ties_go_to_input_order(self) -> None:
        first = _at(20, "first")
        second = _at(20, "second")
        assert find_best_address(LAT, LON, [first, second]) is first

    def test_candidates_without_coordinates_are_ignored_when_others_have_them(self) -> None:
        no_coords = ResolvedAddress(feature_name="Somewhere")
        located = _at(1000, "located")
        assert find_best_address(LAT, LON, [no_coords, located]) is located

    def test_specificity_without_coordinates(self) -> None:
        country = ResolvedAddress(country_name="Israel")
        admin = ResolvedAddress(admin_area="Jerusalem District")
        locality = ResolvedAddress(locality="Jerusalem")
        assert find_best_address(LAT, LON, [country, admin, locality]) is locality

    def test_feature_beats_locality(self) -> None:
        locality = ResolvedAddress(locality="Jerusalem")
        feature = ResolvedAddress(feature_name="Western Wall")
        assert find_best_address(LAT, LON, [locality, feature]) is feature

    def test_sub_locality_beats_admin_area(self) -> None:
        admin = ResolvedAddress(admin_area="Jerusalem District")
        sub_locality = ResolvedAddress(sub_locality="Old City")
        assert find_best_address(LAT, LON, [admin, sub_locality]) is sub_locality

    def test_first_when_nothing_is_populated(self) -> None:
        a = ResolvedAddress(postal_code="91000")
        b = ResolvedAddress(postal_code="92000")
        assert find_best_address(LAT, LON, [a, b]) is a

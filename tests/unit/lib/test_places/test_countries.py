"""Unit tests for the country index."""

from conftest import make_polygon

from geo_resolver.lib.places.countries import MAX_COUNTRIES_OVERLAP, CountryIndex
from geo_resolver.lib.places.polygon import CountryPolygon


class _ListSource:
    def __init__(self, rows: list[tuple[str, list[tuple[int, int]]]]) -> None:
        self.rows = rows

    def load_polygons(self) -> list[tuple[str, list[tuple[int, int]]]]:
        return self.rows


class TestFindCountry:
    """Tests for CountryIndex.find_country."""

    def test_point_in_single_box(self, country_index: CountryIndex) -> None:
        polygon = country_index.find_country(31.778, 35.235)
        assert polygon is not None
        assert polygon.country_code == "IL"

    def test_find_country_code(self, country_index: CountryIndex) -> None:
        assert country_index.find_country_code(31.95, 35.95) == "JO"
        assert country_index.find_country_code(48.85, 2.35) == "FR"

    def test_enclave_is_preferred(self) -> None:
        index = CountryIndex(
            [
                make_polygon("IT", 36.0, 6.0, 47.0, 19.0),
                make_polygon("VA", 41.899, 12.445, 41.907, 12.459),
            ]
        )
        assert index.find_country_code(41.903, 12.452) == "VA"

    def test_enclave_is_preferred_when_listed_first(self) -> None:
        index = CountryIndex(
            [
                make_polygon("VA", 41.899, 12.445, 41.907, 12.459),
                make_polygon("IT", 36.0, 6.0, 47.0, 19.0),
            ]
        )
        assert index.find_country_code(41.903, 12.452) == "VA"

    def test_point_in_outer_box_only(self) -> None:
        index = CountryIndex(
            [
                make_polygon("IT", 36.0, 6.0, 47.0, 19.0),
                make_polygon("VA", 41.899, 12.445, 41.907, 12.459),
            ]
        )
        assert index.find_country_code(45.46, 9.19) == "IT"

    def test_overlapping_boxes_use_nearest_border(self) -> None:
        index = CountryIndex(
            [
                make_polygon("AA", 0.0, 0.0, 10.0, 10.0),
                make_polygon("BB", 5.0, 5.0, 15.0, 15.0),
                # Not a match, although its west border is closest to the point
                make_polygon("CC", 20.0, 9.0001, 30.0, 12.0),
            ]
        )
        # AA's east border is 1 degree away, BB's nearest measured border is 4
        assert index.find_country_code(6.0, 9.0) == "AA"

    def test_no_box_match_uses_nearest_border(self, country_index: CountryIndex) -> None:
        # In the sea just west of the IL box
        polygon = country_index.find_country(33.0, 34.0)
        assert polygon is not None
        assert polygon.country_code == "IL"

    def test_no_box_match_never_returns_none(self) -> None:
        index = CountryIndex([make_polygon("FR", 42.3, -4.8, 51.1, 8.2)])
        assert index.find_country_code(-45.0, 170.0) == "FR"

    def test_degenerate_polygons_still_return_a_country(self) -> None:
        index = CountryIndex([CountryPolygon.from_vertices("XX", [(0, 0)])])
        assert index.find_country_code(50.0, 50.0) == "XX"

    def test_empty_index_returns_none(self) -> None:
        index = CountryIndex()
        assert index.find_country(31.778, 35.235) is None
        assert index.find_country_code(31.778, 35.235) is None

    def test_matches_are_capped(self) -> None:
        # Identical boxes nest in each other, so the walk moves to each next match
        polygons = [make_polygon(f"C{i:02d}", 0.0, 0.0, 10.0, 10.0) for i in range(MAX_COUNTRIES_OVERLAP + 5)]
        index = CountryIndex(polygons)
        assert index.find_country_code(5.0, 5.0) == f"C{MAX_COUNTRIES_OVERLAP - 1:02d}"


class TestCountryIndexFromSource:
    """Tests for building the index from a polygon source."""

    def test_from_source_preserves_order(self) -> None:
        source = _ListSource(
            [
                ("IL", [(3328000, 3560000), (2950000, 3490000), (3130000, 3425000)]),
                ("JO", [(3237000, 3579000), (2920000, 3670000)]),
            ]
        )
        index = CountryIndex.from_source(source)
        assert len(index) == 2
        assert [p.country_code for p in index.polygons] == ["IL", "JO"]
        assert len(index.polygons[0]) == 3

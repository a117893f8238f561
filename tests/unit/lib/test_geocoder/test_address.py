"""Unit tests for resolved address formatting."""

from geo_resolver.lib.geocoder.address import AddressSource, ResolvedAddress, country_display_name


class TestCountryDisplayName:
    """Tests for ISO code to country name lookup."""

    def test_known_code(self) -> None:
        assert country_display_name("IL") == "Israel"
        assert country_display_name("fr") == "France"

    def test_common_name_is_preferred(self) -> None:
        # pycountry's official name is "Taiwan, Province of China"
        assert country_display_name("TW") == "Taiwan"

    def test_unknown_code_falls_back_to_code(self) -> None:
        assert country_display_name("zz") == "ZZ"

    def test_no_code(self) -> None:
        assert country_display_name(None) is None
        assert country_display_name("") is None


class TestFormat:
    """Tests for ResolvedAddress.format."""

    def test_full_address_order(self) -> None:
        address = ResolvedAddress(
            feature_name="Western Wall",
            thoroughfare="HaKotel",
            sub_locality="Old City",
            locality="Jerusalem",
            admin_area="Jerusalem District",
            country_name="Israel",
        )
        assert address.format() == "Western Wall, HaKotel, Old City, Jerusalem, Jerusalem District, Israel"

    def test_repeated_parts_are_skipped(self) -> None:
        address = ResolvedAddress(
            feature_name="Paris",
            locality="Paris",
            sub_admin_area="Paris",
            admin_area="Ile-de-France",
            country_name="France",
        )
        assert address.format() == "Paris, Ile-de-France, France"

    def test_address_lines_that_repeat_parts_are_dropped(self) -> None:
        address = ResolvedAddress(
            thoroughfare="Jaffa Road 1",
            locality="Jerusalem",
            address_lines=["Jaffa Road 1, Jerusalem", "Building C"],
        )
        assert address.format() == "Jaffa Road 1, Building C, Jerusalem"

    def test_country_code_only(self) -> None:
        assert ResolvedAddress(country_code="GB").format() == "United Kingdom"

    def test_empty_address(self) -> None:
        assert ResolvedAddress().format() == ""


class TestFormatted:
    """Tests for the cached formatted text."""

    def test_formatted_is_computed_once(self) -> None:
        address = ResolvedAddress(locality="Haifa", country_name="Israel")
        assert address.formatted == "Haifa, Israel"
        address.locality = "Acre"
        assert address.formatted == "Haifa, Israel"

    def test_set_formatted_overrides(self) -> None:
        address = ResolvedAddress(locality="Haifa")
        address.set_formatted("Haifa Port, Israel")
        assert address.formatted == "Haifa Port, Israel"

    def test_formatted_is_not_compared(self) -> None:
        a = ResolvedAddress(locality="Haifa")
        b = ResolvedAddress(locality="Haifa")
        b.set_formatted("something else")
        assert a == b


class TestToDict:
    """Tests for serialisation."""

    def test_to_dict(self) -> None:
        address = ResolvedAddress(
            language="en",
            latitude=31.778,
            longitude=35.235,
            country_code="IL",
            country_name="Israel",
            source=AddressSource.COUNTRY,
        )
        data = address.to_dict()
        assert data["source"] == "country"
        assert data["formatted"] == "Israel"
        assert data["id"] == 0
        assert data["latitude"] == 31.778
        assert address.has_coordinates
        assert not ResolvedAddress().has_coordinates

"""Unit tests for Bing Maps geocoder provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from geo_resolver.lib.geocoder.base import GeocodingProviderError
from geo_resolver.lib.geocoder.bing import BingMapsGeocoder


def _locations(*resources: dict) -> dict:
    return {"statusCode": 200, "resourceSets": [{"resources": list(resources)}]}


EIFFEL_TOWER = {
    "name": "Eiffel Tower",
    "point": {"coordinates": [48.8584, 2.2945]},
    "address": {
        "addressLine": "5 Avenue Anatole France",
        "adminDistrict": "IdF",
        "adminDistrict2": "Paris",
        "countryRegion": "France",
        "formattedAddress": "5 Avenue Anatole France, 75007 Paris, France",
        "locality": "Paris",
        "postalCode": "75007",
    },
}


class TestBingResponseParsing:
    """Tests for Bing Maps Locations response parsing."""

    def setup_method(self) -> None:
        self.geocoder = BingMapsGeocoder(api_key="test-key")

    def test_successful_match(self) -> None:
        (address,) = self.geocoder._parse_response(_locations(EIFFEL_TOWER), "fr", 10)
        assert address.latitude == pytest.approx(48.8584)
        assert address.longitude == pytest.approx(2.2945)
        assert address.feature_name == "Eiffel Tower"
        assert address.thoroughfare == "5 Avenue Anatole France"
        assert address.locality == "Paris"
        assert address.sub_admin_area == "Paris"
        assert address.admin_area == "IdF"
        assert address.postal_code == "75007"
        assert address.country_name == "France"
        assert address.formatted == "5 Avenue Anatole France, 75007 Paris, France"
        assert address.language == "fr"

    def test_name_equal_to_formatted_is_not_a_feature(self) -> None:
        resource = {
            "name": "Rue de Rivoli, Paris, France",
            "point": {"coordinates": [48.86, 2.34]},
            "address": {"formattedAddress": "Rue de Rivoli, Paris, France"},
        }
        (address,) = self.geocoder._parse_response(_locations(resource), None, 10)
        assert address.feature_name is None

    def test_max_results(self) -> None:
        data = _locations(EIFFEL_TOWER, EIFFEL_TOWER, EIFFEL_TOWER)
        assert len(self.geocoder._parse_response(data, None, 2)) == 2

    def test_empty_resource_sets(self) -> None:
        assert self.geocoder._parse_response({"statusCode": 200, "resourceSets": []}, None, 10) == []

    def test_error_status_raises(self) -> None:
        data = {"statusCode": 401, "statusDescription": "Unauthorized"}
        with pytest.raises(GeocodingProviderError, match="API error: Unauthorized") as exc_info:
            self.geocoder._parse_response(data, None, 10)
        assert exc_info.value.status_code == 401

    def test_missing_point_raises(self) -> None:
        with pytest.raises(GeocodingProviderError, match="Failed to parse"):
            self.geocoder._parse_response(_locations({"name": "x"}), None, 10)


class TestBingGeocoderRequests:
    """Tests for BingMapsGeocoder HTTP handling."""

    async def test_timeout_raises_provider_error(self) -> None:
        geocoder = BingMapsGeocoder(api_key="test-key", timeout=0.1)
        with (
            patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get,
            pytest.raises(GeocodingProviderError, match="bing"),
        ):
            mock_get.side_effect = httpx.TimeoutException("Connection timed out")
            await geocoder.reverse_geocode(48.8584, 2.2945)

    async def test_successful_reverse_geocode(self) -> None:
        geocoder = BingMapsGeocoder(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = _locations(EIFFEL_TOWER)
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response) as mock_get:
            addresses = await geocoder.reverse_geocode(48.8584, 2.2945, language="fr", max_results=3)

        assert len(addresses) == 1
        assert mock_get.call_args.args[0].endswith("/48.8584,2.2945")
        params = mock_get.call_args.kwargs["params"]
        assert params["c"] == "fr"
        assert params["maxResults"] == 3

    async def test_elevation(self) -> None:
        geocoder = BingMapsGeocoder(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {"statusCode": 200, "resourceSets": [{"resources": [{"elevations": [35]}]}]}
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            assert await geocoder.get_elevation(48.8584, 2.2945) == 35.0

    async def test_elevation_without_values(self) -> None:
        geocoder = BingMapsGeocoder(api_key="test-key")
        mock_response = MagicMock()
        mock_response.json.return_value = {"statusCode": 200, "resourceSets": [{"resources": [{}]}]}
        mock_response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            assert await geocoder.get_elevation(48.8584, 2.2945) is None


class TestBingProperties:
    """Tests for BingMapsGeocoder base properties."""

    def test_provider_name(self) -> None:
        assert BingMapsGeocoder(api_key="key").provider_name == "bing"

    def test_is_not_configured_without_key(self) -> None:
        assert BingMapsGeocoder(api_key="").is_configured is False

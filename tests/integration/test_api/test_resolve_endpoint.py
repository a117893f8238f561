"""Integration tests for the /resolve endpoints."""

from dataclasses import replace

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from geo_resolver.api.v1.resolve import resolve_router
from geo_resolver.core.dependencies import get_resolver
from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.base import BaseGeocoder
from geo_resolver.lib.geocoder.cache import AddressCache
from geo_resolver.lib.places.cities import CityIndex
from geo_resolver.lib.places.countries import CountryIndex
from geo_resolver.services.resolver_service import AddressResolver


class StaticGeocoder(BaseGeocoder):
    """Geocoder that always answers with the same candidate."""

    def __init__(self, address: ResolvedAddress | None = None) -> None:
        self._address = address

    @property
    def provider_name(self) -> str:
        return "static"

    async def reverse_geocode(self, lat, lon, language=None, max_results=10) -> list[ResolvedAddress]:
        if self._address is None:
            return []
        return [replace(self._address, language=language)]


@pytest.fixture
def resolver(country_index: CountryIndex, city_index: CityIndex, address_cache: AddressCache) -> AddressResolver:
    """Resolver over the test tables with a static remote geocoder."""
    geocoder = StaticGeocoder(
        ResolvedAddress(
            latitude=31.7767,
            longitude=35.2345,
            feature_name="Western Wall",
            locality="Jerusalem",
            country_code="IL",
            country_name="Israel",
        )
    )
    return AddressResolver(country_index, city_index, cache=address_cache, web_geocoders=[geocoder])


@pytest.fixture
def app(resolver: AddressResolver) -> FastAPI:
    """Create a minimal FastAPI app with the resolve router."""
    app = FastAPI()
    app.include_router(resolve_router, prefix="/api/v1")
    app.dependency_overrides[get_resolver] = lambda: resolver
    return app


@pytest.fixture
def client(app: FastAPI) -> AsyncClient:
    """Create an async test client."""
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", follow_redirects=False)


class TestResolveAddressEndpoint:
    """Tests for GET /api/v1/resolve/address."""

    async def test_resolves_with_candidates(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/address", params={"lat": 31.778, "lng": 35.235, "lang": "en"})

        assert response.status_code == 200
        body = response.json()
        assert body["address"]["source"] == "provider"
        assert body["address"]["provider"] == "static"
        assert body["address"]["formatted"] == "Western Wall, Jerusalem, Israel"
        assert body["address"]["id"] > 0
        assert [c["source"] for c in body["candidates"]] == ["country", "city", "provider"]

    async def test_second_request_served_from_cache(self, client: AsyncClient) -> None:
        params = {"lat": 31.778, "lng": 35.235, "lang": "en"}
        async with client:
            await client.get("/api/v1/resolve/address", params=params)
            response = await client.get("/api/v1/resolve/address", params=params)

        assert response.status_code == 200
        assert response.json()["address"]["source"] == "cache"

    async def test_out_of_range_is_422(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/address", params={"lat": 91, "lng": 0})
        assert response.status_code == 422

    async def test_missing_parameter_is_422(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/address", params={"lat": 31.0})
        assert response.status_code == 422

    async def test_nothing_found_is_404(self, app: FastAPI) -> None:
        empty = AddressResolver(CountryIndex([]), CityIndex([]))
        app.dependency_overrides[get_resolver] = lambda: empty
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/resolve/address", params={"lat": 0, "lng": 0})
        assert response.status_code == 404


class TestResolvePlaceEndpoints:
    """Tests for the elevation, country and city endpoints."""

    async def test_elevation(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/elevation", params={"lat": 31.778, "lng": 35.235})
        assert response.status_code == 200
        assert response.json()["elevation"] == 786.0

    async def test_elevation_not_found(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/elevation", params={"lat": -45, "lng": 170})
        assert response.status_code == 404

    async def test_country(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/country", params={"lat": 31.95, "lng": 35.93})
        assert response.status_code == 200
        assert response.json()["country_code"] == "JO"
        assert response.json()["country_name"] == "Jordan"

    async def test_city(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/city", params={"lat": 48.86, "lng": 2.35})
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Paris"
        assert body["timezone_id"] == "Europe/Paris"
        assert body["distance"] < 1_000

    async def test_city_out_of_range(self, client: AsyncClient) -> None:
        async with client:
            response = await client.get("/api/v1/resolve/city", params={"lat": 0, "lng": 0})
        assert response.status_code == 404

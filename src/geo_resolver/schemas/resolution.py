"""Pydantic v2 schemas for resolution responses."""

from pydantic import BaseModel, Field

from geo_resolver.lib.geocoder.address import ResolvedAddress


class AddressResponse(BaseModel):
    """A resolved address."""

    id: int = 0
    source: str = Field(..., description="Stage that produced the address: country, city, cache or provider")
    provider: str | None = None
    formatted: str
    language: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    feature_name: str | None = None
    locality: str | None = None
    sub_locality: str | None = None
    admin_area: str | None = None
    sub_admin_area: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    country_name: str | None = None
    elevation: float | None = None
    timezone_id: str | None = None

    @classmethod
    def from_address(cls, address: ResolvedAddress) -> "AddressResponse":
        return cls(**address.to_dict())


class AddressResolveResponse(BaseModel):
    """Best address plus every candidate reported on the way, in order."""

    address: AddressResponse
    candidates: list[AddressResponse]


class ElevationResponse(BaseModel):
    """Elevation estimate at a point."""

    latitude: float
    longitude: float
    elevation: float = Field(..., description="Elevation in metres")


class CountryResponse(BaseModel):
    """Country found for a point."""

    latitude: float
    longitude: float
    country_code: str
    country_name: str | None = None


class CityResponse(BaseModel):
    """Nearest predefined city."""

    name: str
    country_code: str
    latitude: float
    longitude: float
    timezone_id: str
    elevation: float | None = None
    distance: float = Field(..., description="Distance from the query point in metres")

"""Resolution API endpoints — address, elevation, country and nearest city."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from geo_resolver.core.dependencies import get_resolver
from geo_resolver.lib.geocoder.address import ResolvedAddress, country_display_name
from geo_resolver.lib.places.distance import distance_between
from geo_resolver.schemas.resolution import (
    AddressResolveResponse,
    AddressResponse,
    CityResponse,
    CountryResponse,
    ElevationResponse,
)
from geo_resolver.services.resolver_service import AddressResolver

resolve_router = APIRouter(prefix="/resolve", tags=["resolve"])


@resolve_router.get(
    "/address",
    response_model=AddressResolveResponse,
)
async def resolve_address(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    lang: str | None = Query(None, max_length=20, description="Preferred language tag"),  # noqa: B008
    force: bool = Query(False, description="Query remote geocoders even after a cache hit"),  # noqa: B008
    resolver: AddressResolver = Depends(get_resolver),  # noqa: B008
) -> AddressResolveResponse:
    """Resolve a point to its best address, listing every candidate found on the way."""
    candidates: list[ResolvedAddress] = []
    best = await resolver.find_address(lat, lng, lang, on_found=candidates.append, force=force)
    if best is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No address found for this location.",
        )
    return AddressResolveResponse(
        address=AddressResponse.from_address(best),
        candidates=[AddressResponse.from_address(c) for c in candidates],
    )


@resolve_router.get(
    "/elevation",
    response_model=ElevationResponse,
)
async def resolve_elevation(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    resolver: AddressResolver = Depends(get_resolver),  # noqa: B008
) -> ElevationResponse:
    """Estimate the elevation at a point."""
    elevation = await resolver.find_elevation(lat, lng)
    if elevation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No elevation available for this location.",
        )
    return ElevationResponse(latitude=lat, longitude=lng, elevation=elevation)


@resolve_router.get(
    "/country",
    response_model=CountryResponse,
)
async def resolve_country(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    resolver: AddressResolver = Depends(get_resolver),  # noqa: B008
) -> CountryResponse:
    """Find the country for a point from the packaged borders."""
    code = resolver.countries.find_country_code(lat, lng)
    if code is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No country data loaded.",
        )
    return CountryResponse(latitude=lat, longitude=lng, country_code=code, country_name=country_display_name(code))


@resolve_router.get(
    "/city",
    response_model=CityResponse,
)
async def resolve_city(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    resolver: AddressResolver = Depends(get_resolver),  # noqa: B008
) -> CityResponse:
    """Find the nearest predefined city within the city radius."""
    city = resolver.cities.find_nearest(lat, lng, max_distance=resolver.city_radius)
    if city is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No city within range of this location.",
        )
    return CityResponse(
        name=city.name,
        country_code=city.country_code,
        latitude=city.latitude,
        longitude=city.longitude,
        timezone_id=city.timezone_id,
        elevation=city.elevation,
        distance=distance_between(lat, lng, city.latitude, city.longitude),
    )

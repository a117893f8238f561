"""Resolution CLI commands.

Coordinates are positional; put ``--`` before a negative latitude so it is
not read as an option, e.g. ``geo-resolver resolve address -- -33.86 151.21``.
"""

import asyncio

import typer

from geo_resolver.core.config import get_settings
from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.places.distance import distance_between, is_valid_coordinate
from geo_resolver.services.resolver_service import build_resolver

resolve_app = typer.Typer()


def _check_coordinates(lat: float, lon: float) -> None:
    if not is_valid_coordinate(lat, lon):
        typer.echo(f"Error: coordinates out of range: {lat},{lon}", err=True)
        raise typer.Exit(code=1)


def _describe(address: ResolvedAddress) -> str:
    origin = address.provider or address.source.value
    return f"[{origin}] {address.formatted}"


@resolve_app.command("address")
def resolve_address(
    lat: float = typer.Argument(..., help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Argument(..., help="Longitude (-180 to 180)"),  # noqa: B008
    lang: str | None = typer.Option(None, "--lang", help="Preferred language tag"),  # noqa: B008
    force: bool = typer.Option(False, "--force", help="Query remote geocoders even after a cache hit"),  # noqa: FBT001
    offline: bool = typer.Option(False, "--offline", help="Use only local tables and the cache"),  # noqa: FBT001
) -> None:
    """Resolve a coordinate to an address, printing each better candidate."""
    _check_coordinates(lat, lon)
    asyncio.run(_resolve_address(lat, lon, lang, force, offline))


async def _resolve_address(lat: float, lon: float, lang: str | None, force: bool, offline: bool) -> None:
    resolver = build_resolver(get_settings(), offline=offline)
    try:
        best = await resolver.find_address(lat, lon, lang, on_found=lambda a: typer.echo(_describe(a)), force=force)
    finally:
        await resolver.close()

    if best is None:
        typer.echo("No address found.")
        raise typer.Exit(code=1)
    typer.echo(f"\nBest: {best.formatted}")


@resolve_app.command("elevation")
def resolve_elevation(
    lat: float = typer.Argument(..., help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Argument(..., help="Longitude (-180 to 180)"),  # noqa: B008
    offline: bool = typer.Option(False, "--offline", help="Use only local tables and the cache"),  # noqa: FBT001
) -> None:
    """Estimate the elevation at a coordinate."""
    _check_coordinates(lat, lon)
    asyncio.run(_resolve_elevation(lat, lon, offline))


async def _resolve_elevation(lat: float, lon: float, offline: bool) -> None:
    resolver = build_resolver(get_settings(), offline=offline)
    try:
        elevation = await resolver.find_elevation(lat, lon)
    finally:
        await resolver.close()

    if elevation is None:
        typer.echo("No elevation available.")
        raise typer.Exit(code=1)
    typer.echo(f"{elevation:.1f} m")


@resolve_app.command("country")
def resolve_country(
    lat: float = typer.Argument(..., help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Argument(..., help="Longitude (-180 to 180)"),  # noqa: B008
) -> None:
    """Find the country for a coordinate from the packaged borders."""
    _check_coordinates(lat, lon)
    resolver = build_resolver(get_settings(), offline=True)
    country = resolver.find_country(lat, lon)
    if country is None:
        typer.echo("No country data loaded.")
        raise typer.Exit(code=1)
    typer.echo(f"{country.country_code}  {country.country_name}")


@resolve_app.command("city")
def resolve_city(
    lat: float = typer.Argument(..., help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Argument(..., help="Longitude (-180 to 180)"),  # noqa: B008
) -> None:
    """Find the nearest predefined city within the city radius."""
    _check_coordinates(lat, lon)
    resolver = build_resolver(get_settings(), offline=True)
    city = resolver.cities.find_nearest(lat, lon, max_distance=resolver.city_radius)
    if city is None:
        typer.echo("No city within range.")
        raise typer.Exit(code=1)
    distance = distance_between(lat, lon, city.latitude, city.longitude)
    typer.echo(f"{city.name}, {city.country_code}  ({distance / 1000:.1f} km, {city.timezone_id})")


@resolve_app.command("timezone")
def resolve_timezone(
    tz_id: str = typer.Argument(..., help="IANA time zone id, e.g. Asia/Jerusalem"),  # noqa: B008
) -> None:
    """Find a representative location for a time zone."""
    resolver = build_resolver(get_settings(), offline=True)
    location = resolver.find_location_for_timezone(tz_id)
    if location is None:
        typer.echo(f"Error: unknown time zone {tz_id}", err=True)
        raise typer.Exit(code=1)

    place = location.city.name if location.city else "meridian"
    typer.echo(f"{location.latitude:.5f},{location.longitude:.5f}  ({place})")

"""Address cache maintenance commands."""

import asyncio

import typer

from geo_resolver.core.config import get_settings
from geo_resolver.lib.geocoder.cache import AddressCache

cache_app = typer.Typer()


@cache_app.command("list")
def list_cache(
    lang: str | None = typer.Option(None, "--lang", help="Only addresses in this language"),  # noqa: B008
) -> None:
    """List cached addresses."""
    asyncio.run(_list_cache(lang))


async def _list_cache(lang: str | None) -> None:
    cache = AddressCache(get_settings().cache_database_url)
    try:
        addresses = await cache.query_addresses(lang)
    finally:
        await cache.close()

    for address in addresses:
        typer.echo(f"{address.id:>6}  {address.latitude:.5f},{address.longitude:.5f}  {address.formatted}")
    typer.echo(f"\n{len(addresses)} cached addresses")


@cache_app.command("count")
def count_cache(
    elevations: bool = typer.Option(False, "--elevations", help="Count elevation samples instead"),  # noqa: FBT001
) -> None:
    """Count cached addresses or elevation samples."""
    asyncio.run(_count_cache(elevations))


async def _count_cache(elevations: bool) -> None:
    cache = AddressCache(get_settings().cache_database_url)
    try:
        total = await cache.count(elevations=elevations)
    finally:
        await cache.close()
    typer.echo(str(total))


@cache_app.command("clear")
def clear_cache(
    elevations: bool = typer.Option(False, "--elevations", help="Remove elevation samples instead of addresses"),  # noqa: FBT001
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),  # noqa: FBT001
) -> None:
    """Remove cached addresses (or elevation samples)."""
    kind = "elevation samples" if elevations else "addresses"
    if not yes:
        typer.confirm(f"Delete all cached {kind}?", abort=True)
    asyncio.run(_clear_cache(elevations, kind))


async def _clear_cache(elevations: bool, kind: str) -> None:
    cache = AddressCache(get_settings().cache_database_url)
    try:
        removed = await (cache.delete_elevations() if elevations else cache.delete_addresses())
    finally:
        await cache.close()
    typer.echo(f"Removed {removed} cached {kind}")

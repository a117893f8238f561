"""Typer CLI root application with serve command."""

import typer

from geo_resolver.core.config import get_settings
from geo_resolver.core.logging import setup_logging

app = typer.Typer(name="geo-resolver", help="Reverse geocoding and elevation CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, stage=settings.log_stage)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("127.0.0.1", "--host", help="Bind host"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "geo_resolver.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from geo_resolver.cli.cache_cmd import cache_app
    from geo_resolver.cli.resolve_cmd import resolve_app

    app.add_typer(resolve_app, name="resolve", help="Resolve coordinates to places and elevations")
    app.add_typer(cache_app, name="cache", help="Address cache maintenance commands")


_register_subcommands()

"""FastAPI application factory.

Creates the FastAPI app with lifespan management and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from geo_resolver import __version__
from geo_resolver.core.config import get_settings
from geo_resolver.core.logging import setup_logging
from geo_resolver.services.resolver_service import build_resolver


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: build the resolver on startup, close it on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir, stage=settings.log_stage)

    # Tests may install their own resolver before startup
    owns_resolver = getattr(app.state, "resolver", None) is None
    if owns_resolver:
        app.state.resolver = build_resolver(settings)

    yield

    if owns_resolver:
        await app.state.resolver.close()
        app.state.resolver = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Geo Resolver",
        description="Reverse geocoding and elevation with local tables, a persistent cache and remote fallbacks",
        version=__version__,
        lifespan=lifespan,
    )

    from geo_resolver.api.router import create_router

    app.include_router(create_router(settings))

    return app

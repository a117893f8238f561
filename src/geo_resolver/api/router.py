"""Root API router with /api/v1 prefix."""

from fastapi import APIRouter

from geo_resolver.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from geo_resolver.api.v1.resolve import resolve_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(resolve_router)

    return root_router

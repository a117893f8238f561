"""FastAPI dependency injection for the shared resolver."""

from fastapi import HTTPException, Request, status

from geo_resolver.services.resolver_service import AddressResolver


def get_resolver(request: Request) -> AddressResolver:
    """Return the resolver built during application startup.

    Raises:
        HTTPException: 503 if the application has no resolver yet.
    """
    resolver: AddressResolver | None = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Resolver is not initialized.",
        )
    return resolver

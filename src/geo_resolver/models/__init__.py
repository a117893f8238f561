"""ORM model registry — import all models so ``Base.metadata`` knows every table."""

from geo_resolver.models.base import Base
from geo_resolver.models.cache_metadata import CacheMetadata
from geo_resolver.models.cached_address import CachedAddress

__all__ = [
    "Base",
    "CacheMetadata",
    "CachedAddress",
]

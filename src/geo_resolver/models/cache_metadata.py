"""CacheMetadata model — key/value facts about the cache database itself."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from geo_resolver.models.base import Base


class CacheMetadata(Base):
    """Key/value row, e.g. ``schema_version``."""

    __tablename__ = "cache_metadata"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

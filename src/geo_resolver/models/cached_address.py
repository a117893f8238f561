"""CachedAddress model — resolved addresses and elevation samples keyed by query coordinate."""

from datetime import datetime

from sqlalchemy import DateTime, Double, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from geo_resolver.models.base import Base


class CachedAddress(Base):
    """One resolved address or elevation sample.

    Rows are append-only. Elevation-only rows have no ``formatted`` text and
    share the query and result coordinates.
    """

    __tablename__ = "cached_addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_latitude: Mapped[float] = mapped_column(Double, nullable=False)
    location_longitude: Mapped[float] = mapped_column(Double, nullable=False)
    latitude: Mapped[float] = mapped_column(Double, nullable=False)
    longitude: Mapped[float] = mapped_column(Double, nullable=False)
    formatted: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(20), nullable=True)
    elevation: Mapped[float | None] = mapped_column(Double, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

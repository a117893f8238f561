"""Persistent cache of resolved addresses and elevation samples.

One flat, append-only table keyed by nothing in particular: lookups scan the
rows and filter them by great-circle distance. Storage failures are logged
and treated as an empty cache so a resolution is never aborted by them.
"""

import asyncio
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import Delete, Select, delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from geo_resolver.lib.geocoder.address import AddressSource, ResolvedAddress
from geo_resolver.lib.geocoder.elevation import ElevationSample
from geo_resolver.lib.places.distance import SAME_STREET, distance_between
from geo_resolver.models import Base, CacheMetadata, CachedAddress

# Bump when the table layout changes; existing caches are dropped and rebuilt.
SCHEMA_VERSION = 1
SCHEMA_VERSION_KEY = "schema_version"

_STORAGE_ERRORS = (SQLAlchemyError, OSError)

_log = logger.bind(stage="cache")


class AddressCache:
    """Append-only address/elevation store on an async SQLAlchemy engine.

    The database is opened on first use. If opening fails the cache is marked
    unavailable for the rest of its life and every call returns an empty result.

    Args:
        database_url: SQLAlchemy async URL, e.g. ``sqlite+aiosqlite:///./geo-resolver.db``.
        **engine_kwargs: Extra arguments for ``create_async_engine``.
    """

    def __init__(self, database_url: str, **engine_kwargs: object) -> None:
        self._database_url = database_url
        self._engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._available = True
        self._open_lock = asyncio.Lock()

    @property
    def is_available(self) -> bool:
        """False once opening the database has failed."""
        return self._available

    async def open(self) -> bool:
        """Open the database, creating or rebuilding the tables as needed.

        Concurrent first calls share one open attempt.

        Returns:
            True if the cache is usable.
        """
        if self._session_factory is not None:
            return True

        async with self._open_lock:
            if self._session_factory is not None:
                return True
            if not self._available:
                return False

            engine: AsyncEngine | None = None
            try:
                engine = create_async_engine(self._database_url, **self._engine_kwargs)
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                    stored = (
                        await conn.execute(select(CacheMetadata.value).where(CacheMetadata.key == SCHEMA_VERSION_KEY))
                    ).scalar_one_or_none()
                    if stored != str(SCHEMA_VERSION):
                        if stored is not None:
                            _log.warning(f"Address cache schema {stored} != {SCHEMA_VERSION}; rebuilding")
                            await conn.run_sync(Base.metadata.drop_all)
                            await conn.run_sync(Base.metadata.create_all)
                        await conn.execute(
                            insert(CacheMetadata).values(key=SCHEMA_VERSION_KEY, value=str(SCHEMA_VERSION))
                        )
            except _STORAGE_ERRORS as e:
                _log.warning(f"Address cache unavailable: {e}")
                if engine is not None:
                    await engine.dispose()
                self._available = False
                return False

            self._engine = engine
            self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
            _log.debug(f"Address cache opened at {self._database_url}")
            return True

    async def close(self) -> None:
        """Dispose of the engine and release connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def _session(self) -> AsyncSession | None:
        if not await self.open() or self._session_factory is None:
            return None
        return self._session_factory()

    async def insert(self, query_lat: float, query_lon: float, address: ResolvedAddress) -> None:
        """Persist an address resolved for a query coordinate.

        Already persisted addresses (non-zero ``id``) and addresses rebuilt from
        the packaged country/city tables are skipped. On success ``address.id``
        holds the new row id.
        """
        if address.id != 0:
            return
        if address.source in (AddressSource.COUNTRY, AddressSource.CITY):
            return

        session = await self._session()
        if session is None:
            return

        row = CachedAddress(
            location_latitude=query_lat,
            location_longitude=query_lon,
            latitude=address.latitude if address.latitude is not None else query_lat,
            longitude=address.longitude if address.longitude is not None else query_lon,
            formatted=address.formatted,
            language=address.language,
            elevation=address.elevation,
            timestamp=datetime.now(UTC),
        )
        try:
            async with session:
                session.add(row)
                await session.commit()
        except _STORAGE_ERRORS as e:
            _log.warning(f"Failed to cache address: {e}")
            return
        address.id = row.id

    async def insert_elevation(self, lat: float, lon: float, elevation: float) -> None:
        """Persist an elevation sample with no address text."""
        session = await self._session()
        if session is None:
            return

        row = CachedAddress(
            location_latitude=lat,
            location_longitude=lon,
            latitude=lat,
            longitude=lon,
            formatted=None,
            language=None,
            elevation=elevation,
            timestamp=datetime.now(UTC),
        )
        try:
            async with session:
                session.add(row)
                await session.commit()
        except _STORAGE_ERRORS as e:
            _log.warning(f"Failed to cache elevation: {e}")

    async def _scan(self, stmt: Select) -> list[CachedAddress]:
        session = await self._session()
        if session is None:
            return []
        try:
            async with session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except _STORAGE_ERRORS as e:
            _log.warning(f"Address cache query failed: {e}")
            return []

    async def query_near(
        self,
        lat: float,
        lon: float,
        language: str | None = None,
        radius: float = SAME_STREET,
    ) -> list[ResolvedAddress]:
        """Find cached addresses near a coordinate.

        A row matches when either its query coordinate or its result
        coordinate lies within ``radius`` metres, and its language equals
        ``language`` (any language when None).

        Returns:
            Matching addresses in insertion order, with ``source`` CACHE.
        """
        stmt = select(CachedAddress).where(CachedAddress.formatted.is_not(None)).order_by(CachedAddress.id)
        if language is not None:
            stmt = stmt.where(CachedAddress.language == language)

        addresses: list[ResolvedAddress] = []
        for row in await self._scan(stmt):
            near_query = distance_between(lat, lon, row.location_latitude, row.location_longitude) <= radius
            if near_query or distance_between(lat, lon, row.latitude, row.longitude) <= radius:
                addresses.append(_to_address(row))
        return addresses

    async def query_elevation_near(self, lat: float, lon: float, radius: float) -> list[ElevationSample]:
        """Find elevation samples within ``radius`` metres of the result coordinate."""
        stmt = select(CachedAddress).where(CachedAddress.elevation.is_not(None)).order_by(CachedAddress.id)

        samples: list[ElevationSample] = []
        for row in await self._scan(stmt):
            distance = distance_between(lat, lon, row.latitude, row.longitude)
            if distance <= radius:
                samples.append(
                    ElevationSample(
                        latitude=row.latitude,
                        longitude=row.longitude,
                        elevation=row.elevation,
                        distance=distance,
                    )
                )
        return samples

    async def query_addresses(self, language: str | None = None) -> list[ResolvedAddress]:
        """List every cached address, optionally for one language."""
        stmt = select(CachedAddress).where(CachedAddress.formatted.is_not(None)).order_by(CachedAddress.id)
        if language is not None:
            stmt = stmt.where(CachedAddress.language == language)
        return [_to_address(row) for row in await self._scan(stmt)]

    async def count(self, *, elevations: bool = False) -> int:
        """Count address rows, or elevation-only rows when ``elevations`` is set."""
        session = await self._session()
        if session is None:
            return 0
        condition = CachedAddress.formatted.is_(None) if elevations else CachedAddress.formatted.is_not(None)
        try:
            async with session:
                result = await session.execute(select(func.count()).select_from(CachedAddress).where(condition))
                return int(result.scalar_one())
        except _STORAGE_ERRORS as e:
            _log.warning(f"Address cache count failed: {e}")
            return 0

    async def _delete(self, stmt: Delete) -> int:
        session = await self._session()
        if session is None:
            return 0
        try:
            async with session:
                result = await session.execute(stmt)
                await session.commit()
                return result.rowcount or 0
        except _STORAGE_ERRORS as e:
            _log.warning(f"Address cache delete failed: {e}")
            return 0

    async def delete_addresses(self) -> int:
        """Remove all address rows. Returns the number of rows removed."""
        return await self._delete(delete(CachedAddress).where(CachedAddress.formatted.is_not(None)))

    async def delete_elevations(self) -> int:
        """Remove all elevation-only rows. Returns the number of rows removed."""
        return await self._delete(delete(CachedAddress).where(CachedAddress.formatted.is_(None)))

    async def delete_address(self, address_id: int) -> bool:
        """Remove one row by id. Returns True if a row was removed."""
        return await self._delete(delete(CachedAddress).where(CachedAddress.id == address_id)) > 0


def _to_address(row: CachedAddress) -> ResolvedAddress:
    address = ResolvedAddress(
        language=row.language,
        latitude=row.latitude,
        longitude=row.longitude,
        elevation=row.elevation,
        source=AddressSource.CACHE,
        id=row.id,
    )
    address.set_formatted(row.formatted)
    return address

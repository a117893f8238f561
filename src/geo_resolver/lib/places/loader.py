"""Data sources for the packaged country-polygon and city tables.

The tables themselves are produced offline; this module only reads them.
"""

import csv
import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger

from geo_resolver.core.errors import DataSourceError
from geo_resolver.lib.places.cities import CityEntry

CITY_COLUMNS = ("name", "country_code", "latitude", "longitude", "timezone")


class PolygonDataSource(Protocol):
    """Supplies ``(country_code, [(lat_fp, lon_fp), ...])`` pairs in table order."""

    def load_polygons(self) -> Iterable[tuple[str, Sequence[tuple[int, int]]]]: ...


class CityDataSource(Protocol):
    """Supplies predefined city rows in table order."""

    def load_cities(self) -> Iterable[CityEntry]: ...


class JsonPolygonDataSource:
    """Reads ``[{"code": "IL", "vertices": [[lat_fp, lon_fp], ...]}, ...]``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load_polygons(self) -> list[tuple[str, list[tuple[int, int]]]]:
        """Parse the polygon file.

        Returns:
            List of ``(country_code, vertices)`` in file order.

        Raises:
            DataSourceError: If the file is missing or malformed.
        """
        try:
            with self._path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise DataSourceError(str(self._path), "file not found") from e
        except json.JSONDecodeError as e:
            raise DataSourceError(str(self._path), f"invalid JSON: {e}") from e

        if not isinstance(raw, list):
            raise DataSourceError(str(self._path), "expected a list of countries")

        polygons: list[tuple[str, list[tuple[int, int]]]] = []
        for index, entry in enumerate(raw):
            try:
                code = str(entry["code"]).upper()
                vertices = [(int(lat), int(lon)) for lat, lon in entry["vertices"]]
            except (KeyError, TypeError, ValueError) as e:
                raise DataSourceError(str(self._path), f"bad country entry #{index}: {e}") from e
            polygons.append((code, vertices))

        logger.debug(f"Loaded {len(polygons)} country polygons from {self._path}")
        return polygons


class CsvCityDataSource:
    """Reads ``name,country_code,latitude,longitude,timezone[,elevation]`` rows."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load_cities(self) -> list[CityEntry]:
        """Parse the cities file.

        Returns:
            List of CityEntry in file order.

        Raises:
            DataSourceError: If the file is missing, lacks columns, or has bad values.
        """
        cities: list[CityEntry] = []
        try:
            with self._path.open(newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames is None:
                    raise DataSourceError(str(self._path), "no header row")
                missing = set(CITY_COLUMNS) - set(reader.fieldnames)
                if missing:
                    raise DataSourceError(str(self._path), f"missing columns: {', '.join(sorted(missing))}")

                for line_no, row in enumerate(reader, start=2):
                    try:
                        elevation = (row.get("elevation") or "").strip()
                        cities.append(
                            CityEntry(
                                name=row["name"].strip(),
                                country_code=row["country_code"].strip().upper(),
                                latitude=float(row["latitude"]),
                                longitude=float(row["longitude"]),
                                timezone_id=row["timezone"].strip(),
                                elevation=float(elevation) if elevation else None,
                            )
                        )
                    except (TypeError, ValueError) as e:
                        raise DataSourceError(str(self._path), f"bad value on line {line_no}: {e}") from e
        except FileNotFoundError as e:
            raise DataSourceError(str(self._path), "file not found") from e

        logger.debug(f"Loaded {len(cities)} cities from {self._path}")
        return cities

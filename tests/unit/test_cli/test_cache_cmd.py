"""Unit tests for the cache maintenance CLI commands."""

import asyncio
from pathlib import Path

import pytest
from typer.testing import CliRunner

from geo_resolver.cli.app import app
from geo_resolver.lib.geocoder.address import ResolvedAddress
from geo_resolver.lib.geocoder.cache import AddressCache

runner = CliRunner()


@pytest.fixture
def cache_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}"
    monkeypatch.setenv("CACHE_DATABASE_URL", url)
    return url


def _seed(url: str) -> None:
    async def seed() -> None:
        cache = AddressCache(url)
        await cache.insert(31.778, 35.235, ResolvedAddress(language="en", locality="Jerusalem", country_name="Israel"))
        await cache.insert(48.85, 2.35, ResolvedAddress(language="fr", locality="Paris", country_name="France"))
        await cache.insert_elevation(31.778, 35.235, 754.0)
        await cache.close()

    asyncio.run(seed())


class TestCacheCommands:
    """Tests for `geo-resolver cache ...`."""

    def test_count_empty(self, cache_url: str) -> None:
        result = runner.invoke(app, ["cache", "count"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "0"

    def test_count(self, cache_url: str) -> None:
        _seed(cache_url)
        assert runner.invoke(app, ["cache", "count"]).output.strip() == "2"
        assert runner.invoke(app, ["cache", "count", "--elevations"]).output.strip() == "1"

    def test_list_by_language(self, cache_url: str) -> None:
        _seed(cache_url)
        result = runner.invoke(app, ["cache", "list", "--lang", "fr"])
        assert result.exit_code == 0, result.output
        assert "Paris, France" in result.output
        assert "Jerusalem" not in result.output
        assert "1 cached addresses" in result.output

    def test_clear_with_yes(self, cache_url: str) -> None:
        _seed(cache_url)
        result = runner.invoke(app, ["cache", "clear", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Removed 2 cached addresses" in result.output
        assert runner.invoke(app, ["cache", "count", "--elevations"]).output.strip() == "1"

    def test_clear_aborted(self, cache_url: str) -> None:
        _seed(cache_url)
        result = runner.invoke(app, ["cache", "clear", "--elevations"], input="n\n")
        assert result.exit_code == 1
        assert runner.invoke(app, ["cache", "count", "--elevations"]).output.strip() == "1"

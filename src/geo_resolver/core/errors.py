"""Exception hierarchy shared across the resolver."""


class GeoResolverError(Exception):
    """Base exception for all geo-resolver errors."""


class DataSourceError(GeoResolverError):
    """A packaged place table is missing or malformed.

    Args:
        path: Path of the offending data file.
        detail: Human-readable description of the problem.
    """

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid place data at {path}: {detail}")

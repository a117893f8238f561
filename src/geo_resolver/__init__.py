"""geo-resolver — offline-first reverse geocoding and elevation estimation."""

__version__ = "0.1.0"

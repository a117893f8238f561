"""Resolved address value type and human-readable formatting.

Every stage of the resolver (country table, city table, cache, remote
providers) produces ``ResolvedAddress`` candidates so that selection and
persistence never need to know where a candidate came from.
"""

from dataclasses import dataclass, field
from enum import StrEnum

import pycountry

ADDRESS_SEPARATOR = ", "


class AddressSource(StrEnum):
    """Which resolver stage produced an address."""

    COUNTRY = "country"
    CITY = "city"
    CACHE = "cache"
    PROVIDER = "provider"


def country_display_name(country_code: str | None) -> str | None:
    """Look up a country's common name from its ISO 3166-1 alpha-2 code.

    Args:
        country_code: Two-letter country code (case-insensitive).

    Returns:
        The country name, the code itself when unknown, or None for no code.
    """
    if not country_code:
        return None
    country = pycountry.countries.get(alpha_2=country_code.upper())
    if country is None:
        return country_code.upper()
    return getattr(country, "common_name", None) or country.name


@dataclass
class ResolvedAddress:
    """A candidate or final address for a coordinate.

    ``id`` is the cache row id; ``0`` means the address was never persisted.
    """

    language: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    feature_name: str | None = None
    premises: str | None = None
    thoroughfare: str | None = None
    sub_locality: str | None = None
    locality: str | None = None
    sub_admin_area: str | None = None
    admin_area: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    country_name: str | None = None
    address_lines: list[str] = field(default_factory=list)
    elevation: float | None = None
    timezone_id: str | None = None
    source: AddressSource = AddressSource.PROVIDER
    provider: str | None = None
    id: int = 0
    _formatted: str | None = field(default=None, repr=False, compare=False)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def formatted(self) -> str:
        """Formatted address text, computed on first access and then kept.

        Later changes to the address fields do not refresh this value.
        """
        if self._formatted is None:
            self._formatted = self.format()
        return self._formatted

    def set_formatted(self, value: str | None) -> None:
        """Override the formatted text (e.g. with a provider's own rendering)."""
        self._formatted = value

    def format(self) -> str:
        """Join the address parts from most to least specific, skipping repeats."""
        feature = self.feature_name
        premises = self.premises
        thoroughfare = self.thoroughfare
        subloc = self.sub_locality
        locality = self.locality
        subadmin = self.sub_admin_area
        admin = self.admin_area
        country = self.country_name

        parts: list[str] = []
        if feature:
            parts.append(feature)
        if premises and premises != feature:
            parts.append(premises)
        if thoroughfare and thoroughfare not in (feature, premises):
            parts.append(thoroughfare)

        # Free-form lines only when they don't repeat a structured part
        structured = [p for p in (thoroughfare, premises, subloc, locality, subadmin, admin, country) if p]
        for line in self.address_lines:
            if line and not any(p in line for p in structured):
                parts.append(line)

        if subloc and subloc not in (thoroughfare, feature):
            parts.append(subloc)
        if locality and locality not in (subloc, feature):
            parts.append(locality)
        if subadmin and subadmin not in (locality, subloc, feature):
            parts.append(subadmin)
        if admin and admin not in (subadmin, locality, subloc, feature):
            parts.append(admin)
        if country and country != feature:
            parts.append(country)

        if not parts:
            return country_display_name(self.country_code) or ""
        return ADDRESS_SEPARATOR.join(parts)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        return {
            "id": self.id,
            "source": self.source.value,
            "provider": self.provider,
            "formatted": self.formatted,
            "language": self.language,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "feature_name": self.feature_name,
            "locality": self.locality,
            "sub_locality": self.sub_locality,
            "admin_area": self.admin_area,
            "sub_admin_area": self.sub_admin_area,
            "postal_code": self.postal_code,
            "country_code": self.country_code,
            "country_name": self.country_name,
            "elevation": self.elevation,
            "timezone_id": self.timezone_id,
        }

"""
Location preference shapes.

Stored investor locations exist in two shapes:

    Legacy   {id?, city, areas?, radius?}
    Current  {id, region, city, localAuthorities}

Only Location (the current shape) is allowed past the normaliser.
LegacyLocation exists so the migration can be expressed in types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Location:
    """
    A preferred area in the current format.

    An empty local_authorities tuple means every area within the city.
    """

    id: str
    region: str
    city: str
    local_authorities: tuple[str, ...] = ()

    @property
    def covers_all_areas(self) -> bool:
        return not self.local_authorities

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the persisted JSON keys."""
        return {
            "id": self.id,
            "region": self.region,
            "city": self.city,
            "localAuthorities": list(self.local_authorities),
        }


@dataclass(frozen=True)
class LegacyLocation:
    """A location written before regions and local authorities existed."""

    city: str
    id: Optional[str] = None
    areas: tuple[str, ...] = field(default_factory=tuple)
    radius: Optional[float] = None

"""
Location Format Normaliser

Converts stored location preferences to the current shape. Old preference
rows were never migrated at rest, so every read path runs locations through
ensure_current_location_format() before anything scores them.

Rules:
- An element is legacy when it has a string city, no region, and an
  `areas` or `radius` field.
- If any element is legacy, every element is migrated: region derived from
  the taxonomy ("Unknown" if the city is not known), areas become
  localAuthorities, radius is dropped.
- Otherwise id, region and localAuthorities are defaulted if absent.
- Migrated output is all current format, so the function is idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Iterable, Optional
from uuid import uuid4

from core.errors import ValidationError
from core.locations.schema import LegacyLocation, Location
from core.locations.taxonomy import region_for_city


logger = logging.getLogger(__name__)

UNKNOWN_REGION: Final[str] = "Unknown"


def generate_location_id() -> str:
    """Generate a unique location id."""
    return uuid4().hex


# =============================================================================
# Shape Detection
# =============================================================================


def is_legacy_location(raw: Any) -> bool:
    """
    Check whether a raw location dict is in the legacy format.

    Legacy records have a string city, no region, and carry either
    `areas` or `radius`.
    """
    if not isinstance(raw, dict):
        return False
    return (
        isinstance(raw.get("city"), str)
        and not raw.get("region")
        and (raw.get("areas") is not None or raw.get("radius") is not None)
    )


def _require_city(raw: dict, index: int) -> str:
    city = raw.get("city")
    if not isinstance(city, str) or not city.strip():
        raise ValidationError(f"locations[{index}].city", "Location city is required")
    return city


def _string_list(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ValidationError(field_name, f"{field_name} must be a list of strings")
    return tuple(str(v) for v in value)


# =============================================================================
# Conversion
# =============================================================================


def parse_legacy_location(raw: dict, index: int = 0) -> LegacyLocation:
    """Read a legacy location dict."""
    radius = raw.get("radius")
    return LegacyLocation(
        city=_require_city(raw, index),
        id=raw.get("id") or None,
        areas=_string_list(raw.get("areas"), f"locations[{index}].areas"),
        radius=float(radius) if isinstance(radius, (int, float)) else None,
    )


def migrate_location(legacy: LegacyLocation) -> Location:
    """Convert one legacy location to the current format. Radius is dropped."""
    return Location(
        id=legacy.id or generate_location_id(),
        region=region_for_city(legacy.city) or UNKNOWN_REGION,
        city=legacy.city,
        local_authorities=tuple(legacy.areas),
    )


def _normalise_current(raw: dict, index: int) -> Location:
    city = _require_city(raw, index)

    if raw.get("localAuthorities") is not None:
        authorities = raw["localAuthorities"]
    elif raw.get("localAuthority"):
        # Some early clients sent a single authority
        authorities = [raw["localAuthority"]]
    else:
        authorities = raw.get("areas")

    return Location(
        id=raw.get("id") or generate_location_id(),
        region=raw.get("region") or region_for_city(city) or UNKNOWN_REGION,
        city=city,
        local_authorities=_string_list(authorities, f"locations[{index}].localAuthorities"),
    )


def ensure_current_location_format(locations: Optional[Iterable[Any]]) -> list[Location]:
    """
    Guarantee a list of locations is in the current format.

    Args:
        locations: Raw location dicts as stored, Location objects, or None

    Returns:
        List of Location in the same order

    Raises:
        ValidationError: If an element is not a mapping or has no city
    """
    if not locations:
        return []

    items = list(locations)
    for index, item in enumerate(items):
        if not isinstance(item, (dict, Location)):
            raise ValidationError(f"locations[{index}]", "Location must be an object")

    # One legacy element means the whole list predates the current format
    needs_migration = any(is_legacy_location(item) for item in items)
    if needs_migration:
        logger.info("Migrating %d locations from legacy format", len(items))

    result: list[Location] = []
    for index, item in enumerate(items):
        if isinstance(item, Location):
            result.append(item)
        elif needs_migration:
            result.append(migrate_location(parse_legacy_location(item, index)))
        else:
            result.append(_normalise_current(item, index))
    return result

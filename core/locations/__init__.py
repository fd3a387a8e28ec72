"""
UK location taxonomy, postcode inference, and location-format normalisation.
"""

from core.locations.schema import Location, LegacyLocation
from core.locations.taxonomy import (
    UK_REGIONS,
    LOCAL_AUTHORITIES,
    GENERIC_LONDON_NAMES,
    cities_for_region,
    local_authorities_for_city,
    region_for_city,
    all_regions,
    is_local_authority,
    canonical_local_authority,
    expand_area_to_authorities,
)
from core.locations.postcodes import infer_london_borough, outward_code
from core.locations.normalizer import (
    UNKNOWN_REGION,
    ensure_current_location_format,
    is_legacy_location,
    migrate_location,
)

__all__ = [
    "Location",
    "LegacyLocation",
    "UK_REGIONS",
    "LOCAL_AUTHORITIES",
    "GENERIC_LONDON_NAMES",
    "cities_for_region",
    "local_authorities_for_city",
    "region_for_city",
    "all_regions",
    "is_local_authority",
    "canonical_local_authority",
    "expand_area_to_authorities",
    "infer_london_borough",
    "outward_code",
    "UNKNOWN_REGION",
    "ensure_current_location_format",
    "is_legacy_location",
    "migrate_location",
]

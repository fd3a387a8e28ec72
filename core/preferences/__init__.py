"""
Investor preference lifecycle: validation, read and save.
"""

from core.preferences.validation import (
    VALID_OPERATOR_TYPES,
    VALID_PROPERTY_TYPES,
    validate_budget,
    validate_bedrooms,
    validate_locations,
    validate_preference_data,
    validate_preference_payload,
    validate_property_types,
)
from core.preferences.service import (
    MATCH_STATS_MIN_SCORE,
    PreferenceService,
    PreferenceView,
    SaveResult,
)

__all__ = [
    "VALID_OPERATOR_TYPES",
    "VALID_PROPERTY_TYPES",
    "validate_budget",
    "validate_bedrooms",
    "validate_locations",
    "validate_preference_data",
    "validate_preference_payload",
    "validate_property_types",
    "MATCH_STATS_MIN_SCORE",
    "PreferenceService",
    "PreferenceView",
    "SaveResult",
]

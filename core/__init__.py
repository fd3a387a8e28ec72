"""
Ace Property Matching - Core Business Logic

This package provides the investor matching pipeline:
1. Location taxonomy (regions -> sub-regions -> local authorities)
2. Location format normalisation (legacy {city, areas, radius} -> current)
3. Property scoring (location, price, bedrooms, type -> 0-100)
4. Matched-properties queries (score, filter, rank, paginate)
5. Preference lifecycle (validate, upsert, first-signup emails)
"""

from .errors import (
    MatchingError,
    Unauthenticated,
    Forbidden,
    NotFound,
    ValidationError,
    UpstreamFailure,
)

from .models import (
    Property,
    PropertyType,
    PropertyStatus,
    Availability,
    OperatorType,
    NumericRange,
    PreferenceData,
    InvestorPreference,
    MatchResult,
)

from .matching import (
    PropertyMatchScorer,
    score_property,
    MatchingService,
    MatchPage,
    NoPreferences,
    ScoredProperty,
)

__all__ = [
    # Errors
    "MatchingError",
    "Unauthenticated",
    "Forbidden",
    "NotFound",
    "ValidationError",
    "UpstreamFailure",
    # Models
    "Property",
    "PropertyType",
    "PropertyStatus",
    "Availability",
    "OperatorType",
    "NumericRange",
    "PreferenceData",
    "InvestorPreference",
    "MatchResult",
    # Matching
    "PropertyMatchScorer",
    "score_property",
    "MatchingService",
    "MatchPage",
    "NoPreferences",
    "ScoredProperty",
]

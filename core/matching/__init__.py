"""
Property matching: scoring and the matched-properties query service.
"""

from .scoring import (
    PropertyMatchScorer,
    SubScore,
    bedroom_score,
    location_score,
    price_score,
    resolve_local_authority,
    score_property,
    type_score,
)
from .service import (
    DAILY_MATCH_MIN_SCORE,
    DEFAULT_PAGE_SIZE,
    INITIAL_MATCHES_LIMIT,
    INITIAL_MATCHES_MIN_SCORE,
    INVESTOR_MATCH_MIN_SCORE,
    DailyMatch,
    InvestorMatch,
    MatchingService,
    MatchPage,
    NoPreferences,
    ScoredProperty,
)

__all__ = [
    # Scoring
    "PropertyMatchScorer",
    "SubScore",
    "bedroom_score",
    "location_score",
    "price_score",
    "resolve_local_authority",
    "score_property",
    "type_score",
    # Query service
    "DAILY_MATCH_MIN_SCORE",
    "DEFAULT_PAGE_SIZE",
    "INITIAL_MATCHES_LIMIT",
    "INITIAL_MATCHES_MIN_SCORE",
    "INVESTOR_MATCH_MIN_SCORE",
    "DailyMatch",
    "InvestorMatch",
    "MatchingService",
    "MatchPage",
    "NoPreferences",
    "ScoredProperty",
]

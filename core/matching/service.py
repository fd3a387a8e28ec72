"""
Matched-Properties Query Service

Wraps the scorer with data access. Every call re-reads preferences and the
active listing pool and scores from scratch; nothing is cached, so results
always reflect current data.

Ordering is total (score desc, newest listing first, then id) so that
offset/limit pages are stable across repeated calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Union

from core.errors import NotFound, ValidationError
from core.matching.scoring import PropertyMatchScorer
from core.models import InvestorPreference, MatchResult, Property
from core.storage import DataStore
from utils.formatting import bedroom_badge, format_currency, format_property_title


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20

# Thresholds used by the notification flows
INITIAL_MATCHES_MIN_SCORE = 75
INITIAL_MATCHES_LIMIT = 5
DAILY_MATCH_MIN_SCORE = 85
DAILY_MATCH_WINDOW = timedelta(hours=24)
INVESTOR_MATCH_MIN_SCORE = 60


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class ScoredProperty:
    """A property with its match result."""

    property: Property
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score

    def to_card(self) -> dict[str, Any]:
        """Property card payload for API responses and emails."""
        prop = self.property
        return {
            "id": prop.id,
            "title": format_property_title(prop.address, prop.city, prop.postcode),
            "address": prop.address,
            "city": prop.city,
            "postcode": prop.postcode,
            "local_authority": prop.local_authority,
            "monthly_rent": prop.monthly_rent,
            "price": prop.rent_pounds,
            "priceLabel": format_currency(prop.rent_pounds),
            "bedrooms": prop.bedrooms,
            "bedroomBadge": bedroom_badge(prop.bedrooms),
            "property_type": prop.property_type.value,
            "availability": prop.availability.value,
            "images": list(prop.photos),
            "created_at": prop.created_at.isoformat() if prop.created_at else None,
            "matchScore": self.result.score,
            "matchReasons": list(self.result.reasons),
            "matchBreakdown": dict(self.result.breakdown),
        }


@dataclass(frozen=True)
class MatchPage:
    """One page of matched properties plus the pre-pagination total."""

    properties: list[ScoredProperty]
    total: int
    limit: int
    offset: int
    min_score: int
    preference: Optional[InvestorPreference] = None

    has_preferences = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "properties": [p.to_card() for p in self.properties],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "minScore": self.min_score,
            "hasPreferences": True,
        }


@dataclass(frozen=True)
class NoPreferences:
    """The investor has never set (or has deactivated) preferences."""

    investor_id: str

    has_preferences = False


MatchQueryResult = Union[MatchPage, NoPreferences]


@dataclass(frozen=True)
class InvestorMatch:
    """An investor whose preferences match a given property."""

    preference: InvestorPreference
    result: MatchResult

    @property
    def investor_id(self) -> str:
        return self.preference.investor_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "investor_id": self.investor_id,
            "operator_type": self.preference.operator_type.value,
            "preference_data": self.preference.preference_data.to_dict(),
            "match_score": self.result.score,
            "match_reasons": list(self.result.reasons),
            "match_breakdown": dict(self.result.breakdown),
        }


@dataclass(frozen=True)
class DailyMatch:
    """Best new listing for one investor in the daily window."""

    preference: InvestorPreference
    best: ScoredProperty
    match_count: int
    other_matches: list[ScoredProperty] = field(default_factory=list)

    @property
    def investor_id(self) -> str:
        return self.preference.investor_id


# =============================================================================
# Service
# =============================================================================


class MatchingService:
    """
    Scores the active listing pool against investor preferences.

    Usage:
        service = MatchingService(store)
        result = service.get_matched_properties(investor_id, min_score=60)

        if isinstance(result, NoPreferences):
            # investor has no criteria yet
    """

    def __init__(
        self,
        store: DataStore,
        scorer: Optional[PropertyMatchScorer] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._store = store
        self._scorer = scorer or PropertyMatchScorer()
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    # =========================================================================
    # Helpers
    # =========================================================================

    def load_preference(self, investor_id: str) -> Optional[InvestorPreference]:
        """
        Load an investor's active preferences with locations normalised.

        Returns:
            InvestorPreference, or None if absent or inactive
        """
        row = self._store.get_preference(investor_id)
        if row is None or row.get("is_active") is False:
            return None
        return InvestorPreference.from_record(row)

    def score_candidates(
        self,
        preference: InvestorPreference,
        rows: Iterable[dict],
    ) -> list[ScoredProperty]:
        """
        Score property rows against one preference.

        Rows that fail validation are logged and skipped so a single bad
        listing cannot abort the batch. Non-active rows are ignored.
        """
        self._scorer.validate_preference(preference.preference_data)

        scored: list[ScoredProperty] = []
        for row in rows:
            try:
                prop = Property.from_record(row)
                if not prop.is_matchable:
                    continue
                result = self._scorer.score(prop, preference)
            except ValidationError as e:
                logger.warning(
                    "Skipping property %s while matching investor %s: %s",
                    row.get("id"),
                    preference.investor_id,
                    e.message,
                )
                continue
            scored.append(ScoredProperty(property=prop, result=result))
        return scored

    @staticmethod
    def rank(scored: Iterable[ScoredProperty]) -> list[ScoredProperty]:
        """Sort by score desc, newest listing first, then id."""
        return sorted(
            scored,
            key=lambda s: (
                -s.result.score,
                -s.property.sort_timestamp.timestamp(),
                s.property.id,
            ),
        )

    @staticmethod
    def _check_paging(min_score: int, limit: int, offset: int) -> None:
        if not 0 <= min_score <= 100:
            raise ValidationError("minScore", "minScore must be between 0 and 100")
        if limit < 1:
            raise ValidationError("limit", "limit must be at least 1")
        if offset < 0:
            raise ValidationError("offset", "offset must not be negative")

    def _ranked_matches(self, preference: InvestorPreference, min_score: int) -> list[ScoredProperty]:
        rows = self._store.list_properties(status="active")
        scored = self.score_candidates(preference, rows)
        return self.rank(s for s in scored if s.result.score >= min_score)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_matched_properties(
        self,
        investor_id: str,
        min_score: int = 0,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> MatchQueryResult:
        """
        Page of active properties matching an investor's preferences.

        Args:
            investor_id: Investor user id
            min_score: Drop matches scoring below this (0-100)
            limit: Page size (default: service page size)
            offset: Number of matches to skip

        Returns:
            MatchPage, or NoPreferences if the investor has none set

        Raises:
            ValidationError: Bad paging arguments or a malformed preference
        """
        limit = self._page_size if limit is None else limit
        self._check_paging(min_score, limit, offset)

        preference = self.load_preference(investor_id)
        if preference is None:
            return NoPreferences(investor_id=investor_id)

        ranked = self._ranked_matches(preference, min_score)
        logger.info(
            "Investor %s: %d matches at minScore=%d",
            investor_id,
            len(ranked),
            min_score,
        )

        return MatchPage(
            properties=ranked[offset:offset + limit],
            total=len(ranked),
            limit=limit,
            offset=offset,
            min_score=min_score,
            preference=preference,
        )

    def count_matches(self, investor_id: str, min_score: int = 0) -> Optional[int]:
        """Total matches for an investor, or None without preferences."""
        preference = self.load_preference(investor_id)
        if preference is None:
            return None
        return len(self._ranked_matches(preference, min_score))

    def get_investor_matches(
        self,
        property_id: str,
        min_score: int = INVESTOR_MATCH_MIN_SCORE,
    ) -> list[InvestorMatch]:
        """
        Investors whose active preferences match one property.

        The property is scored whatever its status, so admins can preview
        demand before approving a listing. Malformed preference rows are
        logged and skipped.

        Raises:
            NotFound: If the property does not exist
            ValidationError: If the property itself cannot be scored
        """
        row = self._store.get_property(property_id)
        if row is None:
            raise NotFound(f"Property {property_id} not found")
        prop = Property.from_record(row)

        matches: list[InvestorMatch] = []
        for pref_row in self._store.list_active_preferences():
            try:
                preference = InvestorPreference.from_record(pref_row)
                result = self._scorer.score(prop, preference)
            except (ValidationError, KeyError) as e:
                logger.warning(
                    "Skipping investor %s while matching property %s: %s",
                    pref_row.get("investor_id"),
                    property_id,
                    e,
                )
                continue
            if result.score >= min_score:
                matches.append(InvestorMatch(preference=preference, result=result))

        matches.sort(key=lambda m: (-m.result.score, m.investor_id))
        return matches

    def find_daily_matches(
        self,
        now: Optional[datetime] = None,
        min_score: int = DAILY_MATCH_MIN_SCORE,
        window: timedelta = DAILY_MATCH_WINDOW,
    ) -> list[DailyMatch]:
        """
        Best new listing per investor for the daily match email.

        Only listings created within the window are considered, and only
        investors with notifications enabled.
        """
        now = now or datetime.now(timezone.utc)
        new_rows = self._store.list_properties(status="active", created_since=now - window)
        if not new_rows:
            logger.info("No new properties since %s", (now - window).isoformat())
            return []

        daily: list[DailyMatch] = []
        for pref_row in self._store.list_active_preferences():
            try:
                preference = InvestorPreference.from_record(pref_row)
                if not preference.notification_enabled:
                    continue
                scored = self.score_candidates(preference, new_rows)
            except (ValidationError, KeyError) as e:
                logger.warning(
                    "Skipping investor %s in daily matches: %s",
                    pref_row.get("investor_id"),
                    e,
                )
                continue

            ranked = self.rank(s for s in scored if s.result.score >= min_score)
            if ranked:
                daily.append(DailyMatch(
                    preference=preference,
                    best=ranked[0],
                    match_count=len(ranked),
                    other_matches=ranked[1:],
                ))

        logger.info(
            "Daily matches: %d new properties, %d investors with matches",
            len(new_rows),
            len(daily),
        )
        return daily

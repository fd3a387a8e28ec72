"""
Preference Lifecycle - Read and Save Investor Preferences

One preference row per investor, created on first save and replaced on
every later save (upsert on investor_id, no history). The first save also
sends the signup emails: an admin alert and the investor's initial matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from core.errors import MatchingError
from core.identity import UserProfile
from core.matching import INVESTOR_MATCH_MIN_SCORE, MatchingService
from core.models import InvestorPreference
from core.notifications import Dispatch, NotificationService, dispatch_inline
from core.preferences.validation import validate_preference_payload
from core.storage import DataStore


logger = logging.getLogger(__name__)

# Matches counted in the summary shown alongside saved preferences
MATCH_STATS_MIN_SCORE = INVESTOR_MATCH_MIN_SCORE


@dataclass(frozen=True)
class PreferenceView:
    """An investor's preferences with their match summary."""

    preferences: Optional[dict[str, Any]]
    match_stats: Optional[dict[str, Any]] = None

    @property
    def has_preferences(self) -> bool:
        return self.preferences is not None


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a preferences save."""

    preferences: dict[str, Any]
    first_signup: bool


class PreferenceService:
    """
    Reads and writes investor preferences.

    Usage:
        service = PreferenceService(store, matching, notifier)
        view = service.get_preferences(profile)
        result = service.save_preferences(profile, body, dispatch=background_tasks.add_task)
    """

    def __init__(
        self,
        store: DataStore,
        matching: MatchingService,
        notifier: NotificationService,
    ):
        self._store = store
        self._matching = matching
        self._notifier = notifier

    # =========================================================================
    # Read
    # =========================================================================

    def _match_stats(self, preference: InvestorPreference) -> Optional[dict[str, Any]]:
        try:
            total = self._matching.count_matches(
                preference.investor_id,
                min_score=MATCH_STATS_MIN_SCORE,
            )
        except MatchingError as e:
            logger.error("Error calculating match stats for %s: %s", preference.investor_id, e)
            return None

        if total is None:
            return None
        return {
            "total_matches": total,
            "last_updated": preference.updated_at.isoformat() if preference.updated_at else None,
        }

    def get_preferences(self, profile: UserProfile) -> PreferenceView:
        """
        Fetch an investor's preferences and match summary.

        Stored locations are returned in the current format whatever shape
        they were saved in.
        """
        row = self._store.get_preference(profile.user_id)
        if row is None:
            return PreferenceView(preferences=None)

        preference = InvestorPreference.from_record(row)
        preferences = dict(row)
        preferences["preference_data"] = preference.preference_data.to_dict()

        stats = self._match_stats(preference) if preference.is_active else None
        return PreferenceView(preferences=preferences, match_stats=stats)

    # =========================================================================
    # Write
    # =========================================================================

    def save_preferences(
        self,
        profile: UserProfile,
        body: Any,
        dispatch: Dispatch = dispatch_inline,
    ) -> SaveResult:
        """
        Validate and upsert an investor's preferences.

        Args:
            profile: The investor saving preferences
            body: Request body
            dispatch: Runs the signup emails; pass BackgroundTasks.add_task to
                send them after the response

        Raises:
            ValidationError: If the body is invalid
            UpstreamFailure: If the data store write fails
        """
        payload = validate_preference_payload(body)

        first_signup = self._store.get_preference(profile.user_id) is None

        record = {
            "investor_id": profile.user_id,
            **payload,
            "is_active": True,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        stored = self._store.upsert_preference(record)

        logger.info(
            "Saved preferences for investor %s (%s)",
            profile.user_id,
            "first signup" if first_signup else "update",
        )

        if first_signup:
            preference = InvestorPreference.from_record(stored)
            dispatch(self._notifier.send_first_signup, profile, preference)

        return SaveResult(preferences=stored, first_signup=first_signup)

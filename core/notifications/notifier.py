"""
Notification Service - Investor and Admin Emails

Builds the payload for each email and hands it to a MailSender:
- new_investor: admin alert on an investor's first preference save
- initial_matches: investor's best matches right after signup
- new_property_match: daily email with the best new listing per investor

Every send is best effort. Failures are logged and reported as False; they
never propagate to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

import requests
from jinja2 import TemplateError

from core.errors import MatchingError
from core.identity import IdentityProvider, UserProfile
from core.matching import (
    INITIAL_MATCHES_LIMIT,
    INITIAL_MATCHES_MIN_SCORE,
    DailyMatch,
    MatchingService,
    MatchPage,
)
from core.models import InvestorPreference, NumericRange
from core.notifications.mailer import MailSender
from utils.formatting import format_currency


logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "https://aceinvestmentproperties.co.uk"

# Runs fn(*args) now or later; BackgroundTasks.add_task has this shape
Dispatch = Callable[..., Any]


def dispatch_inline(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Run a notification immediately in the caller's thread."""
    fn(*args, **kwargs)


# =============================================================================
# Payload Helpers
# =============================================================================


def _format_budget(budget: Optional[NumericRange]) -> str:
    if budget is None:
        return "Not set"
    return f"{format_currency(budget.min)} - {format_currency(budget.max)} pcm"


def _format_bedrooms(bedrooms: Optional[NumericRange]) -> str:
    if bedrooms is None:
        return "Not set"
    low, high = int(bedrooms.min), int(bedrooms.max)
    return str(low) if low == high else f"{low} - {high}"


def describe_locations(preference: InvestorPreference) -> list[str]:
    """Human-readable location lines, e.g. "Manchester (Salford, Trafford)"."""
    lines = []
    for location in preference.preference_data.locations:
        if location.covers_all_areas:
            lines.append(f"{location.city} (all areas)")
        else:
            lines.append(f"{location.city} ({', '.join(location.local_authorities)})")
    return lines


# =============================================================================
# Service
# =============================================================================


class NotificationService:
    """
    Sends the matching-related emails.

    Usage:
        notifier = NotificationService(mailer, matching, identity, admin_email="ops@example.com")
        notifier.send_first_signup(profile, preference)
    """

    def __init__(
        self,
        mailer: MailSender,
        matching: MatchingService,
        identity: Optional[IdentityProvider] = None,
        admin_email: Optional[str] = None,
        site_url: str = DEFAULT_SITE_URL,
    ):
        self._mailer = mailer
        self._matching = matching
        self._identity = identity
        self._admin_email = admin_email
        self._site_url = site_url.rstrip("/")

    def _deliver(
        self,
        to: str,
        subject: str,
        template_name: str,
        template_data: dict[str, Any],
    ) -> bool:
        data = {"site_url": self._site_url, **template_data}
        try:
            return self._mailer.send(to, subject, template_name, data)
        except (MatchingError, requests.RequestException, TemplateError, ValueError) as e:
            logger.error("Failed to send %s email to %s: %s", template_name, to, e)
            return False

    # =========================================================================
    # First Signup
    # =========================================================================

    def send_new_investor(self, profile: UserProfile, preference: InvestorPreference) -> bool:
        """Alert the admin inbox that an investor finished onboarding."""
        if not self._admin_email:
            logger.warning("ADMIN_EMAIL not set; skipping new investor alert for %s", profile.user_id)
            return False

        criteria = preference.preference_data
        return self._deliver(
            self._admin_email,
            f"New investor signup: {profile.display_name}",
            "new_investor",
            {
                "investor_name": profile.display_name,
                "investor_email": profile.email,
                "phone": profile.phone,
                "company_name": profile.company_name,
                "operator_type": (
                    preference.operator_type_other
                    or preference.operator_type.value.replace("_", " ").title()
                ),
                "properties_managing": preference.properties_managing_bucket,
                "budget": _format_budget(criteria.budget),
                "bedrooms": _format_bedrooms(criteria.bedrooms),
                "property_types": list(criteria.property_types),
                "locations": describe_locations(preference),
                "admin_link": f"{self._site_url}/admin/investors/{profile.user_id}",
            },
        )

    def send_initial_matches(self, profile: UserProfile, preference: InvestorPreference) -> bool:
        """Email the investor their best matches right after signup."""
        if not profile.email:
            logger.warning("Investor %s has no email; skipping initial matches", profile.user_id)
            return False

        try:
            result = self._matching.get_matched_properties(
                preference.investor_id,
                min_score=INITIAL_MATCHES_MIN_SCORE,
                limit=INITIAL_MATCHES_LIMIT,
            )
        except MatchingError as e:
            logger.error("Could not build initial matches for %s: %s", profile.user_id, e)
            return False

        matches = result.properties if isinstance(result, MatchPage) else []
        total = result.total if isinstance(result, MatchPage) else 0

        return self._deliver(
            profile.email,
            "Your first property matches" if matches else "Welcome to Ace Properties",
            "initial_matches",
            {
                "investor_name": profile.display_name,
                "matches": [m.to_card() for m in matches],
                "total": total,
                "dashboard_link": f"{self._site_url}/investor/dashboard",
            },
        )

    def send_first_signup(self, profile: UserProfile, preference: InvestorPreference) -> None:
        """Admin alert plus investor welcome. Each send is independent."""
        self.send_new_investor(profile, preference)
        self.send_initial_matches(profile, preference)

    # =========================================================================
    # Daily Matches
    # =========================================================================

    def _send_daily_match(self, match: DailyMatch) -> bool:
        if self._identity is None:
            logger.warning("No identity provider; cannot address daily match for %s", match.investor_id)
            return False

        try:
            profile = self._identity.get_profile(match.investor_id)
        except MatchingError as e:
            logger.warning("Skipping daily match for %s: %s", match.investor_id, e)
            return False

        if not profile.email:
            return False

        card = match.best.to_card()
        return self._deliver(
            profile.email,
            f"New {match.best.score}% Match: {card['title']}",
            "new_property_match",
            {
                "investor_name": profile.display_name,
                "property": card,
                "match_score": match.best.score,
                "breakdown": card["matchBreakdown"],
                "other_count": len(match.other_matches),
                "property_url": f"{self._site_url}/properties/{card['id']}",
                "dashboard_link": f"{self._site_url}/investor/dashboard",
            },
        )

    def send_daily_matches(self, now: Optional[datetime] = None) -> dict[str, int]:
        """
        Email each opted-in investor their best new listing.

        Returns:
            Counts: investors matched and emails sent
        """
        daily = self._matching.find_daily_matches(now=now)

        sent = 0
        for match in daily:
            if self._send_daily_match(match):
                sent += 1

        logger.info("Daily match emails: %d sent for %d matched investors", sent, len(daily))
        return {"investorsMatched": len(daily), "emailsSent": sent}

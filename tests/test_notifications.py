"""
Tests for Email Notifications

Tests covering:
1. Template rendering
2. Resend sender request shape and failure handling
3. Admin alert and initial matches payloads
4. Daily new-listing match emails
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
import requests

from core.errors import UpstreamFailure
from core.identity import StaticIdentityProvider, UserProfile
from core.matching import MatchingService
from core.models import InvestorPreference
from core.notifications import (
    LoggingMailSender,
    NotificationService,
    ResendMailSender,
    describe_locations,
    render_email,
)
from core.storage import InMemoryDataStore


NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# Fakes
# =============================================================================


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = json.dumps(self._payload)
        self.content = self.text.encode()

    def json(self):
        return self._payload


class FakeSession:
    """Records requests and replays canned responses."""

    def __init__(self, responses=None, error: Exception = None):
        self.headers: dict = {}
        self.calls: list = []
        self._responses = list(responses or [])
        self._error = error

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self._error is not None:
            raise self._error
        return self._responses.pop(0) if self._responses else FakeResponse()

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def request(self, method, url, **kwargs):
        return self._respond(method, url, **kwargs)


# =============================================================================
# Fixtures
# =============================================================================


def preference_record(investor_id: str, **overrides) -> dict:
    record = {
        "investor_id": investor_id,
        "operator_type": "supported_living",
        "properties_managing": 12,
        "preference_data": {
            "budget": {"min": 500, "max": 2000},
            "bedrooms": {"min": 1, "max": 2},
            "property_types": ["flat"],
            "locations": [
                {"id": "l1", "region": "North West", "city": "Greater Manchester", "localAuthorities": ["Salford"]},
            ],
        },
        "notification_enabled": True,
        "is_active": True,
    }
    record.update(overrides)
    return record


def property_record(property_id: str, **overrides) -> dict:
    record = {
        "id": property_id,
        "city": "Salford",
        "address": "12 Chapel Street",
        "postcode": "M3 5JZ",
        "monthly_rent": 150000,
        "bedrooms": 2,
        "property_type": "flat",
        "status": "active",
        "photos": ["https://cdn.example.com/p1.jpg"],
        "created_at": (NOW - timedelta(hours=3)).isoformat(),
    }
    record.update(overrides)
    return record


@pytest.fixture
def store():
    return InMemoryDataStore()


@pytest.fixture
def mailer():
    return LoggingMailSender()


@pytest.fixture
def identity():
    provider = StaticIdentityProvider()
    provider.add_profile(UserProfile(user_id="inv-1", user_type="investor", email="one@example.com", full_name="Investor One"))
    provider.add_profile(UserProfile(user_id="inv-2", user_type="investor", email=None))
    return provider


@pytest.fixture
def notifier(store, mailer, identity):
    return NotificationService(
        mailer,
        MatchingService(store),
        identity=identity,
        admin_email="admin@example.com",
        site_url="https://ace.example.com/",
    )


@pytest.fixture
def profile():
    return UserProfile(
        user_id="inv-1",
        user_type="investor",
        email="one@example.com",
        full_name="Investor One",
        phone="07700 900123",
    )


# =============================================================================
# Templates
# =============================================================================


class TestRenderEmail:
    """render_email()"""

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            render_email("password_reset", {})

    def test_values_are_escaped(self):
        html = render_email("initial_matches", {
            "investor_name": "<script>alert(1)</script>",
            "matches": [],
            "total": 0,
            "dashboard_link": "https://ace.example.com/investor/dashboard",
            "site_url": "https://ace.example.com",
        })
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


# =============================================================================
# Resend
# =============================================================================


class TestResendMailSender:
    """ResendMailSender"""

    def test_request_shape(self):
        session = FakeSession()
        sender = ResendMailSender("re_test", "Ace <noreply@example.com>", session=session)

        ok = sender.send("jo@example.com", "Hello", "initial_matches", {
            "investor_name": "Jo",
            "matches": [],
            "total": 0,
            "dashboard_link": "https://ace.example.com/investor/dashboard",
            "site_url": "https://ace.example.com",
        })

        assert ok is True
        assert session.headers["Authorization"] == "Bearer re_test"
        method, url, kwargs = session.calls[0]
        assert (method, url) == ("POST", "https://api.resend.com/emails")
        assert kwargs["json"]["to"] == ["jo@example.com"]
        assert kwargs["json"]["from"] == "Ace <noreply@example.com>"
        assert "Welcome, Jo" in kwargs["json"]["html"]

    def test_rejected_message_returns_false(self):
        session = FakeSession([FakeResponse(422, {"message": "invalid to"})])
        sender = ResendMailSender("re_test", "noreply@example.com", session=session)

        ok = sender.send("bad", "Hi", "initial_matches", {"matches": [], "total": 0})
        assert ok is False

    def test_network_error_raises_upstream_failure(self):
        session = FakeSession(error=requests.ConnectionError("down"))
        sender = ResendMailSender("re_test", "noreply@example.com", session=session)

        with pytest.raises(UpstreamFailure):
            sender.send("jo@example.com", "Hi", "initial_matches", {"matches": [], "total": 0})


class TestLoggingMailSender:
    """LoggingMailSender"""

    def test_keeps_only_recent_messages(self):
        sender = LoggingMailSender(max_kept=3)

        for i in range(5):
            sender.send(f"user{i}@example.com", "Hi", "initial_matches", {"matches": [], "total": 0})

        assert sender.count() == 3
        assert [m.to for m in sender.sent] == [
            "user2@example.com",
            "user3@example.com",
            "user4@example.com",
        ]


# =============================================================================
# First Signup
# =============================================================================


class TestFirstSignupEmails:
    """Admin alert and initial matches."""

    def test_describe_locations(self):
        preference = InvestorPreference.from_record(preference_record("inv-1"))
        assert describe_locations(preference) == ["Greater Manchester (Salford)"]

    def test_admin_alert_payload(self, notifier, mailer, profile):
        preference = InvestorPreference.from_record(preference_record("inv-1"))

        assert notifier.send_new_investor(profile, preference) is True

        sent = mailer.sent[0]
        assert sent.to == "admin@example.com"
        assert sent.subject == "New investor signup: Investor One"
        assert sent.template_data["operator_type"] == "Supported Living"
        assert sent.template_data["properties_managing"] == "11-20"
        assert sent.template_data["budget"] == "£500 - £2,000 pcm"
        assert sent.template_data["admin_link"] == "https://ace.example.com/admin/investors/inv-1"
        assert "07700 900123" in sent.html

    def test_admin_alert_skipped_without_admin_email(self, store, mailer, profile):
        notifier = NotificationService(mailer, MatchingService(store))
        preference = InvestorPreference.from_record(preference_record("inv-1"))

        assert notifier.send_new_investor(profile, preference) is False
        assert mailer.count() == 0

    def test_initial_matches_without_listings(self, store, notifier, mailer, profile):
        store.upsert_preference(preference_record("inv-1"))
        preference = InvestorPreference.from_record(store.get_preference("inv-1"))

        assert notifier.send_initial_matches(profile, preference) is True
        assert mailer.sent[0].subject == "Welcome to Ace Properties"
        assert "We'll email you" in mailer.sent[0].html

    def test_initial_matches_limited_to_five(self, store, notifier, mailer, profile):
        store.upsert_preference(preference_record("inv-1"))
        for i in range(7):
            store.add_property(property_record(f"p{i}"))
        preference = InvestorPreference.from_record(store.get_preference("inv-1"))

        notifier.send_initial_matches(profile, preference)

        data = mailer.sent[0].template_data
        assert len(data["matches"]) == 5
        assert data["total"] == 7
        assert mailer.sent[0].subject == "Your first property matches"

    def test_initial_matches_skipped_without_email(self, notifier, mailer):
        profile = UserProfile(user_id="inv-2", user_type="investor")
        preference = InvestorPreference.from_record(preference_record("inv-2"))

        assert notifier.send_initial_matches(profile, preference) is False
        assert mailer.count() == 0


# =============================================================================
# Daily Matches
# =============================================================================


class TestDailyMatchEmails:
    """NotificationService.send_daily_matches()"""

    def test_best_new_listing_emailed(self, store, notifier, mailer):
        store.upsert_preference(preference_record("inv-1"))
        store.add_property(property_record("best"))
        store.add_property(property_record("second", bedrooms=3))

        counts = notifier.send_daily_matches(now=NOW)

        assert counts == {"investorsMatched": 1, "emailsSent": 1}
        sent = mailer.sent[0]
        assert sent.to == "one@example.com"
        assert sent.subject == "New 100% Match: Chapel Street, Salford, M3"
        assert sent.template_data["property_url"] == "https://ace.example.com/properties/best"
        assert sent.template_data["other_count"] == 1
        assert "https://cdn.example.com/p1.jpg" in sent.html

    def test_investor_without_email_is_skipped(self, store, notifier, mailer):
        store.upsert_preference(preference_record("inv-2"))
        store.add_property(property_record("best"))

        counts = notifier.send_daily_matches(now=NOW)

        assert counts == {"investorsMatched": 1, "emailsSent": 0}
        assert mailer.count() == 0

    def test_investor_without_profile_is_skipped(self, store, notifier, mailer):
        store.upsert_preference(preference_record("inv-unknown"))
        store.add_property(property_record("best"))

        assert notifier.send_daily_matches(now=NOW)["emailsSent"] == 0

    def test_opted_out_investor_not_emailed(self, store, notifier, mailer):
        store.upsert_preference(preference_record("inv-1", notification_enabled=False))
        store.add_property(property_record("best"))

        assert notifier.send_daily_matches(now=NOW) == {"investorsMatched": 0, "emailsSent": 0}

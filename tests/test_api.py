"""
Tests for the HTTP API

Tests covering:
1. Health endpoints
2. Bearer auth and role checks (401 / 403 / 404)
3. Preferences save and fetch, including first-signup emails
4. Matched-properties paging
5. Admin matching views
6. Cron secret and daily match counts
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from core.errors import NotFound
from core.identity import StaticIdentityProvider
from core.notifications import LoggingMailSender
from core.storage import InMemoryDataStore
from utils.config import Config
from web.app import create_app


CRON_SECRET = "cron-secret"


# =============================================================================
# Fixtures
# =============================================================================


class OrphanTokenIdentity(StaticIdentityProvider):
    """Accepts a token whose user has no profile row."""

    def __init__(self):
        super().__init__()
        self.register("orphan-token", "orphan")

    def get_profile(self, user_id: str):
        if user_id == "orphan":
            raise NotFound("User profile not found")
        return super().get_profile(user_id)


VALID_BODY = {
    "operator_type": "sa_operator",
    "properties_managing": 4,
    "preference_data": {
        "budget": {"min": 500, "max": 2000},
        "bedrooms": {"min": 1, "max": 2},
        "property_types": ["flat"],
        "locations": [{"city": "Manchester", "region": "North West", "localAuthorities": ["Manchester"]}],
    },
}


def property_record(property_id: str, **overrides) -> dict:
    record = {
        "id": property_id,
        "city": "Manchester",
        "address": "1 Deansgate",
        "postcode": "M3 1AA",
        "monthly_rent": 180000,
        "bedrooms": 2,
        "property_type": "flat",
        "status": "active",
        "created_at": (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat(),
    }
    record.update(overrides)
    return record


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store():
    return InMemoryDataStore()


@pytest.fixture
def mailer():
    return LoggingMailSender()


@pytest.fixture
def identity():
    provider = OrphanTokenIdentity()
    provider.register("investor-token", "inv-1", "investor", email="jo@example.com", full_name="Jo Investor")
    provider.register("landlord-token", "ll-1", "landlord", email="landlord@example.com")
    provider.register("admin-token", "admin-1", "admin", email="admin@example.com")
    return provider


@pytest.fixture
def client(store, identity, mailer):
    config = Config(
        cron_secret=CRON_SECRET,
        admin_email="ops@example.com",
        site_url="https://ace.example.com",
        match_page_size=20,
    )
    app = create_app(config=config, store=store, identity=identity, mailer=mailer)
    return TestClient(app)


# =============================================================================
# Health
# =============================================================================


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["version"]


# =============================================================================
# Auth
# =============================================================================


class TestAuth:
    """Bearer token and role checks."""

    def test_missing_token(self, client):
        response = client.get("/investor/preferences")
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_wrong_scheme(self, client):
        response = client.get("/investor/preferences", headers={"Authorization": "Basic investor-token"})
        assert response.status_code == 401

    def test_unknown_token(self, client):
        response = client.get("/investor/preferences", headers=auth("forged"))
        assert response.status_code == 401

    def test_landlord_is_forbidden(self, client):
        response = client.get("/investor/matched-properties", headers=auth("landlord-token"))
        assert response.status_code == 403
        assert response.json()["error"] == "This feature is for investors only"

    def test_missing_profile(self, client):
        response = client.get("/investor/preferences", headers=auth("orphan-token"))
        assert response.status_code == 404

    def test_investor_cannot_use_admin_routes(self, client):
        response = client.get("/admin/investors/inv-1/preferences", headers=auth("investor-token"))
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden - Admin access required"


# =============================================================================
# Preferences
# =============================================================================


class TestPreferencesEndpoints:
    """GET/POST /investor/preferences"""

    def test_get_before_save(self, client):
        body = client.get("/investor/preferences", headers=auth("investor-token")).json()

        assert body["success"] is True
        assert body["preferences"] is None
        assert body["hasPreferences"] is False
        assert body["matchStats"] is None

    def test_save_then_get(self, client, store):
        store.add_property(property_record("p1"))

        saved = client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        assert saved.status_code == 200
        assert saved.json()["message"] == "Preferences saved successfully"
        assert saved.json()["preferences"]["investor_id"] == "inv-1"

        body = client.get("/investor/preferences", headers=auth("investor-token")).json()
        assert body["hasPreferences"] is True
        assert body["preferences"]["operator_type"] == "sa_operator"
        assert body["matchStats"]["totalMatches"] == 1

    def test_validation_error_names_field(self, client):
        bad = {**VALID_BODY, "operator_type": "pirate"}

        response = client.post("/investor/preferences", json=bad, headers=auth("investor-token"))

        assert response.status_code == 400
        assert response.json()["field"] == "operator_type"

    def test_nested_validation_error(self, client):
        bad = {**VALID_BODY, "preference_data": {**VALID_BODY["preference_data"], "budget": {"min": 900, "max": 100}}}

        response = client.post("/investor/preferences", json=bad, headers=auth("investor-token"))

        assert response.status_code == 400
        assert response.json()["field"] == "preference_data.budget"

    def test_location_needs_an_authority(self, client, mailer):
        data = {**VALID_BODY["preference_data"], "locations": [{"city": "Manchester", "localAuthorities": []}]}

        response = client.post(
            "/investor/preferences",
            json={**VALID_BODY, "preference_data": data},
            headers=auth("investor-token"),
        )

        assert response.status_code == 400
        assert response.json()["field"] == "preference_data.locations[0].localAuthorities"
        assert mailer.count() == 0

    def test_first_save_sends_signup_emails_once(self, client, mailer, store):
        store.add_property(property_record("p1"))

        first = client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        second = client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))

        assert (first.status_code, second.status_code) == (200, 200)
        assert mailer.count("new_investor") == 1
        assert mailer.count("initial_matches") == 1
        assert {m.to for m in mailer.sent} == {"ops@example.com", "jo@example.com"}

    def test_landlord_cannot_save(self, client, mailer):
        response = client.post("/investor/preferences", json=VALID_BODY, headers=auth("landlord-token"))

        assert response.status_code == 403
        assert mailer.count() == 0


# =============================================================================
# Matched Properties
# =============================================================================


class TestMatchedPropertiesEndpoint:
    """GET /investor/matched-properties"""

    @pytest.fixture
    def seeded(self, client, store):
        saved = client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        assert saved.status_code == 200
        for i in range(12):
            store.add_property(property_record(f"p{i:02d}"))
        return client

    def test_without_preferences(self, client):
        body = client.get("/investor/matched-properties", headers=auth("investor-token")).json()

        assert body["success"] is True
        assert body["hasPreferences"] is False
        assert body["properties"] == []
        assert body["total"] == 0

    def test_first_page(self, seeded):
        body = seeded.get("/investor/matched-properties?limit=5", headers=auth("investor-token")).json()

        assert body["hasPreferences"] is True
        assert len(body["properties"]) == 5
        assert body["total"] == 12
        assert body["page"] == 1
        assert body["totalPages"] == 3
        assert body["properties"][0]["matchScore"] == 100
        assert "Local authority match: Manchester" in body["properties"][0]["matchReasons"]
        assert body["preferences"]["operator_type"] == "sa_operator"

    def test_page_number(self, seeded):
        first = seeded.get("/investor/matched-properties?limit=5&page=1", headers=auth("investor-token")).json()
        third = seeded.get("/investor/matched-properties?limit=5&page=3", headers=auth("investor-token")).json()

        assert len(third["properties"]) == 2
        first_ids = {p["id"] for p in first["properties"]}
        assert first_ids.isdisjoint(p["id"] for p in third["properties"])

    def test_offset_overrides_page(self, seeded):
        body = seeded.get(
            "/investor/matched-properties?limit=5&offset=10&page=1",
            headers=auth("investor-token"),
        ).json()

        assert body["page"] == 3
        assert len(body["properties"]) == 2

    def test_limit_is_capped(self, seeded):
        body = seeded.get("/investor/matched-properties?limit=500", headers=auth("investor-token")).json()

        assert body["limit"] == 50
        assert body["totalPages"] == 1

    def test_min_score_out_of_range(self, seeded):
        response = seeded.get("/investor/matched-properties?minScore=101", headers=auth("investor-token"))

        assert response.status_code == 400
        assert response.json()["field"] == "minScore"

    def test_non_numeric_limit(self, seeded):
        response = seeded.get("/investor/matched-properties?limit=ten", headers=auth("investor-token"))

        assert response.status_code == 400
        assert response.json()["field"] == "limit"


# =============================================================================
# Admin
# =============================================================================


class TestAdminEndpoints:
    """/admin/* matching views"""

    def test_investor_preferences(self, client):
        client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))

        body = client.get("/admin/investors/inv-1/preferences", headers=auth("admin-token")).json()

        assert body["hasPreferences"] is True
        assert body["preferences"]["preference_data"]["locations"][0]["region"] == "North West"

    def test_investor_matched_properties(self, client, store):
        client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        store.add_property(property_record("p1"))

        body = client.get(
            "/admin/investors/inv-1/matched-properties?minScore=60",
            headers=auth("admin-token"),
        ).json()

        assert body["total"] == 1
        assert body["minScore"] == 60
        assert body["properties"][0]["id"] == "p1"

    def test_investor_without_preferences(self, client):
        body = client.get("/admin/investors/nobody/matched-properties", headers=auth("admin-token")).json()
        assert body["hasPreferences"] is False

    def test_property_matched_investors(self, client, store):
        client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        store.add_property(property_record("p1", status="draft"))

        body = client.get("/admin/properties/p1/matched-investors", headers=auth("admin-token")).json()

        assert [i["investor_id"] for i in body["investors"]] == ["inv-1"]
        assert body["investors"][0]["match_score"] == 100

    def test_unknown_property(self, client):
        response = client.get("/admin/properties/missing/matched-investors", headers=auth("admin-token"))
        assert response.status_code == 404


# =============================================================================
# Cron
# =============================================================================


class TestCronEndpoint:
    """GET /cron/daily-matches"""

    def test_requires_secret(self, client):
        assert client.get("/cron/daily-matches").status_code == 401
        assert client.get("/cron/daily-matches", headers=auth("wrong")).status_code == 401

    def test_rejects_everything_without_configured_secret(self, store, identity, mailer):
        app = create_app(config=Config(cron_secret=None), store=store, identity=identity, mailer=mailer)

        response = TestClient(app).get("/cron/daily-matches", headers=auth(""))
        assert response.status_code == 401

    def test_sends_daily_matches(self, client, store, mailer):
        client.post("/investor/preferences", json=VALID_BODY, headers=auth("investor-token"))
        mailer.sent.clear()
        store.add_property(property_record("fresh"))
        store.add_property(property_record(
            "stale",
            created_at=(datetime.now(timezone.utc) - timedelta(days=3)).isoformat(),
        ))

        response = client.get("/cron/daily-matches", headers=auth(CRON_SECRET))

        assert response.status_code == 200
        assert response.json() == {"success": True, "investorsMatched": 1, "emailsSent": 1}
        assert mailer.sent[0].to == "jo@example.com"
        assert mailer.sent[0].template_data["property"]["id"] == "fresh"

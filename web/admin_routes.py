"""
Admin Routes - Investor and Property Matching Views

All routes under /admin/* require a bearer token for an admin user.
Non-admin users receive 403 Forbidden.

Routes:
- GET /admin/investors/{id}/preferences        - An investor's preferences
- GET /admin/investors/{id}/matched-properties - Matches for an investor
- GET /admin/properties/{id}/matched-investors - Investors matching a property
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.identity import UserProfile
from core.matching import INVESTOR_MATCH_MIN_SCORE, MatchingService, MatchPage
from core.models import InvestorPreference
from core.storage import DataStore
from web.dependencies import get_matching_service, get_store, require_admin
from web.investor_routes import resolve_paging


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/admin", tags=["admin"])


# =============================================================================
# Investors
# =============================================================================


@router.get("/investors/{investor_id}/preferences")
def investor_preferences(
    investor_id: str,
    admin: UserProfile = Depends(require_admin),
    store: DataStore = Depends(get_store),
):
    """View an investor's stored preferences, locations in current format."""
    row = store.get_preference(investor_id)
    preferences = None
    if row is not None:
        preferences = dict(row)
        preferences["preference_data"] = (
            InvestorPreference.from_record(row).preference_data.to_dict()
        )

    return {
        "success": True,
        "preferences": preferences,
        "hasPreferences": preferences is not None,
    }


@router.get("/investors/{investor_id}/matched-properties")
def investor_matched_properties(
    investor_id: str,
    min_score: int = Query(0, alias="minScore"),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    page: int = Query(1),
    admin: UserProfile = Depends(require_admin),
    matching: MatchingService = Depends(get_matching_service),
):
    """Matches for any investor, as the investor would see them."""
    page, limit, offset = resolve_paging(
        page,
        matching.page_size if limit is None else limit,
        offset,
    )

    result = matching.get_matched_properties(
        investor_id,
        min_score=min_score,
        limit=limit,
        offset=offset,
    )

    if not isinstance(result, MatchPage):
        return {
            "success": True,
            "message": "No preferences set up yet",
            "properties": [],
            "total": 0,
            "hasPreferences": False,
        }

    return {"success": True, "page": page, **result.to_dict()}


# =============================================================================
# Properties
# =============================================================================


@router.get("/properties/{property_id}/matched-investors")
def property_matched_investors(
    property_id: str,
    min_score: int = Query(INVESTOR_MATCH_MIN_SCORE, alias="minScore"),
    admin: UserProfile = Depends(require_admin),
    matching: MatchingService = Depends(get_matching_service),
):
    """Investors whose preferences match a property, best first."""
    matches = matching.get_investor_matches(property_id, min_score=min_score)
    return {
        "success": True,
        "investors": [m.to_dict() for m in matches],
    }

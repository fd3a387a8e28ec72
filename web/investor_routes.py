"""
Investor Routes - Preferences and Matched Properties

All routes require a bearer token for a user whose profile type is investor.

Routes:
- GET  /investor/preferences        - Current preferences and match summary
- POST /investor/preferences        - Create or update preferences
- GET  /investor/matched-properties - Paginated matches, best first
"""

from __future__ import annotations

import math
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import BaseModel, ConfigDict

from core.errors import ValidationError
from core.identity import UserProfile
from core.matching import MatchingService, MatchPage
from core.preferences import PreferenceService
from web.dependencies import (
    get_matching_service,
    get_preference_service,
    require_investor,
)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/investor", tags=["investor"])

MAX_PAGE_SIZE = 50


# =============================================================================
# Request Models
# =============================================================================


class PreferencesRequest(BaseModel):
    """Body of POST /investor/preferences. Field rules live in core.preferences."""

    model_config = ConfigDict(extra="allow")

    operator_type: Optional[str] = None
    operator_type_other: Optional[str] = None
    properties_managing: Optional[Any] = None
    preference_data: Optional[dict[str, Any]] = None
    notification_enabled: Optional[bool] = None


# =============================================================================
# Preferences
# =============================================================================


@router.get("/preferences")
def get_preferences(
    profile: UserProfile = Depends(require_investor),
    service: PreferenceService = Depends(get_preference_service),
):
    """Fetch the investor's preferences with a count of current matches."""
    view = service.get_preferences(profile)

    match_stats = None
    if view.match_stats is not None:
        match_stats = {
            "totalMatches": view.match_stats["total_matches"],
            "lastUpdated": view.match_stats["last_updated"],
        }

    return {
        "success": True,
        "preferences": view.preferences,
        "hasPreferences": view.has_preferences,
        "matchStats": match_stats,
    }


@router.post("/preferences")
def save_preferences(
    body: PreferencesRequest,
    background_tasks: BackgroundTasks,
    profile: UserProfile = Depends(require_investor),
    service: PreferenceService = Depends(get_preference_service),
):
    """
    Create or update the investor's preferences.

    The first save also queues the signup emails, which run after the
    response is sent.
    """
    result = service.save_preferences(
        profile,
        body.model_dump(),
        dispatch=background_tasks.add_task,
    )
    return {
        "success": True,
        "preferences": result.preferences,
        "message": "Preferences saved successfully",
    }


# =============================================================================
# Matched Properties
# =============================================================================


def resolve_paging(
    page: int,
    limit: int,
    offset: Optional[int],
) -> tuple[int, int, int]:
    """
    Work out (page, limit, offset) from query parameters.

    limit is capped at MAX_PAGE_SIZE. An explicit offset wins over page.
    """
    if page < 1:
        raise ValidationError("page", "page must be at least 1")
    if limit < 1:
        raise ValidationError("limit", "limit must be at least 1")
    limit = min(limit, MAX_PAGE_SIZE)

    if offset is None:
        offset = (page - 1) * limit
    elif offset < 0:
        raise ValidationError("offset", "offset must not be negative")
    else:
        page = offset // limit + 1
    return page, limit, offset


@router.get("/matched-properties")
def matched_properties(
    min_score: int = Query(0, alias="minScore"),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    page: int = Query(1),
    profile: UserProfile = Depends(require_investor),
    matching: MatchingService = Depends(get_matching_service),
):
    """Active properties scored against the investor's preferences."""
    page, limit, offset = resolve_paging(
        page,
        matching.page_size if limit is None else limit,
        offset,
    )

    result = matching.get_matched_properties(
        profile.user_id,
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
            "page": page,
            "limit": limit,
            "totalPages": 0,
            "hasPreferences": False,
        }

    preference = result.preference
    return {
        "success": True,
        "properties": [p.to_card() for p in result.properties],
        "total": result.total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(result.total / limit),
        "hasPreferences": True,
        "preferences": {
            "operator_type": preference.operator_type.value,
            "preference_data": preference.preference_data.to_dict(),
        },
    }

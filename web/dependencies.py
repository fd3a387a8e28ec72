"""
Request Dependencies - Bearer Authentication and Service Lookup

Implements:
- Bearer token parsing from the Authorization header
- Role checks (investor, admin) against the identity provider's profile
- Cron secret check for scheduled jobs
- Service lookup from app.state (populated by create_app)

Auth failures raise domain errors; the exception handlers in web/app.py turn
them into 401/403/404 responses.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import replace
from typing import Optional

from fastapi import Request

from core.errors import Forbidden, Unauthenticated
from core.identity import AuthenticatedUser, IdentityProvider, UserProfile
from core.matching import MatchingService
from core.notifications import NotificationService
from core.preferences import PreferenceService
from core.storage import DataStore
from utils.config import Config


logger = logging.getLogger(__name__)


# =============================================================================
# Service Lookup
# =============================================================================


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_matching_service(request: Request) -> MatchingService:
    return request.app.state.matching


def get_preference_service(request: Request) -> PreferenceService:
    return request.app.state.preferences


def get_notifier(request: Request) -> NotificationService:
    return request.app.state.notifier


# =============================================================================
# Bearer Token
# =============================================================================


def bearer_token(request: Request) -> Optional[str]:
    """Extract the token from "Authorization: Bearer <token>", or None."""
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_user(request: Request) -> AuthenticatedUser:
    """
    Dependency that requires a valid bearer token.

    Raises Unauthenticated (401) if the header is missing or the token is
    rejected by the identity provider.
    """
    token = bearer_token(request)
    if not token:
        raise Unauthenticated("Authentication required")
    return get_identity(request).resolve_token(token)


def _load_profile(request: Request) -> UserProfile:
    user = require_user(request)
    profile = get_identity(request).get_profile(user.user_id)
    if not profile.email and user.email:
        profile = replace(profile, email=user.email)
    return profile


# =============================================================================
# Role Dependencies
# =============================================================================


def require_investor(request: Request) -> UserProfile:
    """
    Dependency that requires an authenticated investor.

    Raises:
        Unauthenticated (401): No or invalid token
        NotFound (404): No profile for the user
        Forbidden (403): User is not an investor
    """
    profile = _load_profile(request)
    if not profile.is_investor:
        raise Forbidden("This feature is for investors only")
    return profile


def require_admin(request: Request) -> UserProfile:
    """
    Dependency that requires an authenticated admin.

    Raises Forbidden (403) for any non-admin user.
    """
    profile = _load_profile(request)
    if not profile.is_admin:
        raise Forbidden("Forbidden - Admin access required")
    return profile


def require_cron(request: Request) -> None:
    """
    Dependency that requires the cron shared secret as a bearer token.

    Always rejects when CRON_SECRET is not configured.
    """
    secret = get_config(request).cron_secret
    token = bearer_token(request)
    if not secret:
        logger.warning("CRON_SECRET not set; rejecting cron request")
        raise Unauthenticated("Unauthorized")
    if not token or not hmac.compare_digest(token, secret):
        raise Unauthenticated("Unauthorized")

"""
Supabase Auth identity provider.

Tokens are verified by calling GET /auth/v1/user with the caller's JWT.
Profiles come from the user_profiles table via PostgREST.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from core.errors import NotFound, Unauthenticated, UpstreamFailure
from core.identity.base import AuthenticatedUser, IdentityProvider, UserProfile


logger = logging.getLogger(__name__)


class SupabaseIdentityProvider(IdentityProvider):
    """Verifies Supabase JWTs and reads user_profiles."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        service_role_key: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        if not url or not anon_key or not service_role_key:
            raise UpstreamFailure(
                "Supabase URL, anon key and service role key are required",
                service="supabase-auth",
                unavailable=True,
            )
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._service_role_key = service_role_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def resolve_token(self, token: str) -> AuthenticatedUser:
        if not token:
            raise Unauthenticated("Authentication required")

        try:
            response = self._session.get(
                f"{self._url}/auth/v1/user",
                headers={"apikey": self._anon_key, "Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Supabase auth lookup failed: %s", e)
            raise UpstreamFailure("Authentication service unreachable", service="supabase-auth")

        if response.status_code in (401, 403):
            raise Unauthenticated("Invalid or expired token")
        if response.status_code >= 400:
            logger.error("Supabase auth returned %d", response.status_code)
            raise UpstreamFailure(
                f"Authentication service returned HTTP {response.status_code}",
                service="supabase-auth",
            )

        data = response.json()
        if not data or not data.get("id"):
            raise Unauthenticated("Invalid or expired token")
        return AuthenticatedUser(user_id=str(data["id"]), email=data.get("email"))

    def get_profile(self, user_id: str) -> UserProfile:
        try:
            response = self._session.get(
                f"{self._url}/rest/v1/user_profiles",
                params={"select": "*", "id": f"eq.{user_id}", "limit": "1"},
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {self._service_role_key}",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Profile lookup for %s failed: %s", user_id, e)
            raise UpstreamFailure("Profile lookup failed", service="supabase")

        if response.status_code >= 400:
            logger.error("Profile lookup for %s returned %d", user_id, response.status_code)
            raise UpstreamFailure(
                f"Profile lookup returned HTTP {response.status_code}",
                service="supabase",
            )

        rows = response.json() or []
        if not rows:
            raise NotFound("User profile not found")
        return UserProfile.from_record(rows[0])

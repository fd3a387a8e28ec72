"""
Static identity provider for local development and tests.

Tokens and profiles are registered in memory. Nothing is verified
cryptographically, so this provider must never run in production.
"""

from __future__ import annotations

from typing import Optional

from core.errors import NotFound, Unauthenticated
from core.identity.base import AuthenticatedUser, IdentityProvider, UserProfile


class StaticIdentityProvider(IdentityProvider):
    """Token -> user map plus user -> profile map."""

    def __init__(self):
        self._tokens: dict[str, AuthenticatedUser] = {}
        self._profiles: dict[str, UserProfile] = {}

    def register(
        self,
        token: str,
        user_id: str,
        user_type: str = "investor",
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> UserProfile:
        """Register a token and its user's profile."""
        self._tokens[token] = AuthenticatedUser(user_id=user_id, email=email)
        profile = UserProfile(
            user_id=user_id,
            user_type=user_type,
            email=email,
            full_name=full_name,
        )
        self._profiles[user_id] = profile
        return profile

    def add_profile(self, profile: UserProfile) -> None:
        """Register a profile with no token (e.g. investors seen only by cron)."""
        self._profiles[profile.user_id] = profile

    def resolve_token(self, token: str) -> AuthenticatedUser:
        user = self._tokens.get(token)
        if user is None:
            raise Unauthenticated("Invalid or expired token")
        return user

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self._profiles.get(user_id)
        if profile is None:
            raise NotFound("User profile not found")
        return profile

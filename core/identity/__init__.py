"""
Identity lookup: bearer token -> user, user -> profile.
"""

from __future__ import annotations

from core.identity.base import AuthenticatedUser, IdentityProvider, UserProfile
from core.identity.static import StaticIdentityProvider
from core.identity.supabase import SupabaseIdentityProvider


def build_identity_provider(config) -> IdentityProvider:
    """Supabase Auth when configured, otherwise an empty static provider."""
    if config.supabase_url and config.supabase_anon_key and config.supabase_service_role_key:
        return SupabaseIdentityProvider(
            url=config.supabase_url,
            anon_key=config.supabase_anon_key,
            service_role_key=config.supabase_service_role_key,
            timeout=config.request_timeout,
        )
    return StaticIdentityProvider()


__all__ = [
    "AuthenticatedUser",
    "IdentityProvider",
    "UserProfile",
    "StaticIdentityProvider",
    "SupabaseIdentityProvider",
    "build_identity_provider",
]

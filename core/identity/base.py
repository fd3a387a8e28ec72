"""
Identity provider interface.

Authentication is delegated to an external provider. The service only
needs two answers: who owns this bearer token, and what kind of user is
that.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a bearer token."""

    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Profile row for a user."""

    user_id: str
    user_type: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None

    @property
    def is_investor(self) -> bool:
        return self.user_type == "investor"

    @property
    def is_admin(self) -> bool:
        return self.user_type == "admin"

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Investor"

    @classmethod
    def from_record(cls, record: dict) -> "UserProfile":
        first = record.get("first_name") or ""
        last = record.get("last_name") or ""
        full_name = record.get("full_name") or f"{first} {last}".strip() or None
        return cls(
            user_id=str(record["id"]),
            user_type=record.get("user_type") or "",
            email=record.get("email"),
            full_name=full_name,
            phone=record.get("phone"),
            company_name=record.get("company_name"),
        )


class IdentityProvider(ABC):
    """Abstract base class for token and profile lookup."""

    @abstractmethod
    def resolve_token(self, token: str) -> AuthenticatedUser:
        """
        Resolve a bearer token to a user.

        Raises:
            Unauthenticated: If the token is invalid or expired
        """

    @abstractmethod
    def get_profile(self, user_id: str) -> UserProfile:
        """
        Fetch the profile for a user.

        Raises:
            NotFound: If the user has no profile
        """

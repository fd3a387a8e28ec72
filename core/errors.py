"""
Error taxonomy for the matching service.

Every failure the core raises derives from MatchingError. The web layer maps
each subclass to an HTTP status in one place (web/app.py), so routes and
services raise domain errors and never build responses for them.

Mapping:
- Unauthenticated  -> 401
- Forbidden        -> 403
- NotFound         -> 404
- ValidationError  -> 400
- UpstreamFailure  -> 500 (503 when the collaborator is not configured)
"""

from __future__ import annotations

from typing import Optional


class MatchingError(Exception):
    """Base class for all service errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class Unauthenticated(MatchingError):
    """Missing, malformed, or expired credential."""

    status_code = 401


class Forbidden(MatchingError):
    """Valid identity, wrong role."""

    status_code = 403


class NotFound(MatchingError):
    """A referenced entity does not exist."""

    status_code = 404


class ValidationError(MatchingError):
    """
    Malformed input detected close to where it was read.

    Carries the offending field so the API can return a field-level message.
    """

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {"error": self.message, "field": self.field}


class UpstreamFailure(MatchingError):
    """The data store, identity provider, or mail service failed."""

    status_code = 500

    def __init__(self, message: str, service: Optional[str] = None, unavailable: bool = False):
        super().__init__(message)
        self.service = service
        if unavailable:
            self.status_code = 503

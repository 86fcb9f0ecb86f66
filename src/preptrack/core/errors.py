"""Domain error hierarchy.

Every business rule violation raises a subclass of PrepTrackError. The web
layer maps each family to an HTTP status code; the CLI prints the message.
"""

from __future__ import annotations

from typing import Any


class PrepTrackError(Exception):
    """Base error carrying a user-facing message and a stable code."""

    code = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        result: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(PrepTrackError):
    """Input failed a field rule (length, range, format)."""

    code = "validation_error"


class NotFoundError(PrepTrackError):
    """Referenced record does not exist."""

    code = "not_found"


class PermissionDeniedError(PrepTrackError):
    """Caller's role, membership or account status forbids the action."""

    code = "permission_denied"


class ConflictError(PrepTrackError):
    """Action clashes with the current state of a record."""

    code = "conflict"


class AuthenticationError(PrepTrackError):
    """Credentials or session token rejected."""

    code = "authentication_failed"

"""Error taxonomy for membership operations.

Every rejected lifecycle operation surfaces one of four kinds; the HTTP
adapter adds a fifth for requests without an identity. Each error carries a
machine-readable ``kind``, a human-readable message and the HTTP status the
API layer answers with.
"""

from typing import Any, Optional


class MembershipError(Exception):
    """Base error for rejected membership operations."""

    kind = "membership_error"
    status_code = 400

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        payload: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.context:
            payload["context"] = self.context
        return payload


class NotFoundError(MembershipError):
    """Entity id has no record."""

    kind = "not_found"
    status_code = 404


class UnauthorizedError(MembershipError):
    """Actor is neither the owner nor an admin."""

    kind = "unauthorized"
    status_code = 403


class InvalidArgumentError(MembershipError):
    """Missing or empty required field, negative price, unknown patch key."""

    kind = "invalid_argument"
    status_code = 400


class InvalidStateError(MembershipError):
    """Operation precondition on the current status was violated."""

    kind = "invalid_state"
    status_code = 409


class UnauthenticatedError(MembershipError):
    """No caller identity was supplied."""

    kind = "unauthenticated"
    status_code = 401

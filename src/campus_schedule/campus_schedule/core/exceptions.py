from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    def __init__(self, message: str = "", *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_payload(self) -> dict:
        payload = {"success": False, "error": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, errors: Sequence[str] = (), field: Optional[str] = None):
        super().__init__(message, field=field)
        self.errors = list(errors)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = list(self.errors)
        return payload


class ConflictError(DomainError):
    """Raised when a unique field is already taken."""

    status_code = 409


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class UnauthenticatedError(DomainError):
    """Raised when a request carries no usable session or remember token."""

    status_code = 401


class ForbiddenError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class InternalError(DomainError):
    status_code = 500

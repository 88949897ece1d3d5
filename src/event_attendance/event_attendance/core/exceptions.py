from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "", *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when no logged-in user can be resolved."""

    status_code = 401
    default_code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    """Raised when an actor may not perform an action."""

    status_code = 403
    default_code = "FORBIDDEN"


AuthorizationError = ForbiddenError


class NotFoundError(DomainError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness rule."""

    status_code = 409
    default_code = "CONFLICT"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        existing_id: Optional[int] = None,
        can_edit: bool = False,
    ):
        super().__init__(message, code=code)
        self.existing_id = existing_id
        self.can_edit = can_edit

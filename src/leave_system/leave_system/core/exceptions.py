from __future__ import annotations

from typing import Optional

from .enums import LeaveStatus


class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400
    kind = "DomainError"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "ValidationError"


class NotFoundError(DomainError):
    """Raised when a leave request or employee does not exist."""

    http_status = 404
    kind = "NotFound"


class ForbiddenError(DomainError):
    """Raised when the acting employee may not decide for this department or stage."""

    http_status = 403
    kind = "Forbidden"


class InvalidTransitionError(DomainError):
    """Raised when a decision is attempted from a status that does not allow it."""

    http_status = 409
    kind = "InvalidTransition"

    def __init__(self, message: str, *, current_status: Optional[LeaveStatus] = None):
        super().__init__(message)
        self.current_status = current_status


class AlreadyDecidedError(DomainError):
    """Raised when the stage already holds a decision."""

    http_status = 409
    kind = "AlreadyDecided"

"""
Domain Errors

Typed failure conditions raised by the booking and finance use cases.
Every error carries a stable machine-readable ``code`` and the HTTP status
the request layer maps it to. Raising one inside a unit of work rolls the
whole transaction back.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for business-rule failures surfaced verbatim to callers."""

    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    """Malformed or missing input (non-positive amount, bad dates...)."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Entity absent or owned by another tenant."""

    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    status_code = 409
    default_code = "CONFLICT"


class UnitNotAvailable(ConflictError):
    default_code = "UNIT_NOT_AVAILABLE"


class UnitOccupied(ConflictError):
    default_code = "UNIT_ALREADY_OCCUPIED"


class AlreadyCheckedIn(ConflictError):
    default_code = "ALREADY_CHECKED_IN"


class PolicyError(DomainError):
    status_code = 409
    default_code = "POLICY_VIOLATION"


class DepositRequired(PolicyError):
    default_code = "DEPOSIT_REQUIRED"


class StateError(DomainError):
    """Transition not allowed from the booking's current status."""

    status_code = 409
    default_code = "INVALID_BOOKING_STATE"


class IntegrityError(DomainError):
    """Operation would make confirmed money disappear."""

    status_code = 409
    default_code = "INTEGRITY_VIOLATION"

"""Tests for the error envelope rendered by the API."""

from __future__ import annotations

from shared.domain import exceptions
from shared.infrastructure.exception_handler import domain_exception_handler


def test_ledger_guard_renders_as_conflict() -> None:
    exc = exceptions.IntegrityError("Confirmed payments are immutable", code="PAYMENT_IMMUTABLE")

    response = domain_exception_handler(exc, {})

    assert response.status_code == 409
    assert response.data == {
        "error": {"code": "PAYMENT_IMMUTABLE", "message": "Confirmed payments are immutable"},
    }


def test_unexpected_error_is_generalised() -> None:
    response = domain_exception_handler(RuntimeError("boom"), {})

    assert response.status_code == 500
    assert response.data["error"]["code"] == "INTERNAL_ERROR"

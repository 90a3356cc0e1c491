"""Tests for shared value objects and domain errors."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shared.domain import exceptions
from shared.domain.value_objects import StayPeriod, to_decimal


def _dt(day: int, hour: int = 12) -> datetime:
    return datetime(2030, 1, day, hour, tzinfo=timezone.utc)


def test_to_decimal_rounds_half_up_to_cents() -> None:
    assert to_decimal("10.005") == Decimal("10.01")
    assert to_decimal(3) == Decimal("3.00")
    assert to_decimal(None) == Decimal("0.00")


def test_stay_period_requires_check_out_after_check_in() -> None:
    with pytest.raises(ValueError):
        StayPeriod(_dt(4), _dt(4))


def test_back_to_back_periods_do_not_overlap() -> None:
    first = StayPeriod(_dt(1), _dt(4))
    assert not first.overlaps_with(StayPeriod(_dt(4), _dt(6)))
    assert first.overlaps_with(StayPeriod(_dt(2), _dt(3)))
    assert StayPeriod(_dt(3), _dt(5)).overlaps_with(first)


def test_night_starts_step_one_day_from_check_in() -> None:
    starts = list(StayPeriod(_dt(1), _dt(3, 18)).night_starts())
    assert starts == [_dt(1), _dt(2), _dt(3)]


def test_partial_day_counts_as_a_night() -> None:
    assert StayPeriod(_dt(1, 14), _dt(4, 11)).nights == 3
    assert StayPeriod(_dt(1, 14), _dt(1, 18)).nights == 1
    assert StayPeriod(_dt(1), _dt(1) + timedelta(days=3, seconds=1)).nights == 4


def test_domain_error_payload_carries_code_and_details() -> None:
    error = exceptions.DepositRequired("pay first", details={"required_amount": "15000.00"})
    assert error.status_code == 409
    assert isinstance(error, exceptions.PolicyError)
    assert error.to_dict() == {
        "code": "DEPOSIT_REQUIRED",
        "message": "pay first",
        "details": {"required_amount": "15000.00"},
    }
    assert exceptions.NotFoundError("x", code="UNIT_NOT_FOUND").to_dict() == {
        "code": "UNIT_NOT_FOUND",
        "message": "x",
    }

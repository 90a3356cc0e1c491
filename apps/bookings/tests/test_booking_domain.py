"""Tests for the pure booking rules: bill, quotes, deposit gate, transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from apps.bookings.domain import charges, deposit, lifecycle, pricing
from apps.bookings.domain.charges import ChargeLine
from apps.bookings.domain.lifecycle import BookingStatus
from shared.domain import exceptions


def _dt(day: int, hour: int = 12, month: int = 1) -> datetime:
    return datetime(2030, month, day, hour, tzinfo=timezone.utc)


class TestTotalBill:
    def test_open_room_charge_wins_over_base_amount(self) -> None:
        lines = [
            ChargeLine("ROOM", Decimal("20000")),
            ChargeLine("DAMAGE", Decimal("2000")),
        ]
        assert charges.total_bill(Decimal("15000"), lines) == Decimal("22000.00")

    def test_without_room_charge_base_amount_plus_extras(self) -> None:
        lines = [ChargeLine("EXTRA", Decimal("500")), ChargeLine("PENALTY", Decimal("250"))]
        assert charges.total_bill(Decimal("15000"), lines) == Decimal("15750.00")

    def test_void_lines_are_ignored(self) -> None:
        lines = [
            ChargeLine("ROOM", Decimal("20000"), status="VOID"),
            ChargeLine("DAMAGE", Decimal("2000"), status="VOID"),
        ]
        assert charges.total_bill(Decimal("15000"), lines) == Decimal("15000.00")

    def test_discount_reduces_and_bill_never_goes_negative(self) -> None:
        assert charges.total_bill(
            Decimal("1000"),
            [ChargeLine("DISCOUNT", Decimal("250"))],
        ) == Decimal("750.00")
        assert charges.total_bill(
            Decimal("0"),
            [ChargeLine("ROOM", Decimal("100")), ChargeLine("DISCOUNT", Decimal("500"))],
        ) == Decimal("0.00")

    def test_outstanding_is_never_negative(self) -> None:
        assert charges.outstanding(Decimal("100"), Decimal("150")) == Decimal("0.00")
        assert charges.outstanding(Decimal("100"), Decimal("40")) == Decimal("60.00")


class TestQuoteStay:
    def test_three_nights_without_discount(self) -> None:
        assert pricing.quote_stay(Decimal("10000"), None, _dt(1), _dt(4)) == Decimal("30000.00")

    def test_percent_discount_applies_only_inside_window(self) -> None:
        rule = pricing.DiscountRule(kind="PERCENT", value=Decimal("50"), start=_dt(2, 0), end=_dt(2, 23))
        # nights start Jan 1, 2 and 3 at noon; only the second is discounted
        assert pricing.quote_stay(Decimal("10000"), rule, _dt(1), _dt(4)) == Decimal("25000.00")

    def test_percent_is_clamped_to_hundred(self) -> None:
        rule = pricing.DiscountRule(kind="PERCENT", value=Decimal("150"))
        assert pricing.quote_stay(Decimal("10000"), rule, _dt(1), _dt(3)) == Decimal("0.00")

    def test_fixed_price_overrides_rate(self) -> None:
        rule = pricing.DiscountRule(kind="FIXED_PRICE", value=Decimal("7000"), start=_dt(1, 0))
        assert pricing.quote_stay(Decimal("10000"), rule, _dt(1), _dt(3)) == Decimal("14000.00")

    def test_unusable_rates(self) -> None:
        assert not pricing.has_usable_rate(None)
        assert not pricing.has_usable_rate(Decimal("0"))
        assert pricing.has_usable_rate(Decimal("0.01"))


class TestEarlyCheckout:
    def test_unused_nights_are_refundable(self) -> None:
        early, refund = pricing.early_checkout_refund(_dt(1), _dt(5), Decimal("40000"), _dt(2, 10))
        assert early is True
        assert refund == Decimal("30000.00")

    def test_checkout_after_schedule_is_not_early(self) -> None:
        assert pricing.early_checkout_refund(_dt(1), _dt(5), Decimal("40000"), _dt(5, 13)) == (
            False,
            Decimal("0.00"),
        )


class TestDepositGate:
    def test_required_deposit(self) -> None:
        assert deposit.required_deposit(50, Decimal("30000")) == Decimal("15000.00")
        assert deposit.required_deposit(100, Decimal("30000")) == Decimal("30000.00")
        assert deposit.required_deposit(0, Decimal("30000")) == Decimal("0.00")

    def test_below_threshold_raises_policy_error(self) -> None:
        with pytest.raises(exceptions.DepositRequired) as excinfo:
            deposit.ensure_deposit_met(50, Decimal("30000"), Decimal("10000"))
        assert excinfo.value.details["required_amount"] == "15000.00"
        assert excinfo.value.details["paid_amount"] == "10000.00"

    def test_exact_threshold_passes(self) -> None:
        deposit.ensure_deposit_met(50, Decimal("30000"), Decimal("15000"))


class TestLifecycle:
    @pytest.mark.parametrize(
        "current,target",
        [
            (BookingStatus.PENDING, BookingStatus.CONFIRMED),
            (BookingStatus.PENDING, BookingStatus.CANCELLED),
            (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
            (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW),
            (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT),
        ],
    )
    def test_allowed(self, current, target) -> None:
        lifecycle.ensure_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("PENDING", "CHECKED_IN"),
            ("CHECKED_IN", "CANCELLED"),
            ("CHECKED_OUT", "CHECKED_IN"),
            ("CANCELLED", "CONFIRMED"),
            ("NO_SHOW", "CONFIRMED"),
        ],
    )
    def test_rejected(self, current, target) -> None:
        with pytest.raises(exceptions.StateError):
            lifecycle.ensure_transition(current, target)

    def test_active_statuses(self) -> None:
        assert {s.value for s in lifecycle.ACTIVE_STATUSES} == {"PENDING", "CONFIRMED", "CHECKED_IN"}

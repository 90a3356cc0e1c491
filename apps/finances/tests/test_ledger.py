"""Tests for payment status derivation."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.bookings.domain.charges import ChargeLine
from apps.finances import ledger


@pytest.mark.parametrize(
    "paid,outstanding,expected",
    [
        ("0", "30000", "UNPAID"),
        ("0", "0", "UNPAID"),
        ("10000", "20000", "PARTPAID"),
        ("30000", "0", "PAID"),
        ("29999.999", "0.001", "PAID"),
        ("29999.99", "0.01", "PARTPAID"),
        ("40000", "0", "PAID"),
    ],
)
def test_derive_payment_status(paid, outstanding, expected) -> None:
    assert ledger.derive_payment_status(Decimal(paid), Decimal(outstanding)) == expected


def test_snapshot_from_matches_charge_ledger() -> None:
    snapshot = ledger.snapshot_from(
        Decimal("15000"),
        [ChargeLine("ROOM", Decimal("20000")), ChargeLine("DAMAGE", Decimal("2000"))],
        Decimal("22000"),
        "NGN",
    )
    assert snapshot.total_bill == Decimal("22000.00")
    assert snapshot.outstanding == Decimal("0.00")
    assert snapshot.payment_status == "PAID"
    assert snapshot.to_dict()["currency"] == "NGN"

"""Deposit policy gate evaluated at check-in."""

from decimal import Decimal

from shared.domain.exceptions import DepositRequired
from shared.domain.value_objects import to_decimal


def required_deposit(min_deposit_percent: int, bill) -> Decimal:
    percent = min(100, max(0, int(min_deposit_percent)))
    return to_decimal(to_decimal(bill) * percent / Decimal(100))


def ensure_deposit_met(min_deposit_percent: int, bill, paid_total) -> None:
    required = required_deposit(min_deposit_percent, bill)
    paid = to_decimal(paid_total)
    if paid < required:
        raise DepositRequired(
            f"A deposit of {required} is required before check-in; {paid} has been paid",
            details={
                'min_deposit_percent': int(min_deposit_percent),
                'required_amount': str(required),
                'paid_amount': str(paid),
                'total_bill': str(to_decimal(bill)),
            },
        )

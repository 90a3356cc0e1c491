"""
Unit-rate quoting

Turns a unit's nightly base price and optional discount window into the
amount for a stay, night by night.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.value_objects import ZERO, StayPeriod, to_decimal

PERCENT = 'PERCENT'
FIXED_PRICE = 'FIXED_PRICE'
HUNDRED = Decimal('100')


@dataclass(frozen=True)
class DiscountRule(ValueObject):
    """
    Discount applied to nights starting inside ``[start, end]``.

    A missing bound leaves that side of the window open.
    """
    kind: str
    value: Decimal
    start: datetime | None = None
    end: datetime | None = None
    label: str = ''

    def applies_to(self, night_start: datetime) -> bool:
        if self.start is not None and night_start < self.start:
            return False
        if self.end is not None and night_start > self.end:
            return False
        return True

    def price_night(self, rate: Decimal) -> Decimal:
        if self.kind == PERCENT:
            pct = min(HUNDRED, max(ZERO, Decimal(self.value)))
            return rate * (1 - pct / HUNDRED)
        if self.kind == FIXED_PRICE:
            return max(ZERO, Decimal(self.value))
        return rate


def has_usable_rate(base_price) -> bool:
    return base_price is not None and Decimal(base_price) > 0


def discount_for_unit(unit) -> DiscountRule | None:
    if not unit.discount_type or unit.discount_value is None:
        return None
    return DiscountRule(
        kind=unit.discount_type,
        value=unit.discount_value,
        start=unit.discount_start,
        end=unit.discount_end,
        label=unit.discount_label,
    )


def quote_stay(base_price, discount: DiscountRule | None, check_in: datetime, check_out: datetime) -> Decimal:
    """Sum the nightly prices of ``[check_in, check_out)``; partial days count as a night."""
    period = StayPeriod(check_in, check_out)
    rate = Decimal(base_price)
    total = ZERO
    for night_start in period.night_starts():
        if discount is not None and discount.applies_to(night_start):
            total += discount.price_night(rate)
        else:
            total += rate
    return to_decimal(total)


def quote_unit(unit, check_in: datetime, check_out: datetime) -> Decimal | None:
    """Quote a stay for ``unit``; ``None`` when the unit has no usable rate."""
    if not has_usable_rate(unit.base_price):
        return None
    return quote_stay(unit.base_price, discount_for_unit(unit), check_in, check_out)


def early_checkout_refund(check_in: datetime, check_out: datetime, base_amount, at: datetime):
    """
    Return ``(is_early, refund_eligible_amount)`` for a checkout at ``at``.

    Nights already started count as used (at least one); the unused
    nights are refundable at the booking's average nightly amount.
    """
    if at >= check_out:
        return False, ZERO
    booked = StayPeriod(check_in, check_out).nights
    used = 1
    if at > check_in:
        used = min(booked, StayPeriod(check_in, at).nights)
    unused = max(0, booked - used)
    return True, to_decimal(Decimal(unused) * to_decimal(base_amount) / Decimal(booked))

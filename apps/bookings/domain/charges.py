"""
Charge ledger

Pure bill arithmetic over a booking's charge lines. Works on anything
exposing ``type``, ``amount`` and ``status`` (model rows or ``ChargeLine``).
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

from shared.domain.value_objects import ZERO, to_decimal


class ChargeType(str, Enum):
    ROOM = 'ROOM'
    DAMAGE = 'DAMAGE'
    EXTRA = 'EXTRA'
    PENALTY = 'PENALTY'
    DISCOUNT = 'DISCOUNT'


class ChargeStatus(str, Enum):
    OPEN = 'OPEN'
    VOID = 'VOID'


@dataclass(frozen=True)
class ChargeLine:
    type: str
    amount: Decimal
    status: str = ChargeStatus.OPEN


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def open_lines(charges: Iterable) -> list:
    return [c for c in charges if _value(c.status) == ChargeStatus.OPEN.value]


def signed_amount(charge) -> Decimal:
    """Discount lines reduce the bill; every other type adds to it."""
    amount = to_decimal(charge.amount)
    if _value(charge.type) == ChargeType.DISCOUNT.value:
        return -amount
    return amount


def total_bill(base_amount, charges: Iterable) -> Decimal:
    """
    Authoritative bill for a booking.

    An OPEN ROOM charge supersedes ``base_amount``: the bill is then the
    sum of every open line. Without one, the bill is the base amount plus
    the open non-room lines. Never negative.
    """
    lines = open_lines(charges)
    has_room_charge = any(_value(c.type) == ChargeType.ROOM.value for c in lines)

    if has_room_charge:
        bill = sum((signed_amount(c) for c in lines), ZERO)
    else:
        bill = max(ZERO, to_decimal(base_amount)) + sum(
            (signed_amount(c) for c in lines if _value(c.type) != ChargeType.ROOM.value),
            ZERO,
        )
    return max(ZERO, to_decimal(bill))


def outstanding(bill, paid_total) -> Decimal:
    return max(ZERO, to_decimal(bill) - to_decimal(paid_total))

"""
Common Value Objects

Money is carried as ``Decimal`` quantised to cents with ROUND_HALF_UP;
``to_decimal`` is the single place that rounding happens.
``StayPeriod`` is the half-open [check_in, check_out) interval of a stay.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from shared.domain.base import ValueObject

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
ONE_NIGHT = timedelta(days=1)


def to_decimal(value) -> Decimal:
    """Coerce int/str/Decimal/None into a cent-quantised Decimal."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StayPeriod(ValueObject):
    """
    [check_in, check_out): back-to-back stays sharing a boundary instant
    do not overlap.
    """
    check_in: datetime
    check_out: datetime

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise ValueError(f"check_out ({self.check_out}) must be after check_in ({self.check_in})")

    def overlaps_with(self, other: "StayPeriod") -> bool:
        return self.check_in < other.check_out and self.check_out > other.check_in

    @property
    def nights(self) -> int:
        """Billable nights: partial days round up, never fewer than one."""
        seconds = (self.check_out - self.check_in).total_seconds()
        return max(1, math.ceil(seconds / ONE_NIGHT.total_seconds()))

    def night_starts(self) -> Iterator[datetime]:
        """Yield the instant each billable night begins."""
        for index in range(self.nights):
            yield self.check_in + index * ONE_NIGHT

    def __str__(self):
        return f"{self.check_in.isoformat()} - {self.check_out.isoformat()}"

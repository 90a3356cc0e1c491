"""
Booking lifecycle

The single transition table every booking use case consults before it
changes a booking's status.
"""

from enum import Enum

from shared.domain.exceptions import StateError


class BookingStatus(str, Enum):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CHECKED_IN = 'CHECKED_IN'
    CHECKED_OUT = 'CHECKED_OUT'
    CANCELLED = 'CANCELLED'
    NO_SHOW = 'NO_SHOW'


# Statuses that reserve or occupy a unit
ACTIVE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CHECKED_IN,
})

# Statuses in which dates, unit, guest and amount may still change
EDITABLE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
})

TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CHECKED_IN,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


def _coerce(status) -> BookingStatus:
    return status if isinstance(status, BookingStatus) else BookingStatus(str(status))


def can_transition(current, target) -> bool:
    return _coerce(target) in TRANSITIONS[_coerce(current)]


def ensure_transition(current, target) -> None:
    """Raise ``StateError`` unless ``current -> target`` is in the table."""
    if not can_transition(current, target):
        raise StateError(
            f"Cannot move booking from {_coerce(current).value} to {_coerce(target).value}",
            details={'current': _coerce(current).value, 'target': _coerce(target).value},
        )


def is_active(status) -> bool:
    return _coerce(status) in ACTIVE_STATUSES


def is_editable(status) -> bool:
    return _coerce(status) in EDITABLE_STATUSES

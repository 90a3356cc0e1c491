"""Interval allocation guards for booking writes."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from django.db.models import Q  # type: ignore

from shared.domain import exceptions

from .domain.lifecycle import ACTIVE_STATUSES, BookingStatus
from .models import Booking


def _active_on_unit(tenant_id: UUID, unit_id: UUID, exclude_booking_id=None):
    queryset = Booking.objects.filter(
        tenant_id=tenant_id,
        unit_id=unit_id,
        status__in=[status.value for status in ACTIVE_STATUSES],
    )
    if exclude_booking_id is not None:
        queryset = queryset.exclude(pk=exclude_booking_id)
    return queryset


def has_conflict(
    tenant_id: UUID,
    unit_id: UUID,
    check_in: datetime,
    check_out: datetime,
    *,
    exclude_booking_id=None,
) -> bool:
    """True when an active booking on the unit overlaps ``[check_in, check_out)``.

    Callers lock the unit row first (``find_unit(..., lock=True)``) so two
    writers for the same unit cannot both pass this check.
    """
    overlapping = Q(check_in__lt=check_out) & Q(check_out__gt=check_in)
    return _active_on_unit(tenant_id, unit_id, exclude_booking_id).filter(overlapping).exists()


def ensure_unit_is_available(
    tenant_id: UUID,
    unit_id: UUID,
    check_in: datetime,
    check_out: datetime,
    *,
    exclude_booking_id=None,
) -> None:
    if has_conflict(tenant_id, unit_id, check_in, check_out, exclude_booking_id=exclude_booking_id):
        raise exceptions.UnitNotAvailable(
            "Unit is not available for the selected dates",
            details={"unit_id": str(unit_id)},
        )


def ensure_unit_not_occupied(tenant_id: UUID, unit_id: UUID, *, exclude_booking_id=None) -> None:
    occupied = (
        _active_on_unit(tenant_id, unit_id, exclude_booking_id)
        .filter(status=BookingStatus.CHECKED_IN.value)
        .exists()
    )
    if occupied:
        raise exceptions.UnitOccupied(
            "Another guest is currently checked in to this unit",
            details={"unit_id": str(unit_id)},
        )

"""Tenant-scoped read models over bookings.

Every row returned here carries a ``ledger`` attribute computed with the
same reconciliation the write path uses, so list screens and the stored
``payment_status`` can never disagree about a balance.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable
from uuid import UUID

from django.db.models import Prefetch, QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from apps.finances import ledger
from apps.finances.models import Payment
from shared.domain import exceptions
from shared.domain.value_objects import ZERO

from .domain.charges import ChargeStatus
from .domain.lifecycle import ACTIVE_STATUSES
from .filters import BookingFilterSet
from .models import Booking, BookingCharge


def base_queryset(tenant_id: UUID) -> QuerySet:
    return (
        Booking.objects.filter(tenant_id=tenant_id)
        .select_related("unit", "unit__property")
        .prefetch_related(
            Prefetch(
                "charges",
                queryset=BookingCharge.objects.filter(status=ChargeStatus.OPEN.value),
                to_attr="open_charges",
            ),
            Prefetch(
                "payments",
                queryset=Payment.objects.filter(status=Payment.Status.CONFIRMED),
                to_attr="confirmed_payments",
            ),
        )
    )


def attach_ledger(bookings: Iterable[Booking]) -> list[Booking]:
    """Set ``booking.ledger`` on rows loaded through ``base_queryset``."""
    rows = list(bookings)
    for booking in rows:
        paid = sum((p.amount for p in booking.confirmed_payments), ZERO)
        booking.ledger = ledger.snapshot_from(
            booking.total_amount,
            booking.open_charges,
            paid,
            booking.currency,
        )
    return rows


def filter_bookings(tenant_id: UUID, params) -> QuerySet:
    """Apply list query parameters; unknown choices are a 400, not an empty page."""
    filterset = BookingFilterSet(params, queryset=base_queryset(tenant_id))
    if not filterset.is_valid():
        raise exceptions.ValidationError("Invalid filters", details=filterset.errors.get_json_data())
    return filterset.qs.order_by("-check_in")


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1)


def arrivals_today(tenant_id: UUID, *, today: date | None = None) -> list[Booking]:
    start, end = _day_bounds(today or timezone.localdate())
    queryset = base_queryset(tenant_id).filter(
        status=Booking.Status.CONFIRMED,
        check_in__gte=start,
        check_in__lt=end,
    )
    return attach_ledger(queryset.order_by("check_in"))


def in_house(tenant_id: UUID, *, q: str = "") -> list[Booking]:
    queryset = BookingFilterSet({"q": q}, queryset=base_queryset(tenant_id)).qs
    return attach_ledger(queryset.filter(status=Booking.Status.CHECKED_IN).order_by("-checked_in_at"))


def outstanding_balances(tenant_id: UUID) -> list[Booking]:
    """Non-terminal bookings that still owe money, newest first."""
    queryset = base_queryset(tenant_id).filter(
        status__in=[s.value for s in ACTIVE_STATUSES],
    ).order_by("-created_at")
    return [b for b in attach_ledger(queryset) if b.ledger.outstanding >= ledger.EPSILON]

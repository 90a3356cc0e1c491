"""Celery tasks that deliver booking notifications."""

from __future__ import annotations

import logging
from decimal import Decimal

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from . import services

logger = logging.getLogger(__name__)


def _load(tenant_id: str, booking_id: str) -> Booking | None:
    booking = (
        Booking.objects.select_related("tenant", "unit")
        .filter(tenant_id=tenant_id, pk=booking_id)
        .first()
    )
    if booking is None:
        logger.warning(f"Booking {booking_id} of tenant {tenant_id} vanished before notification")
    return booking


@shared_task(name="notifications.booking_created")
def send_booking_created(tenant_id: str, booking_id: str) -> int:
    booking = _load(tenant_id, booking_id)
    return services.notify_booking_created(booking) if booking else 0


@shared_task(name="notifications.payment_acknowledged")
def send_payment_acknowledged(tenant_id: str, booking_id: str, amount: str, currency: str, outstanding: str) -> int:
    booking = _load(tenant_id, booking_id)
    if booking is None:
        return 0
    return services.notify_payment_acknowledged(booking, Decimal(amount), currency, Decimal(outstanding))


@shared_task(name="notifications.checked_in")
def send_checked_in(tenant_id: str, booking_id: str) -> int:
    booking = _load(tenant_id, booking_id)
    return services.notify_checked_in(booking) if booking else 0


@shared_task(name="notifications.checked_out")
def send_checked_out(tenant_id: str, booking_id: str, outstanding: str) -> int:
    booking = _load(tenant_id, booking_id)
    return services.notify_checked_out(booking, Decimal(outstanding)) if booking else 0

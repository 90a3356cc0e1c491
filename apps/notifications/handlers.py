"""
Event handlers

Subscribe notification tasks to booking events on the message bus. They
run after commit; enqueueing is all they do.
"""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    BookingCheckedIn,
    BookingCheckedOut,
    BookingCreated,
    PaymentAcknowledged,
)
from shared.application.message_bus import message_bus

from . import tasks

logger = logging.getLogger(__name__)


def on_booking_created(event: BookingCreated) -> None:
    tasks.send_booking_created.delay(str(event.tenant_id), str(event.booking_id))


def on_payment_acknowledged(event: PaymentAcknowledged) -> None:
    tasks.send_payment_acknowledged.delay(
        str(event.tenant_id),
        str(event.booking_id),
        str(event.amount),
        event.currency,
        str(event.outstanding),
    )


def on_booking_checked_in(event: BookingCheckedIn) -> None:
    tasks.send_checked_in.delay(str(event.tenant_id), str(event.booking_id))


def on_booking_checked_out(event: BookingCheckedOut) -> None:
    tasks.send_checked_out.delay(str(event.tenant_id), str(event.booking_id), str(event.outstanding))


def register_handlers() -> None:
    message_bus.register_event_handler(BookingCreated, on_booking_created)
    message_bus.register_event_handler(PaymentAcknowledged, on_payment_acknowledged)
    message_bus.register_event_handler(BookingCheckedIn, on_booking_checked_in)
    message_bus.register_event_handler(BookingCheckedOut, on_booking_checked_out)
    logger.debug("Notification handlers registered")

"""Tests for domain event payloads and the message bus."""

from __future__ import annotations

import uuid
from decimal import Decimal

from apps.bookings.domain.events import BookingCancelled, PaymentAcknowledged
from shared.application.message_bus import MessageBus


def _payment_event() -> PaymentAcknowledged:
    return PaymentAcknowledged(
        tenant_id=uuid.uuid4(),
        booking_id=uuid.uuid4(),
        payment_id=uuid.uuid4(),
        amount=Decimal("10000.00"),
        currency="NGN",
        guest_name="Ada Obi",
        guest_email="ada@example.com",
        outstanding=Decimal("20000.00"),
    )


def test_payload_is_json_ready() -> None:
    event = _payment_event()

    payload = event.to_dict()

    assert payload["event_type"] == "PaymentAcknowledged"
    assert payload["booking_id"] == str(event.booking_id)
    assert payload["outstanding"] == "20000.00"
    assert payload["occurred_at"] == event.occurred_at.isoformat()


def test_bus_fans_out_and_survives_failing_subscriber() -> None:
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(PaymentAcknowledged, broken)
    bus.register_event_handler(PaymentAcknowledged, seen.append)
    bus.register_event_handler(PaymentAcknowledged, seen.append)

    event = _payment_event()
    bus.publish_events([event, BookingCancelled(tenant_id=event.tenant_id, booking_id=event.booking_id, reason="")])

    assert seen == [event]

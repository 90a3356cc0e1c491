"""Notification delivery driven by committed booking events."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from apps.bookings.application import command_handlers as commands
from apps.bookings.domain.events import BookingCreated
from apps.bookings.models import Booking
from apps.finances.application.command_handlers import RecordPaymentCommand, RecordPaymentHandler
from apps.notifications import handlers, services
from shared.application.message_bus import message_bus

pytestmark = pytest.mark.django_db


def _create(tenant, unit, guest) -> Booking:
    return commands.CreateBookingHandler().handle(
        commands.CreateBookingCommand(
            tenant_id=tenant.id,
            unit_id=unit.id,
            guest_id=guest.id,
            check_in=datetime(2030, 1, 1, 12, tzinfo=timezone.utc),
            check_out=datetime(2030, 1, 4, 12, tzinfo=timezone.utc),
        )
    )


def test_handlers_are_registered_once() -> None:
    handlers.register_handlers()
    handlers.register_handlers()

    assert message_bus.handlers_for(BookingCreated).count(handlers.on_booking_created) == 1


def test_booking_created_emails_guest_and_desk(tenant, unit, guest, mailoutbox, django_capture_on_commit_callbacks) -> None:
    with django_capture_on_commit_callbacks(execute=True):
        _create(tenant, unit, guest)

    recipients = sorted(mail.to[0] for mail in mailoutbox)
    assert recipients == ["ada@example.com", "desk@harbour.test"]
    guest_mail = next(mail for mail in mailoutbox if mail.to == ["ada@example.com"])
    assert guest_mail.subject == "Booking received - A-101"
    assert "NGN 30,000.00" in guest_mail.body


def test_no_email_before_commit(tenant, unit, guest, mailoutbox, django_capture_on_commit_callbacks) -> None:
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        _create(tenant, unit, guest)

    assert len(callbacks) == 1
    assert mailoutbox == []


def test_first_payment_acknowledges_to_guest(tenant, unit, guest, mailoutbox, django_capture_on_commit_callbacks) -> None:
    booking = _create(tenant, unit, guest)

    with django_capture_on_commit_callbacks(execute=True):
        RecordPaymentHandler().handle(
            RecordPaymentCommand(tenant_id=tenant.id, booking_id=booking.id, amount=Decimal("10000"))
        )
    with django_capture_on_commit_callbacks(execute=True):
        RecordPaymentHandler().handle(
            RecordPaymentCommand(tenant_id=tenant.id, booking_id=booking.id, amount=Decimal("1000"))
        )

    assert [mail.subject for mail in mailoutbox] == ["Payment received - booking confirmed"]
    assert "Outstanding balance: NGN 20,000.00" in mailoutbox[0].body


def test_check_in_and_out_alert_the_desk(tenant, unit, guest, mailoutbox, django_capture_on_commit_callbacks) -> None:
    booking = _create(tenant, unit, guest)
    RecordPaymentHandler().handle(
        RecordPaymentCommand(tenant_id=tenant.id, booking_id=booking.id, amount=Decimal("30000"))
    )

    with django_capture_on_commit_callbacks(execute=True):
        commands.CheckInHandler().handle(commands.CheckInCommand(tenant_id=tenant.id, booking_id=booking.id))
    with django_capture_on_commit_callbacks(execute=True):
        commands.CheckOutHandler().handle(commands.CheckOutCommand(tenant_id=tenant.id, booking_id=booking.id))

    assert [mail.subject for mail in mailoutbox] == ["Check-in - A-101", "Check-out - A-101"]
    assert all(mail.to == ["desk@harbour.test"] for mail in mailoutbox)
    assert "Early checkout; refund eligible: NGN 20,000.00" in mailoutbox[1].body


def test_failing_handler_does_not_undo_the_booking(
    tenant, unit, guest, mailoutbox, monkeypatch, django_capture_on_commit_callbacks
) -> None:
    def explode(event):
        raise RuntimeError("notification backend down")

    monkeypatch.setitem(message_bus._event_handlers, BookingCreated, [explode, handlers.on_booking_created])

    with django_capture_on_commit_callbacks(execute=True):
        booking = _create(tenant, unit, guest)

    assert Booking.objects.filter(pk=booking.pk).exists()
    assert len(mailoutbox) == 2


def test_send_email_reports_failures(monkeypatch, mailoutbox) -> None:
    assert services.send_email_notification("", "Subject", "Body") is False

    def refuse(**kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(services, "send_mail", refuse)
    assert services.send_email_notification("ada@example.com", "Subject", "Body") is False
    assert mailoutbox == []

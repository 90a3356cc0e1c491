"""Notification services: transactional emails for guests and front desks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send one plain-text email.

    Returns False instead of raising so one bad address never blocks the
    other recipients of the same event.
    """
    if not recipient_email:
        return False
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _stay(booking: "Booking") -> str:
    check_in = timezone.localtime(booking.check_in)
    check_out = timezone.localtime(booking.check_out)
    return f"{check_in:%d %b %Y %H:%M} - {check_out:%d %b %Y %H:%M}"


def _admin_email(booking: "Booking") -> str:
    return booking.tenant.email or ""


def notify_booking_created(booking: "Booking") -> int:
    """Acknowledge a new booking to the guest and alert the tenant. Returns emails sent."""
    unit = booking.unit.name
    guest_message = (
        f"Hello {booking.guest_name or 'there'},\n\n"
        f"We have received your booking for {unit}.\n"
        f"Stay: {_stay(booking)}\n"
        f"Amount: {booking.currency} {booking.total_amount:,.2f}\n\n"
        f"Your booking will be confirmed once a payment is received.\n\n"
        f"{booking.tenant.name}"
    )
    admin_message = (
        f"New booking {booking.pk}\n"
        f"Guest: {booking.guest_name} ({booking.guest_email or 'no email'})\n"
        f"Unit: {unit}\n"
        f"Stay: {_stay(booking)}\n"
        f"Amount: {booking.currency} {booking.total_amount:,.2f}"
    )
    sent = send_email_notification(booking.guest_email, f"Booking received - {unit}", guest_message)
    sent += send_email_notification(_admin_email(booking), f"New booking - {unit}", admin_message)
    return int(sent)


def notify_payment_acknowledged(booking: "Booking", amount, currency: str, outstanding) -> int:
    message = (
        f"Hello {booking.guest_name or 'there'},\n\n"
        f"We have received your payment of {currency} {amount:,.2f} "
        f"and your booking for {booking.unit.name} is confirmed.\n"
        f"Stay: {_stay(booking)}\n"
        f"Outstanding balance: {currency} {outstanding:,.2f}\n\n"
        f"{booking.tenant.name}"
    )
    return int(send_email_notification(booking.guest_email, "Payment received - booking confirmed", message))


def notify_checked_in(booking: "Booking") -> int:
    message = (
        f"Guest {booking.guest_name} checked in to {booking.unit.name} "
        f"at {timezone.localtime(booking.checked_in_at):%d %b %Y %H:%M}."
    )
    return int(send_email_notification(_admin_email(booking), f"Check-in - {booking.unit.name}", message))


def notify_checked_out(booking: "Booking", outstanding) -> int:
    message = (
        f"Guest {booking.guest_name} checked out of {booking.unit.name} "
        f"at {timezone.localtime(booking.checked_out_at):%d %b %Y %H:%M}.\n"
        f"Outstanding balance: {booking.currency} {outstanding:,.2f}"
    )
    if booking.early_checkout:
        message += "\nEarly checkout"
        if booking.refund_eligible_amount:
            message += f"; refund eligible: {booking.currency} {booking.refund_eligible_amount:,.2f}"
    return int(send_email_notification(_admin_email(booking), f"Check-out - {booking.unit.name}", message))

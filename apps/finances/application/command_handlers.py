"""
Payment Command Handlers

Use cases that move money onto a booking's ledger. Every handler
re-derives the booking's payment status inside the same transaction, and
the first confirmed payment on a PENDING booking confirms the booking.

Commands:
- RecordPaymentCommand: Enter a payment already received (CONFIRMED)
- CreatePendingPaymentCommand: Register a payment awaiting confirmation
- ConfirmPaymentCommand: Confirm a pending payment (idempotent)
- FailPaymentCommand: Mark a pending payment as failed
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID
import logging

import structlog
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain import exceptions
from shared.domain.value_objects import ZERO, to_decimal
from apps.bookings import repositories as bookings
from apps.bookings.domain import lifecycle
from apps.bookings.domain.events import PaymentAcknowledged
from apps.bookings.domain.lifecycle import BookingStatus
from apps.bookings.models import Booking
from apps.finances import ledger
from apps.finances.ledger import LedgerSnapshot
from apps.finances.models import Payment

logger = logging.getLogger(__name__)
audit = structlog.get_logger("audit")


@dataclass
class PaymentOutcome:
    payment: Payment
    booking: Booking
    snapshot: LedgerSnapshot


# ===== Commands =====

@dataclass
class RecordPaymentCommand:
    """Command to record money already received at the desk"""
    tenant_id: UUID
    booking_id: UUID
    amount: Decimal
    currency: Optional[str] = None
    method: str = Payment.Method.MANUAL
    reference: str = ''
    notes: str = ''
    paid_at: Optional[datetime] = None
    actor_id: str = ''


@dataclass
class CreatePendingPaymentCommand:
    """Command to register a payment that still needs confirmation"""
    tenant_id: UUID
    booking_id: UUID
    amount: Decimal
    currency: Optional[str] = None
    method: str = Payment.Method.TRANSFER
    reference: str = ''
    notes: str = ''
    actor_id: str = ''


@dataclass
class ConfirmPaymentCommand:
    tenant_id: UUID
    payment_id: UUID
    actor_id: str = ''


@dataclass
class FailPaymentCommand:
    tenant_id: UUID
    payment_id: UUID
    reason: str = ''
    actor_id: str = ''


# ===== Helpers =====

def _amount(value) -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise exceptions.ValidationError('amount must be a decimal string like "45000.00"')
    if amount <= ZERO:
        raise exceptions.ValidationError('amount must be greater than 0', details={'amount': str(value)})
    return amount


def _method(value: str) -> str:
    method = str(value or Payment.Method.MANUAL).upper()
    if method not in Payment.Method.values:
        raise exceptions.ValidationError(
            f'Unknown payment method {value!r}',
            details={'allowed': list(Payment.Method.values)},
        )
    return method


def _ensure_payable(tenant_id: UUID, booking: Booking, currency: Optional[str]) -> tuple[str, LedgerSnapshot]:
    if booking.status == Booking.Status.CANCELLED:
        raise exceptions.StateError(
            'Payments cannot be taken on a cancelled booking',
            details={'current': booking.status},
        )
    payment_currency = (currency or booking.currency).strip().upper()
    if payment_currency != booking.currency:
        raise exceptions.ValidationError(
            f'Payment currency {payment_currency} does not match booking currency {booking.currency}',
            code='CURRENCY_MISMATCH',
        )
    snapshot = ledger.reconcile(tenant_id, booking)
    if snapshot.total_bill <= ZERO:
        raise exceptions.ValidationError(
            'Booking has no bill to pay (no charges or total amount)',
            code='BOOKING_TOTAL_MISSING',
        )
    return payment_currency, snapshot


def _settle(uow: DjangoUnitOfWork, tenant_id: UUID, booking: Booking, payment: Payment) -> LedgerSnapshot:
    """Re-derive payment status and confirm a PENDING booking on its first payment."""
    snapshot = ledger.sync_payment_status(tenant_id, booking)
    if (
        booking.status == Booking.Status.PENDING
        and snapshot.paid_total > ZERO
        and lifecycle.can_transition(booking.status, BookingStatus.CONFIRMED)
    ):
        booking.status = Booking.Status.CONFIRMED
        booking.save(update_fields=['status', 'updated_at'])
        logger.info(f'Booking {booking.pk} confirmed by payment {payment.pk}')
        uow.record(PaymentAcknowledged(
            tenant_id=tenant_id,
            booking_id=booking.pk,
            payment_id=payment.pk,
            amount=payment.amount,
            currency=payment.currency,
            guest_name=booking.guest_name,
            guest_email=booking.guest_email,
            outstanding=snapshot.outstanding,
        ))
    return snapshot


def _locked_payment(tenant_id: UUID, payment_id: UUID) -> tuple[Payment, Booking]:
    # Booking first, then payment: the same order RecordPayment locks in
    booking_id = (
        Payment.objects.filter(tenant_id=tenant_id, pk=payment_id)
        .values_list('booking_id', flat=True)
        .first()
    )
    if booking_id is None:
        raise exceptions.NotFoundError('Payment not found', code='PAYMENT_NOT_FOUND')
    booking = bookings.get_booking(tenant_id, booking_id, lock=True)
    payment = Payment.objects.select_for_update().get(tenant_id=tenant_id, pk=payment_id)
    return payment, booking


# ===== Command Handlers =====

class RecordPaymentHandler:
    """Handler for a manual payment that is confirmed on entry"""

    def handle(self, command: RecordPaymentCommand) -> PaymentOutcome:
        tenant_id = command.tenant_id
        amount = _amount(command.amount)
        method = _method(command.method)

        with DjangoUnitOfWork() as uow:
            booking = bookings.get_booking(tenant_id, command.booking_id, lock=True)
            currency, _ = _ensure_payable(tenant_id, booking, command.currency)

            now = timezone.now()
            payment = Payment.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                amount=amount,
                currency=currency,
                status=Payment.Status.CONFIRMED,
                method=method,
                reference=command.reference,
                notes=command.notes,
                paid_at=command.paid_at or now,
                confirmed_at=now,
                confirmed_by=command.actor_id,
                created_by=command.actor_id,
            )
            snapshot = _settle(uow, tenant_id, booking, payment)

        audit.info(
            'audit.booking_payment_recorded',
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            payment_id=str(payment.pk),
            amount=str(amount),
            currency=currency,
            actor_id=command.actor_id,
            payment_status=str(snapshot.payment_status),
            outstanding=str(snapshot.outstanding),
        )
        return PaymentOutcome(payment=payment, booking=booking, snapshot=snapshot)


class CreatePendingPaymentHandler:

    def handle(self, command: CreatePendingPaymentCommand) -> PaymentOutcome:
        tenant_id = command.tenant_id
        amount = _amount(command.amount)
        method = _method(command.method)

        with DjangoUnitOfWork():
            booking = bookings.get_booking(tenant_id, command.booking_id, lock=True)
            currency, snapshot = _ensure_payable(tenant_id, booking, command.currency)
            payment = Payment.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                amount=amount,
                currency=currency,
                status=Payment.Status.PENDING,
                method=method,
                reference=command.reference,
                notes=command.notes,
                created_by=command.actor_id,
            )

        audit.info(
            'audit.payment_pending_created',
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            payment_id=str(payment.pk),
            amount=str(amount),
            actor_id=command.actor_id,
        )
        return PaymentOutcome(payment=payment, booking=booking, snapshot=snapshot)


class ConfirmPaymentHandler:
    """
    Handler for confirming a pending payment

    Confirming an already confirmed payment changes nothing and returns
    the current ledger snapshot.
    """

    def handle(self, command: ConfirmPaymentCommand) -> PaymentOutcome:
        tenant_id = command.tenant_id

        with DjangoUnitOfWork() as uow:
            payment, booking = _locked_payment(tenant_id, command.payment_id)

            if payment.status == Payment.Status.CONFIRMED:
                logger.info(f'Payment {payment.pk} already confirmed; nothing to do')
                return PaymentOutcome(payment=payment, booking=booking, snapshot=ledger.reconcile(tenant_id, booking))

            if payment.status == Payment.Status.FAILED:
                raise exceptions.StateError(
                    'A failed payment cannot be confirmed',
                    code='PAYMENT_NOT_PENDING',
                    details={'current': payment.status},
                )
            if booking.status == Booking.Status.CANCELLED:
                raise exceptions.StateError(
                    'Payments cannot be confirmed on a cancelled booking',
                    details={'current': booking.status},
                )

            now = timezone.now()
            payment.status = Payment.Status.CONFIRMED
            payment.confirmed_at = now
            payment.confirmed_by = command.actor_id
            payment.paid_at = payment.paid_at or now
            payment.save()
            snapshot = _settle(uow, tenant_id, booking, payment)

        audit.info(
            'audit.payment_confirmed',
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            payment_id=str(payment.pk),
            amount=str(payment.amount),
            actor_id=command.actor_id,
            payment_status=str(snapshot.payment_status),
        )
        return PaymentOutcome(payment=payment, booking=booking, snapshot=snapshot)


class FailPaymentHandler:

    def handle(self, command: FailPaymentCommand) -> PaymentOutcome:
        tenant_id = command.tenant_id

        with DjangoUnitOfWork():
            payment, booking = _locked_payment(tenant_id, command.payment_id)
            if payment.status == Payment.Status.CONFIRMED:
                raise exceptions.StateError(
                    'A confirmed payment cannot be marked as failed',
                    code='PAYMENT_NOT_PENDING',
                    details={'current': payment.status},
                )
            if payment.status == Payment.Status.PENDING:
                payment.status = Payment.Status.FAILED
                if command.reason:
                    payment.notes = '\n'.join(filter(None, [payment.notes, f'Failed: {command.reason}']))
                payment.save()
            snapshot = ledger.sync_payment_status(tenant_id, booking)

        audit.info(
            'audit.payment_failed',
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            payment_id=str(payment.pk),
            reason=command.reason,
            actor_id=command.actor_id,
        )
        return PaymentOutcome(payment=payment, booking=booking, snapshot=snapshot)

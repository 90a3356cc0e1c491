"""
Booking Command Handlers

These are the use cases for the booking lifecycle.
Each handler opens a unit of work, re-reads the rows it guards with
``SELECT ... FOR UPDATE``, applies one transition and re-derives the
booking's payment status before the transaction commits.

Commands:
- CreateBookingCommand: Reserve a unit for a guest
- EditBookingCommand: Change unit, guest, dates or amount
- CheckInCommand: Admit a confirmed guest (deposit gate applies)
- CheckOutCommand: Release the unit, optionally charging damages
- CancelBookingCommand / MarkNoShowCommand / DeleteBookingCommand
- AddChargeCommand / AddOverstayChargeCommand / VoidChargeCommand
"""

from dataclasses import dataclass, field
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
from apps.bookings import repositories
from apps.bookings.domain import lifecycle, pricing
from apps.bookings.domain.charges import ChargeStatus, ChargeType
from apps.bookings.domain.deposit import ensure_deposit_met
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCheckedIn,
    BookingCheckedOut,
    BookingCreated,
)
from apps.bookings.domain.lifecycle import BookingStatus
from apps.bookings.models import Booking, BookingCharge, CheckEvent
from apps.bookings.services import ensure_unit_is_available, ensure_unit_not_occupied
from apps.finances import ledger
from apps.finances.models import Payment
from apps.guests import repositories as guests
from apps.properties.repositories import find_unit
from apps.tenants import repositories as tenants

logger = logging.getLogger(__name__)
audit = structlog.get_logger("audit")

DAMAGE_CHARGE_TITLE = "Checkout damage charge"


def _positive_amount(value, name: str = "amount") -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise exceptions.ValidationError(f"{name} must be a decimal string like \"45000.00\"")
    if amount <= ZERO:
        raise exceptions.ValidationError(f"{name} must be greater than 0", details={name: str(value)})
    return amount


def _currency(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    code = str(value).strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise exceptions.ValidationError("currency must be a 3-letter code", details={"currency": value})
    return code


def _ensure_dates(check_in: datetime, check_out: datetime) -> None:
    if check_out <= check_in:
        raise exceptions.ValidationError(
            "check_out must be after check_in",
            details={"check_in": check_in.isoformat(), "check_out": check_out.isoformat()},
        )


def _has_confirmed_payments(tenant_id: UUID, booking: Booking) -> bool:
    return Payment.objects.filter(
        tenant_id=tenant_id,
        booking=booking,
        status=Payment.Status.CONFIRMED,
    ).exists()


def _ensure_no_confirmed_payments(tenant_id: UUID, booking: Booking) -> None:
    if _has_confirmed_payments(tenant_id, booking):
        raise exceptions.IntegrityError(
            "Booking has confirmed payments",
            code="BOOKING_HAS_CONFIRMED_PAYMENTS",
        )


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    ``total_amount`` overrides the unit quote when given; it must be positive.
    """
    tenant_id: UUID
    unit_id: UUID
    guest_id: UUID
    check_in: datetime
    check_out: datetime
    total_amount: Optional[Decimal] = None
    currency: Optional[str] = None
    actor_id: str = ''


@dataclass
class EditBookingCommand:
    """Command to edit a PENDING or CONFIRMED booking. ``None`` leaves a field as is."""
    tenant_id: UUID
    booking_id: UUID
    unit_id: Optional[UUID] = None
    guest_id: Optional[UUID] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    total_amount: Optional[Decimal] = None
    currency: Optional[str] = None
    actor_id: str = ''


@dataclass
class CheckInCommand:
    """
    Command to check a guest in

    ``guest_details`` holds snapshot overrides keyed by booking field name
    (``guest_name``, ``id_number``...). They are copied to the guest's
    profile only when ``update_guest_profile`` is set.
    """
    tenant_id: UUID
    booking_id: UUID
    actor_id: str = ''
    notes: str = ''
    guest_details: dict = field(default_factory=dict)
    update_guest_profile: bool = False
    photo_url: str = ''
    id_doc_url: str = ''
    verification_mode: str = CheckEvent.VerificationMode.MANUAL_REVIEW


@dataclass
class CheckOutCommand:
    tenant_id: UUID
    booking_id: UUID
    actor_id: str = ''
    notes: str = ''
    damages_cost: Optional[Decimal] = None
    damages_notes: str = ''
    photo_url: str = ''
    refund_policy: str = ''
    refund_approved: bool = False
    refund_amount: Optional[Decimal] = None
    refund_reason: str = ''


@dataclass
class CancelBookingCommand:
    tenant_id: UUID
    booking_id: UUID
    reason: str = ''
    actor_id: str = ''


@dataclass
class MarkNoShowCommand:
    tenant_id: UUID
    booking_id: UUID
    actor_id: str = ''


@dataclass
class DeleteBookingCommand:
    tenant_id: UUID
    booking_id: UUID
    actor_id: str = ''


@dataclass
class AddChargeCommand:
    tenant_id: UUID
    booking_id: UUID
    type: str
    amount: Decimal
    title: str = ''
    actor_id: str = ''


@dataclass
class AddOverstayChargeCommand:
    tenant_id: UUID
    booking_id: UUID
    amount: Decimal
    title: str = ''
    notes: str = ''
    actor_id: str = ''


@dataclass
class VoidChargeCommand:
    tenant_id: UUID
    booking_id: UUID
    charge_id: UUID
    actor_id: str = ''


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Start database transaction (atomic)
    2. Lock the unit row (SELECT FOR UPDATE)
    3. Scan active bookings on the unit for a half-open overlap
    4. Insert the booking and its OPEN ROOM charge
    5. Commit, then publish BookingCreated
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        tenant_id = command.tenant_id
        _ensure_dates(command.check_in, command.check_out)
        override = None
        if command.total_amount is not None:
            override = _positive_amount(command.total_amount, "total_amount")
        requested_currency = _currency(command.currency)

        logger.info(
            f"Creating booking for unit {command.unit_id}, guest {command.guest_id}, "
            f"dates {command.check_in} - {command.check_out}"
        )

        with DjangoUnitOfWork() as uow:
            unit = find_unit(tenant_id, command.unit_id, lock=True)
            snapshot = guests.find_guest(tenant_id, command.guest_id)

            ensure_unit_is_available(tenant_id, unit.pk, command.check_in, command.check_out)

            amount = override
            if amount is None:
                amount = pricing.quote_unit(unit, command.check_in, command.check_out)
            if amount is None:
                raise exceptions.ValidationError(
                    "Unit has no usable rate; supply total_amount",
                    code="BOOKING_TOTAL_MISSING",
                )

            booking = Booking.objects.create(
                tenant_id=tenant_id,
                unit=unit,
                guest_id=snapshot.guest_id,
                check_in=command.check_in,
                check_out=command.check_out,
                total_amount=amount,
                currency=requested_currency or unit.currency or tenants.get_default_currency(tenant_id),
                status=Booking.Status.PENDING,
                payment_status=Booking.PaymentStatus.UNPAID,
                created_by=command.actor_id,
                **snapshot.as_booking_fields(),
            )
            repositories.sync_room_charge(tenant_id, booking, actor_id=command.actor_id)
            ledger.sync_payment_status(tenant_id, booking)

            uow.record(BookingCreated(
                tenant_id=tenant_id,
                booking_id=booking.pk,
                unit_id=unit.pk,
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                check_in=booking.check_in,
                check_out=booking.check_out,
                total_amount=booking.total_amount,
                currency=booking.currency,
            ))

        audit.info(
            "audit.booking_created",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            unit_id=str(unit.pk),
            actor_id=command.actor_id,
            total_amount=str(booking.total_amount),
        )
        return booking


class EditBookingHandler:
    """Handler for editing booking details while the stay has not started"""

    def handle(self, command: EditBookingCommand) -> Booking:
        tenant_id = command.tenant_id
        override = None
        if command.total_amount is not None:
            override = _positive_amount(command.total_amount, "total_amount")
        requested_currency = _currency(command.currency)

        with DjangoUnitOfWork():
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            if not lifecycle.is_editable(booking.status):
                raise exceptions.StateError(
                    f"Booking in status {booking.status} cannot be edited",
                    details={"current": booking.status},
                )

            unit_changed = command.unit_id is not None and command.unit_id != booking.unit_id
            unit = find_unit(tenant_id, command.unit_id or booking.unit_id, lock=True)

            check_in = command.check_in or booking.check_in
            check_out = command.check_out or booking.check_out
            _ensure_dates(check_in, check_out)
            dates_changed = check_in != booking.check_in or check_out != booking.check_out

            if unit_changed or dates_changed:
                ensure_unit_is_available(
                    tenant_id, unit.pk, check_in, check_out,
                    exclude_booking_id=booking.pk,
                )

            if requested_currency and requested_currency != booking.currency:
                if _has_confirmed_payments(tenant_id, booking):
                    raise exceptions.ValidationError(
                        "Currency cannot change once payments are confirmed",
                        code="CURRENCY_LOCKED",
                    )
                booking.currency = requested_currency

            if override is not None:
                booking.total_amount = override
            elif unit_changed or dates_changed:
                quote = pricing.quote_unit(unit, check_in, check_out)
                if quote is not None:
                    booking.total_amount = quote

            if command.guest_id is not None and command.guest_id != booking.guest_id:
                snapshot = guests.find_guest(tenant_id, command.guest_id)
                booking.guest_id = snapshot.guest_id
                for name, value in snapshot.as_booking_fields().items():
                    setattr(booking, name, value)

            booking.unit = unit
            booking.check_in = check_in
            booking.check_out = check_out
            booking.save()

            repositories.sync_room_charge(tenant_id, booking, actor_id=command.actor_id)
            snapshot = ledger.sync_payment_status(tenant_id, booking)

        audit.info(
            "audit.booking_updated",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            actor_id=command.actor_id,
            total_bill=str(snapshot.total_bill),
            payment_status=str(snapshot.payment_status),
        )
        return booking


class CheckInHandler:
    """
    Handler for checking in a guest

    Guards run in a fixed order: repeat check-in, status, occupancy,
    positive bill, then the tenant's deposit policy.
    """

    def handle(self, command: CheckInCommand) -> Booking:
        tenant_id = command.tenant_id
        logger.info(f"Checking in booking {command.booking_id}")

        with DjangoUnitOfWork() as uow:
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            if booking.checked_in_at is not None:
                raise exceptions.AlreadyCheckedIn("Booking is already checked in")
            lifecycle.ensure_transition(booking.status, BookingStatus.CHECKED_IN)

            find_unit(tenant_id, booking.unit_id, lock=True)
            ensure_unit_not_occupied(tenant_id, booking.unit_id, exclude_booking_id=booking.pk)

            snapshot = ledger.reconcile(tenant_id, booking)
            if snapshot.total_bill <= ZERO:
                raise exceptions.ValidationError(
                    "Booking has no bill to pay (no charges or total amount)",
                    code="BOOKING_TOTAL_MISSING",
                )
            ensure_deposit_met(
                tenants.get_deposit_policy(tenant_id),
                snapshot.total_bill,
                snapshot.paid_total,
            )

            now = timezone.now()
            overrides = {key: value for key, value in command.guest_details.items() if value is not None}
            current = guests.GuestSnapshot(
                guest_id=booking.guest_id,
                **{name: getattr(booking, name) for name in guests.PROFILE_FIELDS},
            )
            for name, value in current.with_overrides(overrides).as_booking_fields().items():
                setattr(booking, name, value)

            booking.status = Booking.Status.CHECKED_IN
            booking.checked_in_at = now
            if command.notes:
                booking.check_in_notes = command.notes
            booking.save()

            if command.update_guest_profile and booking.guest_id and overrides:
                guests.apply_profile_overrides(tenant_id, booking.guest_id, overrides)

            ledger.sync_payment_status(tenant_id, booking)
            CheckEvent.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                type=CheckEvent.Type.CHECK_IN,
                captured_at=now,
                captured_by=command.actor_id,
                photo_url=command.photo_url,
                id_doc_url=command.id_doc_url,
                verification_mode=command.verification_mode,
                notes=command.notes,
            )
            uow.record(BookingCheckedIn(
                tenant_id=tenant_id,
                booking_id=booking.pk,
                unit_id=booking.unit_id,
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                checked_in_at=now,
            ))

        audit.info(
            "audit.check_in",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            actor_id=command.actor_id,
            guest_profile_updated=command.update_guest_profile,
        )
        return booking


class CheckOutHandler:
    """Handler for checking a guest out; outstanding balances do not block it"""

    def handle(self, command: CheckOutCommand) -> Booking:
        tenant_id = command.tenant_id
        damages = None
        if command.damages_cost is not None and to_decimal(command.damages_cost) != ZERO:
            damages = _positive_amount(command.damages_cost, "damages_cost")
        refund_amount = None
        if command.refund_amount is not None and to_decimal(command.refund_amount) != ZERO:
            refund_amount = _positive_amount(command.refund_amount, "refund_amount")
        refund_status = (
            Booking.RefundStatus.PENDING if command.refund_approved else Booking.RefundStatus.NOT_APPROVED
        )

        with DjangoUnitOfWork() as uow:
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            lifecycle.ensure_transition(booking.status, BookingStatus.CHECKED_OUT)

            if damages is not None:
                self._upsert_damage_charge(tenant_id, booking, damages, command.actor_id)

            now = timezone.now()
            early, refund = pricing.early_checkout_refund(
                booking.check_in, booking.check_out, booking.total_amount, now,
            )
            booking.status = Booking.Status.CHECKED_OUT
            booking.checked_out_at = now
            booking.early_checkout = early
            booking.refund_eligible_amount = refund if refund > ZERO else None
            booking.refund_policy = command.refund_policy.strip()
            booking.refund_approved = command.refund_approved
            booking.refund_amount = refund_amount
            booking.refund_status = refund_status
            booking.refund_reason = command.refund_reason.strip()
            booking.save()

            snapshot = ledger.sync_payment_status(tenant_id, booking)

            notes = " | ".join(
                part for part in (
                    command.notes.strip(),
                    f"Damage note: {command.damages_notes.strip()}" if command.damages_notes.strip() else "",
                ) if part
            )
            CheckEvent.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                type=CheckEvent.Type.CHECK_OUT,
                captured_at=now,
                captured_by=command.actor_id,
                photo_url=command.photo_url,
                notes=notes,
                early_checkout=early,
                refund_eligible_amount=booking.refund_eligible_amount,
                refund_policy=booking.refund_policy,
                refund_approved=booking.refund_approved,
                refund_amount=refund_amount,
                refund_status=refund_status,
                refund_reason=booking.refund_reason,
            )
            uow.record(BookingCheckedOut(
                tenant_id=tenant_id,
                booking_id=booking.pk,
                unit_id=booking.unit_id,
                guest_name=booking.guest_name,
                guest_email=booking.guest_email,
                checked_out_at=now,
                outstanding=snapshot.outstanding,
                early_checkout=early,
            ))

        audit.info(
            "audit.check_out",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            actor_id=command.actor_id,
            damages_cost=str(damages or ZERO),
            outstanding=str(snapshot.outstanding),
            early_checkout=early,
            refund_status=refund_status.value,
        )
        return booking

    def _upsert_damage_charge(self, tenant_id: UUID, booking: Booking, amount: Decimal, actor_id: str):
        charge = BookingCharge.objects.filter(
            tenant_id=tenant_id,
            booking=booking,
            type=ChargeType.DAMAGE.value,
            title=DAMAGE_CHARGE_TITLE,
            status=ChargeStatus.OPEN.value,
        ).first()
        if charge is None:
            return BookingCharge.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                type=ChargeType.DAMAGE.value,
                title=DAMAGE_CHARGE_TITLE,
                amount=amount,
                currency=booking.currency,
                created_by=actor_id,
            )
        charge.amount = amount
        charge.save(update_fields=["amount", "updated_at"])
        return charge


class CancelBookingHandler:
    """Handler for cancelling a booking that holds no confirmed money"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        tenant_id = command.tenant_id
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with DjangoUnitOfWork() as uow:
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            lifecycle.ensure_transition(booking.status, BookingStatus.CANCELLED)
            _ensure_no_confirmed_payments(tenant_id, booking)

            booking.status = Booking.Status.CANCELLED
            booking.cancelled_at = timezone.now()
            booking.cancellation_reason = command.reason[:255]
            booking.save()
            repositories.void_open_charges(tenant_id, booking)
            ledger.sync_payment_status(tenant_id, booking)

            uow.record(BookingCancelled(tenant_id=tenant_id, booking_id=booking.pk, reason=command.reason))

        audit.info(
            "audit.booking_cancelled",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            actor_id=command.actor_id,
        )
        return booking


class MarkNoShowHandler:

    def handle(self, command: MarkNoShowCommand) -> Booking:
        with DjangoUnitOfWork():
            booking = repositories.get_booking(command.tenant_id, command.booking_id, lock=True)
            lifecycle.ensure_transition(booking.status, BookingStatus.NO_SHOW)
            booking.status = Booking.Status.NO_SHOW
            booking.save(update_fields=["status", "updated_at"])

        audit.info(
            "audit.booking_no_show",
            tenant_id=str(command.tenant_id),
            booking_id=str(booking.pk),
            actor_id=command.actor_id,
        )
        return booking


class DeleteBookingHandler:
    """
    Handler for hard-deleting a booking

    Same guards as cancellation; pending and failed payments, charges and
    check events go with it.
    """

    def handle(self, command: DeleteBookingCommand) -> None:
        tenant_id = command.tenant_id

        with DjangoUnitOfWork():
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            if not lifecycle.is_editable(booking.status):
                raise exceptions.StateError(
                    f"Booking in status {booking.status} cannot be deleted",
                    details={"current": booking.status},
                )
            _ensure_no_confirmed_payments(tenant_id, booking)

            Payment.objects.filter(
                tenant_id=tenant_id,
                booking=booking,
                status__in=[Payment.Status.PENDING, Payment.Status.FAILED],
            ).delete()
            BookingCharge.objects.filter(tenant_id=tenant_id, booking=booking).delete()
            CheckEvent.objects.filter(tenant_id=tenant_id, booking=booking).delete()
            booking_id = booking.pk
            booking.delete()

        audit.info(
            "audit.booking_deleted",
            tenant_id=str(tenant_id),
            booking_id=str(booking_id),
            actor_id=command.actor_id,
        )


class AddChargeHandler:
    """Handler for posting a non-room charge to an active booking"""

    def handle(self, command: AddChargeCommand):
        tenant_id = command.tenant_id
        try:
            charge_type = ChargeType(str(command.type).upper())
        except ValueError:
            raise exceptions.ValidationError(
                f"Unknown charge type {command.type!r}",
                details={"allowed": [t.value for t in ChargeType if t != ChargeType.ROOM]},
            )
        if charge_type == ChargeType.ROOM:
            raise exceptions.ValidationError("Room charges follow the booking amount and cannot be added")
        amount = _positive_amount(command.amount)

        with DjangoUnitOfWork():
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            if not lifecycle.is_active(booking.status):
                raise exceptions.StateError(
                    f"Charges cannot be added to a {booking.status} booking",
                    details={"current": booking.status},
                )
            charge = BookingCharge.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                type=charge_type.value,
                title=command.title.strip() or charge_type.value.title(),
                amount=amount,
                currency=booking.currency,
                created_by=command.actor_id,
            )
            snapshot = ledger.sync_payment_status(tenant_id, booking)

        audit.info(
            "audit.charge_added",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            charge_id=str(charge.pk),
            type=charge.type,
            amount=str(amount),
            actor_id=command.actor_id,
        )
        return charge, snapshot


class AddOverstayChargeHandler:
    """Handler for billing a guest who stayed past the scheduled checkout"""

    def handle(self, command: AddOverstayChargeCommand):
        tenant_id = command.tenant_id
        amount = _positive_amount(command.amount)

        with DjangoUnitOfWork():
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            if booking.status != Booking.Status.CHECKED_IN:
                raise exceptions.StateError("Booking must be CHECKED_IN to add an overstay charge")
            now = timezone.now()
            if booking.check_out >= now:
                raise exceptions.ConflictError(
                    "Overstay charge allowed only after the scheduled checkout",
                    code="NOT_OVERSTAYED",
                )
            charge = BookingCharge.objects.create(
                tenant_id=tenant_id,
                booking=booking,
                type=ChargeType.EXTRA.value,
                title=command.title.strip() or f"Overstay night - {timezone.localdate(now):%Y-%m-%d}",
                amount=amount,
                currency=booking.currency,
                created_by=command.actor_id,
            )
            snapshot = ledger.sync_payment_status(tenant_id, booking)

        audit.info(
            "audit.overstay_charge_added",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            charge_id=str(charge.pk),
            amount=str(amount),
            notes=command.notes,
            actor_id=command.actor_id,
        )
        return charge, snapshot


class VoidChargeHandler:

    def handle(self, command: VoidChargeCommand):
        tenant_id = command.tenant_id

        with DjangoUnitOfWork():
            booking = repositories.get_booking(tenant_id, command.booking_id, lock=True)
            charge = repositories.get_charge(tenant_id, booking.pk, command.charge_id, lock=True)
            if charge.type == ChargeType.ROOM.value:
                raise exceptions.ValidationError("Room charges follow the booking amount and cannot be voided")
            if charge.status != ChargeStatus.OPEN.value:
                raise exceptions.ConflictError("Charge is already void", code="CHARGE_NOT_OPEN")
            charge.status = ChargeStatus.VOID.value
            charge.save(update_fields=["status", "updated_at"])
            snapshot = ledger.sync_payment_status(tenant_id, booking)

        audit.info(
            "audit.charge_voided",
            tenant_id=str(tenant_id),
            booking_id=str(booking.pk),
            charge_id=str(charge.pk),
            actor_id=command.actor_id,
        )
        return charge, snapshot

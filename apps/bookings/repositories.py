"""Tenant-scoped booking persistence helpers."""

from __future__ import annotations

from uuid import UUID

from shared.domain import exceptions

from .domain.charges import ChargeStatus, ChargeType
from .models import Booking, BookingCharge


def get_booking(tenant_id: UUID, booking_id: UUID, *, lock: bool = False) -> Booking:
    queryset = Booking.objects.filter(tenant_id=tenant_id, pk=booking_id)
    if lock:
        queryset = queryset.select_for_update()
    booking = queryset.first()
    if booking is None:
        raise exceptions.NotFoundError("Booking not found", code="BOOKING_NOT_FOUND")
    return booking


def get_charge(tenant_id: UUID, booking_id: UUID, charge_id: UUID, *, lock: bool = False) -> BookingCharge:
    queryset = BookingCharge.objects.filter(tenant_id=tenant_id, booking_id=booking_id, pk=charge_id)
    if lock:
        queryset = queryset.select_for_update()
    charge = queryset.first()
    if charge is None:
        raise exceptions.NotFoundError("Charge not found", code="CHARGE_NOT_FOUND")
    return charge


def open_room_charge(tenant_id: UUID, booking: Booking) -> BookingCharge | None:
    return BookingCharge.objects.filter(
        tenant_id=tenant_id,
        booking=booking,
        type=ChargeType.ROOM.value,
        status=ChargeStatus.OPEN.value,
    ).first()


def sync_room_charge(tenant_id: UUID, booking: Booking, *, actor_id: str = "") -> BookingCharge:
    """Keep exactly one OPEN ROOM charge mirroring the booking's base amount."""
    charge = open_room_charge(tenant_id, booking)
    if charge is None:
        return BookingCharge.objects.create(
            tenant_id=tenant_id,
            booking=booking,
            type=ChargeType.ROOM.value,
            title="Room charge",
            amount=booking.total_amount,
            currency=booking.currency,
            created_by=actor_id,
        )
    if charge.amount != booking.total_amount or charge.currency != booking.currency:
        charge.amount = booking.total_amount
        charge.currency = booking.currency
        charge.save(update_fields=["amount", "currency", "updated_at"])
    return charge


def void_open_charges(tenant_id: UUID, booking: Booking) -> int:
    return BookingCharge.objects.filter(
        tenant_id=tenant_id,
        booking=booking,
        status=ChargeStatus.OPEN.value,
    ).update(status=ChargeStatus.VOID.value)

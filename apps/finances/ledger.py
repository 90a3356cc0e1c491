"""
Payment ledger

One derivation of payment status from ledger data, used by every code
path that touches a booking's charges or payments. ``reconcile`` reads
the open charges and confirmed payments; ``sync_payment_status`` writes
the derived status back when it differs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from django.db.models import Sum  # type: ignore

from apps.bookings.domain import charges as charge_ledger
from apps.bookings.models import Booking
from shared.domain.value_objects import ZERO, to_decimal

from .models import Payment

logger = logging.getLogger(__name__)

# Balances below one cent count as settled
EPSILON = Decimal("0.01")

UNPAID = Booking.PaymentStatus.UNPAID
PARTPAID = Booking.PaymentStatus.PARTPAID
PAID = Booking.PaymentStatus.PAID


@dataclass(frozen=True)
class LedgerSnapshot:
    total_bill: Decimal
    paid_total: Decimal
    outstanding: Decimal
    payment_status: str
    currency: str

    def to_dict(self) -> dict:
        return {
            "total_bill": str(self.total_bill),
            "paid_total": str(self.paid_total),
            "outstanding": str(self.outstanding),
            "payment_status": str(self.payment_status),
            "currency": self.currency,
        }


def derive_payment_status(paid_total, outstanding) -> str:
    if to_decimal(paid_total) <= ZERO:
        return UNPAID
    if to_decimal(outstanding) < EPSILON:
        return PAID
    return PARTPAID


def snapshot_from(base_amount, charges, paid_total, currency: str) -> LedgerSnapshot:
    """Pure reconciliation over already-loaded ledger data."""
    bill = charge_ledger.total_bill(base_amount, charges)
    paid = to_decimal(paid_total)
    balance = charge_ledger.outstanding(bill, paid)
    return LedgerSnapshot(
        total_bill=bill,
        paid_total=paid,
        outstanding=balance,
        payment_status=derive_payment_status(paid, balance),
        currency=currency,
    )


def confirmed_total(tenant_id: UUID, booking_id: UUID) -> Decimal:
    total = (
        Payment.objects.filter(
            tenant_id=tenant_id,
            booking_id=booking_id,
            status=Payment.Status.CONFIRMED,
        ).aggregate(total=Sum("amount"))["total"]
    )
    return to_decimal(total)


def reconcile(tenant_id: UUID, booking: Booking) -> LedgerSnapshot:
    open_charges = list(
        booking.charges.filter(tenant_id=tenant_id, status=charge_ledger.ChargeStatus.OPEN.value)
    )
    return snapshot_from(
        booking.total_amount,
        open_charges,
        confirmed_total(tenant_id, booking.pk),
        booking.currency,
    )


def sync_payment_status(tenant_id: UUID, booking: Booking) -> LedgerSnapshot:
    """Recompute and persist ``booking.payment_status``; returns the fresh snapshot."""
    snapshot = reconcile(tenant_id, booking)
    if booking.payment_status != snapshot.payment_status:
        logger.info(
            f"Payment status of booking {booking.pk} moved "
            f"{booking.payment_status} -> {snapshot.payment_status}"
        )
        booking.payment_status = snapshot.payment_status
        booking.save(update_fields=["payment_status", "updated_at"])
    return snapshot

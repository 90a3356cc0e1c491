"""
Booking Domain Events

Recorded inside a unit of work and published after the transaction
commits. Handlers only ever see committed state.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A booking was created (status PENDING)

    Triggers:
    - Acknowledgement email to the guest
    - Alert to the tenant's front desk
    """
    booking_id: UUID
    unit_id: UUID
    guest_name: str
    guest_email: str
    check_in: datetime
    check_out: datetime
    total_amount: Decimal
    currency: str


@dataclass
class PaymentAcknowledged(DomainEvent):
    """
    Event: The first confirmed payment moved a booking to CONFIRMED

    Triggers:
    - Payment receipt email to the guest
    """
    booking_id: UUID
    payment_id: UUID
    amount: Decimal
    currency: str
    guest_name: str
    guest_email: str
    outstanding: Decimal


@dataclass
class BookingCheckedIn(DomainEvent):
    booking_id: UUID
    unit_id: UUID
    guest_name: str
    guest_email: str
    checked_in_at: datetime


@dataclass
class BookingCheckedOut(DomainEvent):
    booking_id: UUID
    unit_id: UUID
    guest_name: str
    guest_email: str
    checked_out_at: datetime
    outstanding: Decimal
    early_checkout: bool = False


@dataclass
class BookingCancelled(DomainEvent):
    booking_id: UUID
    reason: str

"""Booking domain models: bookings, their charge lines and check events."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain import exceptions
from shared.infrastructure.fields import EncryptedCharField

from .domain.charges import ChargeStatus, ChargeType
from .domain.lifecycle import BookingStatus


class Booking(models.Model):
    """A reservation of one unit over ``[check_in, check_out)``."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        CONFIRMED = BookingStatus.CONFIRMED.value, _("Confirmed")
        CHECKED_IN = BookingStatus.CHECKED_IN.value, _("Checked in")
        CHECKED_OUT = BookingStatus.CHECKED_OUT.value, _("Checked out")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")
        NO_SHOW = BookingStatus.NO_SHOW.value, _("No show")

    class PaymentStatus(models.TextChoices):
        UNPAID = "UNPAID", _("Unpaid")
        PARTPAID = "PARTPAID", _("Part paid")
        PAID = "PAID", _("Paid")

    class RefundStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        NOT_APPROVED = "NOT_APPROVED", _("Not approved")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    unit = models.ForeignKey(
        "properties.Unit",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        "guests.Guest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )

    # Snapshot of the guest at booking time; owned by the booking
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=32, blank=True)
    guest_address = models.CharField(max_length=255, blank=True)
    guest_nationality = models.CharField(max_length=80, blank=True)
    id_type = models.CharField(max_length=40, blank=True)
    id_number = EncryptedCharField(max_length=64)
    id_issued_by = models.CharField(max_length=120, blank=True)
    vehicle_plate = models.CharField(max_length=20, blank=True)

    check_in = models.DateTimeField()
    check_out = models.DateTimeField()
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Base amount agreed at booking time."),
    )
    currency = models.CharField(max_length=3)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    check_in_notes = models.TextField(blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    early_checkout = models.BooleanField(default=False)
    refund_eligible_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_policy = models.CharField(max_length=120, blank=True)
    refund_approved = models.BooleanField(default=False)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_status = models.CharField(max_length=16, choices=RefundStatus.choices, blank=True)
    refund_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-check_in"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_check_out_after_check_in",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "unit", "check_in", "check_out"]),
            models.Index(fields=["tenant", "status"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.pk} ({self.guest_name or 'no guest'})"


class BookingCharge(models.Model):
    """A line on a booking's bill."""

    class Type(models.TextChoices):
        ROOM = ChargeType.ROOM.value, _("Room")
        DAMAGE = ChargeType.DAMAGE.value, _("Damage")
        EXTRA = ChargeType.EXTRA.value, _("Extra")
        PENALTY = ChargeType.PENALTY.value, _("Penalty")
        DISCOUNT = ChargeType.DISCOUNT.value, _("Discount")

    class Status(models.TextChoices):
        OPEN = ChargeStatus.OPEN.value, _("Open")
        VOID = ChargeStatus.VOID.value, _("Void")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey("tenants.Tenant", on_delete=models.CASCADE, related_name="booking_charges")
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="charges")
    type = models.CharField(max_length=16, choices=Type.choices)
    title = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)
    status = models.CharField(max_length=8, choices=Status.choices, default=Status.OPEN)
    created_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="booking_charge_amount_positive"),
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(type="ROOM", status="OPEN"),
                name="booking_single_open_room_charge",
            ),
        ]
        indexes = [models.Index(fields=["tenant", "booking", "status"])]

    def __str__(self) -> str:
        return f"{self.type} {self.amount} {self.currency} ({self.status})"


class CheckEventQuerySet(models.QuerySet):
    def update(self, **kwargs):  # type: ignore
        raise exceptions.IntegrityError("Check events are append-only", code="CHECK_EVENT_APPEND_ONLY")


class CheckEvent(models.Model):
    """Append-only record of a check-in or check-out."""

    class Type(models.TextChoices):
        CHECK_IN = "CHECK_IN", _("Check in")
        CHECK_OUT = "CHECK_OUT", _("Check out")

    class VerificationMode(models.TextChoices):
        MANUAL_REVIEW = "MANUAL_REVIEW", _("Manual review")
        FACE_MATCH = "FACE_MATCH", _("Face match")

    class VerificationResult(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PASSED = "PASSED", _("Passed")
        FAILED = "FAILED", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey("tenants.Tenant", on_delete=models.CASCADE, related_name="check_events")
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="check_events")
    type = models.CharField(max_length=16, choices=Type.choices)
    captured_at = models.DateTimeField()
    captured_by = models.CharField(max_length=64, blank=True)
    photo_url = models.URLField(max_length=500, blank=True)
    id_doc_url = models.URLField(max_length=500, blank=True)
    verification_mode = models.CharField(
        max_length=16,
        choices=VerificationMode.choices,
        default=VerificationMode.MANUAL_REVIEW,
    )
    verification_result = models.CharField(
        max_length=16,
        choices=VerificationResult.choices,
        default=VerificationResult.PENDING,
    )
    notes = models.TextField(blank=True)
    early_checkout = models.BooleanField(default=False)
    refund_eligible_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_policy = models.CharField(max_length=120, blank=True)
    refund_approved = models.BooleanField(default=False)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_status = models.CharField(max_length=16, choices=Booking.RefundStatus.choices, blank=True)
    refund_reason = models.TextField(blank=True)

    objects = CheckEventQuerySet.as_manager()

    class Meta:
        ordering = ["captured_at"]
        indexes = [models.Index(fields=["tenant", "booking", "type"])]

    def __str__(self) -> str:
        return f"{self.type} for {self.booking_id} at {self.captured_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise exceptions.IntegrityError("Check events are append-only", code="CHECK_EVENT_APPEND_ONLY")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise exceptions.IntegrityError("Check events are append-only", code="CHECK_EVENT_APPEND_ONLY")

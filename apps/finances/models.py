"""Payment model."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain import exceptions


class Payment(models.Model):
    """Money received, or expected, against a booking."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        FAILED = "FAILED", _("Failed")

    class Method(models.TextChoices):
        MANUAL = "MANUAL", _("Manual entry")
        CASH = "CASH", _("Cash")
        CARD = "CARD", _("Card")
        TRANSFER = "TRANSFER", _("Bank transfer")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    method = models.CharField(max_length=16, choices=Method.choices, default=Method.MANUAL)
    reference = models.CharField(max_length=120, blank=True)
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.CharField(max_length=64, blank=True)
    created_by = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="payment_amount_positive"),
        ]
        indexes = [models.Index(fields=["tenant", "booking", "status"])]

    def __str__(self) -> str:
        return f"Payment {self.amount} {self.currency} for {self.booking_id} ({self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        # A confirmed payment is part of the ledger and never changes again
        if not self._state.adding:
            stored = Payment.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored == self.Status.CONFIRMED:
                raise exceptions.IntegrityError("Confirmed payments are immutable", code="PAYMENT_IMMUTABLE")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        if self.status == self.Status.CONFIRMED:
            raise exceptions.IntegrityError("Confirmed payments cannot be deleted", code="PAYMENT_IMMUTABLE")
        return super().delete(*args, **kwargs)

"""Tenant models for the booking engine."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_currency() -> str:
    return settings.DEFAULT_CURRENCY


class Tenant(models.Model):
    """An organisation whose data is isolated from every other tenant."""

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        SUSPENDED = "SUSPENDED", _("Suspended")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=80, unique=True)
    email = models.EmailField(blank=True, help_text=_("Receives front-desk alert emails."))
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class TenantSettings(models.Model):
    """Booking policy knobs a tenant can tune."""

    tenant = models.OneToOneField(
        Tenant,
        on_delete=models.CASCADE,
        related_name="booking_settings",
    )
    min_deposit_percent = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        default=100,
        validators=[MaxValueValidator(100)],
        help_text=_("Share of the total bill that must be paid before check-in. Empty means 100."),
    )
    default_currency = models.CharField(max_length=3, default=default_currency)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "tenant settings"

    def __str__(self) -> str:
        return f"Settings for {self.tenant_id}"

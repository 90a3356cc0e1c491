"""Catalog models: properties and their bookable units."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.tenants.models import default_currency


class Property(models.Model):
    """A building or site owned by a tenant."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="properties",
    )
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "properties"
        ordering = ["name"]
        indexes = [models.Index(fields=["tenant", "name"])]

    def __str__(self) -> str:
        return self.name


class Unit(models.Model):
    """A bookable room or apartment."""

    class DiscountType(models.TextChoices):
        PERCENT = "PERCENT", _("Percent off")
        FIXED_PRICE = "FIXED_PRICE", _("Fixed nightly price")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="units",
    )
    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="units",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=120)
    unit_type = models.CharField(max_length=60, blank=True)
    max_guests = models.PositiveSmallIntegerField(default=1)
    base_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Nightly rate. Empty or zero means the unit cannot be quoted."),
    )
    currency = models.CharField(max_length=3, default=default_currency)
    discount_type = models.CharField(max_length=16, choices=DiscountType.choices, blank=True)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    discount_start = models.DateTimeField(null=True, blank=True)
    discount_end = models.DateTimeField(null=True, blank=True)
    discount_label = models.CharField(max_length=120, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["tenant", "is_active"])]

    def __str__(self) -> str:
        return self.name

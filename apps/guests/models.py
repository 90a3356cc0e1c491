"""Guest profile model."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore

from shared.infrastructure.fields import EncryptedCharField


class Guest(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.CASCADE,
        related_name="guests",
    )
    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    nationality = models.CharField(max_length=80, blank=True)
    id_type = models.CharField(max_length=40, blank=True)
    id_number = EncryptedCharField(max_length=64)
    id_issued_by = models.CharField(max_length=120, blank=True)
    vehicle_plate = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]
        indexes = [models.Index(fields=["tenant", "full_name"])]

    def __str__(self) -> str:
        return self.full_name

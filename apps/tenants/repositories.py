"""Tenant settings lookups consumed by the booking engine."""

from __future__ import annotations

from uuid import UUID

from django.conf import settings  # type: ignore

from .models import TenantSettings

DEFAULT_MIN_DEPOSIT_PERCENT = 100


def _settings_for(tenant_id: UUID) -> TenantSettings | None:
    return TenantSettings.objects.filter(tenant_id=tenant_id).first()


def get_deposit_policy(tenant_id: UUID) -> int:
    """Minimum deposit percentage for check-in; 100 when never configured."""
    tenant_settings = _settings_for(tenant_id)
    if tenant_settings is None or tenant_settings.min_deposit_percent is None:
        return DEFAULT_MIN_DEPOSIT_PERCENT
    return min(100, max(0, int(tenant_settings.min_deposit_percent)))


def get_default_currency(tenant_id: UUID) -> str:
    tenant_settings = _settings_for(tenant_id)
    if tenant_settings is None or not tenant_settings.default_currency:
        return settings.DEFAULT_CURRENCY
    return tenant_settings.default_currency.upper()

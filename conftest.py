"""Shared pytest fixtures: one tenant with a priced unit and a guest."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.guests.models import Guest
from apps.properties.models import Property, Unit
from apps.tenants.models import Tenant, TenantSettings


@pytest.fixture
def tenant(db) -> Tenant:
    tenant = Tenant.objects.create(name="Harbour Suites", slug="harbour", email="desk@harbour.test")
    TenantSettings.objects.create(tenant=tenant, min_deposit_percent=100, default_currency="NGN")
    return tenant


@pytest.fixture
def other_tenant(db) -> Tenant:
    return Tenant.objects.create(name="Lagoon Lodge", slug="lagoon")


@pytest.fixture
def unit(tenant) -> Unit:
    prop = Property.objects.create(tenant=tenant, name="Harbour Block A")
    return Unit.objects.create(
        tenant=tenant,
        property=prop,
        name="A-101",
        unit_type="Studio",
        base_price=Decimal("10000.00"),
        currency="NGN",
    )


@pytest.fixture
def guest(tenant) -> Guest:
    return Guest.objects.create(
        tenant=tenant,
        full_name="Ada Obi",
        email="ada@example.com",
        phone="+2348000000001",
        id_type="PASSPORT",
        id_number="A1234567",
    )


@pytest.fixture
def set_deposit(tenant):
    def _set(percent):
        TenantSettings.objects.filter(tenant=tenant).update(min_deposit_percent=percent)

    return _set

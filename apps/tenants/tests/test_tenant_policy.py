"""Tests for tenant settings lookups and header resolution."""

from __future__ import annotations

import json
import uuid

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from apps.tenants import repositories
from apps.tenants.middleware import TenantMiddleware
from apps.tenants.models import Tenant, TenantSettings

pytestmark = pytest.mark.django_db


class TestDepositPolicy:
    def test_configured_percentage(self, tenant, set_deposit) -> None:
        set_deposit(30)
        assert repositories.get_deposit_policy(tenant.id) == 30

    def test_null_means_full_payment(self, tenant, set_deposit) -> None:
        set_deposit(None)
        assert repositories.get_deposit_policy(tenant.id) == 100

    def test_missing_settings_mean_full_payment(self, other_tenant) -> None:
        assert repositories.get_deposit_policy(other_tenant.id) == 100

    def test_out_of_range_values_are_clamped(self, tenant, set_deposit) -> None:
        set_deposit(250)
        assert repositories.get_deposit_policy(tenant.id) == 100


def test_default_currency_falls_back_to_settings(tenant, other_tenant, settings) -> None:
    settings.DEFAULT_CURRENCY = "GHS"
    TenantSettings.objects.filter(tenant=tenant).update(default_currency="usd")

    assert repositories.get_default_currency(tenant.id) == "USD"
    assert repositories.get_default_currency(other_tenant.id) == "GHS"


class TestTenantMiddleware:
    @pytest.fixture
    def middleware(self):
        return TenantMiddleware(lambda request: HttpResponse(str(request.tenant.pk) if request.tenant else "-"))

    def _call(self, middleware, path="/api/v1/bookings/", **headers):
        return middleware(RequestFactory().get(path, **headers))

    def _code(self, response) -> str:
        return json.loads(response.content)["error"]["code"]

    def test_active_tenant_is_attached(self, middleware, tenant) -> None:
        response = self._call(middleware, HTTP_X_TENANT_ID=str(tenant.id))
        assert response.status_code == 200
        assert response.content.decode() == str(tenant.id)

    def test_missing_header(self, middleware) -> None:
        response = self._call(middleware)
        assert (response.status_code, self._code(response)) == (400, "TENANT_REQUIRED")

    @pytest.mark.parametrize("raw", ["garbage", str(uuid.UUID(int=7))])
    def test_invalid_or_unknown_tenant(self, middleware, raw) -> None:
        response = self._call(middleware, HTTP_X_TENANT_ID=raw)
        assert (response.status_code, self._code(response)) == (401, "TENANT_INVALID")

    def test_suspended_tenant(self, middleware, tenant) -> None:
        Tenant.objects.filter(pk=tenant.pk).update(status=Tenant.Status.SUSPENDED)

        response = self._call(middleware, HTTP_X_TENANT_ID=str(tenant.id))

        assert (response.status_code, self._code(response)) == (403, "TENANT_INACTIVE")

    @pytest.mark.parametrize("path", ["/admin/", "/api/v1/schema/"])
    def test_paths_outside_tenant_api_pass_through(self, middleware, path) -> None:
        response = self._call(middleware, path=path)
        assert response.content == b"-"

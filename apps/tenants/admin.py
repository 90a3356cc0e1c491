"""Admin registration for tenants."""

from __future__ import annotations

from django.contrib import admin

from .models import Tenant, TenantSettings


class TenantSettingsInline(admin.StackedInline):
    model = TenantSettings
    can_delete = False


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "status", "email", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "slug", "email")
    prepopulated_fields = {"slug": ("name",)}
    inlines = [TenantSettingsInline]

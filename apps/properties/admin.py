"""Admin registrations for the catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, Unit


class UnitInline(admin.TabularInline):
    model = Unit
    extra = 0
    fields = ("name", "unit_type", "base_price", "currency", "is_active")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "city", "created_at")
    list_filter = ("tenant",)
    search_fields = ("name", "address", "city")
    inlines = [UnitInline]


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "property", "base_price", "currency", "discount_type", "is_active")
    list_filter = ("tenant", "is_active", "discount_type")
    search_fields = ("name", "unit_type")
    fieldsets = (
        (None, {"fields": ("tenant", "property", "name", "unit_type", "max_guests", "is_active")}),
        ("Pricing", {"fields": ("base_price", "currency")}),
        (
            "Discount",
            {"fields": ("discount_type", "discount_value", "discount_start", "discount_end", "discount_label")},
        ),
    )

"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant", "booking", "amount", "currency", "status", "method", "confirmed_at")
    list_filter = ("tenant", "status", "method")
    search_fields = ("reference", "booking__guest_name")
    readonly_fields = ("confirmed_at", "confirmed_by", "created_by", "created_at", "updated_at")

    def has_change_permission(self, request, obj=None):  # type: ignore
        if obj is not None and obj.status == Payment.Status.CONFIRMED:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):  # type: ignore
        if obj is not None and obj.status == Payment.Status.CONFIRMED:
            return False
        return super().has_delete_permission(request, obj)

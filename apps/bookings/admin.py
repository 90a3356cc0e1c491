"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingCharge, CheckEvent


class BookingChargeInline(admin.TabularInline):
    model = BookingCharge
    extra = 0
    fields = ("type", "title", "amount", "currency", "status", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


class CheckEventInline(admin.TabularInline):
    model = CheckEvent
    extra = 0
    fields = ("type", "captured_at", "captured_by", "verification_result", "early_checkout")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-mostly: status and money only change through the API use cases."""

    list_display = (
        "id",
        "tenant",
        "unit",
        "guest_name",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total_amount",
        "currency",
    )
    list_filter = ("tenant", "status", "payment_status")
    search_fields = ("guest_name", "guest_email", "guest_phone", "unit__name")
    readonly_fields = (
        "status",
        "payment_status",
        "total_amount",
        "currency",
        "checked_in_at",
        "checked_out_at",
        "cancelled_at",
        "refund_eligible_amount",
        "refund_status",
        "refund_amount",
        "created_at",
        "updated_at",
    )
    inlines = [BookingChargeInline, CheckEventInline]

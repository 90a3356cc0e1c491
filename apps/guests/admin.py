"""Admin registration for guests."""

from __future__ import annotations

from django.contrib import admin

from .models import Guest


@admin.register(Guest)
class GuestAdmin(admin.ModelAdmin):
    list_display = ("full_name", "tenant", "email", "phone", "nationality", "created_at")
    list_filter = ("tenant",)
    search_fields = ("full_name", "email", "phone")

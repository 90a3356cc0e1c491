"""DRF helpers for tenant-scoped endpoints."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class HasTenant(permissions.BasePermission):
    """Requests must have passed through ``TenantMiddleware``."""

    message = "Tenant context is required."

    def has_permission(self, request, view):  # type: ignore
        return getattr(request, "tenant", None) is not None


class TenantScopedMixin:
    """Expose ``self.tenant_id`` and the acting user's id to views."""

    permission_classes = [permissions.IsAuthenticated, HasTenant]

    @property
    def tenant_id(self):
        return self.request.tenant.id  # type: ignore[attr-defined]

    @property
    def actor_id(self) -> str:
        user = getattr(self.request, "user", None)  # type: ignore[attr-defined]
        if user is None or not user.is_authenticated:
            return ""
        return str(user.pk)

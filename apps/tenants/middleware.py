"""Resolve the calling tenant from the ``X-Tenant-ID`` header."""

from __future__ import annotations

import logging
import uuid

from django.http import JsonResponse  # type: ignore

from .models import Tenant

logger = logging.getLogger(__name__)


def _error(status: int, code: str, message: str) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)


class TenantMiddleware:
    """Attach ``request.tenant`` for API calls; reject unknown or inactive tenants."""

    header = "HTTP_X_TENANT_ID"
    api_prefix = "/api/"
    exempt_prefixes = ("/api/v1/schema/",)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.tenant = None
        path = request.path_info
        if not path.startswith(self.api_prefix) or path.startswith(self.exempt_prefixes):
            return self.get_response(request)

        raw = request.META.get(self.header, "").strip()
        if not raw:
            return _error(400, "TENANT_REQUIRED", "Missing X-Tenant-ID header")

        try:
            tenant = Tenant.objects.get(pk=uuid.UUID(raw))
        except (ValueError, Tenant.DoesNotExist):
            logger.warning(f"Rejected request for unknown tenant {raw!r} on {path}")
            return _error(401, "TENANT_INVALID", "Invalid tenant")

        if not tenant.is_active:
            return _error(403, "TENANT_INACTIVE", "Tenant inactive")

        request.tenant = tenant
        return self.get_response(request)

"""
DRF exception handler.

Renders every failure as ``{"error": {"code", "message", "details"?}}``.
Domain errors keep their stable code and mapped status; DRF's own errors
are translated; anything unexpected is logged with its traceback and
generalised to ``INTERNAL_ERROR``.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def _request_context(context) -> dict:
    request = context.get("request")
    if request is None:
        return {}
    tenant = getattr(request, "tenant", None)
    return {
        "method": request.method,
        "path": request.get_full_path(),
        "tenant_id": str(tenant.id) if tenant else None,
    }


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        logger.info(f"Domain error {exc.code}: {exc.message} {_request_context(context)}")
        return Response({"error": exc.to_dict()}, status=exc.status_code)

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.error(f"Unhandled error {_request_context(context)}", exc_info=exc)
        return Response(
            {"error": {"code": "INTERNAL_ERROR", "message": "Something went wrong"}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        payload = {"code": "VALIDATION_ERROR", "message": "Invalid request", "details": response.data}
    else:
        detail = getattr(exc, "detail", str(exc))
        code = getattr(exc, "default_code", "error")
        payload = {"code": str(code).upper(), "message": str(detail)}

    response.data = {"error": payload}
    return response

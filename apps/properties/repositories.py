"""Tenant-scoped catalog lookups."""

from __future__ import annotations

from uuid import UUID

from shared.domain import exceptions

from .models import Unit


def find_unit(tenant_id: UUID, unit_id: UUID, *, lock: bool = False) -> Unit:
    """Fetch a unit owned by ``tenant_id``.

    With ``lock=True`` the row is read ``SELECT ... FOR UPDATE`` so the
    caller's transaction serialises every booking write against this unit.
    """
    queryset = Unit.objects.filter(tenant_id=tenant_id, pk=unit_id)
    if lock:
        queryset = queryset.select_for_update()
    unit = queryset.first()
    if unit is None:
        raise exceptions.NotFoundError("Unit not found", code="UNIT_NOT_FOUND")
    return unit

"""Tenant-scoped guest lookups and the booking snapshot they feed."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from uuid import UUID

from shared.domain import exceptions
from shared.domain.base import ValueObject

from .models import Guest

# Snapshot attribute -> Guest model field
PROFILE_FIELDS = {
    "guest_name": "full_name",
    "guest_email": "email",
    "guest_phone": "phone",
    "guest_address": "address",
    "guest_nationality": "nationality",
    "id_type": "id_type",
    "id_number": "id_number",
    "id_issued_by": "id_issued_by",
    "vehicle_plate": "vehicle_plate",
}


@dataclass(frozen=True)
class GuestSnapshot(ValueObject):
    """Guest details copied onto a booking at the moment of writing."""

    guest_id: UUID | None = None
    guest_name: str = ""
    guest_email: str = ""
    guest_phone: str = ""
    guest_address: str = ""
    guest_nationality: str = ""
    id_type: str = ""
    id_number: str = ""
    id_issued_by: str = ""
    vehicle_plate: str = ""

    @classmethod
    def from_guest(cls, guest: Guest) -> "GuestSnapshot":
        values = {attr: getattr(guest, field) or "" for attr, field in PROFILE_FIELDS.items()}
        return cls(guest_id=guest.pk, **values)

    def with_overrides(self, overrides: dict) -> "GuestSnapshot":
        """Return a copy where every non-null override replaces the stored value."""
        known = {f.name for f in fields(self)} - {"guest_id"}
        changes = {key: value for key, value in overrides.items() if key in known and value is not None}
        return replace(self, **changes)

    def as_booking_fields(self) -> dict:
        return {attr: getattr(self, attr) for attr in PROFILE_FIELDS}


def get_guest(tenant_id: UUID, guest_id: UUID) -> Guest:
    guest = Guest.objects.filter(tenant_id=tenant_id, pk=guest_id).first()
    if guest is None:
        raise exceptions.NotFoundError("Guest not found", code="GUEST_NOT_FOUND")
    return guest


def find_guest(tenant_id: UUID, guest_id: UUID) -> GuestSnapshot:
    return GuestSnapshot.from_guest(get_guest(tenant_id, guest_id))


def apply_profile_overrides(tenant_id: UUID, guest_id: UUID, overrides: dict) -> Guest:
    """Write non-null snapshot overrides back to the live guest record."""
    guest = get_guest(tenant_id, guest_id)
    changed = []
    for attr, value in overrides.items():
        field = PROFILE_FIELDS.get(attr)
        if field is None or value is None:
            continue
        setattr(guest, field, value)
        changed.append(field)
    if changed:
        guest.save(update_fields=[*changed, "updated_at"])
    return guest

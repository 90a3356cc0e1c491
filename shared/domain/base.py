"""
Domain building blocks shared by the booking and finance contexts.

``ValueObject`` subclasses are frozen dataclasses compared by value.
``DomainEvent`` subclasses record a fact about one tenant's data; they
are published only after the transaction that produced them commits.
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(frozen=True)
class ValueObject(ABC):
    pass


def _plain(value):
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class DomainEvent:
    tenant_id: UUID
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=timezone.now, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        """JSON-ready payload: UUIDs, amounts and timestamps as strings."""
        payload = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        payload['event_type'] = self.name
        return payload

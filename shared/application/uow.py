"""
Unit of Work

One booking or payment use case = one database transaction. Rows read
with ``select_for_update`` inside the block stay locked until it exits;
events recorded during the block reach the message bus only once the
outermost transaction has committed.
"""

from functools import partial
from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    ``transaction.atomic()`` plus an outbox of domain events

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = repositories.get_booking(tenant_id, booking_id, lock=True)
            ...
            uow.record(BookingCheckedIn(tenant_id=tenant_id, ...))
        # BookingCheckedIn is published after COMMIT, never on rollback
    """

    def __init__(self, using: str | None = None):
        self._using = using
        self._atomic = None
        self._pending: List[DomainEvent] = []

    def __enter__(self):
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publication()
            else:
                logger.warning(
                    f"Use case aborted ({exc_type.__name__}: {exc_val}); "
                    f"dropping {len(self._pending)} unpublished events"
                )
                self._pending.clear()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def record(self, event: DomainEvent):
        """Queue ``event`` for publication after commit."""
        self._pending.append(event)
        logger.debug(f"Recorded {type(event).__name__} for tenant {event.tenant_id}")

    def _schedule_publication(self):
        if not self._pending:
            return
        events, self._pending = self._pending, []
        transaction.on_commit(partial(_publish, events), using=self._using)


def _publish(events: List[DomainEvent]):
    from shared.application.message_bus import message_bus

    logger.info(f"Publishing {len(events)} domain events after commit")
    message_bus.publish_events(events)

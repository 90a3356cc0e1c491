"""Booking writes must hold the unit row lock before scanning for overlaps."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from django.db.models.query import QuerySet

from apps.bookings import services
from apps.bookings.application import command_handlers as commands
from apps.finances.application.command_handlers import RecordPaymentCommand, RecordPaymentHandler
from shared.domain import exceptions

pytestmark = pytest.mark.django_db


def _dt(day: int) -> datetime:
    return datetime(2030, 3, day, 12, tzinfo=timezone.utc)


@pytest.fixture
def calls(monkeypatch):
    """Ordered log of row locks and availability scans issued by a handler."""
    log: list[tuple[str, str]] = []
    real_lock = QuerySet.select_for_update
    real_overlap = services.has_conflict
    real_occupied = commands.ensure_unit_not_occupied

    def lock(self, *args, **kwargs):
        log.append(("lock", self.model.__name__))
        return real_lock(self, *args, **kwargs)

    def overlap(*args, **kwargs):
        log.append(("overlap", "Booking"))
        return real_overlap(*args, **kwargs)

    def occupied(*args, **kwargs):
        log.append(("occupied", "Booking"))
        return real_occupied(*args, **kwargs)

    monkeypatch.setattr(QuerySet, "select_for_update", lock)
    monkeypatch.setattr(services, "has_conflict", overlap)
    monkeypatch.setattr(commands, "ensure_unit_not_occupied", occupied)
    return log


def _assert_unit_locked_before(log, scan: str) -> None:
    assert ("lock", "Unit") in log and (scan, "Booking") in log
    assert log.index(("lock", "Unit")) < log.index((scan, "Booking"))


def _create(tenant, unit, guest, day_in=1, day_out=3):
    return commands.CreateBookingHandler().handle(
        commands.CreateBookingCommand(
            tenant_id=tenant.id, unit_id=unit.id, guest_id=guest.id, check_in=_dt(day_in), check_out=_dt(day_out),
        )
    )


def test_create_locks_unit_before_overlap_scan(tenant, unit, guest, calls) -> None:
    _create(tenant, unit, guest)

    _assert_unit_locked_before(calls, "overlap")


def test_rejected_create_still_took_the_lock_first(tenant, unit, guest, calls) -> None:
    _create(tenant, unit, guest)
    calls.clear()

    with pytest.raises(exceptions.UnitNotAvailable) as excinfo:
        _create(tenant, unit, guest, day_in=2, day_out=4)

    assert excinfo.value.code == "UNIT_NOT_AVAILABLE"
    _assert_unit_locked_before(calls, "overlap")


def test_edit_locks_unit_before_overlap_scan(tenant, unit, guest, calls) -> None:
    booking = _create(tenant, unit, guest)
    calls.clear()

    commands.EditBookingHandler().handle(
        commands.EditBookingCommand(tenant_id=tenant.id, booking_id=booking.id, check_out=_dt(5))
    )

    _assert_unit_locked_before(calls, "overlap")


def test_check_in_locks_unit_before_occupancy_scan(tenant, unit, guest, calls) -> None:
    booking = _create(tenant, unit, guest)
    RecordPaymentHandler().handle(
        RecordPaymentCommand(tenant_id=tenant.id, booking_id=booking.id, amount=booking.total_amount)
    )
    calls.clear()

    commands.CheckInHandler().handle(commands.CheckInCommand(tenant_id=tenant.id, booking_id=booking.id))

    _assert_unit_locked_before(calls, "occupied")

"""
Tests for the server-side booking service: re-validation on every write and
the version check that keeps concurrent writers from losing updates.
"""

from __future__ import annotations

import random

import pytest

from hourbook.application.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    DurationConflictError,
    ExtendConflictError,
    SlotAlreadyBookedError,
    StoreContentionError,
)
from hourbook.application.use_cases.booking_service import WRITE_RETRIES, BookingService
from hourbook.application.utils.conflicts import overlapping_pairs
from hourbook.domain.entities.booking import Booking
from hourbook.infrastructure.store.memory_store import MemoryDocumentStore

DAY = "2026-02-13"


class RacingStore(MemoryDocumentStore):
    """Lets another writer land between the service's read and its write."""

    def __init__(self, races: int = 1, sneak=None) -> None:
        super().__init__()
        self.races = races
        self.sneak = sneak
        self.puts = 0

    def put(self, key, value, expected_version=None):
        self.puts += 1
        if self.races > 0:
            self.races -= 1
            current = self.get(key)
            doc = current.value if current else {}
            if self.sneak is not None:
                doc = self.sneak(doc)
            super().put(key, doc)
        return super().put(key, value, expected_version)


def _sneak_booking(time_key: str, user: str, duration: int = 1):
    def sneak(doc):
        day = dict(doc.get(DAY, {}))
        day[time_key] = {"user": user, "duration": duration}
        return {**doc, DAY: day}

    return sneak


def _service(store=None) -> BookingService:
    return BookingService(store=store or MemoryDocumentStore(), instance_slug="test")


def test_document_key_is_namespaced_by_instance():
    assert _service().document_key == "instance:test:bookings"


def test_create_and_list():
    service = _service()
    created = service.create_booking(DAY, "09:00", "Jack", 2)

    assert created == Booking(user="Jack", duration=2)
    assert service.list_bookings() == {DAY: {"09:00": Booking(user="Jack", duration=2)}}
    assert service.snapshot()[1] == 1


def test_create_rejects_conflicts():
    service = _service()
    service.create_booking(DAY, "09:00", "Jack", 2)

    with pytest.raises(SlotAlreadyBookedError):
        service.create_booking(DAY, "09:00", "Rue", 1)
    with pytest.raises(SlotAlreadyBookedError):
        service.create_booking(DAY, "10:00", "Rue", 1)
    with pytest.raises(DurationConflictError) as exc:
        service.create_booking(DAY, "07:00", "Rue", 3)
    assert exc.value.message == "Slot 09:00 conflicts with booking duration"

    # Nothing was written by the rejected attempts
    assert service.snapshot()[1] == 1


def test_update_merges_and_rechecks_extension():
    service = _service()
    service.create_booking(DAY, "09:00", "Jack", 2)
    service.create_booking(DAY, "11:00", "Rue", 1)

    with pytest.raises(ExtendConflictError) as exc:
        service.update_booking(DAY, "09:00", duration=3)
    assert exc.value.message == "Cannot extend: slot 11:00 is already booked"

    assert service.update_booking(DAY, "09:00", user="Bonnie") == Booking(user="Bonnie", duration=2)
    assert service.update_booking(DAY, "11:00", duration=4) == Booking(user="Rue", duration=4)
    assert service.update_booking(DAY, "09:00", duration=1) == Booking(user="Bonnie", duration=1)


def test_update_and_delete_missing_booking():
    service = _service()
    with pytest.raises(BookingNotFoundError) as exc:
        service.update_booking(DAY, "09:00", user="Jack")
    assert exc.value.message == "Booking not found"

    with pytest.raises(BookingNotFoundError):
        service.delete_booking(DAY, "09:00")


def test_delete_removes_empty_date():
    service = _service()
    service.create_booking(DAY, "09:00", "Jack", 1)
    service.create_booking("2026-02-14", "09:00", "Rue", 1)

    service.delete_booking(DAY, "09:00")
    assert service.list_bookings() == {"2026-02-14": {"09:00": Booking(user="Rue", duration=1)}}


def test_concurrent_write_is_not_lost():
    """Test that a booking landing mid-write survives alongside ours."""
    store = RacingStore(races=1, sneak=_sneak_booking("11:00", "Rue"))
    service = _service(store)

    service.create_booking(DAY, "09:00", "Jack", 2)

    assert service.list_bookings() == {
        DAY: {"09:00": Booking(user="Jack", duration=2), "11:00": Booking(user="Rue", duration=1)}
    }
    assert store.puts == 2


def test_concurrent_conflicting_write_is_rejected_on_retry():
    """Test that the retry re-validates against the other writer's booking."""
    store = RacingStore(races=1, sneak=_sneak_booking("10:00", "Rue"))
    service = _service(store)

    with pytest.raises(DurationConflictError) as exc:
        service.create_booking(DAY, "09:00", "Jack", 2)
    assert exc.value.time_key == "10:00"
    assert service.list_bookings() == {DAY: {"10:00": Booking(user="Rue", duration=1)}}


def test_persistent_contention_gives_up():
    store = RacingStore(races=10)
    service = _service(store)

    with pytest.raises(StoreContentionError):
        service.create_booking(DAY, "09:00", "Jack", 1)
    assert store.puts == WRITE_RETRIES


def test_random_operations_never_produce_overlaps():
    """Test that no accepted sequence of writes leaves two bookings sharing an hour."""
    rng = random.Random(7)
    service = _service()
    users = ["Jack", "Bonnie", "Giuliano", "John", "Rue", "Joel"]

    for _ in range(300):
        day = rng.choice([DAY, "2026-02-14"])
        key = f"{rng.randint(6, 21):02d}:00"
        op = rng.random()
        try:
            if op < 0.5:
                service.create_booking(day, key, rng.choice(users), rng.randint(1, 8))
            elif op < 0.8:
                service.update_booking(day, key, duration=rng.randint(1, 8))
            else:
                service.delete_booking(day, key)
        except (BookingConflictError, BookingNotFoundError):
            pass
        assert overlapping_pairs(service.list_bookings()) == []

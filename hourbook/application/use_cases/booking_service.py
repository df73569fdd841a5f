from __future__ import annotations

import logging
from typing import Callable, TypeVar

from hourbook.application.exceptions import (
    BookingNotFoundError,
    StoreContentionError,
    VersionConflictError,
)
from hourbook.application.ports.document_store import DocumentStorePort
from hourbook.application.utils.booking_set import (
    from_document,
    to_document,
    with_booking,
    with_updates,
    without_booking,
)
from hourbook.application.utils.conflicts import check_create, check_resize, overlapping_pairs
from hourbook.domain.entities.booking import Booking, BookingSet

WRITE_RETRIES = 3

T = TypeVar("T")


class BookingService:
    """
    Server-side authority over one instance's bookings document.

    Every write re-validates the conflict rules against the stored document
    and lands with a version check, so two writers racing on the same
    document cannot silently drop each other's changes.
    """

    def __init__(self, store: DocumentStorePort, instance_slug: str) -> None:
        self._store = store
        self._slug = instance_slug
        self._logger = logging.getLogger(__name__)

    @property
    def document_key(self) -> str:
        return f"instance:{self._slug}:bookings"

    def snapshot(self) -> tuple[BookingSet, int]:
        """Current bookings and the document version they were read at (0 if never written)."""
        doc = self._store.get(self.document_key)
        if doc is None:
            return {}, 0
        bookings = from_document(doc.value)
        overlaps = overlapping_pairs(bookings)
        if overlaps:
            self._logger.warning(
                "Stored bookings overlap",
                extra={"reason": ", ".join(f"{d} {a}/{b}" for d, a, b in overlaps)},
            )
        return bookings, doc.version

    def list_bookings(self) -> BookingSet:
        return self.snapshot()[0]

    def create_booking(self, date_key: str, time_key: str, user: str, duration: int) -> Booking:
        booking = Booking(user=user, duration=duration)

        def apply(bookings: BookingSet) -> tuple[BookingSet, Booking]:
            check_create(bookings, date_key, time_key, duration)
            return with_booking(bookings, date_key, time_key, booking), booking

        created = self._write(apply)
        self._logger.info(
            "Booking created",
            extra={"date_key": date_key, "time_key": time_key, "user": user, "duration": duration},
        )
        return created

    def update_booking(
        self,
        date_key: str,
        time_key: str,
        user: str | None = None,
        duration: int | None = None,
    ) -> Booking:
        def apply(bookings: BookingSet) -> tuple[BookingSet, Booking]:
            current = bookings.get(date_key, {}).get(time_key)
            if current is None:
                raise BookingNotFoundError()
            if duration is not None and duration != current.duration:
                check_resize(bookings, date_key, time_key, current.duration, duration)
            updated = with_updates(bookings, date_key, time_key, user=user, duration=duration)
            return updated, updated[date_key][time_key]

        merged = self._write(apply)
        self._logger.info(
            "Booking updated",
            extra={"date_key": date_key, "time_key": time_key, "user": merged.user, "duration": merged.duration},
        )
        return merged

    def delete_booking(self, date_key: str, time_key: str) -> None:
        def apply(bookings: BookingSet) -> tuple[BookingSet, None]:
            if time_key not in bookings.get(date_key, {}):
                raise BookingNotFoundError()
            return without_booking(bookings, date_key, time_key), None

        self._write(apply)
        self._logger.info("Booking deleted", extra={"date_key": date_key, "time_key": time_key})

    def _write(self, mutate: Callable[[BookingSet], tuple[BookingSet, T]]) -> T:
        """Read-modify-write the whole document, re-reading when the version moved."""
        for attempt in range(1, WRITE_RETRIES + 1):
            bookings, version = self.snapshot()
            new_bookings, result = mutate(bookings)
            try:
                self._store.put(self.document_key, to_document(new_bookings), expected_version=version)
                return result
            except VersionConflictError as e:
                self._logger.warning(
                    "Bookings document changed during write",
                    extra={"reason": f"attempt {attempt}/{WRITE_RETRIES}", "error": str(e)},
                )
        raise StoreContentionError(f"Could not write {self.document_key} after {WRITE_RETRIES} attempts")

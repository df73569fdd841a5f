from __future__ import annotations

import asyncio
import json
import logging
import threading
from pathlib import Path

from hourbook.application.exceptions import BookingNotFoundError
from hourbook.application.ports.booking_repository import BookingRepositoryPort
from hourbook.application.utils.booking_set import (
    from_document,
    to_document,
    with_booking,
    with_updates,
    without_booking,
)
from hourbook.application.utils.conflicts import check_create, check_resize
from hourbook.application.utils.sanitize import validate_booking_fields
from hourbook.domain.entities.booking import Booking, BookingSet
from hourbook.domain.entities.instance_config import InstanceConfig


class LocalBookingRepository(BookingRepositoryPort):
    """
    On-device fallback when no bookings service is reachable.

    Keeps the same document shape as the hosted store in a single JSON file
    and applies the same validation and conflict rules before every write.
    Nobody else writes this file, so there is nothing to poll for.
    """

    def __init__(self, path: str = "./data/local/bookings.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()  # one read-check-write at a time
        self._logger = logging.getLogger(__name__)

    @property
    def polling_enabled(self) -> bool:
        return False

    def _read(self) -> BookingSet:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return from_document(json.load(f))
        except (json.JSONDecodeError, OSError, ValueError) as e:
            # Unreadable local data is treated as empty, same as a fresh device
            self._logger.error("Error reading local bookings", extra={"error": str(e)})
            return {}

    def _write(self, bookings: BookingSet) -> None:
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(to_document(bookings), f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    # Run in a worker thread via asyncio.to_thread

    def _create(self, date_key: str, time_key: str, user: str, duration: int) -> Booking:
        with self._lock:
            bookings = self._read()
            check_create(bookings, date_key, time_key, duration)
            booking = Booking(user=user, duration=duration)
            self._write(with_booking(bookings, date_key, time_key, booking))
            return booking

    def _update(self, date_key: str, time_key: str, user: str | None, duration: int | None) -> Booking:
        with self._lock:
            bookings = self._read()
            current = bookings.get(date_key, {}).get(time_key)
            if current is None:
                raise BookingNotFoundError()
            if duration is not None and duration != current.duration:
                check_resize(bookings, date_key, time_key, current.duration, duration)
            updated = with_updates(bookings, date_key, time_key, user=user, duration=duration)
            self._write(updated)
            return updated[date_key][time_key]

    def _delete(self, date_key: str, time_key: str) -> None:
        with self._lock:
            bookings = self._read()
            if time_key not in bookings.get(date_key, {}):
                raise BookingNotFoundError()
            self._write(without_booking(bookings, date_key, time_key))

    async def fetch_bookings(self) -> BookingSet | None:
        return await asyncio.to_thread(self._read)

    async def create_booking(self, date_key: str, time_key: str, user: str, duration: int) -> Booking:
        date_key, time_key, user, duration = validate_booking_fields(
            date_key, time_key, user, duration, require_user=True, require_duration=True
        )
        return await asyncio.to_thread(self._create, date_key, time_key, user, duration)

    async def update_booking(
        self,
        date_key: str,
        time_key: str,
        user: str | None = None,
        duration: int | None = None,
    ) -> Booking:
        date_key, time_key, user, duration = validate_booking_fields(date_key, time_key, user, duration)
        return await asyncio.to_thread(self._update, date_key, time_key, user, duration)

    async def delete_booking(self, date_key: str, time_key: str) -> None:
        date_key, time_key, _, _ = validate_booking_fields(date_key, time_key)
        await asyncio.to_thread(self._delete, date_key, time_key)

    async def fetch_config(self) -> InstanceConfig | None:
        return None

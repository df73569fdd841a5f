from __future__ import annotations

import logging
from typing import Callable

from hourbook.application.ports.booking_repository import BookingRepositoryPort
from hourbook.application.use_cases.polling_sync import DEFAULT_INTERVAL_SECONDS, PollingSync
from hourbook.application.utils import conflicts
from hourbook.application.utils.booking_set import (
    bookings_for_date,
    with_booking,
    with_updates,
    without_booking,
)
from hourbook.application.utils.time_grid import Slot, fits_in_day, hour_from_time_key, slots_for_day
from hourbook.domain.entities.booking import Booking, BookingSet
from hourbook.domain.entities.slot_status import SlotStatus

Listener = Callable[[BookingSet], None]


class BookingStore:
    """
    Client-side cache of every booking, kept in step with a repository.

    Mutations land in the cache before the repository call is awaited, so
    readers see them at once. When the repository rejects a mutation there is
    no targeted undo: the error is recorded and the whole cache is re-fetched,
    which is also what the background poll does every few seconds.
    """

    def __init__(
        self,
        repository: BookingRepositoryPort,
        poll_interval: float = DEFAULT_INTERVAL_SECONDS,
        polling_enabled: bool | None = None,
    ) -> None:
        self._repository = repository
        self._bookings: BookingSet = {}
        self._listeners: list[Listener] = []
        self._closed = False
        self.loading = True
        self.error: str | None = None
        self._logger = logging.getLogger(__name__)

        enabled = repository.polling_enabled if polling_enabled is None else polling_enabled
        self._sync: PollingSync[BookingSet] = PollingSync(
            repository.fetch_bookings,
            self._replace,
            interval=poll_interval,
            enabled=enabled,
        )

    @property
    def bookings(self) -> BookingSet:
        return self._bookings

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with the new snapshot after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, bookings: BookingSet) -> None:
        self._bookings = bookings
        for listener in list(self._listeners):
            try:
                listener(bookings)
            except Exception:
                self._logger.exception("Bookings listener failed")

    def _replace(self, bookings: BookingSet) -> None:
        if self._closed or bookings == self._bookings:
            return
        self._logger.debug("Replacing bookings cache from sync")
        self._set(bookings)

    # lifecycle

    async def start(self) -> None:
        await self.load()
        self._sync.start()

    async def close(self) -> None:
        self._closed = True
        await self._sync.stop()

    async def __aenter__(self) -> BookingStore:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            data = await self._repository.fetch_bookings()
            if not self._closed:
                self._set(data or {})
        except Exception as e:
            self._logger.error("Failed to load bookings", extra={"error": str(e)})
            self.error = str(e)
        finally:
            self.loading = False

    async def refresh(self) -> None:
        """Fetch now and replace the cache with whatever the repository holds."""
        await self._sync.trigger()

    async def _recover(self, action: str, error: Exception, date_key: str, time_key: str) -> None:
        self._logger.error(
            f"Failed to {action} booking",
            extra={"date_key": date_key, "time_key": time_key, "error": str(error)},
        )
        self.error = str(error)
        await self.refresh()

    # mutations

    async def create(self, date_key: str, time_key: str, user: str, duration: int) -> bool:
        """Add a booking optimistically. The caller has already checked `can_create`."""
        self._set(with_booking(self._bookings, date_key, time_key, Booking(user=user, duration=duration)))
        try:
            await self._repository.create_booking(date_key, time_key, user, duration)
        except Exception as e:
            await self._recover("create", e, date_key, time_key)
            return False
        return True

    async def update(
        self,
        date_key: str,
        time_key: str,
        user: str | None = None,
        duration: int | None = None,
    ) -> bool:
        self._set(with_updates(self._bookings, date_key, time_key, user=user, duration=duration))
        try:
            await self._repository.update_booking(date_key, time_key, user=user, duration=duration)
        except Exception as e:
            await self._recover("update", e, date_key, time_key)
            return False
        return True

    async def remove(self, date_key: str, time_key: str) -> bool:
        self._set(without_booking(self._bookings, date_key, time_key))
        try:
            await self._repository.delete_booking(date_key, time_key)
        except Exception as e:
            await self._recover("delete", e, date_key, time_key)
            return False
        return True

    async def book(self, date_key: str, hour: int, user: str, duration: int) -> bool:
        """Create a booking only if it fits the day and every hour is free."""
        if not fits_in_day(hour, duration) or not self.can_create(date_key, hour, duration):
            self._logger.info(
                "Booking not possible",
                extra={"date_key": date_key, "time_key": f"{hour:02d}:00", "duration": duration},
            )
            return False
        return await self.create(date_key, f"{hour:02d}:00", user, duration)

    async def resize(self, date_key: str, time_key: str, new_duration: int) -> bool:
        current = bookings_for_date(self._bookings, date_key).get(time_key)
        if current is None:
            return False
        start_hour = hour_from_time_key(time_key)
        if not fits_in_day(start_hour, new_duration):
            return False
        if not self.can_resize(date_key, time_key, start_hour, current.duration, new_duration):
            return False
        return await self.update(date_key, time_key, duration=new_duration)

    # reads against the current snapshot

    def bookings_for_date(self, date_key: str) -> dict[str, Booking]:
        return bookings_for_date(self._bookings, date_key)

    def status_of(self, date_key: str, time_key: str, hour: int) -> SlotStatus:
        return conflicts.status_of(self._bookings, date_key, time_key, hour)

    def can_create(self, date_key: str, start_hour: int, duration: int) -> bool:
        return conflicts.can_create(self._bookings, date_key, start_hour, duration)

    def can_resize(
        self,
        date_key: str,
        time_key: str,
        start_hour: int,
        current_duration: int,
        new_duration: int,
    ) -> bool:
        return conflicts.can_resize(self._bookings, date_key, time_key, start_hour, current_duration, new_duration)

    def day_statuses(self, date_key: str) -> list[tuple[Slot, SlotStatus]]:
        day_slots = [Slot(hour=s.hour, time_key=s.time_key, date_key=date_key) for s in slots_for_day()]
        return [(slot, self.status_of(date_key, slot.time_key, slot.hour)) for slot in day_slots]

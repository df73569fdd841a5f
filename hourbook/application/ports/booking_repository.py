from __future__ import annotations

from abc import ABC, abstractmethod

from hourbook.domain.entities.booking import Booking, BookingSet
from hourbook.domain.entities.instance_config import InstanceConfig


class BookingRepositoryPort(ABC):
    @property
    def polling_enabled(self) -> bool:
        """Whether other writers can change the data behind this repository."""
        return True

    @abstractmethod
    async def fetch_bookings(self) -> BookingSet | None:
        """Fetch the entire booking set. None means "nothing to report"."""
        raise NotImplementedError

    @abstractmethod
    async def create_booking(self, date_key: str, time_key: str, user: str, duration: int) -> Booking:
        """Create a booking. Raises BookingConflictError if the slots are taken."""
        raise NotImplementedError

    @abstractmethod
    async def update_booking(
        self,
        date_key: str,
        time_key: str,
        user: str | None = None,
        duration: int | None = None,
    ) -> Booking:
        """Merge the given fields into an existing booking. Returns the merged booking."""
        raise NotImplementedError

    @abstractmethod
    async def delete_booking(self, date_key: str, time_key: str) -> None:
        """Delete a booking. Raises BookingNotFoundError if there is none."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_config(self) -> InstanceConfig | None:
        """Fetch instance configuration. None when this backend has none."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

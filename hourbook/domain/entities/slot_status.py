from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from hourbook.domain.entities.booking import Booking


@dataclass(frozen=True)
class Available:
    status: ClassVar[str] = "available"


@dataclass(frozen=True)
class Booked:
    """The slot is the start hour of `booking`."""

    booking: Booking
    status: ClassVar[str] = "booked"


@dataclass(frozen=True)
class Blocked:
    """The slot is a continuation hour of the booking stored at `start_key`."""

    booking: Booking
    start_key: str
    start_hour: int
    status: ClassVar[str] = "blocked"


SlotStatus = Union[Available, Booked, Blocked]

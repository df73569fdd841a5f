"""
Slot status and overlap rules for a BookingSet snapshot.

A booking stored at hour H with duration D occupies [H, H+D). Hour H reports
`booked`, hours H+1 .. H+D-1 report `blocked`, and H+D is free again.
Everything here is pure; callers own the snapshot.
"""

from __future__ import annotations

from itertools import combinations

from hourbook.application.exceptions import (
    DurationConflictError,
    ExtendConflictError,
    OutsideWindowError,
    SlotAlreadyBookedError,
)
from hourbook.application.utils.booking_set import bookings_for_date
from hourbook.application.utils.time_grid import END_HOUR, START_HOUR, hour_from_time_key
from hourbook.domain.entities.booking import Booking, BookingSet
from hourbook.domain.entities.slot_status import Available, Blocked, Booked, SlotStatus


def _slot_key(hour: int) -> str:
    return f"{hour:02d}:00"


def _start_hour(key: str) -> int | None:
    try:
        return hour_from_time_key(key)
    except ValueError:
        return None


def find_blocking(day_bookings: dict[str, Booking], hour: int) -> Blocked | None:
    """Return the booking whose interior covers `hour`, if any."""
    for key, booking in day_bookings.items():
        start = _start_hour(key)
        if start is None:
            continue
        duration = booking.duration or 1
        if start < hour < start + duration:
            return Blocked(booking=booking, start_key=key, start_hour=start)
    return None


def status_of(bookings: BookingSet, date_key: str, time_key: str, hour: int) -> SlotStatus:
    day = bookings_for_date(bookings, date_key)
    booking = day.get(time_key)
    if booking is not None:
        return Booked(booking=booking)
    blocked = find_blocking(day, hour)
    if blocked is not None:
        return blocked
    return Available()


def can_create(bookings: BookingSet, date_key: str, start_hour: int, duration: int) -> bool:
    """
    True when every hour in [start_hour, start_hour + duration) is free.

    The daily window is not checked here; callers must reject ranges that
    run past END_HOUR themselves.
    """
    day = bookings_for_date(bookings, date_key)
    for hour in range(start_hour, start_hour + duration):
        if _slot_key(hour) in day:
            return False
        if find_blocking(day, hour) is not None:
            return False
    return True


def can_resize(
    bookings: BookingSet,
    date_key: str,
    time_key: str,
    start_hour: int,
    current_duration: int,
    new_duration: int,
) -> bool:
    """Only the hours added beyond `current_duration` are checked."""
    day = bookings_for_date(bookings, date_key)
    for offset in range(current_duration, new_duration):
        hour = start_hour + offset
        if _slot_key(hour) in day:
            return False
        blocked = find_blocking(day, hour)
        if blocked is not None and blocked.start_key != time_key:
            return False
    return True


def _check_window(start_hour: int, duration: int) -> None:
    if start_hour < START_HOUR or start_hour >= END_HOUR:
        raise OutsideWindowError(_slot_key(start_hour))
    if start_hour + duration > END_HOUR:
        raise OutsideWindowError(_slot_key(END_HOUR))


def check_create(bookings: BookingSet, date_key: str, time_key: str, duration: int) -> None:
    """Raise the conflict that stops a new booking, or return None."""
    start_hour = hour_from_time_key(time_key)
    _check_window(start_hour, duration)
    day = bookings_for_date(bookings, date_key)

    if time_key in day or find_blocking(day, start_hour) is not None:
        raise SlotAlreadyBookedError(time_key)

    for hour in range(start_hour + 1, start_hour + duration):
        key = _slot_key(hour)
        if key in day or find_blocking(day, hour) is not None:
            raise DurationConflictError(key)


def check_resize(
    bookings: BookingSet,
    date_key: str,
    time_key: str,
    current_duration: int,
    new_duration: int,
) -> None:
    """Raise the conflict that stops extending a booking. Shrinking always passes."""
    if new_duration <= current_duration:
        return
    start_hour = hour_from_time_key(time_key)
    _check_window(start_hour, new_duration)
    day = bookings_for_date(bookings, date_key)

    for offset in range(current_duration, new_duration):
        hour = start_hour + offset
        key = _slot_key(hour)
        if key in day:
            raise ExtendConflictError(key)
        blocked = find_blocking(day, hour)
        if blocked is not None and blocked.start_key != time_key:
            raise ExtendConflictError(key)


def overlapping_pairs(bookings: BookingSet) -> list[tuple[str, str, str]]:
    """List (date_key, key_a, key_b) for every pair of bookings sharing an hour."""
    found: list[tuple[str, str, str]] = []
    for dk, day in sorted(bookings.items()):
        spans = []
        for key, booking in day.items():
            start = _start_hour(key)
            if start is not None:
                spans.append((start, start + (booking.duration or 1), key))
        spans.sort()
        for (a_start, a_end, a_key), (b_start, b_end, b_key) in combinations(spans, 2):
            if a_start < b_end and b_start < a_end:
                found.append((dk, a_key, b_key))
    return found

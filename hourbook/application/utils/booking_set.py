from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from hourbook.domain.entities.booking import Booking, BookingSet

logger = logging.getLogger(__name__)


def bookings_for_date(bookings: BookingSet, date_key: str) -> dict[str, Booking]:
    return bookings.get(date_key) or {}


def with_booking(bookings: BookingSet, date_key: str, time_key: str, booking: Booking) -> BookingSet:
    """Return a copy of `bookings` with `booking` stored at date/time."""
    result = dict(bookings)
    day = dict(result.get(date_key) or {})
    day[time_key] = booking
    result[date_key] = day
    return result


def with_updates(
    bookings: BookingSet,
    date_key: str,
    time_key: str,
    user: str | None = None,
    duration: int | None = None,
) -> BookingSet:
    """Merge the provided fields into an existing booking. Unknown slots are left alone."""
    current = bookings.get(date_key, {}).get(time_key)
    if current is None:
        return bookings
    changes: dict[str, Any] = {}
    if user is not None:
        changes["user"] = user
    if duration is not None:
        changes["duration"] = duration
    return with_booking(bookings, date_key, time_key, replace(current, **changes))


def without_booking(bookings: BookingSet, date_key: str, time_key: str) -> BookingSet:
    """Remove a booking; the date entry goes too once it has no bookings left."""
    if time_key not in bookings.get(date_key, {}):
        return bookings
    result = dict(bookings)
    day = dict(result[date_key])
    del day[time_key]
    if day:
        result[date_key] = day
    else:
        del result[date_key]
    return result


def to_document(bookings: BookingSet) -> dict[str, dict[str, dict[str, Any]]]:
    return {
        dk: {tk: booking.to_dict() for tk, booking in day.items()}
        for dk, day in bookings.items()
        if day
    }


def from_document(doc: Any) -> BookingSet:
    """Parse the stored JSON shape. `None` reads as an empty set."""
    if doc is None:
        return {}
    if not isinstance(doc, Mapping):
        raise ValueError("Bookings document must be an object")
    result: BookingSet = {}
    for dk, day in doc.items():
        if not isinstance(day, Mapping):
            logger.warning("Skipping unreadable bookings day", extra={"date_key": str(dk)})
            continue
        parsed = _parse_day(str(dk), day)
        if parsed:
            result[str(dk)] = parsed
    return result


def _parse_day(date_key: str, day: Mapping[str, Any]) -> dict[str, Booking]:
    # Unreadable entries are dropped; the rest of the day still loads
    parsed: dict[str, Booking] = {}
    for tk, entry in day.items():
        if not isinstance(entry, Mapping):
            continue
        try:
            parsed[str(tk)] = Booking.from_dict(entry)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Skipping unreadable booking entry",
                extra={"date_key": date_key, "time_key": str(tk), "error": str(e)},
            )
    return parsed

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

# Bookable window: 06:00 - 22:00, one slot per hour
START_HOUR = 6
END_HOUR = 22
SLOT_COUNT = END_HOUR - START_HOUR

_TIME_KEY_RE = re.compile(r"^(\d{2}):00$")
_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Slot:
    hour: int
    time_key: str
    date_key: str | None = None


def time_key(hour: int) -> str:
    """Format an hour as the "HH:00" map key."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range: {hour}")
    return f"{hour:02d}:00"


def hour_from_time_key(key: str) -> int:
    match = _TIME_KEY_RE.match(key or "")
    if not match:
        raise ValueError(f"Invalid time key: {key!r}")
    hour = int(match.group(1))
    if hour > 23:
        raise ValueError(f"Invalid time key: {key!r}")
    return hour


def date_key(day: date) -> str:
    """Format a date as the "YYYY-MM-DD" map key."""
    return day.strftime("%Y-%m-%d")


def parse_date_key(key: str) -> date:
    if not _DATE_KEY_RE.match(key or ""):
        raise ValueError(f"Invalid date key: {key!r}")
    return date.fromisoformat(key)


def slots_for_day(day: date | None = None) -> list[Slot]:
    dk = date_key(day) if day is not None else None
    return [Slot(hour=h, time_key=time_key(h), date_key=dk) for h in range(START_HOUR, END_HOUR)]


def fits_in_day(start_hour: int, duration: int) -> bool:
    return duration >= 1 and START_HOUR <= start_hour and start_hour + duration <= END_HOUR


def is_past(day: date, hour: int, now: datetime | None = None) -> bool:
    """
    A slot is past once the next hour begins, so the current hour stays
    bookable for its whole sixty minutes.
    """
    if now is None:
        now = datetime.now()
    slot_end = datetime.combine(day, time(0), tzinfo=now.tzinfo) + timedelta(hours=hour + 1)
    return now >= slot_end


def is_today(day: date, now: datetime | None = None) -> bool:
    if now is None:
        now = datetime.now()
    return day == now.date()


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def start_of_week(day: date) -> date:
    """Monday of the week containing `day` (Sunday belongs to the week before)."""
    return day - timedelta(days=day.weekday())


def week_days(start: date) -> list[date]:
    return [add_days(start, i) for i in range(7)]

"""Input normalisation shared by the HTTP schemas and the on-device store."""

from __future__ import annotations

import re
from typing import Any

from hourbook.application.exceptions import BookingValidationError
from hourbook.application.utils.time_grid import hour_from_time_key, parse_date_key

MAX_TEXT_LENGTH = 100
MIN_DURATION = 1
MAX_DURATION = 8

_TAG_RE = re.compile(r"<[^>]*>")
_UNSAFE_CHARS_RE = re.compile(r"[<>'\"]")


def sanitize_text(value: str) -> str:
    """Strip markup and quote characters, trim, and cap the length."""
    cleaned = _TAG_RE.sub("", value)
    cleaned = _UNSAFE_CHARS_RE.sub("", cleaned)
    return cleaned.strip()[:MAX_TEXT_LENGTH]


def validate_date_key(value: Any) -> str:
    try:
        parse_date_key(str(value))
    except ValueError:
        raise ValueError("dateKey must be a real date in YYYY-MM-DD format")
    return str(value)


def validate_time_key(value: Any) -> str:
    try:
        hour_from_time_key(str(value))
    except ValueError:
        raise ValueError("timeKey must be in HH:00 format")
    return str(value)


def validate_duration(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("duration must be an integer")
    try:
        duration = int(value)
    except (TypeError, ValueError):
        raise ValueError("duration must be an integer")
    if duration != value and not isinstance(value, str):
        raise ValueError("duration must be an integer")
    if not MIN_DURATION <= duration <= MAX_DURATION:
        raise ValueError(f"duration must be between {MIN_DURATION} and {MAX_DURATION}")
    return duration


def validate_user(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("user must be a string")
    user = sanitize_text(value)
    if not user:
        raise ValueError("user must not be empty")
    return user


def validate_booking_fields(
    date_key: Any,
    time_key: Any,
    user: Any = None,
    duration: Any = None,
    *,
    require_user: bool = False,
    require_duration: bool = False,
) -> tuple[str, str, str | None, int | None]:
    """
    Validate the identifying keys plus any provided fields in one pass.

    Collects every failing field before raising so the error names them all.
    """
    failed: list[str] = []
    checked: dict[str, Any] = {}
    candidates = (
        ("dateKey", date_key, validate_date_key, True),
        ("timeKey", time_key, validate_time_key, True),
        ("user", user, validate_user, require_user),
        ("duration", duration, validate_duration, require_duration),
    )
    for name, value, validator, required in candidates:
        if value is None:
            if required:
                failed.append(name)
            checked[name] = None
            continue
        try:
            checked[name] = validator(value)
        except ValueError:
            failed.append(name)
    if failed:
        raise BookingValidationError(f"Missing or invalid fields: {', '.join(failed)}", failed)
    return checked["dateKey"], checked["timeKey"], checked["user"], checked["duration"]

from __future__ import annotations


class BookingValidationError(ValueError):
    """Raised when booking input is malformed or out of range."""

    code = "validation_error"

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


class BookingConflictError(RuntimeError):
    """Raised when a booking would overlap an existing one."""

    code = "conflict"

    def __init__(self, message: str, time_key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.time_key = time_key

    def to_dict(self) -> dict[str, str | None]:
        return {"error": self.message, "code": self.code, "timeKey": self.time_key}


class SlotAlreadyBookedError(BookingConflictError):
    """Raised when the requested start slot is already taken."""

    code = "slot_already_booked"

    def __init__(self, time_key: str | None = None, message: str = "Slot already booked") -> None:
        super().__init__(message, time_key)


class DurationConflictError(BookingConflictError):
    """Raised when a later hour of a new booking is already taken."""

    code = "duration_conflict"

    def __init__(self, time_key: str, message: str | None = None) -> None:
        super().__init__(message or f"Slot {time_key} conflicts with booking duration", time_key)


class ExtendConflictError(BookingConflictError):
    """Raised when extending a booking runs into another booking."""

    code = "extend_conflict"

    def __init__(self, time_key: str, message: str | None = None) -> None:
        super().__init__(message or f"Cannot extend: slot {time_key} is already booked", time_key)


class OutsideWindowError(BookingConflictError):
    """Raised when a booking would start before or run past the daily window."""

    code = "outside_window"

    def __init__(self, time_key: str, message: str | None = None) -> None:
        super().__init__(message or f"Slot {time_key} is outside the bookable hours", time_key)


_CONFLICTS_BY_CODE: dict[str, type[BookingConflictError]] = {
    cls.code: cls
    for cls in (SlotAlreadyBookedError, DurationConflictError, ExtendConflictError, OutsideWindowError)
}


def conflict_from_payload(payload: dict) -> BookingConflictError:
    """Rebuild a conflict error from a structured `{"error", "code", "timeKey"}` body."""
    message = str(payload.get("error") or "Booking conflict")
    time_key = payload.get("timeKey")
    cls = _CONFLICTS_BY_CODE.get(str(payload.get("code") or ""))
    if cls is None:
        return BookingConflictError(message, time_key)
    if cls is SlotAlreadyBookedError:
        return SlotAlreadyBookedError(time_key, message)
    return cls(time_key or "", message)


class BookingNotFoundError(LookupError):
    """Raised when no booking starts at the given date and time."""

    code = "booking_not_found"

    def __init__(self, message: str = "Booking not found") -> None:
        super().__init__(message)
        self.message = message


class BookingsUpstreamError(RuntimeError):
    """Raised when the bookings service fails (timeouts, network errors, service unavailable)."""
    pass


class VersionConflictError(RuntimeError):
    """Raised when a document changed between read and write."""

    def __init__(self, key: str, expected: int | None, actual: int | None) -> None:
        super().__init__(f"Document {key} is at version {actual}, expected {expected}")
        self.key = key
        self.expected = expected
        self.actual = actual


class StoreContentionError(RuntimeError):
    """Raised when a write keeps losing the version race."""

    code = "store_contention"


class ConfigUnavailableError(RuntimeError):
    """Raised when instance configuration cannot be loaded and no fallback applies."""
    pass

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Booking:
    user: str
    duration: int = 1  # consecutive hourly slots, starting at the owning time key

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.user, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Booking:
        # Stored documents written by older clients may omit or zero the duration
        duration = data.get("duration") or 1
        return cls(user=str(data.get("user", "")), duration=int(duration))


# dateKey ("YYYY-MM-DD") -> timeKey ("HH:00") -> Booking
BookingSet = dict[str, dict[str, Booking]]

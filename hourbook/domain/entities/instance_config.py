from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


DEFAULT_TITLE = "CPS Software Booking"


@dataclass(frozen=True)
class UserEntry:
    name: str
    key: str  # single-letter shortcut, unique per instance


DEFAULT_USERS: tuple[UserEntry, ...] = (
    UserEntry(name="Jack", key="j"),
    UserEntry(name="Bonnie", key="b"),
    UserEntry(name="Giuliano", key="g"),
    UserEntry(name="John", key="h"),
    UserEntry(name="Rue", key="r"),
    UserEntry(name="Joel", key="l"),
)


@dataclass(frozen=True)
class InstanceConfig:
    slug: str
    title: str = DEFAULT_TITLE
    users: tuple[UserEntry, ...] = DEFAULT_USERS
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "users": [{"name": u.name, "key": u.key} for u in self.users],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], slug: str = "") -> InstanceConfig:
        users = tuple(
            UserEntry(name=str(u.get("name", "")), key=str(u.get("key", "")))
            for u in data.get("users") or []
            if isinstance(u, Mapping)
        )
        kwargs: dict[str, Any] = {
            "slug": str(data.get("slug") or slug),
            "title": str(data.get("title") or DEFAULT_TITLE),
            "users": users or DEFAULT_USERS,
        }
        if data.get("createdAt"):
            kwargs["created_at"] = str(data["createdAt"])
        return cls(**kwargs)


def default_config(slug: str) -> InstanceConfig:
    return InstanceConfig(slug=slug)

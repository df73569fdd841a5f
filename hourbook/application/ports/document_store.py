from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VersionedDocument:
    value: Any
    version: int


class DocumentStorePort(ABC):
    @abstractmethod
    def get(self, key: str) -> VersionedDocument | None:
        """Read a whole document and its version. None if the key was never written."""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any, expected_version: int | None = None) -> int:
        """
        Replace a whole document and return its new version.

        With `expected_version` set, the write only lands if the stored
        version still matches (0 meaning "not written yet"); otherwise
        VersionConflictError is raised and nothing changes.
        """
        raise NotImplementedError

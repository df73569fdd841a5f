from __future__ import annotations

import copy
import threading
from typing import Any

from hourbook.application.exceptions import VersionConflictError
from hourbook.application.ports.document_store import DocumentStorePort, VersionedDocument


class MemoryDocumentStore(DocumentStorePort):
    def __init__(self) -> None:
        self._documents: dict[str, VersionedDocument] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> VersionedDocument | None:
        with self._lock:
            doc = self._documents.get(key)
            if doc is None:
                return None
            return VersionedDocument(value=copy.deepcopy(doc.value), version=doc.version)

    def put(self, key: str, value: Any, expected_version: int | None = None) -> int:
        with self._lock:
            current = self._documents.get(key)
            current_version = current.version if current else 0
            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(key, expected_version, current_version)
            new_version = current_version + 1
            self._documents[key] = VersionedDocument(value=copy.deepcopy(value), version=new_version)
            return new_version

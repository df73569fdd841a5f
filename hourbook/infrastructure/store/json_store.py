from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any

from hourbook.application.exceptions import VersionConflictError
from hourbook.application.ports.document_store import DocumentStorePort, VersionedDocument

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]")


class JsonDocumentStore(DocumentStorePort):
    def __init__(self, data_dir: str = "./data/kv") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, key: str) -> threading.Lock:
        """Get or create a lock for a document key."""
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        """Get the file path for a document key."""
        return self._data_dir / f"{_UNSAFE_FILENAME_RE.sub('_', key)}.json"

    def _load(self, key: str) -> VersionedDocument | None:
        """Load a document from disk; a missing or corrupted file reads as None."""
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return None

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._logger.warning("Unreadable document file", extra={"reason": key, "error": str(e)})
            return None

        if not isinstance(data, dict) or "value" not in data:
            self._logger.warning("Malformed document file", extra={"reason": key})
            return None
        return VersionedDocument(value=data["value"], version=int(data.get("version", 1)))

    def _save(self, key: str, value: Any, version: int) -> None:
        """Save a document to disk atomically."""
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        payload = {"key": key, "version": version, "value": value}

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def get(self, key: str) -> VersionedDocument | None:
        with self._get_lock(key):
            return self._load(key)

    def put(self, key: str, value: Any, expected_version: int | None = None) -> int:
        with self._get_lock(key):
            current = self._load(key)
            current_version = current.version if current else 0
            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(key, expected_version, current_version)
            new_version = current_version + 1
            self._save(key, value, new_version)
            return new_version

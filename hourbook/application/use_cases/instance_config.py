from __future__ import annotations

import logging
from typing import Any, Mapping

from hourbook.application.ports.document_store import DocumentStorePort
from hourbook.domain.entities.instance_config import InstanceConfig, default_config


class InstanceConfigService:
    def __init__(self, store: DocumentStorePort, instance_slug: str) -> None:
        self._store = store
        self._slug = instance_slug
        self._logger = logging.getLogger(__name__)

    @property
    def document_key(self) -> str:
        return f"instance:{self._slug}:config"

    def get_config(self) -> InstanceConfig:
        """Stored config for this instance, or the built-in defaults for a fresh one."""
        doc = self._store.get(self.document_key)
        if doc is None or not isinstance(doc.value, Mapping):
            self._logger.info("No stored config; using defaults", extra={"reason": self._slug})
            return default_config(self._slug)
        return InstanceConfig.from_dict(doc.value, slug=self._slug)

    def save_config(self, config: InstanceConfig | Mapping[str, Any]) -> InstanceConfig:
        if not isinstance(config, InstanceConfig):
            config = InstanceConfig.from_dict(config, slug=self._slug)
        self._store.put(self.document_key, config.to_dict())
        return config

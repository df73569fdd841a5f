from __future__ import annotations

import logging

from hourbook.application.exceptions import ConfigUnavailableError
from hourbook.application.ports.booking_repository import BookingRepositoryPort
from hourbook.domain.entities.instance_config import InstanceConfig, default_config


class ConfigLoader:
    """Loads instance config for a client, falling back to the built-in user list."""

    def __init__(self, repository: BookingRepositoryPort, instance_slug: str, allow_fallback: bool = True) -> None:
        self._repository = repository
        self._slug = instance_slug
        self._allow_fallback = allow_fallback
        self.config: InstanceConfig | None = None
        self.loading = False
        self.error: str | None = None
        self._logger = logging.getLogger(__name__)

    async def load(self) -> InstanceConfig:
        self.loading = True
        self.error = None
        try:
            try:
                config = await self._repository.fetch_config()
            except Exception as e:
                if not self._allow_fallback:
                    self.error = str(e)
                    raise ConfigUnavailableError(f"Instance configuration unavailable: {e}") from e
                self._logger.warning("Failed to fetch config, using fallback", extra={"error": str(e)})
                config = None

            if config is None:
                if not self._allow_fallback:
                    self.error = "Instance configuration unavailable"
                    raise ConfigUnavailableError(self.error)
                config = default_config(self._slug)

            self.config = config
            return config
        finally:
            self.loading = False

    async def retry(self) -> InstanceConfig:
        return await self.load()

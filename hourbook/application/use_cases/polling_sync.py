from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")

DEFAULT_INTERVAL_SECONDS = 7.0


class PollingSync(Generic[T]):
    """
    Background refresh: every `interval` seconds call `fetch` and hand a
    non-None result to `on_update`.

    Polls never overlap. The timer waits for each poll to finish before
    sleeping again, and `trigger()` joins a poll that is already in flight
    instead of starting a second one. Fetch errors are logged and dropped so
    a flaky network never reaches the user.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T | None]],
        on_update: Callable[[T], None],
        interval: float = DEFAULT_INTERVAL_SECONDS,
        enabled: bool = True,
    ) -> None:
        self._fetch = fetch
        self._on_update = on_update
        self._interval = interval
        self._enabled = enabled
        self._task: asyncio.Task | None = None
        self._in_flight: asyncio.Future | None = None
        self._active = True
        self._logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Start the timer. Must be called from inside a running event loop."""
        if not self._active or not self._enabled or self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        self._active = False
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    async def trigger(self) -> None:
        """Poll now, outside the timer cadence."""
        if self._in_flight is None or self._in_flight.done():
            self._in_flight = asyncio.ensure_future(self._poll())
        await asyncio.shield(self._in_flight)

    async def _run(self) -> None:
        while self._active:
            await asyncio.sleep(self._interval)
            await self.trigger()

    async def _poll(self) -> None:
        if not self._active:
            return
        try:
            data = await self._fetch()
            # Results that land after stop() belong to nobody
            if self._active and data is not None:
                self._on_update(data)
        except Exception as e:
            self._logger.warning("Polling sync failed", extra={"error": str(e)})

"""
PollingTimer — fire a callback now, then once per interval, until stopped.

The callback is synchronous and is expected to schedule its own work
(e.g. create a refresh task). The timer never waits on that work, so a slow
fetch does not delay the next tick, and stopping the timer never cancels
work already started.
"""

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PollingTimer:
    def __init__(
        self,
        callback: Callable[[], object],
        interval_seconds: float,
        sleep: Sleep = asyncio.sleep,
        name: str = "polling-timer",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._callback = callback
        self._interval = interval_seconds
        self._sleep = sleep
        self._name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Fire the first tick synchronously, then keep ticking in the background."""
        if self.running:
            return
        self._callback()
        self._task = asyncio.create_task(self._run(), name=self._name)
        logger.info("%s started (every %.0f s)", self._name, self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("%s stopped", self._name)

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            try:
                self._callback()
            except Exception:
                logger.exception("%s tick failed; next tick in %.0f s", self._name, self._interval)

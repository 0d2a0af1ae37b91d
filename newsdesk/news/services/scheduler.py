"""
Periodic background refresh for a feed session.

One repeating timer per orchestrator. Each tick awaits the refresh callback
before the next delay starts, so ticks never overlap one another. After a
failed tick the delay doubles, up to ``max_backoff``; a successful tick
restores the base interval.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class AutoRefreshScheduler:

    def __init__(
        self,
        callback: Callable[[], Awaitable[bool]],
        interval: float,
        max_backoff: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "auto-refresh",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._callback = callback
        self.interval = interval
        self.max_backoff = max(max_backoff, interval) if max_backoff is not None else interval
        self._sleep = sleep
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self.consecutive_failures = 0
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_delay(self) -> float:
        if self.consecutive_failures == 0:
            return self.interval
        return min(self.interval * (2 ** self.consecutive_failures), self.max_backoff)

    def start(self) -> None:
        """Start the timer. Calling start on a running scheduler is a no-op."""
        if self.is_running:
            return
        self.consecutive_failures = 0
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info("Auto-refresh scheduled", scheduler=self.name, interval_seconds=self.interval)

    async def stop(self) -> None:
        """Cancel the timer and wait until it has fully exited."""
        task, self._task = self._task, None
        if task is None or task.done():
            return

        task.cancel()
        if task is asyncio.current_task():
            # Stopped from inside a tick; cancellation lands at the next await
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Auto-refresh stopped", scheduler=self.name, ticks=self.ticks)

    async def restart(self) -> None:
        await self.stop()
        self.start()

    async def _run(self) -> None:
        while True:
            await self._sleep(self.next_delay())
            self.ticks += 1

            try:
                succeeded = await self._callback()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Auto-refresh tick crashed", scheduler=self.name, error=str(e), exc_info=e)
                succeeded = False

            if succeeded:
                self.consecutive_failures = 0
            else:
                self.consecutive_failures += 1
                logger.info(
                    "Auto-refresh backing off",
                    scheduler=self.name,
                    failures=self.consecutive_failures,
                    next_delay_seconds=self.next_delay()
                )

"""Periodic poll timer on the asyncio event loop."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class PollTimer:
    """Runs an async callback every ``interval`` seconds until stopped.

    stop() is synchronous and idempotent: once it returns the callback will
    not be invoked again, and a tick that is mid-flight is cancelled.
    The background task ends with the callback's exception if a tick
    raises; ``task`` exposes it so the owner can watch for that.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self, interval: float, on_tick: TickCallback) -> None:
        """Start ticking; a running timer is stopped and restarted."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.stop()
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run(interval, on_tick, self._generation),
            name="threadchat-poll-timer",
        )
        logger.debug("Poll timer started (every %.2fs)", interval)

    def stop(self) -> None:
        if self._task is None:
            return
        # Bumping the generation stops a tick that is between sleep and call.
        self._generation += 1
        if not self._task.done():
            self._task.cancel()
            logger.debug("Poll timer stopped")
        self._task = None

    async def _run(self, interval: float, on_tick: TickCallback, generation: int) -> None:
        while True:
            await asyncio.sleep(interval)
            if generation != self._generation:
                return
            await on_tick()

"""Periodic background purge of expired in-memory state (tokens, rate-limit windows)."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicSweeper:
    """
    Run fn every interval_seconds on the event loop until stopped.

    fn must be quick (a single lock acquisition); request handling is never
    blocked on the sweep. Errors are logged and the next tick still runs.
    """

    def __init__(self, name: str, interval_seconds: float, fn: Callable[[], int]) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self.fn = fn
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"sweeper:{self.name}"
        )
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def run_once(self) -> int:
        removed = self.fn()
        if removed:
            logger.info("Sweep %s: removed=%s", self.name, removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.run_once()
            except Exception as e:
                logger.exception("Sweep %s failed: %s", self.name, e)

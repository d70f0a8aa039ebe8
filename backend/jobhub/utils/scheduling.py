from __future__ import annotations
import asyncio
import logging
from collections.abc import Awaitable, Callable

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run a coroutine function every `interval` seconds until cancelled.

    Each task owns an AsyncIOScheduler bound to the running loop; the
    scheduled `Job` is the cancel handle.
    """

    def __init__(self, interval: float, func: Callable[[], Awaitable[object]], name: str = "periodic"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.func = func
        self.name = name
        self._scheduler: AsyncIOScheduler | None = None
        self._job: Job | None = None

    @property
    def running(self) -> bool:
        return self._job is not None and self._scheduler is not None and self._scheduler.running

    @property
    def job(self) -> Job | None:
        return self._job

    async def _tick(self) -> None:
        try:
            await self.func()
        except Exception:  # noqa: BLE001
            logger.exception("%s tick failed", self.name)

    def start(self) -> "PeriodicTask":
        if self.running:
            return self
        self._scheduler = AsyncIOScheduler()
        self._scheduler.start()
        self._job = self._scheduler.add_job(
            self._tick,
            IntervalTrigger(seconds=self.interval),
            id=self.name,
            name=self.name,
            max_instances=1,
            coalesce=True,
        )
        return self

    def cancel(self) -> None:
        if self._job is not None:
            self._job.remove()
            self._job = None
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None

    async def stop(self) -> None:
        self.cancel()
        # Let ticks cancelled by the shutdown unwind.
        await asyncio.sleep(0)

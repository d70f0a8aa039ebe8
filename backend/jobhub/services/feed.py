from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial

from jobhub.core.config import settings
from jobhub.pipeline.canonical import CanonicalJob
from jobhub.pipeline.views import TimeFilter, sort_jobs
from jobhub.services.aggregation import AggregationResult, Aggregator, SourceOutcome
from jobhub.services.sample_jobs import generate_sample_jobs
from jobhub.utils.scheduling import PeriodicTask

logger = logging.getLogger(__name__)


class JobFeed:
    """Time-window and sort view over aggregated jobs.

    Time windows refetch from every source; salary orders re-sort the jobs
    already held. Each refetch is stamped with a cycle number and only the
    newest cycle may commit, older in-flight cycles are cancelled.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        *,
        sample_factory: Callable[[], list[CanonicalJob]] | None = None,
    ):
        self.aggregator = aggregator
        self.sample_factory = sample_factory or partial(generate_sample_jobs, settings.sample_jobs_count)
        self.current_filter = TimeFilter.LATEST
        self.window = TimeFilter.LATEST
        self.jobs: list[CanonicalJob] = []
        self.outcomes: list[SourceOutcome] = []
        self.using_fallback = False
        self.last_result: AggregationResult | None = None
        self._last_good: list[CanonicalJob] | None = None
        self._cycle = 0
        self._inflight: asyncio.Task | None = None
        self._refresher: PeriodicTask | None = None

    @property
    def cycle(self) -> int:
        return self._cycle

    async def load(self) -> list[CanonicalJob]:
        return await self._refetch(self.window)

    async def set_filter(self, value: TimeFilter | str) -> list[CanonicalJob]:
        value = TimeFilter(value)
        if value.is_salary_sort:
            self.current_filter = value
            self.jobs = sort_jobs(self.jobs, value)
            return self.jobs
        return await self._refetch(value, value)

    async def refresh(self) -> list[CanonicalJob]:
        return await self._refetch(self.window)

    async def _refetch(self, window: TimeFilter, order: TimeFilter | None = None) -> list[CanonicalJob]:
        """Fetch `window` and commit it.

        `order` is given only by a time-window transition; loads and refreshes
        commit under whatever order is current at commit time.
        """
        self._cycle += 1
        cycle = self._cycle
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.create_task(self.aggregator.run(window), name=f"aggregation-{cycle}")
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and cycle != self._cycle:
                logger.debug("aggregation cycle %s superseded", cycle)
                return self.jobs
            raise

        if cycle != self._cycle:
            logger.debug("discarding stale aggregation cycle %s", cycle)
            return self.jobs
        self._commit(result, window, order)
        return self.jobs

    def _commit(self, result: AggregationResult, window: TimeFilter, order: TimeFilter | None) -> None:
        self.last_result = result
        self.outcomes = result.outcomes
        self.window = window
        if order is not None:
            self.current_filter = order
        order = self.current_filter
        if result.all_failed:
            fallback = self._last_good if self._last_good is not None else self.sample_factory()
            logger.warning("all sources failed, showing %s fallback jobs", len(fallback))
            self.jobs = sort_jobs(fallback, order)
            self.using_fallback = True
            return
        self._last_good = result.jobs
        self.jobs = sort_jobs(result.jobs, order)
        self.using_fallback = False

    def start_auto_refresh(self, interval: float) -> PeriodicTask:
        if self._refresher is None or not self._refresher.running:
            self._refresher = PeriodicTask(interval, self.refresh, name="feed-refresh").start()
        return self._refresher

    async def close(self) -> None:
        if self._refresher is not None:
            await self._refresher.stop()
            self._refresher = None
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        await self.aggregator.drain()

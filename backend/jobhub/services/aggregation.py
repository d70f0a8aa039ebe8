"""One aggregation cycle: fetch every source concurrently, merge, dedupe, sync.

The store query runs in a worker thread with its own session, so it can be
awaited alongside the provider calls on the event loop. A failing or
unconfigured source contributes an empty list and an outcome record; it never
aborts the cycle.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobhub.core.config import Settings, settings as default_settings
from jobhub.core.errors import ConfigurationError, PersistenceError, ProviderFetchError
from jobhub.pipeline.canonical import LOCAL_SOURCE, CanonicalJob
from jobhub.pipeline.dedupe import dedupe, ensure_unique_ids
from jobhub.pipeline.normalizer import normalize_records
from jobhub.pipeline.views import TimeFilter, sort_jobs, window_days
from jobhub.providers.base import ProviderAdapter, SearchQuery
from jobhub.services.job_service import list_jobs, to_canonical
from jobhub.services.sync_service import SyncResult, sync_external_jobs

logger = logging.getLogger(__name__)

OK = "ok"
NOT_CONFIGURED = "not_configured"
FAILED = "failed"


@dataclass
class SourceOutcome:
    source: str
    status: str
    jobs: list[CanonicalJob] = field(default_factory=list)
    error: str = ""

    def as_dict(self) -> dict:
        return {"source": self.source, "status": self.status, "count": len(self.jobs), "error": self.error}


@dataclass
class AggregationResult:
    jobs: list[CanonicalJob]
    outcomes: list[SourceOutcome]
    time_filter: TimeFilter
    started_at: datetime
    sync_task: asyncio.Task | None = None

    @property
    def all_failed(self) -> bool:
        return not any(o.status == OK for o in self.outcomes)

    @property
    def external_jobs(self) -> list[CanonicalJob]:
        return [job for job in self.jobs if job.is_external]


class Aggregator:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        adapters: Sequence[ProviderAdapter],
        *,
        cfg: Settings | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.session_factory = session_factory
        self.adapters = list(adapters)
        self.settings = cfg or default_settings
        self.clock = clock
        self._pending_syncs: set[asyncio.Task] = set()

    def _load_store(self, time_filter: TimeFilter, now: datetime) -> list[CanonicalJob]:
        db = self.session_factory()
        try:
            return [to_canonical(row) for row in list_jobs(db, time_filter=time_filter, now=now)]
        finally:
            db.close()

    async def _fetch_store(self, time_filter: TimeFilter, now: datetime) -> SourceOutcome:
        try:
            jobs = await asyncio.to_thread(self._load_store, time_filter, now)
        except SQLAlchemyError as exc:
            logger.error("store query failed: %s", exc)
            return SourceOutcome(LOCAL_SOURCE, FAILED, error=str(exc)[:500])
        return SourceOutcome(LOCAL_SOURCE, OK, jobs)

    async def _fetch_provider(self, adapter: ProviderAdapter, query: SearchQuery, now: datetime) -> SourceOutcome:
        search = adapter.search_data_roles if self.settings.provider_fanout else adapter.search
        try:
            response = await search(query)
        except ConfigurationError as exc:
            logger.warning("provider %s skipped: %s", adapter.source, exc)
            return SourceOutcome(adapter.source, NOT_CONFIGURED, error=str(exc))
        except ProviderFetchError as exc:
            logger.warning("provider %s failed: %s", adapter.source, exc)
            return SourceOutcome(adapter.source, FAILED, error=str(exc)[:500])
        return SourceOutcome(adapter.source, OK, normalize_records(response.records, response.source, now))

    async def _guarded(self, source: str, coro) -> SourceOutcome:
        try:
            return await coro
        except Exception as exc:  # noqa: BLE001
            logger.exception("source %s raised unexpectedly", source)
            return SourceOutcome(source, FAILED, error=str(exc)[:500])

    async def run(
        self,
        time_filter: TimeFilter = TimeFilter.LATEST,
        query: SearchQuery | None = None,
        *,
        sync: bool = True,
    ) -> AggregationResult:
        started = self.clock()
        window = time_filter if time_filter.is_time_window else TimeFilter.LATEST
        query = query or SearchQuery.from_settings(self.settings, max_days_old=window_days(window))

        calls = [self._guarded(LOCAL_SOURCE, self._fetch_store(window, started))]
        calls += [
            self._guarded(adapter.source, self._fetch_provider(adapter, query, started)) for adapter in self.adapters
        ]
        outcomes = list(await asyncio.gather(*calls))

        # Store first, then providers in adapter order, so the store copy wins.
        merged = [job for outcome in outcomes for job in outcome.jobs]
        jobs = sort_jobs(ensure_unique_ids(dedupe(merged)), time_filter)
        result = AggregationResult(jobs, outcomes, time_filter, started)

        if sync and result.external_jobs:
            result.sync_task = self.schedule_sync(result.external_jobs)
        return result

    def _sync_blocking(self, jobs: list[CanonicalJob]) -> SyncResult:
        db = self.session_factory()
        try:
            return sync_external_jobs(db, jobs)
        finally:
            db.close()

    async def sync_in_background(self, jobs: list[CanonicalJob]) -> SyncResult | None:
        """Write-through that logs failures instead of raising them."""
        try:
            return await asyncio.to_thread(self._sync_blocking, jobs)
        except PersistenceError as exc:
            logger.error("persistence sync failed: %s", exc)
        except Exception:  # noqa: BLE001
            logger.exception("persistence sync crashed")
        return None

    def schedule_sync(self, jobs: list[CanonicalJob]) -> asyncio.Task:
        task = asyncio.create_task(self.sync_in_background(list(jobs)), name="job-sync")
        self._pending_syncs.add(task)
        task.add_done_callback(self._pending_syncs.discard)
        return task

    async def drain(self) -> None:
        if self._pending_syncs:
            await asyncio.gather(*list(self._pending_syncs), return_exceptions=True)

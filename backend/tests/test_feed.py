from __future__ import annotations
import asyncio
from datetime import datetime, timedelta

from jobhub.core.config import settings
from jobhub.pipeline.canonical import CanonicalJob
from jobhub.pipeline.views import TimeFilter
from jobhub.services.aggregation import FAILED, OK, AggregationResult, SourceOutcome
from jobhub.services.feed import JobFeed

NOW = datetime(2026, 10, 18, 12, 0, 0)


def _job(job_id, salary, hours_old=1, source="adzuna") -> CanonicalJob:
    return CanonicalJob(
        id=job_id,
        company="Acme",
        title=f"Role {job_id}",
        location="Austin",
        salary=salary,
        company_logo="A",
        link="https://jobs.example",
        description="",
        work_location="On-site",
        experience="Middle",
        working_schedule="Full time",
        employment_type="Full Day",
        created_at=NOW - timedelta(hours=hours_old),
        source=source,
    )


class FakeAggregator:
    def __init__(self, jobs_by_window=None, fail=False):
        self.jobs_by_window = jobs_by_window or {}
        self.fail = fail
        self.calls = []
        self.gates = {}
        self.drained = False

    async def run(self, time_filter=TimeFilter.LATEST, query=None, *, sync=True):
        self.calls.append(time_filter)
        gate = self.gates.get(time_filter)
        if gate is not None:
            await gate.wait()
        if self.fail:
            return AggregationResult([], [SourceOutcome("local", FAILED)], time_filter, NOW)
        jobs = list(self.jobs_by_window.get(time_filter, []))
        return AggregationResult(jobs, [SourceOutcome("local", OK, jobs)], time_filter, NOW)

    async def drain(self):
        self.drained = True


def _samples():
    return [_job(1, "$900/hr", source="sample"), _job(2, "$1200/hr", source="sample")]


def test_salary_sort_reorders_without_refetch():
    jobs = [_job("a", "$3000", 1), _job("b", "$9000", 2), _job("c", "$6000", 3)]
    agg = FakeAggregator({TimeFilter.LATEST: jobs})
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        await feed.load()
        desc = [j.id for j in await feed.set_filter(TimeFilter.SALARY_DESC)]
        asc = [j.id for j in await feed.set_filter("Salary (Low to High)")]
        return desc, asc

    desc, asc = asyncio.run(scenario())

    assert agg.calls == [TimeFilter.LATEST]
    assert desc == ["b", "c", "a"]
    assert asc == ["a", "c", "b"]
    assert feed.window == TimeFilter.LATEST
    assert feed.current_filter == TimeFilter.SALARY_ASC


def test_time_window_refetches_and_refresh_keeps_order():
    agg = FakeAggregator(
        {
            TimeFilter.LATEST: [_job("a", "$1", 1)],
            TimeFilter.LAST_WEEK: [_job("w1", "$2000", 30), _job("w2", "$8000", 50)],
        }
    )
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        await feed.load()
        week = [j.id for j in await feed.set_filter(TimeFilter.LAST_WEEK)]
        await feed.set_filter(TimeFilter.SALARY_DESC)
        refreshed = [j.id for j in await feed.refresh()]
        return week, refreshed

    week, refreshed = asyncio.run(scenario())

    assert week == ["w1", "w2"]
    assert agg.calls == [TimeFilter.LATEST, TimeFilter.LAST_WEEK, TimeFilter.LAST_WEEK]
    assert refreshed == ["w2", "w1"]


def test_fallback_to_samples_then_last_known_good():
    agg = FakeAggregator({TimeFilter.LATEST: [_job("real", "$1", 1)]}, fail=True)
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        first = [j.source for j in await feed.load()]
        first_fallback = feed.using_fallback
        agg.fail = False
        second = [j.id for j in await feed.refresh()]
        agg.fail = True
        third = [j.id for j in await feed.refresh()]
        return first, first_fallback, second, third

    first, first_fallback, second, third = asyncio.run(scenario())

    assert first == ["sample", "sample"]
    assert first_fallback
    assert second == ["real"]
    assert third == ["real"]
    assert feed.using_fallback


def test_superseded_cycle_never_commits():
    agg = FakeAggregator(
        {
            TimeFilter.LAST_MONTH: [_job("month", "$1", 400)],
            TimeFilter.LAST_24_HOURS: [_job("day", "$1", 2)],
        }
    )
    agg.gates[TimeFilter.LAST_MONTH] = asyncio.Event()
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        slow = asyncio.create_task(feed.set_filter(TimeFilter.LAST_MONTH))
        await asyncio.sleep(0.01)
        fast = await feed.set_filter(TimeFilter.LAST_24_HOURS)
        stale = await slow
        return [j.id for j in fast], [j.id for j in stale]

    fast, stale = asyncio.run(scenario())

    assert fast == ["day"]
    assert "month" not in stale
    assert [j.id for j in feed.jobs] == ["day"]
    assert feed.window == TimeFilter.LAST_24_HOURS
    assert feed.cycle == 2


def test_auto_refresh_runs_until_closed():
    agg = FakeAggregator({TimeFilter.LATEST: [_job("a", "$1")]})
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        feed.start_auto_refresh(0.02)
        await asyncio.sleep(0.25)
        await feed.close()
        calls = len(agg.calls)
        await asyncio.sleep(0.1)
        return calls

    calls = asyncio.run(scenario())

    assert calls >= 1
    assert len(agg.calls) == calls
    assert agg.drained


def test_salary_sort_chosen_during_refresh_is_kept():
    agg = FakeAggregator({TimeFilter.LATEST: [_job("low", "$1000", 1), _job("high", "$9000", 2)]})
    feed = JobFeed(agg, sample_factory=_samples)

    async def scenario():
        await feed.load()
        agg.gates[TimeFilter.LATEST] = asyncio.Event()
        pending = asyncio.create_task(feed.refresh())
        await asyncio.sleep(0.01)
        await feed.set_filter(TimeFilter.SALARY_DESC)
        agg.gates[TimeFilter.LATEST].set()
        return [j.id for j in await pending]

    order = asyncio.run(scenario())

    assert feed.current_filter == TimeFilter.SALARY_DESC
    assert order == ["high", "low"]
    assert [j.id for j in feed.jobs] == ["high", "low"]


def test_default_samples_follow_configured_count(monkeypatch):
    monkeypatch.setattr(settings, "sample_jobs_count", 5)
    feed = JobFeed(FakeAggregator(fail=True))

    jobs = asyncio.run(feed.load())

    assert len(jobs) == 5
    assert {j.source for j in jobs} == {"sample"}

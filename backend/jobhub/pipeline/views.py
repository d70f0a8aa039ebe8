from __future__ import annotations
import re
from datetime import datetime, timedelta
from enum import Enum

from jobhub.pipeline.canonical import CanonicalJob

HOURS_PER_MONTH = 160
_SALARY_RE = re.compile(r"\$?(\d+)")


class TimeFilter(str, Enum):
    LATEST = "Latest"
    LAST_24_HOURS = "Last 24 hours"
    LAST_WEEK = "Last week"
    LAST_MONTH = "Last month"
    SALARY_DESC = "Salary (High to Low)"
    SALARY_ASC = "Salary (Low to High)"

    @property
    def is_time_window(self) -> bool:
        return self in TIME_WINDOWS

    @property
    def is_salary_sort(self) -> bool:
        return self in (TimeFilter.SALARY_DESC, TimeFilter.SALARY_ASC)


WINDOW_SPANS = {
    TimeFilter.LATEST: None,
    TimeFilter.LAST_24_HOURS: timedelta(hours=24),
    TimeFilter.LAST_WEEK: timedelta(days=7),
    TimeFilter.LAST_MONTH: timedelta(days=30),
}
TIME_WINDOWS = tuple(WINDOW_SPANS)


def window_cutoff(time_filter: TimeFilter | None, now: datetime) -> datetime | None:
    span = WINDOW_SPANS.get(time_filter) if time_filter else None
    return now - span if span else None


def window_days(time_filter: TimeFilter | None) -> int | None:
    span = WINDOW_SPANS.get(time_filter) if time_filter else None
    return (span.days or 1) if span else None


def parse_salary(salary: str | None) -> int | None:
    """First integer in a salary string, hourly figures scaled to a month."""
    text = salary or ""
    match = _SALARY_RE.search(text)
    if not match:
        return None
    value = int(match.group(1))
    return value * HOURS_PER_MONTH if "/hr" in text else value


def salary_value(salary: str | None) -> int:
    return parse_salary(salary) or 0


def _salary_key(job: CanonicalJob):
    return (salary_value(job.salary), job.created_at, str(job.id))


def sort_jobs(jobs: list[CanonicalJob], time_filter: TimeFilter | None = None) -> list[CanonicalJob]:
    if time_filter == TimeFilter.SALARY_DESC:
        return sorted(jobs, key=_salary_key, reverse=True)
    if time_filter == TimeFilter.SALARY_ASC:
        return sorted(jobs, key=_salary_key)
    return sorted(jobs, key=lambda job: job.created_at, reverse=True)

from __future__ import annotations
from datetime import datetime, timedelta

import pytest

from jobhub.pipeline.canonical import CanonicalJob
from jobhub.pipeline.views import TimeFilter, parse_salary, salary_value, sort_jobs, window_cutoff, window_days

NOW = datetime(2026, 10, 18, 12, 0, 0)


def _job(job_id, salary, hours_old=0) -> CanonicalJob:
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
    )


@pytest.mark.parametrize(
    "salary,expected",
    [
        ("$1200/hr", 192000),
        ("$25/hr - $30/hr", 4000),
        ("$4500", 4500),
        ("$120,000 - $150,000", 120),
        ("Up to $70,000", 70),
        ("Not specified", None),
        (None, None),
    ],
)
def test_parse_salary(salary, expected):
    assert parse_salary(salary) == expected


def test_missing_salary_sorts_as_zero():
    assert salary_value("Competitive") == 0


def test_salary_orders_are_exact_reverses():
    jobs = [
        _job(1, "$5000", 1),
        _job(2, "$20/hr", 2),
        _job(3, "Not specified", 3),
        _job(4, "$5000", 4),
        _job(5, "$9000", 5),
        _job(6, "Competitive", 6),
    ]

    desc = sort_jobs(jobs, TimeFilter.SALARY_DESC)
    asc = sort_jobs(jobs, TimeFilter.SALARY_ASC)

    assert [job.id for job in desc] == [job.id for job in reversed(asc)]
    assert desc[0].id == 5
    assert {job.id for job in asc[:2]} == {3, 6}


@pytest.mark.parametrize("time_filter", [None, TimeFilter.LATEST, TimeFilter.LAST_WEEK])
def test_default_order_is_newest_first(time_filter):
    jobs = [_job(1, "$1", 5), _job(2, "$1", 1), _job(3, "$1", 3)]

    assert [job.id for job in sort_jobs(jobs, time_filter)] == [2, 3, 1]


def test_window_bounds():
    assert window_cutoff(TimeFilter.LATEST, NOW) is None
    assert window_cutoff(TimeFilter.LAST_24_HOURS, NOW) == NOW - timedelta(hours=24)
    assert window_cutoff(TimeFilter.LAST_WEEK, NOW) == NOW - timedelta(days=7)
    assert window_cutoff(TimeFilter.LAST_MONTH, NOW) == NOW - timedelta(days=30)
    assert window_cutoff(TimeFilter.SALARY_DESC, NOW) is None
    assert [window_days(tf) for tf in TimeFilter] == [None, 1, 7, 30, None, None]


def test_filter_kinds():
    assert TimeFilter("Last week").is_time_window
    assert not TimeFilter.SALARY_ASC.is_time_window
    assert TimeFilter.SALARY_ASC.is_salary_sort

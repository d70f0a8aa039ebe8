from __future__ import annotations
from datetime import datetime

from jobhub.pipeline.canonical import CanonicalJob
from jobhub.pipeline.dedupe import dedupe, ensure_unique_ids


def _job(job_id, title, company, source="adzuna") -> CanonicalJob:
    return CanonicalJob(
        id=job_id,
        company=company,
        title=title,
        location="Austin",
        salary="Not specified",
        company_logo=company[0].upper(),
        link=f"https://jobs.example/{job_id}",
        description="",
        work_location="On-site",
        experience="Middle",
        working_schedule="Full time",
        employment_type="Full Day",
        created_at=datetime(2026, 10, 1),
        source=source,
    )


def test_dedupe_keeps_first_occurrence_in_order():
    jobs = [
        _job(1, "Data Engineer", "Acme", source="local"),
        _job("adzuna_9", "Data Analyst", "Globex"),
        _job("serpapi_Data_Engineer", "data engineer", "ACME", source="serpapi"),
        _job("rapidapi_3", "Data Analyst", "Initech", source="rapidapi"),
    ]

    result = dedupe(jobs)

    assert [job.id for job in result] == [1, "adzuna_9", "rapidapi_3"]
    assert result[0].source == "local"


def test_dedupe_is_idempotent():
    jobs = [_job(i, title, "Acme") for i, title in enumerate(["A", "B", "a", "C", "b"])]

    once = dedupe(jobs)

    assert dedupe(once) == once
    assert len({job.dedup_key for job in once}) == len(once)


def test_ensure_unique_ids_suffixes_collisions():
    jobs = [_job("adzuna_1", "A", "Acme"), _job("adzuna_1", "B", "Acme"), _job("adzuna_1", "C", "Acme")]

    ensure_unique_ids(jobs)

    assert [job.id for job in jobs] == ["adzuna_1", "adzuna_1_2", "adzuna_1_3"]

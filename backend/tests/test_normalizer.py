from __future__ import annotations
from datetime import datetime, timedelta

import pytest

from jobhub.pipeline.normalizer import format_salary, infer_experience, normalize, parse_timestamp

NOW = datetime(2026, 10, 18, 9, 0, 0)


def test_adzuna_record_maps_every_field():
    raw = {
        "id": "4242",
        "title": "Senior Data Engineer",
        "company": {"display_name": "acme"},
        "location": {"display_name": "Austin, TX"},
        "salary_min": 90000,
        "salary_max": 120000.0,
        "contract_time": "full_time",
        "contract_type": "permanent",
        "category": {"label": "IT Jobs"},
        "redirect_url": "https://adzuna.example/4242",
        "description": "<p>Build <b>pipelines</b></p>",
        "created": "2026-10-01T12:00:00Z",
        "latitude": 30.2,
        "longitude": -97.7,
    }

    job = normalize(raw, "adzuna", now=NOW)

    assert job.id == "adzuna_4242"
    assert job.company == "acme"
    assert job.company_logo == "A"
    assert job.salary == "$90,000 - $120,000"
    assert job.experience == "Senior"
    assert job.work_location == "On-site"
    assert job.working_schedule == "Full time"
    assert job.employment_type == "Full Day"
    assert job.tags == ["Full time", "IT Jobs", "Senior level", "On-site", "Location-based"]
    assert job.link == "https://adzuna.example/4242"
    assert job.description == "Build pipelines"
    assert job.created_at == datetime(2026, 10, 1, 12, 0, 0)
    assert job.is_external


def test_salary_string_variants():
    assert format_salary(50000, 70000) == "$50,000 - $70,000"
    assert format_salary(1234567, None) == "$1,234,567+"
    assert format_salary(None, 70000) == "Up to $70,000"
    assert format_salary(None, None) is None
    assert normalize({"title": "Analyst"}, "adzuna", now=NOW).salary == "Not specified"


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Senior Analyst", "Senior"),
        ("Junior Data Analyst", "Junior"),
        ("Entry Level Data Analyst", "Junior"),
        ("Data Engineer", "Middle"),
    ],
)
def test_seniority_from_title(title, expected):
    assert infer_experience(title) == expected


def test_remote_flag_prefers_explicit_work_type():
    explicit = normalize(
        {"title": "Remote Data Analyst", "detected_extensions": {"work_type": "Hybrid"}}, "serpapi", now=NOW
    )
    keyword = normalize({"title": "Data Analyst", "location": {"display_name": "Remote, US"}}, "adzuna", now=NOW)
    default = normalize({"title": "Data Analyst", "location": {"display_name": "Austin"}}, "adzuna", now=NOW)

    assert explicit.work_location == "Hybrid"
    assert keyword.work_location == "Remote"
    assert default.work_location == "On-site"


def test_serpapi_record_with_relative_posting_time():
    raw = {
        "title": "Data Engineer",
        "company_name": "Globex",
        "location": "New York, NY",
        "detected_extensions": {"posted_at": "3 days ago", "schedule_type": "Part-time", "salary": "$60–$80 an hour"},
        "apply_options": [{"title": "Apply", "link": "https://globex.example/apply"}],
    }

    job = normalize(raw, "serpapi", now=NOW)

    assert job.id == "serpapi_Data_Engineer"
    assert job.created_at == NOW - timedelta(days=3)
    assert job.link == "https://globex.example/apply"
    assert job.salary == "$60–$80 an hour"
    assert job.working_schedule == "Part-time"


def test_internship_record_with_hourly_salary():
    raw = {
        "id": 991,
        "title": "Data Analyst Intern",
        "organization": "Initech",
        "locations_derived": ["Denver, Colorado, United States"],
        "remote_derived": True,
        "employment_type": ["INTERN"],
        "salary_raw": {"value": {"minValue": 25, "maxValue": 30, "unitText": "HOUR"}},
        "url": "https://initech.example/jobs/991",
        "date_posted": "2026-10-17T08:00:00",
    }

    job = normalize(raw, "rapidapi", now=NOW)

    assert job.id == "rapidapi_991"
    assert job.salary == "$25/hr - $30/hr"
    assert job.work_location == "Remote"
    assert job.location == "Denver, Colorado, United States"
    assert job.working_schedule == "Internship"
    assert job.tags == ["Internship", "Middle level", "Remote"]


def test_store_record_keeps_integer_id_and_tags():
    raw = {
        "id": 7,
        "company": "Umbrella",
        "title": "Data Scientist",
        "tags": ["Full time", "Middle level"],
        "link": "https://umbrella.example/7",
        "created_at": datetime(2026, 10, 10),
    }

    job = normalize(raw, "local", now=NOW)

    assert job.id == 7
    assert job.tags == ["Full time", "Middle level"]
    assert not job.is_external


def test_missing_native_id_gets_stable_digest():
    a = normalize({"title": "Data Engineer", "company": {"display_name": "Acme"}}, "adzuna", now=NOW)
    b = normalize({"title": "Data Engineer", "company": {"display_name": "Acme"}}, "adzuna", now=NOW)

    assert a.id == b.id
    assert a.id.startswith("adzuna_")


MALFORMED = [
    None,
    {},
    [],
    "garbage",
    42,
    {"title": 5, "company": "x"},
    {"company": {"display_name": None}, "location": {"area": ["US", 3]}, "salary_min": "abc"},
    {"detected_extensions": "oops", "apply_options": [None], "related_links": "nope"},
    {"salary_raw": {"value": {"minValue": "inf"}}, "employment_type": 12, "locations_derived": [None]},
    {"created": "not a date", "date_posted": -1e30, "created_at": {"nested": True}},
]


@pytest.mark.parametrize("source", ["adzuna", "serpapi", "rapidapi", "local"])
@pytest.mark.parametrize("raw", MALFORMED)
def test_normalize_is_total(source, raw):
    job = normalize(raw, source, now=NOW)

    for value in (job.company, job.title, job.location, job.salary, job.company_logo, job.link):
        assert isinstance(value, str) and value
    assert job.company_logo == job.company[0].upper()[:1]
    assert isinstance(job.tags, list)
    assert isinstance(job.created_at, datetime)
    assert job.experience in ("Senior", "Middle", "Junior")
    assert job.work_location in ("Remote", "Hybrid", "On-site")
    assert job.id


def test_parse_timestamp_formats():
    assert parse_timestamp("2026-10-01", NOW) == datetime(2026, 10, 1)
    assert parse_timestamp("2026-10-01T10:00:00+02:00", NOW) == datetime(2026, 10, 1, 8, 0)
    assert parse_timestamp(1_760_000_000_000, NOW) == parse_timestamp(1_760_000_000, NOW)
    assert parse_timestamp("5 hours ago", NOW) == NOW - timedelta(hours=5)
    assert parse_timestamp("30+ days ago", NOW) == NOW - timedelta(days=30)
    assert parse_timestamp("soon", NOW) is None


def test_logo_is_a_single_glyph():
    job = normalize({"title": "Data Engineer", "company": {"display_name": "ßeta Labs"}}, "adzuna", now=NOW)

    assert job.company_logo == "S"

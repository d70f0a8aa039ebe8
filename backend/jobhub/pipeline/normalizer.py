"""Map raw provider and store records onto :class:`CanonicalJob`.

Each source has one extractor that reads its payload with explicit
presence checks into :class:`RawFields`. Everything after that point is
shared, so the fallback rules live in one place (``FALLBACKS`` and
``_build``) and a job from any source comes out with the same shape.

``normalize`` never raises: malformed input degrades to fallback values.
"""
from __future__ import annotations

import hashlib
import logging
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from bs4 import BeautifulSoup

from jobhub.pipeline.canonical import (
    ADZUNA,
    HYBRID,
    JUNIOR,
    LOCAL_SOURCE,
    MIDDLE,
    NO_LINK,
    NOT_SPECIFIED,
    ON_SITE,
    RAPIDAPI,
    REMOTE,
    SAMPLE,
    SENIOR,
    SERPAPI,
    UNKNOWN_COMPANY,
    UNKNOWN_TITLE,
    CanonicalJob,
)

logger = logging.getLogger(__name__)

FALLBACKS = {
    "company": UNKNOWN_COMPANY,
    "title": UNKNOWN_TITLE,
    "location": NOT_SPECIFIED,
    "salary": NOT_SPECIFIED,
    "link": NO_LINK,
    "description": "",
    "working_schedule": "Full time",
    "employment_type": "Full Day",
}

ADZUNA_SCHEDULES = {"full_time": "Full time", "part_time": "Part time", "contract": "Contract"}
INTERNSHIP_SCHEDULES = {
    "FULL_TIME": "Full time",
    "PART_TIME": "Part time",
    "CONTRACTOR": "Contract",
    "TEMPORARY": "Contract",
    "INTERN": "Internship",
}

_RELATIVE_RE = re.compile(r"(\d+)\+?\s*(minute|min|hour|hr|day|week|month)s?\s+ago", re.IGNORECASE)
_RELATIVE_UNITS = {
    "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "hr": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}


@dataclass
class RawFields:
    native_id: Any = None
    company: str | None = None
    title: str | None = None
    location: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    salary_suffix: str = ""
    salary_text: str | None = None
    schedule: str | None = None
    category: str | None = None
    work_type: str | None = None
    employment_type: str | None = None
    experience: str | None = None
    link: str | None = None
    description: str | None = None
    posted_at: datetime | None = None
    tags: list[str] | None = None
    extra_tags: list[str] = field(default_factory=list)


def _get(raw: Any, *names: str) -> Any:
    for name in names:
        if isinstance(raw, Mapping):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)
        if value is not None:
            return value
    return None


def _mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _first_mapping(value: Any) -> Mapping:
    if isinstance(value, list) and value:
        return _mapping(value[0])
    return {}


def _str(value: Any) -> str | None:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) and value > 0 else None
    if isinstance(value, str):
        try:
            parsed = float(value.replace(",", "").strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) and parsed > 0 else None
    return None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: Any, now: datetime) -> datetime | None:
    """Read ISO strings, epoch numbers and "3 days ago" style relative times."""
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    try:
        return _naive_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        pass

    lower = raw.lower()
    if lower in ("just posted", "today", "just now"):
        return now
    if lower == "yesterday":
        return now - timedelta(days=1)
    match = _RELATIVE_RE.search(lower)
    if match:
        return now - int(match.group(1)) * _RELATIVE_UNITS[match.group(2)]
    return None


def format_amount(value: float) -> str:
    return f"${round(value):,}"


def format_salary(salary_min: float | None, salary_max: float | None, suffix: str = "") -> str | None:
    if salary_min and salary_max:
        return f"{format_amount(salary_min)}{suffix} - {format_amount(salary_max)}{suffix}"
    if salary_min:
        return f"{format_amount(salary_min)}{suffix}+"
    if salary_max:
        return f"Up to {format_amount(salary_max)}{suffix}"
    return None


def infer_experience(title: str) -> str:
    lower = title.lower()
    if "senior" in lower:
        return SENIOR
    if "junior" in lower or "entry" in lower:
        return JUNIOR
    return MIDDLE


def work_location_from(work_type: str) -> str:
    lower = work_type.lower()
    if "remote" in lower:
        return REMOTE
    if "hybrid" in lower:
        return HYBRID
    return ON_SITE


def infer_work_location(work_type: str | None, title: str, location: str) -> str:
    if work_type:
        return work_location_from(work_type)
    if "remote" in title.lower() or "remote" in location.lower():
        return REMOTE
    return ON_SITE


def clean_description(text: str | None) -> str:
    if not text:
        return ""
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ", strip=True)
    return text.strip()


def _digest(*parts: str) -> str:
    raw = "|".join(p.strip().lower() for p in parts)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]


def _adzuna_fields(raw: Any, now: datetime) -> RawFields:
    company = _mapping(_get(raw, "company"))
    location = _mapping(_get(raw, "location"))
    category = _mapping(_get(raw, "category"))
    contract_time = _str(_get(raw, "contract_time"))
    area = _str_list(location.get("area"))

    extra = []
    if _get(raw, "latitude") is not None and _get(raw, "longitude") is not None:
        extra.append("Location-based")

    return RawFields(
        native_id=_str(_get(raw, "id")),
        company=_str(company.get("display_name")),
        title=_str(_get(raw, "title")),
        location=_str(location.get("display_name")) or (", ".join(area) or None),
        salary_min=_number(_get(raw, "salary_min")),
        salary_max=_number(_get(raw, "salary_max")),
        schedule=ADZUNA_SCHEDULES.get(contract_time or "", "Full time"),
        category=_str(category.get("label")) or "General",
        employment_type="Full Day" if _get(raw, "contract_type") == "permanent" else "Contract",
        link=_str(_get(raw, "redirect_url")) or _str(_get(raw, "url")),
        description=_str(_get(raw, "description")),
        posted_at=parse_timestamp(_get(raw, "created"), now),
        extra_tags=extra,
    )


def _serpapi_fields(raw: Any, now: datetime) -> RawFields:
    ext = _mapping(_get(raw, "detected_extensions"))
    work_type = _str(ext.get("work_type"))
    if work_type is None and ext.get("work_from_home") is True:
        work_type = REMOTE

    title = _str(_get(raw, "title"))
    native_id = _str(_get(raw, "job_id"))
    if native_id is None and title:
        native_id = re.sub(r"\s+", "_", title)

    return RawFields(
        native_id=native_id,
        company=_str(_get(raw, "company_name")),
        title=title,
        location=_str(_get(raw, "location")),
        salary_text=_str(ext.get("salary")),
        schedule=_str(ext.get("schedule_type")),
        work_type=work_type,
        link=_str(_first_mapping(_get(raw, "apply_options")).get("link"))
        or _str(_first_mapping(_get(raw, "related_links")).get("link")),
        description=_str(_get(raw, "description")),
        posted_at=parse_timestamp(ext.get("posted_at") or _get(raw, "posted_at"), now),
    )


def _internship_fields(raw: Any, now: datetime) -> RawFields:
    employment = _get(raw, "employment_type")
    kinds = _str_list(employment) if isinstance(employment, list) else _str_list([employment])
    schedule = next((INTERNSHIP_SCHEDULES[k] for k in kinds if k in INTERNSHIP_SCHEDULES), "Internship")

    remote = _get(raw, "remote_derived")
    work_type = None
    if isinstance(remote, bool):
        work_type = REMOTE if remote else ON_SITE

    salary = _mapping(_mapping(_get(raw, "salary_raw")).get("value"))
    unit = _str(salary.get("unitText")) or ""

    locations = _str_list(_get(raw, "locations_derived"))
    return RawFields(
        native_id=_str(_get(raw, "id")),
        company=_str(_get(raw, "organization", "company", "company_name")),
        title=_str(_get(raw, "title", "job_title")),
        location=locations[0] if locations else _str(_get(raw, "location")),
        salary_min=_number(salary.get("minValue")) or _number(salary.get("value")),
        salary_max=_number(salary.get("maxValue")),
        salary_suffix="/hr" if unit.upper() == "HOUR" else "",
        schedule=schedule,
        work_type=work_type,
        employment_type="Internship",
        link=_str(_get(raw, "url", "link")),
        description=_str(_get(raw, "description_text", "description", "job_description")),
        posted_at=parse_timestamp(_get(raw, "date_posted"), now),
        extra_tags=["Internship"],
    )


def _store_fields(raw: Any, now: datetime) -> RawFields:
    tags = _get(raw, "tags")
    return RawFields(
        native_id=_get(raw, "id"),
        company=_str(_get(raw, "company")),
        title=_str(_get(raw, "title")),
        location=_str(_get(raw, "location")),
        salary_text=_str(_get(raw, "salary")),
        schedule=_str(_get(raw, "working_schedule", "workingSchedule")),
        work_type=_str(_get(raw, "work_location", "workLocation")),
        employment_type=_str(_get(raw, "employment_type", "employmentType")),
        experience=_str(_get(raw, "experience")),
        link=_str(_get(raw, "link")),
        description=_str(_get(raw, "description")),
        posted_at=parse_timestamp(_get(raw, "created_at", "createdAt", "timestamp"), now),
        tags=_str_list(tags) if isinstance(tags, list) else None,
    )


EXTRACTORS: dict[str, Callable[[Any, datetime], RawFields]] = {
    ADZUNA: _adzuna_fields,
    SERPAPI: _serpapi_fields,
    RAPIDAPI: _internship_fields,
    LOCAL_SOURCE: _store_fields,
    SAMPLE: _store_fields,
}


def _synthesize_id(source: str, fields: RawFields, title: str, company: str, location: str) -> int | str:
    native = fields.native_id
    if source in (LOCAL_SOURCE, SAMPLE) and isinstance(native, int) and not isinstance(native, bool):
        return native
    native = _str(native)
    if native:
        return f"{source}_{native}"
    return f"{source}_{_digest(title, company, location)}"


def _build_tags(fields: RawFields, schedule: str, experience: str, work_location: str) -> list[str]:
    if fields.tags is not None:
        candidates = fields.tags
    else:
        candidates = [schedule, fields.category, f"{experience} level", work_location, *fields.extra_tags]
    tags: list[str] = []
    for tag in candidates:
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _build(fields: RawFields, source: str, now: datetime) -> CanonicalJob:
    company = fields.company or FALLBACKS["company"]
    title = fields.title or FALLBACKS["title"]
    location = fields.location or FALLBACKS["location"]
    salary = (
        format_salary(fields.salary_min, fields.salary_max, fields.salary_suffix)
        or fields.salary_text
        or FALLBACKS["salary"]
    )
    work_location = infer_work_location(fields.work_type, title, location)
    experience = fields.experience or infer_experience(title)
    schedule = fields.schedule or FALLBACKS["working_schedule"]

    return CanonicalJob(
        id=_synthesize_id(source, fields, title, company, location),
        company=company,
        title=title,
        location=location,
        salary=salary,
        company_logo=company[0].upper()[:1],
        link=fields.link or FALLBACKS["link"],
        description=clean_description(fields.description) or FALLBACKS["description"],
        work_location=work_location,
        experience=experience,
        working_schedule=schedule,
        employment_type=fields.employment_type or FALLBACKS["employment_type"],
        created_at=fields.posted_at or now,
        source=source,
        tags=_build_tags(fields, schedule, experience, work_location),
    )


def normalize(raw: Any, source: str, now: datetime | None = None) -> CanonicalJob:
    now = now or datetime.utcnow()
    extractor = EXTRACTORS.get(source, _store_fields)
    try:
        fields = extractor(raw if raw is not None else {}, now)
    except (AttributeError, TypeError, ValueError):
        logger.warning("unreadable %s record, using fallbacks", source, exc_info=True)
        fields = RawFields()
    return _build(fields, source, now)


def normalize_records(records, source: str, now: datetime | None = None) -> list[CanonicalJob]:
    now = now or datetime.utcnow()
    return [normalize(record, source, now) for record in records]

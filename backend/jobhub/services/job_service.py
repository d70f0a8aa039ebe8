from __future__ import annotations
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from jobhub.core.errors import JobValidationError
from jobhub.models.job import Job
from jobhub.pipeline.canonical import LOCAL_SOURCE, NOT_SPECIFIED, REMOTE, CanonicalJob, dedup_key
from jobhub.pipeline.normalizer import infer_experience, infer_work_location, normalize
from jobhub.pipeline.views import TimeFilter, parse_salary, window_cutoff
from jobhub.schemas.job import JobIn

REQUIRED_FIELDS_MESSAGE = "Company, title, and link are required"


def validate_submission(body: JobIn) -> None:
    if not (body.company.strip() and body.title.strip() and body.link.strip()):
        raise JobValidationError(REQUIRED_FIELDS_MESSAGE)


def build_tags(schedule: str, experience: str, work_location: str, employment_type: str, extra: list[str]) -> list[str]:
    candidates = [
        schedule,
        f"{experience} level",
        "Distant" if work_location == REMOTE else work_location,
        employment_type,
        *extra,
    ]
    tags: list[str] = []
    for tag in candidates:
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def create_job(db: Session, body: JobIn, now: datetime | None = None) -> Job:
    validate_submission(body)

    company = body.company.strip()
    title = body.title.strip()
    location = (body.location or "").strip() or NOT_SPECIFIED
    experience = body.experience or infer_experience(title)
    work_location = body.work_location or infer_work_location(None, title, location)
    schedule = body.working_schedule or "Full time"
    employment_type = body.employment_type or "Full Day"

    row = Job(
        company=company,
        title=title,
        location=location,
        salary=(body.salary or "").strip() or NOT_SPECIFIED,
        company_logo=company[0].upper()[:1],
        tags=build_tags(schedule, experience, work_location, employment_type, body.tags),
        link=body.link.strip(),
        description=body.description or "",
        work_location=work_location,
        experience=experience,
        working_schedule=schedule,
        employment_type=employment_type,
        source=LOCAL_SOURCE,
        dedup_key=dedup_key(title, company),
        created_at=now or datetime.utcnow(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _has_tag(job: Job, value: str) -> bool:
    wanted = value.lower()
    return any(tag.lower() in (wanted, f"{wanted} level") for tag in job.tags or [])


def _within_salary(job: Job, salary_min: int | None, salary_max: int | None) -> bool:
    monthly = parse_salary(job.salary)
    if monthly is None:
        return True
    if salary_min is not None and monthly < salary_min:
        return False
    if salary_max is not None and monthly > salary_max:
        return False
    return True


def list_jobs(
    db: Session,
    *,
    time_filter: TimeFilter | None = None,
    search: str | None = None,
    location: str | None = None,
    experience: str | None = None,
    schedule: str | None = None,
    employment_type: str | None = None,
    salary_min: int | None = None,
    salary_max: int | None = None,
    now: datetime | None = None,
) -> list[Job]:
    query = db.query(Job)

    cutoff = window_cutoff(time_filter, now or datetime.utcnow())
    if cutoff:
        query = query.filter(Job.created_at >= cutoff)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Job.title.ilike(like), Job.company.ilike(like)))
    if location:
        query = query.filter(Job.location.ilike(f"%{location}%"))

    rows = query.order_by(Job.created_at.desc(), Job.id.desc()).all()

    # Tag membership and salary figures live inside JSON and free text.
    for value in (experience, schedule, employment_type):
        if value:
            rows = [row for row in rows if _has_tag(row, value)]
    if salary_min is not None or salary_max is not None:
        rows = [row for row in rows if _within_salary(row, salary_min, salary_max)]
    return rows


def get_job(db: Session, job_id: int) -> Job | None:
    return db.query(Job).filter(Job.id == job_id).first()


def update_job(db: Session, job_id: int, body: JobIn) -> Job | None:
    row = get_job(db, job_id)
    if not row:
        return None

    changes = body.model_dump(exclude_unset=True, exclude={"source"})
    for key, value in changes.items():
        if value is not None:
            setattr(row, key, value)
    if not (row.company.strip() and row.title.strip() and row.link.strip()):
        db.rollback()
        raise JobValidationError(REQUIRED_FIELDS_MESSAGE)

    row.company_logo = row.company.strip()[0].upper()[:1]
    row.dedup_key = dedup_key(row.title, row.company)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def delete_job(db: Session, job_id: int) -> bool:
    row = get_job(db, job_id)
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True


def to_canonical(row: Job) -> CanonicalJob:
    return normalize(row, LOCAL_SOURCE)


def job_to_wire(row: Job) -> dict:
    return to_canonical(row).to_wire()

from __future__ import annotations
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobhub.core.errors import PersistenceError
from jobhub.models.job import Job
from jobhub.pipeline.canonical import NO_LINK, CanonicalJob

logger = logging.getLogger(__name__)

# Syncs run in worker threads; the check-then-insert below must not interleave.
_sync_lock = threading.Lock()


@dataclass
class SyncResult:
    inserted: int = 0
    skipped: int = 0
    ineligible: int = 0

    @property
    def not_inserted(self) -> int:
        return self.skipped + self.ineligible

    def as_dict(self) -> dict:
        return {"inserted": self.inserted, "skipped": self.skipped, "ineligible": self.ineligible}


def is_persistable(job: CanonicalJob) -> bool:
    link = (job.link or "").strip()
    return bool(link) and link != NO_LINK


def _existing_keys(db: Session, keys: set[str]) -> set[str]:
    if not keys:
        return set()
    rows = db.query(Job.dedup_key).filter(Job.dedup_key.in_(keys)).all()
    return {row[0] for row in rows}


def sync_external_jobs(db: Session, jobs: Iterable[CanonicalJob]) -> SyncResult:
    """Insert jobs whose company/title pair is not yet stored.

    Existence is checked on the dedup key, not the synthetic id, because
    providers re-issue native ids for the same posting.
    """
    result = SyncResult()
    eligible: list[CanonicalJob] = []
    for job in jobs:
        if is_persistable(job):
            eligible.append(job)
        else:
            result.ineligible += 1

    with _sync_lock:
        try:
            _insert_missing(db, eligible, result)
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(f"job sync failed: {exc}") from exc

    logger.info("job sync inserted=%s skipped=%s ineligible=%s", result.inserted, result.skipped, result.ineligible)
    return result


def _insert_missing(db: Session, jobs: list[CanonicalJob], result: SyncResult) -> None:
    existing = _existing_keys(db, {job.dedup_key for job in jobs})
    for job in jobs:
        key = job.dedup_key
        if key in existing:
            result.skipped += 1
            continue
        existing.add(key)
        db.add(
            Job(
                company=job.company,
                title=job.title,
                location=job.location,
                salary=job.salary,
                company_logo=job.company_logo,
                tags=list(job.tags),
                link=job.link,
                description=job.description,
                work_location=job.work_location,
                experience=job.experience,
                working_schedule=job.working_schedule,
                employment_type=job.employment_type,
                source=job.source,
                external_id=str(job.id),
                dedup_key=key,
                created_at=job.created_at,
            )
        )
        try:
            db.commit()
        except IntegrityError:
            # Another writer stored the same key first.
            db.rollback()
            result.skipped += 1
            continue
        result.inserted += 1

from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jobhub.db.database import get_db
from jobhub.pipeline.canonical import LOCAL_SOURCE
from jobhub.pipeline.normalizer import normalize
from jobhub.pipeline.views import TimeFilter, sort_jobs
from jobhub.schemas.job import BulkInsertResponse, JobIn
from jobhub.services.job_service import create_job, delete_job, get_job, job_to_wire, list_jobs, to_canonical, update_job
from jobhub.services.sync_service import sync_external_jobs

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("")
def get_jobs(
    time_filter: TimeFilter | None = Query(default=None, alias="timeFilter"),
    search: str | None = None,
    location: str | None = None,
    experience: str | None = None,
    schedule: str | None = None,
    employment_type: str | None = None,
    salary_min: int | None = None,
    salary_max: int | None = None,
    db: Session = Depends(get_db),
):
    rows = list_jobs(
        db,
        time_filter=time_filter,
        search=search,
        location=location,
        experience=experience,
        schedule=schedule,
        employment_type=employment_type,
        salary_min=salary_min,
        salary_max=salary_max,
    )
    jobs = [to_canonical(row) for row in rows]
    if time_filter is not None and time_filter.is_salary_sort:
        jobs = sort_jobs(jobs, time_filter)
    data = [job.to_wire() for job in jobs]
    return {"success": True, "data": data, "count": len(data)}


@router.post("", status_code=201)
def post_job(body: JobIn, db: Session = Depends(get_db)):
    row = create_job(db, body)
    return {"success": True, "data": job_to_wire(row)}


@router.post("/bulk", response_model=BulkInsertResponse)
def bulk_insert(body: list[JobIn], db: Session = Depends(get_db)):
    complete = [item for item in body if item.company.strip() and item.title.strip()]
    jobs = []
    for item in complete:
        job = normalize(item.model_dump(), LOCAL_SOURCE)
        job.source = item.source or LOCAL_SOURCE
        jobs.append(job)

    result = sync_external_jobs(db, jobs)
    return BulkInsertResponse(
        success=True,
        inserted=result.inserted,
        skipped=result.not_inserted + len(body) - len(complete),
    )


@router.get("/{job_id}")
def get_one(job_id: int, db: Session = Depends(get_db)):
    row = get_job(db, job_id)
    if not row:
        raise HTTPException(status_code=404, detail="job not found")
    return {"success": True, "data": job_to_wire(row)}


@router.put("/{job_id}")
def put_job(job_id: int, body: JobIn, db: Session = Depends(get_db)):
    row = update_job(db, job_id, body)
    if not row:
        raise HTTPException(status_code=404, detail="job not found")
    return {"success": True, "data": job_to_wire(row)}


@router.delete("/{job_id}")
def remove_job(job_id: int, db: Session = Depends(get_db)):
    if not delete_job(db, job_id):
        raise HTTPException(status_code=404, detail="job not found")
    return {"success": True, "message": "Job deleted successfully"}

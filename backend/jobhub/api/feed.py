from __future__ import annotations
from fastapi import APIRouter, BackgroundTasks, Depends, Query

from jobhub.api.deps import get_aggregator
from jobhub.core.config import settings
from jobhub.pipeline.views import TimeFilter, sort_jobs
from jobhub.services.aggregation import Aggregator
from jobhub.services.sample_jobs import generate_sample_jobs

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("")
async def get_feed(
    background_tasks: BackgroundTasks,
    time_filter: TimeFilter = Query(default=TimeFilter.LATEST, alias="timeFilter"),
    aggregator: Aggregator = Depends(get_aggregator),
):
    result = await aggregator.run(time_filter, sync=False)
    if result.external_jobs:
        background_tasks.add_task(aggregator.sync_in_background, result.external_jobs)

    jobs = result.jobs
    if result.all_failed:
        jobs = sort_jobs(generate_sample_jobs(settings.sample_jobs_count), time_filter)

    data = [job.to_wire() for job in jobs]
    return {
        "success": True,
        "data": data,
        "count": len(data),
        "timeFilter": time_filter.value,
        "fallback": result.all_failed,
        "sources": [outcome.as_dict() for outcome in result.outcomes],
    }

from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, Field


class JobIn(BaseModel):
    company: str = ""
    title: str = ""
    location: str | None = None
    salary: str | None = None
    work_location: str | None = Field(default=None, alias="workLocation")
    experience: str | None = None
    working_schedule: str | None = Field(default=None, alias="workingSchedule")
    employment_type: str | None = Field(default=None, alias="employmentType")
    tags: list[str] = Field(default_factory=list)
    description: str | None = None
    link: str = ""
    created_at: datetime | None = None
    source: str | None = None

    class Config:
        populate_by_name = True


class BulkInsertResponse(BaseModel):
    success: bool
    inserted: int
    skipped: int

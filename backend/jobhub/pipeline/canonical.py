from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone

LOCAL_SOURCE = "local"
ADZUNA = "adzuna"
SERPAPI = "serpapi"
RAPIDAPI = "rapidapi"
SAMPLE = "sample"

# Fixed priority used when merging; earlier sources win on duplicates.
PROVIDER_ORDER = (ADZUNA, SERPAPI, RAPIDAPI)

UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_TITLE = "Job Title"
NOT_SPECIFIED = "Not specified"
NO_LINK = "#"

REMOTE = "Remote"
HYBRID = "Hybrid"
ON_SITE = "On-site"

SENIOR = "Senior"
MIDDLE = "Middle"
JUNIOR = "Junior"


def dedup_key(title: str, company: str) -> str:
    return f"{(title or '').lower()}|{(company or '').lower()}"


def isoformat_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


@dataclass
class CanonicalJob:
    id: int | str
    company: str
    title: str
    location: str
    salary: str
    company_logo: str
    link: str
    description: str
    work_location: str
    experience: str
    working_schedule: str
    employment_type: str
    created_at: datetime
    source: str = LOCAL_SOURCE
    tags: list[str] = field(default_factory=list)

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.title, self.company)

    @property
    def is_external(self) -> bool:
        return self.source in PROVIDER_ORDER

    def to_wire(self) -> dict:
        return {
            "id": self.id,
            "company": self.company,
            "title": self.title,
            "location": self.location,
            "salary": self.salary,
            "companyLogo": self.company_logo,
            "tags": list(self.tags),
            "link": self.link,
            "description": self.description,
            "workLocation": self.work_location,
            "experience": self.experience,
            "workingSchedule": self.working_schedule,
            "employmentType": self.employment_type,
            "created_at": isoformat_utc(self.created_at),
            "source": self.source,
        }

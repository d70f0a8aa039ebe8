from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, JSON, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from jobhub.db.database import Base
from jobhub.pipeline.canonical import LOCAL_SOURCE


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        # Synced provider rows are unique per dedup key; local postings are not.
        Index(
            "uq_jobs_synced_dedup_key",
            "dedup_key",
            unique=True,
            sqlite_where=text(f"source != '{LOCAL_SOURCE}'"),
            postgresql_where=text(f"source != '{LOCAL_SOURCE}'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    company: Mapped[str] = mapped_column(String(256), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    location: Mapped[str] = mapped_column(String(256), default="Not specified", nullable=False)
    salary: Mapped[str] = mapped_column(String(128), default="Not specified", nullable=False)
    company_logo: Mapped[str] = mapped_column(String(8), default="", nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    link: Mapped[str] = mapped_column(String(1024), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    work_location: Mapped[str] = mapped_column(String(32), default="On-site", nullable=False)
    experience: Mapped[str] = mapped_column(String(32), default="Middle", nullable=False)
    working_schedule: Mapped[str] = mapped_column(String(64), default="Full time", nullable=False)
    employment_type: Mapped[str] = mapped_column(String(64), default="Full Day", nullable=False)

    source: Mapped[str] = mapped_column(String(32), default=LOCAL_SOURCE, nullable=False)
    external_id: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    dedup_key: Mapped[str] = mapped_column(String(800), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True, nullable=False)

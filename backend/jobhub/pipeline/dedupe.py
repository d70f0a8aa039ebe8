from __future__ import annotations
from collections.abc import Iterable

from jobhub.pipeline.canonical import CanonicalJob


def dedupe(jobs: Iterable[CanonicalJob]) -> list[CanonicalJob]:
    """Keep the first job per dedup key, preserving input order."""
    seen: set[str] = set()
    kept: list[CanonicalJob] = []
    for job in jobs:
        key = job.dedup_key
        if key in seen:
            continue
        seen.add(key)
        kept.append(job)
    return kept


def ensure_unique_ids(jobs: list[CanonicalJob]) -> list[CanonicalJob]:
    used: set = set()
    for job in jobs:
        candidate = job.id
        n = 2
        while candidate in used:
            candidate = f"{job.id}_{n}"
            n += 1
        job.id = candidate
        used.add(candidate)
    return jobs

from __future__ import annotations
from jobhub.models.job import Job

__all__ = ["Job"]

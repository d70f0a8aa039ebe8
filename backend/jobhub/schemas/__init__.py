from __future__ import annotations
from jobhub.schemas.job import BulkInsertResponse, JobIn

__all__ = ["BulkInsertResponse", "JobIn"]

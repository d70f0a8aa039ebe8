from __future__ import annotations
from jobhub.db.database import Base, engine
from jobhub.models import job  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=engine)

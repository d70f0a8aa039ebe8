from __future__ import annotations
import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobhub.core.config import Settings
from jobhub.core.errors import ConfigurationError
from jobhub.db.database import Base
from jobhub.models.job import Job  # noqa: F401
from jobhub.providers.base import ProviderAdapter


class StaticAdapter(ProviderAdapter):
    def __init__(self, source: str, response=None, error: Exception | None = None):
        super().__init__(Settings())
        self.source = source
        self.response = response
        self.error = error
        self.queries = []

    def is_configured(self) -> bool:
        return not isinstance(self.error, ConfigurationError)

    async def search(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'jobs.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def make_adapter():
    return StaticAdapter

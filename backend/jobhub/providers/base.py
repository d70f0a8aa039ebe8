from __future__ import annotations
import asyncio
import logging
import math
from dataclasses import dataclass, field, replace
from typing import ClassVar

import httpx

from jobhub.core.config import Settings, settings as default_settings
from jobhub.core.errors import ConfigurationError
from jobhub.pipeline.canonical import ADZUNA, RAPIDAPI, SERPAPI

logger = logging.getLogger(__name__)


@dataclass
class SearchQuery:
    what: str = "data"
    where: str = ""
    page: int = 1
    results_per_page: int = 20
    max_days_old: int | None = None

    @classmethod
    def from_settings(cls, cfg: Settings, max_days_old: int | None = None) -> "SearchQuery":
        return cls(
            what=cfg.provider_query,
            where=cfg.provider_location,
            results_per_page=cfg.provider_results_per_page,
            max_days_old=max_days_old,
        )


@dataclass
class RawProviderResponse:
    """Untrusted provider payload; `records` are the provider's own dicts."""

    source: ClassVar[str] = ""

    records: list[dict] = field(default_factory=list)
    total: int = 0


@dataclass
class AdzunaResponse(RawProviderResponse):
    source: ClassVar[str] = ADZUNA


@dataclass
class SerpApiResponse(RawProviderResponse):
    source: ClassVar[str] = SERPAPI
    next_page_token: str | None = None


@dataclass
class InternshipsResponse(RawProviderResponse):
    source: ClassVar[str] = RAPIDAPI


def dict_records(items) -> list[dict]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


class ProviderAdapter:
    source: str
    data_role_keywords: tuple[str, ...] = ()

    def __init__(self, cfg: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = cfg or default_settings
        self.client = client

    def is_configured(self) -> bool:
        raise NotImplementedError

    def ensure_configured(self) -> None:
        if not self.is_configured():
            raise ConfigurationError(self.source)

    async def search(self, query: SearchQuery) -> RawProviderResponse:
        raise NotImplementedError

    async def get(self, job_id: str) -> dict | None:
        """Look up one raw record by its (possibly prefixed) id."""
        raise NotImplementedError

    def strip_prefix(self, job_id: str) -> str:
        prefix = f"{self.source}_"
        return job_id[len(prefix):] if job_id.startswith(prefix) else job_id

    def record_key(self, record: dict):
        return record.get("id")

    async def search_data_roles(self, query: SearchQuery) -> RawProviderResponse:
        """One search per data keyword, merged and deduplicated by native id.

        Keyword searches fail independently; the fan-out only fails when all
        of them do.
        """
        self.ensure_configured()
        if not self.data_role_keywords:
            return await self.search(query)

        per_keyword = math.ceil(query.results_per_page / len(self.data_role_keywords))
        results = await asyncio.gather(
            *(
                self.search(replace(query, what=keyword, results_per_page=per_keyword))
                for keyword in self.data_role_keywords
            ),
            return_exceptions=True,
        )
        responses = [r for r in results if isinstance(r, RawProviderResponse)]
        failures = [r for r in results if isinstance(r, BaseException)]
        if not responses:
            raise failures[0]
        for exc in failures:
            logger.warning("%s keyword search failed: %s", self.source, exc)

        seen = set()
        merged: list[dict] = []
        for response in responses:
            for record in response.records:
                key = self.record_key(record)
                if key is not None:
                    if key in seen:
                        continue
                    seen.add(key)
                merged.append(record)
        merged = merged[: query.results_per_page]
        return type(responses[0])(records=merged, total=len(merged))

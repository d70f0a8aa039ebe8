from __future__ import annotations
import re

from jobhub.pipeline.canonical import SERPAPI
from jobhub.providers.base import ProviderAdapter, SearchQuery, SerpApiResponse, dict_records
from jobhub.providers.http_helpers import fetch_json

# Google Jobs has no lookup by id; a broad search is scanned instead.
LOOKUP_QUERY = SearchQuery(what="data", results_per_page=100)


class SerpApiAdapter(ProviderAdapter):
    source = SERPAPI
    data_role_keywords = (
        "data scientist",
        "data analyst",
        "data engineer",
        "machine learning engineer",
        "business analyst",
    )

    def is_configured(self) -> bool:
        return bool(self.settings.serpapi_key)

    def record_key(self, record: dict):
        return record.get("job_id") or record.get("title")

    def build_params(self, query: SearchQuery) -> dict:
        params = {
            "api_key": self.settings.serpapi_key,
            "engine": "google_jobs",
            "q": f"{query.what} jobs",
            "num": query.results_per_page,
            "hl": "en",
            "gl": "us",
        }
        if query.where:
            params["location"] = query.where
        return params

    async def search(self, query: SearchQuery) -> SerpApiResponse:
        self.ensure_configured()
        payload = await fetch_json(
            self.source,
            self.settings.serpapi_base_url,
            params=self.build_params(query),
            client=self.client,
            timeout=self.settings.http_timeout_seconds,
        )
        if not isinstance(payload, dict):
            payload = {}
        records = dict_records(payload.get("jobs_results"))

        info = payload.get("search_information")
        total = info.get("total_results") if isinstance(info, dict) else None
        pagination = payload.get("serpapi_pagination") or payload.get("pagination")
        token = pagination.get("next_page_token") if isinstance(pagination, dict) else None
        return SerpApiResponse(
            records=records,
            total=total if isinstance(total, int) else len(records),
            next_page_token=token if isinstance(token, str) else None,
        )

    async def get(self, job_id: str) -> dict | None:
        wanted = self.strip_prefix(job_id)
        response = await self.search(LOOKUP_QUERY)
        for record in response.records:
            title = record.get("title")
            if record.get("job_id") == wanted or (isinstance(title, str) and re.sub(r"\s+", "_", title) == wanted):
                return record
        return None

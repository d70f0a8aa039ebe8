from __future__ import annotations

from jobhub.pipeline.canonical import ADZUNA
from jobhub.providers.base import AdzunaResponse, ProviderAdapter, SearchQuery, dict_records
from jobhub.providers.http_helpers import fetch_json


class AdzunaAdapter(ProviderAdapter):
    source = ADZUNA
    data_role_keywords = (
        "data scientist",
        "data analyst",
        "data engineer",
        "machine learning",
        "business analyst",
        "data science",
    )

    def is_configured(self) -> bool:
        return bool(self.settings.adzuna_app_id and self.settings.adzuna_app_key)

    def _auth(self) -> dict:
        return {"app_id": self.settings.adzuna_app_id, "app_key": self.settings.adzuna_app_key}

    def build_params(self, query: SearchQuery) -> dict:
        params = {
            **self._auth(),
            "what": query.what,
            "results_per_page": query.results_per_page,
            "sort_by": "date",
            "content_type": "job",
        }
        if query.where:
            params["where"] = query.where
        if query.max_days_old:
            params["max_days_old"] = query.max_days_old
        return params

    async def _get_json(self, path: str, params: dict) -> dict:
        payload = await fetch_json(
            self.source,
            f"{self.settings.adzuna_base_url}/jobs/{self.settings.adzuna_country}{path}",
            params=params,
            headers={"Content-Type": "application/json"},
            client=self.client,
            timeout=self.settings.http_timeout_seconds,
        )
        return payload if isinstance(payload, dict) else {}

    async def search(self, query: SearchQuery) -> AdzunaResponse:
        self.ensure_configured()
        payload = await self._get_json(f"/search/{query.page}", self.build_params(query))
        total = payload.get("count")
        return AdzunaResponse(
            records=dict_records(payload.get("results")),
            total=total if isinstance(total, int) else 0,
        )

    async def get(self, job_id: str) -> dict | None:
        self.ensure_configured()
        params = {**self._auth(), "what_or_id": self.strip_prefix(job_id), "results_per_page": 1}
        records = dict_records((await self._get_json("/search/1", params)).get("results"))
        return records[0] if records else None

    async def categories(self) -> list[dict]:
        self.ensure_configured()
        return dict_records((await self._get_json("/categories", self._auth())).get("results"))

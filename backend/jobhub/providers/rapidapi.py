from __future__ import annotations
from urllib.parse import quote

from jobhub.pipeline.canonical import RAPIDAPI
from jobhub.providers.base import InternshipsResponse, ProviderAdapter, SearchQuery, dict_records
from jobhub.providers.http_helpers import fetch_json

DATA_ROLE_KEYWORDS = [
    "data scientist",
    "data analyst",
    "data engineer",
    "data science",
    "machine learning",
    "ml engineer",
    "ai engineer",
    "business analyst",
    "data intern",
    "analytics",
    "big data",
    "data visualization",
    "statistics",
    "python",
    "sql",
    "r programming",
    "tableau",
    "power bi",
]


def _text(record: dict, *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value:
            return value.lower()
    return ""


def is_data_role(record: dict) -> bool:
    title = _text(record, "title", "job_title")
    description = _text(record, "description_text", "description", "job_description")
    company = _text(record, "organization", "company", "company_name")
    return any(role in title or role in description or role in company for role in DATA_ROLE_KEYWORDS)


def unwrap_records(payload) -> list[dict]:
    if isinstance(payload, list):
        return dict_records(payload)
    if isinstance(payload, dict):
        for key in ("jobs", "results", "data"):
            if isinstance(payload.get(key), list):
                return dict_records(payload[key])
    return []


class RapidApiInternshipsAdapter(ProviderAdapter):
    source = RAPIDAPI

    def is_configured(self) -> bool:
        return bool(self.settings.rapidapi_key)

    def build_headers(self) -> dict:
        headers = {
            "x-rapidapi-key": self.settings.rapidapi_key,
            "x-rapidapi-host": self.settings.rapidapi_host,
        }
        if self.settings.rapidapi_app:
            headers["x-rapidapi-app"] = self.settings.rapidapi_app
        return headers

    async def _get_json(self, path: str, params: dict | None = None):
        self.ensure_configured()
        return await fetch_json(
            self.source,
            f"https://{self.settings.rapidapi_host}{path}",
            params=params,
            headers=self.build_headers(),
            client=self.client,
            timeout=self.settings.http_timeout_seconds,
        )

    async def search(self, query: SearchQuery) -> InternshipsResponse:
        payload = await self._get_json(self.settings.rapidapi_path)
        records = unwrap_records(payload)
        # The feed has no keyword parameter, so the data-role scope is applied here.
        kept = [record for record in records if is_data_role(record)]
        return InternshipsResponse(records=kept, total=len(records))

    async def get(self, job_id: str) -> dict | None:
        payload = await self._get_json(f"/jobs/{quote(self.strip_prefix(job_id), safe='')}")
        return payload if isinstance(payload, dict) and payload else None

    async def by_company(self, company: str) -> InternshipsResponse:
        records = unwrap_records(await self._get_json("/jobs/company", {"company": company}))
        return InternshipsResponse(records=records, total=len(records))

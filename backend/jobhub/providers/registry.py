from __future__ import annotations

import httpx

from jobhub.core.config import Settings
from jobhub.pipeline.canonical import PROVIDER_ORDER
from jobhub.providers.adzuna import AdzunaAdapter
from jobhub.providers.base import ProviderAdapter
from jobhub.providers.rapidapi import RapidApiInternshipsAdapter
from jobhub.providers.serpapi import SerpApiAdapter

ADAPTERS: dict[str, type[ProviderAdapter]] = {
    "adzuna": AdzunaAdapter,
    "serpapi": SerpApiAdapter,
    "rapidapi": RapidApiInternshipsAdapter,
}


def build_adapters(cfg: Settings | None = None, client: httpx.AsyncClient | None = None) -> list[ProviderAdapter]:
    return [ADAPTERS[name](cfg, client) for name in PROVIDER_ORDER]

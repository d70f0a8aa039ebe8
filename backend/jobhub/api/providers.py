from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query

from jobhub.api.deps import get_adapters
from jobhub.core.errors import ConfigurationError, ProviderFetchError
from jobhub.pipeline.normalizer import normalize, normalize_records
from jobhub.providers.base import ProviderAdapter, RawProviderResponse, SearchQuery

router = APIRouter(prefix="/providers", tags=["providers"])


def _adapter(source: str, adapters: list[ProviderAdapter]) -> ProviderAdapter:
    adapter = next((a for a in adapters if a.source == source), None)
    if adapter is None:
        raise HTTPException(status_code=404, detail="provider not found")
    return adapter


def _operation(adapter: ProviderAdapter, name: str):
    op = getattr(adapter, name, None)
    if op is None:
        raise HTTPException(status_code=404, detail=f"{adapter.source} does not support {name}")
    return op


async def _call(coro):
    try:
        return await coro
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ProviderFetchError as exc:
        status = 404 if exc.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=str(exc)) from exc


def _listing(response: RawProviderResponse) -> dict:
    data = [job.to_wire() for job in normalize_records(response.records, response.source)]
    return {"success": True, "data": data, "count": len(data), "total": response.total}


@router.get("")
def list_providers(adapters: list[ProviderAdapter] = Depends(get_adapters)):
    return [{"source": a.source, "configured": a.is_configured()} for a in adapters]


@router.get("/{source}/jobs/search")
async def search_provider(
    source: str,
    what: str = "data",
    where: str = "",
    page: int = Query(default=1, ge=1),
    results_per_page: int = Query(default=20, ge=1, le=100),
    adapters: list[ProviderAdapter] = Depends(get_adapters),
):
    adapter = _adapter(source, adapters)
    query = SearchQuery(what=what, where=where, page=page, results_per_page=results_per_page)
    return _listing(await _call(adapter.search(query)))


@router.get("/{source}/jobs/data-roles")
async def search_data_roles(
    source: str,
    where: str = "",
    page: int = Query(default=1, ge=1),
    results_per_page: int = Query(default=50, ge=1, le=100),
    adapters: list[ProviderAdapter] = Depends(get_adapters),
):
    adapter = _adapter(source, adapters)
    query = SearchQuery(where=where, page=page, results_per_page=results_per_page)
    return _listing(await _call(adapter.search_data_roles(query)))


@router.get("/{source}/jobs/company/{company}")
async def jobs_by_company(source: str, company: str, adapters: list[ProviderAdapter] = Depends(get_adapters)):
    adapter = _adapter(source, adapters)
    return _listing(await _call(_operation(adapter, "by_company")(company)))


@router.get("/{source}/jobs/{job_id}")
async def get_provider_job(source: str, job_id: str, adapters: list[ProviderAdapter] = Depends(get_adapters)):
    adapter = _adapter(source, adapters)
    record = await _call(adapter.get(job_id))
    if record is None:
        raise HTTPException(status_code=404, detail="job not found")
    return {"success": True, "data": normalize(record, adapter.source).to_wire()}


@router.get("/{source}/categories")
async def provider_categories(source: str, adapters: list[ProviderAdapter] = Depends(get_adapters)):
    adapter = _adapter(source, adapters)
    categories = await _call(_operation(adapter, "categories")())
    return {"success": True, "data": categories}

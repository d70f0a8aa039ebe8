from __future__ import annotations
from typing import Any

import httpx

from jobhub.core.errors import ProviderFetchError


async def fetch_json(
    source: str,
    url: str,
    *,
    params: dict | None = None,
    headers: dict | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> Any:
    try:
        if client is not None:
            resp = await client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                resp = await own_client.get(url, params=params, headers=headers)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as exc:
        raise ProviderFetchError(
            source, f"HTTP {exc.response.status_code}", status_code=exc.response.status_code
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderFetchError(source, str(exc) or exc.__class__.__name__) from exc
    except ValueError as exc:
        raise ProviderFetchError(source, "response body is not valid JSON") from exc

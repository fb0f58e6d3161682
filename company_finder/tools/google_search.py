from __future__ import annotations

from typing import Any

import httpx

from company_finder.config import settings
from company_finder.errors import CredentialsMissingError, NoResultsError, SearchUnavailableError
from company_finder.models.company import SearchResult
from company_finder.services.logger import logger

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
GOOGLE_MAX_NUM = 10


async def search(query: str, *, max_results: int = 10) -> list[SearchResult]:
    """Execute a Google Custom Search query and normalize the items."""
    missing = [
        name
        for name, value in (
            ("GOOGLE_API_KEY", settings.google_api_key),
            ("GOOGLE_SEARCH_ENGINE_ID", settings.google_search_engine_id),
        )
        if not value
    ]
    if missing:
        raise CredentialsMissingError(missing)

    params: dict[str, Any] = {
        "key": settings.google_api_key,
        "cx": settings.google_search_engine_id,
        "q": query,
        "num": max(1, min(int(max_results), GOOGLE_MAX_NUM)),
    }

    logger.debug(f'Google search: "{query}" (num={params["num"]})')
    try:
        async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
            response = await client.get(GOOGLE_SEARCH_URL, params=params)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise SearchUnavailableError(
            f"Google search rejected the request (HTTP {status})",
            status_code=status,
        ) from exc
    except httpx.HTTPError as exc:
        raise SearchUnavailableError(f"Google search request failed: {exc!r}") from exc
    except ValueError as exc:
        raise SearchUnavailableError("Google search returned a non-JSON body") from exc

    items = payload.get("items") or []
    results = [
        SearchResult(
            title=item.get("title", "") or "",
            link=item.get("link", "") or "",
            snippet=item.get("snippet", "") or "",
        )
        for item in items
        if isinstance(item, dict)
    ]
    if not results:
        raise NoResultsError(query)
    logger.debug(f"Google search returned {len(results)} result(s)")
    return results

from __future__ import annotations

from typing import Any

import httpx

from company_finder.config import settings
from company_finder.errors import CredentialsMissingError, NoResultsError, SearchUnavailableError
from company_finder.models.company import SearchResult

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


async def search(query: str, *, max_results: int = 10) -> list[SearchResult]:
    """Execute a Brave web search and normalize results to title/link/snippet."""
    if not settings.brave_api_key:
        raise CredentialsMissingError(["BRAVE_API_KEY"])

    params: dict[str, Any] = {
        "q": query,
        "count": max_results,
        "search_lang": "jp",
        "country": "JP",
    }

    try:
        async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as client:
            response = await client.get(
                BRAVE_SEARCH_URL,
                params=params,
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": settings.brave_api_key,
                },
            )
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise SearchUnavailableError(
            f"Brave search rejected the request (HTTP {status})",
            status_code=status,
        ) from exc
    except httpx.HTTPError as exc:
        raise SearchUnavailableError(f"Brave search request failed: {exc!r}") from exc
    except ValueError as exc:
        raise SearchUnavailableError("Brave search returned a non-JSON body") from exc

    web = payload.get("web") if isinstance(payload, dict) else None
    raw_results = (web or {}).get("results") or []
    mapped: list[SearchResult] = []
    for item in raw_results:
        if not isinstance(item, dict):
            continue
        snippets = item.get("extra_snippets", []) or []
        description = item.get("description", "") or ""
        mapped.append(
            SearchResult(
                title=item.get("title", "") or "",
                link=item.get("url", "") or "",
                snippet=description.strip() or " ".join(snippets).strip(),
            )
        )
    if not mapped:
        raise NoResultsError(query)
    return mapped

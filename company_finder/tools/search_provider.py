from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

from company_finder.config import settings
from company_finder.errors import SearchUnavailableError
from company_finder.models.company import SearchResult
from company_finder.services.logger import logger
from company_finder.tools import brave_search, google_search

PLACEHOLDER_SNIPPET = "検索サービスに接続できなかったため、検索結果は取得できませんでした。"
_NON_WORD = re.compile(r"[^\w\s]+")
_SHORT_QUERY_TOKENS = 3
_SHORT_QUERY_CHARS = 60


@dataclass
class SearchResponse:
    results: list[SearchResult]
    provider: str
    degraded: bool = False
    fallback_reason: str | None = None


async def _provider_search(provider: str, query: str, max_results: int) -> list[SearchResult]:
    if provider == "google":
        return await google_search.search(query, max_results=max_results)
    if provider == "brave":
        return await brave_search.search(query, max_results=max_results)
    raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")


def shorten_query(query: str) -> str:
    """Strip punctuation and keep only the leading terms of a query."""
    text = unicodedata.normalize("NFKC", query)
    text = _NON_WORD.sub(" ", text)
    tokens = text.split()[:_SHORT_QUERY_TOKENS]
    return " ".join(tokens)[:_SHORT_QUERY_CHARS].strip()


def placeholder_result(query: str) -> SearchResult:
    return SearchResult(
        title=f"[placeholder] {query}",
        link="",
        snippet=PLACEHOLDER_SNIPPET,
        placeholder=True,
    )


async def search(query: str, *, max_results: int | None = None) -> SearchResponse:
    """Run one keyword search against the configured provider.

    ``NoResultsError`` always propagates. ``SearchUnavailableError`` propagates
    unless ``SEARCH_DEGRADED_FALLBACK`` is enabled, in which case a shortened
    query is retried once and, failing that, a single placeholder result is
    returned with ``degraded=True``.
    """
    provider = settings.search_provider.lower().strip()
    limit = max_results or settings.search_max_results

    try:
        results = await _provider_search(provider, query, limit)
        return SearchResponse(results=results, provider=provider)
    except SearchUnavailableError as exc:
        if not settings.search_degraded_fallback:
            raise
        reason = str(exc)

    short_query = shorten_query(query) or query
    logger.warning(f'Search unavailable ({reason}); retrying shortened query "{short_query}"')
    try:
        results = await _provider_search(provider, short_query, settings.search_fallback_max_results)
        return SearchResponse(results=results, provider=provider, degraded=True, fallback_reason=reason)
    except SearchUnavailableError as exc:
        logger.warning(f'Shortened search also failed ({exc}); using placeholder result for "{query}"')
        return SearchResponse(
            results=[placeholder_result(query)],
            provider=provider,
            degraded=True,
            fallback_reason=f"{reason}; {exc}",
        )

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from company_finder.errors import CredentialsMissingError, NoResultsError, SearchUnavailableError
from company_finder.models.company import SearchResult
from company_finder.tools import brave_search, google_search, search_provider


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://www.googleapis.com/customsearch/v1")
            response = httpx.Response(self.status_code, request=request)
            raise httpx.HTTPStatusError("error", request=request, response=response)
        return None

    def json(self):
        return self._payload


class FakeClient:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.asyncio
async def test_google_search_maps_items(credentials):
    payload = {
        "items": [
            {"title": "株式会社テスト 会社概要", "link": "https://test.co.jp/about", "snippet": "本社 東京都"},
            {"title": "Other", "link": "https://other.jp"},
        ]
    }
    fake = FakeClient(FakeResponse(payload))
    with patch("company_finder.tools.google_search.httpx.AsyncClient", return_value=fake):
        results = await google_search.search("株式会社テスト 会社概要", max_results=10)

    assert results == [
        SearchResult(title="株式会社テスト 会社概要", link="https://test.co.jp/about", snippet="本社 東京都"),
        SearchResult(title="Other", link="https://other.jp", snippet=""),
    ]
    params = fake.calls[0]["params"]
    assert params["q"] == "株式会社テスト 会社概要"
    assert params["num"] == 10
    assert params["key"] == "google-key"
    assert params["cx"] == "engine-id"


@pytest.mark.asyncio
async def test_google_search_raises_no_results_instead_of_empty_list(credentials):
    fake = FakeClient(FakeResponse({"searchInformation": {"totalResults": "0"}}))
    with patch("company_finder.tools.google_search.httpx.AsyncClient", return_value=fake):
        with pytest.raises(NoResultsError):
            await google_search.search("nothing here")


@pytest.mark.asyncio
async def test_google_search_maps_rejection_to_unavailable(credentials):
    fake = FakeClient(FakeResponse({}, status_code=403))
    with patch("company_finder.tools.google_search.httpx.AsyncClient", return_value=fake):
        with pytest.raises(SearchUnavailableError) as excinfo:
            await google_search.search("query")
    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_google_search_maps_timeout_to_unavailable(credentials):
    fake = FakeClient(error=httpx.ReadTimeout("timed out"))
    with patch("company_finder.tools.google_search.httpx.AsyncClient", return_value=fake):
        with pytest.raises(SearchUnavailableError):
            await google_search.search("query")


@pytest.mark.asyncio
async def test_google_search_requires_credentials(credentials):
    with (
        patch.object(credentials, "google_search_engine_id", ""),
        patch("company_finder.tools.google_search.httpx.AsyncClient") as client_cls,
    ):
        with pytest.raises(CredentialsMissingError) as excinfo:
            await google_search.search("query")
    assert excinfo.value.missing == ["GOOGLE_SEARCH_ENGINE_ID"]
    client_cls.assert_not_called()


@pytest.mark.asyncio
async def test_brave_search_maps_response_shape(credentials):
    payload = {
        "web": {
            "results": [
                {"title": "Result 1", "url": "https://example.com/1", "description": "Desc 1"},
                {"title": "Result 2", "url": "https://example.com/2", "extra_snippets": ["2a", "2b"]},
            ]
        }
    }
    with (
        patch.object(credentials, "brave_api_key", "brave-key"),
        patch("company_finder.tools.brave_search.httpx.AsyncClient", return_value=FakeClient(FakeResponse(payload))),
    ):
        results = await brave_search.search("query", max_results=2)

    assert [r.link for r in results] == ["https://example.com/1", "https://example.com/2"]
    assert results[0].snippet == "Desc 1"
    assert results[1].snippet == "2a 2b"


class NonJsonResponse(FakeResponse):
    def json(self):
        raise ValueError("not json")


@pytest.mark.asyncio
async def test_brave_search_maps_non_json_body_to_unavailable(credentials):
    with (
        patch.object(credentials, "brave_api_key", "brave-key"),
        patch("company_finder.tools.brave_search.httpx.AsyncClient", return_value=FakeClient(NonJsonResponse(None))),
    ):
        with pytest.raises(SearchUnavailableError, match="non-JSON"):
            await brave_search.search("query")


@pytest.mark.asyncio
async def test_brave_search_null_web_section_means_no_results(credentials):
    with (
        patch.object(credentials, "brave_api_key", "brave-key"),
        patch("company_finder.tools.brave_search.httpx.AsyncClient", return_value=FakeClient(FakeResponse({"web": None}))),
    ):
        with pytest.raises(NoResultsError):
            await brave_search.search("query")


@pytest.mark.asyncio
async def test_brave_non_json_body_takes_degraded_fallback(credentials):
    with (
        patch.object(credentials, "brave_api_key", "brave-key"),
        patch.object(credentials, "search_provider", "brave"),
        patch.object(credentials, "search_degraded_fallback", True),
        patch("company_finder.tools.brave_search.httpx.AsyncClient", return_value=FakeClient(NonJsonResponse(None))),
    ):
        response = await search_provider.search("株式会社テスト 会社概要")

    assert response.degraded is True
    assert response.results[0].placeholder is True


@pytest.mark.asyncio
async def test_search_provider_uses_brave_when_configured(credentials):
    brave = AsyncMock(return_value=[SearchResult(title="t", link="https://a.com", snippet="c")])
    google = AsyncMock()
    with (
        patch.object(credentials, "search_provider", "brave"),
        patch("company_finder.tools.search_provider.brave_search.search", new=brave),
        patch("company_finder.tools.search_provider.google_search.search", new=google),
    ):
        response = await search_provider.search("query")

    assert response.provider == "brave"
    assert response.degraded is False
    brave.assert_awaited_once_with("query", max_results=10)
    google.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_provider_raises_when_provider_unsupported(credentials):
    with patch.object(credentials, "search_provider", "unknown-provider"):
        with pytest.raises(ValueError):
            await search_provider.search("query")


@pytest.mark.asyncio
async def test_unavailable_propagates_when_fallback_disabled(credentials):
    google = AsyncMock(side_effect=SearchUnavailableError("down", status_code=403))
    with patch("company_finder.tools.search_provider.google_search.search", new=google):
        with pytest.raises(SearchUnavailableError):
            await search_provider.search("株式会社テスト 会社概要 本社 住所 代表")
    google.assert_awaited_once()


@pytest.mark.asyncio
async def test_degraded_fallback_retries_shortened_query(credentials):
    recovered = [SearchResult(title="t", link="https://a.jp", snippet="s")]
    google = AsyncMock(side_effect=[SearchUnavailableError("HTTP 400", status_code=400), recovered])
    with (
        patch.object(credentials, "search_degraded_fallback", True),
        patch("company_finder.tools.search_provider.google_search.search", new=google),
    ):
        response = await search_provider.search("株式会社テスト（本社） 会社概要 本社 住所 代表")

    assert response.results == recovered
    assert response.degraded is True
    assert "HTTP 400" in (response.fallback_reason or "")
    second_call = google.await_args_list[1]
    assert second_call.args[0] == "株式会社テスト 本社 会社概要"
    assert second_call.kwargs["max_results"] == 5


@pytest.mark.asyncio
async def test_degraded_fallback_returns_marked_placeholder(credentials):
    google = AsyncMock(side_effect=SearchUnavailableError("down"))
    with (
        patch.object(credentials, "search_degraded_fallback", True),
        patch("company_finder.tools.search_provider.google_search.search", new=google),
    ):
        response = await search_provider.search("株式会社テスト 会社概要")

    assert response.degraded is True
    assert len(response.results) == 1
    assert response.results[0].placeholder is True
    assert google.await_count == 2


@pytest.mark.asyncio
async def test_no_results_is_never_masked_by_fallback(credentials):
    google = AsyncMock(side_effect=NoResultsError("query"))
    with (
        patch.object(credentials, "search_degraded_fallback", True),
        patch("company_finder.tools.search_provider.google_search.search", new=google),
    ):
        with pytest.raises(NoResultsError):
            await search_provider.search("query")
    google.assert_awaited_once()


def test_shorten_query_strips_punctuation():
    assert search_provider.shorten_query("「株式会社テスト」, 会社概要! 本社 住所") == "株式会社テスト 会社概要 本社"

from __future__ import annotations

import httpx
import openai
import pytest

from company_finder.agents.base import parse_json_object
from company_finder.agents.extraction_agent import ExtractionAgent
from company_finder.agents.verification_agent import VerificationAgent
from company_finder.errors import (
    ExtractionFailedError,
    UnparsableResponseError,
    VerificationFailedError,
)
from company_finder.services.retry import RetryPolicy
from fakes import FakeChat, FakeSleep, record_json, sample_results

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


def _agent(cls, replies, sleep=None):
    agent = cls(model="anthropic/claude-3.7-sonnet", retry_policy=RetryPolicy(max_attempts=3), sleep=sleep or FakeSleep())
    agent.client = FakeChat(replies)
    return agent


class TestParseJsonObject:
    def test_extracts_object_from_prose(self):
        text = "以下が結果です。\n```json\n" + record_json() + "\n```\nご確認ください。"
        assert parse_json_object(text)["prefecture"] == "東京都"

    def test_ignores_trailing_braces_after_object(self):
        text = '{"city": "港区"} 注記: {不明な項目}'
        assert parse_json_object(text) == {"city": "港区"}

    def test_raises_without_braces(self):
        with pytest.raises(UnparsableResponseError):
            parse_json_object("情報が見つかりませんでした。")

    def test_raises_on_broken_json(self):
        with pytest.raises(UnparsableResponseError):
            parse_json_object("{postalCode: 1000005,")


class TestExtractionAgent:
    @pytest.mark.asyncio
    async def test_extract_returns_coerced_fields(self):
        agent = _agent(ExtractionAgent, [record_json(postalCode="〒100-0005", city=None)])

        info = await agent.extract("株式会社テスト", sample_results())

        assert info == {
            "postalCode": "1000005",
            "prefecture": "東京都",
            "city": "",
            "address": "丸の内1-1-1",
            "representativeTitle": "代表取締役社長",
            "representativeName": "山田太郎",
        }
        assert "株式会社テスト" in agent.client.prompts[0]
        assert agent.client.kwargs[0]["temperature"] == pytest.approx(0.1)
        assert agent.client.kwargs[0]["model"] == "anthropic/claude-3.7-sonnet"

    @pytest.mark.asyncio
    async def test_all_empty_fields_still_succeed(self):
        empty = record_json(
            postalCode="",
            prefecture="",
            city="",
            address="",
            representativeTitle="",
            representativeName="",
        )
        agent = _agent(ExtractionAgent, [empty])

        info = await agent.extract("株式会社テスト", sample_results())

        assert set(info.values()) == {""}

    @pytest.mark.asyncio
    async def test_unparsable_reply_is_retried_three_times_then_fails(self):
        sleep = FakeSleep()
        agent = _agent(ExtractionAgent, ["JSONはありません"], sleep=sleep)

        with pytest.raises(ExtractionFailedError) as excinfo:
            await agent.extract("株式会社テスト", sample_results())

        assert len(agent.client.prompts) == 3
        assert sleep.delays == [1.0, 2.0]
        assert excinfo.value.attempts == 3
        assert isinstance(excinfo.value.last_error, UnparsableResponseError)

    @pytest.mark.asyncio
    async def test_transient_errors_recover(self):
        request = httpx.Request("POST", OPENROUTER_URL)
        rate_limited = openai.RateLimitError(
            "rate limited",
            response=httpx.Response(429, request=request),
            body=None,
        )
        sleep = FakeSleep()
        agent = _agent(
            ExtractionAgent,
            [openai.APIConnectionError(request=request), rate_limited, record_json()],
            sleep=sleep,
        )

        info = await agent.extract("株式会社テスト", sample_results())

        assert info["representativeName"] == "山田太郎"
        assert len(agent.client.prompts) == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_retried(self):
        request = httpx.Request("POST", OPENROUTER_URL)
        denied = openai.AuthenticationError(
            "bad key",
            response=httpx.Response(401, request=request),
            body=None,
        )
        sleep = FakeSleep()
        agent = _agent(ExtractionAgent, [denied], sleep=sleep)

        with pytest.raises(ExtractionFailedError):
            await agent.extract("株式会社テスト", sample_results())

        assert len(agent.client.prompts) == 1
        assert sleep.delays == []


class TestVerificationAgent:
    @pytest.mark.asyncio
    async def test_verify_sends_first_pass_and_new_results(self):
        agent = _agent(VerificationAgent, [record_json(representativeName="山田 太郎")])
        first_pass = {"postalCode": "1000005", "prefecture": "東京都", "representativeName": "山田太郎"}

        info = await agent.verify("株式会社テスト", first_pass, sample_results(1))

        assert info["representativeName"] == "山田 太郎"
        prompt = agent.client.prompts[0]
        assert '"postalCode": "1000005"' in prompt
        assert "https://example.co.jp/0" in prompt

    @pytest.mark.asyncio
    async def test_verify_wraps_exhausted_retries(self):
        agent = _agent(VerificationAgent, ["no json"])

        with pytest.raises(VerificationFailedError):
            await agent.verify("株式会社テスト", {}, sample_results(1))

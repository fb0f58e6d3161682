"""OpenRouter LLM client factory (OpenAI-compatible chat completions)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from company_finder.config import settings
from company_finder.errors import CredentialsMissingError


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Completion:
    text: str
    usage: Usage = field(default_factory=Usage)


class OpenRouterChat:
    """Thin wrapper that sends one user prompt and returns the reply text."""

    def __init__(self, openai_client: Any):
        self._client = openai_client

    @staticmethod
    def _from_openai_response(response: Any) -> Completion:
        choices = getattr(response, "choices", None) or []
        text = ""
        if choices:
            message = getattr(choices[0], "message", None)
            text = getattr(message, "content", None) or ""

        usage = getattr(response, "usage", None)
        return Completion(
            text=text,
            usage=Usage(
                input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            ),
        )

    async def complete(
        self,
        prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: float,
        system: str | None = None,
    ) -> Completion:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return self._from_openai_response(response)


def get_client() -> OpenRouterChat:
    """Get an OpenRouter client via the OpenAI SDK."""
    from openai import AsyncOpenAI

    if not settings.openrouter_api_key:
        raise CredentialsMissingError(["OPENROUTER_API_KEY"])

    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    openai_client = AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=base_url,
        timeout=settings.llm_timeout_seconds,
        # Retries are owned by the agents' RetryPolicy.
        max_retries=0,
    )
    return OpenRouterChat(openai_client)


def get_model() -> str:
    """Get the active OpenRouter model id."""
    if settings.openrouter_model:
        return settings.openrouter_model
    return settings.default_model


_client: OpenRouterChat | None = None


def client() -> OpenRouterChat:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client

from __future__ import annotations

import json
import re
import time
from typing import Any

import openai

from company_finder.config import settings
from company_finder.errors import (
    CredentialsMissingError,
    ModelCallError,
    RetryExhaustedError,
    UnparsableResponseError,
)
from company_finder.llm_client import client as llm_client, get_model
from company_finder.models.company import all_fields_empty, coerce_record_fields
from company_finder.services import logger as log_service
from company_finder.services.logger import logger
from company_finder.services.retry import RetryPolicy, attempt

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
    UnparsableResponseError,
)


def parse_json_object(text: str) -> dict[str, Any]:
    """Pull the JSON object out of free-form model text."""
    match = _JSON_SPAN.search(text or "")
    if not match:
        raise UnparsableResponseError("Model response did not contain a JSON object")

    candidate = match.group(0)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        # Trailing prose may contain stray braces; decode the first object only.
        try:
            parsed, _ = json.JSONDecoder().raw_decode(candidate)
        except json.JSONDecodeError as exc:
            raise UnparsableResponseError(f"Model response JSON could not be parsed: {exc}") from exc

    if not isinstance(parsed, dict):
        raise UnparsableResponseError("Model response JSON was not an object")
    return parsed


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.llm_max_attempts,
        base_delay=settings.llm_backoff_base_seconds,
        multiplier=2.0,
    )


class BaseAgent:
    """One prompt in, one six-field record out, with retries.

    Subclasses set ``name`` and ``failure_error`` and build the prompt.
    """

    name: str = "base"
    failure_error: type[ModelCallError] = ModelCallError

    def __init__(
        self,
        model: str | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep=None,
    ):
        self.model = model or get_model()
        self.retry_policy = retry_policy or default_retry_policy()
        self.client = None
        self._sleep = sleep

    async def _complete_once(self, prompt: str, company_name: str) -> dict[str, Any]:
        active_client = self.client or llm_client()
        t0 = time.monotonic()
        try:
            completion = await active_client.complete(
                prompt,
                model=self.model,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            )
        except Exception as exc:
            log_service.log_llm_call(
                model=self.model,
                caller=self.name,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise

        log_service.log_llm_call(
            model=self.model,
            caller=self.name,
            input_tokens=completion.usage.input_tokens,
            output_tokens=completion.usage.output_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        logger.debug(f"{self.name} response for {company_name}: {completion.text[:100]}...")
        return parse_json_object(completion.text)

    def _on_retry(self, company_name: str):
        def log_retry(attempt_no: int, exc: BaseException, delay: float) -> None:
            logger.warning(
                f"{self.name} attempt {attempt_no}/{self.retry_policy.max_attempts} "
                f"failed for {company_name}: {exc}; retrying in {delay:.1f}s"
            )

        return log_retry

    async def run_prompt(self, prompt: str, company_name: str) -> dict[str, str]:
        kwargs: dict[str, Any] = {
            "retry_on": RETRYABLE_ERRORS,
            "on_retry": self._on_retry(company_name),
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep

        try:
            parsed = await attempt(
                lambda: self._complete_once(prompt, company_name),
                self.retry_policy,
                **kwargs,
            )
        except RetryExhaustedError as exc:
            raise self.failure_error(exc.last_error, exc.attempts) from exc.last_error
        except CredentialsMissingError:
            raise
        except Exception as exc:
            raise self.failure_error(exc, 1) from exc

        info = coerce_record_fields(parsed)
        if all_fields_empty(info):
            logger.warning(f"{self.name}: every field is empty for {company_name} (low confidence)")
        return info

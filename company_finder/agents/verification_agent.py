from __future__ import annotations

from typing import Any, Iterable

from company_finder.agents.base import BaseAgent
from company_finder.errors import VerificationFailedError
from company_finder.models.company import SearchResult
from company_finder.services.prompt_builder import build_verification_prompt


class VerificationAgent(BaseAgent):
    """Second pass: check the first extraction against a fresh search."""

    name = "verification"
    failure_error = VerificationFailedError

    async def verify(
        self,
        company_name: str,
        partial_record: dict[str, Any],
        fact_check_results: Iterable[SearchResult],
    ) -> dict[str, str]:
        prompt = build_verification_prompt(company_name, partial_record, fact_check_results)
        return await self.run_prompt(prompt, company_name)

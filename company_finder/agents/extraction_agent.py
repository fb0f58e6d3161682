from __future__ import annotations

from typing import Iterable

from company_finder.agents.base import BaseAgent
from company_finder.errors import ExtractionFailedError
from company_finder.models.company import SearchResult
from company_finder.services.prompt_builder import build_extraction_prompt


class ExtractionAgent(BaseAgent):
    """First pass: read search snippets and propose the six fields."""

    name = "extraction"
    failure_error = ExtractionFailedError

    async def extract(self, company_name: str, search_results: Iterable[SearchResult]) -> dict[str, str]:
        prompt = build_extraction_prompt(company_name, search_results)
        return await self.run_prompt(prompt, company_name)

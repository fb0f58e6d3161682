from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from company_finder.agents.extraction_agent import ExtractionAgent
from company_finder.agents.verification_agent import VerificationAgent
from company_finder.config import settings
from company_finder.errors import CredentialsMissingError
from company_finder.models.company import BatchSummary, CompanyRecord, ProgressEvent
from company_finder.services import logger as log_service
from company_finder.services import streaming
from company_finder.services.broadcast import BroadcastPort, NullBroadcaster
from company_finder.services.logger import logger
from company_finder.services.prompt_builder import build_additional_query, build_basic_query
from company_finder.tools import search_provider
from company_finder.tools.search_provider import SearchResponse

STEP_SEARCH_BASIC = (1, "基本情報を検索中...")
STEP_EXTRACT = (2, "情報を抽出中...")
STEP_SEARCH_ADDITIONAL = (3, "追加情報を検索中...")
STEP_VERIFY = (4, "情報を検証中...")
STEP_DONE = (5, "検索完了")
STEP_ERROR = "error"

SearchFn = Callable[[str], Awaitable[SearchResponse]]


def missing_credentials() -> list[str]:
    missing: list[str] = []
    if not settings.search_credentials_configured:
        if settings.search_provider.lower().strip() == "brave":
            missing.append("BRAVE_API_KEY")
        else:
            if not settings.google_api_key:
                missing.append("GOOGLE_API_KEY")
            if not settings.google_search_engine_id:
                missing.append("GOOGLE_SEARCH_ENGINE_ID")
    if not settings.llm_credentials_configured:
        missing.append("OPENROUTER_API_KEY")
    return missing


class CompanyLookupOrchestrator:
    """Runs search → extract → re-search → verify for each company in a batch.

    Companies are processed strictly one after another, in submission order.
    Every per-company failure becomes a Failed ``CompanyRecord``; nothing
    raised inside ``process_one`` aborts the batch.
    """

    def __init__(
        self,
        broadcaster: BroadcastPort | None = None,
        *,
        model: str | None = None,
        search: SearchFn | None = None,
        extraction_agent: ExtractionAgent | None = None,
        verification_agent: VerificationAgent | None = None,
        inter_company_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.broadcaster = broadcaster or NullBroadcaster()
        self.search = search or search_provider.search
        self.extraction_agent = extraction_agent or ExtractionAgent(model=model)
        self.verification_agent = verification_agent or VerificationAgent(model=model)
        self.inter_company_delay = (
            settings.inter_company_delay_seconds if inter_company_delay is None else inter_company_delay
        )
        self._sleep = sleep

    async def _progress(self, company_name: str, step: str, step_number: int | str) -> None:
        await self.broadcaster.publish(
            streaming.search_progress(ProgressEvent(company=company_name, step=step, step_number=step_number))
        )

    async def _enter(self, company_name: str, step: tuple[int, str]) -> None:
        number, label = step
        log_service.log_pipeline_step(company_name, label, "started", {"step_number": number})
        await self._progress(company_name, label, number)

    async def process_one(self, company_name: str) -> CompanyRecord:
        current_step = 0
        degraded = False
        try:
            missing = missing_credentials()
            if missing:
                raise CredentialsMissingError(missing)

            current_step = STEP_SEARCH_BASIC[0]
            await self._enter(company_name, STEP_SEARCH_BASIC)
            basic = await self.search(build_basic_query(company_name))
            degraded = degraded or basic.degraded

            current_step = STEP_EXTRACT[0]
            await self._enter(company_name, STEP_EXTRACT)
            first_pass = await self.extraction_agent.extract(company_name, basic.results)

            current_step = STEP_SEARCH_ADDITIONAL[0]
            await self._enter(company_name, STEP_SEARCH_ADDITIONAL)
            additional_query = build_additional_query(company_name, first_pass)
            logger.info(f'Additional search query for {company_name}: "{additional_query}"')
            fact_check = await self.search(additional_query)
            degraded = degraded or fact_check.degraded

            current_step = STEP_VERIFY[0]
            await self._enter(company_name, STEP_VERIFY)
            verified = await self.verification_agent.verify(company_name, first_pass, fact_check.results)

            current_step = STEP_DONE[0]
            record = CompanyRecord.resolved(company_name, verified, degraded=degraded)
            await self._enter(company_name, STEP_DONE)
            return record
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            log_service.log_pipeline_step(
                company_name,
                f"step_{current_step}",
                "error",
                {"error_type": exc.__class__.__name__, "error": message},
            )
            await self._progress(company_name, f"エラー: {message}", STEP_ERROR)
            return CompanyRecord.failed(company_name, message)

    async def process_batch(self, company_names: list[str]) -> list[CompanyRecord]:
        total = len(company_names)
        t0 = time.monotonic()
        log_service.log_event("batch_started", "Company batch started", total_companies=total)
        await self.broadcaster.publish(streaming.search_start(total))

        results: list[CompanyRecord] = []
        for index, company_name in enumerate(company_names):
            logger.info(f"Searching for company ({index + 1}/{total}): {company_name}")
            record = await self.process_one(company_name)
            results.append(record)
            await self.broadcaster.publish(streaming.search_complete(record))

            if index < total - 1 and self.inter_company_delay > 0:
                await self._sleep(self.inter_company_delay)

        summary = BatchSummary(total_companies=total, results=results)
        log_service.log_event(
            "batch_completed",
            "Company batch completed",
            total_companies=total,
            success_count=summary.success_count,
            error_count=summary.error_count,
            runtime_ms=int((time.monotonic() - t0) * 1000),
        )
        await self.broadcaster.publish(streaming.all_search_complete(summary))
        return results

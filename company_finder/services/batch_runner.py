from __future__ import annotations

import asyncio
from typing import Any, Callable

from company_finder.agents.orchestrator import CompanyLookupOrchestrator
from company_finder.config import settings
from company_finder.errors import InputValidationError
from company_finder.models.company import CompanyRecord
from company_finder.services.broadcast import BroadcastPort
from company_finder.services.logger import logger
from company_finder.services.result_store import LatestResultStore

OrchestratorFactory = Callable[[BroadcastPort], CompanyLookupOrchestrator]


def validate_company_names(companies: Any, *, dedupe: bool = False, max_companies: int | None = None) -> list[str]:
    """Check a submitted batch and return the trimmed names.

    With ``dedupe`` (the WebSocket path) blank entries are dropped and exact
    duplicates removed, keeping first occurrences. Without it every entry
    must be a non-blank string so one record comes back per submitted name.
    """
    limit = max_companies or settings.max_companies_per_batch
    if not isinstance(companies, list) or not companies:
        raise InputValidationError("Invalid input. Please provide an array of company names.")

    if not dedupe and len(companies) > limit:
        raise InputValidationError(f"Too many companies. Maximum limit is {limit}.")

    names: list[str] = []
    seen: set[str] = set()
    for entry in companies:
        name = entry.strip() if isinstance(entry, str) else ""
        if dedupe:
            if not name or name in seen:
                continue
            seen.add(name)
        elif not name:
            raise InputValidationError("Invalid input. Company names must be non-empty strings.")
        names.append(name)

    if not names:
        raise InputValidationError("Invalid input. Please provide an array of company names.")
    if len(names) > limit:
        raise InputValidationError(f"Too many companies. Maximum limit is {limit}.")
    return names


class BatchRunner:
    """Serializes batches so only one pipeline talks to the external APIs at a time."""

    def __init__(
        self,
        result_store: LatestResultStore,
        orchestrator_factory: OrchestratorFactory | None = None,
    ):
        self.result_store = result_store
        self._factory = orchestrator_factory or (lambda broadcaster: CompanyLookupOrchestrator(broadcaster))
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run(self, company_names: list[str], broadcaster: BroadcastPort) -> list[CompanyRecord]:
        async with self._lock:
            self.result_store.clear()
            orchestrator = self._factory(broadcaster)
            results = await orchestrator.process_batch(company_names)
            self.result_store.store(results)
            return results

    def start(self, company_names: list[str], broadcaster: BroadcastPort) -> asyncio.Task:
        """Run a batch in the background; the task survives client disconnects."""
        task = asyncio.create_task(self.run(company_names, broadcaster))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Background batch failed: {exc!r}")

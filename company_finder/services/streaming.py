from __future__ import annotations

import time
from typing import Any

from company_finder.models.company import BatchSummary, CompanyRecord, ProgressEvent
from company_finder.models.events import ChannelEvent, EventType


def connection_established() -> ChannelEvent:
    return ChannelEvent(
        event=EventType.CONNECTION_ESTABLISHED,
        data={"message": "WebSocket connection established"},
    )


def search_start(total_companies: int) -> ChannelEvent:
    return ChannelEvent(event=EventType.SEARCH_START, data={"totalCompanies": total_companies})


def search_progress(progress: ProgressEvent) -> ChannelEvent:
    return ChannelEvent(event=EventType.SEARCH_PROGRESS, data=progress.to_dict())


def search_complete(record: CompanyRecord) -> ChannelEvent:
    return ChannelEvent(
        event=EventType.SEARCH_COMPLETE,
        data={
            "company": record.company_name,
            "success": not record.error_occurred,
            "error": record.error,
        },
    )


def all_search_complete(summary: BatchSummary, *, include_results: bool = True) -> ChannelEvent:
    data: dict[str, Any] = {
        "totalCompanies": summary.total_companies,
        "successCount": summary.success_count,
        "errorCount": summary.error_count,
    }
    if include_results:
        data["results"] = [r.to_dict() for r in summary.results]
    return ChannelEvent(event=EventType.ALL_SEARCH_COMPLETE, data=data)


def pong(timestamp: Any = None) -> ChannelEvent:
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return ChannelEvent(event=EventType.PONG, data={"timestamp": timestamp})


def error(message: str) -> ChannelEvent:
    return ChannelEvent(event=EventType.ERROR, data={"message": message})

from __future__ import annotations

import json

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from company_finder.api.deps import get_batch_runner, get_channel_hub, get_result_store
from company_finder.models.events import EventType
from company_finder.models.schemas import SearchRequest, SearchResponse
from company_finder.services import logger as log_service
from company_finder.services import streaming
from company_finder.services.batch_runner import BatchRunner, validate_company_names
from company_finder.services.broadcast import ChannelHub, QueueClient
from company_finder.services.result_store import LatestResultStore

router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=SearchResponse)
async def search_companies(
    request: SearchRequest,
    runner: BatchRunner = Depends(get_batch_runner),
    hub: ChannelHub = Depends(get_channel_hub),
):
    """Run a whole batch and reply with every record at once.

    Progress is still pushed to any connected WebSocket tabs.
    """
    names = validate_company_names(request.companies)
    log_service.log_event("search_requested", "Synchronous batch requested", total_companies=len(names))
    results = await runner.run(names, hub)
    return SearchResponse(results=[r.to_dict() for r in results])


@router.post("/stream")
async def stream_companies(
    request: SearchRequest,
    runner: BatchRunner = Depends(get_batch_runner),
):
    """SSE variant: the channel events of this batch only."""
    names = validate_company_names(request.companies)
    log_service.log_event("search_requested", "Streaming batch requested", total_companies=len(names))

    private_hub = ChannelHub()
    subscriber = QueueClient()
    private_hub.register(subscriber)
    task = runner.start(names, private_hub)

    def _report_failure(done) -> None:
        if not done.cancelled() and done.exception() is not None:
            subscriber.queue.put_nowait(streaming.error("Batch failed unexpectedly.").to_message())

    task.add_done_callback(_report_failure)

    async def event_generator():
        while True:
            message = await subscriber.queue.get()
            message_type = message.get("type", "")
            yield {
                "event": message_type,
                "data": json.dumps(message, ensure_ascii=False),
            }
            if message_type in (EventType.ALL_SEARCH_COMPLETE.value, EventType.ERROR.value):
                break

    return EventSourceResponse(event_generator())


@router.get("/latest", response_model=SearchResponse)
async def latest_results(store: LatestResultStore = Depends(get_result_store)):
    return SearchResponse(results=[r.to_dict() for r in store.get()])

from __future__ import annotations

from company_finder.services.batch_runner import BatchRunner
from company_finder.services.broadcast import ChannelHub
from company_finder.services.result_store import LatestResultStore

# Process-wide singletons; routes receive them through Depends so tests can override.
_hub = ChannelHub()
_result_store = LatestResultStore()
_runner = BatchRunner(_result_store)


def get_channel_hub() -> ChannelHub:
    return _hub


def get_result_store() -> LatestResultStore:
    return _result_store


def get_batch_runner() -> BatchRunner:
    return _runner

"""Broadcast port used by the orchestrator to push channel events.

The orchestrator only sees ``publish``; the caller owns the registry of
connected clients (WebSocket tabs, an SSE queue, the CLI printer).
"""
from __future__ import annotations

import asyncio
from typing import Any, Protocol, runtime_checkable

from company_finder.models.events import ChannelEvent
from company_finder.services.logger import logger


@runtime_checkable
class ChannelClient(Protocol):
    async def send(self, message: dict[str, Any]) -> None: ...


class BroadcastPort(Protocol):
    def register(self, client: ChannelClient) -> None: ...

    def unregister(self, client: ChannelClient) -> None: ...

    async def publish(self, event: ChannelEvent) -> None: ...


class ChannelHub:
    """In-process fan-out of channel events to every registered client."""

    def __init__(self) -> None:
        self._clients: list[ChannelClient] = []

    def __len__(self) -> int:
        return len(self._clients)

    @property
    def clients(self) -> list[ChannelClient]:
        return list(self._clients)

    def register(self, client: ChannelClient) -> None:
        if client not in self._clients:
            self._clients.append(client)

    def unregister(self, client: ChannelClient) -> None:
        if client in self._clients:
            self._clients.remove(client)

    async def publish(self, event: ChannelEvent) -> None:
        message = event.to_message()
        for client in self.clients:
            try:
                await client.send(message)
            except Exception as exc:
                logger.warning(f"Dropping channel client after failed send ({event.event.value}): {exc!r}")
                self.unregister(client)


class NullBroadcaster:
    """Port implementation for callers that want no incremental events."""

    def register(self, client: ChannelClient) -> None:
        return None

    def unregister(self, client: ChannelClient) -> None:
        return None

    async def publish(self, event: ChannelEvent) -> None:
        return None


class WebSocketClient:
    def __init__(self, websocket: Any):
        self.websocket = websocket

    async def send(self, message: dict[str, Any]) -> None:
        await self.websocket.send_json(message)


class QueueClient:
    """Collects messages into an asyncio queue (used by the SSE stream)."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def send(self, message: dict[str, Any]) -> None:
        await self.queue.put(message)

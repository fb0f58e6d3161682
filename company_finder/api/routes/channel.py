from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from company_finder.api.deps import get_batch_runner, get_channel_hub
from company_finder.errors import InputValidationError
from company_finder.models.events import ChannelEvent, ClientMessageType
from company_finder.services import logger as log_service
from company_finder.services import streaming
from company_finder.services.batch_runner import BatchRunner, validate_company_names
from company_finder.services.broadcast import ChannelHub, WebSocketClient
from company_finder.services.logger import logger

router = APIRouter(tags=["channel"])


async def _reply(client: WebSocketClient, event: ChannelEvent) -> None:
    await client.send(event.to_message())


async def handle_message(
    raw: str,
    client: WebSocketClient,
    *,
    runner: BatchRunner,
    hub: ChannelHub,
) -> None:
    """Dispatch one client→server message."""
    try:
        message: Any = json.loads(raw)
    except json.JSONDecodeError:
        await _reply(client, streaming.error("Malformed message: expected JSON."))
        return
    if not isinstance(message, dict) or not message.get("type"):
        await _reply(client, streaming.error("Malformed message: missing type."))
        return

    message_type = message["type"]
    if message_type == ClientMessageType.PING.value:
        await _reply(client, streaming.pong(message.get("timestamp")))
    elif message_type == ClientMessageType.SEARCH.value:
        try:
            names = validate_company_names(message.get("companies"), dedupe=True)
        except InputValidationError as exc:
            await _reply(client, streaming.error(str(exc)))
            return
        log_service.log_event("search_requested", "WebSocket batch requested", total_companies=len(names))
        runner.start(names, hub)
    elif message_type in (ClientMessageType.CLIENT_INFO.value, ClientMessageType.CLIENT_CONNECTED.value):
        logger.debug(f"Channel client info: {message}")
    else:
        await _reply(client, streaming.error(f"Unknown message type: {message_type}"))


@router.websocket("/ws")
async def channel(
    websocket: WebSocket,
    runner: BatchRunner = Depends(get_batch_runner),
    hub: ChannelHub = Depends(get_channel_hub),
):
    await websocket.accept()
    client = WebSocketClient(websocket)
    hub.register(client)
    logger.info(f"WebSocket client connected ({len(hub)} active)")
    try:
        await _reply(client, streaming.connection_established())
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                await _reply(client, streaming.error("Malformed message: expected a text frame."))
                continue
            await handle_message(raw, client, runner=runner, hub=hub)
    except WebSocketDisconnect:
        pass
    finally:
        # A running batch keeps going; this tab just stops receiving events.
        hub.unregister(client)
        logger.info(f"WebSocket client disconnected ({len(hub)} active)")

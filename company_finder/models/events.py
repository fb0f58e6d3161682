from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    CONNECTION_ESTABLISHED = "connection_established"
    SEARCH_START = "search_start"
    SEARCH_PROGRESS = "search_progress"
    SEARCH_COMPLETE = "search_complete"
    ALL_SEARCH_COMPLETE = "all_search_complete"
    PONG = "pong"
    ERROR = "error"


class ClientMessageType(str, Enum):
    SEARCH = "search"
    PING = "ping"
    CLIENT_INFO = "client_info"
    CLIENT_CONNECTED = "client_connected"


@dataclass
class ChannelEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        return {"type": self.event.value, **self.data}

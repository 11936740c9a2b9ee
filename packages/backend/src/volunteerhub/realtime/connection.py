"""Connection handles — what the registry stores and the gateway pushes to.

Frames on the wire are JSON objects: {"event": <name>, "data": <payload>}.
"""

import uuid
from typing import Any, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState


class ConnectionClosedError(Exception):
    """Raised when pushing to a connection that is no longer open."""


class Connection(Protocol):
    """Anything the gateway can push events to. Must be hashable."""

    id: str

    async def send(self, event: str, data: Any) -> None: ...


class WebSocketConnection:
    """A Connection backed by a Starlette/FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.id = uuid.uuid4().hex

    async def send(self, event: str, data: Any) -> None:
        if (
            self.websocket.client_state != WebSocketState.CONNECTED
            or self.websocket.application_state != WebSocketState.CONNECTED
        ):
            raise ConnectionClosedError(self.id)
        try:
            await self.websocket.send_json({"event": event, "data": data})
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise ConnectionClosedError(self.id) from e

    def __repr__(self) -> str:
        return f"<WebSocketConnection {self.id}>"

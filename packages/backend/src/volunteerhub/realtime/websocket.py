"""WebSocket endpoint — the live connection a browser tab holds open.

Clients connect to /ws?token=JWT (or send an Authorization: Bearer header).
The handler:
1. Authenticates the handshake token. On failure the socket is accepted
   and immediately closed with code 4001, so browsers see the code
   (closing before accept would surface as a plain HTTP 403 under uvicorn)
2. Registers the connection with the gateway
3. Runs every inbound frame as its own task, so a slow send does not
   hold up the next one. At most ``live_max_inflight_frames`` run at once
   per connection; further frames wait to be read
4. Unregisters on disconnect; in-flight sends are left to finish

This is a long-lived connection — one per browser tab.
"""

import asyncio

from fastapi import APIRouter, WebSocket

from volunteerhub.auth.dependencies import bearer_token
from volunteerhub.config import settings
from volunteerhub.errors import AuthError, PersistenceError
from volunteerhub.realtime.connection import WebSocketConnection
from volunteerhub.realtime.gateway import RealtimeGateway

router = APIRouter()

AUTH_FAILED_CLOSE_CODE = 4001
UNAVAILABLE_CLOSE_CODE = 1011


@router.websocket("/ws")
async def live_socket(websocket: WebSocket):
    """Authenticated live channel for chat messages and notifications."""
    gateway: RealtimeGateway = websocket.app.state.gateway

    # ── Authentication ──────────────────────────────────────
    token = websocket.query_params.get("token") or bearer_token(
        websocket.headers.get("authorization")
    )
    session = gateway.new_session(WebSocketConnection(websocket))
    try:
        await gateway.authenticate(session, token)
    except AuthError as e:
        await websocket.accept()
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason=f"Authentication error: {e}")
        return
    except PersistenceError:
        await websocket.accept()
        await websocket.close(code=UNAVAILABLE_CLOSE_CODE, reason="Service unavailable")
        return

    # ── Connection accepted ─────────────────────────────────
    await websocket.accept()
    await gateway.open(session)

    slots = asyncio.Semaphore(settings.live_max_inflight_frames)
    in_flight: set[asyncio.Task] = set()

    def _finished(task: asyncio.Task) -> None:
        in_flight.discard(task)
        slots.release()

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            await slots.acquire()
            text = message.get("text")
            if text is not None:
                task = asyncio.create_task(gateway.handle_text(session, text))
            else:
                task = asyncio.create_task(
                    gateway.handle_bytes(session, message.get("bytes") or b"")
                )
            in_flight.add(task)
            task.add_done_callback(_finished)
    finally:
        await gateway.close(session)

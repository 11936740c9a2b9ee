"""Realtime gateway — authenticated live connections and message fan-out.

Learn: Each connection moves through CONNECTING → AUTHENTICATING → OPEN → CLOSED.
The bearer token arrives with the handshake, never as a message. Once
OPEN the client may emit ``sendMessage`` as often as it likes:

1. MessageStore.create()           (own DB session per event)
2. NotificationStore.create()      (second, separate commit)
3. registry.lookup(receiver)       (snapshot)
4. receiveMessage + newNotification → every recipient connection
5. receiveMessage → the originating connection only (delivery echo)

A failure in 1 or 2 sends ``chatError`` to the originator and stops there;
nobody else hears about it and the connection stays open. If the
notification write fails the message stays stored (there is no
cross-write transaction) and the failure is logged.
"""

import asyncio
import json
import uuid
from enum import Enum
from typing import Any, Callable, Optional

import pydantic
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.auth.dependencies import resolve_token_user
from volunteerhub.config import settings
from volunteerhub.errors import (
    AuthError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    VolunteerHubError,
)
from volunteerhub.realtime.connection import Connection, ConnectionClosedError
from volunteerhub.realtime.registry import ConnectionRegistry
from volunteerhub.schemas.message import MessageRead, SendMessage
from volunteerhub.schemas.notification import NotificationRead
from volunteerhub.schemas.user import UserSummary
from volunteerhub.services.message_store import MessageStore, populate_message
from volunteerhub.services.notification_store import NotificationStore

logger = structlog.get_logger()

# ─── Event names (wire protocol) ─────────────────────────

SEND_MESSAGE = "sendMessage"
RECEIVE_MESSAGE = "receiveMessage"
NEW_NOTIFICATION = "newNotification"
CHAT_ERROR = "chatError"
PING = "ping"
PONG = "pong"

GENERIC_SEND_ERROR = "Failed to send message."


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    OPEN = "open"
    CLOSED = "closed"


class LiveSession:
    """Gateway-side context for one connection."""

    def __init__(self, connection: Connection):
        self.connection = connection
        self.state = ConnectionState.CONNECTING
        self.user: Optional[UserSummary] = None
        self.log = logger.bind(connection_id=getattr(connection, "id", None))

    @property
    def user_id(self) -> Optional[uuid.UUID]:
        return self.user.id if self.user else None

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN


class RealtimeGateway:
    """Owns the live side of messaging.

    ``session_factory`` returns an async context manager yielding an
    AsyncSession (an ``async_sessionmaker`` in production).
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        session_factory: Callable[[], AsyncSession],
        *,
        notification_link: Optional[str] = None,
    ):
        self.registry = registry
        self.session_factory = session_factory
        self.notification_link = notification_link or settings.message_notification_link

    # ─── Lifecycle ────────────────────────────────────────

    def new_session(self, connection: Connection) -> LiveSession:
        return LiveSession(connection)

    async def authenticate(self, session: LiveSession, token: Optional[str]) -> UserSummary:
        """Resolve the handshake token to a user. AuthError closes the attempt."""
        session.state = ConnectionState.AUTHENTICATING
        try:
            async with self.session_factory() as db:
                user = await resolve_token_user(token, db)
                session.user = UserSummary.model_validate(user)
        except AuthError as e:
            session.state = ConnectionState.CLOSED
            session.log.info("gateway.auth_rejected", reason=str(e))
            raise
        except SQLAlchemyError as e:
            session.state = ConnectionState.CLOSED
            session.log.warning("gateway.auth_unavailable", error=str(e))
            raise PersistenceError("Authentication backend unavailable") from e
        session.log = session.log.bind(user_id=str(session.user.id))
        return session.user

    async def open(self, session: LiveSession) -> None:
        """Register an authenticated session so it receives fan-out."""
        if session.state is not ConnectionState.AUTHENTICATING or session.user is None:
            raise AuthError("Connection is not authenticated")
        await self.registry.register(session.user.id, session.connection)
        session.state = ConnectionState.OPEN
        session.log.info("gateway.connected", user_name=session.user.name)

    async def connect(self, connection: Connection, token: Optional[str]) -> LiveSession:
        """authenticate() + open() in one step."""
        session = self.new_session(connection)
        await self.authenticate(session, token)
        await self.open(session)
        return session

    async def close(self, session: LiveSession) -> None:
        """Transport closed (any reason). Safe to call more than once."""
        was_open = session.is_open
        session.state = ConnectionState.CLOSED
        if was_open and session.user is not None:
            await self.registry.unregister(session.user.id, session.connection)
            session.log.info("gateway.disconnected")

    # ─── Inbound frames ───────────────────────────────────

    async def handle_text(self, session: LiveSession, raw: str) -> None:
        """Parse one text frame and dispatch it."""
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            await self._error(session, "Invalid JSON")
            return
        await self.handle_frame(session, frame)

    async def handle_bytes(self, session: LiveSession, raw: bytes) -> None:
        """Binary frames are not part of the protocol; the connection stays open."""
        if not session.is_open:
            return
        session.log.info("gateway.binary_frame", size=len(raw))
        await self._error(session, "Invalid frame")

    async def handle_frame(self, session: LiveSession, frame: Any) -> None:
        """Dispatch one decoded frame. Every frame is its own unit of work."""
        if not session.is_open:
            session.log.debug("gateway.frame_after_close")
            return
        if not isinstance(frame, dict):
            await self._error(session, "Invalid frame")
            return

        event = frame.get("event")
        data = frame.get("data")
        try:
            if event == SEND_MESSAGE:
                await self.send_message(session, data)
            elif event == PING:
                await self._push(session.connection, PONG, {})
            else:
                await self._error(session, f"Unknown event: {event}")
        except Exception:
            session.log.exception("gateway.frame_failed", event_name=event)
            await self._error(session, GENERIC_SEND_ERROR)

    # ─── sendMessage ──────────────────────────────────────

    async def send_message(self, session: LiveSession, data: Any) -> Optional[MessageRead]:
        """Persist, fan out, echo. Returns the populated message, or None on failure."""
        if not session.is_open or session.user is None:
            return None
        try:
            request = SendMessage.model_validate(data or {})
        except pydantic.ValidationError:
            await self._error(session, "sendMessage requires receiverId and content")
            return None

        sender = session.user
        try:
            populated, notification = await self._persist(sender, request)
        except (ValidationError, NotFoundError) as e:
            session.log.info("gateway.send_rejected", reason=str(e))
            await self._error(session, str(e))
            return None
        except PersistenceError as e:
            session.log.warning("gateway.send_failed", error=str(e))
            await self._error(session, GENERIC_SEND_ERROR)
            return None

        message_payload = populated.to_wire()
        notification_payload = notification.to_wire()

        targets = await self.registry.lookup(request.receiver_id)
        if targets:
            await asyncio.gather(
                *(
                    self._deliver(conn, message_payload, notification_payload)
                    for conn in targets
                )
            )

        # The originator may have disconnected while we were persisting.
        if session.is_open:
            await self._push(session.connection, RECEIVE_MESSAGE, message_payload)

        session.log.info(
            "gateway.message_sent",
            message_id=populated.id,
            receiver_id=str(request.receiver_id),
            delivered_to=len(targets),
        )
        return populated

    async def _persist(
        self,
        sender: UserSummary,
        request: SendMessage,
    ) -> tuple[MessageRead, NotificationRead]:
        async with self.session_factory() as db:
            message = await MessageStore(db).create(
                sender_id=sender.id,
                receiver_id=request.receiver_id,
                content=request.content,
            )
            populated = populate_message(message)
            try:
                notification = await NotificationStore(db).create(
                    recipient_id=request.receiver_id,
                    sender_id=sender.id,
                    content=f"New message from {sender.name}",
                    link=self.notification_link,
                )
            except PersistenceError:
                # No rollback of the message: the two writes are independent.
                logger.warning(
                    "gateway.notification_failed",
                    message_id=message.id,
                    receiver_id=str(request.receiver_id),
                )
                raise
            return populated, NotificationRead.model_validate(notification)

    # ─── Outbound ─────────────────────────────────────────

    async def _deliver(
        self,
        connection: Connection,
        message_payload: dict,
        notification_payload: dict,
    ) -> None:
        if await self._push(connection, RECEIVE_MESSAGE, message_payload):
            await self._push(connection, NEW_NOTIFICATION, notification_payload)

    async def _push(self, connection: Connection, event: str, data: Any) -> bool:
        """Send one event. A closed connection is skipped, not an error."""
        try:
            await connection.send(event, data)
            return True
        except ConnectionClosedError:
            logger.debug("gateway.push_skipped", event_name=event, connection=repr(connection))
            return False

    async def _error(self, session: LiveSession, message: str) -> None:
        await self._push(session.connection, CHAT_ERROR, {"message": message})

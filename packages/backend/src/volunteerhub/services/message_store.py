"""Message store — durable, append-only record of point-to-point chat.

Learn: Messages are never edited. Ordering inside a conversation is
(created_at, id): the timestamp first, insertion order for ties.
History queries take the most recent N and hand them back oldest-first,
which is what a chat window renders.

populate_message() is the single formatting step: every consumer (REST
history, live receiveMessage push, sender echo) gets the same shape.
"""

import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from volunteerhub.config import settings
from volunteerhub.db.models import Message, User
from volunteerhub.errors import NotFoundError, PersistenceError, ValidationError
from volunteerhub.schemas.message import MessageRead
from volunteerhub.schemas.user import UserSummary


def populate_message(message: Message) -> MessageRead:
    """Resolve the sender to a display-ready summary.

    The message must have its ``sender`` relationship loaded.
    """
    return MessageRead(
        id=message.id,
        sender_id=UserSummary.model_validate(message.sender),
        receiver_id=message.receiver_id,
        content=message.content,
        created_at=message.created_at,
    )


class MessageStore:
    """Create and query chat messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ───────────────────────────────────────────

    async def create(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> Message:
        """Persist a new message and return it with its sender loaded.

        Validation happens before anything touches the database.
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("Message content cannot be empty")
        if len(text) > settings.message_max_length:
            raise ValidationError(
                f"Message content exceeds {settings.message_max_length} characters"
            )
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a message to yourself")

        try:
            sender = await self.db.get(User, sender_id)
            receiver = await self.db.get(User, receiver_id)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to look up message participants") from e
        if sender is None:
            raise NotFoundError(f"User {sender_id} not found")
        if receiver is None:
            raise NotFoundError(f"User {receiver_id} not found")

        message = Message(
            sender_id=sender.id,
            receiver_id=receiver.id,
            content=text,
        )
        message.sender = sender
        try:
            self.db.add(message)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to store message") from e
        return message

    # ─── Queries ──────────────────────────────────────────

    async def list_between(
        self,
        user_a: uuid.UUID,
        user_b: uuid.UUID,
        limit: int = 100,
    ) -> list[Message]:
        """The most recent ``limit`` messages between two users, oldest first."""
        q = (
            select(Message)
            .options(selectinload(Message.sender))
            .where(
                or_(
                    and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                    and_(Message.sender_id == user_b, Message.receiver_id == user_a),
                )
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load messages") from e
        newest_first = list(result.scalars().all())
        newest_first.reverse()
        return newest_first

    async def list_for_user(self, user_id: uuid.UUID) -> list[Message]:
        """Every message the user sent or received, newest first."""
        q = (
            select(Message)
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load messages") from e
        return list(result.scalars().all())

"""Notification store — user-facing notices with read/unread state.

Learn: A notification belongs to its recipient and only the recipient
can flip its read flag. mark_read() enforces that in the query itself
(id AND recipient), so "not yours" and "doesn't exist" are the same
NotFoundError and nothing leaks about other users' notifications.
"""

import uuid
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.db.models import Notification
from volunteerhub.errors import NotFoundError, PersistenceError


class NotificationStore:
    """Create, list and acknowledge notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ───────────────────────────────────────────

    async def create(
        self,
        recipient_id: uuid.UUID,
        sender_id: Optional[uuid.UUID],
        content: str,
        link: str,
    ) -> Notification:
        """Persist an unread notification for ``recipient_id``."""
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            content=content,
            link=link,
            read=False,
        )
        try:
            self.db.add(notification)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to store notification") from e
        return notification

    # ─── Queries ──────────────────────────────────────────

    async def list_for_recipient(
        self,
        user_id: uuid.UUID,
        limit: int = 50,
    ) -> list[Notification]:
        """Newest first, at most ``limit``."""
        q = (
            select(Notification)
            .where(Notification.recipient_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load notifications") from e
        return list(result.scalars().all())

    async def unread_count_for(self, user_id: uuid.UUID) -> int:
        q = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.recipient_id == user_id)
            .where(Notification.read.is_(False))
        )
        try:
            result = await self.db.execute(q)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to count notifications") from e
        return int(result.scalar_one())

    # ─── Read state ───────────────────────────────────────

    async def mark_read(
        self,
        notification_id: int,
        requesting_user_id: uuid.UUID,
    ) -> Notification:
        """Mark one of the requester's notifications read. Idempotent."""
        q = select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == requesting_user_id,
        )
        try:
            result = await self.db.execute(q)
            notification = result.scalars().first()
            if notification is None:
                raise NotFoundError(f"Notification {notification_id} not found")
            if not notification.read:
                notification.read = True
                await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to update notification") from e
        return notification

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """Mark every unread notification of the user read. Returns the count."""
        q = (
            update(Notification)
            .where(Notification.recipient_id == user_id)
            .where(Notification.read.is_(False))
            .values(read=True)
        )
        try:
            result = await self.db.execute(q)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to update notifications") from e
        return result.rowcount or 0

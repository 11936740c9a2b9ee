"""Conversation index — who has this user talked to?

Conversations are not stored. They are derived on every call from the
user's messages: collect the other endpoint of each message, dedupe,
and resolve to user summaries. Counterparts come back most recently
active first.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.db.models import User
from volunteerhub.errors import PersistenceError
from volunteerhub.schemas.user import UserSummary
from volunteerhub.services.message_store import MessageStore


class ConversationIndex:
    def __init__(self, db: AsyncSession, messages: Optional[MessageStore] = None):
        self.db = db
        self.messages = messages or MessageStore(db)

    async def conversations_for(self, user_id: uuid.UUID) -> list[UserSummary]:
        # list_for_user is newest first, so first sighting == most recent.
        counterparts: list[uuid.UUID] = []
        seen: set[uuid.UUID] = set()
        for message in await self.messages.list_for_user(user_id):
            for other in (message.sender_id, message.receiver_id):
                if other != user_id and other not in seen:
                    seen.add(other)
                    counterparts.append(other)

        if not counterparts:
            return []

        try:
            result = await self.db.execute(
                select(User).where(User.id.in_(counterparts))
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load conversation users") from e
        users = {u.id: u for u in result.scalars().all()}

        return [
            UserSummary.model_validate(users[uid])
            for uid in counterparts
            if uid in users
        ]

"""Pydantic schemas for chat messages.

MessageRead is the one populated shape: the sender is always a nested
UserSummary (under ``senderId``, as the SPA expects), the receiver is a
bare id. Both the REST history and the live ``receiveMessage`` event use it.
"""

import uuid
from datetime import datetime

from pydantic import Field

from volunteerhub.schemas import CamelModel
from volunteerhub.schemas.user import UserSummary


class SendMessage(CamelModel):
    """Payload of the inbound ``sendMessage`` event."""
    receiver_id: uuid.UUID = Field(..., description="User UUID of the recipient")
    content: str = Field(..., description="Message text")


class MessageRead(CamelModel):
    id: int
    sender_id: UserSummary
    receiver_id: uuid.UUID
    content: str
    created_at: datetime


class MessageList(CamelModel):
    messages: list[MessageRead]


class ConversationList(CamelModel):
    conversations: list[UserSummary]

"""Pydantic schemas for notifications."""

import uuid
from datetime import datetime
from typing import Optional

from volunteerhub.schemas import CamelModel


class NotificationRead(CamelModel):
    id: int
    recipient_id: uuid.UUID
    sender_id: Optional[uuid.UUID] = None
    content: str
    link: str
    read: bool
    created_at: datetime


class NotificationList(CamelModel):
    notifications: list[NotificationRead]
    unread_count: int


class MarkReadResponse(CamelModel):
    message: str


class MarkAllReadResponse(CamelModel):
    message: str
    updated: int

"""Messages API — conversation list and chat history.

- GET /messages/conversations → everyone the caller has exchanged messages with
- GET /messages/:other_user_id → last N messages with that user, oldest first

Sending is not a REST call: clients emit sendMessage over the WebSocket.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.auth.dependencies import get_current_user
from volunteerhub.config import settings
from volunteerhub.db.engine import get_db
from volunteerhub.db.models import User
from volunteerhub.errors import PersistenceError
from volunteerhub.schemas.message import ConversationList, MessageList
from volunteerhub.services.conversation_index import ConversationIndex
from volunteerhub.services.message_store import MessageStore, populate_message

router = APIRouter(prefix="/messages")


@router.get("/conversations", response_model=ConversationList)
async def list_conversations(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Counterparts of the current user, most recently active first."""
    try:
        conversations = await ConversationIndex(db).conversations_for(user.id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ConversationList(conversations=conversations)


@router.get("/{other_user_id}", response_model=MessageList)
async def get_messages(
    other_user_id: uuid.UUID,
    limit: int = Query(
        settings.message_history_limit,
        ge=1,
        le=settings.message_history_limit,
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Message history between the current user and ``other_user_id``."""
    other = await db.get(User, other_user_id)
    if other is None:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        messages = await MessageStore(db).list_between(user.id, other.id, limit=limit)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MessageList(messages=[populate_message(m) for m in messages])

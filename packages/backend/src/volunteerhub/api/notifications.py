"""Notifications API — the bell icon.

- GET /notifications → latest notifications + unread count
- PUT /notifications/read-all → mark everything read
- PUT /notifications/:id/read → mark one read (404 unless it is yours)
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from volunteerhub.auth.dependencies import get_current_user
from volunteerhub.config import settings
from volunteerhub.db.engine import get_db
from volunteerhub.db.models import User
from volunteerhub.errors import NotFoundError, PersistenceError
from volunteerhub.schemas.notification import (
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationList,
    NotificationRead,
)
from volunteerhub.services.notification_store import NotificationStore

router = APIRouter(prefix="/notifications")


def _get_store(db: AsyncSession = Depends(get_db)) -> NotificationStore:
    return NotificationStore(db)


@router.get("", response_model=NotificationList)
async def list_notifications(
    limit: int = Query(
        settings.notification_list_limit,
        ge=1,
        le=settings.notification_list_limit,
    ),
    user: User = Depends(get_current_user),
    store: NotificationStore = Depends(_get_store),
):
    """Newest notifications first, plus how many are still unread."""
    try:
        notifications = await store.list_for_recipient(user.id, limit=limit)
        unread = await store.unread_count_for(user.id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return NotificationList(
        notifications=[NotificationRead.model_validate(n) for n in notifications],
        unread_count=unread,
    )


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    store: NotificationStore = Depends(_get_store),
):
    try:
        updated = await store.mark_all_read(user.id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MarkAllReadResponse(message="All notifications marked as read.", updated=updated)


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    store: NotificationStore = Depends(_get_store),
):
    """Mark one of the caller's notifications as read."""
    try:
        await store.mark_read(notification_id, user.id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Notification not found")
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return MarkReadResponse(message="Notification marked as read.")

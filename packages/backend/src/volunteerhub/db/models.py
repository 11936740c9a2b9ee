"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Alembic generates migrations by comparing these models to the actual DB.

Key points:
- Users have UUID primary keys; messages and notifications use integer
  ids so insertion order breaks created_at ties.
- created_at is set in Python (microsecond precision) so ordering within
  a conversation is stable on every backend.
- The generic Uuid type maps to native UUID on PostgreSQL and CHAR(32)
  elsewhere (tests run on SQLite).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

DEFAULT_AVATAR_URL = (
    "https://res.cloudinary.com/df7lfelei/image/upload/v1762706749/346569_qv3txb.png"
)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A volunteer or NGO account.

    The messaging core only reads id, name, role and avatar_url; the rest
    belongs to the auth collaborator.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('volunteer', 'ngo')", name="ck_users_role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)  # volunteer, ngo
    avatar_url: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_AVATAR_URL
    )
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Message(Base):
    """Point-to-point chat message. Append-only, never edited."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_sender_created", "sender_id", "created_at"),
        Index("idx_messages_receiver_created", "receiver_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Loaded explicitly (selectinload / assignment); lazy loads would
    # need a greenlet under AsyncSession.
    sender: Mapped["User"] = relationship(foreign_keys=[sender_id], lazy="raise")


class Notification(Base):
    """A user-facing notice. Only its recipient may change the read flag."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_recipient_read", "recipient_id", "read"),
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    sender_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )  # null for system notices
    content: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str] = mapped_column(String(500), nullable=False)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

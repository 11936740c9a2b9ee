"""users, messages, notifications

Initial schema for the messaging core: accounts, point-to-point chat
messages and per-recipient notifications.

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 10:12:41.501226
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('avatar_url', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint("role IN ('volunteer', 'ngo')", name='ck_users_role'),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('receiver_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_messages_sender_created', 'messages', ['sender_id', 'created_at'])
    op.create_index('idx_messages_receiver_created', 'messages', ['receiver_id', 'created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('recipient_id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('link', sa.String(length=500), nullable=False),
        sa.Column('read', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id']),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notifications_recipient_read', 'notifications', ['recipient_id', 'read'])
    op.create_index('idx_notifications_recipient_created', 'notifications', ['recipient_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_notifications_recipient_created', table_name='notifications')
    op.drop_index('idx_notifications_recipient_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('idx_messages_receiver_created', table_name='messages')
    op.drop_index('idx_messages_sender_created', table_name='messages')
    op.drop_table('messages')
    op.drop_table('users')

"""Event albums, cover photo and password protection

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("events", sa.Column("cover_photo_ref", sa.Text(), nullable=True))
    op.add_column("events", sa.Column("password_hash", sa.String(128), nullable=True))

    op.create_table(
        "event_albums",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("event_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("cover_photo_ref", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_default", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "name", name="uq_event_albums_event_name"),
    )
    op.create_index("ix_event_albums_event_id", "event_albums", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_event_albums_event_id", table_name="event_albums")
    op.drop_table("event_albums")
    op.drop_column("events", "password_hash")
    op.drop_column("events", "cover_photo_ref")

"""Audit log model: moderation actions taken on an event's content."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from wedding_memories.db import Base, JsonDocument, utcnow


class ModerationEvent(Base):
    """
    Một dòng audit cho mỗi hành động kiểm duyệt.
    action: APPROVED | REJECTED | DELETED | HIDDEN | UNHIDDEN | FEATURED | UNFEATURED | PINNED | UNPINNED | COMMENT_APPROVED.
    item_id becomes NULL once the item is deleted; metadata keeps item_type/kind.
    """

    __tablename__ = "moderation_events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("content_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    actor: Mapped[str] = mapped_column(String(64), nullable=False)
    metadata_: Mapped[Optional[dict]] = mapped_column("metadata", JsonDocument, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

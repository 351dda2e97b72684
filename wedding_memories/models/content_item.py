"""Content item model: media (photo/video/audio) and guestbook entries in one table."""
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from wedding_memories.db import Base, JsonDocument, utcnow

ITEM_TYPE_MEDIA = "media"
ITEM_TYPE_GUESTBOOK = "guestbook"

DEFAULT_ALBUM = "All Photos"


class ContentItem(Base):
    """
    Content item.
    item_type: media | guestbook.
    kind: photo | video | audio (media), text | audio | mixed (guestbook).
    status: pending | approved | rejected (moderation gate); is_hidden/is_featured/is_pinned are independent.
    author_role: guest | host | photographer | admin; guest_name/guest_email only for guests.
    payload_ref: opaque URL/id of the stored binary; storage_id is the handle used to delete it.
    """

    __tablename__ = "content_items"
    __table_args__ = (
        Index("ix_content_items_event_status", "event_id", "item_type", "status"),
        Index("ix_content_items_event_created", "event_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    item_type: Mapped[str] = mapped_column(String(16), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)

    author_role: Mapped[str] = mapped_column(String(16), nullable=False, default="guest")
    author_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(as_uuid=True), nullable=True)
    guest_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    guest_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    payload_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    storage_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    thumbnail_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    original_name: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    text_message: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    album: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(JsonDocument, nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="approved")
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    moderated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    moderated_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    downloads: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

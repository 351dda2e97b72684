"""Event (wedding) model: scoping unit for content and realtime rooms."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from wedding_memories.db import Base, utcnow


class Event(Base):
    """
    One wedding. Policy flags gate moderation and guest interactions.
    Statistics columns are a cache refreshed on demand by stats_service.
    Guests only reach events with is_active and is_published.
    """

    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    host_user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    partner1: Mapped[str] = mapped_column(String(100), nullable=False)
    partner2: Mapped[str] = mapped_column(String(100), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    venue_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cover_photo_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # bcrypt hash; None means the event is open to anyone with the link.
    password_hash: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    # Policy
    moderate_uploads: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enable_guestbook: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_audio_messages: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_comments: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_likes: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_downloads: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Statistics (recomputed, may lag)
    total_photos: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_videos: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_guestbook_entries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_comments: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stats_refreshed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

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

    @property
    def is_password_protected(self) -> bool:
        return self.password_hash is not None


class EventPhotographer(Base):
    """Photographer assigned to an event; counts as an owner for moderation."""

    __tablename__ = "event_photographers"

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )


class EventAlbum(Base):
    """
    Named album of an event. ContentItem.album holds the album name.
    Exactly one album per event is the default (All Photos); it cannot be deleted.
    """

    __tablename__ = "event_albums"
    __table_args__ = (UniqueConstraint("event_id", "name", name="uq_event_albums_event_name"),)

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
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cover_photo_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

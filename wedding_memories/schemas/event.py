"""Event request/response schemas."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class EventPolicyIn(BaseModel):
    moderate_uploads: Optional[bool] = None
    enable_guestbook: Optional[bool] = None
    enable_audio_messages: Optional[bool] = None
    allow_comments: Optional[bool] = None
    allow_likes: Optional[bool] = None
    allow_downloads: Optional[bool] = None


class EventCreate(EventPolicyIn):
    """Body for POST /api/events."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    partner1: str = Field(..., min_length=1, max_length=100)
    partner2: str = Field(..., min_length=1, max_length=100)
    event_date: datetime
    venue_name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=72, description="Guests must send it as X-Event-Password")


class EventUpdate(EventPolicyIn):
    """Body for PATCH /api/events/{event_id}. Only provided fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    partner1: Optional[str] = Field(None, min_length=1, max_length=100)
    partner2: Optional[str] = Field(None, min_length=1, max_length=100)
    event_date: Optional[datetime] = None
    venue_name: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, max_length=72, description="Empty string removes protection")


class AlbumOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    cover_photo_ref: Optional[str] = None
    position: int
    is_default: bool

    model_config = {"from_attributes": True}


class EventPublicOut(BaseModel):
    """What guests see (QR landing page)."""

    id: UUID
    title: str
    description: Optional[str] = None
    partner1: str
    partner2: str
    event_date: datetime
    venue_name: Optional[str] = None
    moderate_uploads: bool
    enable_guestbook: bool
    enable_audio_messages: bool
    allow_comments: bool
    allow_likes: bool
    allow_downloads: bool
    cover_photo_ref: Optional[str] = None
    is_password_protected: bool = False
    albums: List[AlbumOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class EventOut(EventPublicOut):
    host_user_id: UUID
    is_active: bool
    is_published: bool
    photographers: List[UUID] = Field(default_factory=list)
    total_photos: int = 0
    total_videos: int = 0
    total_guestbook_entries: int = 0
    total_likes: int = 0
    total_comments: int = 0
    created_at: datetime


class EventListResponse(BaseModel):
    items: List[EventOut]


class EventStatsOut(BaseModel):
    event_id: UUID
    total_photos: int
    total_videos: int
    total_guestbook_entries: int
    total_likes: int
    total_comments: int
    pending_media: int = 0
    pending_guestbook_entries: int = 0
    refreshed_at: datetime


class PhotographerRequest(BaseModel):
    user_id: UUID


class PublishRequest(BaseModel):
    is_published: bool = True


class ModerationEventOut(BaseModel):
    id: UUID
    event_id: UUID
    item_id: Optional[UUID] = None
    action: str
    actor: str
    metadata: Optional[dict] = Field(None, validation_alias="metadata_")
    created_at: datetime

    model_config = {"from_attributes": True}


class ModerationEventsListResponse(BaseModel):
    event_id: UUID
    items: List[ModerationEventOut]


class AlbumCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class AlbumUpdate(BaseModel):
    """Only provided fields change; renaming moves the album's media along."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    position: Optional[int] = Field(None, ge=0)
    cover_photo_ref: Optional[str] = None


class AlbumListResponse(BaseModel):
    event_id: UUID
    items: List[AlbumOut]


class AlbumDeleteResponse(BaseModel):
    message: str
    moved_items: int


class CoverPhotoRequest(BaseModel):
    """payload_ref of an already stored image, or item_id of an approved photo of the event. Neither clears the cover."""

    payload_ref: Optional[str] = None
    item_id: Optional[UUID] = None


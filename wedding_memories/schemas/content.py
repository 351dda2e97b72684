"""Content item (media + guestbook) request/response schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from wedding_memories.schemas.author import Author, author_of
from wedding_memories.schemas.common import Pagination


def _strip_required(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class StoredFileIn(BaseModel):
    """A binary already placed in object storage by the client/uploader."""

    payload_ref: str = Field(..., min_length=1, description="URL / opaque reference to the stored binary")
    storage_id: Optional[str] = Field(None, max_length=512, description="Handle used to delete the binary")
    thumbnail_ref: Optional[str] = None
    original_name: Optional[str] = Field(None, max_length=512)
    mime_type: str = Field(..., min_length=1, max_length=128)
    file_size: Optional[int] = Field(None, ge=0)
    duration: Optional[float] = Field(None, ge=0)


class MediaUploadRequest(BaseModel):
    """Body for POST /api/media/event/{event_id}. guest_name required when no X-User-ID."""

    guest_name: Optional[str] = Field(None, max_length=100)
    guest_email: Optional[str] = Field(None, max_length=255)
    album: Optional[str] = Field(None, max_length=100)
    caption: Optional[str] = Field(None, max_length=500)
    tags: Optional[List[str]] = None
    files: List[StoredFileIn] = Field(..., min_length=1)


class GuestbookEntryCreate(BaseModel):
    """Body for POST /api/guestbook/event/{event_id}. Text, audio, or both."""

    guest_name: str = Field(..., max_length=100)
    guest_email: Optional[str] = Field(None, max_length=255)
    message: Optional[str] = Field(None, max_length=1000)
    audio: Optional[StoredFileIn] = None

    @field_validator("guest_name")
    @classmethod
    def guest_name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class LikeRequest(BaseModel):
    guest_name: str = Field(..., max_length=100)

    @field_validator("guest_name")
    @classmethod
    def guest_name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class LikeResponse(BaseModel):
    item_id: UUID
    like_count: int
    liked: bool = Field(..., description="False when this guest name had already liked the item")


class CommentCreate(BaseModel):
    guest_name: str = Field(..., max_length=100)
    message: str = Field(..., max_length=300)

    @field_validator("guest_name", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _strip_required(v)


class CommentOut(BaseModel):
    id: UUID
    item_id: UUID
    guest_name: str
    message: str
    author_role: str
    is_approved: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LikeOut(BaseModel):
    guest_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ContentItemOut(BaseModel):
    """Single media item / guestbook entry."""

    id: UUID
    event_id: UUID
    item_type: str
    kind: str
    author: Author
    payload_ref: Optional[str] = None
    thumbnail_ref: Optional[str] = None
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    duration: Optional[float] = None
    caption: Optional[str] = None
    message: Optional[str] = None
    album: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: str
    is_hidden: bool
    is_featured: bool
    is_pinned: bool
    views: int = 0
    downloads: int = 0
    like_count: int = 0
    comment_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class ContentItemDetailOut(ContentItemOut):
    likes: List[LikeOut] = Field(default_factory=list)
    comments: List[CommentOut] = Field(default_factory=list)


def item_out(item: Any, like_count: int = 0, comment_count: int = 0) -> ContentItemOut:
    return ContentItemOut(
        id=item.id,
        event_id=item.event_id,
        item_type=item.item_type,
        kind=item.kind,
        author=author_of(item),
        payload_ref=item.payload_ref,
        thumbnail_ref=item.thumbnail_ref,
        original_name=item.original_name,
        mime_type=item.mime_type,
        file_size=item.file_size,
        duration=item.duration,
        caption=item.caption,
        message=item.text_message,
        album=item.album,
        tags=list(item.tags or []),
        status=item.status,
        is_hidden=item.is_hidden,
        is_featured=item.is_featured,
        is_pinned=item.is_pinned,
        views=item.views or 0,
        downloads=item.downloads or 0,
        like_count=like_count,
        comment_count=comment_count,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def camelize(value: Any) -> Any:
    """snake_case keys -> camelCase, recursively (realtime wire format)."""
    if isinstance(value, dict):
        return {to_camel(k): camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [camelize(v) for v in value]
    return value


def wire_item(item: Any, like_count: int = 0, comment_count: int = 0) -> Dict[str, Any]:
    """JSON-ready camelCase dict of an item for broadcast payloads."""
    return camelize(item_out(item, like_count, comment_count).model_dump(mode="json"))


def wire_comment(comment: Any) -> Dict[str, Any]:
    return camelize(CommentOut.model_validate(comment).model_dump(mode="json"))


class MediaUploadResponse(BaseModel):
    """Response for uploads (201). pending = items waiting for host approval."""

    event_id: UUID
    items: List[ContentItemOut]
    pending: int
    message: str


class ItemsPage(BaseModel):
    items: List[ContentItemOut]
    pagination: Pagination


class ManageItemsPage(ItemsPage):
    status_counts: Dict[str, int] = Field(default_factory=dict)


class ItemFlagsUpdate(BaseModel):
    """Body for PATCH on a media item / guestbook entry (owner only)."""

    is_hidden: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_pinned: Optional[bool] = None
    caption: Optional[str] = Field(None, max_length=500)
    album: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None


class ModerationResponse(BaseModel):
    item_id: UUID
    previous_status: str
    status: str
    became_visible: bool


class BulkActionRequest(BaseModel):
    action: str = Field(..., description="approve | reject | delete | feature | unfeature (media), pin | unpin (guestbook)")
    item_ids: List[UUID] = Field(..., min_length=1, max_length=200)


class BulkActionResponse(BaseModel):
    action: str
    affected: int
    item_ids: List[UUID]
    skipped: List[UUID] = Field(default_factory=list, description="Ids not found in this event")
    message: str


class DownloadResponse(BaseModel):
    item_id: UUID
    download_url: str
    filename: Optional[str] = None
    downloads: int


def page_fields(page: Any, current: int, limit: int) -> Dict[str, Any]:
    """items + pagination of a listing result (items, total, like_counts, comment_counts)."""
    return {
        "items": [
            item_out(i, page.like_counts.get(i.id, 0), page.comment_counts.get(i.id, 0)) for i in page.items
        ],
        "pagination": Pagination.build(current, limit, page.total),
    }

"""Pydantic request/response schemas."""
from wedding_memories.schemas.common import ErrorResponse, MessageResponse, Pagination
from wedding_memories.schemas.author import (
    Author,
    GuestAuthor,
    HostAuthor,
    PhotographerAuthor,
    AdminAuthor,
)
from wedding_memories.schemas.event import (
    EventCreate,
    EventUpdate,
    EventOut,
    EventPublicOut,
    EventStatsOut,
)
from wedding_memories.schemas.content import (
    ContentItemOut,
    ContentItemDetailOut,
    CommentOut,
    MediaUploadRequest,
    GuestbookEntryCreate,
)

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "Pagination",
    "Author",
    "GuestAuthor",
    "HostAuthor",
    "PhotographerAuthor",
    "AdminAuthor",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventPublicOut",
    "EventStatsOut",
    "ContentItemOut",
    "ContentItemDetailOut",
    "CommentOut",
    "MediaUploadRequest",
    "GuestbookEntryCreate",
]

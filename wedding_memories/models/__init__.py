"""SQLAlchemy models for Wedding Memories."""
from wedding_memories.models.event import Event, EventAlbum, EventPhotographer
from wedding_memories.models.content_item import ContentItem
from wedding_memories.models.interaction import ItemComment, ItemLike
from wedding_memories.models.moderation_event import ModerationEvent

__all__ = [
    "Event",
    "EventPhotographer",
    "EventAlbum",
    "ContentItem",
    "ItemLike",
    "ItemComment",
    "ModerationEvent",
]

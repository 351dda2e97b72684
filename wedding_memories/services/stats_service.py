"""
Statistics aggregator: recount an event's totals from the content store and
cache them on the event row. Only approved items count. Totals may lag between
recomputations (run on the stats endpoint and after deletions).
"""
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.db import utcnow
from wedding_memories.logging_config import get_logger
from wedding_memories.models import ContentItem, Event, ItemComment, ItemLike
from wedding_memories.models.content_item import ITEM_TYPE_GUESTBOOK, ITEM_TYPE_MEDIA
from wedding_memories.services.moderation_service import ItemStatus

logger = get_logger(__name__)


async def _count_by_type_kind_status(db: AsyncSession, event_id) -> Dict[tuple, int]:
    r = await db.execute(
        select(ContentItem.item_type, ContentItem.kind, ContentItem.status, func.count(ContentItem.id))
        .where(ContentItem.event_id == event_id)
        .group_by(ContentItem.item_type, ContentItem.kind, ContentItem.status)
    )
    return {(row[0], row[1], row[2]): int(row[3]) for row in r.all()}


async def _count_children(db: AsyncSession, model, event_id) -> int:
    approved_items = select(ContentItem.id).where(
        ContentItem.event_id == event_id,
        ContentItem.status == ItemStatus.APPROVED.value,
    )
    r = await db.execute(select(func.count(model.id)).where(model.item_id.in_(approved_items)))
    return int(r.scalar() or 0)


async def recompute_event_statistics(db: AsyncSession, event: Event) -> Dict[str, Any]:
    """
    Tính lại thống kê của event và ghi vào event (flush, caller commit).
    total_photos / total_videos: approved media kind photo / video.
    total_guestbook_entries: approved guestbook entries.
    total_likes / total_comments: like / comment rows on approved items (media + guestbook).
    """
    counts = await _count_by_type_kind_status(db, event.id)
    approved = ItemStatus.APPROVED.value
    pending = ItemStatus.PENDING.value

    def total(item_type: str, status: str, kind: str | None = None) -> int:
        return sum(
            n
            for (t, k, s), n in counts.items()
            if t == item_type and s == status and (kind is None or k == kind)
        )

    event.total_photos = total(ITEM_TYPE_MEDIA, approved, "photo")
    event.total_videos = total(ITEM_TYPE_MEDIA, approved, "video")
    event.total_guestbook_entries = total(ITEM_TYPE_GUESTBOOK, approved)
    event.total_likes = await _count_children(db, ItemLike, event.id)
    event.total_comments = await _count_children(db, ItemComment, event.id)
    event.stats_refreshed_at = utcnow()
    await db.flush()

    stats = {
        "event_id": event.id,
        "total_photos": event.total_photos,
        "total_videos": event.total_videos,
        "total_guestbook_entries": event.total_guestbook_entries,
        "total_likes": event.total_likes,
        "total_comments": event.total_comments,
        "pending_media": total(ITEM_TYPE_MEDIA, pending),
        "pending_guestbook_entries": total(ITEM_TYPE_GUESTBOOK, pending),
        "refreshed_at": event.stats_refreshed_at,
    }
    logger.info(
        "stats.recomputed",
        event_id=str(event.id),
        photos=event.total_photos,
        videos=event.total_videos,
        guestbook=event.total_guestbook_entries,
        likes=event.total_likes,
        comments=event.total_comments,
    )
    return stats

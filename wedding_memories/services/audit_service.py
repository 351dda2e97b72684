"""
Moderation audit log (moderation_events).
Ghi lại mọi hành động kiểm duyệt của host / photographer / admin trên nội dung của event.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.models import ModerationEvent

APPROVED = "APPROVED"
REJECTED = "REJECTED"
DELETED = "DELETED"
HIDDEN = "HIDDEN"
UNHIDDEN = "UNHIDDEN"
FEATURED = "FEATURED"
UNFEATURED = "UNFEATURED"
PINNED = "PINNED"
UNPINNED = "UNPINNED"
COMMENT_APPROVED = "COMMENT_APPROVED"


async def log_moderation_event(
    db: AsyncSession,
    event_id: UUID,
    action: str,
    actor: str,
    item_id: Optional[UUID] = None,
    metadata_: Optional[Dict[str, Any]] = None,
) -> ModerationEvent:
    """
    Ghi một dòng audit (moderation_events). Flush only; the caller's transaction commits it
    together with the change it describes.
    """
    ev = ModerationEvent(
        event_id=event_id,
        item_id=item_id,
        action=action,
        actor=actor,
        metadata_=metadata_ or {},
    )
    db.add(ev)
    await db.flush()
    return ev


async def list_moderation_events(
    db: AsyncSession,
    event_id: UUID,
    limit: int = 50,
) -> List[ModerationEvent]:
    """Lấy danh sách audit events của event, mới nhất trước."""
    q = (
        select(ModerationEvent)
        .where(ModerationEvent.event_id == event_id)
        .order_by(ModerationEvent.created_at.desc())
        .limit(limit)
    )
    r = await db.execute(q)
    return list(r.scalars().all())

"""
Likes and comments / guestbook replies.
Likes: one row per (item, guest_name), inserted with ON CONFLICT DO NOTHING so
concurrent likes never lose updates and duplicates are silent no-ops.
"""
from typing import Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from wedding_memories.auth import Principal
from wedding_memories.db import dialect_name
from wedding_memories.errors import NotFound, PolicyViolation, ValidationFailure
from wedding_memories.logging_config import get_logger
from wedding_memories.models import ContentItem, Event, ItemComment, ItemLike
from wedding_memories.models.content_item import ITEM_TYPE_MEDIA
from wedding_memories.schemas.content import wire_comment
from wedding_memories.services import audit_service
from wedding_memories.services.broadcast_service import BroadcastDispatcher, BroadcastEvent
from wedding_memories.services.content_service import ensure_guest_visible
from wedding_memories.services.moderation_service import EventPolicy, decide_comment_approval, is_guest_visible

logger = get_logger(__name__)

MAX_COMMENT_LENGTH = 300
MAX_GUEST_NAME_LENGTH = 100

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _clean_guest_name(guest_name: str) -> str:
    name = (guest_name or "").strip()
    if not name:
        raise ValidationFailure("guest_name_required", "Guest name is required")
    if len(name) > MAX_GUEST_NAME_LENGTH:
        raise ValidationFailure("guest_name_too_long", f"Guest name must be at most {MAX_GUEST_NAME_LENGTH} characters")
    return name


async def count_likes(db: AsyncSession, item_id: UUID) -> int:
    r = await db.execute(select(func.count(ItemLike.id)).where(ItemLike.item_id == item_id))
    return int(r.scalar() or 0)


async def add_like(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    item: ContentItem,
    guest_name: str,
) -> Tuple[int, bool]:
    """
    Like an item as guest_name (trimmed, exact match). Returns (like_count, created).
    A repeated like is a no-op: no new row, no broadcast.
    """
    if not EventPolicy.from_event(event).allow_likes:
        raise PolicyViolation("likes_disabled", "Likes are disabled for this event")
    ensure_guest_visible(item, event)
    name = _clean_guest_name(guest_name)

    insert = _INSERTS[dialect_name(db)]
    stmt = (
        insert(ItemLike)
        .values(item_id=item.id, guest_name=name)
        .on_conflict_do_nothing(index_elements=["item_id", "guest_name"])
        .returning(ItemLike.id)
    )
    r = await db.execute(stmt)
    created = r.scalar_one_or_none() is not None
    like_count = await count_likes(db, item.id)
    await db.commit()

    if not created:
        logger.info("like.duplicate", item_id=str(item.id), like_count=like_count)
        return like_count, False

    logger.info("like.added", item_id=str(item.id), event_id=str(event.id), like_count=like_count)
    dispatcher.publish(
        event.id,
        BroadcastEvent.MEDIA_LIKED if item.item_type == ITEM_TYPE_MEDIA else BroadcastEvent.GUESTBOOK_LIKED,
        {
            "itemId": str(item.id),
            "eventId": str(event.id),
            "likeCount": like_count,
            "guestName": name,
        },
    )
    return like_count, True


async def add_comment(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    item: ContentItem,
    guest_name: str,
    message: str,
    principal: Principal,
) -> ItemComment:
    """
    Comment on media / reply on a guestbook entry.
    is_approved comes from the moderation gate; only approved comments are broadcast.
    """
    policy = EventPolicy.from_event(event)
    if item.item_type == ITEM_TYPE_MEDIA and not policy.allow_comments:
        raise PolicyViolation("comments_disabled", "Comments are disabled for this event")
    if item.item_type != ITEM_TYPE_MEDIA and not policy.enable_guestbook:
        raise PolicyViolation("guestbook_disabled", "Guestbook is disabled for this event")
    ensure_guest_visible(item, event)
    name = _clean_guest_name(guest_name)
    text = (message or "").strip()
    if not text:
        raise ValidationFailure("comment_required", "Comment is required")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationFailure("comment_too_long", f"Comment must be at most {MAX_COMMENT_LENGTH} characters")

    comment = ItemComment(
        item_id=item.id,
        guest_name=name,
        message=text,
        author_role=principal.role.value,
        author_user_id=principal.user_id,
        is_approved=decide_comment_approval(policy, principal.role),
    )
    db.add(comment)
    await db.commit()
    logger.info(
        "comment.added",
        item_id=str(item.id),
        comment_id=str(comment.id),
        approved=comment.is_approved,
    )

    if comment.is_approved:
        _publish_comment(dispatcher, event, item, comment)
    return comment


def _publish_comment(dispatcher: BroadcastDispatcher, event: Event, item: ContentItem, comment: ItemComment) -> None:
    dispatcher.publish(
        event.id,
        BroadcastEvent.NEW_COMMENT if item.item_type == ITEM_TYPE_MEDIA else BroadcastEvent.NEW_GUESTBOOK_REPLY,
        {"itemId": str(item.id), "eventId": str(event.id), "comment": wire_comment(comment)},
    )


async def approve_comment(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    item: ContentItem,
    comment_id: UUID,
    actor: str,
) -> Tuple[ItemComment, bool]:
    """Approve a pending comment; broadcast only on the pending -> approved transition. Returns (comment, changed)."""
    comment = await db.get(ItemComment, comment_id)
    if comment is None or comment.item_id != item.id:
        raise NotFound("comment_not_found", "Comment not found")
    if comment.is_approved:
        return comment, False

    # Only the request that flips the row from unapproved broadcasts.
    r = await db.execute(
        update(ItemComment)
        .where(ItemComment.id == comment.id, ItemComment.is_approved.is_(False))
        .values(is_approved=True)
        .returning(ItemComment.id)
        .execution_options(synchronize_session=False)
    )
    if r.scalar_one_or_none() is None:
        await db.commit()
        await db.refresh(comment)
        logger.info("comment.already_approved", item_id=str(item.id), comment_id=str(comment.id))
        return comment, False
    set_committed_value(comment, "is_approved", True)
    await audit_service.log_moderation_event(
        db,
        event_id=event.id,
        item_id=item.id,
        action=audit_service.COMMENT_APPROVED,
        actor=actor,
        metadata_={"comment_id": str(comment.id)},
    )
    await db.commit()
    logger.info("comment.approved", item_id=str(item.id), comment_id=str(comment.id), actor=actor)
    # Guests only see comments of visible items.
    if is_guest_visible(item.status, item.is_hidden):
        _publish_comment(dispatcher, event, item, comment)
    return comment, True

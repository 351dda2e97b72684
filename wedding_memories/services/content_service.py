"""
ContentItem store: media uploads and guestbook entries, listings, moderation,
curation flags, deletion, bulk actions, downloads.
Every write commits before anything is broadcast, so a failed write never reaches a room.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from wedding_memories.auth import Principal
from wedding_memories.config import get_settings
from wedding_memories.db import utcnow
from wedding_memories.errors import NotFound, OwnershipDenied, PolicyViolation, ValidationFailure
from wedding_memories.logging_config import get_logger
from wedding_memories.models import ContentItem, Event, ItemComment, ItemLike
from wedding_memories.models.content_item import DEFAULT_ALBUM, ITEM_TYPE_GUESTBOOK, ITEM_TYPE_MEDIA
from wedding_memories.schemas.author import AdminAuthor, GuestAuthor, HostAuthor, PhotographerAuthor
from wedding_memories.schemas.content import StoredFileIn, wire_item
from wedding_memories.services import audit_service, event_service
from wedding_memories.services.broadcast_service import BroadcastDispatcher, BroadcastEvent
from wedding_memories.services.moderation_service import (
    EventPolicy,
    ItemStatus,
    ModerationAction,
    ModerationOutcome,
    SubmitterRole,
    apply_moderation_action,
    decide_initial_status,
    is_guest_visible,
    partition_for_event,
)
from wedding_memories.services.stats_service import recompute_event_statistics
from wedding_memories.services.storage_service import StorageBackend, resource_type_for

logger = get_logger(__name__)

APPROVED_EVENT = {
    ITEM_TYPE_MEDIA: BroadcastEvent.MEDIA_APPROVED,
    ITEM_TYPE_GUESTBOOK: BroadcastEvent.GUESTBOOK_APPROVED,
}
DELETED_EVENT = {
    ITEM_TYPE_MEDIA: BroadcastEvent.MEDIA_DELETED,
    ITEM_TYPE_GUESTBOOK: BroadcastEvent.GUESTBOOK_DELETED,
}
# Key of the item object inside new/approved payloads.
PAYLOAD_KEY = {ITEM_TYPE_MEDIA: "media", ITEM_TYPE_GUESTBOOK: "entry"}

BULK_ACTIONS = {
    ITEM_TYPE_MEDIA: ("approve", "reject", "delete", "feature", "unfeature"),
    ITEM_TYPE_GUESTBOOK: ("approve", "reject", "delete", "pin", "unpin"),
}
_FLAG_ACTIONS = {
    "feature": ("is_featured", True, audit_service.FEATURED),
    "unfeature": ("is_featured", False, audit_service.UNFEATURED),
    "pin": ("is_pinned", True, audit_service.PINNED),
    "unpin": ("is_pinned", False, audit_service.UNPINNED),
}
_FLAG_AUDIT = {
    "is_hidden": (audit_service.HIDDEN, audit_service.UNHIDDEN),
    "is_featured": (audit_service.FEATURED, audit_service.UNFEATURED),
    "is_pinned": (audit_service.PINNED, audit_service.UNPINNED),
}
SORT_COLUMNS = {
    "created_at": ContentItem.created_at,
    "views": ContentItem.views,
    "downloads": ContentItem.downloads,
}


@dataclass
class ItemPage:
    items: List[ContentItem]
    total: int
    like_counts: Dict[UUID, int] = field(default_factory=dict)
    comment_counts: Dict[UUID, int] = field(default_factory=dict)
    status_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class BulkResult:
    action: str
    affected: List[UUID]
    skipped: List[UUID]


def media_kind_for(mime_type: str) -> str:
    """image/* -> photo, video/* -> video, audio/* -> audio."""
    major = (mime_type or "").split("/", 1)[0].lower()
    if major == "image":
        return "photo"
    if major in ("video", "audio"):
        return major
    raise ValidationFailure("unsupported_file_type", f"Unsupported file type: {mime_type}")


def author_for(principal: Principal, guest_name: Optional[str] = None, guest_email: Optional[str] = None):
    """Author variant for a submission: authenticated principal or self-asserted guest."""
    if principal.is_guest:
        name = (guest_name or "").strip()
        if not name:
            raise ValidationFailure("guest_name_required", "Guest name is required")
        return GuestAuthor(name=name, email=(guest_email or "").strip() or None)
    if principal.role == SubmitterRole.PHOTOGRAPHER:
        return PhotographerAuthor(user_id=principal.user_id)
    if principal.role == SubmitterRole.ADMIN:
        return AdminAuthor(user_id=principal.user_id)
    return HostAuthor(user_id=principal.user_id)


def _author_columns(author) -> Dict[str, Any]:
    if isinstance(author, GuestAuthor):
        return {"author_role": "guest", "guest_name": author.name, "guest_email": author.email}
    return {"author_role": author.role, "author_user_id": author.user_id}


def _check_file(f: StoredFileIn) -> None:
    max_size = get_settings().max_file_size_bytes
    if f.file_size is not None and f.file_size > max_size:
        raise ValidationFailure("file_too_large", f"File exceeds {max_size} bytes")


def _item_payload(item: ContentItem, like_count: int = 0, comment_count: int = 0) -> Dict[str, Any]:
    return {PAYLOAD_KEY[item.item_type]: wire_item(item, like_count, comment_count), "eventId": str(item.event_id)}


async def create_media(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    author,
    files: List[StoredFileIn],
    album: Optional[str] = None,
    caption: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> List[ContentItem]:
    """
    One item per file. Status comes from the moderation gate; approved items are
    broadcast as new-media after the commit, pending ones are not.
    """
    settings = get_settings()
    if not files:
        raise ValidationFailure("no_files", "No files uploaded")
    if len(files) > settings.max_files_per_upload:
        raise ValidationFailure("too_many_files", f"At most {settings.max_files_per_upload} files per upload")
    kinds = []
    for f in files:
        _check_file(f)
        kinds.append(media_kind_for(f.mime_type))

    status = decide_initial_status(EventPolicy.from_event(event), author.role)
    items = []
    for f, kind in zip(files, kinds):
        item = ContentItem(
            event_id=event.id,
            item_type=ITEM_TYPE_MEDIA,
            kind=kind,
            payload_ref=f.payload_ref,
            storage_id=f.storage_id,
            thumbnail_ref=f.thumbnail_ref,
            original_name=f.original_name,
            mime_type=f.mime_type,
            file_size=f.file_size,
            duration=f.duration,
            caption=(caption or "").strip() or None,
            album=(album or "").strip() or DEFAULT_ALBUM,
            tags=[t.strip() for t in (tags or []) if t and t.strip()],
            status=status.value,
            **_author_columns(author),
        )
        db.add(item)
        items.append(item)
    await db.commit()
    logger.info(
        "media.created",
        event_id=str(event.id),
        count=len(items),
        status=status.value,
        author_role=author.role,
    )

    if status == ItemStatus.APPROVED:
        for item in items:
            dispatcher.publish(event.id, BroadcastEvent.NEW_MEDIA, _item_payload(item))
    return items


async def create_guestbook_entry(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    author,
    text_message: Optional[str] = None,
    audio: Optional[StoredFileIn] = None,
) -> ContentItem:
    """
    Guestbook entry: text, audio, or both (mixed). Needs enable_guestbook; audio
    also needs enable_audio_messages. Broadcast new-guestbook-entry only if approved.
    """
    policy = EventPolicy.from_event(event)
    if not policy.enable_guestbook:
        raise PolicyViolation("guestbook_disabled", "Guestbook is disabled for this event")
    if audio is not None and not policy.enable_audio_messages:
        raise PolicyViolation("audio_messages_disabled", "Audio messages are disabled for this event")
    message = (text_message or "").strip()
    if audio is None and not message:
        raise ValidationFailure("message_required", "Message is required")
    if audio is not None:
        _check_file(audio)
        if media_kind_for(audio.mime_type) != "audio":
            raise ValidationFailure("invalid_audio_type", "Audio message must be an audio file")
        kind = "mixed" if message else "audio"
    else:
        kind = "text"

    status = decide_initial_status(policy, author.role)
    entry = ContentItem(
        event_id=event.id,
        item_type=ITEM_TYPE_GUESTBOOK,
        kind=kind,
        text_message=message or None,
        status=status.value,
        **_author_columns(author),
    )
    if audio is not None:
        entry.payload_ref = audio.payload_ref
        entry.storage_id = audio.storage_id
        entry.original_name = audio.original_name
        entry.mime_type = audio.mime_type
        entry.file_size = audio.file_size
        entry.duration = audio.duration
    db.add(entry)
    await db.commit()
    logger.info("guestbook.created", event_id=str(event.id), entry_id=str(entry.id), kind=kind, status=status.value)

    if status == ItemStatus.APPROVED:
        dispatcher.publish(event.id, BroadcastEvent.NEW_GUESTBOOK_ENTRY, _item_payload(entry))
    return entry


async def interaction_counts(
    db: AsyncSession,
    item_ids: Iterable[UUID],
    approved_comments_only: bool = True,
) -> Tuple[Dict[UUID, int], Dict[UUID, int]]:
    """(like count, comment count) per item id."""
    ids = list(item_ids)
    if not ids:
        return {}, {}
    r = await db.execute(
        select(ItemLike.item_id, func.count(ItemLike.id)).where(ItemLike.item_id.in_(ids)).group_by(ItemLike.item_id)
    )
    likes = {row[0]: int(row[1]) for row in r.all()}
    q = select(ItemComment.item_id, func.count(ItemComment.id)).where(ItemComment.item_id.in_(ids))
    if approved_comments_only:
        q = q.where(ItemComment.is_approved.is_(True))
    r = await db.execute(q.group_by(ItemComment.item_id))
    comments = {row[0]: int(row[1]) for row in r.all()}
    return likes, comments


def _apply_filters(q, item_type: str, album: Optional[str], kind: Optional[str], featured: Optional[bool]):
    q = q.where(ContentItem.item_type == item_type)
    if album and album != DEFAULT_ALBUM:
        q = q.where(ContentItem.album == album)
    if kind:
        q = q.where(ContentItem.kind == kind)
    if featured:
        q = q.where(ContentItem.is_featured.is_(True))
    return q


def _ordering(sort: str, order: str) -> list:
    if sort == "pinned":
        return [ContentItem.is_pinned.desc(), ContentItem.created_at.desc()]
    column = SORT_COLUMNS.get(sort, ContentItem.created_at)
    return [column.asc() if order == "asc" else column.desc(), ContentItem.id]


async def _page(db: AsyncSession, q, page: int, limit: int, sort: str, order: str) -> Tuple[List[ContentItem], int]:
    r = await db.execute(select(func.count()).select_from(q.subquery()))
    total = int(r.scalar() or 0)
    r = await db.execute(q.order_by(*_ordering(sort, order)).offset((page - 1) * limit).limit(limit))
    return list(r.scalars().all()), total


async def list_public_items(
    db: AsyncSession,
    event: Event,
    item_type: str,
    page: int = 1,
    limit: int = 20,
    album: Optional[str] = None,
    kind: Optional[str] = None,
    featured: Optional[bool] = None,
    sort: str = "created_at",
    order: str = "desc",
) -> ItemPage:
    """Guest listing: approved and not hidden only."""
    q = select(ContentItem).where(
        ContentItem.event_id == event.id,
        ContentItem.status == ItemStatus.APPROVED.value,
        ContentItem.is_hidden.is_(False),
    )
    q = _apply_filters(q, item_type, album, kind, featured)
    items, total = await _page(db, q, page, limit, sort, order)
    likes, comments = await interaction_counts(db, [i.id for i in items])
    return ItemPage(items=items, total=total, like_counts=likes, comment_counts=comments)


async def list_manage_items(
    db: AsyncSession,
    event: Event,
    item_type: str,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    album: Optional[str] = None,
    kind: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "created_at",
    order: str = "desc",
) -> ItemPage:
    """Owner listing: every status, optional status filter and text search, plus per-status counts."""
    q = select(ContentItem).where(ContentItem.event_id == event.id)
    q = _apply_filters(q, item_type, album, kind, None)
    if status:
        q = q.where(ContentItem.status == ItemStatus(status).value)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        q = q.where(
            or_(
                ContentItem.original_name.ilike(pattern),
                ContentItem.caption.ilike(pattern),
                ContentItem.text_message.ilike(pattern),
                ContentItem.guest_name.ilike(pattern),
                ContentItem.guest_email.ilike(pattern),
            )
        )
    items, total = await _page(db, q, page, limit, sort, order)
    likes, comments = await interaction_counts(db, [i.id for i in items], approved_comments_only=False)

    r = await db.execute(
        select(ContentItem.status, func.count(ContentItem.id))
        .where(ContentItem.event_id == event.id, ContentItem.item_type == item_type)
        .group_by(ContentItem.status)
    )
    status_counts = {row[0]: int(row[1]) for row in r.all()}
    return ItemPage(items=items, total=total, like_counts=likes, comment_counts=comments, status_counts=status_counts)


async def get_item(db: AsyncSession, item_id: UUID, item_type: str) -> ContentItem:
    item = await db.get(ContentItem, item_id)
    if item is None or item.item_type != item_type:
        raise NotFound(f"{item_type}_not_found", "Media not found" if item_type == ITEM_TYPE_MEDIA else "Entry not found")
    return item


async def load_item_context(
    db: AsyncSession,
    item_id: UUID,
    item_type: str,
    principal: Principal,
) -> Tuple[ContentItem, Event, bool]:
    """(item, its event, whether the caller owns the event)."""
    item = await get_item(db, item_id, item_type)
    event = await event_service.get_event(db, item.event_id)
    return item, event, await event_service.is_event_owner(db, event, principal)


async def require_item_owner(
    db: AsyncSession,
    item_id: UUID,
    item_type: str,
    principal: Principal,
) -> Tuple[ContentItem, Event]:
    item, event, is_owner = await load_item_context(db, item_id, item_type, principal)
    if not is_owner:
        raise OwnershipDenied("event_access_denied")
    return item, event


def ensure_guest_visible(item: ContentItem, event: Event) -> None:
    """Pending, rejected or hidden items (and items of unpublished events) do not exist for guests."""
    if not (event.is_active and event.is_published) or not is_guest_visible(item.status, item.is_hidden):
        raise NotFound(
            f"{item.item_type}_not_found",
            "Media not found" if item.item_type == ITEM_TYPE_MEDIA else "Entry not found",
        )


async def load_interactions(
    db: AsyncSession,
    item: ContentItem,
    include_unapproved: bool = False,
) -> Tuple[List[ItemLike], List[ItemComment]]:
    r = await db.execute(select(ItemLike).where(ItemLike.item_id == item.id).order_by(ItemLike.created_at))
    likes = list(r.scalars().all())
    q = select(ItemComment).where(ItemComment.item_id == item.id)
    if not include_unapproved:
        q = q.where(ItemComment.is_approved.is_(True))
    r = await db.execute(q.order_by(ItemComment.created_at))
    return likes, list(r.scalars().all())


async def get_item_for_viewer(
    db: AsyncSession,
    item: ContentItem,
    event: Event,
    is_owner: bool,
) -> Tuple[ContentItem, List[ItemLike], List[ItemComment]]:
    """
    Item detail for a viewer. Non-owners only see guest-visible items (else NotFound).
    Media views are counted with an atomic increment.
    """
    if not is_owner:
        ensure_guest_visible(item, event)
    if item.item_type == ITEM_TYPE_MEDIA:
        await db.execute(update(ContentItem).where(ContentItem.id == item.id).values(views=ContentItem.views + 1))
        await db.commit()
        await db.refresh(item, ["views"])
    likes, comments = await load_interactions(db, item, include_unapproved=is_owner)
    return item, likes, comments


async def _transition_status(
    db: AsyncSession,
    item: ContentItem,
    action: ModerationAction | str,
    actor: str,
    moderated_at: datetime,
) -> ModerationOutcome:
    """
    Compare-and-set on the stored status: the UPDATE only matches while the row still
    holds the status the outcome was computed from. A concurrent writer that got there
    first makes it match nothing; the status is re-read and the action re-evaluated,
    so of two identical approvals only one reports changed / became_visible.
    """
    while True:
        outcome = apply_moderation_action(item.status, action)
        if not outcome.changed:
            return outcome
        r = await db.execute(
            update(ContentItem)
            .where(ContentItem.id == item.id, ContentItem.status == outcome.previous.value)
            .values(status=outcome.status.value, moderated_at=moderated_at, moderated_by=actor)
            .returning(ContentItem.id)
            .execution_options(synchronize_session=False)
        )
        if r.scalar_one_or_none() is not None:
            set_committed_value(item, "status", outcome.status.value)
            set_committed_value(item, "moderated_at", moderated_at)
            set_committed_value(item, "moderated_by", actor)
            return outcome
        await db.refresh(item, ["status"])
        logger.info("moderation.status_changed_concurrently", item_id=str(item.id), status=item.status)


async def moderate_item(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event: Event,
    item: ContentItem,
    action: ModerationAction | str,
    actor: str,
) -> ModerationOutcome:
    """
    Approve / reject one item. No-op when already in the target status.
    *-approved is broadcast only when this call moved the item into approved.
    """
    outcome = await _transition_status(db, item, action, actor, utcnow())
    if not outcome.changed:
        await db.commit()
        logger.info("moderation.noop", item_id=str(item.id), status=outcome.status.value)
        return outcome

    await audit_service.log_moderation_event(
        db,
        event_id=event.id,
        item_id=item.id,
        action=audit_service.APPROVED if outcome.status == ItemStatus.APPROVED else audit_service.REJECTED,
        actor=actor,
        metadata_={"item_type": item.item_type, "previous": outcome.previous.value},
    )
    await db.commit()
    logger.info(
        "moderation.applied",
        item_id=str(item.id),
        event_id=str(event.id),
        previous=outcome.previous.value,
        status=outcome.status.value,
        actor=actor,
    )

    if outcome.became_visible:
        likes, comments = await interaction_counts(db, [item.id])
        dispatcher.publish(
            event.id,
            APPROVED_EVENT[item.item_type],
            _item_payload(item, likes.get(item.id, 0), comments.get(item.id, 0)),
        )
    return outcome


async def update_item_flags(
    db: AsyncSession,
    event: Event,
    item: ContentItem,
    changes: Dict[str, Any],
    actor: str,
) -> ContentItem:
    """Owner curation: hidden / featured / pinned flags and caption / album / tags (media)."""
    for flag, (on_action, off_action) in _FLAG_AUDIT.items():
        value = changes.get(flag)
        if value is None or bool(value) == getattr(item, flag):
            continue
        setattr(item, flag, bool(value))
        await audit_service.log_moderation_event(
            db,
            event_id=event.id,
            item_id=item.id,
            action=on_action if value else off_action,
            actor=actor,
            metadata_={"item_type": item.item_type},
        )
    if item.item_type == ITEM_TYPE_MEDIA:
        if changes.get("caption") is not None:
            item.caption = changes["caption"].strip() or None
        if changes.get("album") is not None:
            item.album = changes["album"].strip() or DEFAULT_ALBUM
        if changes.get("tags") is not None:
            item.tags = [t.strip() for t in changes["tags"] if t and t.strip()]
    await db.commit()
    logger.info("content.updated", item_id=str(item.id), fields=sorted(k for k, v in changes.items() if v is not None))
    return item


async def _delete_binaries(storage: StorageBackend, items: Iterable[ContentItem]) -> None:
    """Storage first; failures are logged and the DB delete goes ahead."""
    for item in items:
        if not item.storage_id:
            continue
        try:
            await storage.delete(item.storage_id, resource_type_for(item.kind))
        except Exception as e:
            logger.warning("storage.delete_ignored", item_id=str(item.id), storage_id=item.storage_id, error=str(e))


async def _delete_rows(db: AsyncSession, item_ids: List[UUID]) -> None:
    await db.execute(delete(ItemLike).where(ItemLike.item_id.in_(item_ids)))
    await db.execute(delete(ItemComment).where(ItemComment.item_id.in_(item_ids)))
    await db.execute(delete(ContentItem).where(ContentItem.id.in_(item_ids)))


async def delete_item(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    storage: StorageBackend,
    event: Event,
    item: ContentItem,
    actor: str,
) -> None:
    """
    Xóa item: storage (best-effort) -> DB (item + likes + comments) -> audit -> stats -> *-deleted.
    Pending comments of the item are never broadcast.
    """
    item_id, item_type, kind = item.id, item.item_type, item.kind
    await _delete_binaries(storage, [item])
    await _delete_rows(db, [item_id])
    await audit_service.log_moderation_event(
        db,
        event_id=event.id,
        action=audit_service.DELETED,
        actor=actor,
        metadata_={"item_id": str(item_id), "item_type": item_type, "kind": kind},
    )
    await recompute_event_statistics(db, event)
    await db.commit()
    logger.info("content.deleted", item_id=str(item_id), event_id=str(event.id), item_type=item_type)

    dispatcher.publish(event.id, DELETED_EVENT[item_type], {"itemId": str(item_id), "eventId": str(event.id)})


async def bulk_action(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    storage: StorageBackend,
    event: Event,
    item_type: str,
    action: str,
    item_ids: List[UUID],
    actor: str,
) -> BulkResult:
    """
    Apply one action to many items of this event in a single transaction.
    Ids of other events (or unknown ids) are skipped and reported, never modified.
    Broadcasts after commit: one *-approved per item that became visible, one *-deleted per deleted item.
    """
    if action not in BULK_ACTIONS[item_type]:
        raise ValidationFailure("invalid_action", f"Invalid action: {action}")
    requested = list(dict.fromkeys(item_ids))
    r = await db.execute(
        select(ContentItem).where(ContentItem.id.in_(requested), ContentItem.item_type == item_type)
    )
    loaded = list(r.scalars().all())
    own, foreign = partition_for_event(loaded, event.id)
    own_ids = {i.id for i in own}
    skipped = [i for i in requested if i not in own_ids]
    if foreign:
        logger.warning(
            "bulk.foreign_items_skipped",
            event_id=str(event.id),
            item_ids=[str(i.id) for i in foreign],
        )

    now = utcnow()
    visible: List[ContentItem] = []
    affected: List[UUID] = []
    if action in ("approve", "reject"):
        for item in own:
            outcome = await _transition_status(db, item, action, actor, now)
            if not outcome.changed:
                continue
            affected.append(item.id)
            if outcome.became_visible:
                visible.append(item)
            await audit_service.log_moderation_event(
                db,
                event_id=event.id,
                item_id=item.id,
                action=audit_service.APPROVED if action == "approve" else audit_service.REJECTED,
                actor=actor,
                metadata_={"item_type": item_type, "previous": outcome.previous.value, "bulk": True},
            )
    elif action == "delete":
        await _delete_binaries(storage, own)
        affected = [i.id for i in own]
        if affected:
            await _delete_rows(db, affected)
            for item in own:
                await audit_service.log_moderation_event(
                    db,
                    event_id=event.id,
                    action=audit_service.DELETED,
                    actor=actor,
                    metadata_={"item_id": str(item.id), "item_type": item_type, "kind": item.kind, "bulk": True},
                )
            await recompute_event_statistics(db, event)
    else:
        flag, value, audit_action = _FLAG_ACTIONS[action]
        for item in own:
            if getattr(item, flag) == value:
                continue
            setattr(item, flag, value)
            affected.append(item.id)
            await audit_service.log_moderation_event(
                db,
                event_id=event.id,
                item_id=item.id,
                action=audit_action,
                actor=actor,
                metadata_={"item_type": item_type, "bulk": True},
            )
    await db.commit()
    logger.info(
        "bulk.applied",
        event_id=str(event.id),
        item_type=item_type,
        action=action,
        affected=len(affected),
        skipped=len(skipped),
    )

    if visible:
        likes, comments = await interaction_counts(db, [i.id for i in visible])
        for item in visible:
            dispatcher.publish(
                event.id,
                APPROVED_EVENT[item_type],
                _item_payload(item, likes.get(item.id, 0), comments.get(item.id, 0)),
            )
    if action == "delete":
        for item_id in affected:
            dispatcher.publish(event.id, DELETED_EVENT[item_type], {"itemId": str(item_id), "eventId": str(event.id)})
    return BulkResult(action=action, affected=affected, skipped=skipped)


async def register_download(db: AsyncSession, event: Event, item: ContentItem, is_owner: bool) -> ContentItem:
    """Count a download and hand back the item (payload_ref is the download URL)."""
    if not is_owner:
        ensure_guest_visible(item, event)
    if not event.allow_downloads and not is_owner:
        raise PolicyViolation("downloads_disabled", "Downloads are not allowed for this event")
    await db.execute(update(ContentItem).where(ContentItem.id == item.id).values(downloads=ContentItem.downloads + 1))
    await db.commit()
    await db.refresh(item, ["downloads"])
    logger.info("media.downloaded", item_id=str(item.id), downloads=item.downloads)
    return item

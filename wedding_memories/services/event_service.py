"""
Event (wedding) store: CRUD, publish, photographers, albums, cover photo, password
protection, and the access checks every other service relies on
(owner for management, published+active (+password) for guests).
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

import bcrypt
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.auth import Principal
from wedding_memories.errors import EventPasswordRequired, NotFound, OwnershipDenied, ValidationFailure
from wedding_memories.logging_config import get_logger
from wedding_memories.models import ContentItem, Event, EventAlbum, EventPhotographer, ItemComment, ItemLike
from wedding_memories.models.content_item import DEFAULT_ALBUM, ITEM_TYPE_MEDIA
from wedding_memories.services.moderation_service import ItemStatus, SubmitterRole

logger = get_logger(__name__)

POLICY_FIELDS = (
    "moderate_uploads",
    "enable_guestbook",
    "enable_audio_messages",
    "allow_comments",
    "allow_likes",
    "allow_downloads",
)
UPDATABLE_FIELDS = (
    "title",
    "description",
    "partner1",
    "partner2",
    "event_date",
    "venue_name",
    "is_active",
) + POLICY_FIELDS

# (name, description); the first one is the default album.
DEFAULT_ALBUMS = (
    (DEFAULT_ALBUM, "All uploaded photos and videos"),
    ("Ceremony", "Wedding ceremony moments"),
    ("Reception", "Reception celebrations"),
    ("Portraits", "Portrait and couple photos"),
    ("Candid", "Candid moments and fun shots"),
)


def hash_event_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_event_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def _apply_password(event: Event, password: Optional[str]) -> None:
    """None: unchanged. Blank: protection removed. Anything else: new password."""
    if password is None:
        return
    event.password_hash = hash_event_password(password) if password.strip() else None


def check_event_password(event: Event, password: Optional[str]) -> None:
    if event.password_hash is None:
        return
    if not password or not verify_event_password(password, event.password_hash):
        raise EventPasswordRequired("event_password_required")


async def create_event(db: AsyncSession, host: Principal, data: Dict[str, Any]) -> Event:
    """Tạo event mới; host là người gọi. Policy không truyền -> giá trị mặc định của model. Kèm các album mặc định."""
    if host.role not in (SubmitterRole.HOST, SubmitterRole.ADMIN):
        raise OwnershipDenied("host_role_required", "Only hosts can create events")
    fields = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS and v is not None}
    event = Event(host_user_id=host.user_id, **fields)
    _apply_password(event, data.get("password"))
    db.add(event)
    await db.flush()
    for position, (name, description) in enumerate(DEFAULT_ALBUMS):
        db.add(
            EventAlbum(
                event_id=event.id,
                name=name,
                description=description,
                position=position,
                is_default=position == 0,
            )
        )
    await db.commit()
    logger.info("event.created", event_id=str(event.id), host_user_id=str(host.user_id))
    return event


async def get_event(db: AsyncSession, event_id: UUID) -> Event:
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("event_not_found", "Event not found")
    return event


async def get_public_event(db: AsyncSession, event_id: UUID, password: Optional[str] = None) -> Event:
    """
    Guest access: event must exist, be active and published (else NotFound);
    a password-protected event also needs the matching password (else EventPasswordRequired).
    """
    event = await db.get(Event, event_id)
    if event is None or not event.is_active or not event.is_published:
        raise NotFound("event_not_found", "Event not found or not accessible")
    check_event_password(event, password)
    return event


async def list_photographer_ids(db: AsyncSession, event_id: UUID) -> List[UUID]:
    r = await db.execute(
        select(EventPhotographer.user_id)
        .where(EventPhotographer.event_id == event_id)
        .order_by(EventPhotographer.created_at)
    )
    return list(r.scalars().all())


async def is_event_owner(db: AsyncSession, event: Event, principal: Principal) -> bool:
    """Host, assigned photographer, or admin."""
    if principal.is_guest or principal.user_id is None:
        return False
    if principal.is_admin or event.host_user_id == principal.user_id:
        return True
    r = await db.execute(
        select(EventPhotographer.user_id).where(
            EventPhotographer.event_id == event.id,
            EventPhotographer.user_id == principal.user_id,
        )
    )
    return r.scalar_one_or_none() is not None


async def require_event_owner(db: AsyncSession, event_id: UUID, principal: Principal) -> Event:
    event = await get_event(db, event_id)
    if not await is_event_owner(db, event, principal):
        raise OwnershipDenied("event_access_denied")
    return event


def _require_host(event: Event, principal: Principal) -> None:
    """Publishing, deleting and staffing are host/admin only (not photographers)."""
    if principal.is_admin or event.host_user_id == principal.user_id:
        return
    raise OwnershipDenied("host_only", "Only the event host can do this")


async def list_events_for(db: AsyncSession, principal: Principal) -> List[Event]:
    """Events hosted by the caller or where the caller is a photographer; admins see all."""
    q = select(Event).order_by(Event.event_date.desc())
    if not principal.is_admin:
        staffed = select(EventPhotographer.event_id).where(EventPhotographer.user_id == principal.user_id)
        q = q.where(or_(Event.host_user_id == principal.user_id, Event.id.in_(staffed)))
    r = await db.execute(q)
    return list(r.scalars().all())


async def update_event(db: AsyncSession, event: Event, changes: Dict[str, Any]) -> Event:
    applied = []
    for key, value in changes.items():
        if key in UPDATABLE_FIELDS and value is not None:
            setattr(event, key, value)
            applied.append(key)
    if changes.get("password") is not None:
        _apply_password(event, changes["password"])
        applied.append("password")
    await db.commit()
    logger.info("event.updated", event_id=str(event.id), fields=applied)
    return event


async def set_published(db: AsyncSession, event: Event, principal: Principal, is_published: bool) -> Event:
    _require_host(event, principal)
    event.is_published = is_published
    await db.commit()
    logger.info("event.published" if is_published else "event.unpublished", event_id=str(event.id))
    return event


async def set_cover_photo(
    db: AsyncSession,
    event: Event,
    payload_ref: Optional[str] = None,
    item_id: Optional[UUID] = None,
) -> Event:
    """
    Ảnh bìa: payload_ref đã upload sẵn, hoặc một photo approved của chính event này.
    Không truyền gì -> xóa ảnh bìa.
    """
    if payload_ref and item_id:
        raise ValidationFailure("cover_source_ambiguous", "Give either payload_ref or item_id, not both")
    if item_id is not None:
        item = await db.get(ContentItem, item_id)
        if (
            item is None
            or item.event_id != event.id
            or item.item_type != ITEM_TYPE_MEDIA
            or item.kind != "photo"
            or item.status != ItemStatus.APPROVED.value
        ):
            raise NotFound("media_not_found", "Approved photo not found in this event")
        payload_ref = item.payload_ref
    event.cover_photo_ref = (payload_ref or "").strip() or None
    await db.commit()
    logger.info("event.cover_updated", event_id=str(event.id), has_cover=event.cover_photo_ref is not None)
    return event


async def list_albums(db: AsyncSession, event_id: UUID) -> List[EventAlbum]:
    r = await db.execute(
        select(EventAlbum).where(EventAlbum.event_id == event_id).order_by(EventAlbum.position, EventAlbum.created_at)
    )
    return list(r.scalars().all())


async def get_album(db: AsyncSession, event: Event, album_id: UUID) -> EventAlbum:
    album = await db.get(EventAlbum, album_id)
    if album is None or album.event_id != event.id:
        raise NotFound("album_not_found", "Album not found")
    return album


async def _ensure_album_name_free(db: AsyncSession, event: Event, name: str, exclude_id: Optional[UUID] = None) -> None:
    """Album names are unique per event, case-insensitive."""
    q = select(EventAlbum.id).where(EventAlbum.event_id == event.id, func.lower(EventAlbum.name) == name.lower())
    if exclude_id is not None:
        q = q.where(EventAlbum.id != exclude_id)
    r = await db.execute(q)
    if r.first() is not None:
        raise ValidationFailure("album_exists", "Album with this name already exists")


def _clean_album_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationFailure("album_name_required", "Album name is required")
    return cleaned


async def create_album(db: AsyncSession, event: Event, name: str, description: Optional[str] = None) -> EventAlbum:
    cleaned = _clean_album_name(name)
    await _ensure_album_name_free(db, event, cleaned)
    r = await db.execute(select(func.count(EventAlbum.id)).where(EventAlbum.event_id == event.id))
    album = EventAlbum(
        event_id=event.id,
        name=cleaned,
        description=(description or "").strip() or None,
        position=int(r.scalar() or 0),
    )
    db.add(album)
    await db.commit()
    logger.info("album.created", event_id=str(event.id), album_id=str(album.id), name=cleaned)
    return album


async def update_album(db: AsyncSession, event: Event, album: EventAlbum, changes: Dict[str, Any]) -> EventAlbum:
    """
    Đổi tên / mô tả / thứ tự / ảnh bìa album.
    Đổi tên thì media đang ở album cũ đi theo tên mới. Album mặc định không đổi tên được.
    """
    if changes.get("name") is not None:
        new_name = _clean_album_name(changes["name"])
        if new_name != album.name:
            if album.is_default:
                raise ValidationFailure("default_album_locked", "Cannot rename the default album")
            await _ensure_album_name_free(db, event, new_name, exclude_id=album.id)
            await db.execute(
                update(ContentItem)
                .where(ContentItem.event_id == event.id, ContentItem.album == album.name)
                .values(album=new_name)
                .execution_options(synchronize_session=False)
            )
            album.name = new_name
    if changes.get("description") is not None:
        album.description = changes["description"].strip() or None
    if changes.get("position") is not None:
        album.position = changes["position"]
    if changes.get("cover_photo_ref") is not None:
        album.cover_photo_ref = changes["cover_photo_ref"].strip() or None
    await db.commit()
    logger.info("album.updated", event_id=str(event.id), album_id=str(album.id))
    return album


async def delete_album(db: AsyncSession, event: Event, album: EventAlbum) -> int:
    """Delete a non-default album; its media move to the default album. Returns how many moved."""
    if album.is_default:
        raise ValidationFailure("default_album_locked", "Cannot delete default album")
    r = await db.execute(
        update(ContentItem)
        .where(ContentItem.event_id == event.id, ContentItem.album == album.name)
        .values(album=DEFAULT_ALBUM)
        .execution_options(synchronize_session=False)
    )
    moved = r.rowcount or 0
    await db.delete(album)
    await db.commit()
    logger.info("album.deleted", event_id=str(event.id), album_id=str(album.id), moved=moved)
    return moved


async def delete_event(db: AsyncSession, event: Event, principal: Principal) -> None:
    """Xóa event cùng toàn bộ item, like, comment, album (không qua storage; dùng cho dọn dẹp)."""
    _require_host(event, principal)
    item_ids = select(ContentItem.id).where(ContentItem.event_id == event.id)
    await db.execute(delete(ItemLike).where(ItemLike.item_id.in_(item_ids)))
    await db.execute(delete(ItemComment).where(ItemComment.item_id.in_(item_ids)))
    await db.execute(delete(ContentItem).where(ContentItem.event_id == event.id))
    await db.execute(delete(EventPhotographer).where(EventPhotographer.event_id == event.id))
    await db.execute(delete(EventAlbum).where(EventAlbum.event_id == event.id))
    await db.delete(event)
    await db.commit()
    logger.info("event.deleted", event_id=str(event.id))


async def add_photographer(db: AsyncSession, event: Event, principal: Principal, user_id: UUID) -> List[UUID]:
    _require_host(event, principal)
    if user_id == event.host_user_id:
        raise OwnershipDenied("host_cannot_be_photographer", "The host already owns this event")
    existing = await db.get(EventPhotographer, (event.id, user_id))
    if existing is None:
        db.add(EventPhotographer(event_id=event.id, user_id=user_id))
        await db.commit()
        logger.info("event.photographer_added", event_id=str(event.id), user_id=str(user_id))
    return await list_photographer_ids(db, event.id)


async def remove_photographer(db: AsyncSession, event: Event, principal: Principal, user_id: UUID) -> List[UUID]:
    _require_host(event, principal)
    existing = await db.get(EventPhotographer, (event.id, user_id))
    if existing is None:
        raise NotFound("photographer_not_found", "Photographer not assigned to this event")
    await db.delete(existing)
    await db.commit()
    logger.info("event.photographer_removed", event_id=str(event.id), user_id=str(user_id))
    return await list_photographer_ids(db, event.id)


async def get_event_for_submission(
    db: AsyncSession,
    event_id: UUID,
    principal: Principal,
    password: Optional[str] = None,
) -> Event:
    """Guests submit to published events (with the password when set); hosts, photographers and admins to events they own."""
    if principal.is_guest:
        return await get_public_event(db, event_id, password)
    return await require_event_owner(db, event_id, principal)


def ensure_interaction_access(event: Event, is_owner: bool, password: Optional[str]) -> None:
    """Guest likes / comments on a password-protected event need the password too."""
    if not is_owner:
        check_event_password(event, password)

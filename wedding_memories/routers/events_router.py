"""API events: CRUD, public view, publish, photographers, albums, cover photo, stats, moderation audit."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.auth import Principal, get_event_password, get_principal
from wedding_memories.db import get_db
from wedding_memories.models import Event
from wedding_memories.schemas.common import MessageResponse
from wedding_memories.schemas.event import (
    AlbumCreate,
    AlbumDeleteResponse,
    AlbumListResponse,
    AlbumOut,
    AlbumUpdate,
    CoverPhotoRequest,
    EventCreate,
    EventListResponse,
    EventOut,
    EventPublicOut,
    EventStatsOut,
    EventUpdate,
    ModerationEventOut,
    ModerationEventsListResponse,
    PhotographerRequest,
    PublishRequest,
)
from wedding_memories.services import audit_service, event_service, stats_service

router = APIRouter(prefix="/api/events", tags=["events"])


async def _albums_out(db: AsyncSession, event: Event) -> list:
    return [AlbumOut.model_validate(a) for a in await event_service.list_albums(db, event.id)]


async def _event_out(db: AsyncSession, event: Event) -> EventOut:
    photographers = await event_service.list_photographer_ids(db, event.id)
    return EventOut.model_validate(event).model_copy(
        update={"photographers": photographers, "albums": await _albums_out(db, event)}
    )


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def post_event(
    payload: EventCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    """Tạo event mới (host)."""
    event = await event_service.create_event(db, principal, payload.model_dump(exclude_none=True))
    return await _event_out(db, event)


@router.get("", response_model=EventListResponse)
async def get_events(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    """Events the caller hosts or photographs (all events for admins)."""
    events = await event_service.list_events_for(db, principal)
    return EventListResponse(items=[await _event_out(db, e) for e in events])


@router.get("/public/{event_id}", response_model=EventPublicOut)
async def get_public_event(
    event_id: UUID,
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
) -> EventPublicOut:
    """Guest view (QR landing). 404 unless active and published; 401 without the password of a protected event."""
    event = await event_service.get_public_event(db, event_id, event_password)
    return EventPublicOut.model_validate(event).model_copy(update={"albums": await _albums_out(db, event)})


@router.get("/{event_id}", response_model=EventOut)
async def get_event(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    event = await event_service.require_event_owner(db, event_id, principal)
    return await _event_out(db, event)


@router.patch("/{event_id}", response_model=EventOut)
async def patch_event(
    event_id: UUID,
    payload: EventUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    """Cập nhật thông tin và policy của event. Chỉ field có giá trị mới được cập nhật."""
    event = await event_service.require_event_owner(db, event_id, principal)
    event = await event_service.update_event(db, event, payload.model_dump(exclude_none=True))
    return await _event_out(db, event)


@router.patch("/{event_id}/publish", response_model=EventOut)
async def patch_event_publish(
    event_id: UUID,
    payload: PublishRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    """Publish / unpublish (guests only reach published events)."""
    event = await event_service.require_event_owner(db, event_id, principal)
    event = await event_service.set_published(db, event, principal, payload.is_published)
    return await _event_out(db, event)


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    event = await event_service.require_event_owner(db, event_id, principal)
    await event_service.delete_event(db, event, principal)
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/photographers", response_model=EventOut)
async def post_event_photographer(
    event_id: UUID,
    payload: PhotographerRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    event = await event_service.require_event_owner(db, event_id, principal)
    await event_service.add_photographer(db, event, principal, payload.user_id)
    return await _event_out(db, event)


@router.delete("/{event_id}/photographers/{user_id}", response_model=EventOut)
async def delete_event_photographer(
    event_id: UUID,
    user_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    event = await event_service.require_event_owner(db, event_id, principal)
    await event_service.remove_photographer(db, event, principal, user_id)
    return await _event_out(db, event)


@router.put("/{event_id}/cover", response_model=EventOut)
async def put_event_cover(
    event_id: UUID,
    payload: CoverPhotoRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventOut:
    """Đặt ảnh bìa từ payload_ref hoặc từ một photo approved của event."""
    event = await event_service.require_event_owner(db, event_id, principal)
    event = await event_service.set_cover_photo(db, event, payload_ref=payload.payload_ref, item_id=payload.item_id)
    return await _event_out(db, event)


@router.get("/{event_id}/albums", response_model=AlbumListResponse)
async def get_event_albums(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> AlbumListResponse:
    event = await event_service.require_event_owner(db, event_id, principal)
    return AlbumListResponse(event_id=event.id, items=await _albums_out(db, event))


@router.post("/{event_id}/albums", response_model=AlbumOut, status_code=status.HTTP_201_CREATED)
async def post_event_album(
    event_id: UUID,
    payload: AlbumCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> AlbumOut:
    """Tạo album (tên không trùng, không phân biệt hoa thường)."""
    event = await event_service.require_event_owner(db, event_id, principal)
    album = await event_service.create_album(db, event, payload.name, payload.description)
    return AlbumOut.model_validate(album)


@router.patch("/{event_id}/albums/{album_id}", response_model=AlbumOut)
async def patch_event_album(
    event_id: UUID,
    album_id: UUID,
    payload: AlbumUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> AlbumOut:
    event = await event_service.require_event_owner(db, event_id, principal)
    album = await event_service.get_album(db, event, album_id)
    album = await event_service.update_album(db, event, album, payload.model_dump(exclude_none=True))
    return AlbumOut.model_validate(album)


@router.delete("/{event_id}/albums/{album_id}", response_model=AlbumDeleteResponse)
async def delete_event_album(
    event_id: UUID,
    album_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> AlbumDeleteResponse:
    """Xóa album; media trong album chuyển về album mặc định. Album mặc định không xóa được."""
    event = await event_service.require_event_owner(db, event_id, principal)
    album = await event_service.get_album(db, event, album_id)
    moved = await event_service.delete_album(db, event, album)
    return AlbumDeleteResponse(message="Album deleted successfully", moved_items=moved)


@router.get("/{event_id}/stats", response_model=EventStatsOut)
async def get_event_stats(
    event_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> EventStatsOut:
    """Tính lại thống kê (approved items only) và lưu vào event."""
    event = await event_service.require_event_owner(db, event_id, principal)
    stats = await stats_service.recompute_event_statistics(db, event)
    return EventStatsOut(**stats)


@router.get("/{event_id}/audit", response_model=ModerationEventsListResponse)
async def get_event_audit(
    event_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ModerationEventsListResponse:
    """Lịch sử kiểm duyệt của event, mới nhất trước."""
    await event_service.require_event_owner(db, event_id, principal)
    events = await audit_service.list_moderation_events(db, event_id, limit=limit)
    return ModerationEventsListResponse(
        event_id=event_id,
        items=[ModerationEventOut.model_validate(e) for e in events],
    )

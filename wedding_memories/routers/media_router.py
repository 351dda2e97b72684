"""API media: upload, guest listing, management listing, moderation, likes, comments, bulk, download."""
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.auth import Principal, get_event_password, get_optional_principal, get_principal
from wedding_memories.db import get_db
from wedding_memories.models.content_item import ITEM_TYPE_MEDIA
from wedding_memories.schemas.common import MessageResponse
from wedding_memories.schemas.content import (
    BulkActionRequest,
    BulkActionResponse,
    CommentCreate,
    CommentOut,
    ContentItemDetailOut,
    ContentItemOut,
    DownloadResponse,
    ItemFlagsUpdate,
    ItemsPage,
    LikeOut,
    LikeRequest,
    LikeResponse,
    ManageItemsPage,
    MediaUploadRequest,
    MediaUploadResponse,
    ModerationResponse,
    item_out,
    page_fields,
)
from wedding_memories.services import content_service, event_service, interaction_service
from wedding_memories.services.broadcast_service import BroadcastDispatcher, get_dispatcher
from wedding_memories.services.moderation_service import ItemStatus, ModerationAction
from wedding_memories.services.storage_service import StorageBackend, get_storage
from wedding_memories.utils.query_params import ensure_bool_query

router = APIRouter(prefix="/api/media", tags=["media"])

MediaKind = Literal["photo", "video", "audio"]
SortField = Literal["created_at", "views", "downloads"]


@router.post("/event/{event_id}", response_model=MediaUploadResponse, status_code=status.HTTP_201_CREATED)
async def post_media(
    event_id: UUID,
    payload: MediaUploadRequest,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> MediaUploadResponse:
    """
    Upload media (file đã nằm trên storage, body chỉ chứa payload_ref + metadata).
    Khách: cần guest_name, event phải published; host/photographer: luôn approved.
    """
    event = await event_service.get_event_for_submission(db, event_id, principal, event_password)
    author = content_service.author_for(principal, payload.guest_name, payload.guest_email)
    items = await content_service.create_media(
        db,
        dispatcher,
        event,
        author,
        payload.files,
        album=payload.album,
        caption=payload.caption,
        tags=payload.tags,
    )
    pending = sum(1 for i in items if i.status == ItemStatus.PENDING.value)
    return MediaUploadResponse(
        event_id=event.id,
        items=[item_out(i) for i in items],
        pending=pending,
        message="Files uploaded and pending approval" if pending else "Files uploaded successfully",
    )


@router.get("/event/{event_id}", response_model=ItemsPage)
async def get_event_media(
    event_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    album: Optional[str] = Query(None),
    kind: Optional[MediaKind] = Query(None, description="photo | video | audio"),
    featured: Optional[str] = Query(None, description="true: featured only"),
    sort: SortField = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
) -> ItemsPage:
    """Media cho khách: chỉ approved và không bị ẩn."""
    event = await event_service.get_public_event(db, event_id, event_password)
    result = await content_service.list_public_items(
        db,
        event,
        ITEM_TYPE_MEDIA,
        page=page,
        limit=limit,
        album=album,
        kind=kind,
        featured=ensure_bool_query(featured),
        sort=sort,
        order=order,
    )
    return ItemsPage(**page_fields(result, page, limit))


@router.get("/manage/{event_id}", response_model=ManageItemsPage)
async def get_manage_media(
    event_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_: Optional[ItemStatus] = Query(None, alias="status"),
    album: Optional[str] = Query(None),
    kind: Optional[MediaKind] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort: SortField = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ManageItemsPage:
    """Media cho host/photographer: mọi trạng thái, kèm số lượng theo trạng thái."""
    event = await event_service.require_event_owner(db, event_id, principal)
    result = await content_service.list_manage_items(
        db,
        event,
        ITEM_TYPE_MEDIA,
        page=page,
        limit=limit,
        status=status_,
        album=album,
        kind=kind,
        search=search,
        sort=sort,
        order=order,
    )
    return ManageItemsPage(**page_fields(result, page, limit), status_counts=result.status_counts)


@router.patch("/bulk-action/{event_id}", response_model=BulkActionResponse)
async def patch_media_bulk_action(
    event_id: UUID,
    payload: BulkActionRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
    storage: StorageBackend = Depends(get_storage),
) -> BulkActionResponse:
    """approve | reject | delete | feature | unfeature trên nhiều media của event."""
    event = await event_service.require_event_owner(db, event_id, principal)
    result = await content_service.bulk_action(
        db, dispatcher, storage, event, ITEM_TYPE_MEDIA, payload.action, payload.item_ids, principal.actor
    )
    return BulkActionResponse(
        action=result.action,
        affected=len(result.affected),
        item_ids=result.affected,
        skipped=result.skipped,
        message=f"{len(result.affected)} media items updated ({payload.action})",
    )


@router.get("/{media_id}", response_model=ContentItemDetailOut)
async def get_media(
    media_id: UUID,
    principal: Principal = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
) -> ContentItemDetailOut:
    """Chi tiết media. Khách không thấy media pending / rejected / hidden (404)."""
    item, event, is_owner = await content_service.load_item_context(db, media_id, ITEM_TYPE_MEDIA, principal)
    item, likes, comments = await content_service.get_item_for_viewer(db, item, event, is_owner)
    out = item_out(item, len(likes), len(comments))
    return ContentItemDetailOut(
        **out.model_dump(),
        likes=[LikeOut.model_validate(like) for like in likes],
        comments=[CommentOut.model_validate(c) for c in comments],
    )


@router.patch("/{media_id}", response_model=ContentItemOut)
async def patch_media(
    media_id: UUID,
    payload: ItemFlagsUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ContentItemOut:
    """Ẩn / nổi bật / ghim, sửa caption, album, tags."""
    item, event = await content_service.require_item_owner(db, media_id, ITEM_TYPE_MEDIA, principal)
    item = await content_service.update_item_flags(db, event, item, payload.model_dump(exclude_none=True), principal.actor)
    return item_out(item)


@router.delete("/{media_id}", response_model=MessageResponse)
async def delete_media(
    media_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
    storage: StorageBackend = Depends(get_storage),
) -> MessageResponse:
    item, event = await content_service.require_item_owner(db, media_id, ITEM_TYPE_MEDIA, principal)
    await content_service.delete_item(db, dispatcher, storage, event, item, principal.actor)
    return MessageResponse(message="Media deleted successfully")


@router.post("/{media_id}/approve", response_model=ModerationResponse)
async def post_media_approve(
    media_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ModerationResponse:
    """Duyệt media: pending|rejected -> approved; broadcast media-approved khi media vừa hiển thị."""
    item, event = await content_service.require_item_owner(db, media_id, ITEM_TYPE_MEDIA, principal)
    outcome = await content_service.moderate_item(db, dispatcher, event, item, ModerationAction.APPROVE, principal.actor)
    return ModerationResponse(
        item_id=item.id,
        previous_status=outcome.previous.value,
        status=outcome.status.value,
        became_visible=outcome.became_visible,
    )


@router.post("/{media_id}/reject", response_model=ModerationResponse)
async def post_media_reject(
    media_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ModerationResponse:
    """Từ chối media: pending|approved -> rejected (không broadcast)."""
    item, event = await content_service.require_item_owner(db, media_id, ITEM_TYPE_MEDIA, principal)
    outcome = await content_service.moderate_item(db, dispatcher, event, item, ModerationAction.REJECT, principal.actor)
    return ModerationResponse(
        item_id=item.id,
        previous_status=outcome.previous.value,
        status=outcome.status.value,
        became_visible=outcome.became_visible,
    )


@router.post("/{media_id}/like", response_model=LikeResponse)
async def post_media_like(
    media_id: UUID,
    payload: LikeRequest,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> LikeResponse:
    """Like theo tên khách; like lặp lại là no-op (liked=false)."""
    item, event, is_owner = await content_service.load_item_context(db, media_id, ITEM_TYPE_MEDIA, principal)
    event_service.ensure_interaction_access(event, is_owner, event_password)
    like_count, created = await interaction_service.add_like(db, dispatcher, event, item, payload.guest_name)
    return LikeResponse(item_id=item.id, like_count=like_count, liked=created)


@router.post("/{media_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def post_media_comment(
    media_id: UUID,
    payload: CommentCreate,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> CommentOut:
    """Bình luận; khi event bật moderate_uploads thì bình luận của khách chờ duyệt."""
    item, event, is_owner = await content_service.load_item_context(db, media_id, ITEM_TYPE_MEDIA, principal)
    event_service.ensure_interaction_access(event, is_owner, event_password)
    comment = await interaction_service.add_comment(
        db, dispatcher, event, item, payload.guest_name, payload.message, principal
    )
    return CommentOut.model_validate(comment)


@router.post("/{media_id}/comments/{comment_id}/approve", response_model=CommentOut)
async def post_media_comment_approve(
    media_id: UUID,
    comment_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> CommentOut:
    item, event = await content_service.require_item_owner(db, media_id, ITEM_TYPE_MEDIA, principal)
    comment, _ = await interaction_service.approve_comment(db, dispatcher, event, item, comment_id, principal.actor)
    return CommentOut.model_validate(comment)


@router.get("/{media_id}/download", response_model=DownloadResponse)
async def get_media_download(
    media_id: UUID,
    principal: Principal = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
) -> DownloadResponse:
    """Trả về URL tải xuống và tăng bộ đếm downloads (403 khi event tắt allow_downloads)."""
    item, event, is_owner = await content_service.load_item_context(db, media_id, ITEM_TYPE_MEDIA, principal)
    item = await content_service.register_download(db, event, item, is_owner)
    return DownloadResponse(
        item_id=item.id,
        download_url=item.payload_ref or "",
        filename=item.original_name,
        downloads=item.downloads,
    )

"""API guestbook: entries (text / audio / mixed), listing, moderation, likes, replies, bulk."""
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories.auth import Principal, get_event_password, get_optional_principal, get_principal
from wedding_memories.db import get_db
from wedding_memories.errors import PolicyViolation, ValidationFailure
from wedding_memories.models.content_item import ITEM_TYPE_GUESTBOOK
from wedding_memories.schemas.common import MessageResponse
from wedding_memories.schemas.content import (
    BulkActionRequest,
    BulkActionResponse,
    CommentCreate,
    CommentOut,
    ContentItemDetailOut,
    ContentItemOut,
    GuestbookEntryCreate,
    ItemFlagsUpdate,
    ItemsPage,
    LikeOut,
    LikeRequest,
    LikeResponse,
    ManageItemsPage,
    ModerationResponse,
    item_out,
    page_fields,
)
from wedding_memories.services import content_service, event_service, interaction_service
from wedding_memories.services.broadcast_service import BroadcastDispatcher, get_dispatcher
from wedding_memories.services.moderation_service import ItemStatus, ModerationAction
from wedding_memories.services.storage_service import StorageBackend, get_storage

router = APIRouter(prefix="/api/guestbook", tags=["guestbook"])

EntryKind = Literal["text", "audio", "mixed"]
SortField = Literal["created_at", "pinned"]


async def _create_entry(
    db: AsyncSession,
    dispatcher: BroadcastDispatcher,
    event_id: UUID,
    payload: GuestbookEntryCreate,
    principal: Principal,
    event_password: Optional[str] = None,
) -> ContentItemOut:
    event = await event_service.get_event_for_submission(db, event_id, principal, event_password)
    author = content_service.author_for(principal, payload.guest_name, payload.guest_email)
    entry = await content_service.create_guestbook_entry(
        db, dispatcher, event, author, text_message=payload.message, audio=payload.audio
    )
    return item_out(entry)


@router.post("/event/{event_id}", response_model=ContentItemOut, status_code=status.HTTP_201_CREATED)
async def post_guestbook_entry(
    event_id: UUID,
    payload: GuestbookEntryCreate,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ContentItemOut:
    """Lời chúc dạng text (có thể kèm audio). status=pending khi event bật moderate_uploads."""
    return await _create_entry(db, dispatcher, event_id, payload, principal, event_password)


@router.post("/event/{event_id}/audio", response_model=ContentItemOut, status_code=status.HTTP_201_CREATED)
async def post_guestbook_audio_entry(
    event_id: UUID,
    payload: GuestbookEntryCreate,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ContentItemOut:
    """Lời chúc dạng audio (kind audio, hoặc mixed khi có message)."""
    if payload.audio is None:
        raise ValidationFailure("audio_required", "No audio file uploaded")
    return await _create_entry(db, dispatcher, event_id, payload, principal, event_password)


@router.get("/event/{event_id}", response_model=ItemsPage)
async def get_event_guestbook(
    event_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    kind: Optional[EntryKind] = Query(None),
    sort: SortField = Query("created_at", description="pinned: pinned entries first"),
    order: Literal["asc", "desc"] = Query("desc"),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
) -> ItemsPage:
    """Lời chúc cho khách: chỉ approved và không bị ẩn."""
    event = await event_service.get_public_event(db, event_id, event_password)
    if not event.enable_guestbook:
        raise PolicyViolation("guestbook_disabled", "Guestbook is disabled for this event")
    result = await content_service.list_public_items(
        db, event, ITEM_TYPE_GUESTBOOK, page=page, limit=limit, kind=kind, sort=sort, order=order
    )
    return ItemsPage(**page_fields(result, page, limit))


@router.get("/manage/{event_id}", response_model=ManageItemsPage)
async def get_manage_guestbook(
    event_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_: Optional[ItemStatus] = Query(None, alias="status"),
    kind: Optional[EntryKind] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort: SortField = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ManageItemsPage:
    event = await event_service.require_event_owner(db, event_id, principal)
    result = await content_service.list_manage_items(
        db,
        event,
        ITEM_TYPE_GUESTBOOK,
        page=page,
        limit=limit,
        status=status_,
        kind=kind,
        search=search,
        sort=sort,
        order=order,
    )
    return ManageItemsPage(**page_fields(result, page, limit), status_counts=result.status_counts)


@router.patch("/bulk-action/{event_id}", response_model=BulkActionResponse)
async def patch_guestbook_bulk_action(
    event_id: UUID,
    payload: BulkActionRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
    storage: StorageBackend = Depends(get_storage),
) -> BulkActionResponse:
    """approve | reject | delete | pin | unpin trên nhiều lời chúc của event."""
    event = await event_service.require_event_owner(db, event_id, principal)
    result = await content_service.bulk_action(
        db, dispatcher, storage, event, ITEM_TYPE_GUESTBOOK, payload.action, payload.item_ids, principal.actor
    )
    return BulkActionResponse(
        action=result.action,
        affected=len(result.affected),
        item_ids=result.affected,
        skipped=result.skipped,
        message=f"{len(result.affected)} guestbook entries updated ({payload.action})",
    )


@router.get("/entry/{entry_id}", response_model=ContentItemDetailOut)
async def get_guestbook_entry(
    entry_id: UUID,
    principal: Principal = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
) -> ContentItemDetailOut:
    item, event, is_owner = await content_service.load_item_context(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    item, likes, replies = await content_service.get_item_for_viewer(db, item, event, is_owner)
    out = item_out(item, len(likes), len(replies))
    return ContentItemDetailOut(
        **out.model_dump(),
        likes=[LikeOut.model_validate(like) for like in likes],
        comments=[CommentOut.model_validate(r) for r in replies],
    )


@router.patch("/entry/{entry_id}", response_model=ContentItemOut)
async def patch_guestbook_entry(
    entry_id: UUID,
    payload: ItemFlagsUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ContentItemOut:
    """Ẩn / ghim / nổi bật lời chúc."""
    item, event = await content_service.require_item_owner(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    item = await content_service.update_item_flags(db, event, item, payload.model_dump(exclude_none=True), principal.actor)
    return item_out(item)


@router.delete("/entry/{entry_id}", response_model=MessageResponse)
async def delete_guestbook_entry(
    entry_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
    storage: StorageBackend = Depends(get_storage),
) -> MessageResponse:
    item, event = await content_service.require_item_owner(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    await content_service.delete_item(db, dispatcher, storage, event, item, principal.actor)
    return MessageResponse(message="Guestbook entry deleted successfully")


@router.post("/entry/{entry_id}/approve", response_model=ModerationResponse)
async def post_guestbook_approve(
    entry_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ModerationResponse:
    item, event = await content_service.require_item_owner(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    outcome = await content_service.moderate_item(db, dispatcher, event, item, ModerationAction.APPROVE, principal.actor)
    return ModerationResponse(
        item_id=item.id,
        previous_status=outcome.previous.value,
        status=outcome.status.value,
        became_visible=outcome.became_visible,
    )


@router.post("/entry/{entry_id}/reject", response_model=ModerationResponse)
async def post_guestbook_reject(
    entry_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> ModerationResponse:
    item, event = await content_service.require_item_owner(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    outcome = await content_service.moderate_item(db, dispatcher, event, item, ModerationAction.REJECT, principal.actor)
    return ModerationResponse(
        item_id=item.id,
        previous_status=outcome.previous.value,
        status=outcome.status.value,
        became_visible=outcome.became_visible,
    )


@router.post("/entry/{entry_id}/like", response_model=LikeResponse)
async def post_guestbook_like(
    entry_id: UUID,
    payload: LikeRequest,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> LikeResponse:
    item, event, is_owner = await content_service.load_item_context(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    event_service.ensure_interaction_access(event, is_owner, event_password)
    like_count, created = await interaction_service.add_like(db, dispatcher, event, item, payload.guest_name)
    return LikeResponse(item_id=item.id, like_count=like_count, liked=created)


@router.post("/entry/{entry_id}/replies", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def post_guestbook_reply(
    entry_id: UUID,
    payload: CommentCreate,
    principal: Principal = Depends(get_optional_principal),
    event_password: Optional[str] = Depends(get_event_password),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> CommentOut:
    """Trả lời lời chúc; broadcast new-guestbook-reply khi reply được duyệt ngay."""
    item, event, is_owner = await content_service.load_item_context(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    event_service.ensure_interaction_access(event, is_owner, event_password)
    reply = await interaction_service.add_comment(
        db, dispatcher, event, item, payload.guest_name, payload.message, principal
    )
    return CommentOut.model_validate(reply)


@router.post("/entry/{entry_id}/replies/{reply_id}/approve", response_model=CommentOut)
async def post_guestbook_reply_approve(
    entry_id: UUID,
    reply_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    dispatcher: BroadcastDispatcher = Depends(get_dispatcher),
) -> CommentOut:
    item, event = await content_service.require_item_owner(db, entry_id, ITEM_TYPE_GUESTBOOK, principal)
    reply, _ = await interaction_service.approve_comment(db, dispatcher, event, item, reply_id, principal.actor)
    return CommentOut.model_validate(reply)

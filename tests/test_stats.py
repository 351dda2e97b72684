"""Statistics: totals count approved items only; likes/comments counted on approved items."""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from wedding_memories.db import async_session_factory
from wedding_memories.main import app
from wedding_memories.models import Event, ItemComment, ItemLike


@pytest.mark.asyncio
async def test_stats_count_approved_only(create_event, create_item, host_headers) -> None:
    event = await create_event()
    photo1 = await create_item(event, kind="photo")
    await create_item(event, kind="photo")
    await create_item(event, kind="video", mime_type="video/mp4")
    pending_photo = await create_item(event, kind="photo", status="pending")
    await create_item(event, item_type="guestbook", kind="text", text_message="Hi", payload_ref=None)
    await create_item(event, item_type="guestbook", kind="text", text_message="No", payload_ref=None, status="rejected")
    await create_item(event, item_type="guestbook", kind="text", text_message="Later", payload_ref=None, status="pending")

    async with async_session_factory() as session:
        session.add_all(
            [
                ItemLike(item_id=photo1.id, guest_name="Eva"),
                ItemLike(item_id=photo1.id, guest_name="Finn"),
                ItemLike(item_id=pending_photo.id, guest_name="Eva"),
                ItemComment(item_id=photo1.id, guest_name="Eva", message="Nice"),
                ItemComment(item_id=pending_photo.id, guest_name="Eva", message="Hidden"),
            ]
        )
        await session.commit()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(f"/api/events/{event.id}/stats", headers=host_headers)
    assert resp.status_code == 200, resp.text
    stats = resp.json()
    assert stats["total_photos"] == 2
    assert stats["total_videos"] == 1
    assert stats["total_guestbook_entries"] == 1
    assert stats["total_likes"] == 2
    assert stats["total_comments"] == 1
    assert stats["pending_media"] == 1
    assert stats["pending_guestbook_entries"] == 1

    async with async_session_factory() as session:
        row = await session.get(Event, event.id)
        assert row.total_photos == 2
        assert row.stats_refreshed_at is not None


@pytest.mark.asyncio
async def test_stats_empty_event(create_event, host_headers) -> None:
    event = await create_event()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(f"/api/events/{event.id}/stats", headers=host_headers)
    stats = resp.json()
    assert (stats["total_photos"], stats["total_likes"], stats["total_comments"]) == (0, 0, 0)


@pytest.mark.asyncio
async def test_stats_require_owner(create_event) -> None:
    event = await create_event()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await client.get(f"/api/events/{event.id}/stats")
        assert guest.status_code == 401
        stranger = await client.get(
            f"/api/events/{event.id}/stats",
            headers={"X-User-ID": str(uuid.uuid4()), "X-User-Role": "host"},
        )
        assert stranger.status_code == 403

"""
Bulk actions apply only to items of the addressed event; foreign ids are skipped and reported.
"""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from wedding_memories.db import async_session_factory
from wedding_memories.main import app
from wedding_memories.models import ContentItem


@pytest.mark.asyncio
async def test_bulk_approve_skips_foreign_items(create_event, create_item, room, host_headers) -> None:
    event_a = await create_event(moderate_uploads=True)
    event_b = await create_event(moderate_uploads=True)
    a1 = await create_item(event_a, status="pending")
    a2 = await create_item(event_a, status="pending")
    already = await create_item(event_a, status="approved")
    c = await create_item(event_b, status="pending")
    room_a = room(event_a.id)
    room_b = room(event_b.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.patch(
            f"/api/media/bulk-action/{event_a.id}",
            json={"action": "approve", "item_ids": [str(a1.id), str(a2.id), str(already.id), str(c.id)]},
            headers=host_headers,
        )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["affected"] == 2
    assert set(data["item_ids"]) == {str(a1.id), str(a2.id)}
    assert data["skipped"] == [str(c.id)]

    approved = room_a.of("media-approved")
    assert {f["data"]["media"]["id"] for f in approved} == {str(a1.id), str(a2.id)}
    assert room_b.frames == []

    async with async_session_factory() as session:
        row = await session.get(ContentItem, c.id)
        assert row.status == "pending"


@pytest.mark.asyncio
async def test_bulk_delete(create_event, create_item, room, host_headers) -> None:
    event = await create_event()
    other = await create_event()
    items = [await create_item(event) for _ in range(3)]
    foreign = await create_item(other)
    watcher = room(event.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.patch(
            f"/api/media/bulk-action/{event.id}",
            json={"action": "delete", "item_ids": [str(items[0].id), str(items[1].id), str(foreign.id)]},
            headers=host_headers,
        )
    assert resp.status_code == 200, resp.text
    assert resp.json()["affected"] == 2

    deleted = watcher.of("media-deleted")
    assert {f["data"]["itemId"] for f in deleted} == {str(items[0].id), str(items[1].id)}

    async with async_session_factory() as session:
        r = await session.execute(select(ContentItem.id).where(ContentItem.event_id == event.id))
        assert list(r.scalars().all()) == [items[2].id]
        assert await session.get(ContentItem, foreign.id) is not None


@pytest.mark.asyncio
async def test_bulk_feature_and_invalid_action(create_event, create_item, host_headers) -> None:
    event = await create_event()
    item = await create_item(event)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        feature = await client.patch(
            f"/api/media/bulk-action/{event.id}",
            json={"action": "feature", "item_ids": [str(item.id)]},
            headers=host_headers,
        )
        assert feature.json()["affected"] == 1

        pin_media = await client.patch(
            f"/api/media/bulk-action/{event.id}",
            json={"action": "pin", "item_ids": [str(item.id)]},
            headers=host_headers,
        )
        assert pin_media.status_code == 400
        assert pin_media.json()["code"] == "invalid_action"

        unknown = await client.patch(
            f"/api/media/bulk-action/{event.id}",
            json={"action": "approve", "item_ids": [str(uuid.uuid4())]},
            headers=host_headers,
        )
        assert unknown.json()["affected"] == 0
        assert len(unknown.json()["skipped"]) == 1

    async with async_session_factory() as session:
        row = await session.get(ContentItem, item.id)
        assert row.is_featured is True


@pytest.mark.asyncio
async def test_bulk_pin_guestbook(create_event, create_item, host_headers) -> None:
    event = await create_event()
    entry = await create_item(event, item_type="guestbook", kind="text", text_message="Hi", payload_ref=None)
    media = await create_item(event)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.patch(
            f"/api/guestbook/bulk-action/{event.id}",
            json={"action": "pin", "item_ids": [str(entry.id), str(media.id)]},
            headers=host_headers,
        )
    assert resp.status_code == 200
    assert resp.json()["affected"] == 1
    assert resp.json()["skipped"] == [str(media.id)]


@pytest.mark.asyncio
async def test_bulk_reject_leaves_other_event_untouched(create_event, create_item, room, host_headers) -> None:
    event = await create_event(moderate_uploads=True)
    other = await create_event(moderate_uploads=True)
    a = await create_item(event, status="pending")
    b = await create_item(event, status="approved")
    c = await create_item(other, status="approved")
    watcher = room(event.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.patch(
            f"/api/media/bulk-action/{event.id}",
            json={"action": "reject", "item_ids": [str(a.id), str(b.id), str(c.id)]},
            headers=host_headers,
        )
    assert resp.status_code == 200, resp.text
    assert resp.json()["affected"] == 2
    assert resp.json()["skipped"] == [str(c.id)]
    assert watcher.frames == []

    async with async_session_factory() as session:
        statuses = {
            row.id: row.status
            for row in (await session.execute(select(ContentItem).where(ContentItem.id.in_([a.id, b.id, c.id])))).scalars()
        }
    assert statuses == {a.id: "rejected", b.id: "rejected", c.id: "approved"}

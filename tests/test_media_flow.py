"""
Media: upload through the moderation gate, approval broadcasts, guest visibility.
- Moderated event: guest photo -> pending, nothing broadcast; host approve -> one media-approved
  in that event's room only; approving again changes nothing and broadcasts nothing.
- Unmoderated event: guest photo -> approved + new-media.
"""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from wedding_memories.db import async_session_factory
from wedding_memories.main import app
from wedding_memories.models import ContentItem


def _upload(guest_name="Clara", mime_type="image/jpeg", **extra):
    body = {
        "files": [
            {
                "payload_ref": "https://cdn.test/a.jpg",
                "storage_id": "wedding/a",
                "original_name": "a.jpg",
                "mime_type": mime_type,
                "file_size": 1024,
            }
        ],
        **extra,
    }
    if guest_name is not None:
        body["guest_name"] = guest_name
    return body


@pytest.mark.asyncio
async def test_moderated_guest_upload_then_host_approve(create_event, room, host_headers) -> None:
    event = await create_event(moderate_uploads=True)
    other = await create_event()
    watcher = room(event.id)
    bystander = room(other.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(f"/api/media/event/{event.id}", json=_upload())
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["pending"] == 1
        item = data["items"][0]
        assert item["status"] == "pending"
        assert item["kind"] == "photo"
        assert item["author"] == {"role": "guest", "name": "Clara", "email": None}
        assert watcher.frames == []

        listing = await client.get(f"/api/media/event/{event.id}")
        assert listing.status_code == 200
        assert listing.json()["pagination"]["total"] == 0

        hidden = await client.get(f"/api/media/{item['id']}")
        assert hidden.status_code == 404

        approve = await client.post(f"/api/media/{item['id']}/approve", headers=host_headers)
        assert approve.status_code == 200, approve.text
        assert approve.json()["became_visible"] is True
        assert approve.json()["previous_status"] == "pending"

        frames = watcher.of("media-approved")
        assert len(frames) == 1
        assert frames[0]["data"]["eventId"] == str(event.id)
        assert frames[0]["data"]["media"]["id"] == item["id"]
        assert frames[0]["data"]["media"]["status"] == "approved"
        assert "likeCount" in frames[0]["data"]["media"]
        assert bystander.frames == []

        again = await client.post(f"/api/media/{item['id']}/approve", headers=host_headers)
        assert again.status_code == 200
        assert again.json()["became_visible"] is False
        assert len(watcher.frames) == 1

        listing = await client.get(f"/api/media/event/{event.id}")
        assert listing.json()["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_unmoderated_guest_upload_broadcasts_new_media(create_event, room) -> None:
    event = await create_event()
    watcher = room(event.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(
            f"/api/media/event/{event.id}",
            json=_upload(caption="First dance", album="Ceremony", tags=[" dance ", ""]),
        )
    assert resp.status_code == 201, resp.text
    item = resp.json()["items"][0]
    assert item["status"] == "approved"
    assert item["album"] == "Ceremony"
    assert item["tags"] == ["dance"]

    frames = watcher.of("new-media")
    assert len(frames) == 1
    assert frames[0]["data"]["media"]["id"] == item["id"]
    assert frames[0]["data"]["media"]["caption"] == "First dance"
    assert frames[0]["data"]["media"]["author"]["name"] == "Clara"


@pytest.mark.asyncio
async def test_host_upload_skips_moderation(create_event, room, host_headers) -> None:
    event = await create_event(moderate_uploads=True)
    watcher = room(event.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(
            f"/api/media/event/{event.id}",
            json=_upload(guest_name=None, mime_type="video/mp4"),
            headers=host_headers,
        )
    assert resp.status_code == 201, resp.text
    item = resp.json()["items"][0]
    assert item["status"] == "approved"
    assert item["kind"] == "video"
    assert item["author"]["role"] == "host"
    assert len(watcher.of("new-media")) == 1


@pytest.mark.asyncio
async def test_reject_does_not_broadcast(create_event, create_item, room, host_headers) -> None:
    event = await create_event()
    item = await create_item(event, status="approved")
    watcher = room(event.id)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(f"/api/media/{item.id}/reject", headers=host_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"
        guest_view = await client.get(f"/api/media/{item.id}")
        assert guest_view.status_code == 404
    assert watcher.frames == []


@pytest.mark.asyncio
async def test_upload_validation(create_event) -> None:
    event = await create_event()
    unpublished = await create_event(is_published=False)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        no_name = await client.post(f"/api/media/event/{event.id}", json=_upload(guest_name=None))
        assert no_name.status_code == 400
        assert no_name.json()["code"] == "guest_name_required"

        bad_type = await client.post(f"/api/media/event/{event.id}", json=_upload(mime_type="application/pdf"))
        assert bad_type.status_code == 400
        assert bad_type.json()["code"] == "unsupported_file_type"

        hidden_event = await client.post(f"/api/media/event/{unpublished.id}", json=_upload())
        assert hidden_event.status_code == 404

        unknown = await client.post(f"/api/media/event/{uuid.uuid4()}", json=_upload())
        assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_non_owner_cannot_moderate(create_event, create_item) -> None:
    event = await create_event(moderate_uploads=True)
    item = await create_item(event, status="pending")
    stranger = {"X-User-ID": str(uuid.uuid4()), "X-User-Role": "host"}

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await client.post(f"/api/media/{item.id}/approve")
        assert guest.status_code == 401
        other_host = await client.post(f"/api/media/{item.id}/approve", headers=stranger)
        assert other_host.status_code == 403

    async with async_session_factory() as session:
        row = await session.get(ContentItem, item.id)
        assert row.status == "pending"


@pytest.mark.asyncio
async def test_featured_filter_and_views(create_event, create_item, host_headers) -> None:
    event = await create_event()
    featured = await create_item(event, is_featured=True)
    await create_item(event)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        only_featured = await client.get(f"/api/media/event/{event.id}", params={"featured": "true"})
        assert [i["id"] for i in only_featured.json()["items"]] == [str(featured.id)]

        not_filtered = await client.get(f"/api/media/event/{event.id}", params={"featured": "false"})
        assert not_filtered.json()["pagination"]["total"] == 2

        first = await client.get(f"/api/media/{featured.id}")
        second = await client.get(f"/api/media/{featured.id}")
        assert first.json()["views"] == 1
        assert second.json()["views"] == 2


@pytest.mark.asyncio
async def test_hidden_item_visible_to_owner_only(create_event, create_item, host_headers) -> None:
    event = await create_event()
    item = await create_item(event)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.patch(f"/api/media/{item.id}", json={"is_hidden": True}, headers=host_headers)
        assert resp.status_code == 200
        assert resp.json()["is_hidden"] is True

        assert (await client.get(f"/api/media/{item.id}")).status_code == 404
        assert (await client.get(f"/api/media/{item.id}", headers=host_headers)).status_code == 200

        manage = await client.get(f"/api/media/manage/{event.id}", headers=host_headers)
        assert manage.status_code == 200
        assert manage.json()["pagination"]["total"] == 1
        assert manage.json()["status_counts"] == {"approved": 1}


@pytest.mark.asyncio
async def test_download_counter_and_policy(create_event, create_item, host_headers) -> None:
    open_event = await create_event()
    closed_event = await create_event(allow_downloads=False)
    open_item = await create_item(open_event)
    closed_item = await create_item(closed_event)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(f"/api/media/{open_item.id}/download")
        assert resp.status_code == 200
        assert resp.json()["downloads"] == 1
        assert resp.json()["download_url"] == open_item.payload_ref

        denied = await client.get(f"/api/media/{closed_item.id}/download")
        assert denied.status_code == 403
        assert denied.json()["code"] == "downloads_disabled"

        owner = await client.get(f"/api/media/{closed_item.id}/download", headers=host_headers)
        assert owner.status_code == 200

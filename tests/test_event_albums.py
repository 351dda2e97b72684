"""
Albums: seeded on event creation, unique names per event, rename carries media along,
deleting an album moves its media to the default album, the default album is locked.
"""
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from wedding_memories.db import async_session_factory
from wedding_memories.main import app
from wedding_memories.models import ContentItem, Event

EVENT_BODY = {
    "title": "Anna & Ben",
    "partner1": "Anna",
    "partner2": "Ben",
    "event_date": "2026-06-20T15:00:00Z",
}


async def _create_event(client: AsyncClient, headers) -> dict:
    resp = await client.post("/api/events", json=EVENT_BODY, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_new_event_gets_default_albums(host_headers) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        event = await _create_event(client, host_headers)
        albums = await client.get(f"/api/events/{event['id']}/albums", headers=host_headers)
    assert albums.status_code == 200
    names = [a["name"] for a in albums.json()["items"]]
    assert names == ["All Photos", "Ceremony", "Reception", "Portraits", "Candid"]
    assert [a["is_default"] for a in albums.json()["items"]] == [True, False, False, False, False]
    assert [a["name"] for a in event["albums"]] == names


@pytest.mark.asyncio
async def test_create_album_rejects_duplicate_names(host_headers) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        event = await _create_event(client, host_headers)
        created = await client.post(
            f"/api/events/{event['id']}/albums",
            json={"name": " First Dance ", "description": "Slow song"},
            headers=host_headers,
        )
        assert created.status_code == 201, created.text
        assert created.json()["name"] == "First Dance"
        assert created.json()["position"] == 5

        duplicate = await client.post(
            f"/api/events/{event['id']}/albums", json={"name": "ceremony"}, headers=host_headers
        )
        assert duplicate.status_code == 400
        assert duplicate.json()["code"] == "album_exists"

        guest = await client.post(f"/api/events/{event['id']}/albums", json={"name": "Party"})
        assert guest.status_code == 401


@pytest.mark.asyncio
async def test_rename_and_delete_album_move_media(create_item, host_headers) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        event = await _create_event(client, host_headers)
        albums = {a["name"]: a for a in event["albums"]}

        async with async_session_factory() as session:
            row = await session.get(Event, uuid.UUID(event["id"]))
        item = await create_item(row, album="Ceremony")

        renamed = await client.patch(
            f"/api/events/{event['id']}/albums/{albums['Ceremony']['id']}",
            json={"name": "Vows"},
            headers=host_headers,
        )
        assert renamed.status_code == 200, renamed.text
        assert renamed.json()["name"] == "Vows"
        async with async_session_factory() as session:
            assert (await session.get(ContentItem, item.id)).album == "Vows"

        deleted = await client.delete(
            f"/api/events/{event['id']}/albums/{albums['Ceremony']['id']}", headers=host_headers
        )
        assert deleted.status_code == 200
        assert deleted.json()["moved_items"] == 1
        async with async_session_factory() as session:
            assert (await session.get(ContentItem, item.id)).album == "All Photos"

        missing = await client.delete(
            f"/api/events/{event['id']}/albums/{albums['Ceremony']['id']}", headers=host_headers
        )
        assert missing.status_code == 404


@pytest.mark.asyncio
async def test_default_album_is_locked(host_headers) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        event = await _create_event(client, host_headers)
        default = next(a for a in event["albums"] if a["is_default"])

        delete = await client.delete(f"/api/events/{event['id']}/albums/{default['id']}", headers=host_headers)
        assert delete.status_code == 400
        assert delete.json()["code"] == "default_album_locked"

        rename = await client.patch(
            f"/api/events/{event['id']}/albums/{default['id']}", json={"name": "Everything"}, headers=host_headers
        )
        assert rename.status_code == 400

        describe = await client.patch(
            f"/api/events/{event['id']}/albums/{default['id']}",
            json={"description": "Every upload"},
            headers=host_headers,
        )
        assert describe.status_code == 200
        assert describe.json()["description"] == "Every upload"

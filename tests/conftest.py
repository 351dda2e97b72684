"""
Shared test setup: SQLite (aiosqlite) database file, schema, event/item factories
and a recording connection joined to an event room on the process-wide dispatcher.
Env vars are set before wedding_memories is imported (settings are cached).
"""
import asyncio
import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

_DB_DIR = tempfile.mkdtemp(prefix="wedding_memories_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ.pop("REDIS_URL", None)
os.environ.pop("STORAGE_DELETE_URL", None)

import pytest  # noqa: E402

from wedding_memories.db import Base, async_session_factory, engine  # noqa: E402
from wedding_memories.models import ContentItem, Event  # noqa: E402
from wedding_memories.models.content_item import ITEM_TYPE_MEDIA  # noqa: E402
from wedding_memories.services.broadcast_service import dispatcher  # noqa: E402


async def _create_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(scope="session", autouse=True)
def _schema() -> None:
    asyncio.run(_create_schema())


class RecordingConnection:
    """Connection stand-in: keeps every frame handed to it, in order."""

    def __init__(self) -> None:
        self.id = uuid.uuid4().hex
        self.frames: List[Dict[str, Any]] = []

    def deliver(self, frame: Dict[str, Any]) -> None:
        self.frames.append(frame)

    def of(self, event_type: str) -> List[Dict[str, Any]]:
        return [f for f in self.frames if f["event"] == event_type]


@pytest.fixture
def host_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def host_headers(host_id: uuid.UUID) -> Dict[str, str]:
    return {"X-User-ID": str(host_id), "X-User-Role": "host"}


@pytest.fixture
def create_event(host_id: uuid.UUID):
    """Factory: insert a published, active event owned by host_id (override any column)."""

    async def _create(**overrides: Any) -> Event:
        fields: Dict[str, Any] = {
            "host_user_id": host_id,
            "title": "Anna & Ben",
            "partner1": "Anna",
            "partner2": "Ben",
            "event_date": datetime(2026, 6, 20, 15, 0, tzinfo=timezone.utc),
            "is_published": True,
        }
        fields.update(overrides)
        async with async_session_factory() as session:
            event = Event(**fields)
            session.add(event)
            await session.commit()
            return event

    return _create


@pytest.fixture
def create_item():
    """Factory: insert a content item directly (defaults: approved guest photo)."""

    async def _create(event: Event, **overrides: Any) -> ContentItem:
        fields: Dict[str, Any] = {
            "event_id": event.id,
            "item_type": ITEM_TYPE_MEDIA,
            "kind": "photo",
            "guest_name": "Clara",
            "payload_ref": f"https://cdn.test/{uuid.uuid4().hex}.jpg",
            "storage_id": uuid.uuid4().hex,
            "mime_type": "image/jpeg",
            "status": "approved",
        }
        fields.update(overrides)
        async with async_session_factory() as session:
            item = ContentItem(**fields)
            session.add(item)
            await session.commit()
            return item

    return _create


@pytest.fixture
def room():
    """Factory: a RecordingConnection registered on the dispatcher and joined to event_id."""
    connections: List[RecordingConnection] = []

    def _join(event_id: Any) -> RecordingConnection:
        conn = RecordingConnection()
        dispatcher.register(conn)
        dispatcher.registry.join(conn.id, str(event_id))
        connections.append(conn)
        return conn

    yield _join
    for conn in connections:
        dispatcher.unregister(conn.id)

"""
Broadcast dispatcher: room isolation, no replay for late joiners, per-room FIFO,
failure isolation between connections, bounded per-connection queues.
"""
import asyncio
import uuid

import pytest

from wedding_memories.services.broadcast_service import (
    BroadcastDispatcher,
    BroadcastEvent,
    WebSocketConnection,
)
from wedding_memories.services.room_registry import EventRoomRegistry

from conftest import RecordingConnection


class BrokenConnection:
    def __init__(self) -> None:
        self.id = uuid.uuid4().hex

    def deliver(self, frame) -> None:
        raise RuntimeError("socket closed")


class FakeWebSocket:
    def __init__(self) -> None:
        self.sent = []

    async def send_json(self, data) -> None:
        self.sent.append(data)


def _dispatcher_with(*members):
    """Dispatcher with (connection, event_id) pairs already registered and joined."""
    d = BroadcastDispatcher(EventRoomRegistry())
    for conn, event_id in members:
        d.register(conn)
        d.registry.join(conn.id, event_id)
    return d


def test_publish_reaches_only_the_event_room() -> None:
    a, b = RecordingConnection(), RecordingConnection()
    d = _dispatcher_with((a, "e1"), (b, "e2"))
    delivered = d.publish("e1", BroadcastEvent.NEW_MEDIA, {"eventId": "e1"})
    assert delivered == 1
    assert a.frames == [{"event": "new-media", "data": {"eventId": "e1"}}]
    assert b.frames == []


def test_no_replay_for_late_joiner() -> None:
    early = RecordingConnection()
    d = _dispatcher_with((early, "e1"))
    d.publish("e1", BroadcastEvent.NEW_MEDIA, {"n": 1})
    late = RecordingConnection()
    d.register(late)
    d.registry.join(late.id, "e1")
    d.publish("e1", BroadcastEvent.NEW_MEDIA, {"n": 2})
    assert [f["data"]["n"] for f in early.frames] == [1, 2]
    assert [f["data"]["n"] for f in late.frames] == [2]


def test_frames_arrive_in_publish_order() -> None:
    conn = RecordingConnection()
    d = _dispatcher_with((conn, "e1"))
    d.publish("e1", BroadcastEvent.MEDIA_LIKED, {"likeCount": 1})
    d.publish("e1", BroadcastEvent.MEDIA_LIKED, {"likeCount": 2})
    d.publish("e1", BroadcastEvent.MEDIA_DELETED, {"itemId": "x"})
    assert [f["event"] for f in conn.frames] == ["media-liked", "media-liked", "media-deleted"]
    assert [f["data"].get("likeCount") for f in conn.frames[:2]] == [1, 2]


def test_failing_connection_does_not_block_others() -> None:
    broken, ok = BrokenConnection(), RecordingConnection()
    d = _dispatcher_with((broken, "e1"), (ok, "e1"))
    delivered = d.publish("e1", BroadcastEvent.NEW_GUESTBOOK_ENTRY, {"entry": {}})
    assert delivered == 1
    assert len(ok.frames) == 1


def test_publish_to_empty_room() -> None:
    d = BroadcastDispatcher(EventRoomRegistry())
    assert d.publish("nobody-here", BroadcastEvent.NEW_MEDIA, {}) == 0


def test_unregister_leaves_every_room() -> None:
    conn = RecordingConnection()
    d = _dispatcher_with((conn, "e1"))
    d.registry.join(conn.id, "e2")
    d.unregister(conn.id)
    assert d.connection_count() == 0
    assert d.registry.rooms_of(conn.id) == frozenset()
    assert d.publish("e1", BroadcastEvent.NEW_MEDIA, {}) == 0


def test_payload_is_json_encoded() -> None:
    conn = RecordingConnection()
    d = _dispatcher_with((conn, "e1"))
    item_id = uuid.uuid4()
    d.publish("e1", "media-deleted", {"itemId": item_id})
    assert conn.frames[0]["data"]["itemId"] == str(item_id)


@pytest.mark.asyncio
async def test_websocket_connection_sends_in_order() -> None:
    ws = FakeWebSocket()
    conn = WebSocketConnection(ws, max_queue_size=8)
    sender = asyncio.create_task(conn.run_sender())
    for n in range(3):
        conn.deliver({"event": "new-media", "data": {"n": n}})
    for _ in range(10):
        await asyncio.sleep(0)
    sender.cancel()
    assert [f["data"]["n"] for f in ws.sent] == [0, 1, 2]


@pytest.mark.asyncio
async def test_websocket_connection_drops_when_queue_full() -> None:
    ws = FakeWebSocket()
    conn = WebSocketConnection(ws, max_queue_size=1)
    conn.deliver({"event": "new-media", "data": {"n": 1}})
    conn.deliver({"event": "new-media", "data": {"n": 2}})
    for _ in range(3):
        await asyncio.sleep(0)
    assert conn.dropped == 1
    sender = asyncio.create_task(conn.run_sender())
    for _ in range(5):
        await asyncio.sleep(0)
    sender.cancel()
    assert ws.sent == [{"event": "new-media", "data": {"n": 1}}]

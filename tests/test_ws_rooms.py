"""
Realtime channel over a real websocket (Starlette TestClient): join / leave acks,
frames only for joined rooms, error frames for malformed input.
"""
import uuid

from fastapi.testclient import TestClient

from wedding_memories.main import app
from wedding_memories.services.broadcast_service import BroadcastEvent, dispatcher


def test_join_receive_leave() -> None:
    event_id = str(uuid.uuid4())
    other_id = str(uuid.uuid4())
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join-event", "eventId": event_id})
            assert ws.receive_json() == {"event": "joined", "data": {"eventId": event_id}}

            assert dispatcher.publish(other_id, BroadcastEvent.NEW_MEDIA, {"eventId": other_id}) == 0
            assert dispatcher.publish(event_id, BroadcastEvent.MEDIA_LIKED, {"likeCount": 3}) == 1
            assert ws.receive_json() == {"event": "media-liked", "data": {"likeCount": 3}}

            ws.send_json({"type": "leave-event", "eventId": event_id})
            assert ws.receive_json() == {"event": "left", "data": {"eventId": event_id}}
            assert dispatcher.publish(event_id, BroadcastEvent.MEDIA_LIKED, {"likeCount": 4}) == 0


def test_event_id_is_normalised() -> None:
    event_id = uuid.uuid4()
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join-event", "eventId": str(event_id).upper()})
            assert ws.receive_json()["data"]["eventId"] == str(event_id)
            assert dispatcher.publish(event_id, BroadcastEvent.NEW_MEDIA, {}) == 1
            assert ws.receive_json()["event"] == "new-media"


def test_malformed_frames_get_error_replies() -> None:
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid JSON"}}
            ws.send_json({"type": "dance"})
            assert ws.receive_json()["event"] == "error"
            ws.send_json({"type": "join-event", "eventId": "abc"})
            assert ws.receive_json() == {"event": "error", "data": {"message": "eventId must be a UUID"}}


def test_disconnect_leaves_every_room() -> None:
    first = str(uuid.uuid4())
    second = str(uuid.uuid4())
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join-event", "eventId": first})
            ws.receive_json()
            ws.send_json({"type": "join-event", "eventId": second})
            ws.receive_json()
            assert len(dispatcher.registry.members_of(first)) == 1
            assert len(dispatcher.registry.members_of(second)) == 1

        assert dispatcher.registry.members_of(first) == frozenset()
        assert dispatcher.registry.members_of(second) == frozenset()
        assert dispatcher.publish(first, BroadcastEvent.NEW_MEDIA, {}) == 0

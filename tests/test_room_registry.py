"""Event room registry: join/leave idempotence, leave_all cleanup, membership snapshots."""
from wedding_memories.services.room_registry import EventRoomRegistry


def test_join_is_idempotent() -> None:
    registry = EventRoomRegistry()
    assert registry.join("c1", "e1") is True
    assert registry.join("c1", "e1") is False
    assert registry.members_of("e1") == frozenset({"c1"})


def test_leave_room_not_joined_is_noop() -> None:
    registry = EventRoomRegistry()
    registry.join("c1", "e1")
    assert registry.leave("c1", "e2") is False
    assert registry.leave("c2", "e1") is False
    assert registry.members_of("e1") == frozenset({"c1"})


def test_leave_removes_empty_room() -> None:
    registry = EventRoomRegistry()
    registry.join("c1", "e1")
    assert registry.leave("c1", "e1") is True
    assert registry.members_of("e1") == frozenset()
    assert registry.room_count() == 0
    assert registry.rooms_of("c1") == frozenset()


def test_connection_in_several_rooms() -> None:
    registry = EventRoomRegistry()
    registry.join("c1", "e1")
    registry.join("c1", "e2")
    registry.join("c2", "e2")
    assert registry.rooms_of("c1") == frozenset({"e1", "e2"})
    assert registry.members_of("e2") == frozenset({"c1", "c2"})


def test_leave_all_on_disconnect() -> None:
    registry = EventRoomRegistry()
    registry.join("c1", "e1")
    registry.join("c1", "e2")
    registry.join("c2", "e2")
    assert registry.leave_all("c1") == 2
    assert registry.members_of("e1") == frozenset()
    assert registry.members_of("e2") == frozenset({"c2"})
    assert registry.room_count() == 1
    assert registry.leave_all("c1") == 0


def test_members_of_is_a_snapshot() -> None:
    registry = EventRoomRegistry()
    registry.join("c1", "e1")
    snapshot = registry.members_of("e1")
    registry.join("c2", "e1")
    registry.leave("c1", "e1")
    assert snapshot == frozenset({"c1"})


def test_event_ids_compared_as_strings() -> None:
    import uuid

    event_id = uuid.uuid4()
    registry = EventRoomRegistry()
    registry.join("c1", event_id)
    assert registry.members_of(str(event_id)) == frozenset({"c1"})

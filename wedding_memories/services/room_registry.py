"""
Event room registry: event_id -> connection ids currently subscribed to that event.
In-memory process state only (lost on restart; clients rejoin on reconnect).
leave_all must run on every connection termination so rooms do not grow unbounded.
"""
import threading
from typing import Dict, FrozenSet, Set

from wedding_memories.logging_config import get_logger

logger = get_logger(__name__)


class EventRoomRegistry:
    """Room membership map, safe to call from the event loop and from other threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: Dict[str, Set[str]] = {}
        # Reverse index so leave_all does not scan every room.
        self._memberships: Dict[str, Set[str]] = {}

    def join(self, connection_id: str, event_id: str) -> bool:
        """Add connection to the event room. Idempotent; returns False when already a member."""
        event_id = str(event_id)
        with self._lock:
            members = self._rooms.setdefault(event_id, set())
            if connection_id in members:
                return False
            members.add(connection_id)
            self._memberships.setdefault(connection_id, set()).add(event_id)
        logger.debug("room.joined", connection_id=connection_id, event_id=event_id)
        return True

    def leave(self, connection_id: str, event_id: str) -> bool:
        """Remove connection from one room. Leaving a room you are not in is a no-op."""
        event_id = str(event_id)
        with self._lock:
            removed = self._discard(connection_id, event_id)
            rooms = self._memberships.get(connection_id)
            if rooms is not None:
                rooms.discard(event_id)
                if not rooms:
                    del self._memberships[connection_id]
        if removed:
            logger.debug("room.left", connection_id=connection_id, event_id=event_id)
        return removed

    def leave_all(self, connection_id: str) -> int:
        """Drop the connection from every room it joined. Returns the number of rooms left."""
        with self._lock:
            rooms = self._memberships.pop(connection_id, set())
            for event_id in rooms:
                self._discard(connection_id, event_id)
        if rooms:
            logger.debug("room.left_all", connection_id=connection_id, rooms=len(rooms))
        return len(rooms)

    def members_of(self, event_id: str) -> FrozenSet[str]:
        """Snapshot of the room at call time."""
        with self._lock:
            return frozenset(self._rooms.get(str(event_id), ()))

    def rooms_of(self, connection_id: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._memberships.get(connection_id, ()))

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def _discard(self, connection_id: str, event_id: str) -> bool:
        # Caller holds the lock. Empty rooms are removed.
        members = self._rooms.get(event_id)
        if not members or connection_id not in members:
            return False
        members.discard(connection_id)
        if not members:
            del self._rooms[event_id]
        return True

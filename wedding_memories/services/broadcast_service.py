"""
Broadcast dispatcher: publish(event_id, type, payload) -> every connection in the event room.
- Snapshot of room membership at call time; no backlog/replay for late joiners.
- Synchronous and non-blocking: frames go into each connection's bounded FIFO queue,
  drained by that connection's sender task. Per-room order = publish call order.
- Best-effort, at-most-once: full queue or dead socket drops the frame for that connection
  only (logged, never raised to the caller, never rolls back the DB change).
"""
import asyncio
import threading
import uuid
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocket

from wedding_memories.logging_config import get_logger
from wedding_memories.services.room_registry import EventRoomRegistry

logger = get_logger(__name__)


class BroadcastEvent(str, Enum):
    NEW_MEDIA = "new-media"
    NEW_GUESTBOOK_ENTRY = "new-guestbook-entry"
    MEDIA_LIKED = "media-liked"
    GUESTBOOK_LIKED = "guestbook-liked"
    NEW_COMMENT = "new-comment"
    NEW_GUESTBOOK_REPLY = "new-guestbook-reply"
    MEDIA_APPROVED = "media-approved"
    GUESTBOOK_APPROVED = "guestbook-approved"
    MEDIA_DELETED = "media-deleted"
    GUESTBOOK_DELETED = "guestbook-deleted"


class Connection(Protocol):
    """Anything the dispatcher can hand a frame to without awaiting."""

    id: str

    def deliver(self, frame: Dict[str, Any]) -> None: ...


class WebSocketConnection:
    """
    One live websocket. deliver() only enqueues (thread-safe, non-blocking);
    run_sender() is the single writer to the socket.
    """

    def __init__(self, websocket: WebSocket, max_queue_size: int = 256, connection_id: Optional[str] = None):
        self.id = connection_id or uuid.uuid4().hex
        self._websocket = websocket
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue(maxsize=max_queue_size)
        self.dropped = 0

    def deliver(self, frame: Dict[str, Any]) -> None:
        self._loop.call_soon_threadsafe(self._enqueue, frame)

    def _enqueue(self, frame: Dict[str, Any]) -> None:
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("broadcast.dropped", connection_id=self.id, reason="queue_full", event_type=frame.get("event"))

    async def run_sender(self) -> None:
        """Drain the queue in order until the socket fails or the task is cancelled."""
        while True:
            frame = await self._queue.get()
            try:
                await self._websocket.send_json(frame)
            except Exception as e:
                logger.warning("broadcast.send_failed", connection_id=self.id, error=str(e))
                return


class BroadcastDispatcher:
    """Fans domain events out to the connections registered in an event room."""

    def __init__(self, registry: EventRoomRegistry):
        self.registry = registry
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, connection: Connection) -> None:
        with self._lock:
            self._connections[connection.id] = connection

    def unregister(self, connection_id: str) -> None:
        """Forget the connection and drop it from every room (call on every disconnect)."""
        with self._lock:
            self._connections.pop(connection_id, None)
        self.registry.leave_all(connection_id)

    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    def publish(self, event_id: Any, event_type: BroadcastEvent | str, payload: Dict[str, Any]) -> int:
        """
        Hand {"event": type, "data": payload} to every current member of the event room.
        Returns how many connections accepted the frame.
        """
        name = event_type.value if isinstance(event_type, BroadcastEvent) else str(event_type)
        frame = {"event": name, "data": jsonable_encoder(payload)}
        members = self.registry.members_of(str(event_id))
        with self._lock:
            targets = [self._connections[cid] for cid in members if cid in self._connections]
        delivered = 0
        for connection in targets:
            try:
                connection.deliver(frame)
                delivered += 1
            except Exception as e:
                logger.warning(
                    "broadcast.delivery_failed",
                    connection_id=connection.id,
                    event_id=str(event_id),
                    event_type=name,
                    error=str(e),
                )
        logger.info("broadcast.published", event_id=str(event_id), event_type=name, delivered=delivered)
        return delivered


room_registry = EventRoomRegistry()
dispatcher = BroadcastDispatcher(room_registry)


def get_dispatcher() -> BroadcastDispatcher:
    """FastAPI dependency: process-wide dispatcher."""
    return dispatcher

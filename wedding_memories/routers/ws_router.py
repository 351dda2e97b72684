"""
Realtime channel. Client frames:
  {"type": "join-event", "eventId": "<uuid>"}   -> ack {"event": "joined", "data": {"eventId": ...}}
  {"type": "leave-event", "eventId": "<uuid>"}  -> ack {"event": "left", "data": {"eventId": ...}}
Server frames: {"event": <type>, "data": <payload>} (new-media, media-approved, ...).
"""
import asyncio
import contextlib
import json
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from wedding_memories.config import get_settings
from wedding_memories.logging_config import get_logger
from wedding_memories.services.broadcast_service import WebSocketConnection, dispatcher

router = APIRouter(tags=["websocket"])
logger = get_logger(__name__)


def _error(message: str) -> Dict[str, Any]:
    return {"event": "error", "data": {"message": message}}


def _parse_frame(raw: str) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """(type, normalised event id, error message)."""
    try:
        frame = json.loads(raw)
    except ValueError:
        return None, None, "Invalid JSON"
    if not isinstance(frame, dict):
        return None, None, "Frame must be a JSON object"
    frame_type = frame.get("type")
    if frame_type not in ("join-event", "leave-event"):
        return None, None, f"Unknown frame type: {frame_type}"
    try:
        event_id = str(UUID(str(frame.get("eventId", ""))))
    except ValueError:
        return frame_type, None, "eventId must be a UUID"
    return frame_type, event_id, None


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    connection = WebSocketConnection(websocket, max_queue_size=get_settings().ws_queue_max_size)
    dispatcher.register(connection)
    sender = asyncio.create_task(connection.run_sender())
    logger.info("ws.connected", connection_id=connection.id)

    try:
        while True:
            raw = await websocket.receive_text()
            frame_type, event_id, error = _parse_frame(raw)
            if error:
                connection.deliver(_error(error))
                continue
            if frame_type == "join-event":
                dispatcher.registry.join(connection.id, event_id)
                connection.deliver({"event": "joined", "data": {"eventId": event_id}})
            else:
                dispatcher.registry.leave(connection.id, event_id)
                connection.deliver({"event": "left", "data": {"eventId": event_id}})
    except WebSocketDisconnect:
        logger.info("ws.disconnected", connection_id=connection.id)
    except Exception as e:
        logger.warning("ws.error", connection_id=connection.id, error=str(e))
    finally:
        dispatcher.unregister(connection.id)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender

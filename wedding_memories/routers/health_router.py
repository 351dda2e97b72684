"""Health check endpoint."""
from fastapi import APIRouter

from wedding_memories.services.broadcast_service import dispatcher, room_registry

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, object]:
    """Health check for load balancer / Docker, plus live realtime counters."""
    return {
        "status": "ok",
        "connections": dispatcher.connection_count(),
        "rooms": room_registry.room_count(),
    }

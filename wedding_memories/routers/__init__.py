"""API routers."""
from wedding_memories.routers.api_health_router import router as api_health_router
from wedding_memories.routers.health_router import router as health_router
from wedding_memories.routers.events_router import router as events_router
from wedding_memories.routers.media_router import router as media_router
from wedding_memories.routers.guestbook_router import router as guestbook_router
from wedding_memories.routers.ws_router import router as ws_router

__all__ = [
    "api_health_router",
    "health_router",
    "events_router",
    "media_router",
    "guestbook_router",
    "ws_router",
]

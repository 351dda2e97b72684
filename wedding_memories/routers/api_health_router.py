# Foundation health: /api/healthz (liveness), /api/readyz (readiness: DB, Redis neu co, realtime).
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_memories import __version__
from wedding_memories.config import get_settings
from wedding_memories.db import get_db
from wedding_memories.logging_config import get_logger
from wedding_memories.models import Event
from wedding_memories.services.broadcast_service import dispatcher

router = APIRouter(prefix="/api", tags=["health"])
logger = get_logger(__name__)


@router.get("/healthz")
def healthz() -> Dict[str, str]:
    """Liveness: process dang chay. Luon 200."""
    return {"status": "ok", "version": __version__}


async def _db_status(db: AsyncSession) -> str:
    # Touches the events table so a missing migration shows up as not ready.
    try:
        await db.execute(select(Event.id).limit(1))
        return "ok"
    except Exception as e:
        logger.warning("readyz.db_fail", error=str(e))
        return "fail"


async def _redis_status(redis_url: str | None) -> str:
    if not redis_url:
        return "skipped"
    client = Redis.from_url(redis_url, decode_responses=True)
    try:
        await client.ping()
        return "ok"
    except Exception as e:
        logger.warning("readyz.redis_fail", error=str(e))
        return "fail"
    finally:
        await client.aclose()


@router.get("/readyz")
async def readyz(db: AsyncSession = Depends(get_db)):
    """Readiness: 200 khi DB (va Redis neu cau hinh) san sang, 503 neu co loi."""
    checks: Dict[str, Any] = {
        "db": await _db_status(db),
        "redis": await _redis_status(get_settings().redis_url),
    }
    checks["websocket_connections"] = dispatcher.connection_count()
    if "fail" in (checks["db"], checks["redis"]):
        return JSONResponse(status_code=503, content={"status": "unhealthy", **checks})
    return {"status": "ok", **checks}

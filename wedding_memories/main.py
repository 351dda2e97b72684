"""FastAPI application entrypoint."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wedding_memories import __version__
from wedding_memories.errors import DomainError
from wedding_memories.logging_config import configure_logging, get_logger
from wedding_memories.middleware.correlation_id import CorrelationIdMiddleware
from wedding_memories.middleware.rate_limit import RateLimitMiddleware
from wedding_memories.routers import (
    api_health_router,
    health_router,
    events_router,
    media_router,
    guestbook_router,
    ws_router,
)
from wedding_memories.schemas.common import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown: logging."""
    configure_logging()
    logger.info("app_started", version=__version__)
    yield
    logger.info("app_shutdown")


app = FastAPI(
    title="Wedding Memories",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """DomainError -> {detail, code} with the error's HTTP status."""
    logger.info("request.rejected", code=exc.code, status=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.detail, code=exc.code).model_dump(exclude_none=True),
    )


app.include_router(api_health_router)
app.include_router(health_router)
app.include_router(events_router)
app.include_router(media_router)
app.include_router(guestbook_router)
app.include_router(ws_router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint: app name and version."""
    return {"name": "wedding_memories", "version": __version__}

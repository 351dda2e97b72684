"""
Rate limit middleware: Redis sliding window cho các hành động của khách (upload, like, comment, guestbook).
Key theo X-User-ID hoặc IP client, mỗi loại hành động một bucket riêng.
Khi không có REDIS_URL thì bỏ qua (không block).
"""
import re
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from fastapi import Request, Response
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware

from wedding_memories.config import Settings, get_settings
from wedding_memories.logging_config import get_logger

logger = get_logger(__name__)

REDIS_KEY_PREFIX = "rl:"


@dataclass(frozen=True)
class RateLimitRule:
    method: str
    pattern: "re.Pattern[str]"
    bucket: str
    setting: str

    def limit(self, settings: Settings) -> int:
        return int(getattr(settings, self.setting))


RULES: Tuple[RateLimitRule, ...] = (
    RateLimitRule("POST", re.compile(r"^/api/media/event/[^/]+/?$"), "guest_upload", "rate_limit_guest_upload"),
    RateLimitRule("POST", re.compile(r"^/api/media/[^/]+/like/?$"), "media_like", "rate_limit_media_like"),
    RateLimitRule("POST", re.compile(r"^/api/media/[^/]+/comments/?$"), "media_comment", "rate_limit_media_comment"),
    RateLimitRule("POST", re.compile(r"^/api/guestbook/event/[^/]+/?$"), "guestbook_entry", "rate_limit_guestbook_entry"),
    RateLimitRule(
        "POST", re.compile(r"^/api/guestbook/event/[^/]+/audio/?$"), "guestbook_audio", "rate_limit_guestbook_audio"
    ),
    RateLimitRule("POST", re.compile(r"^/api/guestbook/entry/[^/]+/like/?$"), "guestbook_like", "rate_limit_guestbook_like"),
    RateLimitRule(
        "POST", re.compile(r"^/api/guestbook/entry/[^/]+/replies/?$"), "guestbook_reply", "rate_limit_guestbook_reply"
    ),
)


def match_rule(method: str, path: str) -> Optional[RateLimitRule]:
    """First rule matching method + path, or None (request is not limited)."""
    for rule in RULES:
        if rule.method == method.upper() and rule.pattern.match(path):
            return rule
    return None


def _rate_limit_key(request: Request, rule: RateLimitRule) -> Optional[str]:
    """Lấy key cho rate limit: X-User-ID (nếu có) hoặc IP client."""
    user_id = request.headers.get("X-User-ID", "").strip()
    if user_id:
        return f"{rule.bucket}:user:{user_id[:64]}"
    if request.client and request.client.host:
        return f"{rule.bucket}:ip:{request.client.host}"
    return None


async def _check_sliding_window(redis_url: str, key: str, limit: int, window_seconds: int) -> bool:
    """
    Sliding window: ZADD now, ZREMRANGEBYSCORE -inf (now-window), ZCARD.
    Returns True nếu cho phép request (dưới limit), False nếu vượt.
    """
    now = time.time()
    rkey = REDIS_KEY_PREFIX + key
    try:
        client = Redis.from_url(redis_url, decode_responses=True)
        try:
            pipe = client.pipeline()
            pipe.zadd(rkey, {str(uuid.uuid4()): now})
            pipe.zremrangebyscore(rkey, "-inf", now - window_seconds)
            pipe.zcard(rkey)
            pipe.expire(rkey, window_seconds + 10)
            results = await pipe.execute()
            count = results[2] if len(results) > 2 else 0
            return count <= limit
        finally:
            await client.aclose()
    except Exception as e:
        logger.warning("rate_limit.redis_error", key=key, error=str(e))
        return True


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware: rate limit theo loại hành động + user/IP (Redis sliding window)."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        if not settings.redis_url:
            return await call_next(request)
        rule = match_rule(request.method, request.url.path)
        if rule is None:
            return await call_next(request)
        key = _rate_limit_key(request, rule)
        if not key:
            return await call_next(request)
        limit = rule.limit(settings)
        allowed = await _check_sliding_window(settings.redis_url, key, limit, settings.rate_limit_window_seconds)
        if not allowed:
            logger.info("rate_limit.exceeded", key=key, bucket=rule.bucket, limit=limit)
            return Response(
                content='{"detail":"Too many requests, please try again later.","code":"rate_limited"}',
                status_code=429,
                media_type="application/json",
            )
        return await call_next(request)

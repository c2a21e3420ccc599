"""Rate limiting middleware using Redis with a Lua sliding window."""

import hashlib
import logging
import random
import time
from typing import Callable

from fastapi import Request, Response
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from storefront.core.config import settings
from storefront.core.redis import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware using Redis with atomic Lua script.

    Two limits per one-second window:
    - per client: bearer token or cart session (``RATE_LIMIT_USER``)
    - per IP for all requests (``RATE_LIMIT_IP``)

    Requests are let through when Redis is unreachable.
    """

    RATE_LIMIT_SCRIPT = """
    local key = KEYS[1]
    local now = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local request_id = ARGV[4]
    local window_start = now - window

    -- Remove old entries outside the window
    redis.call('ZREMRANGEBYSCORE', key, 0, window_start)

    local count = redis.call('ZCARD', key)

    if count < limit then
        redis.call('ZADD', key, now, request_id)
        redis.call('EXPIRE', key, window + 1)
        return {1, 0}
    else
        local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
        local retry_after = 1
        if oldest and #oldest >= 2 then
            retry_after = math.ceil(oldest[2] + window - now) + 1
            if retry_after < 1 then retry_after = 1 end
        end
        return {0, retry_after}
    end
    """

    def __init__(self, app, user_limit: int | None = None, ip_limit: int | None = None):
        super().__init__(app)
        self.user_limit = user_limit if user_limit is not None else settings.RATE_LIMIT_USER
        self.ip_limit = ip_limit if ip_limit is not None else settings.RATE_LIMIT_IP
        self._rate_limit_script = None

    async def _get_rate_limit_script(self, redis):
        """Get or register the rate limit Lua script."""
        if self._rate_limit_script is None:
            self._rate_limit_script = redis.register_script(self.RATE_LIMIT_SCRIPT)
        return self._rate_limit_script

    def _client_key(self, request: Request) -> str | None:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            identity = auth_header[7:]
        else:
            identity = request.headers.get(settings.CART_SESSION_HEADER)
        if not identity:
            return None
        return f"ratelimit:client:{hashlib.sha256(identity.encode()).hexdigest()[:16]}"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting."""
        if not settings.RATE_LIMIT_ENABLED or request.url.path in ("/health", "/metrics"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        try:
            redis = await get_redis()

            ip_allowed, ip_retry_after = await self._check_rate_limit_lua(
                redis, f"ratelimit:ip:{client_ip}", self.ip_limit
            )
            if not ip_allowed:
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too many requests from this IP", "code": "RATE_LIMITED"},
                    headers={"Retry-After": str(ip_retry_after)},
                )

            client_key = self._client_key(request)
            if client_key is not None:
                allowed, retry_after = await self._check_rate_limit_lua(
                    redis, client_key, self.user_limit
                )
                if not allowed:
                    return JSONResponse(
                        status_code=429,
                        content={"detail": "Too many requests", "code": "RATE_LIMITED"},
                        headers={"Retry-After": str(retry_after)},
                    )
        except (RedisError, OSError) as e:
            logger.warning(f"Rate limiting skipped, Redis unavailable: {e}")

        return await call_next(request)

    async def _check_rate_limit_lua(
        self, redis, key: str, limit: int, window: int = 1
    ) -> tuple[bool, int]:
        """Check rate limit using atomic Lua script.

        Args:
            redis: Redis client
            key: Rate limit key
            limit: Maximum requests per window
            window: Window size in seconds

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        now = time.time()
        # Unique member so concurrent requests in the same instant are all counted
        request_id = f"{now}:{random.randint(0, 999999)}"

        script = await self._get_rate_limit_script(redis)
        result = await script(
            keys=[key],
            args=[now, window, limit, request_id],
        )

        return bool(result[0]), int(result[1])

"""Redis service for the authenticated user cache."""

from typing import Any

from redis.asyncio import Redis

from storefront.core.config import settings


class RedisService:
    """Service class for Redis cache operations."""

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis

    # ==================== User Cache Operations ====================

    async def cache_user(
        self, user_id: str, user_data: dict[str, Any], ttl: int | None = None
    ) -> None:
        """Cache user data in a Redis hash.

        Key pattern: user:{user_id}

        Args:
            user_id: User UUID string
            user_data: User data dict (None values are skipped, others stringified)
            ttl: Optional TTL in seconds (defaults to settings.USER_CACHE_TTL)
        """
        key = f"user:{user_id}"
        cache_ttl = ttl if ttl is not None else settings.USER_CACHE_TTL
        string_data = {k: str(v) for k, v in user_data.items() if v is not None}
        pipe = self.redis.pipeline()
        pipe.hset(key, mapping=string_data)
        pipe.expire(key, cache_ttl)
        await pipe.execute()

    async def get_cached_user(self, user_id: str) -> dict[str, str] | None:
        """Get cached user data.

        Args:
            user_id: User UUID string

        Returns:
            User data dict or None if not cached
        """
        key = f"user:{user_id}"
        data = await self.redis.hgetall(key)
        return data if data else None

    async def invalidate_user_cache(self, user_id: str) -> bool:
        """Invalidate (delete) user cache.

        Should be called whenever a user record changes.

        Args:
            user_id: User UUID string

        Returns:
            True if cache was deleted, False if it didn't exist
        """
        key = f"user:{user_id}"
        result = await self.redis.delete(key)
        return result > 0

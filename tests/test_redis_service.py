"""Tests for the Redis user cache and cached user reconstruction."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from storefront.api.deps import _user_from_cache
from storefront.services.redis_service import RedisService


class TestUserCache:
    """Test user cache operations."""

    @pytest.mark.asyncio
    async def test_cache_user_skips_none_values(self, mock_redis):
        service = RedisService(mock_redis)
        user_id = str(uuid4())

        await service.cache_user(user_id, {"email": "a@b.com", "phone": None, "is_admin": False}, ttl=30)

        pipe = mock_redis.pipeline.return_value
        pipe.hset.assert_called_once_with(
            f"user:{user_id}", mapping={"email": "a@b.com", "is_admin": "False"}
        )
        pipe.expire.assert_called_once_with(f"user:{user_id}", 30)
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_cached_user_miss(self, mock_redis):
        service = RedisService(mock_redis)

        assert await service.get_cached_user(str(uuid4())) is None

    @pytest.mark.asyncio
    async def test_get_cached_user_hit(self, mock_redis):
        mock_redis.hgetall = AsyncMock(return_value={"email": "a@b.com", "status": "active"})
        service = RedisService(mock_redis)

        cached = await service.get_cached_user(str(uuid4()))

        assert cached["email"] == "a@b.com"

    @pytest.mark.asyncio
    async def test_invalidate(self, mock_redis):
        service = RedisService(mock_redis)
        user_id = str(uuid4())

        assert await service.invalidate_user_cache(user_id) is True
        mock_redis.delete.assert_called_once_with(f"user:{user_id}")


def test_user_from_cache():
    user_id = uuid4()

    user = _user_from_cache(
        user_id,
        {
            "email": "maria@example.com",
            "name": "Maria",
            "status": "active",
            "is_admin": "True",
            "created_at": "2026-01-10T08:00:00",
        },
    )

    assert user.user_id == user_id
    assert user.name == "Maria"
    assert user.is_admin is True
    assert user.password_hash == ""
    assert user.created_at.year == 2026

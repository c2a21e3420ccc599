from storefront.core.config import settings
from storefront.core.database import Base, async_session_maker, engine, get_db
from storefront.core.redis import close_redis, get_redis
from storefront.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

__all__ = [
    "settings",
    "Base",
    "engine",
    "async_session_maker",
    "get_db",
    "get_redis",
    "close_redis",
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_access_token",
]

"""API dependencies for authentication, cart ownership and database access."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.redis import get_redis
from storefront.core.security import decode_access_token
from storefront.models.base import utcnow
from storefront.models.user import User
from storefront.services.cart_service import CartOwner
from storefront.services.redis_service import RedisService
from storefront.services.user_service import UserService

security = HTTPBearer(auto_error=False)


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


def user_cache_payload(user: User) -> dict[str, str | None]:
    return {
        "email": user.email,
        "name": user.name,
        "phone": user.phone,
        "cpf": user.cpf,
        "status": user.status,
        "is_admin": str(user.is_admin),
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _user_from_cache(user_id: UUID, data: dict[str, str]) -> User:
    """Reconstruct a detached User from cached data without hitting the database.

    The password hash is never cached.
    """
    created_at_str = data.get("created_at")
    try:
        created_at = datetime.fromisoformat(created_at_str) if created_at_str else utcnow()
    except ValueError:
        created_at = utcnow()

    user = User(
        email=data.get("email", ""),
        password_hash="",
        name=data.get("name", ""),
        cpf=data.get("cpf"),
        phone=data.get("phone"),
        status=data.get("status", "active"),
        is_admin=data.get("is_admin", "False").lower() == "true",
    )
    # user_id and created_at are normally assigned by the database
    object.__setattr__(user, "user_id", user_id)
    object.__setattr__(user, "created_at", created_at)
    return user


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(token: str, db: AsyncSession, redis_service: RedisService) -> User:
    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid authentication token")

    user_id = payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID in token")

    cached_user = await redis_service.get_cached_user(user_id)
    if cached_user:
        if cached_user.get("status") != "active":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is not active",
            )
        return _user_from_cache(user_uuid, cached_user)

    user = await UserService(db).get_by_id(user_uuid)
    if user is None:
        raise _unauthorized("User not found")

    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )

    await redis_service.cache_user(user_id, user_cache_payload(user))
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DbSession,
    redis_service: RedisServiceDep,
) -> User:
    """Get current authenticated user from JWT token with Redis caching.

    Args:
        credentials: HTTP Bearer token
        db: Database session
        redis_service: User cache

    Returns:
        Current user

    Raises:
        HTTPException: If the token is missing or invalid or the user is not found
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return await _resolve_user(credentials.credentials, db, redis_service)


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: DbSession,
    redis_service: RedisServiceDep,
) -> User | None:
    """Like get_current_user, but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials, db, redis_service)


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin.

    Raises:
        HTTPException: If user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def get_cart_session(request: Request) -> str | None:
    """Anonymous cart session id from the cart session header, if present."""
    value = request.headers.get(settings.CART_SESSION_HEADER)
    return value.strip() if value and value.strip() else None


async def get_cart_owner(
    request: Request,
    user: Annotated[User | None, Depends(get_optional_user)],
) -> CartOwner:
    """Resolve the cart owner: the bearer token wins over a cart session.

    Raises:
        HTTPException: If the request carries neither
    """
    if user is not None:
        return CartOwner.for_user(user.user_id)

    session_id = get_cart_session(request)
    if session_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Log in or send a {settings.CART_SESSION_HEADER} header",
        )
    return CartOwner.for_session(session_id)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(get_current_admin_user)]
CartOwnerDep = Annotated[CartOwner, Depends(get_cart_owner)]

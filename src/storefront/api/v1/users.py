"""User administration API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from storefront.api.deps import AdminUser, DbSession, RedisServiceDep
from storefront.api.v1.orders import build_order_list
from storefront.core.exceptions import NotFoundError
from storefront.schemas.order import OrderListResponse
from storefront.schemas.user import UserListResponse, UserResponse, UserUpdate
from storefront.services.order_service import OrderService
from storefront.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    db: DbSession,
    admin: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get all users (admin only)."""
    users, total = await UserService(db).get_all(skip=skip, limit=limit)
    return UserListResponse(users=users, total=total)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, db: DbSession, admin: AdminUser):
    """Get a user by ID (admin only)."""
    user = await UserService(db).get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_data: UserUpdate,
    db: DbSession,
    admin: AdminUser,
    redis_service: RedisServiceDep,
):
    """Update a user's profile, role or status (admin only)."""
    user = await UserService(db).update(user_id, user_data)
    await redis_service.invalidate_user_cache(str(user_id))
    return user


@router.get("/{user_id}/orders", response_model=OrderListResponse)
async def get_user_orders(
    user_id: UUID,
    db: DbSession,
    admin: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get a user's orders (admin only)."""
    if await UserService(db).get_by_id(user_id) is None:
        raise NotFoundError("User not found")
    orders, total = await OrderService(db).get_user_orders(user_id, skip=skip, limit=limit)
    return build_order_list(orders, total)

"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from storefront.api.deps import CurrentUser, DbSession, get_cart_session
from storefront.core.config import settings
from storefront.core.security import create_access_token
from storefront.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse
from storefront.services.cart_service import CartOwner, CartService
from storefront.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: DbSession):
    """Register a new customer account.

    Raises:
        422: Email already registered
    """
    user_service = UserService(db)
    return await user_service.create_user(user_data)


@router.post("/login", response_model=TokenResponse)
async def login(user_data: UserLogin, request: Request, db: DbSession):
    """Login and get an access token.

    When the request carries an anonymous cart session header, that cart is
    merged into the user's cart before the token is returned.

    Raises:
        401: Invalid credentials
    """
    user_service = UserService(db)
    user = await user_service.authenticate(user_data.email, user_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = user.user_id

    session_id = get_cart_session(request)
    if session_id is not None:
        cart_service = CartService(db)
        await cart_service.merge_anonymous_cart(
            CartOwner.for_session(session_id), CartOwner.for_user(user_id)
        )

    access_token = create_access_token(data={"sub": str(user_id), "email": user_data.email})
    logger.info(f"User {user_id} logged in")

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user information. Requires authentication."""
    return current_user

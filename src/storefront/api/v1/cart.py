"""Cart API endpoints.

Anonymous visitors identify their cart with the cart session header; logged in
users with their bearer token.
"""

import secrets
from uuid import UUID

from fastapi import APIRouter, Request, status

from storefront.api.deps import CartOwnerDep, CurrentUser, DbSession, get_cart_session
from storefront.core.config import settings
from storefront.core.exceptions import ValidationFailedError
from storefront.schemas.cart import (
    CartLineAdd,
    CartLineUpdate,
    CartResponse,
    CartSessionResponse,
)
from storefront.services.cart_service import CartOwner, CartService

router = APIRouter()


@router.post("/session", response_model=CartSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_cart_session():
    """Issue a new anonymous cart session id."""
    return CartSessionResponse(
        session_id=secrets.token_urlsafe(24),
        header=settings.CART_SESSION_HEADER,
    )


@router.get("", response_model=CartResponse)
async def get_cart(owner: CartOwnerDep, db: DbSession):
    """Get the cart. Lines whose campaign ended are removed and reported."""
    return await CartService(db).get_cart(owner)


@router.post("/lines", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_cart_line(line_data: CartLineAdd, owner: CartOwnerDep, db: DbSession):
    """Add a product variant to the cart.

    Raises:
        404: Product not found
        422: Invalid quantity, variant, color, or product not on sale
    """
    return await CartService(db).add_line(
        owner,
        product_id=line_data.product_id,
        variant_id=line_data.variant_id,
        color=line_data.color,
        quantity=line_data.quantity,
    )


@router.patch("/lines/{line_id}", response_model=CartResponse)
async def update_cart_line(
    line_id: UUID,
    line_data: CartLineUpdate,
    owner: CartOwnerDep,
    db: DbSession,
):
    """Set the quantity of a cart line."""
    return await CartService(db).update_quantity(owner, line_id, line_data.quantity)


@router.delete("/lines/{line_id}", response_model=CartResponse)
async def remove_cart_line(line_id: UUID, owner: CartOwnerDep, db: DbSession):
    """Remove a line from the cart."""
    return await CartService(db).remove_line(owner, line_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(owner: CartOwnerDep, db: DbSession):
    """Remove every line from the cart."""
    await CartService(db).clear_cart(owner)


@router.post("/merge", response_model=CartResponse)
async def merge_cart(request: Request, current_user: CurrentUser, db: DbSession):
    """Merge the anonymous cart named by the session header into the user's cart."""
    session_id = get_cart_session(request)
    if session_id is None:
        raise ValidationFailedError(f"Missing {settings.CART_SESSION_HEADER} header")
    return await CartService(db).merge_anonymous_cart(
        CartOwner.for_session(session_id), CartOwner.for_user(current_user.user_id)
    )

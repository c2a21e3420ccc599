"""Order API endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import AdminUser, CartOwnerDep, CurrentUser, DbSession
from storefront.core.exceptions import NotFoundError
from storefront.models.order import Order, OrderLine
from storefront.schemas.order import (
    LineStatusUpdate,
    MarkProcessedRequest,
    OrderCreate,
    OrderLineResponse,
    OrderListResponse,
    OrderResponse,
)
from storefront.services.cart_service import CartOwner
from storefront.services.order_service import OrderService
from storefront.services.order_status import order_status, order_totals

router = APIRouter()


def build_line_response(line: OrderLine) -> OrderLineResponse:
    return OrderLineResponse(
        line_id=line.line_id,
        product_id=line.product_id,
        variant_id=line.variant_id,
        product_name=line.product_name,
        size=line.size,
        color=line.color,
        quantity=line.quantity,
        unit_price=line.unit_price,
        subtotal=line.unit_price * line.quantity,
        payment_status=line.payment_status,
        stock_status=line.stock_status,
        is_processed=line.is_processed,
        processed_at=line.processed_at,
    )


def build_order_response(order: Order) -> OrderResponse:
    """Build the order view with derived status and totals over non-cancelled lines."""
    total, total_quantity = order_totals(order)
    return OrderResponse(
        order_id=order.order_id,
        user_id=order.user_id,
        phone=order.phone,
        notes=order.notes,
        status=order_status(order).value,
        payment_status=order.payment_status,
        notifications_sent=order.notifications_sent,
        total=total,
        total_quantity=total_quantity,
        created_at=order.created_at,
        lines=[build_line_response(line) for line in order.lines],
    )


def build_order_list(orders: list[Order], total: int) -> OrderListResponse:
    return OrderListResponse(orders=[build_order_response(o) for o in orders], total=total)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(order_data: OrderCreate, owner: CartOwnerDep, db: DbSession):
    """Place an order from the current cart.

    Prices are captured from the variants at this moment; the cart is emptied.

    Raises:
        403: Anonymous cart
        409: Empty cart, or the order could not be written
    """
    order = await OrderService(db).create_order(
        owner, notes=order_data.notes, phone=order_data.phone
    )
    return build_order_response(order)


@router.get("/me", response_model=OrderListResponse)
async def get_my_orders(
    current_user: CurrentUser,
    db: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get current user's orders, newest first."""
    orders, total = await OrderService(db).get_user_orders(
        user_id=current_user.user_id, skip=skip, limit=limit
    )
    return build_order_list(orders, total)


@router.get("/admin", response_model=OrderListResponse)
async def list_all_orders(
    db: DbSession,
    admin: AdminUser,
    start_date: date | None = None,
    end_date: date | None = None,
    campaign_id: UUID | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get every order, optionally by placement day range and campaign (admin only)."""
    orders, total = await OrderService(db).get_all_orders(
        skip=skip,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        campaign_id=campaign_id,
    )
    return build_order_list(orders, total)


@router.post("/lines/processed")
async def mark_lines_processed(request: MarkProcessedRequest, db: DbSession, admin: AdminUser):
    """Flag order lines as processed (admin only)."""
    updated = await OrderService(db).mark_processed(request.line_ids)
    return {"updated": updated}


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: UUID, current_user: CurrentUser, db: DbSession):
    """Get an order. Customers see their own orders, admins see any."""
    service = OrderService(db)
    if current_user.is_admin:
        order = await service.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found")
    else:
        order = await service.get_owned_order(CartOwner.for_user(current_user.user_id), order_id)
    return build_order_response(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: UUID, current_user: CurrentUser, db: DbSession):
    """Cancel every line of one of the current user's orders."""
    order = await OrderService(db).cancel_order(
        CartOwner.for_user(current_user.user_id), order_id
    )
    return build_order_response(order)


@router.post("/{order_id}/lines/{line_id}/cancel", response_model=OrderResponse)
async def cancel_order_item(
    order_id: UUID,
    line_id: UUID,
    current_user: CurrentUser,
    db: DbSession,
):
    """Cancel a single line of one of the current user's orders."""
    order = await OrderService(db).cancel_order_item(
        CartOwner.for_user(current_user.user_id), order_id, line_id
    )
    return build_order_response(order)


@router.patch("/{order_id}/lines/{line_id}/status", response_model=OrderLineResponse)
async def update_line_status(
    order_id: UUID,
    line_id: UUID,
    status_data: LineStatusUpdate,
    db: DbSession,
    admin: AdminUser,
):
    """Change the payment and/or stock status of an order line (admin only).

    Raises:
        404: Line not in order
        422: Unknown status or transition not allowed
    """
    line = await OrderService(db).update_line_status(
        order_id,
        line_id,
        payment_status=status_data.payment_status,
        stock_status=status_data.stock_status,
    )
    return build_line_response(line)


@router.post("/{order_id}/confirm-payment", response_model=OrderResponse)
async def confirm_payment(order_id: UUID, db: DbSession, admin: AdminUser):
    """Mark the order as paid (admin only)."""
    order = await OrderService(db).confirm_payment(order_id)
    return build_order_response(order)


@router.post("/{order_id}/notifications", response_model=OrderResponse)
async def record_notification(order_id: UUID, db: DbSession, admin: AdminUser):
    """Count a notification sent to the customer about this order (admin only)."""
    order = await OrderService(db).record_notification(order_id)
    return build_order_response(order)

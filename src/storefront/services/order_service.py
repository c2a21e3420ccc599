"""Order service: cart consolidation, cancellation, line status and campaign sales."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import (
    EmptyCartError,
    ForbiddenError,
    NotFoundError,
    TransactionFailedError,
    ValidationFailedError,
)
from storefront.models.base import utcnow
from storefront.models.campaign import Campaign
from storefront.models.cart import CartLine
from storefront.models.order import Order, OrderLine, PaymentStatus
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.order import (
    CampaignOrdersResponse,
    CampaignOrderSummary,
    CampaignSalesResponse,
    ProductSales,
)
from storefront.services.cart_service import CartOwner, owner_clause
from storefront.services.order_status import next_payment_status, next_stock_status
from storefront.services.product_service import ProductService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


class OrderService:
    """Service class for order operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.catalog = ProductService(db)

    # ==================== Consolidation ====================

    async def create_order(
        self, owner: CartOwner, notes: str | None = None, phone: str | None = None
    ) -> Order:
        """Turn the owner's cart into an order.

        Every cart line is re-validated and snapshotted into an order line,
        then the cart lines are deleted. All writes happen in one transaction.

        Args:
            owner: Cart owner; must be an authenticated user
            notes: Free-text order notes
            phone: Contact phone for this order

        Returns:
            The created order with its lines

        Raises:
            ForbiddenError: If the owner is anonymous
            EmptyCartError: If the cart has no lines
            TransactionFailedError: If anything failed; nothing was written
        """
        if not owner.is_authenticated:
            raise ForbiddenError("Log in to place an order")
        user_id = owner.user_id

        try:
            result = await self.db.execute(
                select(CartLine)
                .where(owner_clause(owner))
                .order_by(CartLine.created_at, CartLine.line_id)
                .with_for_update()
            )
            cart_lines = list(result.scalars().all())
            if not cart_lines:
                raise EmptyCartError("Cart is empty")

            infos = await self.catalog.get_variant_infos([line.variant_id for line in cart_lines])

            order = Order(
                user_id=user_id,
                notes=notes,
                phone=phone,
                payment_status=PaymentStatus.PENDING.value,
                notifications_sent=0,
            )
            self.db.add(order)
            await self.db.flush()
            order_id = order.order_id

            for position, cart_line in enumerate(cart_lines):
                info = infos.get(cart_line.variant_id)
                if info is None or info.product_id != cart_line.product_id or not info.visible:
                    raise ValidationFailedError(
                        f"Cart line {cart_line.line_id} is no longer available"
                    )
                self.db.add(
                    OrderLine(
                        order_id=order_id,
                        position=position,
                        product_id=info.product_id,
                        variant_id=info.variant_id,
                        product_name=info.product_name,
                        size=info.size,
                        color=cart_line.color,
                        quantity=cart_line.quantity,
                        unit_price=info.unit_price,
                    )
                )

            await self._clear_cart_lines([line.line_id for line in cart_lines])
            await self.db.commit()
        except (ValidationFailedError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(f"Order creation rolled back for user {user_id}: {e}")
            raise TransactionFailedError(f"Order could not be created: {e}") from e

        logger.info(f"Created order {order_id} with {len(cart_lines)} lines for user {user_id}")
        return await self.get_order(order_id)

    async def _clear_cart_lines(self, line_ids: list[UUID]) -> None:
        await self.db.execute(delete(CartLine).where(CartLine.line_id.in_(line_ids)))

    # ==================== Reads ====================

    async def get_order(self, order_id: UUID) -> Order | None:
        """Get order by ID with its lines loaded."""
        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.lines))
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_owned_order(self, owner: CartOwner, order_id: UUID) -> Order:
        """Get an order the owner placed.

        Raises:
            NotFoundError: If the order does not exist
            ForbiddenError: If it belongs to someone else
        """
        order = await self.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        if not owner.is_authenticated or order.user_id != owner.user_id:
            raise ForbiddenError("Order belongs to another user")
        return order

    async def get_user_orders(
        self, user_id: UUID, skip: int = 0, limit: int = 100
    ) -> tuple[list[Order], int]:
        """Get orders for a specific user.

        Args:
            user_id: User UUID
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (orders list, total count)
        """
        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(Order.user_id == user_id)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.lines))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        orders = list(result.scalars().all())

        return orders, total

    async def get_all_orders(
        self,
        skip: int = 0,
        limit: int = 100,
        start_date: date | None = None,
        end_date: date | None = None,
        campaign_id: UUID | None = None,
    ) -> tuple[list[Order], int]:
        """Get every order, newest first (admin).

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            start_date: Only orders placed on or after this day
            end_date: Only orders placed on or before this day
            campaign_id: Only orders with at least one product of this campaign

        Returns:
            Tuple of (orders list, total count)
        """
        filters = []
        if start_date is not None:
            filters.append(Order.created_at >= datetime.combine(start_date, time.min))
        if end_date is not None:
            filters.append(
                Order.created_at < datetime.combine(end_date + timedelta(days=1), time.min)
            )
        if campaign_id is not None:
            filters.append(
                Order.order_id.in_(
                    select(OrderLine.order_id)
                    .join(Product, OrderLine.product_id == Product.product_id)
                    .where(Product.campaign_id == campaign_id)
                )
            )

        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(*filters)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.lines))
            .where(*filters)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        orders = list(result.scalars().all())

        return orders, total

    # ==================== Cancellation ====================

    async def cancel_order(self, owner: CartOwner, order_id: UUID) -> Order:
        """Cancel every line of an order the owner placed."""
        order = await self.get_owned_order(owner, order_id)
        for line in order.lines:
            line.payment_status = next_payment_status(
                line.payment_status, PaymentStatus.CANCELLED.value
            )
        await self.db.commit()
        logger.info(f"Order {order_id} cancelled by user {owner.key}")
        return await self.get_order(order_id)

    async def cancel_order_item(self, owner: CartOwner, order_id: UUID, line_id: UUID) -> Order:
        """Cancel a single line of an order the owner placed."""
        order = await self.get_owned_order(owner, order_id)
        line = next((item for item in order.lines if item.line_id == line_id), None)
        if line is None:
            raise NotFoundError(f"Line {line_id} not found in order {order_id}")

        line.payment_status = next_payment_status(line.payment_status, PaymentStatus.CANCELLED.value)
        await self.db.commit()
        logger.info(f"Order line {line_id} of order {order_id} cancelled by user {owner.key}")
        return await self.get_order(order_id)

    # ==================== Status tracking ====================

    async def update_line_status(
        self,
        order_id: UUID,
        line_id: UUID,
        payment_status: str | None = None,
        stock_status: str | None = None,
    ) -> OrderLine:
        """Apply a partial payment/stock status change to one order line.

        Both values are validated before either is written, so a rejected
        payment transition leaves the stock status untouched too.

        Raises:
            NotFoundError: If the line is not part of the order
            InvalidStatusError: If a value is unknown or the transition is not allowed
            ValidationFailedError: If neither status was given
        """
        if payment_status is None and stock_status is None:
            raise ValidationFailedError("Provide payment_status and/or stock_status")

        result = await self.db.execute(
            select(OrderLine)
            .where(OrderLine.line_id == line_id, OrderLine.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        line = result.scalar_one_or_none()
        if line is None:
            raise NotFoundError(f"Line {line_id} not found in order {order_id}")

        new_payment = (
            next_payment_status(line.payment_status, payment_status)
            if payment_status is not None
            else None
        )
        new_stock = (
            next_stock_status(line.stock_status, stock_status)
            if stock_status is not None
            else None
        )

        if new_payment is not None and new_payment.value != line.payment_status:
            logger.info(f"Line {line_id}: payment {line.payment_status} -> {new_payment.value}")
            line.payment_status = new_payment.value
        if new_stock is not None and new_stock.value != line.stock_status:
            logger.info(f"Line {line_id}: stock {line.stock_status} -> {new_stock.value}")
            line.stock_status = new_stock.value

        await self.db.commit()
        return line

    async def confirm_payment(self, order_id: UUID) -> Order:
        """Set the order-level payment marker to paid."""
        order = await self.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        order.payment_status = PaymentStatus.PAID.value
        await self.db.commit()
        logger.info(f"Payment confirmed for order {order_id}")
        return await self.get_order(order_id)

    async def record_notification(self, order_id: UUID) -> Order:
        """Count one customer notification sent for the order."""
        if await self.get_order(order_id) is None:
            raise NotFoundError(f"Order {order_id} not found")
        await self.db.execute(
            update(Order)
            .where(Order.order_id == order_id)
            .values(notifications_sent=Order.notifications_sent + 1)
        )
        await self.db.commit()
        return await self.get_order(order_id)

    async def mark_processed(self, line_ids: list[UUID]) -> int:
        """Flag order lines as processed.

        Returns:
            Number of lines updated
        """
        result = await self.db.execute(
            update(OrderLine)
            .where(OrderLine.line_id.in_(line_ids))
            .values(is_processed=True, processed_at=utcnow())
        )
        await self.db.commit()
        logger.info(f"Marked {result.rowcount} order lines as processed")
        return result.rowcount

    # ==================== Campaign rollups ====================

    async def get_campaign_orders(self, campaign_id: UUID) -> CampaignOrdersResponse:
        """Orders containing non-cancelled lines of a campaign's products.

        Args:
            campaign_id: Campaign UUID

        Returns:
            Per-order summary with customer, campaign units and order total
        """
        await self._require_campaign(campaign_id)

        result = await self.db.execute(
            select(
                Order.order_id,
                Order.user_id,
                User.name,
                func.coalesce(Order.phone, User.phone),
                Order.created_at,
                func.sum(OrderLine.quantity),
            )
            .join(OrderLine, OrderLine.order_id == Order.order_id)
            .join(Product, OrderLine.product_id == Product.product_id)
            .join(User, Order.user_id == User.user_id)
            .where(Product.campaign_id == campaign_id)
            .where(OrderLine.payment_status != PaymentStatus.CANCELLED.value)
            .group_by(
                Order.order_id, Order.user_id, User.name, Order.phone, User.phone, Order.created_at
            )
            .order_by(Order.created_at.desc())
        )
        rows = result.all()

        totals: dict[UUID, Decimal] = {}
        if rows:
            totals_result = await self.db.execute(
                select(OrderLine.order_id, func.sum(OrderLine.quantity * OrderLine.unit_price))
                .where(OrderLine.order_id.in_([row[0] for row in rows]))
                .where(OrderLine.payment_status != PaymentStatus.CANCELLED.value)
                .group_by(OrderLine.order_id)
            )
            totals = {order_id: _money(total) for order_id, total in totals_result.all()}

        orders = [
            CampaignOrderSummary(
                order_id=order_id,
                user_id=user_id,
                customer_name=name,
                phone=phone,
                created_at=created_at,
                campaign_units=int(units or 0),
                total=totals.get(order_id, _money(0)),
            )
            for order_id, user_id, name, phone, created_at, units in rows
        ]
        return CampaignOrdersResponse(campaign_id=campaign_id, orders=orders, total=len(orders))

    async def get_sales_by_campaign(self, campaign_id: UUID) -> CampaignSalesResponse:
        """Revenue and units sold for a campaign over non-cancelled lines.

        Revenue uses the unit price captured on each order line.
        """
        await self._require_campaign(campaign_id)

        result = await self.db.execute(
            select(
                Product.product_id,
                Product.name,
                func.sum(OrderLine.quantity),
                func.sum(OrderLine.quantity * OrderLine.unit_price),
            )
            .join(OrderLine, OrderLine.product_id == Product.product_id)
            .where(Product.campaign_id == campaign_id)
            .where(OrderLine.payment_status != PaymentStatus.CANCELLED.value)
            .group_by(Product.product_id, Product.name)
            .order_by(Product.name)
        )

        products = [
            ProductSales(
                product_id=product_id,
                product_name=name,
                units=int(units or 0),
                revenue=_money(revenue),
            )
            for product_id, name, units, revenue in result.all()
        ]
        return CampaignSalesResponse(
            campaign_id=campaign_id,
            total_revenue=sum((p.revenue for p in products), _money(0)),
            total_units=sum(p.units for p in products),
            products=products,
        )

    async def _require_campaign(self, campaign_id: UUID) -> None:
        if await self.db.get(Campaign, campaign_id) is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")

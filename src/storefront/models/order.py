"""Order and order line models."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.product import Product
    from storefront.models.user import User


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class StockStatus(str, Enum):
    PENDING = "pending"
    ARRIVED = "arrived"


class OrderStatus(str, Enum):
    """Order status as reported to clients; never stored."""

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class Order(Base, TimestampMixin):
    """Order placed by a user from the contents of their cart."""

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    phone: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    # Coarse order-level marker set by the payment confirmation path
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
    )
    notifications_sent: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="orders")
    lines: Mapped[List["OrderLine"]] = relationship(
        "OrderLine",
        back_populates="order",
        order_by="OrderLine.position",
    )

    __table_args__ = (
        CheckConstraint("notifications_sent >= 0", name="chk_order_notifications"),
        Index("idx_orders_user_created", "user_id", "created_at"),
    )


class OrderLine(Base):
    """Snapshot of one cart line taken when the order was created.

    Only the status fields and processing flags change after creation.
    """

    __tablename__ = "order_lines"

    line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.product_id"),
        nullable=False,
    )
    variant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("product_variants.variant_id", ondelete="SET NULL"),
        nullable=True,
    )
    product_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    size: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    color: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
    )
    stock_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StockStatus.PENDING.value,
    )
    is_processed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    order: Mapped["Order"] = relationship("Order", back_populates="lines")
    product: Mapped["Product"] = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_order_line_quantity"),
        CheckConstraint("unit_price >= 0", name="chk_order_line_price"),
        Index("idx_order_lines_order", "order_id"),
        Index("idx_order_lines_product_payment", "product_id", "payment_status"),
    )

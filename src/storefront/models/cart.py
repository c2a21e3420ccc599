"""Cart line model shared by anonymous and authenticated carts."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.product import Product, ProductVariant


class CartLine(Base, TimestampMixin):
    """A selected variant and quantity in one owner's cart.

    The owner is stored as a (kind, key) pair: ``("user", <user id>)`` or
    ``("anonymous", <session id>)``. Lines without a color count as one color
    for uniqueness (PostgreSQL 15+ ``NULLS NOT DISTINCT``).
    """

    __tablename__ = "cart_lines"

    line_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_kind: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )
    owner_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
    )
    variant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("product_variants.variant_id", ondelete="CASCADE"),
        nullable=False,
    )
    color: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    product: Mapped["Product"] = relationship("Product")
    variant: Mapped["ProductVariant"] = relationship("ProductVariant")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_cart_line_quantity"),
        UniqueConstraint(
            "owner_kind", "owner_key", "product_id", "variant_id", "color",
            name="uq_cart_line_owner_variant_color",
            postgresql_nulls_not_distinct=True,
        ),
        Index("idx_cart_lines_owner", "owner_kind", "owner_key"),
    )

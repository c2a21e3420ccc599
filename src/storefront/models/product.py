"""Product, variant and per-color image models."""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.brand import Brand
    from storefront.models.campaign import Campaign


class Product(Base, TimestampMixin):
    """Product model representing a merchandise item."""

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )
    campaign_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("campaigns.campaign_id", ondelete="SET NULL"),
        nullable=True,
    )
    brand_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("brands.brand_id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    campaign: Mapped[Optional["Campaign"]] = relationship("Campaign", back_populates="products")
    brand: Mapped[Optional["Brand"]] = relationship("Brand")
    variants: Mapped[List["ProductVariant"]] = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.size",
    )
    color_images: Mapped[List["ProductColorImage"]] = relationship(
        "ProductColorImage",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_product_price_positive"),
        Index("idx_products_campaign", "campaign_id"),
    )

    @property
    def colors(self) -> list[str]:
        """Distinct variant colors in first-seen order (requires variants loaded)."""
        seen: list[str] = []
        for variant in self.variants:
            if variant.color and variant.color not in seen:
                seen.append(variant.color)
        return seen


class ProductVariant(Base):
    """A size/color offer of a product with its own (mutable) price."""

    __tablename__ = "product_variants"

    variant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
    )
    size: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    color: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )

    product: Mapped["Product"] = relationship("Product", back_populates="variants")

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_variant_price_positive"),
        Index("idx_variants_product", "product_id"),
    )


class ProductColorImage(Base):
    __tablename__ = "product_color_images"

    image_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.product_id", ondelete="CASCADE"),
        nullable=False,
    )
    color: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    image_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    thumbnail_path: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    product: Mapped["Product"] = relationship("Product", back_populates="color_images")

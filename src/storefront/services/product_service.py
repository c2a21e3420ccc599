"""Product service: catalog CRUD and the catalog read API used by carts."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import NotFoundError, ValidationFailedError
from storefront.models.base import utcnow
from storefront.models.campaign import Campaign, CampaignStatus, Gender
from storefront.models.cart import CartLine
from storefront.models.order import OrderLine, PaymentStatus
from storefront.models.product import Product, ProductColorImage, ProductVariant
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.campaign_service import is_campaign_active


@dataclass(frozen=True)
class VariantInfo:
    """What the cart and order workflow need to know about a variant."""

    variant_id: UUID
    product_id: UUID
    product_name: str
    unit_price: Decimal
    size: str
    color: str | None
    available_colors: tuple[str, ...]
    campaign_start: datetime | None
    campaign_end: datetime | None
    visible: bool


class ProductService:
    """Service class for product operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _visible_filter(self, query, now: datetime):
        return (
            query.join(Campaign, Product.campaign_id == Campaign.campaign_id)
            .where(Campaign.status == CampaignStatus.ACTIVE.value)
            .where(Campaign.start_time <= now)
            .where(Campaign.end_time >= now)
        )

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        campaign_id: UUID | None = None,
        visible_only: bool = True,
    ) -> tuple[list[Product], int]:
        """Get products with pagination.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            campaign_id: Restrict to one campaign
            visible_only: Only products whose campaign is currently active

        Returns:
            Tuple of (products list, total count)
        """
        now = utcnow()
        count_query = select(func.count(Product.product_id))
        query = select(Product).options(
            selectinload(Product.variants), selectinload(Product.color_images)
        )
        if visible_only:
            count_query = self._visible_filter(count_query, now)
            query = self._visible_filter(query, now)
        if campaign_id is not None:
            count_query = count_query.where(Product.campaign_id == campaign_id)
            query = query.where(Product.campaign_id == campaign_id)

        count_result = await self.db.execute(count_query)
        total = count_result.scalar_one()

        result = await self.db.execute(
            query.order_by(Product.created_at.desc(), Product.name).offset(skip).limit(limit)
        )
        products = list(result.scalars().all())

        return products, total

    async def get_by_id(self, product_id: UUID, visible_only: bool = False) -> Product | None:
        """Get product by ID with variants, images and campaign loaded.

        Args:
            product_id: Product UUID
            visible_only: Treat products outside their campaign window as missing

        Returns:
            Product or None if not found
        """
        result = await self.db.execute(
            select(Product)
            .options(
                selectinload(Product.variants),
                selectinload(Product.color_images),
                selectinload(Product.campaign),
            )
            .where(Product.product_id == product_id)
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()
        if product is not None and visible_only and not is_campaign_active(product.campaign):
            return None
        return product

    async def create(self, product_data: ProductCreate) -> Product:
        """Create a product together with its variants and color images."""
        campaign = await self.db.get(Campaign, product_data.campaign_id)
        if campaign is None:
            raise ValidationFailedError(f"Campaign {product_data.campaign_id} does not exist")

        product = Product(
            name=product_data.name,
            description=product_data.description,
            price=product_data.price,
            campaign_id=product_data.campaign_id,
            brand_id=product_data.brand_id or campaign.brand_id,
            variants=[
                ProductVariant(size=v.size, color=v.color, price=v.price)
                for v in product_data.variants
            ],
            color_images=[
                ProductColorImage(
                    color=image.color,
                    image_path=image.image_path,
                    thumbnail_path=image.thumbnail_path,
                )
                for image in product_data.color_images
            ],
        )

        self.db.add(product)
        await self.db.commit()
        return await self.get_by_id(product.product_id)

    async def update(self, product_id: UUID, product_data: ProductUpdate) -> Product:
        """Apply a partial update; null fields are left unchanged.

        Variant prices change for future cart reads only.
        """
        product = await self.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        fields = {
            field: value
            for field, value in product_data.model_dump(
                exclude_unset=True, exclude={"variant_prices"}
            ).items()
            if value is not None
        }
        if "campaign_id" in fields:
            if await self.db.get(Campaign, fields["campaign_id"]) is None:
                raise ValidationFailedError(f"Campaign {fields['campaign_id']} does not exist")
        for field, value in fields.items():
            setattr(product, field, value)

        variants = {v.variant_id: v for v in product.variants}
        for variant_id, price in product_data.variant_prices.items():
            if variant_id not in variants:
                raise ValidationFailedError(f"Variant {variant_id} does not belong to product")
            if price < 0:
                raise ValidationFailedError("Variant price must not be negative")
            variants[variant_id].price = price

        await self.db.commit()
        return await self.get_by_id(product_id)

    async def delete(self, product_id: UUID) -> None:
        """Delete a product, its variants and any cart lines holding it.

        Products that appear on orders are kept for order history.
        """
        product = await self.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        ordered = await self.db.execute(
            select(func.count(OrderLine.line_id)).where(OrderLine.product_id == product_id)
        )
        if ordered.scalar_one() > 0:
            raise ValidationFailedError("Product has orders and cannot be deleted")

        await self.db.execute(delete(CartLine).where(CartLine.product_id == product_id))
        await self.db.delete(product)
        await self.db.commit()

    async def delete_variant(self, product_id: UUID, variant_id: UUID) -> None:
        """Delete a variant; order lines keep their snapshot and lose the reference."""
        variant = await self.db.get(ProductVariant, variant_id)
        if variant is None or variant.product_id != product_id:
            raise NotFoundError(f"Variant {variant_id} not found")

        await self.db.execute(delete(CartLine).where(CartLine.variant_id == variant_id))
        await self.db.execute(
            update(OrderLine)
            .where(OrderLine.variant_id == variant_id)
            .values(variant_id=None)
        )
        await self.db.delete(variant)
        await self.db.commit()

    async def get_recommended(self, gender: Gender, limit: int = 3) -> list[Product]:
        """A random pick of visible products from campaigns for one gender."""
        now = utcnow()
        query = self._visible_filter(
            select(Product).options(
                selectinload(Product.variants), selectinload(Product.color_images)
            ),
            now,
        ).where(Campaign.gender == gender.value)

        result = await self.db.execute(query.order_by(func.random()).limit(limit))
        return list(result.scalars().all())

    async def get_units_sold(self, product_ids: list[UUID]) -> dict[UUID, int]:
        """Units ordered per product over non-cancelled order lines."""
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(OrderLine.product_id, func.sum(OrderLine.quantity))
            .where(OrderLine.product_id.in_(product_ids))
            .where(OrderLine.payment_status != PaymentStatus.CANCELLED.value)
            .group_by(OrderLine.product_id)
        )
        return {product_id: int(units or 0) for product_id, units in result.all()}

    # ==================== Catalog read API ====================

    async def get_variant_infos(self, variant_ids: list[UUID]) -> dict[UUID, VariantInfo]:
        """Price, colors and campaign window of several variants, keyed by variant id.

        Variants that no longer exist are absent from the result.
        """
        if not variant_ids:
            return {}

        now = utcnow()
        result = await self.db.execute(
            select(ProductVariant)
            .options(
                selectinload(ProductVariant.product).selectinload(Product.variants),
                selectinload(ProductVariant.product).selectinload(Product.campaign),
            )
            .where(ProductVariant.variant_id.in_(variant_ids))
            .execution_options(populate_existing=True)
        )

        infos = {}
        for variant in result.scalars().all():
            product = variant.product
            campaign = product.campaign
            infos[variant.variant_id] = VariantInfo(
                variant_id=variant.variant_id,
                product_id=product.product_id,
                product_name=product.name,
                unit_price=variant.price,
                size=variant.size,
                color=variant.color,
                available_colors=tuple(product.colors),
                campaign_start=campaign.start_time if campaign else None,
                campaign_end=campaign.end_time if campaign else None,
                visible=is_campaign_active(campaign, now),
            )
        return infos

    async def get_variant_info(self, variant_id: UUID) -> VariantInfo | None:
        """Price, colors and campaign window of one variant."""
        infos = await self.get_variant_infos([variant_id])
        return infos.get(variant_id)

    async def is_product_visible(self, product_id: UUID) -> bool:
        """Whether the product exists and its campaign is active now."""
        result = await self.db.execute(
            select(Campaign)
            .join(Product, Product.campaign_id == Campaign.campaign_id)
            .where(Product.product_id == product_id)
            .execution_options(populate_existing=True)
        )
        return is_campaign_active(result.scalar_one_or_none())

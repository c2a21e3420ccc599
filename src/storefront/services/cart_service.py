"""Cart service: per-owner cart lines, validity cleanup and anonymous cart merge."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import (
    ForbiddenError,
    InvalidQuantityError,
    NotFoundError,
    ValidationFailedError,
)
from storefront.models.cart import CartLine
from storefront.models.product import Product
from storefront.schemas.cart import CartLineResponse, CartResponse
from storefront.services.product_service import ProductService

logger = logging.getLogger(__name__)

MAX_SESSION_ID_LENGTH = 64


class OwnerKind(str, Enum):
    USER = "user"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class CartOwner:
    """Identity a cart belongs to: an authenticated user or an anonymous session."""

    kind: OwnerKind
    key: str

    @classmethod
    def for_user(cls, user_id: UUID) -> "CartOwner":
        return cls(OwnerKind.USER, str(user_id))

    @classmethod
    def for_session(cls, session_id: str) -> "CartOwner":
        session_id = session_id.strip()
        if not session_id or len(session_id) > MAX_SESSION_ID_LENGTH:
            raise ValidationFailedError("Invalid cart session id")
        return cls(OwnerKind.ANONYMOUS, session_id)

    @property
    def is_authenticated(self) -> bool:
        return self.kind == OwnerKind.USER

    @property
    def user_id(self) -> UUID:
        if not self.is_authenticated:
            raise ForbiddenError("An authenticated user is required")
        return UUID(self.key)


def owner_clause(owner: CartOwner):
    return and_(CartLine.owner_kind == owner.kind.value, CartLine.owner_key == owner.key)


class CartService:
    """Service class for cart operations.

    Every operation is scoped to one ``CartOwner``; anonymous and
    authenticated carts share the same code path.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.catalog = ProductService(db)

    async def get_cart(self, owner: CartOwner) -> CartResponse:
        """Return the owner's cart, deleting lines that are no longer orderable.

        A line is dropped when its product's campaign is not active or its
        variant no longer exists. The deletion is committed so that repeated
        calls return the same result.
        """
        result = await self.db.execute(
            select(CartLine)
            .where(owner_clause(owner))
            .order_by(CartLine.created_at, CartLine.line_id)
            .execution_options(populate_existing=True)
        )
        cart_lines = list(result.scalars().all())
        infos = await self.catalog.get_variant_infos([line.variant_id for line in cart_lines])

        lines: list[CartLineResponse] = []
        expired: list[UUID] = []
        for line in cart_lines:
            info = infos.get(line.variant_id)
            if info is None or info.product_id != line.product_id or not info.visible:
                expired.append(line.line_id)
                continue
            lines.append(
                CartLineResponse(
                    line_id=line.line_id,
                    product_id=info.product_id,
                    variant_id=info.variant_id,
                    product_name=info.product_name,
                    size=info.size,
                    color=line.color,
                    unit_price=info.unit_price,
                    quantity=line.quantity,
                    subtotal=info.unit_price * line.quantity,
                )
            )

        if expired:
            await self.db.execute(delete(CartLine).where(CartLine.line_id.in_(expired)))
            await self.db.commit()
            logger.info(f"Removed {len(expired)} expired cart lines for {owner.kind.value} cart")

        return CartResponse(
            lines=lines,
            total=sum((line.subtotal for line in lines), Decimal("0")),
            item_count=sum(line.quantity for line in lines),
            removed_line_ids=expired,
        )

    async def add_line(
        self,
        owner: CartOwner,
        product_id: UUID,
        variant_id: UUID,
        color: str | None = None,
        quantity: int = 1,
    ) -> CartResponse:
        """Add a variant to the cart, incrementing an existing matching line."""
        try:
            await self._add(owner, product_id, variant_id, color, quantity)
            await self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the same line first
            await self.db.rollback()
            await self._add(owner, product_id, variant_id, color, quantity)
            await self.db.commit()

        return await self.get_cart(owner)

    async def remove_line(self, owner: CartOwner, line_id: UUID) -> CartResponse:
        line = await self._owned_line(owner, line_id)
        await self.db.delete(line)
        await self.db.commit()
        return await self.get_cart(owner)

    async def update_quantity(self, owner: CartOwner, line_id: UUID, quantity: int) -> CartResponse:
        if quantity < 1:
            raise InvalidQuantityError("Quantity must be at least 1")
        line = await self._owned_line(owner, line_id)
        line.quantity = quantity
        await self.db.commit()
        return await self.get_cart(owner)

    async def clear_cart(self, owner: CartOwner) -> None:
        await self.db.execute(delete(CartLine).where(owner_clause(owner)))
        await self.db.commit()

    async def merge_anonymous_cart(self, anonymous: CartOwner, owner: CartOwner) -> CartResponse:
        """Move an anonymous session's lines into an authenticated cart.

        Each line is applied with the same rules as ``add_line``; lines that
        can no longer be added are dropped. The anonymous lines are deleted in
        the same commit, so calling this again for the same session is a no-op.
        """
        if anonymous.is_authenticated or not owner.is_authenticated:
            raise ValidationFailedError("Merge requires an anonymous source and a user target")

        result = await self.db.execute(
            select(CartLine).where(owner_clause(anonymous)).order_by(CartLine.created_at)
        )
        source = [
            (line.line_id, line.product_id, line.variant_id, line.color, line.quantity)
            for line in result.scalars().all()
        ]
        if not source:
            return await self.get_cart(owner)

        merged = 0
        for line_id, product_id, variant_id, color, quantity in source:
            try:
                await self._add(owner, product_id, variant_id, color, quantity)
                merged += 1
            except (NotFoundError, ValidationFailedError, InvalidQuantityError) as e:
                logger.info(f"Dropping anonymous cart line {line_id} during merge: {e}")

        await self.db.execute(
            delete(CartLine).where(CartLine.line_id.in_([item[0] for item in source]))
        )
        await self.db.commit()
        logger.info(f"Merged {merged}/{len(source)} anonymous cart lines into user {owner.key}")

        return await self.get_cart(owner)

    async def _add(
        self,
        owner: CartOwner,
        product_id: UUID,
        variant_id: UUID,
        color: str | None,
        quantity: int,
    ) -> CartLine:
        if quantity < 1:
            raise InvalidQuantityError("Quantity must be at least 1")

        if await self.db.get(Product, product_id) is None:
            raise NotFoundError(f"Product {product_id} not found")
        if not await self.catalog.is_product_visible(product_id):
            raise ValidationFailedError(f"Product {product_id} is not currently available")

        info = await self.catalog.get_variant_info(variant_id)
        if info is None or info.product_id != product_id:
            raise ValidationFailedError(f"Variant {variant_id} does not belong to product {product_id}")

        if info.color is not None:
            if color is None:
                color = info.color
            elif color != info.color:
                raise ValidationFailedError(f"Color '{color}' is not offered by this variant")
        elif color is not None and info.available_colors and color not in info.available_colors:
            raise ValidationFailedError(f"Color '{color}' is not available for this product")

        query = select(CartLine).where(
            owner_clause(owner),
            CartLine.product_id == product_id,
            CartLine.variant_id == variant_id,
        )
        if color is None:
            query = query.where(CartLine.color.is_(None))
        else:
            query = query.where(CartLine.color == color)
        existing = (await self.db.execute(query)).scalar_one_or_none()

        if existing is not None:
            existing.quantity += quantity
            line = existing
        else:
            line = CartLine(
                owner_kind=owner.kind.value,
                owner_key=owner.key,
                product_id=product_id,
                variant_id=variant_id,
                color=color,
                quantity=quantity,
            )
            self.db.add(line)

        await self.db.flush()
        return line

    async def _owned_line(self, owner: CartOwner, line_id: UUID) -> CartLine:
        result = await self.db.execute(
            select(CartLine).where(CartLine.line_id == line_id, owner_clause(owner))
        )
        line = result.scalar_one_or_none()
        if line is None:
            raise NotFoundError(f"Cart line {line_id} not found")
        return line

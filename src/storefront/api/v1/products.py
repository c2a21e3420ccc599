"""Product catalog API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import AdminUser, DbSession
from storefront.core.exceptions import NotFoundError
from storefront.models.campaign import Gender
from storefront.schemas.product import (
    AdminProductListResponse,
    AdminProductResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: DbSession,
    campaign_id: UUID | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get products currently on sale, optionally for one campaign."""
    service = ProductService(db)
    products, total = await service.get_all(skip=skip, limit=limit, campaign_id=campaign_id)
    return ProductListResponse(products=products, total=total)


@router.get("/recommended/{gender}", response_model=list[ProductResponse])
async def list_recommended_products(
    gender: Gender,
    db: DbSession,
    limit: int = Query(3, ge=1, le=12),
):
    """Get a random handful of products on sale for one gender."""
    return await ProductService(db).get_recommended(gender, limit=limit)


@router.get("/admin", response_model=AdminProductListResponse)
async def list_all_products(
    db: DbSession,
    admin: AdminUser,
    campaign_id: UUID | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get every product regardless of campaign window, with units sold (admin only)."""
    service = ProductService(db)
    products, total = await service.get_all(
        skip=skip, limit=limit, campaign_id=campaign_id, visible_only=False
    )
    units_sold = await service.get_units_sold([p.product_id for p in products])
    return AdminProductListResponse(
        products=[
            AdminProductResponse.model_validate(p).model_copy(
                update={"units_sold": units_sold.get(p.product_id, 0)}
            )
            for p in products
        ],
        total=total,
    )


@router.get("/admin/{product_id}", response_model=ProductResponse)
async def get_any_product(product_id: UUID, db: DbSession, admin: AdminUser):
    """Get a product by ID even when it is not on sale (admin only)."""
    product = await ProductService(db).get_by_id(product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: DbSession):
    """Get a product by ID; products outside their campaign window are not found."""
    product = await ProductService(db).get_by_id(product_id, visible_only=True)
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product_data: ProductCreate, db: DbSession, admin: AdminUser):
    """Create a new product with its variants and color images (admin only)."""
    return await ProductService(db).create(product_data)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    product_data: ProductUpdate,
    db: DbSession,
    admin: AdminUser,
):
    """Update product fields and variant prices (admin only).

    Existing orders keep the price captured when they were placed.
    """
    return await ProductService(db).update(product_id, product_data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: UUID, db: DbSession, admin: AdminUser):
    """Delete a product that has never been ordered (admin only)."""
    await ProductService(db).delete(product_id)


@router.delete("/{product_id}/variants/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_variant(product_id: UUID, variant_id: UUID, db: DbSession, admin: AdminUser):
    """Delete one variant of a product (admin only)."""
    await ProductService(db).delete_variant(product_id, variant_id)

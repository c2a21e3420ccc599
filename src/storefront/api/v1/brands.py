"""Brand API endpoints."""

from fastapi import APIRouter, status

from storefront.api.deps import AdminUser, DbSession
from storefront.schemas.brand import BrandCreate, BrandResponse
from storefront.services.brand_service import BrandService

router = APIRouter()


@router.get("", response_model=list[BrandResponse])
async def list_brands(db: DbSession):
    """Get all brands ordered by name."""
    return await BrandService(db).get_all()


@router.post("", response_model=BrandResponse, status_code=status.HTTP_201_CREATED)
async def create_brand(brand_data: BrandCreate, db: DbSession, admin: AdminUser):
    """Create a brand (admin only). Names are unique."""
    return await BrandService(db).create(brand_data)

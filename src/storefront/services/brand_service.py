"""Brand service."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ValidationFailedError
from storefront.models.brand import Brand
from storefront.schemas.brand import BrandCreate


class BrandService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> list[Brand]:
        result = await self.db.execute(select(Brand).order_by(Brand.name))
        return list(result.scalars().all())

    async def create(self, brand_data: BrandCreate) -> Brand:
        existing = await self.db.execute(select(Brand).where(Brand.name == brand_data.name))
        if existing.scalar_one_or_none() is not None:
            raise ValidationFailedError(f"Brand '{brand_data.name}' already exists")

        brand = Brand(name=brand_data.name)
        self.db.add(brand)
        await self.db.commit()
        return brand

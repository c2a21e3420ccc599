"""Campaign service: CRUD, unique naming and activity window rules."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import NotFoundError, ValidationFailedError
from storefront.models.base import utcnow
from storefront.models.brand import Brand
from storefront.models.campaign import Campaign, CampaignStatus
from storefront.models.product import Product
from storefront.schemas.campaign import CampaignCreate


def to_naive_utc(value: datetime) -> datetime:
    """Convert to the naive UTC form stored in TIMESTAMP WITHOUT TIME ZONE columns."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_campaign_active(campaign: Campaign | None, now: datetime | None = None) -> bool:
    """A campaign is active when not paused/finished and now is within [start, end]."""
    if campaign is None:
        return False
    if campaign.status != CampaignStatus.ACTIVE.value:
        return False
    now = to_naive_utc(now) if now is not None else utcnow()
    return to_naive_utc(campaign.start_time) <= now <= to_naive_utc(campaign.end_time)


def campaign_display_status(campaign: Campaign, now: datetime | None = None) -> str:
    """Status shown to administrators: pending, active, ended, paused or finished."""
    if campaign.status != CampaignStatus.ACTIVE.value:
        return campaign.status
    now = to_naive_utc(now) if now is not None else utcnow()
    if now < to_naive_utc(campaign.start_time):
        return "pending"
    elif now > to_naive_utc(campaign.end_time):
        return "ended"
    else:
        return "active"


class CampaignService:
    """Service class for campaign operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self, skip: int = 0, limit: int = 100) -> tuple[list[Campaign], int]:
        """Get all campaigns with pagination, newest first.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (campaigns list, total count)
        """
        count_result = await self.db.execute(select(func.count(Campaign.campaign_id)))
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Campaign)
            .options(selectinload(Campaign.brand))
            .order_by(Campaign.start_time.desc())
            .offset(skip)
            .limit(limit)
        )
        campaigns = list(result.scalars().all())

        return campaigns, total

    async def get_active(self) -> list[Campaign]:
        """Get campaigns currently open on the storefront."""
        now = utcnow()
        result = await self.db.execute(
            select(Campaign)
            .options(selectinload(Campaign.brand))
            .where(Campaign.status == CampaignStatus.ACTIVE.value)
            .where(Campaign.start_time <= now)
            .where(Campaign.end_time >= now)
            .order_by(Campaign.end_time.asc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, campaign_id: UUID) -> Campaign | None:
        """Get campaign by ID with brand loaded."""
        result = await self.db.execute(
            select(Campaign)
            .options(selectinload(Campaign.brand))
            .where(Campaign.campaign_id == campaign_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_products(self, campaign_id: UUID) -> list[Product]:
        """Get every product of a campaign regardless of visibility."""
        if await self.get_by_id(campaign_id) is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        result = await self.db.execute(
            select(Product)
            .options(selectinload(Product.variants), selectinload(Product.color_images))
            .where(Product.campaign_id == campaign_id)
            .order_by(Product.name)
        )
        return list(result.scalars().all())

    async def create(self, campaign_data: CampaignCreate) -> Campaign:
        """Create a new campaign.

        The name is made unique by appending " - 1", " - 2", ... when taken.
        """
        await self._check_brand(campaign_data.brand_id)

        campaign = Campaign(
            name=await self._unique_name(campaign_data.name),
            brand_id=campaign_data.brand_id,
            gender=campaign_data.gender.value,
            start_time=to_naive_utc(campaign_data.start_time),
            end_time=to_naive_utc(campaign_data.end_time),
            status=campaign_data.status.value,
        )

        self.db.add(campaign)
        await self.db.commit()
        return await self.get_by_id(campaign.campaign_id)

    async def update(self, campaign_id: UUID, campaign_data: CampaignCreate) -> Campaign:
        """Replace a campaign's fields, keeping its name unique."""
        campaign = await self.get_by_id(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        await self._check_brand(campaign_data.brand_id)

        campaign.name = await self._unique_name(campaign_data.name, exclude_id=campaign_id)
        campaign.brand_id = campaign_data.brand_id
        campaign.gender = campaign_data.gender.value
        campaign.start_time = to_naive_utc(campaign_data.start_time)
        campaign.end_time = to_naive_utc(campaign_data.end_time)
        campaign.status = campaign_data.status.value

        await self.db.commit()
        return await self.get_by_id(campaign_id)

    async def _check_brand(self, brand_id: UUID | None) -> None:
        if brand_id is None:
            return
        brand = await self.db.get(Brand, brand_id)
        if brand is None:
            raise ValidationFailedError(f"Brand {brand_id} does not exist")

    async def _unique_name(self, base_name: str, exclude_id: UUID | None = None) -> str:
        name = base_name
        counter = 1
        while await self._name_taken(name, exclude_id):
            name = f"{base_name} - {counter}"
            counter += 1
        return name

    async def _name_taken(self, name: str, exclude_id: UUID | None) -> bool:
        query = select(func.count(Campaign.campaign_id)).where(Campaign.name == name)
        if exclude_id is not None:
            query = query.where(Campaign.campaign_id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

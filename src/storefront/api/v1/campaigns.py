"""Campaign management API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import AdminUser, DbSession
from storefront.core.exceptions import NotFoundError
from storefront.models.campaign import Campaign
from storefront.schemas.campaign import CampaignCreate, CampaignListResponse, CampaignResponse
from storefront.schemas.order import CampaignOrdersResponse, CampaignSalesResponse
from storefront.schemas.product import ProductResponse
from storefront.services.campaign_service import CampaignService, campaign_display_status
from storefront.services.order_service import OrderService

router = APIRouter()


def build_campaign_response(campaign: Campaign) -> CampaignResponse:
    return CampaignResponse(
        campaign_id=campaign.campaign_id,
        name=campaign.name,
        brand_id=campaign.brand_id,
        brand_name=campaign.brand.name if campaign.brand else None,
        gender=campaign.gender,
        start_time=campaign.start_time,
        end_time=campaign.end_time,
        status=campaign_display_status(campaign),
        created_at=campaign.created_at,
    )


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(
    db: DbSession,
    admin: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get all campaigns with their display status (admin only)."""
    service = CampaignService(db)
    campaigns, total = await service.get_all(skip=skip, limit=limit)
    return CampaignListResponse(
        campaigns=[build_campaign_response(c) for c in campaigns],
        total=total,
    )


@router.get("/active", response_model=CampaignListResponse)
async def list_active_campaigns(db: DbSession):
    """Get campaigns currently open on the storefront."""
    campaigns = await CampaignService(db).get_active()
    return CampaignListResponse(
        campaigns=[build_campaign_response(c) for c in campaigns],
        total=len(campaigns),
    )


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(campaign_id: UUID, db: DbSession):
    """Get campaign by ID."""
    campaign = await CampaignService(db).get_by_id(campaign_id)
    if not campaign:
        raise NotFoundError("Campaign not found")
    return build_campaign_response(campaign)


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
async def create_campaign(campaign_data: CampaignCreate, db: DbSession, admin: AdminUser):
    """Create a new campaign (admin only).

    A taken name gets a " - N" suffix.
    """
    campaign = await CampaignService(db).create(campaign_data)
    return build_campaign_response(campaign)


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: UUID,
    campaign_data: CampaignCreate,
    db: DbSession,
    admin: AdminUser,
):
    """Replace a campaign's fields (admin only)."""
    campaign = await CampaignService(db).update(campaign_id, campaign_data)
    return build_campaign_response(campaign)


@router.get("/{campaign_id}/products", response_model=list[ProductResponse])
async def list_campaign_products(campaign_id: UUID, db: DbSession, admin: AdminUser):
    """Get every product of a campaign (admin only)."""
    return await CampaignService(db).get_products(campaign_id)


@router.get("/{campaign_id}/orders", response_model=CampaignOrdersResponse)
async def list_campaign_orders(campaign_id: UUID, db: DbSession, admin: AdminUser):
    """Get orders containing products of this campaign (admin only)."""
    return await OrderService(db).get_campaign_orders(campaign_id)


@router.get("/{campaign_id}/sales", response_model=CampaignSalesResponse)
async def get_campaign_sales(campaign_id: UUID, db: DbSession, admin: AdminUser):
    """Revenue and units sold for this campaign, cancelled lines excluded (admin only)."""
    return await OrderService(db).get_sales_by_campaign(campaign_id)

"""Campaign schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from storefront.models.campaign import CampaignStatus, Gender


class CampaignCreate(BaseModel):
    """Schema for campaign creation and full update requests."""

    name: str = Field(..., min_length=1, max_length=240)
    brand_id: UUID | None = None
    gender: Gender = Gender.FEMALE
    start_time: datetime
    end_time: datetime
    status: CampaignStatus = CampaignStatus.ACTIVE

    @model_validator(mode="after")
    def check_window(self) -> "CampaignCreate":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class CampaignResponse(BaseModel):
    """Schema for campaign response.

    ``status`` is the display status: pending, active, ended, paused or finished.
    """

    campaign_id: UUID
    name: str
    brand_id: UUID | None
    brand_name: str | None = None
    gender: str
    start_time: datetime
    end_time: datetime
    status: str
    created_at: datetime


class CampaignListResponse(BaseModel):
    """Schema for campaign list response."""

    campaigns: list[CampaignResponse]
    total: int

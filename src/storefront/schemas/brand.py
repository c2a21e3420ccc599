"""Brand schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


class BrandResponse(BaseModel):
    brand_id: UUID
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}

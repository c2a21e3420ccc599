"""Campaign model: bounds the visibility window of its products."""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.brand import Brand
    from storefront.models.product import Product


class Gender(str, Enum):
    FEMALE = "female"
    MALE = "male"


class CampaignStatus(str, Enum):
    """Administrative status; paused and finished campaigns hide their products."""

    ACTIVE = "active"
    PAUSED = "paused"
    FINISHED = "finished"


class Campaign(Base, TimestampMixin):
    """Campaign model representing a sale window for a set of products."""

    __tablename__ = "campaigns"

    campaign_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    brand_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("brands.brand_id", ondelete="SET NULL"),
        nullable=True,
    )
    gender: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=Gender.FEMALE.value,
    )
    start_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
    )
    end_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CampaignStatus.ACTIVE.value,
    )

    # Relationships
    brand: Mapped[Optional["Brand"]] = relationship("Brand", back_populates="campaigns")
    products: Mapped[List["Product"]] = relationship("Product", back_populates="campaign")

    __table_args__ = (
        CheckConstraint("end_time >= start_time", name="chk_campaign_time"),
        Index("idx_campaigns_time", "start_time", "end_time"),
    )

"""Brand model."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.campaign import Campaign


class Brand(Base, TimestampMixin):
    __tablename__ = "brands"

    brand_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(150),
        unique=True,
        nullable=False,
    )

    campaigns: Mapped[List["Campaign"]] = relationship("Campaign", back_populates="brand")

"""Customer feedback model."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database import Base
from storefront.models.base import TimestampMixin

if TYPE_CHECKING:
    from storefront.models.user import User


class Feedback(Base, TimestampMixin):
    __tablename__ = "feedback"

    feedback_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    # pending until an administrator approves it
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )

    user: Mapped["User"] = relationship("User", back_populates="feedback")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_feedback_user"),
    )

"""Feedback service: one entry per user, visible publicly once approved."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError
from storefront.models.feedback import Feedback

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"


class FeedbackService:
    """Service class for feedback operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_user(self, user_id: UUID) -> Feedback | None:
        result = await self.db.execute(select(Feedback).where(Feedback.user_id == user_id))
        return result.scalar_one_or_none()

    async def submit(self, user_id: UUID, content: str) -> Feedback:
        """Create or replace the user's feedback.

        Any edit puts the feedback back into moderation.
        """
        feedback = await self.get_for_user(user_id)
        if feedback is None:
            feedback = Feedback(user_id=user_id, content=content, status=PENDING)
            self.db.add(feedback)
        else:
            feedback.content = content
            feedback.status = PENDING

        await self.db.commit()
        await self.db.refresh(feedback)
        return feedback

    async def get_approved(self, skip: int = 0, limit: int = 100) -> tuple[list[Feedback], int]:
        return await self._list(skip, limit, status=APPROVED)

    async def get_all(self, skip: int = 0, limit: int = 100) -> tuple[list[Feedback], int]:
        return await self._list(skip, limit)

    async def approve(self, feedback_id: UUID) -> Feedback:
        feedback = await self.db.get(Feedback, feedback_id)
        if feedback is None:
            raise NotFoundError(f"Feedback {feedback_id} not found")
        feedback.status = APPROVED
        await self.db.commit()
        await self.db.refresh(feedback)
        logger.info(f"Feedback {feedback_id} approved")
        return feedback

    async def _list(
        self, skip: int, limit: int, status: str | None = None
    ) -> tuple[list[Feedback], int]:
        count_query = select(func.count(Feedback.feedback_id))
        query = select(Feedback)
        if status is not None:
            count_query = count_query.where(Feedback.status == status)
            query = query.where(Feedback.status == status)

        total = (await self.db.execute(count_query)).scalar_one()
        result = await self.db.execute(
            query.order_by(Feedback.updated_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

"""Tests for customer feedback moderation."""

from uuid import uuid4

import pytest

from storefront.core.exceptions import NotFoundError
from storefront.services.feedback_service import FeedbackService


class TestFeedbackService:

    @pytest.mark.asyncio
    async def test_submit_and_approve(self, db_session, customer):
        service = FeedbackService(db_session)

        feedback = await service.submit(customer.user_id, "Entrega rápida!")
        assert feedback.status == "pending"
        assert (await service.get_approved())[1] == 0

        await service.approve(feedback.feedback_id)

        approved, total = await service.get_approved()
        assert total == 1
        assert approved[0].content == "Entrega rápida!"

    @pytest.mark.asyncio
    async def test_edit_returns_to_pending(self, db_session, customer):
        service = FeedbackService(db_session)
        feedback = await service.submit(customer.user_id, "Bom")
        await service.approve(feedback.feedback_id)

        edited = await service.submit(customer.user_id, "Muito bom")

        assert edited.feedback_id == feedback.feedback_id
        assert edited.status == "pending"
        assert edited.content == "Muito bom"
        assert (await service.get_approved())[1] == 0
        assert (await service.get_all())[1] == 1

    @pytest.mark.asyncio
    async def test_approve_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            await FeedbackService(db_session).approve(uuid4())

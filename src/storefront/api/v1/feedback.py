"""Customer feedback API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from storefront.api.deps import AdminUser, CurrentUser, DbSession
from storefront.core.exceptions import NotFoundError
from storefront.schemas.feedback import FeedbackCreate, FeedbackListResponse, FeedbackResponse
from storefront.services.feedback_service import FeedbackService

router = APIRouter()


@router.get("", response_model=FeedbackListResponse)
async def list_approved_feedback(
    db: DbSession,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get approved feedback."""
    feedback, total = await FeedbackService(db).get_approved(skip=skip, limit=limit)
    return FeedbackListResponse(feedback=feedback, total=total)


@router.get("/me", response_model=FeedbackResponse)
async def get_my_feedback(current_user: CurrentUser, db: DbSession):
    feedback = await FeedbackService(db).get_for_user(current_user.user_id)
    if feedback is None:
        raise NotFoundError("No feedback submitted")
    return feedback


@router.put("/me", response_model=FeedbackResponse)
async def submit_feedback(feedback_data: FeedbackCreate, current_user: CurrentUser, db: DbSession):
    """Create or edit the current user's feedback; it awaits approval again."""
    return await FeedbackService(db).submit(current_user.user_id, feedback_data.content)


@router.get("/admin", response_model=FeedbackListResponse)
async def list_all_feedback(
    db: DbSession,
    admin: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get all feedback including pending (admin only)."""
    feedback, total = await FeedbackService(db).get_all(skip=skip, limit=limit)
    return FeedbackListResponse(feedback=feedback, total=total)


@router.post("/{feedback_id}/approve", response_model=FeedbackResponse)
async def approve_feedback(feedback_id: UUID, db: DbSession, admin: AdminUser):
    """Approve feedback for public display (admin only)."""
    return await FeedbackService(db).approve(feedback_id)

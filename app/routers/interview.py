"""
Interview routes
Feedback retrieval for finished interviews
"""

from fastapi import APIRouter, Depends
from supabase import Client

from app.db.client import get_supabase_client
from app.schemas.user import CurrentUser
from app.utils.auth import get_current_user
from app.utils.database import get_feedback_by_interview
from app.utils.exceptions import NotFoundError

router = APIRouter(prefix="/api/interview", tags=["interview"])


@router.get("/{interview_id}/feedback")
async def get_interview_feedback(
    interview_id: str,
    user: CurrentUser = Depends(get_current_user),
    supabase: Client = Depends(get_supabase_client)
):
    """Get the signed-in user's stored feedback for an interview"""
    feedback = await get_feedback_by_interview(supabase, interview_id, user.id)
    if feedback is None:
        raise NotFoundError("Feedback for interview", interview_id)
    return feedback

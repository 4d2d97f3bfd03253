"""
Resume routes
Handles resume upload and analysis retrieval
"""

import logging
import traceback

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.schemas.resume import ResumeData, ResumeUploadResponse
from app.schemas.user import CurrentUser
from app.services.resume_upload import resume_upload_service
from app.utils.auth import get_current_user
from app.utils.exceptions import AppException
from app.utils.file_utils import resolve_content_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume", tags=["resume"])


@router.post("/upload", response_model=ResumeUploadResponse)
async def upload_resume(
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Upload a resume (PDF, DOCX or TXT), extract its text and analyze it
    The analysis is kept under the returned session_id for starting the interview
    """
    try:
        file_name = file.filename or "resume"
        content_type = resolve_content_type(file_name, file.content_type)
        logger.info(f"[RESUME][UPLOAD] Received {file_name} ({content_type})")

        content = await file.read()
        resume = resume_upload_service.parse_resume(file_name, content_type, content)
        session_id = resume_upload_service.store(resume, owner_id=user.id)

        return ResumeUploadResponse(
            success=True,
            message="Resume uploaded and analyzed successfully!",
            session_id=session_id,
            resume=resume,
        )
    except AppException:
        raise
    except Exception as e:
        logger.error(f"[RESUME][UPLOAD] Unexpected error: {str(e)}")
        logger.error(f"[RESUME][UPLOAD] Traceback: {traceback.format_exc()}")
        raise HTTPException(status_code=500, detail="Failed to parse resume. Please try another file.")


@router.get("/analysis/{session_id}", response_model=ResumeData)
async def get_resume_analysis(session_id: str, user: CurrentUser = Depends(get_current_user)):
    """Get resume analysis data by session ID"""
    return resume_upload_service.get(session_id, owner_id=user.id)


@router.delete("/analysis/{session_id}")
async def discard_resume_analysis(session_id: str, user: CurrentUser = Depends(get_current_user)):
    """Forget an uploaded resume so a different one can be uploaded"""
    resume_upload_service.discard(session_id, owner_id=user.id)
    return {"success": True, "session_id": session_id}

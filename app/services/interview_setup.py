"""
Interview setup
Derives the interviewer agent configuration from the signed-in user and the uploaded resume
"""

from dataclasses import dataclass, field
from typing import List, Optional

from app.schemas.call import AgentType
from app.schemas.resume import ResumeData
from app.schemas.user import CurrentUser
from app.utils.exceptions import ValidationError

NOT_SPECIFIED = "NotSpecified"
DEFAULT_USER_NAME = "Unknown"
DEFAULT_USER_ID = "default_user_id"


@dataclass
class AgentProps:
    """Everything the call session needs to start the interviewer"""
    user_name: str
    user_id: str
    type: AgentType
    role: str = NOT_SPECIFIED
    level: str = NOT_SPECIFIED
    amount: str = "0"
    techstack: str = NOT_SPECIFIED
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    questions: List[str] = field(default_factory=list)
    resume_data: Optional[ResumeData] = None


def build_generate_props(user: Optional[CurrentUser], resume: Optional[ResumeData]) -> AgentProps:
    """
    Props for the question-generation call started from the interview page
    resume is None when the user skipped the upload
    """
    return AgentProps(
        user_name=(user.name if user else None) or DEFAULT_USER_NAME,
        user_id=(user.id if user else None) or DEFAULT_USER_ID,
        type=AgentType.GENERATE,
        role=f"Based on: {', '.join(resume.skills[:3])}" if resume else NOT_SPECIFIED,
        level=NOT_SPECIFIED,
        amount="0",
        techstack=", ".join(resume.skills) if resume and resume.skills else NOT_SPECIFIED,
        resume_data=resume,
    )


def build_interview_props(
    user: Optional[CurrentUser],
    interview_id: Optional[str],
    questions: List[str],
    resume: Optional[ResumeData] = None,
    feedback_id: Optional[str] = None,
) -> AgentProps:
    """Props for a prepared interview whose transcript is turned into feedback"""
    if not interview_id:
        raise ValidationError("interview_id is required for interview calls")

    return AgentProps(
        user_name=(user.name if user else None) or DEFAULT_USER_NAME,
        user_id=(user.id if user else None) or DEFAULT_USER_ID,
        type=AgentType.INTERVIEW,
        interview_id=interview_id,
        feedback_id=feedback_id,
        questions=list(questions),
        resume_data=resume,
    )

"""
Pydantic schemas for request/response validation
"""

from .user import CurrentUser

from .resume import (
    ExtractedResumeData,
    AtsScore,
    ResumeData,
    ResumeUploadResponse
)

from .call import (
    CallStatus,
    AgentType,
    SavedMessage,
    CallSessionCreateRequest,
    CallEventRequest,
    CallSessionResponse
)

from .feedback import (
    FEEDBACK_CATEGORIES,
    CategoryScore,
    Feedback,
    CreateFeedbackResult
)

__all__ = [
    # User schemas
    "CurrentUser",
    # Resume schemas
    "ExtractedResumeData",
    "AtsScore",
    "ResumeData",
    "ResumeUploadResponse",
    # Call schemas
    "CallStatus",
    "AgentType",
    "SavedMessage",
    "CallSessionCreateRequest",
    "CallEventRequest",
    "CallSessionResponse",
    # Feedback schemas
    "FEEDBACK_CATEGORIES",
    "CategoryScore",
    "Feedback",
    "CreateFeedbackResult"
]

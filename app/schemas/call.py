"""
Call-session schemas
Pydantic models for the voice interview call lifecycle
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class CallStatus(str, Enum):
    """Status of a voice interview call as last reported by the voice platform"""
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class AgentType(str, Enum):
    """
    generate: the platform workflow collects interview preferences
    interview: the assistant asks a prepared list of questions
    """
    GENERATE = "generate"
    INTERVIEW = "interview"


class SavedMessage(BaseModel):
    """One final transcript segment"""
    role: Literal["user", "system", "assistant"]
    content: str


class CallSessionCreateRequest(BaseModel):
    """
    Schema for creating a call session
    resume_session_id is the id returned by the resume upload; omit it to skip
    """
    type: AgentType = AgentType.GENERATE
    resume_session_id: Optional[str] = None
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    questions: List[str] = Field(default_factory=list)


class CallEventRequest(BaseModel):
    """A voice SDK event forwarded by the web client"""
    event: Literal["call-start", "call-end", "message", "speech-start", "speech-end", "error"]
    payload: Dict[str, Any] = Field(default_factory=dict)


class CallSessionResponse(BaseModel):
    """Current state of a call session"""
    session_id: str
    type: AgentType
    status: CallStatus
    user_name: str
    user_id: str
    role: str
    level: str
    amount: str
    techstack: str
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    call_id: Optional[str] = None
    is_speaking: bool = False
    last_message: str = ""
    messages: List[SavedMessage] = Field(default_factory=list)
    redirect_to: Optional[str] = None
    error: Optional[str] = None
    resume_file_name: Optional[str] = None
    ats_score: Optional[int] = None

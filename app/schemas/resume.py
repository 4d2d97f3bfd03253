"""
Resume-related schemas
Pydantic models for resume analysis and upload responses
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class ExtractedResumeData(BaseModel):
    """
    Raw analysis of resume text
    Lists are empty when nothing was found
    """
    skills: List[str] = Field(default_factory=list)
    experience: List[str] = Field(default_factory=list)
    education: List[str] = Field(default_factory=list)
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    summary: Optional[str] = None
    raw_text: Optional[str] = None


class AtsScore(BaseModel):
    """Heuristic ATS compatibility result"""
    score: int  # 0-100
    is_ats_friendly: bool
    suggestions: List[str] = Field(default_factory=list)


class ResumeData(BaseModel):
    """
    Analyzed resume as shown to the user and used as interview context
    Empty lists are replaced by a placeholder entry
    """
    file_name: str
    skills: List[str]
    experience: List[str]
    education: List[str]
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    is_ats_friendly: bool
    ats_score: int
    suggestions: List[str] = Field(default_factory=list)
    raw_text: str = ""


class ResumeUploadResponse(BaseModel):
    """Schema for resume upload response"""
    success: bool
    message: str
    session_id: str
    resume: ResumeData

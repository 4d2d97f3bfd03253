"""
Interview feedback schemas
"""

from pydantic import BaseModel, Field
from typing import List, Optional


FEEDBACK_CATEGORIES = [
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
]


class CategoryScore(BaseModel):
    """Score for one feedback category"""
    name: str
    score: int = Field(ge=0, le=100)
    comment: str = ""


class Feedback(BaseModel):
    """
    Feedback generated from an interview transcript
    """
    interview_id: str
    user_id: str
    total_score: int = Field(ge=0, le=100)
    category_scores: List[CategoryScore]
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    final_assessment: str = ""
    created_at: Optional[str] = None


class CreateFeedbackResult(BaseModel):
    success: bool
    feedback_id: Optional[str] = None

"""
Interview feedback generation using LangChain and OpenAI
Analyzes a call transcript and stores a feedback report in Supabase
"""

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from supabase import Client

from app.config.settings import settings
from app.db.client import get_supabase_client
from app.schemas.call import SavedMessage
from app.schemas.feedback import FEEDBACK_CATEGORIES, CategoryScore, CreateFeedbackResult, Feedback
from app.utils.database import save_feedback

logger = logging.getLogger(__name__)

FEEDBACK_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are a professional interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.

Score the candidate from 0 to 100 in these areas only:
- Communication Skills: Clarity, articulation, structured responses.
- Technical Knowledge: Understanding of key concepts for the role.
- Problem Solving: Ability to analyze problems and propose solutions.
- Cultural & Role Fit: Alignment with company values and job role.
- Confidence & Clarity: Confidence in responses, engagement, and clarity.

Return your analysis as a JSON object with this structure:
{{
    "total_score": <0-100>,
    "category_scores": [{{"name": "<category>", "score": <0-100>, "comment": "<comment>"}}, ...],
    "strengths": ["strength1", ...],
    "areas_for_improvement": ["area1", ...],
    "final_assessment": "<short paragraph>"
}}"""),
    ("human", """Transcript:
{transcript}"""),
])


def format_transcript(transcript: List[SavedMessage]) -> str:
    """Render the transcript as "- role: content" lines"""
    return "".join(f"- {message.role}: {message.content}\n" for message in transcript)


def _clamp_score(value: Any) -> int:
    try:
        return max(0, min(100, int(round(float(value)))))
    except (TypeError, ValueError):
        return 0


def _parse_json_block(content: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply that may be wrapped in a code fence"""
    content = content.strip()
    if "```json" in content:
        content = content.split("```json")[1].split("```")[0].strip()
    elif "```" in content:
        content = content.split("```")[1].split("```")[0].strip()

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        json_match = re.search(r"\{.*\}", content, re.DOTALL)
        if json_match:
            return json.loads(json_match.group())
        raise ValueError("Could not parse JSON from feedback response")


class FeedbackGenerator:
    """Generate and persist interview feedback from a transcript"""

    def __init__(
        self,
        llm: Optional[Any] = None,
        supabase_factory: Callable[[], Client] = get_supabase_client,
    ):
        self.supabase_factory = supabase_factory
        self.llm = llm
        if self.llm is None and settings.openai_api_key:
            try:
                self.llm = ChatOpenAI(
                    model=settings.openai_model,
                    temperature=0.2,
                    api_key=settings.openai_api_key,
                )
            except Exception as e:
                logger.warning(f"[FEEDBACK][INIT] Could not initialize OpenAI: {str(e)}")
                self.llm = None

    @property
    def ai_available(self) -> bool:
        return self.llm is not None

    async def analyze_transcript(self, transcript: List[SavedMessage]) -> Dict[str, Any]:
        """Score the transcript with the LLM, falling back to heuristic feedback"""
        if not self.ai_available:
            return self._get_default_feedback(transcript)

        try:
            prompt = FEEDBACK_PROMPT.format_messages(transcript=format_transcript(transcript))
            response = await self.llm.ainvoke(prompt)
            data = _parse_json_block(response.content)

            scores_by_name = {
                item.get("name"): item
                for item in data.get("category_scores", [])
                if isinstance(item, dict)
            }
            category_scores = [
                CategoryScore(
                    name=name,
                    score=_clamp_score(scores_by_name.get(name, {}).get("score", 0)),
                    comment=str(scores_by_name.get(name, {}).get("comment", "")),
                )
                for name in FEEDBACK_CATEGORIES
            ]

            return {
                "total_score": _clamp_score(data.get("total_score", 0)),
                "category_scores": category_scores,
                "strengths": [str(s) for s in data.get("strengths", [])],
                "areas_for_improvement": [str(a) for a in data.get("areas_for_improvement", [])],
                "final_assessment": str(data.get("final_assessment", "")),
            }
        except Exception as e:
            logger.error(f"[FEEDBACK][AI] Error generating feedback with AI: {str(e)}")
            return self._get_default_feedback(transcript)

    def _get_default_feedback(self, transcript: List[SavedMessage]) -> Dict[str, Any]:
        """Heuristic feedback from transcript statistics when AI is not available"""
        answers = [m.content for m in transcript if m.role == "user"]
        word_counts = [len(a.split()) for a in answers]
        avg_words = sum(word_counts) / len(word_counts) if word_counts else 0

        engagement = min(100, len(answers) * 10)
        depth = min(100, int(avg_words * 2))
        balanced = (engagement + depth) // 2

        category_scores = [
            CategoryScore(name="Communication Skills", score=balanced,
                          comment=f"{len(answers)} answers given."),
            CategoryScore(name="Technical Knowledge", score=depth,
                          comment=f"Answers averaged {avg_words:.0f} words."),
            CategoryScore(name="Problem Solving", score=depth, comment=""),
            CategoryScore(name="Cultural & Role Fit", score=engagement, comment=""),
            CategoryScore(name="Confidence & Clarity", score=balanced, comment=""),
        ]
        total_score = round(sum(c.score for c in category_scores) / len(category_scores))

        strengths = []
        improvements = []
        if engagement >= 70:
            strengths.append("Stayed engaged throughout the interview")
        else:
            improvements.append("Answer more of the interviewer's questions")
        if depth >= 70:
            strengths.append("Detailed answers")
        else:
            improvements.append("Give fuller answers with concrete examples")
        if not strengths:
            strengths.append("Good effort in completing the interview")

        final_assessment = (
            f"Based on your interview you achieved an overall score of {total_score}/100. "
            "AI evaluation is not available, so this score reflects transcript statistics only."
        )

        return {
            "total_score": total_score,
            "category_scores": category_scores,
            "strengths": strengths,
            "areas_for_improvement": improvements,
            "final_assessment": final_assessment,
        }

    async def create_feedback(
        self,
        interview_id: str,
        user_id: str,
        transcript: List[SavedMessage],
        feedback_id: Optional[str] = None,
    ) -> CreateFeedbackResult:
        """
        Generate feedback for a finished interview and store it
        Never raises: failures are logged and reported as success=False
        """
        try:
            analysis = await self.analyze_transcript(transcript)
            feedback = Feedback(
                interview_id=interview_id,
                user_id=user_id,
                created_at=datetime.now(timezone.utc).isoformat(),
                **analysis,
            )

            record = feedback.model_dump()
            record["id"] = feedback_id or str(uuid.uuid4())

            supabase = self.supabase_factory()
            saved = await save_feedback(supabase, record)

            logger.info(f"[FEEDBACK][CREATE] Stored feedback {saved.get('id')} for interview {interview_id}")
            return CreateFeedbackResult(success=True, feedback_id=saved.get("id", record["id"]))
        except Exception as e:
            logger.error(f"[FEEDBACK][CREATE] Error saving feedback: {str(e)}")
            return CreateFeedbackResult(success=False)


# Create global instance
feedback_generator = FeedbackGenerator()

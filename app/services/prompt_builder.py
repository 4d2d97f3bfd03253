"""
Prompt and assistant builders for the voice interviewer
"""

import copy
from typing import Any, Dict, List, Optional

from app.schemas.resume import ResumeData

INTERVIEWER_ASSISTANT: Dict[str, Any] = {
    "name": "Interviewer",
    "firstMessage": (
        "Hello! Thank you for taking the time to speak with me today. "
        "I'm excited to learn more about you and your experience."
    ),
    "transcriber": {
        "provider": "deepgram",
        "model": "nova-2",
        "language": "en",
    },
    "voice": {
        "provider": "11labs",
        "voiceId": "sarah",
        "stability": 0.4,
        "similarityBoost": 0.8,
        "speed": 0.9,
        "style": 0.5,
        "useSpeakerBoost": True,
    },
    "model": {
        "provider": "openai",
        "model": "gpt-4",
        "messages": [],
    },
}

INTERVIEWER_PROMPT = """You are a professional job interviewer conducting a real-time voice interview with a candidate. Your goal is to assess their qualifications, motivation, and fit for the role.

Interview Guidelines:
Follow the structured question flow:
{questions}

Engage naturally & react appropriately:
Listen actively to responses and acknowledge them before moving forward.
Ask brief follow-up questions if a response is vague or requires more detail.
Keep the conversation flowing smoothly while maintaining control.
Be professional, yet warm and welcoming:

Use official yet friendly language.
Keep responses concise and to the point (like in a real voice interview).
Avoid robotic phrasing\u2014sound natural and conversational.
Answer the candidate's questions professionally:

If asked about the role, company, or expectations, provide a clear and relevant answer.
If unsure, redirect the candidate to HR for more details.

Conclude the interview properly:
Thank the candidate for their time.
Inform them that the company will reach out soon with feedback.
End the conversation on a polite and positive note.

- Be sure to be professional and polite.
- Keep all your responses short and simple. Use official language, but be kind and welcoming.
- This is a voice conversation, so keep your responses short, like in a real conversation. Don't ramble for too long."""


def format_questions(questions: Optional[List[str]]) -> str:
    """Render questions as a dash list, one per line"""
    if not questions:
        return ""
    return "\n".join(f"- {question}" for question in questions)


def build_resume_context(resume: Optional[ResumeData]) -> str:
    """Resume block passed to the question-generation workflow"""
    if resume is None:
        return ""

    lines = [
        "",
        "",
        "CANDIDATE RESUME INFORMATION (Use this to tailor questions):",
        f"- Skills: {', '.join(resume.skills[:10])}",
        f"- Experience: {' | '.join(resume.experience[:2])}",
        f"- Education: {' | '.join(resume.education[:1])}",
        f"- Email: {resume.email}" if resume.email else "",
        "",
        "Based on the above information, ask interview questions that specifically relate to their "
        "skills and experience. Reference their skills directly in your questions.",
    ]
    return "\n".join(lines)


def build_interviewer_prompt(questions: Optional[List[str]], resume: Optional[ResumeData]) -> str:
    """System prompt for the interviewer, with the candidate background when a resume is loaded"""
    prompt = INTERVIEWER_PROMPT.format(questions=format_questions(questions))

    if resume is not None:
        prompt += (
            "\n\nCANDIDATE BACKGROUND (Reference in your interview):\n"
            f"- Key Skills: {', '.join(resume.skills[:5])}\n"
            f"- Experience Highlights: {' | '.join(resume.experience[:2])}\n"
            f"- Education: {' | '.join(resume.education[:1])}\n"
            "\n"
            "Use this information to ask follow-up questions about their specific technologies and experiences."
        )

    return prompt


def build_interviewer_assistant(system_prompt: str) -> Dict[str, Any]:
    """Copy of the base interviewer assistant using the given system prompt"""
    assistant = copy.deepcopy(INTERVIEWER_ASSISTANT)
    assistant["model"]["messages"] = [{"role": "system", "content": system_prompt}]
    return assistant


def build_workflow_variables(user_name: str, user_id: str, resume: Optional[ResumeData]) -> Dict[str, str]:
    """Variable values for the question-generation workflow"""
    return {
        "username": user_name,
        "userid": user_id,
        "resumeContext": build_resume_context(resume),
        "userSkills": ", ".join(resume.skills[:5]) if resume is not None else "",
    }

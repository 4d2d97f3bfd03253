"""
Voice interview call session
Tracks call status, transcript and speaking state from voice platform events,
and hands the transcript to feedback generation once the call is finished
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.config.settings import settings
from app.schemas.call import AgentType, CallSessionResponse, CallStatus, SavedMessage
from app.services.feedback_generator import FeedbackGenerator, feedback_generator
from app.services.interview_setup import AgentProps
from app.services.prompt_builder import (
    build_interviewer_assistant,
    build_interviewer_prompt,
    build_workflow_variables,
    format_questions,
)
from app.services.voice_client import StartedCall, VoiceClient, voice_client
from app.utils.exceptions import ConfigurationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MEETING_ENDED = "Meeting has ended"


def _error_text(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or error.get("error") or error)
    return str(error)


class CallSession:
    """State of one voice interview call"""

    def __init__(
        self,
        session_id: str,
        props: AgentProps,
        voice: VoiceClient,
        feedback: FeedbackGenerator,
        workflow_id: Optional[str] = None,
    ):
        self.session_id = session_id
        self.props = props
        self.voice = voice
        self.feedback = feedback
        self.workflow_id = workflow_id

        self.status = CallStatus.INACTIVE
        self.messages: List[SavedMessage] = []
        self.is_speaking = False
        self.last_message = ""
        self.redirect_to: Optional[str] = None
        self.feedback_id = props.feedback_id
        self.call: Optional[StartedCall] = None
        self.error: Optional[str] = None
        self.last_activity = time.monotonic()
        self._finish_handled = False
        self._starting = False

    # Event handlers

    async def handle_event(self, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        """Apply one voice SDK event ("call-start", "message", ...) to the session"""
        payload = payload or {}
        self.last_activity = time.monotonic()
        logger.debug(f"[CALL][EVENT] {self.session_id}: {event}")

        if event == "call-start":
            await self._set_status(CallStatus.ACTIVE)
        elif event == "call-end":
            await self._set_status(CallStatus.FINISHED)
        elif event == "message":
            self._on_message(payload)
        elif event == "speech-start":
            self.is_speaking = True
        elif event == "speech-end":
            self.is_speaking = False
        elif event == "error":
            self._on_error(payload.get("error", payload))
        else:
            logger.warning(f"[CALL][EVENT] Ignoring unknown event {event!r} for {self.session_id}")

    def _on_message(self, message: Dict[str, Any]) -> None:
        if message.get("type") != "transcript" or message.get("transcriptType") != "final":
            return
        try:
            saved = SavedMessage(role=message.get("role"), content=message.get("transcript", ""))
        except PydanticValidationError:
            logger.warning(f"[CALL][TRANSCRIPT] Dropping transcript with role {message.get('role')!r}")
            return
        self.messages.append(saved)
        self.last_message = saved.content

    def _on_error(self, error: Any) -> None:
        text = _error_text(error)
        if MEETING_ENDED in text:
            return
        logger.error(f"[CALL][ERROR] Voice error in {self.session_id}: {text}")
        self.error = text

    async def _set_status(self, status: CallStatus) -> None:
        self.status = status
        if status == CallStatus.FINISHED:
            await self._on_finished()

    async def _on_finished(self) -> None:
        if self._finish_handled:
            return
        self._finish_handled = True

        if self.props.type == AgentType.GENERATE:
            self.redirect_to = "/"
            return

        result = await self.feedback.create_feedback(
            interview_id=self.props.interview_id,
            user_id=self.props.user_id,
            transcript=list(self.messages),
            feedback_id=self.feedback_id,
        )
        if result.success and result.feedback_id:
            self.feedback_id = result.feedback_id
            self.redirect_to = f"/interview/{self.props.interview_id}/feedback"
        else:
            self.redirect_to = "/"

    # User actions

    async def handle_call(self) -> None:
        """Start the voice call for this session"""
        if self.status == CallStatus.ACTIVE:
            raise ValidationError("Call is already in progress")
        if self.status == CallStatus.CONNECTING and (self._starting or self.call is not None):
            raise ValidationError("Call is already connecting")

        self.status = CallStatus.CONNECTING
        self.error = None
        self.redirect_to = None
        self._finish_handled = False
        self._starting = True
        self.call = None
        self.last_activity = time.monotonic()

        try:
            if self.props.type == AgentType.GENERATE:
                if not self.workflow_id:
                    raise ConfigurationError("VAPI_WORKFLOW_ID environment variable is not set")
                self.call = await self.voice.start(
                    workflow_id=self.workflow_id,
                    variable_values=build_workflow_variables(
                        self.props.user_name, self.props.user_id, self.props.resume_data
                    ),
                )
            else:
                system_prompt = build_interviewer_prompt(self.props.questions, self.props.resume_data)
                self.call = await self.voice.start(
                    assistant=build_interviewer_assistant(system_prompt),
                    variable_values={"questions": format_questions(self.props.questions)},
                )
        except Exception as e:
            if MEETING_ENDED in str(e):
                return
            logger.error(f"[CALL][START] Start call failed for {self.session_id}: {str(e)}")
            self.error = getattr(e, "message", None) or str(e)
        finally:
            self._starting = False

    async def handle_disconnect(self) -> None:
        """End the call on the user's request"""
        self.status = CallStatus.FINISHED
        if self.call is not None:
            try:
                await self.voice.stop(self.call)
            except Exception as e:
                logger.error(f"[CALL][STOP] Stop call failed for {self.session_id}: {str(e)}")
        await self._on_finished()

    def to_response(self) -> CallSessionResponse:
        resume = self.props.resume_data
        return CallSessionResponse(
            session_id=self.session_id,
            type=self.props.type,
            status=self.status,
            user_name=self.props.user_name,
            user_id=self.props.user_id,
            role=self.props.role,
            level=self.props.level,
            amount=self.props.amount,
            techstack=self.props.techstack,
            interview_id=self.props.interview_id,
            feedback_id=self.feedback_id,
            call_id=self.call.call_id if self.call else None,
            is_speaking=self.is_speaking,
            last_message=self.last_message,
            messages=list(self.messages),
            redirect_to=self.redirect_to,
            error=self.error,
            resume_file_name=resume.file_name if resume else None,
            ats_score=resume.ats_score if resume else None,
        )


class CallSessionManager:
    """
    In-process registry of call sessions, addressable by session id or platform call id
    Idle sessions expire after ttl_seconds; the least recently active one is evicted when full
    """

    def __init__(
        self,
        voice: Optional[VoiceClient] = None,
        feedback: Optional[FeedbackGenerator] = None,
        workflow_id: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        max_sessions: Optional[int] = None,
    ):
        self.voice = voice or voice_client
        self.feedback = feedback or feedback_generator
        self.workflow_id = workflow_id if workflow_id is not None else settings.vapi_workflow_id
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds
        self.max_sessions = max_sessions or settings.max_cached_sessions
        self.sessions: Dict[str, CallSession] = {}
        self._call_index: Dict[str, str] = {}

    def create(self, props: AgentProps) -> CallSession:
        self._prune()
        while self.sessions and len(self.sessions) >= self.max_sessions:
            oldest = min(self.sessions.values(), key=lambda s: s.last_activity)
            logger.info(f"[CALL][EVICT] Registry full, dropping {oldest.session_id}")
            self._drop(oldest.session_id)

        session_id = f"call_{uuid.uuid4().hex}"
        session = CallSession(session_id, props, self.voice, self.feedback, self.workflow_id)
        self.sessions[session_id] = session
        logger.info(f"[CALL][CREATE] Session {session_id} ({props.type.value}) for user {props.user_id}")
        return session

    def get(self, session_id: str, user_id: Optional[str] = None) -> CallSession:
        """
        Look up a session; with user_id, sessions of other users are reported as not found

        Raises:
            NotFoundError: unknown, expired or foreign session id
        """
        self._prune()
        session = self.sessions.get(session_id)
        if session is None or (user_id is not None and session.props.user_id != user_id):
            raise NotFoundError("Call session", session_id)
        return session

    def get_by_call_id(self, call_id: str) -> Optional[CallSession]:
        session_id = self._call_index.get(call_id)
        return self.sessions.get(session_id) if session_id else None

    async def start(self, session_id: str, user_id: Optional[str] = None) -> CallSession:
        session = self.get(session_id, user_id)
        previous = session.call
        await session.handle_call()
        if previous is not None and (session.call is None or session.call.call_id != previous.call_id):
            self._unindex(previous.call_id, session_id)
        if session.call is not None:
            self._call_index[session.call.call_id] = session_id
        return session

    def remove(self, session_id: str, user_id: Optional[str] = None) -> None:
        self.get(session_id, user_id)
        self._drop(session_id)

    def release_if_finished(self, session: CallSession) -> None:
        """Forget a finished session once its redirect has been handed out"""
        if session.status == CallStatus.FINISHED and session.redirect_to is not None:
            self._drop(session.session_id)

    def _drop(self, session_id: str) -> None:
        session = self.sessions.pop(session_id, None)
        if session is not None and session.call is not None:
            self._unindex(session.call.call_id, session_id)

    def _unindex(self, call_id: str, session_id: str) -> None:
        if self._call_index.get(call_id) == session_id:
            del self._call_index[call_id]

    def _prune(self) -> None:
        cutoff = time.monotonic() - self.ttl_seconds
        expired = [sid for sid, s in self.sessions.items() if s.last_activity < cutoff]
        for session_id in expired:
            self._drop(session_id)
        if expired:
            logger.info(f"[CALL][EXPIRE] Dropped {len(expired)} idle call sessions")


# Create global instance
call_session_manager = CallSessionManager()

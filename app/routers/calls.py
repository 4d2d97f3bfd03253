"""
Voice interview call routes
Creates call sessions, starts/stops calls and receives voice platform events
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from app.config.settings import settings
from app.schemas.call import AgentType, CallEventRequest, CallSessionCreateRequest, CallSessionResponse
from app.schemas.user import CurrentUser
from app.services.call_session import CallSession, call_session_manager
from app.services.interview_setup import build_generate_props, build_interview_props
from app.services.resume_upload import resume_upload_service
from app.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calls", tags=["calls"])

# Platform server message status -> SDK event
STATUS_EVENTS = {
    "in-progress": "call-start",
    "ended": "call-end",
}


def _session_response(session: CallSession) -> CallSessionResponse:
    """Snapshot the session; a finished session is released once its redirect is returned"""
    response = session.to_response()
    call_session_manager.release_if_finished(session)
    return response


@router.post("", response_model=CallSessionResponse)
async def create_call_session(
    request: CallSessionCreateRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """
    Create a call session for the signed-in user
    generate: seeded from an uploaded resume (resume_session_id) or skipped
    interview: asks the given questions and produces feedback when finished
    """
    if request.type == AgentType.INTERVIEW:
        # Validate before the resume is handed over
        build_interview_props(user, request.interview_id, request.questions)

    resume = None
    if request.resume_session_id:
        resume = resume_upload_service.take(request.resume_session_id, owner_id=user.id)

    if request.type == AgentType.GENERATE:
        props = build_generate_props(user, resume)
    else:
        props = build_interview_props(
            user,
            interview_id=request.interview_id,
            questions=request.questions,
            resume=resume,
            feedback_id=request.feedback_id,
        )

    session = call_session_manager.create(props)
    return session.to_response()


@router.get("/{session_id}", response_model=CallSessionResponse)
async def get_call_session(session_id: str, user: CurrentUser = Depends(get_current_user)):
    """Current call status, speaking state and transcript"""
    return _session_response(call_session_manager.get(session_id, user.id))


@router.post("/{session_id}/start", response_model=CallSessionResponse)
async def start_call(session_id: str, user: CurrentUser = Depends(get_current_user)):
    """Start the voice call; start errors are reported in the session's error field"""
    session = await call_session_manager.start(session_id, user.id)
    return session.to_response()


@router.post("/{session_id}/stop", response_model=CallSessionResponse)
async def stop_call(session_id: str, user: CurrentUser = Depends(get_current_user)):
    """End the call and run the finishing step (feedback or redirect)"""
    session = call_session_manager.get(session_id, user.id)
    await session.handle_disconnect()
    return _session_response(session)


@router.post("/{session_id}/events", response_model=CallSessionResponse)
async def post_call_event(
    session_id: str,
    request: CallEventRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Forward a voice SDK event observed by the web client"""
    session = call_session_manager.get(session_id, user.id)
    await session.handle_event(request.event, request.payload)
    return _session_response(session)


@router.delete("/{session_id}")
async def delete_call_session(session_id: str, user: CurrentUser = Depends(get_current_user)):
    call_session_manager.remove(session_id, user.id)
    return {"success": True, "session_id": session_id}


@router.post("/webhook")
async def voice_webhook(
    body: Dict[str, Any] = Body(...),
    x_vapi_secret: Optional[str] = Header(default=None),
):
    """
    Server messages from the voice platform
    Maps status, transcript and speech updates onto the matching call session
    """
    if settings.vapi_webhook_secret and x_vapi_secret != settings.vapi_webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid webhook secret")

    message = body.get("message")
    if not isinstance(message, dict):
        message = {}
    call = message.get("call")
    call_id = call.get("id") if isinstance(call, dict) else None
    message_type = message.get("type")

    session = call_session_manager.get_by_call_id(call_id) if isinstance(call_id, str) else None
    if session is None:
        logger.info(f"[CALL][WEBHOOK] No session for call {call_id} ({message_type})")
        return {"received": True, "handled": False}

    if message_type == "status-update":
        event = STATUS_EVENTS.get(message.get("status"))
        if event:
            await session.handle_event(event)
    elif message_type == "end-of-call-report":
        await session.handle_event("call-end")
    elif message_type == "transcript":
        await session.handle_event("message", message)
    elif message_type == "speech-update":
        # Speaking indicator follows the interviewer's voice
        if message.get("role") == "assistant":
            event = "speech-start" if message.get("status") == "started" else "speech-end"
            await session.handle_event(event)
    elif message_type == "hang":
        logger.warning(f"[CALL][WEBHOOK] Assistant did not respond in call {call_id}")
    else:
        logger.debug(f"[CALL][WEBHOOK] Ignoring {message_type} for call {call_id}")

    return {"received": True, "handled": True}

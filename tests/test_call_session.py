import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.schemas.call import AgentType, CallStatus  # noqa: E402
from app.schemas.feedback import CreateFeedbackResult  # noqa: E402
from app.schemas.resume import ResumeData  # noqa: E402
from app.schemas.user import CurrentUser  # noqa: E402
from app.services.call_session import CallSessionManager  # noqa: E402
from app.services.interview_setup import build_generate_props, build_interview_props  # noqa: E402
from app.services.voice_client import StartedCall  # noqa: E402
from app.utils.exceptions import NotFoundError, ValidationError, VoiceServiceError  # noqa: E402


class FakeVoice:
    def __init__(self, start_error=None):
        self.start_error = start_error
        self.started = []
        self.stopped = []

    async def start(self, assistant=None, workflow_id=None, variable_values=None):
        if self.start_error is not None:
            raise self.start_error
        self.started.append({
            "assistant": assistant,
            "workflow_id": workflow_id,
            "variable_values": variable_values,
        })
        return StartedCall(call_id=f"call-{len(self.started)}", control_url="https://control.test/1")

    async def stop(self, call):
        self.stopped.append(call.call_id)


class FakeFeedback:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def create_feedback(self, interview_id, user_id, transcript, feedback_id=None):
        self.calls.append({
            "interview_id": interview_id,
            "user_id": user_id,
            "transcript": transcript,
            "feedback_id": feedback_id,
        })
        return self.result


USER = CurrentUser(id="user-1", name="Jane")


def transcript_event(role, text, transcript_type="final"):
    return {"type": "transcript", "transcriptType": transcript_type, "role": role, "transcript": text}


class CallSessionTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.voice = FakeVoice()
        self.feedback = FakeFeedback(CreateFeedbackResult(success=True, feedback_id="fb-1"))
        self.manager = CallSessionManager(voice=self.voice, feedback=self.feedback, workflow_id="wf-1")

    async def test_status_follows_events(self):
        session = self.manager.create(build_generate_props(USER, None))
        self.assertEqual(session.status, CallStatus.INACTIVE)

        await self.manager.start(session.session_id)
        self.assertEqual(session.status, CallStatus.CONNECTING)

        await session.handle_event("call-start")
        self.assertEqual(session.status, CallStatus.ACTIVE)

        await session.handle_event("call-end")
        self.assertEqual(session.status, CallStatus.FINISHED)
        self.assertEqual(session.redirect_to, "/")
        self.assertEqual(self.feedback.calls, [])

    async def test_generate_call_uses_workflow_variables(self):
        resume = ResumeData(
            file_name="cv.pdf", skills=["python", "sql"], experience=["Engineer"],
            education=["BSc"], is_ats_friendly=True, ats_score=100,
        )
        session = self.manager.create(build_generate_props(USER, resume))
        await self.manager.start(session.session_id)

        started = self.voice.started[0]
        self.assertEqual(started["workflow_id"], "wf-1")
        self.assertIsNone(started["assistant"])
        self.assertEqual(started["variable_values"]["username"], "Jane")
        self.assertEqual(started["variable_values"]["userSkills"], "python, sql")
        self.assertIs(self.manager.get_by_call_id("call-1"), session)

    async def test_interview_call_uses_assistant_with_questions(self):
        props = build_interview_props(USER, "iv-1", ["Why us?", "Biggest challenge?"])
        session = self.manager.create(props)
        await self.manager.start(session.session_id)

        started = self.voice.started[0]
        self.assertIsNone(started["workflow_id"])
        self.assertEqual(started["variable_values"], {"questions": "- Why us?\n- Biggest challenge?"})
        system_prompt = started["assistant"]["model"]["messages"][0]["content"]
        self.assertIn("- Why us?", system_prompt)

    async def test_only_final_transcripts_are_saved(self):
        session = self.manager.create(build_generate_props(USER, None))
        await session.handle_event("message", transcript_event("assistant", "Hel", "partial"))
        await session.handle_event("message", transcript_event("assistant", "Hello there"))
        await session.handle_event("message", {"type": "function-call"})
        await session.handle_event("message", transcript_event("user", "Hi"))

        self.assertEqual([(m.role, m.content) for m in session.messages],
                         [("assistant", "Hello there"), ("user", "Hi")])
        self.assertEqual(session.last_message, "Hi")

    async def test_speaking_flag(self):
        session = self.manager.create(build_generate_props(USER, None))
        await session.handle_event("speech-start")
        self.assertTrue(session.is_speaking)
        await session.handle_event("speech-end")
        self.assertFalse(session.is_speaking)

    async def test_meeting_ended_errors_are_ignored(self):
        session = self.manager.create(build_generate_props(USER, None))
        await session.handle_event("error", {"message": "Meeting has ended"})
        self.assertIsNone(session.error)
        await session.handle_event("error", {"message": "Microphone not found"})
        self.assertEqual(session.error, "Microphone not found")

    async def test_start_failure_is_recorded(self):
        self.voice.start_error = VoiceServiceError("Invalid workflow")
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)
        self.assertEqual(session.error, "Invalid workflow")
        self.assertEqual(session.status, CallStatus.CONNECTING)
        self.assertIsNone(session.call)

    async def test_start_failure_meeting_ended_is_swallowed(self):
        self.voice.start_error = VoiceServiceError("Meeting has ended")
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)
        self.assertIsNone(session.error)

    async def test_missing_workflow_id_is_reported(self):
        manager = CallSessionManager(voice=self.voice, feedback=self.feedback, workflow_id="")
        session = manager.create(build_generate_props(USER, None))
        await manager.start(session.session_id)
        self.assertIn("VAPI_WORKFLOW_ID", session.error)
        self.assertEqual(self.voice.started, [])

    async def test_cannot_start_while_active(self):
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)
        await session.handle_event("call-start")
        with self.assertRaises(ValidationError):
            await session.handle_call()

    async def test_disconnect_generates_feedback_once(self):
        props = build_interview_props(USER, "iv-1", ["Q1"], feedback_id="fb-old")
        session = self.manager.create(props)
        await self.manager.start(session.session_id)
        await session.handle_event("call-start")
        await session.handle_event("message", transcript_event("user", "My answer"))

        await session.handle_disconnect()
        # The platform reports the end as well
        await session.handle_event("call-end")

        self.assertEqual(session.status, CallStatus.FINISHED)
        self.assertEqual(self.voice.stopped, ["call-1"])
        self.assertEqual(len(self.feedback.calls), 1)
        call = self.feedback.calls[0]
        self.assertEqual(call["interview_id"], "iv-1")
        self.assertEqual(call["user_id"], "user-1")
        self.assertEqual(call["feedback_id"], "fb-old")
        self.assertEqual(call["transcript"][0].content, "My answer")
        self.assertEqual(session.redirect_to, "/interview/iv-1/feedback")
        self.assertEqual(session.feedback_id, "fb-1")

    async def test_failed_feedback_redirects_home(self):
        self.feedback.result = CreateFeedbackResult(success=False)
        session = self.manager.create(build_interview_props(USER, "iv-1", []))
        await session.handle_event("call-end")
        self.assertEqual(session.redirect_to, "/")

    async def test_response_snapshot(self):
        session = self.manager.create(build_generate_props(USER, None))
        response = session.to_response()
        self.assertEqual(response.type, AgentType.GENERATE)
        self.assertEqual(response.status, CallStatus.INACTIVE)
        self.assertIsNone(response.call_id)


    async def test_second_start_while_connecting_is_rejected(self):
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)

        with self.assertRaises(ValidationError):
            await self.manager.start(session.session_id)

        self.assertEqual(len(self.voice.started), 1)
        self.assertEqual(session.call.call_id, "call-1")
        self.assertIs(self.manager.get_by_call_id("call-1"), session)

    async def test_retry_after_failed_start(self):
        self.voice.start_error = VoiceServiceError("Invalid workflow")
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)

        self.voice.start_error = None
        await self.manager.start(session.session_id)

        self.assertIsNone(session.error)
        self.assertEqual(session.call.call_id, "call-1")

    async def test_restart_unindexes_the_previous_call(self):
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)
        await session.handle_event("call-end")

        await self.manager.start(session.session_id)

        self.assertIsNone(self.manager.get_by_call_id("call-1"))
        self.assertIs(self.manager.get_by_call_id("call-2"), session)
        self.assertEqual(session.status, CallStatus.CONNECTING)

    def test_sessions_of_other_users_are_not_found(self):
        session = self.manager.create(build_generate_props(USER, None))
        self.assertIs(self.manager.get(session.session_id, "user-1"), session)
        with self.assertRaises(NotFoundError):
            self.manager.get(session.session_id, "user-2")
        with self.assertRaises(NotFoundError):
            self.manager.remove(session.session_id, "user-2")

    async def test_finished_session_is_released(self):
        session = self.manager.create(build_generate_props(USER, None))
        await self.manager.start(session.session_id)

        self.manager.release_if_finished(session)
        self.assertIs(self.manager.get(session.session_id), session)

        await session.handle_event("call-end")
        self.manager.release_if_finished(session)
        with self.assertRaises(NotFoundError):
            self.manager.get(session.session_id)
        self.assertIsNone(self.manager.get_by_call_id("call-1"))

    def test_least_recently_active_session_is_evicted(self):
        manager = CallSessionManager(voice=self.voice, feedback=self.feedback, workflow_id="wf-1", max_sessions=2)
        first = manager.create(build_generate_props(USER, None))
        second = manager.create(build_generate_props(USER, None))
        first.last_activity = second.last_activity + 1

        third = manager.create(build_generate_props(USER, None))

        self.assertEqual(set(manager.sessions), {first.session_id, third.session_id})

    def test_idle_sessions_expire(self):
        manager = CallSessionManager(voice=self.voice, feedback=self.feedback, workflow_id="wf-1", ttl_seconds=60)
        with patch("app.services.call_session.time.monotonic", return_value=1000.0):
            session = manager.create(build_generate_props(USER, None))
        with patch("app.services.call_session.time.monotonic", return_value=1061.0):
            with self.assertRaises(NotFoundError):
                manager.get(session.session_id)
        self.assertEqual(manager.sessions, {})

    def test_unknown_session(self):
        with self.assertRaises(NotFoundError):
            self.manager.get("call_missing")
        with self.assertRaises(NotFoundError):
            self.manager.remove("call_missing")


if __name__ == "__main__":
    unittest.main()

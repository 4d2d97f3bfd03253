import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from app.db.client import get_supabase_client  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.user import CurrentUser  # noqa: E402
from app.services.resume_upload import ResumeUploadService, resume_upload_service  # noqa: E402
from app.utils.auth import get_current_user  # noqa: E402
from app.utils.exceptions import NotFoundError, ResumeExtractionError, ValidationError  # noqa: E402
from app.utils.file_utils import DOCX_MIME_TYPE, TEXT_MIME_TYPE  # noqa: E402

RESUME_TEXT = (
    "John Smith\n"
    "john@example.com 5551234567\n"
    "Experience\n"
    "Built React and Node.js services on AWS\n"
)


class ResumeUploadServiceTests(unittest.TestCase):
    def setUp(self):
        self.service = ResumeUploadService(max_upload_bytes=1024)

    def test_parse_builds_resume_data(self):
        resume = self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        self.assertEqual(resume.file_name, "cv.txt")
        self.assertEqual(resume.skills, ["react", "node.js", "aws"])
        self.assertEqual(resume.experience, ["Built React and Node.js services on AWS"])
        self.assertEqual(resume.education, ["Education section not found"])
        self.assertEqual(resume.email, "john@example.com")
        self.assertEqual(resume.ats_score, 100)
        self.assertTrue(resume.is_ats_friendly)
        self.assertEqual(resume.raw_text, RESUME_TEXT)

    def test_placeholders_when_nothing_detected(self):
        resume = self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, b"A plain note with nothing in it")
        self.assertEqual(resume.skills, ["No technical skills detected"])
        self.assertEqual(resume.experience, ["Experience section not found"])
        self.assertEqual(resume.ats_score, 0)
        self.assertEqual(resume.suggestions, ["Improve resume structure"])

    def test_unsupported_type_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.parse_resume("cv.png", "image/png", b"\x89PNG....")
        self.assertEqual(ctx.exception.message, "Please upload a PDF, DOCX, or TXT file")

    def test_oversize_file_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, b"a" * 2048)

    def test_short_text_is_rejected(self):
        with self.assertRaises(ResumeExtractionError) as ctx:
            self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, b"too short")
        self.assertIn("empty or contains no readable text", ctx.exception.message)

    def test_small_file_falls_back_to_plain_text_after_extraction_error(self):
        # "tiny" cannot be extracted as DOCX; the small-file fallback still reads it
        with self.assertRaises(ResumeExtractionError) as ctx:
            self.service.parse_resume("cv.docx", DOCX_MIME_TYPE, b"tiny")
        self.assertIn("empty or contains no readable text", ctx.exception.message)

    def test_large_unreadable_file_reports_extraction_failure(self):
        service = ResumeUploadService(max_upload_bytes=10 * 1024 * 1024)

        class FailingParser:
            def extract_resume_text(self, content, content_type):
                raise ResumeExtractionError("Could not extract readable text from file")

        service.parser = FailingParser()
        with self.assertRaises(ResumeExtractionError) as ctx:
            service.parse_resume("cv.docx", DOCX_MIME_TYPE, b"x" * 200000)
        self.assertIn("Please try a different resume file", ctx.exception.message)

    def test_store_get_discard(self):
        resume = self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        session_id = self.service.store(resume, owner_id="user-1")
        self.assertEqual(self.service.get(session_id, "user-1"), resume)
        self.service.discard(session_id, "user-1")
        with self.assertRaises(NotFoundError):
            self.service.get(session_id, "user-1")

    def test_other_users_cannot_see_an_upload(self):
        resume = self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        session_id = self.service.store(resume, owner_id="user-1")
        with self.assertRaises(NotFoundError):
            self.service.get(session_id, "user-2")
        with self.assertRaises(NotFoundError):
            self.service.discard(session_id, "user-2")
        self.assertIn(session_id, self.service.analysis_cache)

    def test_take_removes_the_analysis(self):
        resume = self.service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        session_id = self.service.store(resume, owner_id="user-1")
        self.assertEqual(self.service.take(session_id, "user-1"), resume)
        self.assertNotIn(session_id, self.service.analysis_cache)

    def test_oldest_analysis_is_evicted_when_full(self):
        service = ResumeUploadService(max_upload_bytes=1024, max_entries=2)
        resume = service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        first = service.store(resume)
        second = service.store(resume)
        third = service.store(resume)
        self.assertEqual(set(service.analysis_cache), {second, third})
        self.assertNotIn(first, service.analysis_cache)

    def test_expired_analysis_is_dropped(self):
        service = ResumeUploadService(max_upload_bytes=1024, ttl_seconds=60)
        resume = service.parse_resume("cv.txt", TEXT_MIME_TYPE, RESUME_TEXT.encode())
        with patch("app.services.resume_upload.time.monotonic", return_value=1000.0):
            session_id = service.store(resume)
        with patch("app.services.resume_upload.time.monotonic", return_value=1061.0):
            with self.assertRaises(NotFoundError):
                service.get(session_id)
        self.assertEqual(service.analysis_cache, {})


class ResumeApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self.user = CurrentUser(id="user-1", name="John")
        app.dependency_overrides[get_current_user] = lambda: self.user
        self.addCleanup(app.dependency_overrides.clear)

    def test_upload_and_fetch_analysis(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.txt", RESUME_TEXT.encode(), "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Resume uploaded and analyzed successfully!")
        self.assertEqual(body["resume"]["ats_score"], 100)

        session_id = body["session_id"]
        fetched = self.client.get(f"/api/resume/analysis/{session_id}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["file_name"], "resume.txt")

        deleted = self.client.delete(f"/api/resume/analysis/{session_id}")
        self.assertEqual(deleted.status_code, 200)
        self.assertNotIn(session_id, resume_upload_service.analysis_cache)

    def test_upload_rejects_unsupported_type(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("photo.png", b"\x89PNG\r\n", "image/png")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Please upload a PDF, DOCX, or TXT file"})

    def test_octet_stream_uses_extension(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.txt", RESUME_TEXT.encode(), "application/octet-stream")},
        )
        self.assertEqual(response.status_code, 200)

    def test_unknown_analysis_is_404(self):
        response = self.client.get("/api/resume/analysis/resume_missing")
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    def test_analysis_is_private_to_the_uploader(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.txt", RESUME_TEXT.encode(), "text/plain")},
        )
        session_id = response.json()["session_id"]

        self.user = CurrentUser(id="user-2", name="Mallory")
        self.assertEqual(self.client.get(f"/api/resume/analysis/{session_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/api/resume/analysis/{session_id}").status_code, 404)
        self.assertIn(session_id, resume_upload_service.analysis_cache)

    def test_upload_requires_authentication(self):
        app.dependency_overrides.clear()
        app.dependency_overrides[get_supabase_client] = lambda: None
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.txt", RESUME_TEXT.encode(), "text/plain")},
        )
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()

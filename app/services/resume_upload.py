"""
Resume upload service
Validates an uploaded resume, extracts its text and builds the analysis shown to the user
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from app.config.settings import settings
from app.schemas.resume import ResumeData
from app.services.resume_parser import ResumeParser, resume_parser
from app.utils.exceptions import NotFoundError, ResumeExtractionError, ValidationError
from app.utils.file_utils import TEXT_MIME_TYPE, decode_text, validate_mime_type

logger = logging.getLogger(__name__)

SMALL_FILE_BYTES = 100000
MIN_RESUME_LENGTH = 20

NO_SKILLS_PLACEHOLDER = "No technical skills detected"
NO_EXPERIENCE_PLACEHOLDER = "Experience section not found"
NO_EDUCATION_PLACEHOLDER = "Education section not found"


@dataclass
class CachedResume:
    resume: ResumeData
    owner_id: Optional[str]
    stored_at: float


class ResumeUploadService:
    """Parse uploaded resumes and keep their analysis for the interview session"""

    def __init__(
        self,
        parser: Optional[ResumeParser] = None,
        max_upload_bytes: Optional[int] = None,
        ttl_seconds: Optional[int] = None,
        max_entries: Optional[int] = None,
    ):
        self.parser = parser or resume_parser
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds
        self.max_entries = max_entries or settings.max_cached_sessions
        # In-memory storage for resume analysis, keyed by upload session id
        self.analysis_cache: Dict[str, CachedResume] = {}

    def validate_upload(self, content_type: str, size: int) -> None:
        if not validate_mime_type(content_type):
            raise ValidationError("Please upload a PDF, DOCX, or TXT file")
        if size > self.max_upload_bytes:
            max_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File is too large. Maximum size is {max_mb} MB")

    def _extract_text(self, content: bytes, content_type: str) -> str:
        try:
            return self.parser.extract_resume_text(content, content_type)
        except Exception as e:
            logger.error(f"[RESUME][UPLOAD] Text extraction failed: {str(e)}")
            # One more fallback for simple text files
            if content_type == TEXT_MIME_TYPE or len(content) < SMALL_FILE_BYTES:
                try:
                    return decode_text(content)
                except Exception as read_error:
                    raise ResumeExtractionError(
                        "Could not read file content. Please ensure the file is not corrupted."
                    ) from read_error
            raise ResumeExtractionError(
                "Could not extract text from this file. Please try a different resume file (PDF, DOCX, or TXT)."
            ) from e

    def parse_resume(self, file_name: str, content_type: str, content: bytes) -> ResumeData:
        """
        Validate, extract and analyze one resume file

        Raises:
            ValidationError: unsupported type or oversize file
            ResumeExtractionError: no usable text in the file
        """
        self.validate_upload(content_type, len(content))

        extracted_text = self._extract_text(content, content_type)
        if not extracted_text or len(extracted_text) < MIN_RESUME_LENGTH:
            raise ResumeExtractionError(
                "The file appears to be empty or contains no readable text. Please upload a complete resume."
            )

        analysis = self.parser.analyze_resume(extracted_text)
        ats = self.parser.calculate_ats_score(extracted_text)

        logger.info(
            f"[RESUME][UPLOAD] Analyzed {file_name}: {len(extracted_text)} chars, "
            f"{len(analysis.skills)} skills, ATS {ats.score}%"
        )

        return ResumeData(
            file_name=file_name,
            skills=analysis.skills or [NO_SKILLS_PLACEHOLDER],
            experience=analysis.experience or [NO_EXPERIENCE_PLACEHOLDER],
            education=analysis.education or [NO_EDUCATION_PLACEHOLDER],
            email=analysis.email,
            phone=analysis.phone,
            name=analysis.name,
            is_ats_friendly=ats.is_ats_friendly,
            ats_score=ats.score,
            suggestions=ats.suggestions,
            raw_text=extracted_text,
        )

    def store(self, resume: ResumeData, owner_id: Optional[str] = None) -> str:
        self._prune()
        while self.analysis_cache and len(self.analysis_cache) >= self.max_entries:
            oldest = min(self.analysis_cache, key=lambda key: self.analysis_cache[key].stored_at)
            logger.info(f"[RESUME][CACHE] Evicting {oldest}, cache is full")
            del self.analysis_cache[oldest]

        session_id = f"resume_{uuid.uuid4().hex}"
        self.analysis_cache[session_id] = CachedResume(resume, owner_id, time.monotonic())
        return session_id

    def get(self, session_id: str, owner_id: Optional[str] = None) -> ResumeData:
        """
        Cached analysis of an upload; another user's upload is reported as not found

        Raises:
            NotFoundError: unknown, expired or foreign session id
        """
        self._prune()
        entry = self.analysis_cache.get(session_id)
        if entry is None or (entry.owner_id is not None and entry.owner_id != owner_id):
            raise NotFoundError("Resume analysis session", session_id)
        return entry.resume

    def take(self, session_id: str, owner_id: Optional[str] = None) -> ResumeData:
        """Hand the analysis over to a call session and drop it from the cache"""
        resume = self.get(session_id, owner_id)
        del self.analysis_cache[session_id]
        return resume

    def discard(self, session_id: str, owner_id: Optional[str] = None) -> None:
        self.get(session_id, owner_id)
        del self.analysis_cache[session_id]

    def _prune(self) -> None:
        cutoff = time.monotonic() - self.ttl_seconds
        expired = [key for key, entry in self.analysis_cache.items() if entry.stored_at < cutoff]
        for key in expired:
            del self.analysis_cache[key]
        if expired:
            logger.info(f"[RESUME][CACHE] Dropped {len(expired)} expired analyses")


# Create global instance
resume_upload_service = ResumeUploadService()

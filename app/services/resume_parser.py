"""
Resume parsing service using PyMuPDF, pdfplumber and python-docx
Extracts text, skills and contact details from resume files and scores ATS friendliness
"""

import io
import logging
import re
from typing import Dict, List, Optional

import fitz  # PyMuPDF
import pdfplumber
from docx import Document

from app.schemas.resume import AtsScore, ExtractedResumeData
from app.utils.exceptions import ResumeExtractionError
from app.utils.file_utils import DOCX_MIME_TYPE, PDF_MIME_TYPE, TEXT_MIME_TYPE, decode_text

# Setup logger
logger = logging.getLogger(__name__)

MAX_PDF_PAGES = 10
MIN_EXTRACTED_LENGTH = 10
ATS_FRIENDLY_THRESHOLD = 70

EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+)")
PHONE_PATTERN = re.compile(r"(\+?1?\s?[\(]?[0-9]{3}[\)]?\s?[0-9]{3}[\-\s]?[0-9]{4})")
TEN_DIGITS_PATTERN = re.compile(r"[0-9]{10}")
SECTION_WORD_PATTERN = re.compile(r"skills|experience|education", re.IGNORECASE)

# Heading text (lowercase, without trailing colon) -> section key
SECTION_HEADINGS: Dict[str, str] = {
    "experience": "experience",
    "work experience": "experience",
    "professional experience": "experience",
    "employment": "experience",
    "employment history": "experience",
    "education": "education",
    "skills": "skills",
    "technical skills": "skills",
    "projects": "projects",
    "certifications": "certifications",
    "summary": "summary",
    "professional summary": "summary",
    "objective": "summary",
    "profile": "summary",
}
MAX_HEADING_LENGTH = 40
BULLET_CHARS = "-*•·"


class ResumeParser:
    """Extract and analyze resume text"""

    def __init__(self):
        self.skill_keywords = [
            "javascript", "typescript", "react", "next.js", "node.js", "python", "java",
            "c++", "c#", "css", "html", "sql", "mongodb", "firebase", "aws", "gcp", "azure",
            "docker", "kubernetes", "git", "rest api", "graphql", "tailwind", "express",
            "vue", "angular", "golang", "rust", "kotlin", "swift", "postgresql", "mysql",
            "redis", "elasticsearch", "jenkins", "ci/cd", "testing", "jest", "mocha",
            "webpack", "vite", "linux", "windows", "agile", "scrum",
        ]

    def extract_text_from_pdf(self, content: bytes) -> str:
        """
        Extract text from the first pages of a PDF
        Tries PyMuPDF first, then pdfplumber. Returns "" when neither can read the file.
        """
        try:
            return self._extract_pdf_with_pymupdf(content)
        except Exception as e:
            logger.warning(f"[RESUME][PDF] PyMuPDF extraction failed, falling back to pdfplumber: {str(e)}")

        try:
            return self._extract_pdf_with_pdfplumber(content)
        except Exception as e:
            logger.error(f"[RESUME][PDF] PDF extraction error: {str(e)}")
            return ""

    def _extract_pdf_with_pymupdf(self, content: bytes) -> str:
        page_texts = []
        with fitz.open(stream=content, filetype="pdf") as doc:
            max_pages = min(doc.page_count, MAX_PDF_PAGES)
            logger.debug(f"[RESUME][PDF] Opened with PyMuPDF, reading {max_pages} of {doc.page_count} pages")
            for page_index in range(max_pages):
                page = doc.load_page(page_index)
                spans = []
                for block in page.get_text("dict").get("blocks", []):
                    for line in block.get("lines", []):
                        for span in line.get("spans", []):
                            spans.append(span.get("text", "").strip())
                page_text = " ".join(s for s in spans if s)
                if page_text:
                    page_texts.append(page_text)
        return "\n".join(page_texts).strip()

    def _extract_pdf_with_pdfplumber(self, content: bytes) -> str:
        page_texts = []
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page in pdf.pages[:MAX_PDF_PAGES]:
                words = [w.get("text", "").strip() for w in page.extract_words()]
                page_text = " ".join(w for w in words if w)
                if page_text:
                    page_texts.append(page_text)
        return "\n".join(page_texts).strip()

    def extract_text_from_docx(self, content: bytes) -> str:
        """Extract raw text from a DOCX file (paragraphs and table cells)"""
        try:
            doc = Document(io.BytesIO(content))
            text_parts = [p.text for p in doc.paragraphs if p.text]
            for table in doc.tables:
                for row in table.rows:
                    for cell in row.cells:
                        if cell.text:
                            text_parts.append(cell.text)
            return "\n".join(text_parts).strip()
        except Exception as e:
            logger.error(f"[RESUME][DOCX] DOCX extraction error: {str(e)}")
            return ""

    def extract_resume_text(self, content: bytes, content_type: str) -> str:
        """
        Extract text from resume bytes based on MIME type
        Falls back to reading the bytes as plain text when format extraction yields too little.

        Raises:
            ResumeExtractionError: when no readable text could be extracted
        """
        if content_type == TEXT_MIME_TYPE:
            return decode_text(content)

        if content_type == PDF_MIME_TYPE:
            text = self.extract_text_from_pdf(content)
            if text and len(text) > MIN_EXTRACTED_LENGTH:
                return text

        if content_type == DOCX_MIME_TYPE:
            text = self.extract_text_from_docx(content)
            if text and len(text) > MIN_EXTRACTED_LENGTH:
                return text

        fallback_text = decode_text(content)
        if fallback_text and len(fallback_text) > MIN_EXTRACTED_LENGTH:
            logger.info(f"[RESUME][EXTRACT] Using plain-text fallback for {content_type}")
            return fallback_text

        raise ResumeExtractionError("Could not extract readable text from file")

    def extract_skills(self, text: str) -> List[str]:
        """
        Case-insensitive substring scan over the fixed keyword list
        Time Complexity: O(n*m) where n = text length, m = number of keywords
        """
        text_lower = text.lower()
        return [skill for skill in self.skill_keywords if skill.lower() in text_lower]

    def extract_email(self, text: str) -> Optional[str]:
        match = EMAIL_PATTERN.search(text)
        return match.group(1) if match else None

    def extract_phone(self, text: str) -> Optional[str]:
        match = PHONE_PATTERN.search(text)
        return match.group(0) if match else None

    def extract_name(self, text: str) -> Optional[str]:
        """The first line is taken as the candidate name when it has a plausible length"""
        name_line = text.split("\n")[0].strip()
        if 3 < len(name_line) < 100:
            return name_line
        return None

    def extract_sections(self, text: str) -> Dict[str, List[str]]:
        """
        Split resume text into sections keyed by heading
        A heading is a short line naming a known section; body lines follow until the next heading.
        """
        sections: Dict[str, List[str]] = {}
        current: Optional[str] = None

        for raw_line in text.split("\n"):
            line = raw_line.strip()
            if not line:
                continue

            heading = line.rstrip(":").strip().lower()
            if len(line) < MAX_HEADING_LENGTH and heading in SECTION_HEADINGS:
                current = SECTION_HEADINGS[heading]
                sections.setdefault(current, [])
                continue

            if current is not None:
                body_line = line.lstrip(BULLET_CHARS).strip()
                if body_line:
                    sections[current].append(body_line)

        return sections

    def analyze_resume(self, text: str) -> ExtractedResumeData:
        """Analyze resume text into skills, contact details and section entries"""
        sections = self.extract_sections(text)
        summary_lines = sections.get("summary", [])

        return ExtractedResumeData(
            skills=self.extract_skills(text),
            experience=sections.get("experience", []),
            education=sections.get("education", []),
            email=self.extract_email(text),
            phone=self.extract_phone(text),
            name=self.extract_name(text),
            summary=" ".join(summary_lines) if summary_lines else None,
            raw_text=text,
        )

    def calculate_ats_score(self, text: str) -> AtsScore:
        """
        Heuristic ATS score from three checks: an email sign, a 10-digit number
        and a standard section word
        """
        checks = [
            "@" in text,
            bool(TEN_DIGITS_PATTERN.search(text)),
            bool(SECTION_WORD_PATTERN.search(text)),
        ]

        score = round(sum(checks) / len(checks) * 100)
        is_ats_friendly = score >= ATS_FRIENDLY_THRESHOLD

        return AtsScore(
            score=score,
            is_ats_friendly=is_ats_friendly,
            suggestions=[] if is_ats_friendly else ["Improve resume structure"],
        )


# Create global instance
resume_parser = ResumeParser()

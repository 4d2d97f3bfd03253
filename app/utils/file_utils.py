"""
File utility functions for upload validation
"""

from pathlib import Path


PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME_TYPE = "text/plain"

ALLOWED_MIME_TYPES = {PDF_MIME_TYPE, DOCX_MIME_TYPE, TEXT_MIME_TYPE}

# Browsers sometimes send application/octet-stream; the extension decides then
EXTENSION_MIME_TYPES = {
    ".pdf": PDF_MIME_TYPE,
    ".docx": DOCX_MIME_TYPE,
    ".txt": TEXT_MIME_TYPE,
}


def validate_mime_type(content_type: str) -> bool:
    """
    Validate if MIME type is one of the supported resume formats
    Time Complexity: O(1) - Set lookup
    """
    return content_type in ALLOWED_MIME_TYPES


def extract_file_extension(filename: str) -> str:
    """Extract lowercased file extension from filename"""
    return Path(filename).suffix.lower()


def resolve_content_type(filename: str, content_type: str | None) -> str:
    """
    Resolve the effective MIME type of an upload
    Uses the declared type when it is supported, else guesses from the extension
    """
    declared = (content_type or "").split(";")[0].strip().lower()
    if validate_mime_type(declared):
        return declared
    if declared in ("", "application/octet-stream"):
        return EXTENSION_MIME_TYPES.get(extract_file_extension(filename or ""), declared)
    return declared


def decode_text(content: bytes) -> str:
    """Decode raw bytes as UTF-8 text, replacing undecodable bytes"""
    return content.decode("utf-8", errors="replace")

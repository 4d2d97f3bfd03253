"""
Utility functions for common operations
"""

from .exceptions import (
    AppException,
    ValidationError,
    NotFoundError,
    DatabaseError,
    ConfigurationError,
    AuthenticationError,
    ResumeExtractionError,
    VoiceServiceError
)

from .file_utils import (
    validate_mime_type,
    extract_file_extension,
    resolve_content_type,
    decode_text
)

__all__ = [
    # Exceptions
    "AppException",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "ConfigurationError",
    "AuthenticationError",
    "ResumeExtractionError",
    "VoiceServiceError",
    # File utilities
    "validate_mime_type",
    "extract_file_extension",
    "resolve_content_type",
    "decode_text"
]

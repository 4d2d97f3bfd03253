"""
Custom exception classes for better error handling
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Base exception class for application errors
    The message is what the client shows to the user
    """
    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Exception for validation errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppException):
    """Exception for resource not found errors"""
    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class DatabaseError(AppException):
    """Exception for database operation errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)


class ConfigurationError(AppException):
    """Exception for missing or invalid configuration"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)


class AuthenticationError(AppException):
    """Exception for missing or rejected credentials"""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)


class ResumeExtractionError(AppException):
    """Raised when no readable text can be extracted from a resume file"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class VoiceServiceError(AppException):
    """Raised when the hosted voice platform rejects or fails a request"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=502, details=details)

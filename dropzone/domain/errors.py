"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_KEYWORD = "invalid_keyword"
    INVALID_FILE_NAME = "invalid_file_name"
    INVALID_REQUEST = "invalid_request"
    FILE_TOO_LARGE = "file_too_large"
    CONFLICT = "conflict"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    FORBIDDEN = "forbidden"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_KEYWORD: {
        "title": "Invalid Keyword",
        "message": "Keywords must be 3 to 50 characters of letters, numbers, underscores or hyphens.",
        "action": "Choose a different keyword and try again.",
    },
    ErrorCategory.INVALID_FILE_NAME: {
        "title": "Invalid File Name",
        "message": "The file name is empty, too long or contains path separators.",
        "action": "Rename the file and upload it again.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "Files larger than 10 MB cannot be shared.",
        "action": "Compress or split the file and try again.",
    },
    ErrorCategory.CONFLICT: {
        "title": "File Already Exists",
        "message": "A file with this name is already shared under this keyword.",
        "action": "Rename the file, delete the existing one, or use a different keyword.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file could not be found, was deleted, or has expired.",
        "action": "Check the keyword and file name. Shared files are kept for 24 hours.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "Link Expired",
        "message": "This download link has expired.",
        "action": "Open the keyword page again to get a fresh link.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Invalid Link",
        "message": "This download link is invalid or has been tampered with.",
        "action": "Open the keyword page again to get a fresh link.",
    },
    ErrorCategory.STORAGE_UNAVAILABLE: {
        "title": "Storage Unavailable",
        "message": "File storage is temporarily unavailable.",
        "action": "Please try again in a few moments.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# Default HTTP status code per category
HTTP_STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.INVALID_KEYWORD: 400,
    ErrorCategory.INVALID_FILE_NAME: 400,
    ErrorCategory.INVALID_REQUEST: 400,
    ErrorCategory.FILE_TOO_LARGE: 413,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.FILE_NOT_FOUND: 404,
    ErrorCategory.FILE_EXPIRED: 410,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.STORAGE_UNAVAILABLE: 503,
    ErrorCategory.SYSTEM_ERROR: 500,
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Each subclass declares the ErrorCategory it maps to at the API boundary.
    Domain errors can optionally wrap original errors for context.
    """

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """
    Base class for input validation failures.

    Validation errors are always raised before any store is touched.
    """

    category = ErrorCategory.INVALID_REQUEST


class InvalidKeywordError(ValidationError):
    """Raised when a keyword fails the format or length rule."""

    category = ErrorCategory.INVALID_KEYWORD


class InvalidFileNameError(ValidationError):
    """Raised when a file name cannot be used as a blob path segment."""

    category = ErrorCategory.INVALID_FILE_NAME


class InvalidFileError(ValidationError):
    """Raised when the declared size does not match the uploaded payload."""
    pass


class FileTooLargeError(ValidationError):
    """Raised when a file exceeds the per-file size cap."""

    category = ErrorCategory.FILE_TOO_LARGE


class ConflictError(DomainError):
    """Raised when a live file with the same name already exists under a keyword."""

    category = ErrorCategory.CONFLICT


class NotFoundError(DomainError):
    """
    Raised when a keyword/file has no live record.

    Covers files that never existed, were already deleted, or have expired.
    """

    category = ErrorCategory.FILE_NOT_FOUND


class StorageUnavailableError(DomainError):
    """
    Raised when the metadata store or blob store fails or times out.

    Always retryable from the caller's perspective. The orchestrator
    never retries internally.
    """

    category = ErrorCategory.STORAGE_UNAVAILABLE


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    @classmethod
    def from_domain_error(cls, error: DomainError) -> "ApplicationError":
        """Wrap a domain error, keeping its category and message."""
        return cls(error.category, str(error))

    @property
    def http_status_code(self) -> int:
        return HTTP_STATUS_CODES.get(self.category, 500)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        data = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.technical_message:
            data["detail"] = self.technical_message
        return data


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details shown as ``detail``
        context: Additional context information
        status_code: HTTP status code (defaults to the category's status)

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code or error.http_status_code

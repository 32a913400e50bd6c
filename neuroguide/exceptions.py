"""
Custom Exceptions for the NeuroGuide backend.

Every exception carries the HTTP status code and the public message the API
returns for it. main.py registers a single handler for NeuroGuideError, so
routers and services raise these instead of building HTTPExceptions.
"""

from typing import Dict, List, Optional

from .constants import MAX_UPLOAD_SIZE_BYTES


class NeuroGuideError(Exception):
    """Base exception for all NeuroGuide errors."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# =============================================================================
# Request Validation Exceptions
# =============================================================================

class RequestDataError(NeuroGuideError):
    """Raised when a request body or query fails validation."""

    status_code = 400
    message = "Invalid request data"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "RequestDataError":
        return cls(errors=[{"field": field, "message": message}])

    @classmethod
    def from_validation_errors(cls, errors: List[dict]) -> "RequestDataError":
        """Flatten pydantic/FastAPI error dicts into {field, message} pairs."""
        flattened = []
        for error in errors:
            loc = [str(part) for part in error.get("loc", ())]
            if loc and loc[0] in ("body", "query", "path", "form"):
                loc = loc[1:]
            flattened.append({"field": ".".join(loc) or "body", "message": error.get("msg", "Invalid value")})
        return cls(errors=flattened)


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AuthenticationError(NeuroGuideError):
    """Raised when a request cannot be attributed to a user."""

    status_code = 401
    message = "Access token required"


class MissingTokenError(AuthenticationError):
    """No bearer token on a protected route."""


class InvalidTokenError(AuthenticationError):
    """Bearer token present but malformed, forged or expired."""

    status_code = 403
    message = "Invalid or expired token"


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    message = "Invalid email or password"


# =============================================================================
# Resource Exceptions
# =============================================================================

class NotFoundError(NeuroGuideError):
    """Raised when a record does not exist or belongs to another user."""

    status_code = 404

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ConflictError(NeuroGuideError):
    """Raised when a create collides with an existing record."""

    status_code = 409
    message = "Resource already exists"


# =============================================================================
# File Upload Exceptions
# =============================================================================

class FileProcessingError(NeuroGuideError):
    """Raised when an uploaded file is rejected."""

    status_code = 400


class MissingFileError(FileProcessingError):
    message = "No PDF file uploaded"


class TooManyFilesError(FileProcessingError):
    message = "Too many files. Only one file allowed."


class UnsupportedFileTypeError(FileProcessingError):
    """Raised when an upload is not a PDF."""

    message = "Only PDF files are allowed"

    def __init__(self, file_type: Optional[str] = None):
        self.file_type = file_type
        super().__init__()


class FileTooLargeError(FileProcessingError):
    """Raised when a file exceeds the maximum allowed size."""

    status_code = 413

    def __init__(self, size: Optional[int] = None, max_size: int = MAX_UPLOAD_SIZE_BYTES):
        self.size = size
        self.max_size = max_size
        super().__init__(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.")


class UploadFailedError(NeuroGuideError):
    message = "Failed to upload study guide"


# =============================================================================
# Stored Payload Exceptions
# =============================================================================

class PayloadError(NeuroGuideError):
    """Raised when a stored PDF payload cannot be served."""


class PayloadCorruptError(PayloadError):
    message = "Failed to process PDF file"


class PayloadMissingError(PayloadError):
    """Legacy record points at a file that is gone from disk."""

    status_code = 404
    message = "PDF file not found"


class PayloadUnavailableError(PayloadError):
    message = "PDF data not available. Please re-upload the file."


__all__ = [
    "NeuroGuideError",
    "RequestDataError",
    "AuthenticationError",
    "MissingTokenError",
    "InvalidTokenError",
    "InvalidCredentialsError",
    "NotFoundError",
    "ConflictError",
    "FileProcessingError",
    "MissingFileError",
    "TooManyFilesError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "UploadFailedError",
    "PayloadError",
    "PayloadCorruptError",
    "PayloadMissingError",
    "PayloadUnavailableError",
]

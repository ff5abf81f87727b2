"""Application error taxonomy.

Every failure a handler can report is one of these. Each carries a code,
a user-safe message and the HTTP status the API answers with; the exception
handler registered in ``eventhub.main`` renders them as
``{"success": false, "message": ...}``. Internal details (SQL, paths,
tracebacks) are logged where the error is raised and never put in
``message``.
"""

from enum import Enum
from typing import Optional

from fastapi import status


class ErrorCode(Enum):
    INVALID_FORM = "INVALID_FORM"
    INVALID_IMAGE = "INVALID_IMAGE"
    DUPLICATE_TITLE = "DUPLICATE_TITLE"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppError(Exception):
    """Base error with code, user-safe message and HTTP status."""

    code: ErrorCode
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


# --- Client input (400) ---

class ClientInputError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.INVALID_FORM
    default_message = "Invalid request"


class InvalidFormError(ClientInputError):
    """A required form field is missing or malformed."""


class InvalidImageError(ClientInputError):
    """Uploaded picture failed one of the media gates."""

    code = ErrorCode.INVALID_IMAGE
    default_message = "Invalid image"


class DuplicateTitleError(ClientInputError):
    code = ErrorCode.DUPLICATE_TITLE
    default_message = "Event title already exists"


class DuplicateEmailError(ClientInputError):
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.DUPLICATE_EMAIL
    default_message = "Email already registered"


# --- Auth (401/403) ---

class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCode.UNAUTHORIZED
    default_message = "No token"


class UnauthorizedError(AuthError):
    """No refresh token on the request."""


class InvalidTokenError(AuthError):
    code = ErrorCode.INVALID_TOKEN
    default_message = "Invalid token"


class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    code = ErrorCode.FORBIDDEN
    default_message = "Forbidden"


# --- Server side (500) ---

class StorageWriteError(AppError):
    code = ErrorCode.STORAGE_WRITE_FAILED
    default_message = "File write failed"


class DatabaseError(AppError):
    code = ErrorCode.DATABASE_ERROR
    default_message = "Server error"

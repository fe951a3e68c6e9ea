"""
Error kinds raised by the storage and handler layers of Task Service.
"""
import enum
from typing import Any, Dict, Iterable, Optional

from fastapi import status


class ErrorKind(str, enum.Enum):
    """Closed set of error categories callers can branch on"""
    INPUT = "input"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    AUTH = "auth"


class TaskServiceError(Exception):
    """Base error carrying its kind, HTTP status and client-facing message."""

    kind: ErrorKind = ErrorKind.STORAGE
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InputError(TaskServiceError):
    kind = ErrorKind.INPUT
    status_code = status.HTTP_400_BAD_REQUEST


class TaskNotFoundError(TaskServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Task not found", details: Optional[str] = None):
        super().__init__(message, details)


class StorageError(TaskServiceError):
    """Wraps driver, connectivity and constraint failures.

    The message holds internal context for logs; it is never sent to clients.
    """
    kind = ErrorKind.STORAGE
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_response(self) -> Dict[str, Any]:
        return {"error": "Internal server error"}


class AuthError(TaskServiceError):
    kind = ErrorKind.AUTH
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", details: Optional[str] = None):
        super().__init__(message, details)


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> str:
    """Render pydantic errors as "field: reason" pairs joined by "; "."""
    parts = []
    for error in errors:
        loc = [str(item) for item in error.get("loc", ()) if item not in ("body", "path")]
        field = ".".join(loc) or "body"
        if error.get("type") in ("missing", "required"):
            reason = "field is required"
        else:
            reason = error.get("msg", "invalid value")
        parts.append(f"{field}: {reason}")
    return "; ".join(parts)

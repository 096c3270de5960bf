"""
Error hierarchy surfaced to API callers.

Every failure a caller can observe is a WikiError subclass carrying a
stable code, a category and an HTTP status. The API layer installs one
handler for the whole hierarchy, so services raise and never format
responses themselves.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    VALIDATION = "validation"
    STORAGE = "storage"


class WikiError(Exception):
    """Base exception for all request-level failures."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict[str, Any]:
        """Convert to the JSON error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
            }
        }


class UnauthenticatedError(WikiError):
    """Request carries no valid session token."""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION, 401,
        )


class ForbiddenError(WikiError):
    """Authenticated user lacks the role the operation needs."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION, 403,
        )


class NotFoundError(WikiError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"{resource} not found: {resource_id}",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.resource = resource
        self.resource_id = resource_id


class InvalidInputError(WikiError):
    """A required field is blank or a value is not acceptable."""
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION, 400,
        )
        self.field = field

    def to_response(self) -> dict[str, Any]:
        response = super().to_response()
        if self.field is not None:
            response["error"]["field"] = self.field
        return response


class InvalidCredentialsError(WikiError):
    """Username exists but the password does not match."""
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            message, "INVALID_CREDENTIALS", ErrorCategory.AUTHENTICATION, 401,
        )


class StorageError(WikiError):
    """The backing document could not be read or written."""
    def __init__(self, message: str):
        super().__init__(
            message, "STORAGE_ERROR", ErrorCategory.STORAGE, 500,
        )

"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.page import (
    PageCreateInput,
    PageResponse,
    PageSummary,
    PageUpdateInput,
)
from api.schemas.user import (
    AuthPayload,
    LoginRequest,
    UserResponse,
)

__all__ = [
    "AuthPayload",
    "LoginRequest",
    "PageCreateInput",
    "PageResponse",
    "PageSummary",
    "PageUpdateInput",
    "UserResponse",
]

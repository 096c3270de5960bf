"""
User and authentication schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.storage.base import UserRecord, UserRole


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UserResponse(CamelModel):
    """Public view of an account. The password is never included."""
    
    id: str = Field(..., description="Opaque user identifier")
    username: str = Field(..., description="Unique account name")
    role: UserRole = Field(..., description="EDITOR or ADMIN")
    email: Optional[str] = Field(default=None, description="Contact address")
    
    @classmethod
    def from_record(cls, user: Optional[UserRecord]) -> Optional["UserResponse"]:
        if user is None:
            return None
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            email=user.email,
        )


class LoginRequest(CamelModel):
    """Credentials for login. Unknown usernames are provisioned as editors."""
    
    username: str = Field(..., examples=["admin"])
    password: str = Field(..., examples=["admin"])


class AuthPayload(CamelModel):
    """Result of a successful login."""
    
    token: str = Field(
        ...,
        description="Session token for the Authorization: Bearer header",
    )
    user: UserResponse

"""
Records and abstract base class for document stores.

The persisted state is one document holding two collections, users and
pages. Stores only move whole documents in and out; all querying happens
against the in-memory mirror kept by the orchestrator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif value:
        # Older documents may carry a trailing "Z"
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    else:
        return utc_now()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class UserRole(str, Enum):
    """Roles a user account can hold."""
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class PageType(str, Enum):
    """Kinds of documentation page."""
    PAGE = "page"
    API = "api"
    SQL = "sql"
    COREZOID = "corezoid"
    BITRIX = "bitrix"
    # Default for creations that do not name a type
    DOC = "DOC"


@dataclass
class UserRecord:
    """
    A user account.
    
    Passwords are stored as given (demo-grade); the API never serializes them.
    """
    id: str
    username: str
    password: str
    role: UserRole = UserRole.EDITOR
    email: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password,
            "role": self.role.value,
            "email": self.email,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            username=data["username"],
            password=data.get("password") or "",
            role=UserRole(data.get("role", UserRole.EDITOR.value)),
            email=data.get("email"),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )


@dataclass
class PageRecord:
    """
    A node of the page forest.
    
    parent_id is None for root pages. updated_by holds the id of the user
    who last created or updated the page.
    """
    id: str
    title: str
    slug: str
    parent_id: Optional[str] = None
    type: PageType = PageType.DOC
    content: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    updated_by: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "parentId": self.parent_id,
            "title": self.title,
            "slug": self.slug,
            "type": self.type.value,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "updatedBy": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            parent_id=data.get("parentId"),
            title=data.get("title") or "",
            slug=data.get("slug") or "",
            type=PageType(data.get("type") or PageType.DOC.value),
            content=data.get("content") or "",
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
            updated_by=data.get("updatedBy"),
        )


@dataclass
class StoreDocument:
    """The whole persisted state: two order-irrelevant collections."""
    users: list[UserRecord] = field(default_factory=list)
    pages: list[PageRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": [user.to_dict() for user in self.users],
            "pages": [page.to_dict() for page in self.pages],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "StoreDocument":
        data = data or {}
        return cls(
            users=[UserRecord.from_dict(item) for item in data.get("users") or []],
            pages=[PageRecord.from_dict(item) for item in data.get("pages") or []],
        )


class BaseDocumentStore(ABC):
    """
    Abstract base class for durable document storage.
    
    A store reads the full document once at startup and rewrites it in
    full after every mutation. save() must either persist the whole
    document or raise StorageError leaving the previous copy intact.
    """
    
    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the document lives."""
        pass
    
    @abstractmethod
    async def load(self) -> StoreDocument:
        """
        Read the persisted document.
        
        Returns an empty document when nothing has been persisted yet.
        Raises StorageError when existing data cannot be read or parsed.
        """
        pass
    
    @abstractmethod
    async def save(self, document: StoreDocument) -> None:
        """Persist the full document, replacing the previous one."""
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass

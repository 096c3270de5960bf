"""
Page request and response schemas.

These Pydantic models define the API contract. Field names are camelCase
on the wire (parentId, createdAt, ...).
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from api.schemas.user import CamelModel, UserResponse
from core.errors import InvalidInputError
from core.storage.base import PageRecord, PageType
from manager.page_tree import UNSET, PageDraft, PagePatch


class PageSummary(CamelModel):
    """
    Navigation view of a page, used for child listings.
    
    children nests further summaries down to the depth the caller asked
    for; below that depth it is left empty.
    """
    
    id: str
    parent_id: Optional[str] = None
    title: str
    slug: str
    type: PageType
    children: list["PageSummary"] = Field(default_factory=list)
    
    @classmethod
    def from_record(
        cls,
        page: PageRecord,
        children: Optional[list["PageSummary"]] = None,
    ) -> "PageSummary":
        return cls(
            id=page.id,
            parent_id=page.parent_id,
            title=page.title,
            slug=page.slug,
            type=page.type,
            children=children or [],
        )


class PageResponse(CamelModel):
    """A page with its author and child tree resolved."""
    
    id: str
    parent_id: Optional[str] = Field(
        default=None,
        description="Parent page id; null for root pages",
    )
    title: str
    slug: str
    type: PageType
    content: str = Field(default="", description="Rich-text markup")
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UserResponse] = Field(
        default=None,
        description="User who last wrote the page",
    )
    children: list[PageSummary] = Field(default_factory=list)


class PageCreateInput(CamelModel):
    """Request body for creating a page."""
    
    parent_id: Optional[str] = Field(
        default=None,
        description="Parent page id; omitted or null creates a root page",
    )
    title: str = Field(..., examples=["Guide"])
    slug: Optional[str] = Field(
        default=None,
        description="Explicit slug; normalized. Derived from the title when empty",
    )
    type: Optional[PageType] = Field(default=None, description="Defaults to DOC")
    content: Optional[str] = Field(default=None, description="Defaults to empty")
    
    def to_draft(self) -> PageDraft:
        return PageDraft(
            title=self.title,
            parent_id=self.parent_id,
            slug=self.slug,
            type=self.type,
            content=self.content,
        )


class PageUpdateInput(CamelModel):
    """
    Request body for a field-level page update.
    
    Only keys present in the body are applied. "parentId": null moves the
    page to the root; null is rejected for title, type and content.
    """
    
    parent_id: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    type: Optional[PageType] = None
    content: Optional[str] = None
    
    def to_patch(self) -> PagePatch:
        provided = self.model_fields_set
        for name in ("title", "type", "content"):
            if name in provided and getattr(self, name) is None:
                raise InvalidInputError(f"{name} cannot be null", field=name)
        return PagePatch(
            **{
                name: getattr(self, name) if name in provided else UNSET
                for name in ("parent_id", "title", "slug", "type", "content")
            }
        )

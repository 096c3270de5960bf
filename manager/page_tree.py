"""
Page tree service - CRUD, recursive delete and search over the page forest.

Reads go against the orchestrator's published state. Every write is a
function applied by WikiOrchestrator.commit(), which serializes writers
and flushes before the change becomes visible.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Optional, Union

from core.errors import InvalidInputError, NotFoundError
from core.logging import get_logger
from core.slug import slugify
from core.storage.base import PageRecord, PageType, UserRecord
from manager.accounts import ensure_editor, new_id


if TYPE_CHECKING:
    from manager.orchestrator import WikiOrchestrator
    from manager.state import WikiState


logger = get_logger(__name__)


class _Unset:
    """Marker for a patch field the caller did not send."""
    
    _instance: Optional["_Unset"] = None
    
    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    def __repr__(self) -> str:
        return "UNSET"
    
    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class PageDraft:
    """Input for creating a page."""
    title: str
    parent_id: Optional[str] = None
    slug: Optional[str] = None
    type: Optional[PageType] = None
    content: Optional[str] = None


@dataclass
class PagePatch:
    """
    Field-level update of a page.
    
    Each field is UNSET (leave untouched), None, or a value. None is only
    meaningful for parent_id (move to root) and slug (ignored, like any
    slug that normalizes to nothing).
    """
    parent_id: Union[_Unset, Optional[str]] = UNSET
    title: Union[_Unset, Optional[str]] = UNSET
    slug: Union[_Unset, Optional[str]] = UNSET
    type: Union[_Unset, Optional[PageType]] = UNSET
    content: Union[_Unset, Optional[str]] = UNSET
    
    def provided_fields(self) -> list[str]:
        return [
            f.name for f in dataclasses.fields(self)
            if getattr(self, f.name) is not UNSET
        ]


def fallback_slug() -> str:
    return uuid.uuid4().hex[:6]


class PageTreeService:
    """Operations on the page forest."""
    
    def __init__(self, orchestrator: "WikiOrchestrator"):
        self._orchestrator = orchestrator
    
    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    
    def get_by_id(self, page_id: str) -> Optional[PageRecord]:
        return self._orchestrator.state.pages.get(page_id)
    
    def list_children(self, parent_id: Optional[str] = None) -> list[PageRecord]:
        """Direct children of parent_id; None selects the root pages."""
        return self._orchestrator.state.pages.children_of(parent_id or None)
    
    def search(self, query: Optional[str]) -> list[PageRecord]:
        """
        Case-insensitive substring match on title, slug and content.
        
        A blank query matches nothing. Results are unordered.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return []
        return [
            page for page in self._orchestrator.state.pages
            if needle in page.title.lower()
            or needle in page.slug.lower()
            or needle in (page.content or "").lower()
        ]
    
    def resolve_children(self, page: PageRecord) -> list[PageRecord]:
        return self._orchestrator.state.pages.children_of(page.id)
    
    def resolve_updated_by(self, page: PageRecord) -> Optional[UserRecord]:
        if not page.updated_by:
            return None
        return self._orchestrator.state.users.get(page.updated_by)
    
    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    
    async def create_page(self, draft: PageDraft, actor: UserRecord) -> PageRecord:
        """
        Create a page.
        
        Slug is the first non-empty of: normalized explicit slug,
        normalized title, random fallback.
        """
        ensure_editor(actor)
        now = self._orchestrator.now()
        page = PageRecord(
            id=new_id(),
            parent_id=draft.parent_id or None,
            title=draft.title,
            slug=slugify(draft.slug) or slugify(draft.title) or fallback_slug(),
            type=draft.type or PageType.DOC,
            content=draft.content or "",
            created_at=now,
            updated_at=now,
            updated_by=actor.id,
        )
        
        def insert(state: "WikiState") -> PageRecord:
            state.pages.add(page)
            return page
        
        created = await self._orchestrator.commit(insert)
        logger.info(
            "Page created",
            page_id=created.id,
            parent_id=created.parent_id,
            slug=created.slug,
            user_id=actor.id,
        )
        return created
    
    async def update_page(
        self,
        page_id: str,
        patch: PagePatch,
        actor: UserRecord,
    ) -> PageRecord:
        """
        Apply a field-level patch.
        
        updated_at/updated_by are refreshed on every call, even when the
        patch changes nothing, and updated_at always moves forward.
        
        Raises:
            NotFoundError: page_id does not resolve
            InvalidInputError: title, type or content explicitly set to None
        """
        ensure_editor(actor)
        for name in ("title", "type", "content"):
            if getattr(patch, name) is None:
                raise InvalidInputError(f"{name} cannot be null", field=name)
        now = self._orchestrator.now()
        
        def apply(state: "WikiState") -> PageRecord:
            current = state.pages.get(page_id)
            if current is None:
                raise NotFoundError("Page", page_id)
            
            # Strictly later than the stored value even if the clock has not moved
            touched_at = max(now, current.updated_at + timedelta(microseconds=1))
            changes: dict[str, Any] = {"updated_at": touched_at, "updated_by": actor.id}
            if patch.parent_id is not UNSET:
                changes["parent_id"] = patch.parent_id or None
            if patch.title is not UNSET:
                changes["title"] = patch.title
            if patch.slug is not UNSET:
                changes["slug"] = slugify(patch.slug) or current.slug
            if patch.type is not UNSET:
                changes["type"] = patch.type
            if patch.content is not UNSET:
                changes["content"] = patch.content
            
            updated = dataclasses.replace(current, **changes)
            state.pages.replace(updated)
            return updated
        
        updated = await self._orchestrator.commit(apply)
        logger.info(
            "Page updated",
            page_id=page_id,
            fields=patch.provided_fields(),
            user_id=actor.id,
        )
        return updated
    
    async def delete_page(self, page_id: str, actor: UserRecord) -> bool:
        """
        Delete a page together with its whole subtree.
        
        Returns False (not an error) when page_id does not resolve.
        """
        ensure_editor(actor)
        if page_id not in self._orchestrator.state.pages:
            return False
        
        def remove_subtree(state: "WikiState") -> int:
            subtree = state.pages.collect_subtree(page_id)
            return len(state.pages.remove(subtree))
        
        removed = await self._orchestrator.commit(remove_subtree)
        if not removed:
            return False
        
        logger.info(
            "Page deleted",
            page_id=page_id,
            removed=removed,
            user_id=actor.id,
        )
        return True

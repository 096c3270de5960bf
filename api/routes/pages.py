"""
Page endpoints.

Queries are open; mutations need an EDITOR or ADMIN session.

- GET /pages?parentId=&depth= - Direct children (root pages without parentId)
- GET /pages/search?q= - Substring search
- GET /pages/{page_id}?depth= - Single page, or null
- POST /pages - Create
- PATCH /pages/{page_id} - Field-level update
- DELETE /pages/{page_id} - Delete with all descendants
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.auth import get_current_editor
from api.dependencies import get_orchestrator
from api.schemas.page import (
    PageCreateInput,
    PageResponse,
    PageSummary,
    PageUpdateInput,
)
from api.schemas.user import UserResponse
from core.logging import get_logger
from core.storage.base import PageRecord, UserRecord
from manager.orchestrator import WikiOrchestrator
from manager.page_tree import PageTreeService


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/pages", tags=["Pages"])


# Child levels expanded under each returned page; 3 covers the sidebar tree
DEFAULT_CHILD_DEPTH = 3
MAX_CHILD_DEPTH = 10


def child_summaries(page: PageRecord, service: PageTreeService, depth: int) -> list[PageSummary]:
    """Children of page, each with its own children nested depth - 1 levels."""
    if depth <= 0:
        return []
    return [
        PageSummary.from_record(child, child_summaries(child, service, depth - 1))
        for child in service.resolve_children(page)
    ]


def to_page_response(
    page: PageRecord,
    orchestrator: WikiOrchestrator,
    depth: int = DEFAULT_CHILD_DEPTH,
) -> PageResponse:
    """
    Resolve author and child tree against the current state.
    
    depth counts child levels: 0 leaves children empty, 1 lists direct
    children, 2 adds grandchildren, and so on. The bound also stops
    expansion on cyclic parent links.
    """
    service = orchestrator.pages
    return PageResponse(
        id=page.id,
        parent_id=page.parent_id,
        title=page.title,
        slug=page.slug,
        type=page.type,
        content=page.content,
        created_at=page.created_at,
        updated_at=page.updated_at,
        updated_by=UserResponse.from_record(service.resolve_updated_by(page)),
        children=child_summaries(page, service, depth),
    )


@router.get("", response_model=list[PageResponse])
async def list_pages(
    parent_id: Optional[str] = Query(default=None, alias="parentId"),
    depth: int = Query(default=DEFAULT_CHILD_DEPTH, ge=0, le=MAX_CHILD_DEPTH),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> list[PageResponse]:
    """
    Direct children of parentId; the root pages when it is omitted.
    
    Each page carries its subtree down to depth child levels.
    """
    pages = orchestrator.pages.list_children(parent_id)
    return [to_page_response(page, orchestrator, depth) for page in pages]


@router.get("/search", response_model=list[PageResponse])
async def search_pages(
    q: str = Query(default=""),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> list[PageResponse]:
    """
    Case-insensitive substring search over title, slug and content.
    
    A blank query returns an empty list.
    """
    pages = orchestrator.pages.search(q)
    logger.debug("Search", query=q, hits=len(pages))
    # Search hits list only their direct children
    return [to_page_response(page, orchestrator, depth=1) for page in pages]


@router.get("/{page_id}", response_model=Optional[PageResponse])
async def get_page(
    page_id: str,
    depth: int = Query(default=DEFAULT_CHILD_DEPTH, ge=0, le=MAX_CHILD_DEPTH),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> Optional[PageResponse]:
    """A single page, or null when the id does not resolve."""
    page = orchestrator.pages.get_by_id(page_id)
    if page is None:
        return None
    return to_page_response(page, orchestrator, depth)


@router.post("", response_model=PageResponse)
async def create_page(
    request: PageCreateInput,
    editor: UserRecord = Depends(get_current_editor),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> PageResponse:
    """Create a page. Slug falls back to the title, then to a random id."""
    page = await orchestrator.pages.create_page(request.to_draft(), editor)
    return to_page_response(page, orchestrator)


@router.patch("/{page_id}", response_model=PageResponse)
async def update_page(
    page_id: str,
    request: PageUpdateInput,
    editor: UserRecord = Depends(get_current_editor),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> PageResponse:
    """
    Apply only the fields present in the body.
    
    Fails with NOT_FOUND when the page does not exist.
    """
    page = await orchestrator.pages.update_page(page_id, request.to_patch(), editor)
    return to_page_response(page, orchestrator)


@router.delete("/{page_id}", response_model=bool)
async def delete_page(
    page_id: str,
    editor: UserRecord = Depends(get_current_editor),
    orchestrator: WikiOrchestrator = Depends(get_orchestrator),
) -> bool:
    """Delete the page and all its descendants. False if it does not exist."""
    return await orchestrator.pages.delete_page(page_id, editor)

"""
Tests for the page tree service.
"""

import re
from datetime import datetime, timezone

import pytest

from core.errors import ForbiddenError, InvalidInputError, NotFoundError, UnauthenticatedError
from core.storage.base import PageType, UserRecord
from manager.orchestrator import WikiOrchestrator
from manager.page_tree import UNSET, PageDraft, PagePatch


@pytest.fixture
def pages(orchestrator):
    return orchestrator.pages


@pytest.fixture
async def guide(pages, editor):
    return await pages.create_page(PageDraft(title="Guide"), editor)


@pytest.fixture
async def intro(pages, editor, guide):
    return await pages.create_page(PageDraft(title="Intro", parent_id=guide.id), editor)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_applies_defaults(pages, editor, store):
    page = await pages.create_page(PageDraft(title="Guide"), editor)
    
    assert page.slug == "guide"
    assert page.parent_id is None
    assert page.type == PageType.DOC
    assert page.content == ""
    assert page.created_at == page.updated_at
    assert page.updated_by == editor.id
    assert pages.get_by_id(page.id) is page
    assert [p["id"] for p in store.saved["pages"]] == [page.id]


@pytest.mark.asyncio
async def test_create_prefers_explicit_slug(pages, editor):
    page = await pages.create_page(
        PageDraft(title="Guide", slug="  My Custom Slug ", type=PageType.SQL, content="<p>x</p>"),
        editor,
    )
    
    assert page.slug == "my-custom-slug"
    assert page.type == PageType.SQL
    assert page.content == "<p>x</p>"


@pytest.mark.asyncio
async def test_create_slug_falls_back_to_title_then_random(pages, editor):
    from_title = await pages.create_page(PageDraft(title="From Title", slug="!!!"), editor)
    fallback = await pages.create_page(PageDraft(title="", slug=""), editor)
    
    assert from_title.slug == "from-title"
    assert re.fullmatch(r"[0-9a-f]{6}", fallback.slug)


@pytest.mark.asyncio
async def test_duplicate_slugs_are_allowed(pages, editor):
    first = await pages.create_page(PageDraft(title="Same"), editor)
    second = await pages.create_page(PageDraft(title="Same"), editor)
    
    assert first.slug == second.slug == "same"
    assert first.id != second.id


@pytest.mark.asyncio
async def test_create_requires_editor_role(pages):
    outsider = UserRecord(id="x", username="x", password="x", role="VIEWER")
    
    with pytest.raises(ForbiddenError):
        await pages.create_page(PageDraft(title="Nope"), outsider)
    
    assert pages.list_children(None) == []


@pytest.mark.asyncio
async def test_create_without_user_is_unauthenticated(pages, store):
    saves = store.save_count
    
    with pytest.raises(UnauthenticatedError):
        await pages.create_page(PageDraft(title="Nope"), None)
    
    assert store.save_count == saves


# ---------------------------------------------------------------------------
# list / get
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_children_returns_direct_children_only(pages, editor, guide, intro):
    grandchild = await pages.create_page(PageDraft(title="Deep", parent_id=intro.id), editor)
    
    assert pages.list_children(None) == [guide]
    assert pages.list_children(guide.id) == [intro]
    assert pages.list_children(intro.id) == [grandchild]
    assert pages.resolve_children(guide) == [intro]


@pytest.mark.asyncio
async def test_get_unknown_page(pages):
    assert pages.get_by_id("missing") is None


@pytest.mark.asyncio
async def test_resolve_updated_by(pages, editor, guide):
    assert pages.resolve_updated_by(guide) is editor


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_title_leaves_other_fields(pages, editor, admin, intro):
    updated = await pages.update_page(intro.id, PagePatch(title="X"), admin)
    
    assert updated.title == "X"
    assert updated.slug == intro.slug
    assert updated.type == intro.type
    assert updated.content == intro.content
    assert updated.parent_id == intro.parent_id
    assert updated.updated_at > intro.updated_at
    assert updated.updated_by == admin.id
    assert updated.created_at == intro.created_at


@pytest.mark.asyncio
async def test_empty_patch_still_touches_page(pages, admin, guide):
    updated = await pages.update_page(guide.id, PagePatch(), admin)
    
    assert updated.updated_at > guide.updated_at
    assert updated.updated_by == admin.id
    assert updated.title == guide.title


@pytest.mark.asyncio
async def test_updated_at_advances_when_clock_stands_still(settings, store):
    frozen = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    orchestrator = WikiOrchestrator(store=store, settings=settings, clock=lambda: frozen)
    await orchestrator.initialize()
    _, user = await orchestrator.accounts.login("editor", "secret")
    page = await orchestrator.pages.create_page(PageDraft(title="Guide"), user)
    
    first = await orchestrator.pages.update_page(page.id, PagePatch(), user)
    second = await orchestrator.pages.update_page(page.id, PagePatch(title="Again"), user)
    
    assert page.updated_at == frozen
    assert page.updated_at < first.updated_at < second.updated_at
    assert second.created_at == frozen
    await orchestrator.shutdown()


@pytest.mark.asyncio
async def test_update_parent_none_moves_to_root(pages, editor, guide, intro):
    updated = await pages.update_page(intro.id, PagePatch(parent_id=None), editor)
    
    assert updated.parent_id is None
    assert [p.id for p in pages.list_children(None)] == [guide.id, intro.id]
    assert pages.list_children(guide.id) == []


@pytest.mark.asyncio
async def test_update_reparents(pages, editor, guide, intro):
    other = await pages.create_page(PageDraft(title="Other"), editor)
    
    await pages.update_page(intro.id, PagePatch(parent_id=other.id), editor)
    
    assert pages.list_children(guide.id) == []
    assert [p.id for p in pages.list_children(other.id)] == [intro.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_slug", ["", "   ", "!!!", None])
async def test_update_slug_normalizing_to_empty_keeps_previous(pages, editor, guide, raw_slug):
    updated = await pages.update_page(guide.id, PagePatch(slug=raw_slug), editor)
    
    assert updated.slug == "guide"


@pytest.mark.asyncio
async def test_update_slug_is_normalized(pages, editor, guide):
    updated = await pages.update_page(
        guide.id,
        PagePatch(slug="User Guide", type=PageType.BITRIX, content="<h1>Hi</h1>"),
        editor,
    )
    
    assert updated.slug == "user-guide"
    assert updated.type == PageType.BITRIX
    assert updated.content == "<h1>Hi</h1>"


@pytest.mark.asyncio
async def test_update_unknown_page(pages, editor, store):
    saves_before = store.save_count
    
    with pytest.raises(NotFoundError):
        await pages.update_page("missing", PagePatch(title="X"), editor)
    
    assert store.save_count == saves_before


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "type", "content"])
async def test_update_rejects_null_for_required_fields(pages, editor, guide, field):
    with pytest.raises(InvalidInputError):
        await pages.update_page(guide.id, PagePatch(**{field: None}), editor)
    
    assert pages.get_by_id(guide.id) is guide


def test_patch_reports_provided_fields():
    patch = PagePatch(title="X", parent_id=None)
    
    assert patch.provided_fields() == ["parent_id", "title"]
    assert patch.slug is UNSET


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_removes_subtree_only(orchestrator, pages, editor, store):
    root = await pages.create_page(PageDraft(title="Root"), editor)
    child = await pages.create_page(PageDraft(title="Child", parent_id=root.id), editor)
    grandchild = await pages.create_page(PageDraft(title="Grandchild", parent_id=child.id), editor)
    sibling = await pages.create_page(PageDraft(title="Sibling", parent_id=root.id), editor)
    other = await pages.create_page(PageDraft(title="Other"), editor)
    other_child = await pages.create_page(PageDraft(title="Other child", parent_id=other.id), editor)
    saves_before = store.save_count
    
    assert await pages.delete_page(child.id, editor) is True
    
    assert pages.get_by_id(child.id) is None
    assert pages.get_by_id(grandchild.id) is None
    remaining = {p.id for p in orchestrator.state.pages}
    assert remaining == {root.id, sibling.id, other.id, other_child.id}
    assert pages.list_children(root.id) == [sibling]
    # One flush for the whole subtree
    assert store.save_count == saves_before + 1
    assert {p["id"] for p in store.saved["pages"]} == remaining


@pytest.mark.asyncio
async def test_delete_unknown_page_returns_false(pages, editor, store):
    saves_before = store.save_count
    
    assert await pages.delete_page("missing", editor) is False
    assert store.save_count == saves_before


@pytest.mark.asyncio
async def test_delete_requires_editor_role(pages, guide):
    outsider = UserRecord(id="x", username="x", password="x", role="VIEWER")
    
    with pytest.raises(ForbiddenError):
        await pages.delete_page(guide.id, outsider)
    
    assert pages.get_by_id(guide.id) is guide


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", None])
async def test_blank_search_matches_nothing(pages, guide, query):
    assert pages.search(query) == []


@pytest.mark.asyncio
async def test_search_is_case_insensitive_substring(pages, editor, guide):
    sql = await pages.create_page(
        PageDraft(title="Queries", slug="db-notes", content="<p>SELECT from Users</p>"),
        editor,
    )
    
    assert pages.search("gui") == [guide]
    assert pages.search("  GUIDE ") == [guide]
    assert pages.search("db-no") == [sql]
    assert pages.search("select") == [sql]
    assert pages.search("nothing here") == []

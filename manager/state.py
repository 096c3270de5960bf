"""
In-memory mirror of the persisted document.

PageForest keeps pages by id together with a parentId -> children index
so that listing children and collecting subtrees never scan the whole
collection. WikiState bundles the forest with the user collection and is
what the orchestrator publishes to readers.
"""

from typing import Iterable, Iterator, Optional

from core.storage.base import PageRecord, StoreDocument, UserRecord


class PageForest:
    """
    Pages indexed by id and by parent.
    
    Child order is insertion order. A page whose parent_id names a missing
    page is still stored and indexed under that parent id; it is simply not
    reachable from the roots.
    """
    
    def __init__(self, pages: Iterable[PageRecord] = ()):
        self._pages: dict[str, PageRecord] = {}
        self._children: dict[Optional[str], list[str]] = {}
        for page in pages:
            self.add(page)
    
    def __len__(self) -> int:
        return len(self._pages)
    
    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages
    
    def __iter__(self) -> Iterator[PageRecord]:
        return iter(self._pages.values())
    
    def get(self, page_id: str) -> Optional[PageRecord]:
        return self._pages.get(page_id)
    
    def children_of(self, parent_id: Optional[str]) -> list[PageRecord]:
        """Direct children of parent_id; None selects root pages."""
        return [self._pages[child_id] for child_id in self._children.get(parent_id, [])]
    
    def add(self, page: PageRecord) -> None:
        if page.id in self._pages:
            raise KeyError(f"Duplicate page id: {page.id}")
        self._pages[page.id] = page
        self._children.setdefault(page.parent_id, []).append(page.id)
    
    def replace(self, page: PageRecord) -> None:
        """Swap in a new version of an existing page, re-indexing on a move."""
        previous = self._pages[page.id]
        self._pages[page.id] = page
        if previous.parent_id != page.parent_id:
            self._unlink(previous.parent_id, page.id)
            self._children.setdefault(page.parent_id, []).append(page.id)
    
    def collect_subtree(self, root_id: str) -> list[str]:
        """
        Ids of root_id and all its transitive descendants, depth-first.
        
        Iterative with an explicit stack; the visited set guarantees
        termination even if parent links form a cycle. Returns an empty
        list when root_id is unknown.
        """
        if root_id not in self._pages:
            return []
        
        collected: list[str] = []
        visited: set[str] = set()
        stack = [root_id]
        while stack:
            page_id = stack.pop()
            if page_id in visited:
                continue
            visited.add(page_id)
            collected.append(page_id)
            # Reversed so children are visited in their listed order
            stack.extend(reversed(self._children.get(page_id, [])))
        return collected
    
    def remove(self, page_ids: Iterable[str]) -> list[PageRecord]:
        removed = []
        for page_id in page_ids:
            page = self._pages.pop(page_id, None)
            if page is None:
                continue
            self._unlink(page.parent_id, page_id)
            removed.append(page)
        return removed
    
    def copy(self) -> "PageForest":
        clone = PageForest()
        clone._pages = dict(self._pages)
        clone._children = {
            parent_id: list(child_ids)
            for parent_id, child_ids in self._children.items()
        }
        return clone
    
    def _unlink(self, parent_id: Optional[str], page_id: str) -> None:
        siblings = self._children.get(parent_id)
        if not siblings:
            return
        siblings.remove(page_id)
        if not siblings:
            del self._children[parent_id]


class WikiState:
    """Users and pages as seen by one consistent snapshot."""
    
    def __init__(
        self,
        users: Optional[dict[str, UserRecord]] = None,
        pages: Optional[PageForest] = None,
    ):
        self.users: dict[str, UserRecord] = users if users is not None else {}
        self.pages: PageForest = pages if pages is not None else PageForest()
    
    @classmethod
    def from_document(cls, document: StoreDocument) -> "WikiState":
        return cls(
            users={user.id: user for user in document.users},
            pages=PageForest(document.pages),
        )
    
    def to_document(self) -> StoreDocument:
        return StoreDocument(
            users=list(self.users.values()),
            pages=list(self.pages),
        )
    
    def copy(self) -> "WikiState":
        """
        Independent copy for a writer to mutate.
        
        Records are shared; writers replace records instead of editing
        them in place.
        """
        return WikiState(users=dict(self.users), pages=self.pages.copy())
    
    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

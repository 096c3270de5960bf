"""
Wiki orchestrator - the single application-state object.

Owns the document store, the published in-memory state, the session
table and the services built on them. The API layer receives one
instance through dependency injection instead of reaching for module
globals.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional, TypeVar

from core.config import Settings, get_settings
from core.errors import StorageError
from core.logging import get_logger
from core.storage import BaseDocumentStore, create_document_store, utc_now
from manager.accounts import AccountService, build_seed_admin
from manager.page_tree import PageTreeService
from manager.sessions import SessionManager
from manager.state import WikiState


logger = get_logger(__name__)

T = TypeVar("T")


class WikiOrchestrator:
    """
    Application state and write coordination.
    
    - Loads the document at startup and seeds the admin account
    - Publishes one consistent WikiState snapshot to readers
    - Serializes writers; each write is applied to a copy, flushed, and
      only then published, so a failed flush changes nothing
    """
    
    def __init__(
        self,
        store: Optional[BaseDocumentStore] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the orchestrator.
        
        Args:
            store: Optional document store (default created from settings)
            settings: Optional settings (default get_settings())
            clock: Source of timestamps for created/updated fields
        """
        self.settings = settings or get_settings()
        self._store = store
        self._clock = clock
        self._state: Optional[WikiState] = None
        self._write_lock = asyncio.Lock()
        self._initialized = False
        
        self.sessions = SessionManager(self._lookup_user)
        self.accounts = AccountService(self)
        self.pages = PageTreeService(self)
    
    @property
    def is_initialized(self) -> bool:
        return self._initialized
    
    @property
    def state(self) -> WikiState:
        """The currently published snapshot."""
        self._ensure_initialized()
        return self._state
    
    @property
    def store(self) -> BaseDocumentStore:
        self._ensure_initialized()
        return self._store
    
    def now(self) -> datetime:
        return self._clock()
    
    async def initialize(self) -> None:
        """
        Load the document, seed the admin account if there are no users,
        and flush once.
        
        Any StorageError here is fatal: the service must not start
        against a document it cannot read or write.
        """
        if self._initialized:
            return
        
        if self._store is None:
            self._store = create_document_store(self.settings)
        
        logger.info("Initializing orchestrator", location=self._store.location)
        
        document = await self._store.load()
        try:
            state = WikiState.from_document(document)
        except KeyError as e:
            raise StorageError(f"Inconsistent document at {self._store.location}: {e}") from e
        
        if not state.users:
            admin = build_seed_admin(self.settings, self.now())
            state.users[admin.id] = admin
            logger.info("Seeded admin account", username=admin.username)
        
        await self._store.save(state.to_document())
        self._state = state
        self._initialized = True
        
        logger.info(
            "Orchestrator initialized",
            users=len(state.users),
            pages=len(state.pages),
        )
    
    async def shutdown(self) -> None:
        """Close the store."""
        logger.info("Shutting down orchestrator")
        
        if self._store is not None:
            await self._store.close()
        
        self._initialized = False
        logger.info("Orchestrator shut down")
    
    async def commit(self, mutation: Callable[[WikiState], T]) -> T:
        """
        Apply a mutation as one atomic, durable unit.
        
        The mutation receives a private copy of the state. If it raises,
        or the flush fails, the published state is left as it was.
        
        Args:
            mutation: Function editing the draft state and returning a result
        
        Returns:
            Whatever mutation returned
        """
        self._ensure_initialized()
        
        async with self._write_lock:
            draft = self._state.copy()
            result = mutation(draft)
            try:
                await self._store.save(draft.to_document())
            except StorageError as e:
                logger.error(
                    "Flush failed, mutation discarded",
                    location=self._store.location,
                    error=e.message,
                )
                raise
            self._state = draft
        
        return result
    
    def _lookup_user(self, user_id: str):
        if self._state is None:
            return None
        return self._state.users.get(user_id)
    
    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "Orchestrator not initialized. Call initialize() first."
            )

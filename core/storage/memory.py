"""
In-memory storage backend.

Used for tests and throwaway demo instances. Documents are kept in their
serialized form so that later mutations of live records cannot leak into
what was "persisted".
"""

import copy
from typing import Any, Optional

from core.logging import get_logger
from core.storage.base import BaseDocumentStore, StoreDocument


logger = get_logger(__name__)


class InMemoryDocumentStore(BaseDocumentStore):
    """Process-local document store."""
    
    def __init__(self, initial: Optional[StoreDocument] = None):
        self._saved: Optional[dict[str, Any]] = (
            initial.to_dict() if initial is not None else None
        )
        self.save_count = 0
    
    @property
    def location(self) -> str:
        return "memory"
    
    @property
    def saved(self) -> Optional[dict[str, Any]]:
        """Serialized form of the last saved document, if any."""
        return copy.deepcopy(self._saved)
    
    async def load(self) -> StoreDocument:
        return StoreDocument.from_dict(self._saved)
    
    async def save(self, document: StoreDocument) -> None:
        self._saved = document.to_dict()
        self.save_count += 1
    
    async def close(self) -> None:
        logger.debug("In-memory document store closed", saves=self.save_count)

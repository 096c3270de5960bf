"""
Storage factory for creating document store instances.

This module provides the factory function that creates the appropriate
storage implementation based on configuration.
"""

from enum import Enum
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.storage.base import BaseDocumentStore


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    JSON = "json"
    MEMORY = "memory"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.
    
    Args:
        settings: Application settings
        
    Returns:
        The configured storage backend
    """
    backend_str = settings.storage_backend.lower()
    
    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_document_store(settings: "Settings") -> BaseDocumentStore:
    """
    Create a document store based on settings.
    
    Args:
        settings: Application settings
        
    Returns:
        Configured store instance (nothing is read until load())
    """
    backend = get_storage_backend(settings)
    
    if backend == StorageBackend.JSON:
        from core.storage.json_file import JsonFileDocumentStore
        
        logger.info("Creating JSON document store", path=str(settings.db_file))
        return JsonFileDocumentStore(settings.db_file)
    
    elif backend == StorageBackend.MEMORY:
        from core.storage.memory import InMemoryDocumentStore
        
        logger.info("Creating in-memory document store")
        return InMemoryDocumentStore()
    
    else:
        raise ValueError(f"Unsupported backend: {backend}")

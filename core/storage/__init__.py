"""
Storage abstraction layer.

Provides pluggable backends for the single users/pages document:
- JSON file (default, durable)
- In-memory (tests, throwaway instances)
"""

from core.storage.base import (
    BaseDocumentStore,
    PageRecord,
    PageType,
    StoreDocument,
    UserRecord,
    UserRole,
    utc_now,
)
from core.storage.factory import (
    create_document_store,
    get_storage_backend,
    StorageBackend,
)

__all__ = [
    # Abstract interface and records
    "BaseDocumentStore",
    "PageRecord",
    "PageType",
    "StoreDocument",
    "UserRecord",
    "UserRole",
    "utc_now",
    # Factory functions
    "create_document_store",
    "get_storage_backend",
    "StorageBackend",
]

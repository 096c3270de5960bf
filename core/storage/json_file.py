"""
JSON file storage backend.

Keeps the users/pages document in a single JSON file. Writes go to a
temporary file in the same directory which then atomically replaces the
target, so a failed flush never leaves a truncated document behind.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Union

from core.errors import StorageError
from core.logging import get_logger
from core.storage.base import BaseDocumentStore, StoreDocument


logger = get_logger(__name__)


class JsonFileDocumentStore(BaseDocumentStore):
    """
    File-backed document store.
    
    The parent directory is created on load if missing. File I/O runs in
    a worker thread so the event loop keeps serving reads during a flush.
    """
    
    def __init__(self, path: Union[str, Path]):
        """
        Initialize the JSON file store.
        
        Args:
            path: Location of the JSON document
        """
        self._path = Path(path)
    
    @property
    def path(self) -> Path:
        return self._path
    
    @property
    def location(self) -> str:
        return str(self._path)
    
    async def load(self) -> StoreDocument:
        """Read the document, creating the parent directory if needed."""
        document = await asyncio.to_thread(self._read)
        logger.info(
            "Document loaded",
            path=self.location,
            users=len(document.users),
            pages=len(document.pages),
        )
        return document
    
    async def save(self, document: StoreDocument) -> None:
        """Atomically rewrite the document."""
        payload = json.dumps(document.to_dict(), ensure_ascii=False, indent=2)
        await asyncio.to_thread(self._write, payload)
        logger.debug(
            "Document flushed",
            path=self.location,
            users=len(document.users),
            pages=len(document.pages),
        )
    
    async def close(self) -> None:
        """Nothing is held open between calls."""
        logger.info("JSON document store closed", path=self.location)
    
    def _read(self) -> StoreDocument:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create data directory {self._path.parent}: {e}"
            ) from e
        
        if not self._path.exists():
            return StoreDocument()
        
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self._path}: {e}") from e
        
        if not raw.strip():
            return StoreDocument()
        
        try:
            return StoreDocument.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StorageError(f"Malformed document in {self._path}: {e}") from e
    
    def _write(self, payload: str) -> None:
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Cannot write {self._path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

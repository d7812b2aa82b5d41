"""
Document storage backends.

A `DocumentStore` is built once in `create_app` and held on
`app.state.document_store`; routes get it through `get_document_store`.
Only the store-relative key is persisted on the `Document` row.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Protocol

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    async def save(self, filename: str, data: bytes) -> str:
        """Persist `data` and return the storage key."""

    def local_path(self, key: str) -> Path:
        """Filesystem path for a stored key."""

    async def delete(self, key: str) -> None:
        """Remove a stored key; a missing key is not an error."""


class LocalDocumentStore:
    """Stores files under a root directory, one random name per upload."""

    def __init__(self, root: str | os.PathLike[str]):
        self.root = Path(root).resolve()

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Storage key escapes document root: {key!r}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save(self, filename: str, data: bytes) -> str:
        suffix = Path(filename).suffix.lower()
        key = f"documents/{uuid.uuid4().hex}{suffix}"
        await run_in_threadpool(self._write, key, data)
        logger.debug("Stored %d bytes as %s", len(data), key)
        return key

    def local_path(self, key: str) -> Path:
        return self._resolve(key)

    async def delete(self, key: str) -> None:
        path = self._resolve(key)
        await run_in_threadpool(path.unlink, missing_ok=True)
        logger.debug("Removed %s", key)


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store

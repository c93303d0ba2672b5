"""
Content-addressed blob storage.

Binary payloads are stored once per distinct content, named by their hash.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from ..config import RecorderOptions
from ..errors import InvalidReferenceError, StoreReadError, StoreWriteError
from ..integrity.verification import verify_blob_integrity
from .layout import BlobLayout

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Content-addressed store for binary payloads.

    Blobs are stored by their content hash.
    Once written, blobs never change and are never deleted.

    put() and get() are coroutines; the file I/O runs in a worker thread
    so each call is a suspension point for the caller's event loop.
    """

    def __init__(self, layout: BlobLayout, options: RecorderOptions = None):
        """Initialize blob store with given layout and hashing options."""
        self.layout = layout
        self.options = options or RecorderOptions()

    async def put(self, data: bytes) -> str:
        """
        Store a payload and return its identifier.

        The payload is stored immutably:
        - Identifier is computed from the exact bytes
        - Payload is written atomically
        - If the identifier already exists, no action (idempotent)
        """
        data = bytes(data)
        identifier = self.options.blob_identifier(data)
        await asyncio.to_thread(self._write_if_absent, identifier, data)
        return identifier

    async def get(self, identifier: str, verify: bool = False) -> bytes:
        """
        Retrieve a payload by its identifier.

        If verify=True, re-hashes the bytes before returning.

        Raises StoreReadError if the blob doesn't exist or can't be read.
        Raises BlobCorruptedError if verification fails.
        """
        try:
            path = self.layout.get_blob_path(identifier)
        except InvalidReferenceError as e:
            raise StoreReadError(str(identifier), e.reason, e) from e

        data = await asyncio.to_thread(self._read_blob_file, identifier, path)
        logger.debug("Read blob %s (%d bytes)", identifier, len(data))

        if verify:
            verify_blob_integrity(data, identifier, self.options)

        return data

    def has_blob(self, identifier: str) -> bool:
        """Check if a blob exists in the store."""
        try:
            path = self.layout.get_blob_path(identifier)
        except InvalidReferenceError:
            return False

        try:
            return path.is_file()
        except OSError as e:
            raise StoreReadError(identifier, f"cannot stat {path}", e) from e

    def list_blobs(self) -> list[str]:
        """List all blob identifiers in the store."""
        return self.layout.list_blobs(self.options.blob_extension)

    def get_stats(self) -> dict:
        """Get storage statistics."""
        return self.layout.get_storage_stats(self.options.blob_extension)

    def _write_if_absent(self, identifier: str, data: bytes) -> None:
        path = self.layout.get_blob_path(identifier)

        try:
            # Same name means same content
            if path.is_file():
                logger.debug("Blob %s already stored", identifier)
                return

            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_blob_atomic(path, data)
        except OSError as e:
            raise StoreWriteError(identifier, str(path), e) from e

        logger.debug("Wrote blob %s (%d bytes)", identifier, len(data))

    def _read_blob_file(self, identifier: str, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StoreReadError(identifier, "not found", e) from e
        except OSError as e:
            raise StoreReadError(identifier, f"cannot read {path}", e) from e

    def _write_blob_atomic(self, path: Path, data: bytes) -> None:
        """
        Write blob file atomically.

        Uses temp file + rename, so a concurrent writer of the same
        content never sees a partial file.
        """
        fd = None
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix='.tmp_',
                suffix=path.suffix,
            )

            with os.fdopen(fd, 'wb') as f:
                fd = None
                f.write(data)

            os.replace(temp_path, path)
            temp_path = None

        finally:
            if fd is not None:
                os.close(fd)
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

"""
Recorder Engine.

Main entry point coordinating the blob store, the tree codec and
document persistence.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List

from .codec import TreeCodec
from .config import RecorderOptions
from .errors import BlobCorruptedError, DocumentFormatError, StoreWriteError
from .integrity.canonical import dumps_document, loads_document
from .model.value import Value
from .storage.blob_store import BlobStore
from .storage.layout import BlobLayout

logger = logging.getLogger(__name__)


class RecorderEngine:
    """
    Main engine for recording and replaying value trees.

    This is the primary interface for:
    - Encoding value trees into documents (blobs go to the store)
    - Decoding documents back into value trees
    - Recording documents to disk and replaying them
    - Checking stored blobs against their identifiers
    """

    def __init__(
        self,
        root_dir: str | Path,
        hash_algorithm: str = 'md5',
        hash_digest_encoding: str = 'hex',
        blob_extension: str = 'wav',
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize a recorder rooted at the given directory.

        Args:
            root_dir: directory holding blobs and recorded documents
            hash_algorithm: digest used for blob identifiers
            hash_digest_encoding: 'hex' or 'base64'
            blob_extension: file extension appended to blob identifiers
            clock: seconds since the epoch, used to name recordings
        """
        self.options = RecorderOptions(hash_algorithm, hash_digest_encoding, blob_extension)
        self.layout = BlobLayout(Path(root_dir))
        self.store = BlobStore(self.layout, self.options)
        self.codec = TreeCodec(self.store)
        self.clock = clock

    @property
    def root_dir(self) -> Path:
        return self.layout.root

    def initialize(self) -> None:
        """
        Initialize the recording directory.

        Safe to call multiple times (idempotent).
        """
        self.layout.initialize()

    # ========== Codec ==========

    async def encode_to_document(self, value: Value) -> Any:
        """Encode a value tree, externalizing its blobs."""
        return await self.codec.encode(value)

    async def decode_from_document(self, document: Any) -> Value:
        """Decode a document, loading its blobs."""
        return await self.codec.decode(document)

    # ========== Recordings ==========

    async def record(self, value: Value, kind: str) -> Path:
        """
        Encode a value tree and write it as a new recording.

        The document file is written only after the whole tree encoded
        successfully.

        Returns:
            Path: location of the written document
        """
        self.layout.validate_kind(kind)

        document = await self.codec.encode(value)
        text = dumps_document(document)

        path = await asyncio.to_thread(self._write_document, kind, text)
        logger.debug("Recorded %s document %s", kind, path.name)
        return path

    async def replay(self, file: str | Path) -> Value:
        """
        Read a recording and decode it.

        Relative names resolve against the recording directory.

        Raises DocumentFormatError if the file is missing or not valid JSON.
        Raises StoreReadError if a referenced blob cannot be read.
        """
        path = self.layout.get_document_path(file)
        text = await asyncio.to_thread(self._read_document, path)
        document = loads_document(text, str(path))

        value = await self.codec.decode(document)
        logger.debug("Replayed document %s", path.name)
        return value

    def list_recordings(self) -> List[str]:
        """List recorded document names, oldest first."""
        return self.layout.list_documents()

    # ========== Integrity Verification ==========

    async def verify_blob(self, identifier: str) -> bool:
        """
        Verify a blob's integrity.

        Returns True if valid.
        Raises BlobCorruptedError if corrupted.
        """
        await self.store.get(identifier, verify=True)
        return True

    async def detect_tampering(self) -> Dict[str, Any]:
        """
        Detect tampering across all stored blobs.

        Returns dict with:
            - tampered: list of blob identifiers whose content changed
            - verified: count of verified blobs
        """
        result = {
            'tampered': [],
            'verified': 0,
        }

        for identifier in self.store.list_blobs():
            try:
                await self.verify_blob(identifier)
            except BlobCorruptedError as e:
                logger.warning("Blob %s failed verification: %s", identifier, e.reason)
                result['tampered'].append(identifier)
            else:
                result['verified'] += 1

        return result

    # ========== Statistics ==========

    def get_statistics(self) -> Dict[str, Any]:
        """Get recording directory statistics."""
        return self.store.get_stats()

    def _write_document(self, kind: str, text: str) -> Path:
        timestamp_ms = int(self.clock() * 1000)
        path = self.layout.root / self.layout.new_document_name(kind, timestamp_ms)

        try:
            # 'x' refuses to clobber a recording made in the same millisecond
            while True:
                try:
                    with path.open('x', encoding='utf-8') as f:
                        f.write(text)
                    return path
                except FileExistsError:
                    timestamp_ms += 1
                    path = self.layout.root / self.layout.new_document_name(kind, timestamp_ms)
        except OSError as e:
            raise StoreWriteError(path.name, str(path), e) from e

    @staticmethod
    def _read_document(path: Path) -> str:
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise DocumentFormatError("document not found", str(path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentFormatError(f"cannot read document: {e}", str(path)) from e

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (
            f"RecorderEngine("
            f"path={self.root_dir}, "
            f"blobs={stats.get('total_blobs', 0)}, "
            f"documents={stats.get('documents', 0)})"
        )

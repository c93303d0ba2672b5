"""
Tree codec.

Converts value trees into JSON-safe documents and back, moving every blob
into a BlobStore on the way out and fetching it on the way back in.

Both walks are depth-first and strictly sequential: a container's children
are processed one at a time, in order, each child's whole subtree
(including its blob I/O) finishing before the next child starts. Blob
writes and reads therefore always happen in document pre-order.
"""

import logging
from typing import Any

from .errors import DocumentFormatError, InvalidValueError
from .model.document import BUFFER_KEY, TYPE_KEY, blob_ref, is_blob_ref, is_type_marker, type_marker
from .model.value import (
    NULL,
    Blob,
    ErrorValue,
    Mapping,
    Null,
    Opaque,
    Primitive,
    Sequence,
    Value,
)
from .storage.blob_store import BlobStore

logger = logging.getLogger(__name__)


class TreeCodec:
    """
    Two-way codec between Value trees and documents.

    A failure at any node aborts the whole call with that error; no partial
    document or value is ever returned.
    """

    def __init__(self, store: BlobStore):
        self.store = store

    async def encode(self, value: Value) -> Any:
        """
        Encode a value tree into a document.

        Raises StoreWriteError if a blob cannot be stored.
        Raises InvalidValueError if the tree contains a non-Value node.
        """
        document = await self._deconstruct(value)
        logger.debug("Encoded %s value", value.kind)
        return document

    async def decode(self, document: Any) -> Value:
        """
        Decode a document into a value tree.

        Raises StoreReadError if a referenced blob cannot be read.
        Raises DocumentFormatError if the document holds non-JSON data.
        """
        value = await self._reconstruct(document)
        logger.debug("Decoded document into %s value", value.kind)
        return value

    async def _deconstruct(self, value: Value) -> Any:
        if isinstance(value, Opaque):
            return type_marker(value.type_name)

        if isinstance(value, ErrorValue):
            return value.fields()

        if isinstance(value, Blob):
            identifier = await self.store.put(value.data)
            return blob_ref(identifier)

        if isinstance(value, Sequence):
            items = []
            for item in value:
                items.append(await self._deconstruct(item))
            return items

        if isinstance(value, Mapping):
            entries = {}
            for key, item in value.items():
                entries[key] = await self._deconstruct(item)
            if is_blob_ref(entries) or is_type_marker(entries):
                raise InvalidValueError(
                    f"mapping with keys {list(entries)} would decode as a "
                    f"{BUFFER_KEY} or {TYPE_KEY} marker"
                )
            return entries

        if isinstance(value, Primitive):
            return value.value

        if isinstance(value, Null):
            return None

        raise InvalidValueError(f"cannot encode {type(value).__name__}, expected a Value")

    async def _reconstruct(self, node: Any) -> Value:
        if node is None:
            return NULL

        if is_blob_ref(node):
            data = await self.store.get(node[BUFFER_KEY])
            return Blob(data)

        # opaque contents were never recorded
        if is_type_marker(node):
            return NULL

        if isinstance(node, list):
            items = []
            for item in node:
                items.append(await self._reconstruct(item))
            return Sequence(items)

        if isinstance(node, dict):
            entries = {}
            for key, item in node.items():
                if not isinstance(key, str):
                    raise DocumentFormatError(f"mapping key must be a string, got {key!r}")
                entries[key] = await self._reconstruct(item)
            return Mapping(entries)

        if isinstance(node, (str, int, float, bool)):
            try:
                return Primitive(node)
            except InvalidValueError as e:
                raise DocumentFormatError(e.reason) from e

        raise DocumentFormatError(f"unexpected {type(node).__name__} node in document")


async def encode_to_document(value: Value, store: BlobStore) -> Any:
    """Encode a value tree, storing its blobs in store."""
    return await TreeCodec(store).encode(value)


async def decode_from_document(document: Any, store: BlobStore) -> Value:
    """Decode a document, reading its blobs from store."""
    return await TreeCodec(store).decode(document)

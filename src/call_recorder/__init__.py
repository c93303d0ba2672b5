"""
Call Recorder - Content-addressed recording of value trees.

This package provides:
- A tagged Value model for recorded trees
- Blob externalization into a content-addressed store
- A sequential two-way codec between value trees and JSON documents
- Recording and replay of documents on disk

Main entry point:
    RecorderEngine - primary interface for all operations

Example usage:
    from call_recorder import RecorderEngine, classify

    engine = RecorderEngine('/path/to/recordings')
    engine.initialize()

    path = await engine.record(classify({'audio': b'...', 'label': 'hi'}), 'session')
    value = await engine.replay(path)
"""

from .codec import TreeCodec, decode_from_document, encode_to_document
from .config import RecorderOptions
from .engine import RecorderEngine
from .errors import (
    RecorderError,
    StoreWriteError,
    StoreReadError,
    BlobCorruptedError,
    DocumentFormatError,
    InvalidValueError,
    InvalidReferenceError,
    ConfigurationError,
)
from .model.value import (
    NULL,
    Value,
    Null,
    Primitive,
    Sequence,
    Mapping,
    Blob,
    Opaque,
    ErrorValue,
    classify,
)
from .storage.blob_store import BlobStore
from .storage.layout import BlobLayout

__version__ = '0.1.0'

__all__ = [
    # Main engine
    'RecorderEngine',
    'RecorderOptions',

    # Codec and store
    'TreeCodec',
    'encode_to_document',
    'decode_from_document',
    'BlobStore',
    'BlobLayout',

    # Errors
    'RecorderError',
    'StoreWriteError',
    'StoreReadError',
    'BlobCorruptedError',
    'DocumentFormatError',
    'InvalidValueError',
    'InvalidReferenceError',
    'ConfigurationError',

    # Values
    'NULL',
    'Value',
    'Null',
    'Primitive',
    'Sequence',
    'Mapping',
    'Blob',
    'Opaque',
    'ErrorValue',
    'classify',
]

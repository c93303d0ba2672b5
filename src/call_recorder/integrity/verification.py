"""
Integrity verification for stored blobs.

A blob's identifier is its own checksum: re-hashing the stored bytes
must reproduce the name the blob is stored under.
"""

from ..config import RecorderOptions
from ..errors import BlobCorruptedError


def verify_blob_integrity(data: bytes, identifier: str, options: RecorderOptions) -> None:
    """
    Verify that blob content matches its identifier.

    Raises BlobCorruptedError if mismatch detected.
    """
    actual = options.blob_identifier(data)
    if actual != identifier:
        raise BlobCorruptedError(identifier, actual)


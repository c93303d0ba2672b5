"""
Recorder options.

Selects how blob identifiers are derived and named on disk.
"""

from .errors import ConfigurationError
from .integrity.hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGEST_ENCODING,
    compute_hash,
    validate_hash_options,
)

DEFAULT_BLOB_EXTENSION = 'wav'


class RecorderOptions:
    """
    Hashing and naming options shared by the blob store and the engine.

    Validated once at construction so a bad option fails before any
    blob is written.
    """

    def __init__(
        self,
        hash_algorithm: str = DEFAULT_ALGORITHM,
        hash_digest_encoding: str = DEFAULT_DIGEST_ENCODING,
        blob_extension: str = DEFAULT_BLOB_EXTENSION,
    ):
        validate_hash_options(hash_algorithm, hash_digest_encoding)

        extension = blob_extension.lstrip('.')
        if not extension or '/' in extension or '\\' in extension:
            raise ConfigurationError(f"Invalid blob extension: {blob_extension!r}")

        self.hash_algorithm = hash_algorithm
        self.hash_digest_encoding = hash_digest_encoding
        self.blob_extension = extension

    def digest(self, data: bytes) -> str:
        """Content digest of data under these options, without extension."""
        return compute_hash(data, self.hash_algorithm, self.hash_digest_encoding)

    def blob_identifier(self, data: bytes) -> str:
        """Full blob identifier: <digest>.<extension>."""
        return f"{self.digest(data)}.{self.blob_extension}"

    def __repr__(self) -> str:
        return (
            f"RecorderOptions(hash_algorithm={self.hash_algorithm!r}, "
            f"hash_digest_encoding={self.hash_digest_encoding!r}, "
            f"blob_extension={self.blob_extension!r})"
        )

"""
Filesystem layout for a recording directory.

Blobs and documents live side by side in one flat directory.
"""

from pathlib import Path

from ..errors import InvalidReferenceError, InvalidValueError, StoreReadError, StoreWriteError

DOCUMENT_SUFFIX = '.json'


class BlobLayout:
    """
    Manages filesystem layout for content-addressed blobs and documents.

    Layout:
        root/
            <digest>.<ext>          # blob, named by its content hash
            <epoch-ms>-<kind>.json  # recorded document
    """

    def __init__(self, root: Path):
        """Initialize layout at given root."""
        self.root = Path(root).resolve()

    def initialize(self) -> None:
        """
        Create the root directory.

        Idempotent - safe to call multiple times.
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreWriteError('<root>', str(self.root), e) from e

    def get_blob_path(self, identifier: str) -> Path:
        """
        Get filesystem path for a blob by its identifier.

        Identifiers are bare file names; anything that could step outside
        the root is rejected.
        """
        self.validate_identifier(identifier)
        return self.root / identifier

    def get_document_path(self, name: str | Path) -> Path:
        """Resolve a document name against the root. Absolute paths are kept."""
        return (self.root / name).resolve()

    @staticmethod
    def validate_kind(kind: str) -> str:
        """
        Sanitize a recording kind for use in a file name.

        Raises InvalidValueError if nothing usable is left.
        """
        if not isinstance(kind, str):
            raise InvalidValueError(f"recording kind must be str, got {type(kind).__name__}")
        safe_kind = kind.replace('/', '_').replace('\\', '_').replace('\x00', '_').lstrip('.')
        if not safe_kind:
            raise InvalidValueError(f"recording kind is empty after sanitization: {kind!r}")
        return safe_kind

    @classmethod
    def new_document_name(cls, kind: str, timestamp_ms: int) -> str:
        """Document file name for a recording of the given kind."""
        return f"{timestamp_ms}-{cls.validate_kind(kind)}{DOCUMENT_SUFFIX}"

    @staticmethod
    def validate_identifier(identifier: str) -> None:
        if not isinstance(identifier, str) or not identifier:
            raise InvalidReferenceError(f"blob identifier must be a non-empty string, got {identifier!r}")
        if '/' in identifier or '\\' in identifier or '\x00' in identifier:
            raise InvalidReferenceError(f"blob identifier contains a path separator: {identifier!r}")
        if identifier.startswith('.'):
            raise InvalidReferenceError(f"blob identifier starts with a dot: {identifier!r}")

    def list_blobs(self, extension: str) -> list[str]:
        """List all blob identifiers with the given extension."""
        suffix = f".{extension}"
        try:
            if not self.root.exists():
                return []
            return sorted(
                f.name for f in self.root.iterdir()
                if f.is_file() and f.name.endswith(suffix)
            )
        except OSError as e:
            raise StoreReadError('<root>', f"cannot list {self.root}", e) from e

    def list_documents(self) -> list[str]:
        """List all document file names, oldest recording first."""
        try:
            if not self.root.exists():
                return []
            names = [
                f.name for f in self.root.iterdir()
                if f.is_file() and f.name.endswith(DOCUMENT_SUFFIX)
            ]
        except OSError as e:
            raise StoreReadError('<root>', f"cannot list {self.root}", e) from e

        return sorted(names, key=_document_sort_key)

    def get_storage_stats(self, extension: str) -> dict:
        """
        Get storage statistics.

        Returns dict with:
        - total_blobs: number of blobs
        - total_blob_bytes: total blob size in bytes
        - documents: number of recorded documents
        """
        stats = {
            'total_blobs': 0,
            'total_blob_bytes': 0,
            'documents': 0,
        }

        for identifier in self.list_blobs(extension):
            path = self.get_blob_path(identifier)
            try:
                size = path.stat().st_size
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StoreReadError(identifier, f"cannot stat {path}", e) from e
            stats['total_blobs'] += 1
            stats['total_blob_bytes'] += size

        stats['documents'] = len(self.list_documents())
        return stats


def _document_sort_key(name: str) -> tuple:
    prefix, _, _ = name.partition('-')
    if prefix.isdigit():
        return (0, int(prefix), name)
    return (1, 0, name)

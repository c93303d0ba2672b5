"""
Error types for recorder operations.

All errors are explicit and never silent. A failure anywhere in a
recursive walk surfaces as one of these for the whole call.
"""


class RecorderError(Exception):
    """Base exception for all recorder errors."""
    pass


class StoreWriteError(RecorderError):
    """Raised when a blob cannot be persisted."""

    def __init__(self, identifier: str, path: str, cause: Exception = None):
        self.identifier = identifier
        self.path = path
        self.cause = cause
        msg = f"Failed to write blob {identifier}: {path}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class StoreReadError(RecorderError):
    """Raised when a blob cannot be retrieved, including when it does not exist."""

    def __init__(self, identifier: str, reason: str, cause: Exception = None):
        self.identifier = identifier
        self.reason = reason
        self.cause = cause
        msg = f"Failed to read blob {identifier}: {reason}"
        if cause:
            msg += f"\nCause: {cause}"
        super().__init__(msg)


class BlobCorruptedError(StoreReadError):
    """Raised when a blob's content no longer matches its identifier."""

    def __init__(self, identifier: str, actual: str):
        self.actual = actual
        super().__init__(
            identifier,
            f"content hashes to {actual}",
        )


class DocumentFormatError(RecorderError):
    """Raised when persisted document text is not valid structured data."""

    def __init__(self, reason: str, path: str = None):
        self.reason = reason
        self.path = path
        msg = f"Invalid document: {reason}"
        if path:
            msg += f" (path: {path})"
        super().__init__(msg)


class InvalidValueError(RecorderError):
    """Raised when a value tree is malformed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid value: {reason}")


class InvalidReferenceError(RecorderError):
    """Raised when a blob identifier is not a safe store-relative name."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid reference: {reason}")


class ConfigurationError(RecorderError):
    """Raised when recorder options name an unsupported hash or encoding."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid configuration: {reason}")

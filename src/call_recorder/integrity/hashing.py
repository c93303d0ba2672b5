"""
Content-addressed hashing for blob identifiers.

Provides deterministic digest computation over raw bytes using any
fixed-size hashlib algorithm or BLAKE3.
"""

import base64
import hashlib

import blake3

from ..errors import ConfigurationError

DEFAULT_ALGORITHM = 'md5'
DEFAULT_DIGEST_ENCODING = 'hex'

DIGEST_ENCODINGS = ('hex', 'base64')


def _new_hasher(algorithm: str):
    if algorithm == 'blake3':
        return blake3.blake3()
    try:
        hasher = hashlib.new(algorithm)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Unsupported hash algorithm: {algorithm!r}") from e
    # shake_* and friends need an explicit output length
    if hasher.digest_size == 0:
        raise ConfigurationError(f"Hash algorithm has no fixed digest size: {algorithm!r}")
    return hasher


def validate_hash_options(algorithm: str, digest_encoding: str) -> None:
    """
    Check that an algorithm and digest encoding are usable.

    Raises ConfigurationError otherwise.
    """
    _new_hasher(algorithm)
    if digest_encoding not in DIGEST_ENCODINGS:
        raise ConfigurationError(
            f"Unsupported digest encoding: {digest_encoding!r} "
            f"(expected one of {', '.join(DIGEST_ENCODINGS)})"
        )


def encode_digest(digest: bytes, digest_encoding: str = DEFAULT_DIGEST_ENCODING) -> str:
    """
    Render a raw digest as identifier text.

    'hex' is lowercase hexadecimal. 'base64' uses the URL-safe alphabet
    without padding so the result is always a valid file name.
    """
    if digest_encoding == 'hex':
        return digest.hex()
    if digest_encoding == 'base64':
        return base64.urlsafe_b64encode(digest).decode('ascii').rstrip('=')
    raise ConfigurationError(f"Unsupported digest encoding: {digest_encoding!r}")


def compute_hash(
    data: bytes,
    algorithm: str = DEFAULT_ALGORITHM,
    digest_encoding: str = DEFAULT_DIGEST_ENCODING,
) -> str:
    """
    Compute the content hash of raw bytes.

    The result depends only on the bytes and the configured algorithm and
    encoding, never on where the bytes came from.
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return encode_digest(hasher.digest(), digest_encoding)


def verify_hash(
    data: bytes,
    expected_hash: str,
    algorithm: str = DEFAULT_ALGORITHM,
    digest_encoding: str = DEFAULT_DIGEST_ENCODING,
) -> bool:
    """
    Verify that data matches expected hash.

    Returns True if match, False otherwise.
    """
    return compute_hash(data, algorithm, digest_encoding) == expected_hash

"""
Text encoding for persisted documents.

Documents are written as indented JSON that reads back unchanged.
Unlike a hashing encoding, key order is kept exactly as produced.
"""

import json
from typing import Any

from ..errors import DocumentFormatError


def dumps_document(document: Any) -> str:
    """
    Encode a document as human-readable JSON text.

    Rules:
    - Two-space indentation
    - Key insertion order preserved
    - Non-ASCII text kept as-is
    - NaN and infinities rejected
    """
    try:
        return json.dumps(
            document,
            indent=2,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise DocumentFormatError(f"Document cannot be encoded: {e}") from e


def loads_document(text: str, path: str = None) -> Any:
    """
    Decode document text.

    Raises DocumentFormatError if the text is not valid JSON.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise DocumentFormatError(str(e), path) from e


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant: {name}")

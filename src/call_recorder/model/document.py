"""
Document markers.

A document is plain JSON data. Two marker shapes stand in for what JSON
cannot carry:

    {"$buffer": "<identifier>"}   # blob stored in the blob store
    {"$type": "<type name>"}      # opaque value, contents dropped
"""

from typing import Any

BUFFER_KEY = '$buffer'
TYPE_KEY = '$type'


def blob_ref(identifier: str) -> dict:
    """Marker for a blob stored under identifier."""
    return {BUFFER_KEY: identifier}


def type_marker(type_name: str) -> dict:
    """Marker for an opaque value of the given type."""
    return {TYPE_KEY: type_name}


def is_blob_ref(node: Any) -> bool:
    """True if node is a dict carrying a non-empty $buffer."""
    return isinstance(node, dict) and bool(node.get(BUFFER_KEY))


def is_type_marker(node: Any) -> bool:
    """True if node carries a non-empty $type and is not a blob ref."""
    return isinstance(node, dict) and bool(node.get(TYPE_KEY)) and not is_blob_ref(node)

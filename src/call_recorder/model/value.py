"""
Value tree model.

Value is the tagged union the codec walks. Producers classify every node
up front, either by building variants directly or with classify().
"""

import math
import traceback
from typing import Any, Iterable, Iterator, Optional

from ..errors import InvalidValueError

PRIMITIVE_TYPES = (str, int, float, bool)


class Value:
    """
    Base class for every node of a value tree.

    Equality is structural: same variant, same payload, same order.
    """

    __slots__ = ()

    kind = 'value'

    def _key(self) -> Any:
        raise NotImplementedError

    def to_native(self) -> Any:
        """Convert to plain Python data."""
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind == other.kind and self._key() == other._key()

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None


class Null(Value):
    """Absence of value."""

    __slots__ = ()

    kind = 'null'

    def _key(self) -> Any:
        return None

    def to_native(self) -> None:
        return None

    def __repr__(self) -> str:
        return "NULL"


NULL = Null()


class Primitive(Value):
    """A string, number or boolean, passed through the codec unchanged."""

    __slots__ = ('value',)

    kind = 'primitive'

    def __init__(self, value):
        if not isinstance(value, PRIMITIVE_TYPES):
            raise InvalidValueError(
                f"primitive must be str, int, float or bool, got {type(value).__name__}"
            )
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidValueError(f"primitive float must be finite, got {value!r}")
        self.value = value

    def _key(self) -> Any:
        # keeps True distinct from 1
        return (type(self.value), self.value)

    def to_native(self):
        return self.value

    def __repr__(self) -> str:
        return f"Primitive({self.value!r})"


class Sequence(Value):
    """An ordered list of values."""

    __slots__ = ('items',)

    kind = 'sequence'

    def __init__(self, items: Iterable[Value] = ()):
        items = list(items)
        for index, item in enumerate(items):
            if not isinstance(item, Value):
                raise InvalidValueError(
                    f"sequence item {index} is {type(item).__name__}, not a Value"
                )
        self.items = items

    def _key(self) -> Any:
        return self.items

    def to_native(self) -> list:
        return [item.to_native() for item in self.items]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def __repr__(self) -> str:
        return f"Sequence({self.items!r})"


class Mapping(Value):
    """
    String-keyed values in insertion order.

    Two mappings with the same entries in a different order are not equal;
    order is part of what gets recorded.
    """

    __slots__ = ('entries',)

    kind = 'mapping'

    def __init__(self, entries=()):
        pairs = entries.items() if isinstance(entries, dict) else entries
        result = {}
        for key, item in pairs:
            if not isinstance(key, str):
                raise InvalidValueError(
                    f"mapping key must be str, got {type(key).__name__}: {key!r}"
                )
            if key in result:
                raise InvalidValueError(f"duplicate mapping key: {key!r}")
            if not isinstance(item, Value):
                raise InvalidValueError(
                    f"mapping entry {key!r} is {type(item).__name__}, not a Value"
                )
            result[key] = item
        self.entries = result

    def _key(self) -> Any:
        return list(self.entries.items())

    def to_native(self) -> dict:
        return {key: item.to_native() for key, item in self.entries.items()}

    def keys(self):
        return self.entries.keys()

    def items(self):
        return self.entries.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, key: str) -> Value:
        return self.entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __repr__(self) -> str:
        return f"Mapping({self.entries!r})"


class Blob(Value):
    """An immutable binary payload, stored outside the document."""

    __slots__ = ('data',)

    kind = 'blob'

    def __init__(self, data: bytes):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidValueError(f"blob payload must be bytes, got {type(data).__name__}")
        self.data = bytes(data)

    def _key(self) -> Any:
        return self.data

    def to_native(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"Blob(size={len(self.data)})"


class Opaque(Value):
    """
    A value the codec cannot decompose.

    Only its type name is kept. It encodes to a type marker and decodes
    as NULL.
    """

    __slots__ = ('type_name',)

    kind = 'opaque'

    def __init__(self, type_name: str):
        if not isinstance(type_name, str) or not type_name:
            raise InvalidValueError(f"opaque type name must be a non-empty str, got {type_name!r}")
        self.type_name = type_name

    def _key(self) -> Any:
        return self.type_name

    def to_native(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"Opaque({self.type_name!r})"


class ErrorValue(Value):
    """
    A caught error, described by name, message and stack.

    Encodes as a plain three-field mapping and is never reconstructed.
    """

    __slots__ = ('name', 'message', 'stack')

    kind = 'error'

    FIELDS = ('name', 'message', 'stack')

    def __init__(self, name: str, message: str, stack: Optional[str] = None):
        if not isinstance(name, str):
            raise InvalidValueError(f"error name must be str, got {type(name).__name__}")
        if not isinstance(message, str):
            raise InvalidValueError(f"error message must be str, got {type(message).__name__}")
        if stack is not None and not isinstance(stack, str):
            raise InvalidValueError(f"error stack must be str or None, got {type(stack).__name__}")
        self.name = name
        self.message = message
        self.stack = stack

    @classmethod
    def from_exception(cls, exc: BaseException) -> 'ErrorValue':
        """Capture the descriptive fields of an exception."""
        stack = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(type(exc).__name__, str(exc), stack)

    def fields(self) -> dict:
        return {'name': self.name, 'message': self.message, 'stack': self.stack}

    def _key(self) -> Any:
        return (self.name, self.message, self.stack)

    def to_native(self) -> dict:
        return self.fields()

    def __repr__(self) -> str:
        return f"ErrorValue(name={self.name!r}, message={self.message!r})"


def classify(obj: Any) -> Value:
    """
    Classify a native Python object into a Value tree.

    - None -> NULL
    - str, int, float, bool -> Primitive
    - bytes, bytearray, memoryview -> Blob
    - list, tuple -> Sequence
    - dict -> Mapping (keys must be str)
    - exceptions -> ErrorValue
    - anything else -> Opaque tagged with its class name

    Values that are already classified are returned as-is.
    """
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, PRIMITIVE_TYPES):
        return Primitive(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Blob(obj)
    if isinstance(obj, (list, tuple)):
        return Sequence(classify(item) for item in obj)
    if isinstance(obj, dict):
        return Mapping((key, classify(item)) for key, item in obj.items())
    if isinstance(obj, BaseException):
        return ErrorValue.from_exception(obj)
    return Opaque(type(obj).__name__)

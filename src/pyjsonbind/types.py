"""Field types with binding-specific behaviour.

Python's ``int`` and ``float`` are unbounded here; annotate a field with one
of the fixed-width types below to have out-of-range JSON numbers rejected
instead of silently accepted.
"""

from __future__ import annotations

from typing import ClassVar, Protocol, runtime_checkable


@runtime_checkable
class JSONUnmarshaler(Protocol):
    """Type that decodes itself from a raw JSON value.

    Strings are passed with their quotes and escapes intact, every other
    value exactly as it appears in the document.
    """

    @classmethod
    def unmarshal_json(cls, data: bytes) -> JSONUnmarshaler: ...


@runtime_checkable
class TextUnmarshaler(Protocol):
    """Type that decodes itself from the text of a JSON string."""

    @classmethod
    def unmarshal_text(cls, data: bytes) -> TextUnmarshaler: ...


class FixedWidthInt(int):
    """Base for integer types with a bounded range."""

    bits: ClassVar[int] = 64
    signed: ClassVar[bool] = True

    @classmethod
    def bounds(cls) -> tuple[int, int]:
        if cls.signed:
            return -(1 << (cls.bits - 1)), (1 << (cls.bits - 1)) - 1
        return 0, (1 << cls.bits) - 1


class Int8(FixedWidthInt):
    bits = 8


class Int16(FixedWidthInt):
    bits = 16


class Int32(FixedWidthInt):
    bits = 32


class Int64(FixedWidthInt):
    bits = 64


class Uint8(FixedWidthInt):
    bits = 8
    signed = False


class Uint16(FixedWidthInt):
    bits = 16
    signed = False


class Uint32(FixedWidthInt):
    bits = 32
    signed = False


class Uint64(FixedWidthInt):
    bits = 64
    signed = False


class Float32(float):
    """Single precision float; finite values beyond its range are rejected."""

    max_value: ClassVar[float] = 3.4028234663852886e38


class Float64(float):
    """Double precision float, same range as ``float``."""

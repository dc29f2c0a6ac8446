"""Explicit pointer boxes and chain construction."""

from __future__ import annotations

from typing import Any, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")


class Ref(Generic[T]):
    """A single level of indirection around a value.

    ``Ref[Ref[int]]`` declares a field holding a two-level chain. A field
    declared as a ``Ref`` stays ``None`` until a value for it is found.
    """

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return self.value == other.value

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


def strip_refs(annotation: Any) -> tuple[Any, int]:
    """Return the innermost type of a ``Ref`` chain and the chain length."""
    depth = 0
    while annotation is Ref or get_origin(annotation) is Ref:
        args = get_args(annotation)
        # A bare ``Ref`` carries no element type.
        annotation = args[0] if args else Any
        depth += 1
    return annotation, depth


def wrap(value: Any, depth: int) -> Any:
    """Box *value* in *depth* nested :class:`Ref` layers.

    Built iteratively, so the depth is only bounded by memory.
    """
    if depth < 0:
        raise ValueError(f"indirection depth must not be negative, got {depth}")
    result = value
    for _ in range(depth):
        result = Ref(result)
    return result


def unwrap(chain: Any, depth: int) -> Any:
    """Walk *depth* layers of a chain, returning ``None`` if a layer is absent."""
    node = chain
    for _ in range(depth):
        if not isinstance(node, Ref):
            return None
        node = node.value
    return node

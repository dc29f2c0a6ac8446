"""Core Binder class - walks dataclass fields and fills them from JSON nodes."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import enum
import logging
import math
from collections import abc
from datetime import timedelta
from typing import Any, get_args, get_origin

from pyjsonbind._constants import JSON_KEY_TAG
from pyjsonbind._document import Document, Node, NodeType, find
from pyjsonbind._duration import duration_from_nanoseconds, parse_duration
from pyjsonbind._errors import (
    ConversionError,
    TypeMismatchError,
    UnmarshalError,
    UnsupportedTypeError,
    format_path,
)
from pyjsonbind._fields import describe, implements, is_record_type, resolve_key, strip_type
from pyjsonbind._pointers import unwrap, wrap
from pyjsonbind.types import FixedWidthInt, Float32, JSONUnmarshaler, TextUnmarshaler

logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
    abc.Collection,
    abc.Iterable,
)
_MAPPING_ORIGINS = (dict, abc.Mapping, abc.MutableMapping)


def new_record(record_type: type) -> Any:
    """Create a record with every field at its default.

    Records whose fields all have defaults are built by calling the class,
    so ``__post_init__`` runs. Otherwise the instance is created without
    calling ``__init__`` or ``__post_init__`` and fields without a default
    start out as ``None``.
    """
    fields = dataclasses.fields(record_type)
    if all(
        not f.init
        or f.default is not dataclasses.MISSING
        or f.default_factory is not dataclasses.MISSING
        for f in fields
    ):
        return record_type()

    record = record_type.__new__(record_type)
    for f in fields:
        if f.default is not dataclasses.MISSING:
            value = f.default
        elif f.default_factory is not dataclasses.MISSING:
            value = f.default_factory()
        else:
            value = None
        object.__setattr__(record, f.name, value)
    return record


def _resolve_alias(tp: Any) -> Any:
    # NewType aliases are identity functions at runtime.
    while hasattr(tp, "__supertype__"):
        tp = tp.__supertype__
    return tp


class Binder:
    """Binds the values of one JSON document to dataclass records."""

    def __init__(self, document: Document, key_tag: str | None = JSON_KEY_TAG) -> None:
        self._document = document
        self._key_tag = key_tag

    def bind(
        self,
        record: Any,
        path: tuple[str, ...] = (),
        scope: Node | None = None,
    ) -> bool:
        """Fill the fields of *record* found below *path*.

        Fields are looked up in the document by their full key path, or
        directly below *scope* when binding a record inside an array or map.
        Fields without a value in the document are left untouched.

        Returns:
            Whether at least one field has been set.
        """
        any_field_set = False
        for descriptor in describe(type(record)):
            # Private fields can't be un-ignored by tagging them.
            if not descriptor.accessible or descriptor.ignored:
                continue

            key = resolve_key(descriptor, self._key_tag)
            field_path = (*path, key)
            if scope is None:
                node = self._document.locate(field_path)
            else:
                node = find(scope, (key,))
            if node is None:
                # Required fields are checked once all sources have run.
                logger.debug("no value for json field '%s'", format_path(field_path))
                continue

            # Decoders take precedence over field-by-field binding.
            decodes_node = descriptor.has_json_decoder or (
                descriptor.has_text_decoder and node.kind is NodeType.STRING
            )
            if descriptor.is_record and not decodes_node:
                current = getattr(record, descriptor.name, None)
                nested = unwrap(current, descriptor.depth)
                if not isinstance(nested, descriptor.base_type):
                    nested = new_record(descriptor.base_type)
                nested_scope = None if scope is None else node
                if not self.bind(nested, field_path, nested_scope):
                    # Don't attach records that would only hold defaults.
                    logger.debug(
                        "no field of '%s' set, leaving it unchanged",
                        format_path(field_path),
                    )
                    continue
                value = nested
            else:
                value = self._convert(
                    node,
                    descriptor.base_type,
                    field_path,
                    field_name=descriptor.name,
                    nullable=descriptor.nullable,
                )

            setattr(record, descriptor.name, wrap(value, descriptor.depth))
            any_field_set = True
        return any_field_set

    def convert(
        self,
        node: Node,
        target: Any,
        path: tuple[str, ...],
        *,
        field_name: str = "",
    ) -> Any:
        """Convert *node* to a value of the annotated type *target*."""
        base_type, depth, nullable = strip_type(target)
        value = self._convert(node, base_type, path, field_name=field_name, nullable=nullable)
        return wrap(value, depth)

    def _convert(
        self,
        node: Node,
        tp: Any,
        path: tuple[str, ...],
        *,
        field_name: str,
        nullable: bool,
    ) -> Any:
        # Custom decoders come first, they may treat any value differently.
        if implements(tp, JSONUnmarshaler):
            try:
                return tp.unmarshal_json(node.raw_json())
            except Exception as e:
                raise self._unmarshal_error(path, e) from e

        if implements(tp, TextUnmarshaler) and node.kind is NodeType.STRING:
            try:
                return tp.unmarshal_text(node.text().encode())
            except Exception as e:
                raise self._unmarshal_error(path, e) from e

        tp = _resolve_alias(tp)
        # Complex numbers have no JSON representation.
        if isinstance(tp, type) and issubclass(tp, complex):
            raise self._unsupported(tp, field_name, path)
        if tp is Any or tp is object:
            return node.to_python()
        if node.kind is NodeType.NULL:
            if nullable:
                return None
            raise self._mismatch(node, "non-null value", path)

        origin = get_origin(tp)
        if origin is not None:
            return self._convert_generic(node, tp, origin, path, field_name=field_name)
        if not isinstance(tp, type):
            raise self._unsupported(tp, field_name, path)

        if is_record_type(tp):
            if node.kind is not NodeType.OBJECT:
                raise self._mismatch(node, "object", path)
            record = new_record(tp)
            self.bind(record, path, node)
            return record
        if issubclass(tp, timedelta):
            return self._convert_duration(node, tp, path)
        if issubclass(tp, enum.Enum):
            return self._convert_enum(node, tp, path)
        if issubclass(tp, bool):
            if node.kind is not NodeType.BOOL:
                raise self._mismatch(node, "boolean", path)
            return node.raw == "true"
        if issubclass(tp, str):
            if node.kind is not NodeType.STRING:
                raise self._mismatch(node, "string", path)
            return tp(node.text())
        if issubclass(tp, int):
            return self._convert_int(node, tp, path)
        if issubclass(tp, float):
            return self._convert_float(node, tp, path)
        if issubclass(tp, bytes):
            if node.kind is not NodeType.STRING:
                raise self._mismatch(node, "base64 string", path)
            try:
                return tp(base64.b64decode(node.text(), validate=True))
            except binascii.Error as e:
                raise ConversionError(
                    f"value of json field '{format_path(path)}' is not valid base64",
                    f"cannot decode {node.raw!r} as base64: {e}",
                    e,
                    path=path,
                ) from e
        if tp in (list, tuple, set, frozenset):
            if node.kind is not NodeType.ARRAY:
                raise self._mismatch(node, "array", path)
            return tp(node.to_python())
        if tp is dict:
            if node.kind is not NodeType.OBJECT:
                raise self._mismatch(node, "object", path)
            return node.to_python()

        raise self._unsupported(tp, field_name, path)

    def _convert_generic(
        self,
        node: Node,
        tp: Any,
        origin: Any,
        path: tuple[str, ...],
        *,
        field_name: str,
    ) -> Any:
        args = get_args(tp)
        if origin in _SEQUENCE_ORIGINS:
            if node.kind is not NodeType.ARRAY:
                raise self._mismatch(node, "array", path)
            if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
                if len(args) != len(node.items):
                    raise ConversionError(
                        f"value of json field '{format_path(path)}' has the wrong length",
                        f"expected {len(args)} items, got {len(node.items)}",
                        path=path,
                    )
                element_types = list(args)
            else:
                element_types = [args[0] if args else Any] * len(node.items)

            items = [
                self.convert(item, element_type, (*path, str(index)), field_name=field_name)
                for index, (item, element_type) in enumerate(zip(node.items, element_types))
            ]
            if origin in (tuple, set, frozenset):
                return origin(items)
            if origin in (abc.Set, abc.MutableSet):
                return set(items)
            return items

        if origin in _MAPPING_ORIGINS:
            if node.kind is not NodeType.OBJECT:
                raise self._mismatch(node, "object", path)
            key_type = _resolve_alias(args[0]) if args else Any
            if key_type not in (str, Any):
                raise self._unsupported(tp, field_name, path)
            value_type = args[1] if len(args) > 1 else Any
            return {
                key: self.convert(member, value_type, (*path, key), field_name=field_name)
                for key, member in node.members.items()
            }

        raise self._unsupported(tp, field_name, path)

    def _convert_duration(self, node: Node, tp: type, path: tuple[str, ...]) -> timedelta:
        if node.kind is NodeType.STRING:
            try:
                value = parse_duration(node.text())
            except ValueError as e:
                raise ConversionError(
                    f"value of json field '{format_path(path)}' isn't parsable as a duration",
                    f"value '{node.text()}' isn't parsable as a duration: {e}",
                    e,
                    path=path,
                ) from e
        elif node.kind is NodeType.NUMBER:
            value = duration_from_nanoseconds(self._parse_int(node, path))
        else:
            raise self._mismatch(node, "duration", path)
        if tp is timedelta:
            return value
        return tp(days=value.days, seconds=value.seconds, microseconds=value.microseconds)

    def _convert_enum(self, node: Node, tp: type[enum.Enum], path: tuple[str, ...]) -> Any:
        if node.kind not in (NodeType.STRING, NodeType.NUMBER, NodeType.BOOL):
            raise self._mismatch(node, "enum value", path)
        raw_value = node.to_python()
        try:
            return tp(raw_value)
        except ValueError as e:
            raise ConversionError(
                f"value of json field '{format_path(path)}' is not a valid {tp.__name__}",
                f"{raw_value!r} is not one of {[m.value for m in tp]}",
                e,
                path=path,
            ) from e

    def _parse_int(self, node: Node, path: tuple[str, ...]) -> int:
        if node.kind is not NodeType.NUMBER:
            raise self._mismatch(node, "number", path)
        if any(c in node.raw for c in ".eE"):
            raise ConversionError(
                f"value of json field '{format_path(path)}' is not an integer",
                f"cannot use number {node.raw} as an integer",
                path=path,
            )
        return int(node.raw)

    def _convert_int(self, node: Node, tp: type, path: tuple[str, ...]) -> int:
        value = self._parse_int(node, path)
        if issubclass(tp, FixedWidthInt):
            low, high = tp.bounds()
            if not low <= value <= high:
                raise ConversionError(
                    f"value of json field '{format_path(path)}' is out of range",
                    f"number {node.raw} overflows {tp.__name__} [{low}, {high}]",
                    path=path,
                )
        return tp(value)

    def _convert_float(self, node: Node, tp: type, path: tuple[str, ...]) -> float:
        if node.kind is not NodeType.NUMBER:
            raise self._mismatch(node, "number", path)
        value = float(node.raw)
        limit = Float32.max_value if issubclass(tp, Float32) else math.inf
        if math.isinf(value) or abs(value) > limit:
            raise ConversionError(
                f"value of json field '{format_path(path)}' is out of range",
                f"number {node.raw} overflows {tp.__name__}",
                path=path,
            )
        return tp(value)

    def _mismatch(self, node: Node, expected: str, path: tuple[str, ...]) -> TypeMismatchError:
        return TypeMismatchError(
            f"value of json field '{format_path(path)}' has the wrong type",
            f"expected {expected} for json field '{format_path(path)}', "
            f"got {node.kind.value} {node.raw!r}",
            path=path,
        )

    def _unmarshal_error(self, path: tuple[str, ...], cause: Exception) -> UnmarshalError:
        return UnmarshalError(
            f"error unmarshalling json field '{format_path(path)}'",
            f"error unmarshalling json field '{format_path(path)}': {cause!r}",
            cause,
            path=path,
        )

    def _unsupported(
        self, tp: Any, field_name: str, path: tuple[str, ...]
    ) -> UnsupportedTypeError:
        type_name = getattr(tp, "__name__", repr(tp))
        return UnsupportedTypeError(
            f"type of field '{field_name}' isn't supported",
            f"type '{type_name}' of field '{field_name}' ({format_path(path)}) "
            "isn't supported and won't ever be",
            field_name=field_name,
            path=path,
        )

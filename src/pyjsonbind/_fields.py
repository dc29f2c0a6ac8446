"""Field descriptors and key resolution for record types."""

from __future__ import annotations

import dataclasses
import functools
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin

from pyjsonbind._constants import DEFAULT_KEY_TAG, IGNORE_TAG, TAG_OPTION_SEPARATOR
from pyjsonbind._errors import MissingKeyError
from pyjsonbind._pointers import Ref, strip_refs
from pyjsonbind.types import JSONUnmarshaler, TextUnmarshaler

_NONE_TYPE = type(None)


@dataclass(frozen=True)
class FieldDescriptor:
    """Static binding metadata of one record field."""

    name: str
    annotation: Any
    base_type: Any
    depth: int = 0
    nullable: bool = False
    tags: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def accessible(self) -> bool:
        return not self.name.startswith("_")

    @property
    def ignored(self) -> bool:
        value = self.tags.get(IGNORE_TAG)
        if isinstance(value, bool):
            return value
        return isinstance(value, str) and value.lower() == "true"

    @property
    def is_record(self) -> bool:
        return is_record_type(self.base_type)

    @property
    def has_json_decoder(self) -> bool:
        return implements(self.base_type, JSONUnmarshaler)

    @property
    def has_text_decoder(self) -> bool:
        return implements(self.base_type, TextUnmarshaler)


def tags(
    *,
    json: str | None = None,
    key: str | None = None,
    ignore: bool | str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build field metadata, e.g. ``field(metadata=tags(json="name"))``."""
    metadata: dict[str, Any] = dict(extra)
    if json is not None:
        metadata["json"] = json
    if key is not None:
        metadata[DEFAULT_KEY_TAG] = key
    if ignore is not None:
        metadata[IGNORE_TAG] = ignore
    return metadata


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def implements(tp: Any, protocol: type) -> bool:
    """Whether the class *tp* provides the methods of a decoder protocol."""
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, protocol)


def strip_type(annotation: Any) -> tuple[Any, int, bool]:
    """Strip ``Annotated``, ``Optional`` and ``Ref`` layers from a type.

    Returns ``(base_type, ref_depth, nullable)``.
    """
    depth = 0
    nullable = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
        elif origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            remaining = [arg for arg in args if arg is not _NONE_TYPE]
            if len(remaining) == len(args) or len(remaining) != 1:
                break
            nullable = True
            annotation = remaining[0]
        elif annotation is Ref or origin is Ref:
            annotation, layers = strip_refs(annotation)
            depth += layers
        else:
            break
    return annotation, depth, nullable


@functools.lru_cache(maxsize=None)
def describe(record_type: type) -> tuple[FieldDescriptor, ...]:
    """Return the field descriptors of a dataclass, in declaration order."""
    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except NameError:
        # Unresolvable forward references; keep the raw annotations.
        hints = {}

    descriptors = []
    for f in dataclasses.fields(record_type):
        annotation = hints.get(f.name, f.type)
        base_type, depth, nullable = strip_type(annotation)
        descriptors.append(
            FieldDescriptor(
                name=f.name,
                annotation=annotation,
                base_type=base_type,
                depth=depth,
                nullable=nullable,
                tags=dict(f.metadata),
            )
        )
    return tuple(descriptors)


def _key_name(tag_value: Any) -> str:
    return str(tag_value).split(TAG_OPTION_SEPARATOR, 1)[0]


def resolve_key(
    descriptor: FieldDescriptor,
    custom_tag: str | None,
    fallback_tag: str = DEFAULT_KEY_TAG,
) -> str:
    """Return the key a field is stored under.

    The source specific tag wins over the fallback tag. A tag that is
    present but empty still counts as set.

    Raises:
        MissingKeyError: If neither tag is present.
    """
    if custom_tag and custom_tag in descriptor.tags:
        return _key_name(descriptor.tags[custom_tag])
    if fallback_tag in descriptor.tags:
        return _key_name(descriptor.tags[fallback_tag])

    if custom_tag:
        details = (
            f"neither tag '{custom_tag}' nor the standard tag '{fallback_tag}' "
            f"have been set on field '{descriptor.name}'"
        )
    else:
        details = f"standard tag '{fallback_tag}' has not been set on field '{descriptor.name}'"
    raise MissingKeyError(
        f"field '{descriptor.name}' has no key",
        details,
        field_name=descriptor.name,
    )

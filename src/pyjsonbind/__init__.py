"""pyjsonbind - Bind JSON documents to dataclass records."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyjsonbind")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0.dev0"

from typing import Any

from pyjsonbind._binder import Binder
from pyjsonbind._constants import DEFAULT_KEY_TAG, IGNORE_TAG, JSON_KEY_TAG
from pyjsonbind._document import Document, Node, NodeType
from pyjsonbind._duration import parse_duration
from pyjsonbind._errors import (
    BindError,
    ConfigurationError,
    ConversionError,
    MalformedDocumentError,
    MissingKeyError,
    MultipleDataSourcesError,
    NoDataSourceError,
    ParseValueError,
    SourceNotFoundError,
    SourceReadError,
    TypeMismatchError,
    UnmarshalError,
    UnsupportedTypeError,
)
from pyjsonbind._fields import FieldDescriptor, describe, is_record_type, resolve_key, tags
from pyjsonbind._pointers import Ref, unwrap, wrap
from pyjsonbind.source import JSONSource, Source, json_source

__all__ = [
    "bind",
    "json_source",
    "describe",
    "resolve_key",
    "tags",
    "parse_duration",
    "wrap",
    "unwrap",
    "Binder",
    "Document",
    "FieldDescriptor",
    "JSONSource",
    "Node",
    "NodeType",
    "Ref",
    "Source",
    "DEFAULT_KEY_TAG",
    "IGNORE_TAG",
    "JSON_KEY_TAG",
    "BindError",
    "ConfigurationError",
    "ConversionError",
    "MalformedDocumentError",
    "MissingKeyError",
    "MultipleDataSourcesError",
    "NoDataSourceError",
    "ParseValueError",
    "SourceNotFoundError",
    "SourceReadError",
    "TypeMismatchError",
    "UnmarshalError",
    "UnsupportedTypeError",
]


def bind(
    data: bytes | str,
    record: Any,
    *,
    key_tag: str | None = JSON_KEY_TAG,
) -> bool:
    """Bind an in-memory JSON document to a dataclass record.

    Args:
        data: The JSON document. The root must be an object.
        record: The dataclass instance to fill. Fields without a value in
            the document keep their current value.
        key_tag: Field tag checked before the ``key`` tag. ``None`` only
            checks ``key``.

    Returns:
        Whether any field of *record* has been set.

    Raises:
        MissingKeyError: If a field has no key tag.
        ParseValueError: If a value doesn't fit its field, or the document
            is malformed.
        UnsupportedTypeError: If a field's type can't be bound.
    """
    if not is_record_type(type(record)):
        raise TypeError(
            f"record must be a dataclass instance, got {type(record).__name__}"
        )
    return Binder(Document(data), key_tag).bind(record)

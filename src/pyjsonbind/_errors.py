"""Exception hierarchy for JSON-to-record binding."""

from __future__ import annotations

from collections.abc import Sequence


def format_path(path: Sequence[str]) -> str:
    """Render a JSON key path for messages, e.g. ``field_b.field_c``."""
    return ".".join(path) if path else "<root>"


class BindError(Exception):
    """Base exception for JSON source errors.

    Provides dual messaging: a short user-facing message and
    internal details (underlying causes, offending input) for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class ConfigurationError(BindError):
    """Raised when a source has been configured incorrectly."""


class NoDataSourceError(ConfigurationError):
    """Raised when none of bytes, string, path or reader has been set."""


class MultipleDataSourcesError(ConfigurationError):
    """Raised when more than one of bytes, string, path or reader has been set."""


class SourceNotFoundError(BindError):
    """Raised when the configured data source does not exist."""


class SourceReadError(BindError):
    """Raised when reading the configured data source fails."""


class MissingKeyError(BindError):
    """Raised when an accessible field carries no key tag."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        field_name: str = "",
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.field_name = field_name


class UnsupportedTypeError(BindError):
    """Raised when a field type can never be bound."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        field_name: str = "",
        path: tuple[str, ...] = (),
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.field_name = field_name
        self.path = path


class ParseValueError(BindError):
    """Raised when a JSON value cannot be turned into a field value."""

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        *,
        path: tuple[str, ...] = (),
    ) -> None:
        super().__init__(user_message, internal_details, wrapped)
        self.path = path


class TypeMismatchError(ParseValueError):
    """Raised when the JSON value's type doesn't match the field type."""


class ConversionError(ParseValueError):
    """Raised when the JSON value's content can't be converted (range, format)."""


class UnmarshalError(ParseValueError):
    """Raised when a custom or generic decoder rejects the raw value."""


class MalformedDocumentError(ParseValueError):
    """Raised when the JSON document itself is structurally broken."""


# User-facing error message constants
ERR_MSG_NO_DATA_SOURCE = (
    "no data source specified; call bytes(), string(), reader() or path()"
)
ERR_MSG_MULTIPLE_DATA_SOURCES = (
    "more than one data source specified; "
    "only call one of bytes(), string(), reader() or path()"
)
ERR_MSG_SOURCE_NOT_FOUND = "data source not found"
ERR_MSG_MALFORMED_DOCUMENT = "malformed JSON document"

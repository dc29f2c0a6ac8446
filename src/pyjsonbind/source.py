"""JSON source for configuration aggregation.

A source reads one JSON document and binds it to a dataclass record.
Aggregators combine several sources (environment, files, defaults) and
check required fields once every source has run.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO, Any, Protocol

from pyjsonbind._binder import Binder
from pyjsonbind._constants import JSON_KEY_TAG
from pyjsonbind._document import Document
from pyjsonbind._errors import (
    ERR_MSG_MULTIPLE_DATA_SOURCES,
    ERR_MSG_NO_DATA_SOURCE,
    ERR_MSG_SOURCE_NOT_FOUND,
    MultipleDataSourcesError,
    NoDataSourceError,
    SourceNotFoundError,
    SourceReadError,
)
from pyjsonbind._fields import is_record_type

logger = logging.getLogger(__name__)


class Source(Protocol):
    """Interface an aggregator uses to drive a source."""

    def key_tag(self) -> str:
        """Name of the field tag holding this source's keys."""

    def parse(self, record: Any) -> bool:
        """Fill *record* and report whether any field has been set."""


class JSONSource:
    """Reads a JSON document from exactly one configured data source.

    Configure with one of :meth:`bytes`, :meth:`string`, :meth:`path` or
    :meth:`reader`, optionally followed by :meth:`must`::

        loaded = json_source().path("config.json").must().parse(config)
    """

    def __init__(self) -> None:
        self._must = False
        self._data = b""
        self._path: str | os.PathLike[str] | None = None
        self._reader: IO[Any] | None = None

    def bytes(self, data: bytes) -> JSONSource:
        """Read from *data* directly."""
        self._data = data
        return self

    def string(self, text: str) -> JSONSource:
        """Read from *text* directly."""
        self._data = text.encode()
        return self

    def path(self, path: str | os.PathLike[str]) -> JSONSource:
        """Read the file at *path* when :meth:`parse` is called."""
        self._path = path
        return self

    def reader(self, reader: IO[Any]) -> JSONSource:
        """Read *reader* when :meth:`parse` is called, then close it if possible."""
        self._reader = reader
        return self

    def must(self) -> JSONSource:
        """Fail instead of loading nothing when the data source doesn't exist."""
        self._must = True
        return self

    def key_tag(self) -> str:
        return JSON_KEY_TAG

    def _verify(self) -> None:
        configured = sum(
            (
                bool(self._data),
                self._path is not None and os.fspath(self._path) != "",
                self._reader is not None,
            )
        )
        if configured == 0:
            raise NoDataSourceError(ERR_MSG_NO_DATA_SOURCE)
        if configured > 1:
            raise MultipleDataSourcesError(ERR_MSG_MULTIPLE_DATA_SOURCES)

    def _read(self) -> bytes:
        if self._data:
            return self._data

        try:
            if self._path is not None and os.fspath(self._path) != "":
                logger.debug("reading JSON from %s", os.fspath(self._path))
                return Path(self._path).read_bytes()
            if self._reader is None:
                raise NoDataSourceError(ERR_MSG_NO_DATA_SOURCE)
            content = self._read_reader(self._reader)
        except FileNotFoundError as e:
            raise SourceNotFoundError(
                ERR_MSG_SOURCE_NOT_FOUND,
                f"JSON data source not found: {e}",
                e,
            ) from e
        except OSError as e:
            raise _read_error(e) from e

        if isinstance(content, str):
            return content.encode()
        if not isinstance(content, (bytes, bytearray)):
            raise SourceReadError(
                "error reading JSON data source",
                f"reader returned {type(content).__name__}, expected bytes or str",
            )
        return bytes(content)

    @staticmethod
    def _read_reader(reader: IO[Any]) -> bytes | str:
        try:
            return reader.read()
        except OSError:
            raise
        except Exception as e:
            # Closed streams and broken decoders don't raise OSError.
            raise _read_error(e) from e
        finally:
            close = getattr(reader, "close", None)
            if callable(close):
                close()

    def parse(self, record: Any) -> bool:
        """Bind the document to *record*.

        Returns:
            Whether any field of *record* has been set. ``False`` without
            touching *record* if the data source doesn't exist and
            :meth:`must` hasn't been called.

        Raises:
            ConfigurationError: If not exactly one data source is configured.
            SourceNotFoundError: If the data source doesn't exist and
                :meth:`must` has been called.
            BindError: If the document can't be bound to *record*.
        """
        self._verify()

        try:
            data = self._read()
        except SourceNotFoundError:
            if not self._must:
                logger.debug("optional JSON data source not found, skipping")
                return False
            raise

        if not is_record_type(type(record)):
            raise TypeError(
                f"record must be a dataclass instance, got {type(record).__name__}"
            )
        return Binder(Document(data), self.key_tag()).bind(record)


def _read_error(cause: Exception) -> SourceReadError:
    return SourceReadError(
        "error reading JSON data source",
        f"error reading JSON data source: {cause!r}",
        cause,
    )


def json_source() -> JSONSource:
    """Create an unconfigured :class:`JSONSource`."""
    return JSONSource()

"""JSON document parsing and node lookup by key path."""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from lark import Lark, Token, v_args
from lark.exceptions import UnexpectedInput, VisitError
from lark.visitors import Transformer_NonRecursive

from pyjsonbind._errors import (
    ERR_MSG_MALFORMED_DOCUMENT,
    MalformedDocumentError,
    format_path,
)

logger = logging.getLogger(__name__)

# Strict JSON with an object at the root, plus C style comments.
_GRAMMAR = r"""
start: object

?value: object
      | array
      | ESCAPED_STRING
      | NUMBER
      | TRUE
      | FALSE
      | NULL

object: "{" (pair ("," pair)*)? "}"
pair: ESCAPED_STRING ":" value
array: "[" (value ("," value)*)? "]"

TRUE: "true"
FALSE: "false"
NULL: "null"
NUMBER: /-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?/

%import common.ESCAPED_STRING
%import common.WS
%import common.CPP_COMMENT
%import common.C_COMMENT
%ignore WS
%ignore CPP_COMMENT
%ignore C_COMMENT
"""

_parser = Lark(_GRAMMAR, parser="lalr", propagate_positions=True)


class NodeType(enum.Enum):
    """Coarse type of a JSON value."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


@dataclass(frozen=True)
class Node:
    """A JSON value located in a document.

    ``raw`` is the value's slice of the document; for strings it excludes the
    surrounding quotes and is not unescaped.
    """

    kind: NodeType
    raw: str
    value: str | None = None
    members: Mapping[str, Node] = field(default_factory=dict)
    items: tuple[Node, ...] = ()

    def text(self) -> str:
        """Unescaped content of a string node."""
        if self.kind is not NodeType.STRING or self.value is None:
            raise TypeError(f"{self.kind.value} node has no text")
        return self.value

    def raw_json(self) -> bytes:
        """The value as it appears in the document, quotes included."""
        if self.kind is NodeType.STRING:
            return f'"{self.raw}"'.encode()
        return self.raw.encode()

    def to_python(self) -> Any:
        """Decode into plain ``dict``/``list``/``str``/``int``/``float``/``bool``."""
        if self.kind is NodeType.OBJECT:
            return {key: member.to_python() for key, member in self.members.items()}
        if self.kind is NodeType.ARRAY:
            return [item.to_python() for item in self.items]
        if self.kind is NodeType.STRING:
            return self.value
        if self.kind is NodeType.NULL:
            return None
        return json.loads(self.raw)


class _NodeBuilder(Transformer_NonRecursive):
    """Turns the lark parse tree into :class:`Node` values.

    Non-recursive, so nesting depth is only bounded by memory.
    """

    def __init__(self, text: str) -> None:
        super().__init__()
        self._text = text

    def _slice(self, meta: Any, empty: str) -> str:
        if getattr(meta, "empty", True):
            return empty
        return self._text[meta.start_pos : meta.end_pos]

    def start(self, children: list[Node]) -> Node:
        return children[0]

    @v_args(meta=True)
    def object(self, meta: Any, children: list[tuple[str, Node]]) -> Node:
        members: dict[str, Node] = {}
        for key, member in children:
            # First occurrence of a duplicated key wins.
            members.setdefault(key, member)
        return Node(NodeType.OBJECT, self._slice(meta, "{}"), members=members)

    def pair(self, children: list[Node]) -> tuple[str, Node]:
        key, member = children
        return key.text(), member

    @v_args(meta=True)
    def array(self, meta: Any, children: list[Node]) -> Node:
        return Node(NodeType.ARRAY, self._slice(meta, "[]"), items=tuple(children))

    def ESCAPED_STRING(self, token: Token) -> Node:
        inner = token.value[1:-1]
        # json.loads rejects bad escapes and raw control characters.
        return Node(NodeType.STRING, inner, value=json.loads(token.value))

    def NUMBER(self, token: Token) -> Node:
        return Node(NodeType.NUMBER, token.value)

    def TRUE(self, token: Token) -> Node:
        return Node(NodeType.BOOL, token.value)

    def FALSE(self, token: Token) -> Node:
        return Node(NodeType.BOOL, token.value)

    def NULL(self, token: Token) -> Node:
        return Node(NodeType.NULL, token.value)


class Document:
    """A JSON document whose values are looked up by key path.

    Parsing happens on the first lookup; the tree is reused afterwards.
    """

    def __init__(self, data: bytes | str) -> None:
        self._data = data
        self._root: Node | None = None

    def _parse(self, path: tuple[str, ...]) -> Node:
        where = format_path(path)
        try:
            text = self._data.decode("utf-8") if isinstance(self._data, bytes) else self._data
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(
                ERR_MSG_MALFORMED_DOCUMENT,
                f"error accessing json field '{where}': document is not valid UTF-8: {e}",
                e,
                path=path,
            ) from e

        try:
            tree = _parser.parse(text)
            root = _NodeBuilder(text).transform(tree)
        except UnexpectedInput as e:
            raise MalformedDocumentError(
                ERR_MSG_MALFORMED_DOCUMENT,
                f"error accessing json field '{where}': unexpected input at "
                f"line {e.line}, column {e.column}: {e}",
                e,
                path=path,
            ) from e
        except VisitError as e:
            raise MalformedDocumentError(
                ERR_MSG_MALFORMED_DOCUMENT,
                f"error accessing json field '{where}': {e.orig_exc}",
                e.orig_exc,
                path=path,
            ) from e

        logger.debug("parsed JSON document of %d characters", len(text))
        return root

    def locate(self, path: Sequence[str]) -> Node | None:
        """Return the node at *path*, or ``None`` if there is none.

        Raises:
            MalformedDocumentError: If the document can't be parsed.
        """
        if self._root is None:
            self._root = self._parse(tuple(path))
        return find(self._root, path)


def find(node: Node, path: Sequence[str]) -> Node | None:
    """Descend from *node* through nested objects, one key per segment."""
    for segment in path:
        if node.kind is not NodeType.OBJECT:
            return None
        member = node.members.get(segment)
        if member is None:
            return None
        node = member
    return node

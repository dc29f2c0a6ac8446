"""JSON node lookup tests."""

import pytest

from pyjsonbind import Document, NodeType
from pyjsonbind._document import find
from pyjsonbind._errors import MalformedDocumentError

DOCUMENT = """
{
    "name": "svc \\"one\\"",
    "port": 8080,
    "ratio": -1.5e3,
    "enabled": true,
    "disabled": false,
    "nothing": null,
    "tags": ["a", "b"],
    "server": {
        "tls": {"cert": "/etc/cert.pem"}
    },
    "name": "duplicate"
}
"""


@pytest.fixture
def document():
    return Document(DOCUMENT)


class TestLocate:
    def test_string(self, document):
        node = document.locate(["name"])
        assert node.kind is NodeType.STRING
        assert node.raw == 'svc \\"one\\"'
        assert node.text() == 'svc "one"'
        assert node.raw_json() == b'"svc \\"one\\""'

    def test_first_duplicate_wins(self, document):
        assert document.locate(["name"]).text() == 'svc "one"'

    @pytest.mark.parametrize(
        "key, kind, raw",
        [
            ("port", NodeType.NUMBER, "8080"),
            ("ratio", NodeType.NUMBER, "-1.5e3"),
            ("enabled", NodeType.BOOL, "true"),
            ("disabled", NodeType.BOOL, "false"),
            ("nothing", NodeType.NULL, "null"),
        ],
    )
    def test_scalars(self, document, key, kind, raw):
        node = document.locate([key])
        assert node.kind is kind
        assert node.raw == raw
        assert node.raw_json() == raw.encode()

    def test_array(self, document):
        node = document.locate(["tags"])
        assert node.kind is NodeType.ARRAY
        assert node.raw == '["a", "b"]'
        assert [item.text() for item in node.items] == ["a", "b"]

    def test_nested_path(self, document):
        node = document.locate(["server", "tls", "cert"])
        assert node.text() == "/etc/cert.pem"

    def test_object_raw_slice(self, document):
        node = document.locate(["server", "tls"])
        assert node.kind is NodeType.OBJECT
        assert node.raw == '{"cert": "/etc/cert.pem"}'

    def test_empty_path_is_root(self, document):
        assert document.locate([]).kind is NodeType.OBJECT

    def test_not_found(self, document):
        assert document.locate(["missing"]) is None
        assert document.locate(["server", "missing"]) is None

    def test_descending_into_scalar_is_not_found(self, document):
        assert document.locate(["port", "value"]) is None
        assert document.locate(["tags", "0"]) is None

    def test_to_python(self, document):
        assert document.locate(["server"]).to_python() == {"tls": {"cert": "/etc/cert.pem"}}
        assert document.locate(["ratio"]).to_python() == -1500.0
        assert document.locate(["port"]).to_python() == 8080

    def test_text_of_non_string(self, document):
        with pytest.raises(TypeError):
            document.locate(["port"]).text()

    def test_find_from_node(self, document):
        server = document.locate(["server"])
        assert find(server, ["tls", "cert"]).text() == "/etc/cert.pem"

    def test_deep_nesting(self):
        depth = 3000
        document = Document('{"a": "x", "deep": ' + "[" * depth + "]" * depth + "}")
        assert document.locate(["a"]).text() == "x"
        node = document.locate(["deep"])
        for _ in range(depth - 1):
            (node,) = node.items
        assert node.kind is NodeType.ARRAY
        assert node.items == ()

    def test_deep_nesting_of_objects(self):
        depth = 1500
        document = Document('{"deep": ' + '{"k": ' * depth + "1" + "}" * depth + "}")
        path = ["deep"] + ["k"] * depth
        assert document.locate(path).raw == "1"

    def test_empty_containers(self):
        document = Document('{"o": {}, "a": []}')
        assert document.locate(["o"]).raw == "{}"
        assert document.locate(["a"]).raw == "[]"
        assert document.locate(["a"]).items == ()


class TestComments:
    def test_line_and_block_comments(self):
        document = Document(
            """{
                // leading comment
                "a": 1, /* inline */ "b": [1, /* in array */ 2]
                /* trailing
                   block */
            }"""
        )
        assert document.locate(["a"]).raw == "1"
        assert len(document.locate(["b"]).items) == 2


class TestMalformed:
    @pytest.mark.parametrize(
        "text",
        [
            '{"a": text}',
            '{"a": 5.5no float}',
            '{"a": 1,}',
            '{"a": [1, 2,]}',
            '{"a": 01}',
            "{'a': 1}",
            '{"a": 1',
            '["a"]',
            "",
        ],
    )
    def test_rejected(self, text):
        with pytest.raises(MalformedDocumentError) as exc_info:
            Document(text).locate(["a"])
        assert exc_info.value.path == ("a",)

    def test_invalid_escape(self):
        with pytest.raises(MalformedDocumentError):
            Document(r'{"a": "\q"}').locate(["a"])

    def test_raw_control_character(self):
        with pytest.raises(MalformedDocumentError):
            Document('{"a": "line\nbreak"}').locate(["a"])

    def test_invalid_utf8(self):
        with pytest.raises(MalformedDocumentError, match="malformed"):
            Document(b'{"a": "\xff"}').locate(["a"])

    def test_error_details_name_location(self):
        with pytest.raises(MalformedDocumentError) as exc_info:
            Document('{\n  "a": oops\n}').locate(["a"])
        assert "line 2" in exc_info.value.internal()

    def test_parsed_once(self):
        document = Document('{"a": 1}')
        first = document.locate(["a"])
        assert document.locate(["a"]) is first

"""Shared test fixtures."""

import pytest

TEST_DOCUMENT = """{
    "field_a": "content a",
    "field_b": "content b"
}
"""


@pytest.fixture
def json_file(tmp_path):
    path = tmp_path / "test.json"
    path.write_text(TEST_DOCUMENT)
    return path


@pytest.fixture
def missing_file(tmp_path):
    return tmp_path / "doesntexist.json"

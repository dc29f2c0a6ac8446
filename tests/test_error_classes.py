"""Error class hierarchy tests."""

import pytest

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
    format_path,
)


class TestBindErrorBase:
    def test_str_returns_user_message(self):
        err = BindError("user msg", "internal detail")
        assert str(err) == "user msg"

    def test_internal_returns_details(self):
        err = BindError("user msg", "internal detail")
        assert err.internal() == "internal detail"

    def test_internal_defaults_to_user_message(self):
        err = BindError("same message")
        assert err.internal() == "same message"

    def test_wrapped_exception(self):
        cause = ValueError("root cause")
        err = BindError("user msg", wrapped=cause)
        assert err.wrapped is cause

    def test_is_exception(self):
        assert isinstance(BindError("test"), Exception)


class TestErrorHierarchy:
    ALL_ERROR_CLASSES = [
        ConfigurationError,
        NoDataSourceError,
        MultipleDataSourcesError,
        SourceNotFoundError,
        SourceReadError,
        MissingKeyError,
        UnsupportedTypeError,
        ParseValueError,
        TypeMismatchError,
        ConversionError,
        UnmarshalError,
        MalformedDocumentError,
    ]

    @pytest.mark.parametrize("cls", ALL_ERROR_CLASSES)
    def test_is_subclass_of_bind_error(self, cls):
        assert issubclass(cls, BindError)

    @pytest.mark.parametrize("cls", ALL_ERROR_CLASSES)
    def test_instantiation(self, cls):
        err = cls("test message", "internal detail")
        assert str(err) == "test message"
        assert err.internal() == "internal detail"

    @pytest.mark.parametrize(
        "cls", [TypeMismatchError, ConversionError, UnmarshalError, MalformedDocumentError]
    )
    def test_value_errors_are_parse_value_errors(self, cls):
        with pytest.raises(ParseValueError):
            raise cls("test")

    @pytest.mark.parametrize("cls", [NoDataSourceError, MultipleDataSourcesError])
    def test_misconfiguration_is_configuration_error(self, cls):
        assert issubclass(cls, ConfigurationError)

    def test_source_not_found_is_not_a_value_error(self):
        assert not issubclass(SourceNotFoundError, ParseValueError)


class TestStructuredContext:
    def test_parse_value_error_carries_path(self):
        err = TypeMismatchError("bad", path=("field_b", "field_c"))
        assert err.path == ("field_b", "field_c")

    def test_missing_key_error_carries_field_name(self):
        err = MissingKeyError("no key", field_name="FieldA")
        assert err.field_name == "FieldA"

    def test_unsupported_type_error_carries_field_and_path(self):
        err = UnsupportedTypeError("nope", field_name="field_a", path=("a",))
        assert err.field_name == "field_a"
        assert err.path == ("a",)

    def test_defaults(self):
        assert ParseValueError("x").path == ()
        assert MissingKeyError("x").field_name == ""


class TestFormatPath:
    def test_joins_segments(self):
        assert format_path(("a", "b", "c")) == "a.b.c"

    def test_root(self):
        assert format_path(()) == "<root>"

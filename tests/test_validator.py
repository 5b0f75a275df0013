"""Tests for paramguard.validator module."""

import re

import pytest

from paramguard import (
    E_BAD_CONTENT_TYPE,
    E_BAD_PARAM,
    FieldSet,
    FieldSetValidator,
    ValidateOptions,
    ValidationError,
    parse_query_string,
    validate_fields,
)

# (query string, declarations, accepted)
QUERY_CASES = [
    ("foo=bar", {"foo": "string"}, True),
    ("foo=bar", {"foo": "number"}, False),
    ("foo=bar", {"foo": "?string"}, True),
    ("", {"foo": "?string"}, True),
    ("", {"foo": "string"}, False),
    ("", {"foo": "?number"}, True),
    ("foo=1&bar=2", {"foo": "string", "bar": "number"}, True),
    ("foo=1&bar=lol", {"foo": "string", "bar": "number"}, False),
    ("foo=&bar=2", {"foo": "string", "bar": "number"}, False),
    ("foo=", {"foo": "?string"}, True),
    ("foo=", {"foo": "string"}, False),
    ("foo=", {"foo": "?number"}, True),
    ("foo=", {"foo": "number"}, False),
    ("foo=", {"foo": "?integer"}, True),
    ("foo=", {"foo": "integer"}, False),
    ("foo=", {"foo": "boolean"}, True),
    ("foo=", {"foo": "?boolean"}, True),
    ("", {"foo": "boolean"}, True),
    ("foo=1", {"foo": "boolean"}, True),
    ("foo=0", {"foo": "boolean"}, False),
    ("foo=false", {"foo": "boolean"}, False),
    ("foo=true", {"foo": "boolean"}, False),
    ("foo=1", {"foo": "number"}, True),
    ("foo=1.5", {"foo": "number"}, True),
    ("foo=.5e-3", {"foo": "number"}, True),
    ("foo=Infinity", {"foo": "number"}, False),
    ("foo=1", {"foo": "integer"}, True),
    ("foo=1.5", {"foo": "integer"}, False),
    ("foo[]=", {"foo": "array"}, True),
    ("", {"foo": "array"}, False),
    ("foo=1&foo=2", {"foo": "array"}, True),
    ("foo=1", {"foo": "array"}, False),
    ("foo=1", {"foo": ["array", "string"]}, True),
    ("foo=1&foo=2", {"foo": ["array", "string"]}, True),
    ("", {"foo": ["array", "string"]}, False),
    ("", {"foo": ["array", "?string"]}, True),
    ("", {"foo": "?array"}, True),
    ("foo[key]=1", {"foo": "object"}, True),
    ("foo[key]=1", {"foo": "array"}, False),
    ("foo[key]=1", {"foo": "string"}, False),
    ("foo[]=1&foo[key]=2", {"foo": "array"}, False),
    ("class%5B0%5D=foo&class%5B1%5D=bar", {"class": "?string"}, False),
    ("foo=\x00", {"foo": "string"}, False),
    ("foo=\x00", {"foo": "?string"}, False),
    ("foo=abc\x00def", {"foo": "string"}, False),
    ("foo=\x9d", {"foo": "string"}, False),
    ("foo=\n", {"foo": "string"}, True),
    ("foo=\t", {"foo": "string"}, True),
    ("foo=%20", {"foo": "string"}, True),
    ("foo= ", {"foo": "string"}, True),
    ("foo=%0A", {"foo": "string"}, True),
    ("foo=bar", {"foo": re.compile(r"ba[rz]")}, True),
    ("foo=baz", {"foo": re.compile(r"ba[rz]")}, True),
    ("foo=foo", {"foo": re.compile(r"ba[rz]")}, False),
    ("foo[]=bar&foo[]=baz", {"foo": re.compile(r"ba[rz]")}, False),
    ("foo[]=bar", {"foo": re.compile(r"ba[rz]")}, False),
    ("foo[0]=bar", {"foo": re.compile(r"ba[rz]")}, False),
    ("foo=barbarian", {"foo": re.compile(r"ba[rz]")}, True),
    ("foo=barbarian", {"foo": re.compile(r"^ba[rz]$")}, False),
    ("foo=", {"foo": re.compile(r"ba[rz]")}, False),
    ("foo=", {"foo": re.compile(r"^ba[rz]$")}, False),
    ("foo=", {"foo": re.compile(r"^$|^ba[rz]$")}, True),
    ("", {"foo": re.compile(r"ba[rz]")}, False),
    ("", {"foo": re.compile(r"^ba[rz]$")}, False),
    ("", {"foo": re.compile(r"^$|^ba[rz]$")}, True),
]


class TestValidateFields:
    """Test validation of whole field sets."""

    @pytest.mark.parametrize("query,fields,accepted", QUERY_CASES)
    def test_query_cases(self, query, fields, accepted):
        error = validate_fields(parse_query_string(query), FieldSet.from_dict(fields))
        if accepted:
            assert error is None
        else:
            assert isinstance(error, ValidationError)
            assert error.code == E_BAD_PARAM
            assert error.status == 400
            assert error.message.startswith("missing or invalid parameter")

    def test_reports_first_failing_field(self):
        field_set = FieldSet.from_dict({"a": "string", "b": "number", "c": "integer"})
        error = validate_fields({"a": "x", "b": "nope", "c": "1.5"}, field_set)
        assert error is not None
        assert error.key == "b"
        assert error.message == "missing or invalid parameter b"

    def test_declaration_order_decides_reported_field(self):
        data = {"a": "", "b": ""}
        assert validate_fields(data, FieldSet.from_dict({"a": "string", "b": "string"})).key == "a"
        assert validate_fields(data, FieldSet.from_dict({"b": "string", "a": "string"})).key == "b"

    def test_undeclared_fields_are_ignored(self):
        field_set = FieldSet.from_dict({"q": "string"})
        assert validate_fields({"q": "x", "extra": "\x00"}, field_set) is None

    def test_does_not_mutate_input(self):
        data = {"q": "x", "tags": ["a"]}
        snapshot = {"q": "x", "tags": ["a"]}
        field_set = FieldSet.from_dict({"q": "string", "tags": "array", "page": "?integer"})
        assert validate_fields(data, field_set) is None
        assert data == snapshot

    def test_repeatable(self):
        field_set = FieldSet.from_dict({"q": "string"})
        first = validate_fields({}, field_set)
        second = validate_fields({}, field_set)
        assert first is not second
        assert first.to_dict() == second.to_dict()

    def test_json_body_values(self):
        field_set = FieldSet.from_dict(
            {"flag": "boolean", "nothing": "null", "meta": "object", "maybe": "?string"}
        )
        body = {"flag": False, "nothing": None, "meta": {"k": 1}, "maybe": None}
        assert validate_fields(body, field_set, from_body=True) is None


class TestContentTypePrecondition:
    """Test the accept option for body-sourced input."""

    def test_content_type_checked_before_fields(self):
        field_set = FieldSet.from_dict({"name": "string"})
        options = ValidateOptions(accept="json")
        error = validate_fields(
            {"name": "ok"}, field_set, options, content_type="text/plain", from_body=True
        )
        assert error is not None
        assert error.status == 415
        assert error.code == E_BAD_CONTENT_TYPE
        assert error.key is None
        assert error.message == "invalid content-type"

    def test_content_type_failure_wins_over_field_failure(self):
        field_set = FieldSet.from_dict({"name": "string"})
        options = ValidateOptions(accept="json")
        error = validate_fields({}, field_set, options, content_type=None, from_body=True)
        assert error.code == E_BAD_CONTENT_TYPE

    def test_matching_content_type_then_fields(self):
        field_set = FieldSet.from_dict({"name": "string"})
        options = ValidateOptions(accept=["json", "urlencoded"])
        error = validate_fields(
            {}, field_set, options, content_type="application/json; charset=utf-8", from_body=True
        )
        assert error.code == E_BAD_PARAM
        assert error.key == "name"

    def test_accept_ignored_for_query_input(self):
        field_set = FieldSet.from_dict({"name": "string"})
        options = ValidateOptions(accept="json")
        assert validate_fields({"name": "x"}, field_set, options, content_type="text/plain") is None

    def test_injected_matcher(self):
        calls = []

        def matcher(content_type, accepted):
            calls.append((content_type, accepted))
            return content_type == "custom"

        field_set = FieldSet.from_dict({"name": "?string"})
        options = ValidateOptions(accept="anything")
        assert (
            validate_fields({}, field_set, options, content_type="custom", from_body=True, matcher=matcher)
            is None
        )
        error = validate_fields(
            {}, field_set, options, content_type="other", from_body=True, matcher=matcher
        )
        assert error.code == E_BAD_CONTENT_TYPE
        assert calls == [("custom", ("anything",)), ("other", ("anything",))]


class TestFieldSetValidator:
    """Test the reusable validator object."""

    def test_from_dict(self):
        validator = FieldSetValidator.from_dict({"q": "string", "page": "?integer"}, accept="json")
        assert validator.validate_query({"q": "cats"}) is None
        assert validator.validate_query({"q": "cats", "page": "x"}).key == "page"

    def test_validate_body(self):
        validator = FieldSetValidator.from_dict({"q": "string"}, accept="json")
        assert validator.validate_body({"q": "x"}, "application/json") is None
        assert validator.validate_body({"q": "x"}, "text/html").code == E_BAD_CONTENT_TYPE

    def test_accepts_content_type(self):
        assert FieldSetValidator.from_dict({}).accepts_content_type(None)
        validator = FieldSetValidator.from_dict({}, accept="+json")
        assert validator.accepts_content_type("application/vnd.api+json")
        assert not validator.accepts_content_type("application/json")

    def test_check_raises(self):
        validator = FieldSetValidator.from_dict({"q": "string"})
        validator.check({"q": "x"})
        with pytest.raises(ValidationError, match="missing or invalid parameter q") as exc_info:
            validator.check({})
        assert exc_info.value.key == "q"

    def test_check_body(self):
        validator = FieldSetValidator.from_dict({"q": "string"}, accept="json")
        with pytest.raises(ValidationError) as exc_info:
            validator.check({"q": "x"}, content_type="text/plain", from_body=True)
        assert exc_info.value.status == 415


class TestValidationError:
    """Test the error object."""

    def test_to_dict(self):
        error = ValidationError(400, E_BAD_PARAM, "q", "missing or invalid parameter q")
        assert error.to_dict() == {
            "status": 400,
            "code": "E_BAD_PARAM",
            "key": "q",
            "message": "missing or invalid parameter q",
        }
        assert str(error) == "missing or invalid parameter q"
        assert isinstance(error, ValueError)

    def test_read_only(self):
        error = ValidationError(415, E_BAD_CONTENT_TYPE, None, "invalid content-type")
        with pytest.raises(AttributeError):
            error.status = 400

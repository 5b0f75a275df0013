"""Tests for paramguard.content_type module."""

import pytest

from paramguard.content_type import media_type_matches, normalize_accept, parse_media_type


class TestParseMediaType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("application/json", ("application", "json")),
            ("Application/JSON; charset=UTF-8", ("application", "json")),
            ("  text/plain  ", ("text", "plain")),
            (None, None),
            ("", None),
            ("json", None),
            ("text/", None),
            ("a/b/c", None),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_media_type(value) == expected


class TestMediaTypeMatches:
    """Test matching declared content types against accept patterns."""

    @pytest.mark.parametrize(
        "content_type,accepted,expected",
        [
            ("application/json", ["application/json"], True),
            ("application/json; charset=utf-8", ["json"], True),
            ("application/x-www-form-urlencoded", ["urlencoded"], True),
            ("application/x-www-form-urlencoded", ["json", "urlencoded"], True),
            ("multipart/form-data; boundary=x", ["multipart"], True),
            ("text/plain", ["text"], True),
            ("text/html", ["text/*"], True),
            ("image/png", ["*/*"], True),
            ("application/json", ["*/json"], True),
            ("application/vnd.api+json", ["+json"], True),
            ("application/vnd.api+json", ["application/*+json"], True),
            ("application/json", ["+json"], False),
            ("text/plain", ["json"], False),
            ("text/plain", ["application/*"], False),
            (None, ["json"], False),
            ("", ["*/*"], False),
            ("application/json", [], False),
            ("application/json", ["bogus"], False),
        ],
    )
    def test_matches(self, content_type, accepted, expected):
        assert media_type_matches(content_type, accepted) is expected

    def test_single_string_accept(self):
        assert media_type_matches("application/json", "json")


class TestNormalizeAccept:
    def test_forms(self):
        assert normalize_accept(None) == ()
        assert normalize_accept("json") == ("json",)
        assert normalize_accept(["json", "text"]) == ("json", "text")

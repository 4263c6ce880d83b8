"""Tests for data-* attribute coercion, dotted paths and value stringification."""

import pytest

from petal import html_escape, parse_dataset, safe_parse
from petal.utils.html import stringify
from petal.utils.paths import assign_path, resolve_path


class TestSafeParse:
    """JSON-looking strings are parsed, everything else is kept."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('{"a": 1}', {"a": 1}),
            ("[1, 2]", [1, 2]),
            ('"quoted"', "quoted"),
            ("42", "42"),
            ("true", "true"),
            ("plain", "plain"),
            ("[broken", "[broken"),
            ("{not json}", "{not json}"),
        ],
    )
    def test_values(self, raw, expected):
        assert safe_parse(raw) == expected


class TestParseDataset:
    """Host attributes to context fields."""

    def test_only_data_attributes(self):
        fields = parse_dataset({"id": "x", "class": ["a", "b"], "data-label": "Hi"})
        assert fields == {"label": "Hi"}

    def test_dashed_names_become_snake_case(self):
        assert parse_dataset({"data-user-name": "ada"}) == {"user_name": "ada"}

    def test_empty_value_is_kept(self):
        assert parse_dataset({"data-flag": ""}) == {"flag": ""}

    def test_structured_values(self):
        fields = parse_dataset({"data-todos": '[{"title": "a", "done": false}]'})
        assert fields == {"todos": [{"title": "a", "done": False}]}


class TestPaths:
    """resolve_path / assign_path."""

    def test_resolve(self):
        ctx = {"user": {"tags": ["a", "b"]}, ".": 7}
        assert resolve_path(ctx, "user.tags.1") == "b"
        assert resolve_path(ctx, ".") == 7
        assert resolve_path(ctx, "user.tags.9") is None
        assert resolve_path(ctx, "user.missing.deep") is None

    def test_resolve_objects_but_not_dunders(self):
        class User:
            name = "Ada"

        assert resolve_path({"u": User()}, "u.name") == "Ada"
        assert resolve_path({"u": User()}, "u.__class__") is None

    def test_assign_creates_intermediates(self):
        ctx = {"user": None}
        assign_path(ctx, "user.address.city", "Oslo")
        assert ctx == {"user": {"address": {"city": "Oslo"}}}

    def test_assign_keeps_siblings(self):
        ctx = {"user": {"name": "Ada"}}
        assign_path(ctx, "user.email", "a@b.com")
        assert ctx == {"user": {"name": "Ada", "email": "a@b.com"}}


class TestStringify:
    """Output text for context values."""

    def test_values(self):
        assert stringify(None) == ""
        assert stringify(0) == "0"
        assert stringify(False) == "False"
        assert stringify(["a", 1]) == '["a",1]'
        assert stringify({"k": "é"}) == '{"k":"é"}'

    def test_html_escape(self):
        assert html_escape("<a href='x'>&</a>") == "&lt;a href=&#039;x&#039;&gt;&amp;&lt;/a&gt;"
        assert html_escape(None) == ""

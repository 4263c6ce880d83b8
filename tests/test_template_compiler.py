"""Tests for the mustache template compiler."""

import pytest

from petal import CompilationError, render


class TestInterpolation:
    """{{x}} and {{{x}}}."""

    def test_escaped_interpolation(self):
        assert render("Hello, {{name}}!", {"name": "<b>x</b>"}) == "Hello, &lt;b&gt;x&lt;/b&gt;!"

    def test_raw_interpolation(self):
        assert render("Hello, {{{name}}}!", {"name": "<b>x</b>"}) == "Hello, <b>x</b>!"

    def test_all_five_characters_escaped(self):
        assert render("{{v}}", {"v": "&<>\"'"}) == "&amp;&lt;&gt;&quot;&#039;"

    def test_whitespace_inside_tags(self):
        assert render("{{ name }}/{{{ name }}}", {"name": "a"}) == "a/a"

    def test_dotted_paths(self):
        ctx = {"user": {"address": {"city": "Oslo"}}, "items": ["a", "b"]}
        assert render("{{user.address.city}} {{items.1}}", ctx) == "Oslo b"

    def test_missing_renders_empty(self):
        assert render("[{{missing}}][{{user.missing.deep}}][{{{none}}}]", {"user": {}, "none": None}) == "[][][]"

    def test_structures_render_as_json(self):
        ctx = {"data": {"a": [1, 2]}}
        assert render("{{{data}}}", ctx) == '{"a":[1,2]}'
        assert render("{{data}}", ctx) == "{&quot;a&quot;:[1,2]}"

    def test_primitives_render_with_str(self):
        assert render("{{n}} {{f}} {{b}}", {"n": 3, "f": 1.5, "b": True}) == "3 1.5 True"

    def test_no_function_calls_in_tags(self):
        assert render("{{len(items)}}", {"items": [1]}) == ""


class TestSections:
    """{{#key}}...{{/key}}."""

    def test_section_over_records(self):
        ctx = {"users": [{"name": "Alice"}, {"name": "Bob"}]}
        assert render("{{#users}}{{name}} {{/users}}", ctx) == "Alice Bob "

    def test_current_item(self):
        assert render("{{#items}}<li>{{.}}</li>{{/items}}", {"items": [1, 2]}) == "<li>1</li><li>2</li>"

    def test_outer_fields_visible_in_section(self):
        ctx = {"sep": "-", "items": ["a", "b"]}
        assert render("{{#items}}{{.}}{{sep}}{{/items}}", ctx) == "a-b-"

    def test_item_keys_shadow_outer_fields(self):
        ctx = {"name": "outer", "users": [{"name": "inner"}]}
        assert render("{{#users}}{{name}}{{/users}}{{name}}", ctx) == "innerouter"

    def test_empty_sequence_renders_nothing(self):
        assert render("a{{#items}}x{{/items}}b", {"items": []}) == "ab"

    def test_falsy_scalar_renders_nothing(self):
        for value in (False, None, 0, ""):
            assert render("{{#flag}}x{{/flag}}", {"flag": value}) == ""

    def test_truthy_scalar_renders_once_with_current_item(self):
        assert render("{{#flag}}[{{.}}]{{/flag}}", {"flag": True}) == "[True]"
        assert render("{{#name}}Hi {{.}}{{/name}}", {"name": "Ada"}) == "Hi Ada"

    def test_nested_sections(self):
        ctx = {"groups": [{"label": "A", "items": [1, 2]}, {"label": "B", "items": []}]}
        template = "{{#groups}}{{label}}:{{#items}}{{.}}{{/items}};{{/groups}}"
        assert render(template, ctx) == "A:12;B:;"

    def test_whitespace_in_section_tags(self):
        assert render("{{# items }}x{{/ items }}", {"items": [1, 2]}) == "xx"

    def test_multiline_body(self):
        assert render("{{#items}}\n<li>{{.}}</li>\n{{/items}}", {"items": [1]}) == "\n<li>1</li>\n"


class TestInvertedSections:
    """{{^key}}...{{/key}}."""

    def test_renders_for_falsy(self):
        assert render("{{^items}}none{{/items}}", {"items": []}) == "none"
        assert render("{{^missing}}none{{/missing}}", {}) == "none"

    def test_renders_nothing_for_truthy(self):
        assert render("{{^items}}none{{/items}}", {"items": [1]}) == ""

    def test_body_is_fully_rendered(self):
        assert render("{{^items}}Hi {{name}}{{/items}}", {"items": [], "name": "<a>"}) == "Hi &lt;a&gt;"

    def test_section_and_inverted_on_same_key(self):
        template = "{{#items}}some{{/items}}{{^items}}none{{/items}}"
        assert render(template, {"items": [1]}) == "some"
        assert render(template, {"items": []}) == "none"


class TestValuesAreText:
    """Mustache syntax inside context values is never compiled."""

    def test_closing_tag_in_section_item(self):
        context = {"items": [{"name": "{{/x}}"}]}
        assert render("{{#items}}{{name}}{{/items}}", context) == "{{/x}}"

    def test_tag_in_section_item_is_not_substituted(self):
        context = {"items": [{"name": "{{secret}}"}], "secret": "s3"}
        assert render("{{#items}}{{name}}{{/items}}", context) == "{{secret}}"

    def test_section_in_inverted_body_value(self):
        context = {"msg": "{{#list}}X{{/list}}", "list": [1, 2]}
        assert render("{{^hide}}{{{msg}}}{{/hide}}", context) == "{{#list}}X{{/list}}"

    def test_top_level_value(self):
        assert render("<p>{{{body}}}</p>", {"body": "{{^a}}{{/a}}"}) == "<p>{{^a}}{{/a}}</p>"

    def test_inverted_inside_section_still_renders(self):
        template = "{{#items}}[{{.}}{{^empty}}!{{/empty}}]{{/items}}"
        assert render(template, {"items": ["{{a}}", "b"]}) == "[{{a}}!][b!]"


class TestUnbalancedSections:
    """Leftover section tags are compilation errors."""

    def test_unclosed_section(self):
        with pytest.raises(CompilationError) as exc_info:
            render("{{#items}}x", {"items": [1]}, name="x-list")
        err = exc_info.value
        assert err.component == "x-list"
        assert err.expression == "{{#items}}"
        assert "x-list" in str(err)
        assert err.code.value == "P-CMP-001"

    def test_mismatched_close(self):
        with pytest.raises(CompilationError, match="Unbalanced section"):
            render("{{#items}}x{{/other}}", {})

    def test_stray_close(self):
        with pytest.raises(CompilationError, match="never opened"):
            render("x{{/items}}", {})

    def test_unclosed_inverted_section(self):
        with pytest.raises(CompilationError):
            render("{{^items}}x", {})

    def test_context_is_not_mutated(self):
        ctx = {"users": [{"name": "a"}]}
        render("{{#users}}{{name}}{{/users}}", ctx)
        assert ctx == {"users": [{"name": "a"}]}

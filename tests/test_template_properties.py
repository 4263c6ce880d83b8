"""Property-based tests for template compilation and directive processing.

Uses hypothesis to verify properties that must hold for all inputs:

- Escaped interpolation equals the HTML-escaped value; raw equals it verbatim
- Sections render once per element, in order
- Sections and inverted sections on one key are mutually exclusive
- Rendering plus directive processing is idempotent on an unchanged context
- x-for produces one clone per item, in order, with a fresh index
- Expressions agree with Python arithmetic; assignments land in the context
"""

from __future__ import annotations

import html

from hypothesis import given, settings
from hypothesis import strategies as st

from petal import Evaluator, EventListeners, render
from petal.directives import DirectiveProcessor
from petal.dom import parse_fragment

from .strategies import (
    for_items,
    html_text,
    plain_text,
    record_list,
    safe_identifier,
    safe_integer,
    scalar,
    scalar_list,
    template_key,
)


def _escape(value: str) -> str:
    return html.escape(value, quote=True).replace("&#x27;", "&#039;")


def _process(markup: str, context: dict) -> str:
    root = parse_fragment(render(markup, context))
    DirectiveProcessor(Evaluator(), EventListeners()).process_tree(root, context, lambda: None)
    return str(root)


class TestInterpolationProperties:
    """Round trips of {{x}} and {{{x}}}."""

    @given(value=html_text)
    @settings(max_examples=200)
    def test_escaped_equals_html_escape(self, value: str) -> None:
        assert render("{{name}}", {"name": value}) == _escape(value)

    @given(value=html_text)
    @settings(max_examples=200)
    def test_raw_is_verbatim(self, value: str) -> None:
        assert render("{{{name}}}", {"name": value}) == value

    @given(prefix=plain_text, suffix=plain_text, key=template_key, value=plain_text)
    @settings(max_examples=100)
    def test_surrounding_text_untouched(self, prefix: str, suffix: str, key: str, value: str) -> None:
        result = render(f"{prefix}{{{{{{{key}}}}}}}{suffix}", {key: value})
        assert result == f"{prefix}{value}{suffix}"


class TestSectionProperties:
    """Iteration and exclusivity of sections."""

    @given(items=scalar_list)
    @settings(max_examples=100)
    def test_section_once_per_element_in_order(self, items: list) -> None:
        result = render("{{#items}}[{{{.}}}]{{/items}}", {"items": items})
        assert result == "".join(f"[{item}]" for item in items)

    @given(items=record_list)
    @settings(max_examples=100)
    def test_record_keys_exposed(self, items: list) -> None:
        result = render("{{#items}}{{{name}}}|{{/items}}", {"items": items})
        assert result == "".join(f"{item['name']}|" for item in items)

    @given(value=st.one_of(scalar, scalar_list))
    @settings(max_examples=200)
    def test_section_and_inverted_exclusive(self, value: object) -> None:
        shown = render("{{#v}}S{{/v}}", {"v": value})
        hidden = render("{{^v}}I{{/v}}", {"v": value})
        assert (shown == "") != (hidden == "")
        assert hidden in ("", "I")


class TestDirectiveProperties:
    """Idempotence and x-for ordering."""

    @given(items=for_items, visible=st.booleans())
    @settings(max_examples=50, deadline=None)
    def test_render_is_idempotent(self, items: list, visible: bool) -> None:
        markup = (
            '<ul x-show="visible">'
            '<template x-for="item in items"><li :data-i="_idx + 1" x-text="item"></li></template>'
            "</ul>{{#items}}<b>{{.}}</b>{{/items}}"
        )
        context = {"items": items, "visible": visible}
        assert _process(markup, context) == _process(markup, context)

    @given(items=for_items)
    @settings(max_examples=50, deadline=None)
    def test_for_preserves_order_with_fresh_index(self, items: list) -> None:
        markup = '<template x-for="item of items"><i :data-idx="str(_idx)" x-text="item"></i></template>'
        root = parse_fragment(markup)
        DirectiveProcessor(Evaluator(), EventListeners()).process_tree(root, {"items": items}, lambda: None)
        clones = root.find_all("i", recursive=False)
        assert [clone.get_text() for clone in clones] == [str(item) for item in items]
        assert [clone.get("data-idx") for clone in clones] == [str(i) for i in range(len(items))]


class TestExpressionProperties:
    """Evaluator results match plain Python for the supported subset."""

    @given(name=safe_identifier, a=safe_integer, b=safe_integer)
    @settings(max_examples=100)
    def test_arithmetic_matches_python(self, name: str, a: int, b: int) -> None:
        context = {name: a}
        assert Evaluator().evaluate(f"{name} * 2 + {b}", context) == a * 2 + b
        assert Evaluator().evaluate(f"{name} > {b}", context) is (a > b)

    @given(name=safe_identifier, a=safe_integer, b=safe_integer)
    @settings(max_examples=100)
    def test_augmented_assignment_writes_context(self, name: str, a: int, b: int) -> None:
        context = {name: a}
        Evaluator().evaluate_statement(f"{name} += {b}", context)
        assert context == {name: a + b}

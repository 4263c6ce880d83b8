"""Mustache-style template compilation.

Three text passes run in a fixed order:

1. inverted sections ``{{^key}}...{{/key}}``
2. sections ``{{#key}}...{{/key}}``
3. interpolation ``{{{raw}}}`` and ``{{escaped}}``

Section bodies are rendered recursively against their own context, so they
still see un-interpolated markup (``{{.}}`` refers to the current item).
Finished output is held back behind placeholders until the last pass, so a
value containing ``{{...}}`` is inserted as text and never read as a tag.
Keys are dotted paths resolved with :func:`petal.utils.paths.resolve_path`;
there are no calls or operators inside mustache tags.

Example:
    >>> render("{{#users}}{{name}} {{/users}}", {"users": [{"name": "Alice"}, {"name": "Bob"}]})
    'Alice Bob '
    >>> render("Hello, {{name}}!", {"name": "<b>x</b>"})
    'Hello, &lt;b&gt;x&lt;/b&gt;!'
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from petal.context import ITEM_KEY
from petal.exceptions import CompilationError
from petal.utils.html import html_escape, stringify
from petal.utils.paths import resolve_path

_INVERTED_RE = re.compile(r"\{\{\^\s*([^{}]+?)\s*\}\}(.*?)\{\{/\s*\1\s*\}\}", re.DOTALL)
_SECTION_RE = re.compile(r"\{\{#\s*([^{}]+?)\s*\}\}(.*?)\{\{/\s*\1\s*\}\}", re.DOTALL)
_INTERPOLATION_RE = re.compile(r"\{\{\{\s*(.*?)\s*\}\}\}|\{\{\s*(.*?)\s*\}\}", re.DOTALL)
_STRAY_SECTION_RE = re.compile(r"\{\{\s*([#^/])\s*([^{}]*?)\s*\}\}")
_PLACEHOLDER_RE = re.compile(r"\x00(\d+)\x00")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_blank(value: Any) -> bool:
    """Falsy, or an empty sequence (which is already falsy in Python)."""
    return not value


def render(template: str, context: Mapping[str, Any], *, name: str | None = None) -> str:
    """Compile ``template`` against ``context``.

    Args:
        template: Markup with mustache tags.
        context: Values to substitute. Never mutated.
        name: Component name, used in error messages.

    Raises:
        CompilationError: A section is opened without being closed, or
            closed without being opened.
    """
    compilation = _Compilation(name)
    return compilation.splice(compilation.expand(template, context))


class _Compilation:
    """State of one :func:`render` call.

    Every rendered section and interpolated value is stashed and replaced
    by a ``\\x00N\\x00`` placeholder, so the text each later pass scans is
    template source only. :meth:`splice` puts the pieces back at the end;
    values are inserted verbatim and never scanned again.
    """

    __slots__ = ("name", "pieces")

    def __init__(self, name: str | None):
        self.name = name
        # (is_value, text); non-value pieces may hold further placeholders
        self.pieces: list[tuple[bool, str]] = []

    def stash(self, text: str, *, value: bool) -> str:
        self.pieces.append((value, text))
        return f"\x00{len(self.pieces) - 1}\x00"

    def expand(self, template: str, context: Mapping[str, Any]) -> str:
        text = _INVERTED_RE.sub(lambda match: self._inverted(match, context), template)
        text = _SECTION_RE.sub(lambda match: self._section(match, context), text)
        _check_balanced(text, self.name)
        return _INTERPOLATION_RE.sub(lambda match: self._interpolate(match, context), text)

    def splice(self, skeleton: str) -> str:
        def replace(match: re.Match[str]) -> str:
            value, text = self.pieces[int(match.group(1))]
            return text if value else self.splice(text)

        return _PLACEHOLDER_RE.sub(replace, skeleton)

    def _inverted(self, match: re.Match[str], context: Mapping[str, Any]) -> str:
        key, body = match.group(1), match.group(2)
        if _is_blank(resolve_path(context, key)):
            return self.stash(self.expand(body, context), value=False)
        return ""

    def _section(self, match: re.Match[str], context: Mapping[str, Any]) -> str:
        key, body = match.group(1), match.group(2)
        value = resolve_path(context, key)
        if _is_sequence(value):
            rendered = "".join(self.expand(body, _item_context(context, item)) for item in value)
        elif value:
            rendered = self.expand(body, {**context, ITEM_KEY: value})
        else:
            return ""
        return self.stash(rendered, value=False)

    def _interpolate(self, match: re.Match[str], context: Mapping[str, Any]) -> str:
        raw, escaped = match.group(1), match.group(2)
        if raw is not None:
            return self.stash(stringify(resolve_path(context, raw)), value=True)
        return self.stash(html_escape(resolve_path(context, escaped)), value=True)


def _item_context(context: Mapping[str, Any], item: Any) -> dict[str, Any]:
    if isinstance(item, Mapping):
        return {**context, **item, ITEM_KEY: item}
    return {**context, ITEM_KEY: item}


def _check_balanced(text: str, name: str | None) -> None:
    match = _STRAY_SECTION_RE.search(text)
    if match is None:
        return
    kind, key = match.group(1), match.group(2)
    if kind == "/":
        message = f"Section '{{{{/{key}}}}}' closes a section that was never opened"
        suggestion = f"Open it with {{{{#{key}}}}} or {{{{^{key}}}}}, or remove the closing tag"
    else:
        message = f"Unbalanced section '{{{{{kind}{key}}}}}'"
        suggestion = f"Close the section with {{{{/{key}}}}}"
    if name:
        message += f" in component '{name}'"
    raise CompilationError(
        message,
        component=name,
        expression=match.group(0),
        suggestion=suggestion,
    )

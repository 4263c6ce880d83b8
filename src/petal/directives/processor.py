"""Directive processing for freshly rendered markup.

The processor walks a rendered tree and applies, attribute by attribute,
whichever directive the attribute name selects:

=============  ==========================================================
``@event``     listener that runs the value as a statement, then rerenders
``:name``      sets attribute ``name`` to the value when it is truthy
``x-show``     toggles the ``hidden`` attribute
``x-if``       removes the element when falsy
``x-for``      expands a ``<template>`` once per item of a collection
``x-html``     replaces the children with parsed markup
``x-text``     replaces the children with text
``x-model``    two-way binding between a form value and a context path
``x-ref``      records the element in ``context["refs"]``
=============  ==========================================================

Other attributes are left alone. A directive that cannot be applied logs a
``DirectiveError`` and the walk continues with the next attribute.

Example:
    >>> listeners = EventListeners()
    >>> processor = DirectiveProcessor(Evaluator(), listeners)
    >>> root = parse_fragment('<p x-show="visible">hi</p>')
    >>> processor.process_tree(root, {"visible": False}, lambda: None)
    >>> str(root)
    '<p x-show="visible" hidden="">hi</p>'
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from typing import Any

from bs4 import Tag

from petal.config import DEFAULT_CONFIG, RenderConfig
from petal.context import INDEX_KEY, REFS_KEY, Overlay
from petal.dom import (
    Event,
    EventListeners,
    clone_children,
    get_value,
    has_template_ancestor,
    is_attached,
    parse_fragment,
    set_value,
)
from petal.exceptions import DirectiveError
from petal.expressions.evaluator import Evaluator
from petal.render_context import current_component
from petal.utils.paths import assign_path

logger = logging.getLogger(__name__)

Rerender = Callable[[], Any]

_FOR_SPLIT_RE = re.compile(r"\s+(?:of|in)\s+")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*$")


def _attribute_text(value: Any) -> str:
    # bs4 stores multi-valued attributes (class, rel...) as lists
    if isinstance(value, list):
        return " ".join(value)
    return "" if value is None else str(value)


def parse_for_expression(expression: str) -> tuple[str, str]:
    """Split ``"item in items"`` / ``"item of items"`` into its two halves.

    Raises:
        DirectiveError: The expression does not have that shape.
    """
    parts = _FOR_SPLIT_RE.split(expression.strip(), maxsplit=1)
    if len(parts) != 2 or not _IDENTIFIER_RE.match(parts[0]) or not parts[1].strip():
        raise DirectiveError(
            f"Malformed iteration '{expression}'",
            attribute="x-for",
            expression=expression,
            suggestion="Use the form 'item in items' or 'item of items'",
        )
    return parts[0], parts[1].strip()


class DirectiveProcessor:
    """Applies directives to one render pass.

    A processor is created per render with the listener registry of the tree
    being built; listeners registered here die with that tree.

    Args:
        evaluator: Evaluates directive expressions and statements.
        listeners: Registry that receives ``@event`` and ``x-model`` listeners.
        config: Parser used for ``x-html`` markup and ``x-for`` clones.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        listeners: EventListeners,
        config: RenderConfig = DEFAULT_CONFIG,
    ):
        self.evaluator = evaluator
        self.listeners = listeners
        self.config = config
        self._handlers: dict[str, Callable[..., None]] = {
            "x-show": self._show,
            "x-if": self._if,
            "x-for": self._for,
            "x-html": self._html,
            "x-text": self._text,
            "x-model": self._model,
            "x-ref": self._ref,
        }

    def process_tree(
        self,
        root: Tag,
        context: MutableMapping[str, Any],
        rerender: Rerender,
    ) -> None:
        """Apply directives to every element under ``root`` in document order.

        Elements inside an unexpanded ``<template>`` are skipped (``x-for``
        processes its own clones), as are elements an earlier ``x-if``
        detached.
        """
        for element in list(root.find_all(True)):
            if has_template_ancestor(element, root) or not is_attached(element, root):
                continue
            for name, value in list(element.attrs.items()):
                if element.parent is None:
                    # Removed by x-if
                    break
                self.process_attribute(element, name, _attribute_text(value), context, rerender)

    def process_attribute(
        self,
        element: Tag,
        name: str,
        value: str,
        context: MutableMapping[str, Any],
        rerender: Rerender,
    ) -> None:
        """Apply the directive selected by attribute ``name``, if any."""
        try:
            if name.startswith("@"):
                self._event(element, name[1:], value, context, rerender)
            elif name.startswith(":"):
                self._bind(element, name[1:], value, context)
            else:
                handler = self._handlers.get(name)
                if handler is not None:
                    handler(element, value, context, rerender)
        except DirectiveError as e:
            if e.attribute is None:
                e.attribute = name
            if e.component is None:
                e.component = current_component()
            logger.error(f"Directive failed: {e.format_compact()}\n  Attribute: {name}")

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _event(
        self,
        element: Tag,
        event_type: str,
        statement: str,
        context: MutableMapping[str, Any],
        rerender: Rerender,
    ) -> None:
        def listener(event: Event) -> None:
            self.evaluator.evaluate_statement(statement, context, element, event)
            rerender()

        self.listeners.add(element, event_type, listener)

    def _bind(
        self,
        element: Tag,
        attribute: str,
        expression: str,
        context: MutableMapping[str, Any],
    ) -> None:
        value = self.evaluator.evaluate(expression, context, element)
        if value is True:
            element[attribute] = "true"
        elif value:
            element[attribute] = str(value)

    def _show(self, element: Tag, expression: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        if self.evaluator.evaluate(expression, context, element):
            if element.has_attr("hidden"):
                del element["hidden"]
        else:
            element["hidden"] = ""

    def _if(self, element: Tag, expression: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        if not self.evaluator.evaluate(expression, context, element):
            element.extract()

    def _for(self, element: Tag, expression: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        if element.name != "template":
            raise DirectiveError(
                f"x-for is only allowed on <template>, found on <{element.name}>",
                expression=expression,
                suggestion=f"Wrap the repeated markup in <template x-for=\"{expression}\">",
            )
        variable, collection_expression = parse_for_expression(expression)
        collection = self.evaluator.evaluate(collection_expression, context, element)
        if collection is None:
            return
        if isinstance(collection, Mapping) or not isinstance(collection, Iterable):
            raise DirectiveError(
                f"x-for collection is not a sequence: {type(collection).__name__}",
                expression=expression,
            )
        for index, item in enumerate(collection):
            fragment = clone_children(element, self.config.parser)
            self.process_tree(fragment, Overlay(context, {variable: item, INDEX_KEY: index}), rerender)
            element.insert_before(*list(fragment.contents))

    def _html(self, element: Tag, expression: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        value = self.evaluator.evaluate(expression, context, element)
        element.clear()
        if value is None:
            return
        fragment = parse_fragment(str(value), self.config.parser)
        element.extend(list(fragment.contents))

    def _text(self, element: Tag, expression: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        value = self.evaluator.evaluate(expression, context, element)
        element.string = "" if value is None else str(value)

    def _model(self, element: Tag, path: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        value = self.evaluator.evaluate(path, context, element)
        text = "" if value is None else str(value)
        set_value(element, text)
        element["data-value"] = text

        def listener(event: Event) -> None:
            new_value = event.value if event.value is not None else get_value(element)
            assign_path(context, path.strip(), new_value)
            rerender()

        self.listeners.add(element, "change", listener)

    def _ref(self, element: Tag, key: str, context: MutableMapping[str, Any], rerender: Rerender) -> None:
        refs = context.get(REFS_KEY)
        if refs is None:
            refs = {}
            context[REFS_KEY] = refs
        refs[key] = element

"""Behavior blocks: the inline ``<script>`` of a component definition.

A behavior block is a small Python-syntax script run once per instance
against the component context::

    <script>
        count = 0
        step = 1

        def increment(event=None):
            count += step
            self.render()

        button = {"click": increment}
    </script>

- top-level assignments are state fields
- ``def`` creates methods that close over the live context
- a mapping field whose values are all callables is an **event-selector
  map**: the field name is the CSS selector and the keys are event names
  (``button = {"click": increment}``)
- a mapping field whose values are all such maps keys them by arbitrary
  selectors (``events = {".save": {"click": save}}``)
- ``on_rendered`` and ``on_mounted`` are lifecycle hooks

Inside the block, ``el`` is the host element and ``self`` the component.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from petal.expressions.evaluator import Evaluator
from petal.expressions.interpreter import Function

RENDERED_HOOK = "on_rendered"
MOUNTED_HOOK = "on_mounted"


def _is_event_map(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(isinstance(key, str) and callable(handler) for key, handler in value.items())
    )


def selector_maps(name: str, value: Any) -> list[tuple[str, Mapping[str, Callable[..., Any]]]]:
    """The ``(selector, {event: handler})`` pairs a field declares, if any."""
    if _is_event_map(value):
        return [(name, value)]
    if isinstance(value, Mapping) and value and all(_is_event_map(v) for v in value.values()):
        return [(str(selector), events) for selector, events in value.items()]
    return []


def call_handler(handler: Callable[..., Any], event: Any) -> Any:
    """Call ``handler`` with the event if it accepts one.

    Behavior functions declared without parameters are called bare.
    """
    if isinstance(handler, Function) and handler.arity == 0:
        return handler()
    return handler(event)


@dataclass
class Behavior:
    """Names bound by a behavior block.

    Values are not copied: they live in the component context, so a field
    rebound by a method (``count += 1``) is always read fresh from there.
    """

    names: tuple[str, ...] = ()

    @classmethod
    def evaluate(
        cls,
        script: str,
        context: MutableMapping[str, Any],
        evaluator: Evaluator,
        *,
        element: Any = None,
        instance: Any = None,
    ) -> Behavior:
        """Run ``script`` once against ``context``.

        Raises:
            ExpressionError: The block is malformed or raised.
        """
        names = evaluator.run_script(script, context, element, instance=instance)
        return cls(names=tuple(names))

    def selector_maps(
        self, context: Mapping[str, Any]
    ) -> list[tuple[str, Mapping[str, Callable[..., Any]]]]:
        maps = []
        for name in self.names:
            maps.extend(selector_maps(name, context.get(name)))
        return maps

    def hook(self, context: Mapping[str, Any], name: str) -> Callable[..., Any] | None:
        handler = context.get(name)
        return handler if callable(handler) else None

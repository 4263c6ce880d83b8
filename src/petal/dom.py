"""Markup tree helpers over BeautifulSoup, plus a small event model.

Rendered components are BeautifulSoup trees. bs4 compares tags by value
(two ``<li>a</li>`` elements are equal), so everything here that needs to
know *which* element it holds compares with ``is`` and keys by ``id()``.

Events are synthetic: nothing fires them except :meth:`EventListeners.dispatch`,
driven by ``Component.dispatch`` from host code or tests. They bubble from
the target through its ancestors.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup, Tag

Listener = Callable[["Event"], Any]


def parse_fragment(markup: str, parser: str = "html.parser") -> BeautifulSoup:
    """Parse ``markup`` as a fragment (no html/body wrapping with html.parser)."""
    return BeautifulSoup(markup, parser)


def clone_children(tag: Tag, parser: str = "html.parser") -> BeautifulSoup:
    """Deep-copy the children of ``tag`` into a new, detached fragment."""
    fragment = BeautifulSoup("", parser)
    for child in list(tag.contents):
        fragment.append(copy.copy(child))
    return fragment


def is_attached(tag: Tag, root: Tag) -> bool:
    """Whether ``tag`` is still inside ``root`` (or is ``root``)."""
    node: Tag | None = tag
    while node is not None:
        if node is root:
            return True
        node = node.parent
    return False


def has_template_ancestor(tag: Tag, root: Tag) -> bool:
    """Whether a ``<template>`` sits between ``tag`` and ``root``."""
    node = tag.parent
    while node is not None and node is not root:
        if node.name == "template":
            return True
        node = node.parent
    return False


def get_value(tag: Tag) -> str:
    """Current form value of ``tag``.

    ``<textarea>`` holds its value as text, ``<select>`` in its selected
    option; everything else uses the ``value`` attribute.
    """
    if tag.name == "textarea":
        return tag.get_text()
    if tag.name == "select":
        option = tag.find("option", selected=True) or tag.find("option")
        if option is None:
            return ""
        value = option.get("value")
        return str(value) if value is not None else option.get_text()
    value = tag.get("value")
    if isinstance(value, list):
        return " ".join(value)
    return "" if value is None else str(value)


def set_value(tag: Tag, value: Any) -> None:
    """Set the form value of ``tag`` (see :func:`get_value`)."""
    text = "" if value is None else str(value)
    if tag.name == "textarea":
        tag.string = text
    elif tag.name == "select":
        for option in tag.find_all("option"):
            option_value = option.get("value")
            if option_value is None:
                option_value = option.get_text()
            if str(option_value) == text:
                option["selected"] = ""
            elif option.has_attr("selected"):
                del option["selected"]
    else:
        tag["value"] = text


def describe(tag: Tag) -> str:
    """Short CSS-like descriptor for error messages, e.g. ``button#save.primary``."""
    descriptor = tag.name or "?"
    element_id = tag.get("id")
    if element_id:
        descriptor += f"#{element_id}"
    classes = tag.get("class")
    if classes:
        if isinstance(classes, str):
            classes = classes.split()
        descriptor += "".join(f".{name}" for name in classes)
    return f"<{descriptor}>"


@dataclass
class Event:
    """A synthetic DOM-style event.

    Attributes:
        type: Event name (``"click"``, ``"change"``...).
        target: Element the event was dispatched on.
        current_target: Element whose listener is running.
        value: Value carried by the event (new value for ``change``).
        detail: Free-form payload for custom events.
    """

    type: str
    target: Tag
    current_target: Tag | None = None
    value: Any = None
    detail: Any = None
    propagation_stopped: bool = field(default=False, repr=False)
    default_prevented: bool = field(default=False, repr=False)

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


class EventListeners:
    """Listeners bound to elements of one rendered tree.

    Replaced wholesale on every render, together with the tree it belongs to.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, tuple[Tag, dict[str, list[Listener]]]] = {}

    def add(self, tag: Tag, event_type: str, listener: Listener) -> None:
        entry = self._listeners.get(id(tag))
        if entry is None or entry[0] is not tag:
            entry = (tag, {})
            self._listeners[id(tag)] = entry
        entry[1].setdefault(event_type, []).append(listener)

    def get(self, tag: Tag, event_type: str) -> list[Listener]:
        entry = self._listeners.get(id(tag))
        if entry is None or entry[0] is not tag:
            return []
        return list(entry[1].get(event_type, ()))

    def count(self, event_type: str | None = None) -> int:
        """Number of registered listeners, optionally for one event type."""
        total = 0
        for _, by_type in self._listeners.values():
            if event_type is None:
                total += sum(len(listeners) for listeners in by_type.values())
            else:
                total += len(by_type.get(event_type, ()))
        return total

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return self.count()

    def dispatch(self, event: Event) -> Event:
        """Run the listeners of ``event.target`` and then of each ancestor.

        Listener exceptions propagate to the caller and stop the dispatch.
        """
        for node in _bubble_path(event.target):
            listeners = self.get(node, event.type)
            if not listeners:
                continue
            event.current_target = node
            for listener in listeners:
                listener(event)
            if event.propagation_stopped:
                break
        event.current_target = None
        return event


def _bubble_path(tag: Tag) -> Iterator[Tag]:
    node: Tag | None = tag
    while node is not None:
        yield node
        node = node.parent

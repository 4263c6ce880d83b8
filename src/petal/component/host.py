"""Host elements: the custom element tag in the document, seen from its component.

Without a browser there is no MutationObserver, so changes that should
re-render a component are made through :class:`HostElement`, which notifies
its subscribers::

    host.set_attribute("data-count", "5")    # observed attribute -> re-render
    host.set_inner_html("<li>new</li>")      # light content -> re-render if opted in
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from bs4 import Tag

from petal.dom import parse_fragment

logger = logging.getLogger(__name__)

AttributeCallback = Callable[[str], Any]
ContentCallback = Callable[[], Any]


class HostElement:
    """A custom element tag plus change notification.

    Attributes:
        tag: The underlying bs4 tag (in the document, or in a parent
            component's render boundary for nested components).
    """

    def __init__(self, tag: Tag, parser: str = "html.parser"):
        self.tag = tag
        self.parser = parser
        self._attribute_observers: list[tuple[frozenset[str], AttributeCallback]] = []
        self._content_observers: list[ContentCallback] = []

    @property
    def name(self) -> str:
        return self.tag.name

    @property
    def attributes(self) -> dict[str, str]:
        """All attributes, multi-valued ones joined back into strings."""
        return {
            key: " ".join(value) if isinstance(value, list) else value
            for key, value in self.tag.attrs.items()
        }

    def get_attribute(self, name: str) -> str | None:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def set_attribute(self, name: str, value: Any) -> None:
        self.tag[name] = "" if value is None else str(value)
        self._notify_attribute(name)

    def remove_attribute(self, name: str) -> None:
        if self.tag.has_attr(name):
            del self.tag[name]
            self._notify_attribute(name)

    @property
    def inner_html(self) -> str:
        """Light-content markup."""
        return self.tag.decode_contents()

    def set_inner_html(self, markup: str) -> None:
        self.tag.clear()
        self.tag.extend(list(parse_fragment(markup, self.parser).contents))
        self._notify_content()

    def append_html(self, markup: str) -> None:
        self.tag.extend(list(parse_fragment(markup, self.parser).contents))
        self._notify_content()

    def observe_attributes(self, names: Iterable[str], callback: AttributeCallback) -> Callable[[], None]:
        """Call ``callback(name)`` when one of ``names`` changes.

        Returns a function that cancels the subscription.
        """
        entry = (frozenset(names), callback)
        self._attribute_observers.append(entry)

        def unsubscribe() -> None:
            if entry in self._attribute_observers:
                self._attribute_observers.remove(entry)

        return unsubscribe

    def observe_content(self, callback: ContentCallback) -> Callable[[], None]:
        """Call ``callback()`` when the light content changes."""
        self._content_observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._content_observers:
                self._content_observers.remove(callback)

        return unsubscribe

    def _notify_attribute(self, name: str) -> None:
        for names, callback in list(self._attribute_observers):
            if name in names:
                logger.debug(f"Attribute {name} changed on <{self.name}>")
                callback(name)

    def _notify_content(self) -> None:
        for callback in list(self._content_observers):
            callback()

    def __repr__(self) -> str:
        return f"HostElement(<{self.name}>)"

"""The isolated tree a component renders into (its shadow root)."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from petal.dom import Event, EventListeners, parse_fragment


class RenderBoundary:
    """Rendered markup of one component instance and the listeners bound to it.

    Owned exclusively by its component. Every render builds a new tree and
    listener registry and swaps both in with :meth:`commit`; nothing is
    patched in place.
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser
        self.root: BeautifulSoup = parse_fragment("", parser)
        self.listeners = EventListeners()

    def commit(self, root: BeautifulSoup, listeners: EventListeners) -> None:
        self.root = root
        self.listeners = listeners

    def clear(self) -> None:
        self.commit(parse_fragment("", self.parser), EventListeners())

    def select(self, selector: str) -> list[Tag]:
        return list(self.root.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        return self.root.select_one(selector)

    def dispatch(self, event: Event) -> Event:
        return self.listeners.dispatch(event)

    @property
    def inner_html(self) -> str:
        return self.root.decode_contents()

    def __str__(self) -> str:
        return self.inner_html

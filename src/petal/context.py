"""Component context: reserved keys and per-iteration overlays.

A component renders against one plain ``dict``. It is updated in place
for the lifetime of the instance so that behavior methods, which look
names up in it on every call, always observe the latest state.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

# Light-content markup of the host element
CONTENT_KEY = "@"
# Elements captured by x-ref
REFS_KEY = "refs"
# Current item inside a mustache section
ITEM_KEY = "."
# Current position inside an x-for expansion
INDEX_KEY = "_idx"


def new_context(fields: Mapping[str, Any] | None = None, content: str = "") -> dict[str, Any]:
    """Create a component context seeded with ``fields`` and the reserved entries."""
    context: dict[str, Any] = dict(fields or {})
    context[CONTENT_KEY] = content
    context[REFS_KEY] = {}
    return context


class Overlay(MutableMapping[str, Any]):
    """Loop-local bindings layered over an outer context.

    Reads see the local bindings first. Writes to a name that is bound
    locally stay local; every other write goes to the outer context, so
    ``count += 1`` inside an ``x-for`` clone updates the component while
    the loop variable of one iteration never leaks into another. A name
    bound by an enclosing overlay is shadowed here rather than written
    through, so an inner loop never changes the outer iteration.

    Example:
        >>> outer = {"count": 0}
        >>> row = Overlay(outer, {"item": "a", "_idx": 0})
        >>> row["count"] = 1
        >>> row["item"] = "b"
        >>> outer
        {'count': 1}
    """

    __slots__ = ("local", "parent")

    def __init__(self, parent: MutableMapping[str, Any], local: dict[str, Any]):
        self.parent = parent
        self.local = local

    def __getitem__(self, key: str) -> Any:
        if key in self.local:
            return self.local[key]
        return self.parent[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in self.local or self._bound_above(key):
            self.local[key] = value
        else:
            self.parent[key] = value

    def _bound_above(self, key: str) -> bool:
        parent = self.parent
        while isinstance(parent, Overlay):
            if key in parent.local:
                return True
            parent = parent.parent
        return False

    def __delitem__(self, key: str) -> None:
        if key in self.local:
            del self.local[key]
        else:
            del self.parent[key]

    def __contains__(self, key: object) -> bool:
        return key in self.local or key in self.parent

    def __iter__(self) -> Iterator[str]:
        yield from self.local
        for key in self.parent:
            if key not in self.local:
                yield key

    def __len__(self) -> int:
        return len(self.local) + sum(1 for key in self.parent if key not in self.local)

    def __repr__(self) -> str:
        return f"Overlay({self.local!r} over {len(self.parent)} fields)"

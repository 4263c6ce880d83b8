"""Dotted-path lookup and assignment over nested context values.

Lookup never raises: a missing segment short-circuits to ``None``.
Assignment creates intermediate dicts for missing or falsy segments.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any


def _step(current: Any, part: str) -> Any:
    if current is None or part.startswith("__"):
        return None
    if isinstance(current, Mapping):
        return current.get(part)
    if isinstance(current, (str, bytes)):
        return None
    if isinstance(current, Sequence):
        if part.isdigit() and int(part) < len(current):
            return current[int(part)]
        return None
    return getattr(current, part, None)


def resolve_path(context: Mapping[str, Any], path: str) -> Any:
    """Resolve ``path`` (``"user.address.city"``) against ``context``.

    Mappings are traversed by key, sequences by integer segment and other
    objects by attribute. The path ``"."`` is looked up as a plain key so
    that section bodies can refer to the current item.

    Example:
        >>> resolve_path({"user": {"name": "Ada"}}, "user.name")
        'Ada'
        >>> resolve_path({"user": None}, "user.name") is None
        True
    """
    if path == ".":
        return context.get(".")
    current: Any = context
    for part in path.split("."):
        current = _step(current, part)
        if current is None:
            return None
    return current


def assign_path(context: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate dicts as needed.

    Example:
        >>> ctx = {}
        >>> assign_path(ctx, "user.email", "a@b.com")
        >>> ctx
        {'user': {'email': 'a@b.com'}}
    """
    *parents, leaf = path.split(".")
    target: Any = context
    for part in parents:
        child = target.get(part) if isinstance(target, Mapping) else getattr(target, part, None)
        if not child:
            child = {}
            if isinstance(target, MutableMapping):
                target[part] = child
            else:
                setattr(target, part, child)
        target = child
    if isinstance(target, MutableMapping):
        target[leaf] = value
    else:
        setattr(target, leaf, value)

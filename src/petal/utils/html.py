"""HTML escaping and value stringification for template output."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

# Single-pass escaping via str.translate(); the apostrophe uses the
# decimal entity so output stays valid in single-quoted attributes.
_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)


def stringify(value: Any) -> str:
    """Convert a context value to output text.

    ``None`` becomes ``""``; mappings, lists and tuples are serialized as
    compact JSON; everything else goes through ``str()``.

    Example:
        >>> stringify({"a": [1, 2]})
        '{"a":[1,2]}'
        >>> stringify(None)
        ''
    """
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            # Circular structures
            return str(value)
    return str(value)


def html_escape(value: Any) -> str:
    """Stringify ``value`` and escape ``& < > " '``.

    Example:
        >>> html_escape("<b>x</b>")
        '&lt;b&gt;x&lt;/b&gt;'
    """
    return stringify(value).translate(_ESCAPE_TABLE)

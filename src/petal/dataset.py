"""Coercion of host ``data-*`` attributes into context values.

Strings that look like JSON documents (starting with ``{``, ``[`` or
``"``) are parsed; anything else, including numbers, is passed through
as the raw string.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_JSON_PREFIXES = ("{", "[", '"')


def safe_parse(data: str) -> Any:
    """Parse ``data`` as JSON when it looks like JSON, else return it unchanged.

    Example:
        >>> safe_parse('{"a": 1}')
        {'a': 1}
        >>> safe_parse("42")
        '42'
        >>> safe_parse("[broken")
        '[broken'
    """
    if data.startswith(_JSON_PREFIXES):
        try:
            return json.loads(data)
        except ValueError:
            logger.debug(f"Dataset value is not valid JSON, keeping raw string: {data!r}")
            return data
    return data


def dataset_key(attribute: str) -> str | None:
    """Map ``data-user-name`` to ``user_name``; non-data attributes map to None."""
    if not attribute.startswith("data-"):
        return None
    return attribute[5:].replace("-", "_")


def parse_dataset(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce every ``data-*`` attribute of ``attributes`` into a context field.

    Empty values are kept as empty strings.

    Example:
        >>> parse_dataset({"data-items": "[1, 2]", "data-label": "Hi", "id": "x"})
        {'items': [1, 2], 'label': 'Hi'}
    """
    parsed: dict[str, Any] = {}
    for name, raw in attributes.items():
        key = dataset_key(name)
        if key is None:
            continue
        if isinstance(raw, list):
            # bs4 splits multi-valued attributes such as class
            raw = " ".join(raw)
        parsed[key] = safe_parse(raw) if raw else raw
    return parsed

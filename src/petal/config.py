"""Rendering configuration.

Example:
    >>> from petal import ComponentRegistry, RenderConfig
    >>> config = RenderConfig(max_render_depth=10, style_processor=minify_css)
    >>> registry = ComponentRegistry(config=config)

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from petal.dataset import parse_dataset


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Settings shared by a registry and the components it mounts.

    Attributes:
        parser: BeautifulSoup tree builder used for all markup.
        max_render_depth: Nesting limit for re-entrant renders. 50 is far
            beyond any real hook chain while stopping ``rerender()`` loops early.
        style_processor: Optional callable applied to compiled markup once
            per render, before it is parsed (CSS preprocessing hook).
        dataset_parser: Turns host attributes into context fields.
    """

    parser: str = "html.parser"
    max_render_depth: int = 50
    style_processor: Callable[[str], str] | None = None
    dataset_parser: Callable[[Mapping[str, Any]], dict[str, Any]] = parse_dataset


DEFAULT_CONFIG = RenderConfig()

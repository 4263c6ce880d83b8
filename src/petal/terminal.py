"""ANSI styling for Petal error messages.

Colours are applied only when stdout is a TTY, unless ``FORCE_COLOR`` is
set; ``NO_COLOR`` (https://no-color.org/) turns them off.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

_CODES = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "cyan": "\033[36m",
    "bright_red": "\033[91m",
    "bright_blue": "\033[94m",
}

StyleName = Literal["reset", "bold", "dim", "green", "cyan", "bright_red", "bright_blue"]

_ANSI_RE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def _should_use_colors() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


_USE_COLORS = _should_use_colors()


def supports_color() -> bool:
    """Whether error messages are being coloured."""
    return _USE_COLORS


def style(text: str, *names: StyleName) -> str:
    """Wrap ``text`` in the given ANSI styles (no-op when colours are off)."""
    if not _USE_COLORS or not names:
        return text
    prefix = "".join(_CODES[name] for name in names)
    return f"{prefix}{text}{_CODES['reset']}"


def strip_colors(text: str) -> str:
    """Remove ANSI escape sequences from ``text``.

    Example:
        >>> strip_colors("\\033[91mP-CMP-001\\033[0m")
        'P-CMP-001'
    """
    return _ANSI_RE.sub("", text)


def error_code(text: str) -> str:
    return style(text, "bright_red", "bold")


def location(text: str) -> str:
    return style(text, "cyan")


def hint(text: str) -> str:
    return style(text, "green")


def dim_text(text: str) -> str:
    return style(text, "dim")


def docs_url(text: str) -> str:
    return style(text, "bright_blue")

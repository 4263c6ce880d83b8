"""Definition loaders.

``<link rel="html" href="...">`` elements in a document name external
component definitions. The registry resolves each ``href`` through a loader,
which returns the definition markup (one or more ``<template data-name>``
elements) as text.

Built-in Loaders:
- `FileSystemLoader`: Load from filesystem directories
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order
- `FunctionLoader`: Wrap a callable as a loader

Custom Loaders:
Implement the Loader protocol:
    ```python
    class HttpLoader:
        def get_source(self, name: str) -> str:
            response = session.get(urljoin(base_url, name))
            if response.status_code != 200:
                raise DefinitionNotFoundError(f"Definition '{name}' not found")
            return response.text
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol

from petal.exceptions import DefinitionNotFoundError


class Loader(Protocol):
    """Anything that can turn an ``href`` into definition markup."""

    def get_source(self, name: str) -> str: ...


def _normalize(name: str) -> str:
    # Links are written relative to the page: "./x.html" and "/x.html" both
    # name the file x.html under a loader root
    name = name.strip()
    while name.startswith("./"):
        name = name[2:]
    return name.lstrip("/")


class FileSystemLoader:
    """Load definitions from filesystem directories.

    Directories are searched in order; the first matching file wins.

    Example:
        >>> loader = FileSystemLoader(["components/custom/", "components/"])
        >>> loader.get_source("./counter.html")
        '<template data-name="x-counter">...'

    Raises:
        DefinitionNotFoundError: If the file is not found in any search path
    """

    __slots__ = ("_encoding", "_paths")

    def __init__(
        self,
        paths: str | Path | Sequence[str | Path],
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    def get_source(self, name: str) -> str:
        relative = _normalize(name)
        for base in self._paths:
            path = base / relative
            if path.is_file():
                return path.read_text(self._encoding)

        raise DefinitionNotFoundError(
            f"Definition '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_definitions(self) -> list[str]:
        """List all ``.html`` files under the search paths."""
        found: set[str] = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob("*.html"):
                    found.add(path.relative_to(base).as_posix())
        return sorted(found)


class DictLoader:
    """Load definitions from an in-memory dictionary.

    Example:
        >>> loader = DictLoader({"counter.html": COUNTER_MARKUP})
        >>> registry = ComponentRegistry(loader=loader)

    Raises:
        DefinitionNotFoundError: If the name is not in the mapping
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> str:
        if name in self._mapping:
            return self._mapping[name]
        relative = _normalize(name)
        if relative in self._mapping:
            return self._mapping[relative]

        available = sorted(self._mapping)
        msg = f"Definition '{name}' not found"
        matches = get_close_matches(relative, available, n=1, cutoff=0.6)
        if matches:
            msg += f". Did you mean '{matches[0]}'?"
        elif available:
            msg += f". Available: {', '.join(available[:10])}"
            if len(available) > 10:
                msg += f" ... ({len(available)} total)"
        raise DefinitionNotFoundError(msg)

    def list_definitions(self) -> list[str]:
        return sorted(self._mapping)


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match."""

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self._loaders = list(loaders)

    def get_source(self, name: str) -> str:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except DefinitionNotFoundError:
                continue
        raise DefinitionNotFoundError(
            f"Definition '{name}' not found in any of {len(self._loaders)} loaders"
        )


class FunctionLoader:
    """Wrap a callable as a loader.

    The function takes an ``href`` and returns the markup, or ``None`` when
    there is no such definition.

    Example:
        >>> def load(name):
        ...     return cms.get(name)
        >>> registry = ComponentRegistry(loader=FunctionLoader(load))

    Raises:
        DefinitionNotFoundError: If ``load_func`` returns ``None``
    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], str | None]):
        self._load_func = load_func

    def get_source(self, name: str) -> str:
        result = self._load_func(name)
        if result is None:
            raise DefinitionNotFoundError(f"Definition '{name}' not found")
        return result

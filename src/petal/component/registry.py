"""Component registry: definitions by name, and mounting them onto documents.

Example:
    >>> registry = ComponentRegistry(loader=FileSystemLoader("components/"))
    >>> html = registry.render_document(Path("index.html").read_text())

``render_document`` resolves ``<link rel="html">`` imports through the
loader, defines every ``<template data-name>``, mounts each custom element
of the page and returns the page with the rendered output of every instance
embedded as a declarative shadow root.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from bs4 import BeautifulSoup, Tag

from petal.component.definition import TemplateDefinition
from petal.component.host import HostElement
from petal.component.lifecycle import Component
from petal.config import DEFAULT_CONFIG, RenderConfig
from petal.dom import parse_fragment
from petal.exceptions import DefinitionNotFoundError
from petal.expressions.evaluator import Evaluator
from petal.loaders import Loader

logger = logging.getLogger(__name__)


def _inside_template(tag: Tag) -> bool:
    return any(parent.name == "template" for parent in tag.parents)


class ComponentRegistry:
    """Definitions known to one application, and the instances mounted from them.

    ``define`` is idempotent: the first definition of a name wins and later
    ones are ignored, so documents that import the same definition twice
    are harmless.

    Args:
        config: Rendering settings passed to every component.
        loader: Resolves ``<link rel="html">`` hrefs (required only for
            documents that use them).
    """

    def __init__(self, config: RenderConfig = DEFAULT_CONFIG, loader: Loader | None = None):
        self.config = config
        self.loader = loader
        self.evaluator = Evaluator()
        self.components: list[Component] = []
        self._definitions: dict[str, TemplateDefinition] = {}
        self._mounted: dict[int, Component] = {}

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def define(self, definition: TemplateDefinition) -> bool:
        """Register ``definition`` unless its name is taken.

        Returns:
            True if the definition was added.
        """
        if definition.name in self._definitions:
            logger.debug(f"Component {definition.name} already defined, ignoring")
            return False
        self._definitions[definition.name] = definition
        logger.debug(f"Defined component {definition.name}")
        return True

    def get(self, name: str) -> TemplateDefinition | None:
        return self._definitions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def define_from_markup(self, markup: str) -> list[str]:
        """Define every ``<template data-name>`` in ``markup``; return the new names."""
        return self._define_templates(parse_fragment(markup, self.config.parser))

    def define_from_document(self, document: BeautifulSoup) -> list[str]:
        """Resolve ``<link rel="html">`` imports, then define every template.

        Imported markup may link further definitions; links are resolved
        until none remain. Each href is loaded at most once and every link
        element is removed. Hrefs the loader cannot find are logged and
        skipped.

        Returns:
            Names that were newly defined.
        """
        seen: set[str] = set()
        while True:
            links = [link for link in document.find_all("link") if "html" in (link.get("rel") or [])]
            if not links:
                break
            imported: list[str] = []
            for link in links:
                href = str(link.get("href") or "")
                link.extract()
                if not href or href in seen:
                    continue
                seen.add(href)
                if self.loader is None:
                    logger.warning(f"No loader configured, skipping component import {href}")
                    continue
                try:
                    imported.append(self.loader.get_source(href))
                except DefinitionNotFoundError as e:
                    logger.warning(f"Component {href} not found: {e.message}")
            if imported:
                fragment = parse_fragment("".join(imported), self.config.parser)
                target = document.head or document
                target.extend(list(fragment.contents))
        return self._define_templates(document)

    def _define_templates(self, root: Tag) -> list[str]:
        added = []
        for template in root.find_all("template", attrs={"data-name": True}):
            definition = TemplateDefinition.from_element(template)
            if self.define(definition):
                added.append(definition.name)
        return added

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def find_hosts(self, root: Tag) -> Iterator[Tag]:
        """Custom elements under ``root`` that have a definition.

        Elements inside ``<template>`` elements (definitions and ``x-for``
        templates) are inert and skipped.
        """
        for tag in root.find_all(True):
            if tag.name in self._definitions and not _inside_template(tag):
                yield tag

    def create(self, tag: Tag) -> Component:
        """Construct and prepare a component for ``tag``.

        Raises:
            KeyError: ``tag`` is not a defined custom element.
        """
        definition = self._definitions[tag.name]
        component = Component(
            definition,
            HostElement(tag, self.config.parser),
            self.config,
            registry=self,
            evaluator=self.evaluator,
        )
        component.prepare_content()
        return component

    def mount(self, document: Tag) -> list[Component]:
        """Upgrade every not-yet-mounted custom element in ``document``.

        Each element is constructed, prepared, rendered and connected in
        document order. A failing instance is logged and re-raised only after
        the remaining ones have been mounted, so one broken component does
        not stop its siblings.

        Returns:
            The newly mounted components.
        """
        mounted: list[Component] = []
        failures: list[Exception] = []
        for tag in list(self.find_hosts(document)):
            if self.component_for(tag) is not None:
                continue
            try:
                component = self.create(tag)
                component.render()
                component.connect()
            except Exception as e:
                logger.error(f"Failed to mount <{tag.name}>: {e}")
                failures.append(e)
                continue
            self._mounted[id(tag)] = component
            self.components.append(component)
            mounted.append(component)
        if failures:
            raise failures[0]
        return mounted

    def unmount(self, component: Component) -> None:
        """Disconnect ``component`` and forget it."""
        component.disconnect()
        self._mounted.pop(id(component.host.tag), None)
        if component in self.components:
            self.components.remove(component)

    def component_for(self, tag: Tag) -> Component | None:
        component = self._mounted.get(id(tag))
        if component is not None and component.host.tag is tag:
            return component
        return None

    def render_document(self, markup: str) -> str:
        """Define, mount and serialize a whole page.

        Every mounted instance gets its rendered output inserted into its
        host element as ``<template shadowrootmode="open">``.
        """
        document = parse_fragment(markup, self.config.parser)
        self.define_from_document(document)
        components = self.mount(document)
        for component in components:
            component.host.tag.insert(0, component.shadow_template())
        return str(document)

    def form_data(self, form: Tag) -> dict[str, Any]:
        """Values contributed by form-associated components inside ``form``."""
        data: dict[str, Any] = {}
        for component in self.components:
            if not any(parent is form for parent in component.host.tag.parents):
                continue
            entry = component.form_value()
            if entry is not None:
                name, value = entry
                data[name] = value
        return data

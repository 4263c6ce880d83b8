"""Component definitions parsed from ``<template data-name>`` elements."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import Tag

from petal.context import CONTENT_KEY

FORM_ROLES = frozenset({"input", "textarea", "select"})


@dataclass(frozen=True, slots=True)
class TemplateDefinition:
    """Immutable declaration of a component.

    Attributes:
        name: Custom element name (``x-counter``).
        role: ``data-as`` value; ``input``, ``textarea`` and ``select`` make
            the component form-associated.
        observed_attributes: Entries of the ``data-attrs`` list. ``@`` means
            the component wants to re-render when its light content changes;
            any other entry ``x`` observes the host attribute ``data-x``.
        markup: Template body without the behavior block.
        script: Source of the inline ``<script>``, if any.

    Example:
        >>> soup = BeautifulSoup(
        ...     '<template data-name="x-hello" data-attrs="name"><p>{{name}}</p></template>',
        ...     "html.parser",
        ... )
        >>> TemplateDefinition.from_element(soup.template).attribute_names
        ('data-name',)
    """

    name: str
    markup: str
    role: str | None = None
    observed_attributes: tuple[str, ...] = ()
    script: str | None = None

    @classmethod
    def from_element(cls, template: Tag) -> TemplateDefinition:
        name = template.get("data-name")
        if not name:
            raise ValueError("Component template is missing its data-name attribute")

        attrs = template.get("data-attrs") or ""
        observed = tuple(entry.strip() for entry in str(attrs).split(",") if entry.strip())

        script: str | None = None
        markup: list[str] = []
        for child in template.contents:
            if isinstance(child, Tag) and child.name == "script":
                if script is None and not child.get("src"):
                    script = child.get_text()
                continue
            markup.append(str(child))

        return cls(
            name=str(name),
            markup="".join(markup),
            role=template.get("data-as") or None,
            observed_attributes=observed,
            script=script,
        )

    @property
    def form_associated(self) -> bool:
        return self.role in FORM_ROLES

    @property
    def observes_content(self) -> bool:
        return CONTENT_KEY in self.observed_attributes

    @property
    def attribute_names(self) -> tuple[str, ...]:
        """Host attribute names that trigger a re-render when changed."""
        return tuple(f"data-{entry}" for entry in self.observed_attributes if entry != CONTENT_KEY)

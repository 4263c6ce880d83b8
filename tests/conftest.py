"""Pytest configuration and fixtures for Petal tests."""

from collections.abc import Callable

import pytest
from bs4 import BeautifulSoup

from petal import (
    DEFAULT_CONFIG,
    Component,
    ComponentRegistry,
    DictLoader,
    Evaluator,
    EventListeners,
    HostElement,
    RenderConfig,
    TemplateDefinition,
)
from petal.directives import DirectiveProcessor


@pytest.fixture
def evaluator():
    """Create a shared Evaluator."""
    return Evaluator()


@pytest.fixture
def listeners():
    """Create an empty listener registry."""
    return EventListeners()


@pytest.fixture
def processor(evaluator, listeners):
    """Create a DirectiveProcessor bound to the ``listeners`` fixture."""
    return DirectiveProcessor(evaluator, listeners)


@pytest.fixture
def registry():
    """Create an empty ComponentRegistry."""
    return ComponentRegistry()


@pytest.fixture
def registry_with_loader():
    """Create a ComponentRegistry whose loader knows two definitions."""
    loader = DictLoader(
        {
            "hello.html": (
                '<template data-name="x-hello" data-attrs="name">'
                "<p>Hello, {{name}}!</p>"
                "</template>"
            ),
            "card.html": (
                '<link rel="html" href="hello.html">'
                '<template data-name="x-card">'
                '<div class="card"><x-hello data-name="{{title}}"></x-hello></div>'
                "</template>"
            ),
        }
    )
    return ComponentRegistry(loader=loader)


@pytest.fixture
def make_component() -> Callable[..., Component]:
    """Build an unrendered component from definition markup and a host tag.

    Example:
        component = make_component('<template data-name="x-a">...</template>', "<x-a></x-a>")
    """

    def factory(definition_markup: str, host_markup: str, config: RenderConfig = DEFAULT_CONFIG) -> Component:
        definition_soup = BeautifulSoup(definition_markup, "html.parser")
        definition = TemplateDefinition.from_element(definition_soup.find("template"))
        document = BeautifulSoup(host_markup, "html.parser")
        host = HostElement(document.find(definition.name))
        return Component(definition, host, config)

    return factory


def normalize(markup: str) -> str:
    """Collapse whitespace so markup can be compared structurally."""
    return " ".join(markup.split()).replace("> <", "><")


def assert_contains(markup: str, *expected_parts: str) -> None:
    """Assert rendered markup contains all expected parts.

    Args:
        markup: The actual rendered markup.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in markup, (
            f"Rendered output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {markup!r}"
        )

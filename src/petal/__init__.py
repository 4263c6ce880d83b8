"""Petal — declarative HTML components rendered in Python.

A component is a ``<template data-name="...">`` element: markup with
mustache tags and ``x-*`` / ``:attr`` / ``@event`` directives, plus an
optional inline ``<script>`` behavior block written in a small Python
subset. Petal renders each instance into its own boundary and serializes
the page with declarative shadow roots.

Quickstart:
    >>> from petal import ComponentRegistry
    >>> registry = ComponentRegistry()
    >>> registry.render_document('''
    ...     <template data-name="x-hello" data-attrs="name"><p>Hello, {{name}}!</p></template>
    ...     <x-hello data-name="World"></x-hello>
    ... ''')
    '...<x-hello data-name="World"><template shadowrootmode="open"><p>Hello, World!</p></template></x-hello>...'

Interactive use:
    >>> component = registry.mount(document)[0]
    >>> component.dispatch("button", "click")
    >>> component.boundary.inner_html

Architecture:
Definition → Behavior block → Template Compiler → Parser → Directive Processor → Boundary

Pipeline stages:
1. **Template Compiler**: mustache sections, inverted sections, interpolation
2. **Parser**: BeautifulSoup builds a fresh tree for every render
3. **Directive Processor**: applies ``x-*``, ``:attr`` and ``@event`` per attribute
4. **Lifecycle**: commits the tree, binds selector maps, fires hooks

Every render regenerates the whole boundary from (markup, context); there is
no diffing and no render batching.

Error Handling:
Expression and directive failures are logged and never abort a render.
``CompilationError``, ``LifecycleError`` and ``EventHandlerError`` escape the
instance that failed; sibling instances are unaffected.

"""

from petal.component import (
    Behavior,
    Component,
    ComponentRegistry,
    ComponentState,
    HostElement,
    RenderBoundary,
    TemplateDefinition,
)
from petal.config import DEFAULT_CONFIG, RenderConfig
from petal.context import Overlay, new_context
from petal.dataset import parse_dataset, safe_parse
from petal.directives import DirectiveProcessor
from petal.dom import Event, EventListeners
from petal.exceptions import (
    CompilationError,
    DefinitionNotFoundError,
    DirectiveError,
    ErrorCode,
    EventHandlerError,
    ExpressionError,
    LifecycleError,
    PetalError,
    RenderDepthError,
)
from petal.expressions import Evaluator
from petal.loaders import ChoiceLoader, DictLoader, FileSystemLoader, FunctionLoader
from petal.render_context import RenderContext, get_render_context, render_context
from petal.template import render
from petal.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "Behavior",
    "ChoiceLoader",
    "CompilationError",
    "Component",
    "ComponentRegistry",
    "ComponentState",
    "DefinitionNotFoundError",
    "DictLoader",
    "DirectiveError",
    "DirectiveProcessor",
    "ErrorCode",
    "Evaluator",
    "Event",
    "EventHandlerError",
    "EventListeners",
    "ExpressionError",
    "FileSystemLoader",
    "FunctionLoader",
    "HostElement",
    "LifecycleError",
    "Overlay",
    "PetalError",
    "RenderBoundary",
    "RenderConfig",
    "RenderContext",
    "RenderDepthError",
    "TemplateDefinition",
    "__version__",
    "get_render_context",
    "html_escape",
    "new_context",
    "parse_dataset",
    "render",
    "render_context",
    "safe_parse",
]

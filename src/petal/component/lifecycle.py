"""Component lifecycle controller.

A :class:`Component` owns one instance of a :class:`TemplateDefinition`:
its context, its render boundary and its behavior block. It moves through

    CONSTRUCTED ──prepare_content()──▶ CONTENT_PREPARED ──render()──▶ RENDERED

and re-enters RENDERED on every later render: after a directive-bound event
handler runs, when an observed host attribute changes, and (when the
definition lists ``@`` in ``data-attrs``) when the light content changes.

Render pipeline:
    compile markup ─▶ style processor ─▶ parse into a fresh tree ─▶
    apply directives ─▶ commit tree + listeners to the boundary ─▶
    bind selector maps ─▶ upgrade nested components ─▶ ``on_rendered``

Nothing before the commit touches the boundary, so a render that fails
leaves the previous output (and its listeners) in place.

Renders are never coalesced: every ``render()`` call, including each
``rerender()`` issued by an event handler, renders exactly once.

Example:
    >>> definition = TemplateDefinition(name="x-hello", markup="<p>Hello, {{name}}!</p>")
    >>> host = HostElement(BeautifulSoup('<x-hello data-name="Ada"></x-hello>', "html.parser").find("x-hello"))
    >>> component = Component(definition, host)
    >>> component.render()
    >>> component.boundary.inner_html
    '<p>Hello, Ada!</p>'
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Tag

from petal.component.behavior import MOUNTED_HOOK, RENDERED_HOOK, Behavior, call_handler
from petal.component.boundary import RenderBoundary
from petal.component.definition import TemplateDefinition
from petal.component.host import HostElement
from petal.config import DEFAULT_CONFIG, RenderConfig
from petal.context import CONTENT_KEY, REFS_KEY, new_context
from petal.directives.processor import DirectiveProcessor
from petal.dom import Event, EventListeners, clone_children, describe, parse_fragment, set_value
from petal.exceptions import (
    CompilationError,
    EventHandlerError,
    ExpressionError,
    LifecycleError,
    PetalError,
    RenderDepthError,
)
from petal.expressions.evaluator import Evaluator
from petal.render_context import component_scope, render_context
from petal.template.compiler import render as compile_template

if TYPE_CHECKING:
    from petal.component.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class ComponentState(Enum):
    CONSTRUCTED = "constructed"
    CONTENT_PREPARED = "content-prepared"
    RENDERED = "rendered"


# Instance attributes; any other attribute write goes to the context
_OWN_ATTRIBUTES = frozenset(
    {
        "definition",
        "host",
        "config",
        "registry",
        "evaluator",
        "context",
        "boundary",
        "behavior",
        "state",
        "connected",
        "children",
        "render_count",
        "_mounted",
        "_unsubscribers",
    }
)


class Component:
    """A live instance of a component definition.

    Attribute reads fall through to the context (``component.count``) and
    writes to unknown attributes land in it, so behavior methods can use
    ``self.count`` and ``count`` interchangeably.

    Args:
        definition: What to render.
        host: The custom element this instance is attached to.
        config: Rendering settings.
        registry: Registry used to upgrade nested custom elements.
        evaluator: Shared expression evaluator.
    """

    def __init__(
        self,
        definition: TemplateDefinition,
        host: HostElement,
        config: RenderConfig = DEFAULT_CONFIG,
        registry: ComponentRegistry | None = None,
        evaluator: Evaluator | None = None,
    ):
        self.definition = definition
        self.host = host
        self.config = config
        self.registry = registry
        self.evaluator = evaluator or Evaluator()
        self.context = new_context(config.dataset_parser(host.attributes), host.inner_html)
        self.boundary = RenderBoundary(config.parser)
        self.behavior = Behavior()
        self.state = ComponentState.CONSTRUCTED
        self.connected = False
        self.children: list[Component] = []
        self.render_count = 0
        self._mounted = False
        self._unsubscribers: list[Callable[[], None]] = []

        if definition.attribute_names:
            self._unsubscribers.append(
                host.observe_attributes(definition.attribute_names, self.attribute_changed)
            )
        if definition.observes_content:
            self._unsubscribers.append(host.observe_content(self.content_changed))

    @property
    def name(self) -> str:
        return self.definition.name

    def __getattr__(self, name: str) -> Any:
        # Only called for names not found normally
        context = self.__dict__.get("context")
        if context is not None and name in context:
            return context[name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _OWN_ATTRIBUTES or "context" not in self.__dict__:
            object.__setattr__(self, name, value)
        else:
            self.context[name] = value

    def __repr__(self) -> str:
        return f"<Component {self.name} state={self.state.value}>"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def prepare_content(self) -> None:
        """Run the behavior block once, merging its names into the context.

        Raises:
            LifecycleError: The behavior block is malformed or raised.
        """
        script = self.definition.script
        if script and script.strip():
            with component_scope(self.name):
                try:
                    self.behavior = Behavior.evaluate(
                        script,
                        self.context,
                        self.evaluator,
                        element=self.host.tag,
                        instance=self,
                    )
                except ExpressionError as e:
                    raise LifecycleError(
                        f"Behavior block failed: {e.message}",
                        component=self.name,
                        expression=e.expression,
                        suggestion=e.suggestion,
                    ) from e
        self.state = ComponentState.CONTENT_PREPARED

    def render(self) -> None:
        """Regenerate the boundary from the markup and the current context.

        Raises:
            CompilationError: The markup has an unbalanced section.
            LifecycleError: Any other failure, including the ``on_rendered``
                hook and runaway re-entrant rendering (``RenderDepthError``).
        """
        if self.state is ComponentState.CONSTRUCTED:
            self.prepare_content()

        with render_context(self.name, max_depth=self.config.max_render_depth) as ctx:
            if ctx.exceeded:
                raise RenderDepthError(
                    f"Render depth {ctx.max_depth} exceeded: {ctx.describe_stack()}",
                    component=self.name,
                    suggestion="Make sure hooks and handlers do not call render() unconditionally",
                )

            previous_refs = self.context.get(REFS_KEY)
            self.context[REFS_KEY] = {}
            try:
                root, listeners = self._build()
            except Exception as e:
                self.context[REFS_KEY] = previous_refs
                logger.error(f"Render of {self.name} failed, keeping previous output: {e}")
                if isinstance(e, (CompilationError, LifecycleError)):
                    raise
                raise LifecycleError(
                    f"Render failed: {type(e).__name__}: {e}",
                    component=self.name,
                ) from e

            self.boundary.commit(root, listeners)
            self.state = ComponentState.RENDERED
            self.render_count += 1
            self._bind_selector_maps()
            self._upgrade_children()
            self._run_hook(RENDERED_HOOK)

    def _build(self) -> tuple[BeautifulSoup, EventListeners]:
        markup = compile_template(self.definition.markup, self.context, name=self.name)
        if self.config.style_processor is not None:
            markup = self.config.style_processor(markup)
        root = parse_fragment(markup, self.config.parser)
        listeners = EventListeners()
        processor = DirectiveProcessor(self.evaluator, listeners, self.config)
        processor.process_tree(root, self.context, self.render)
        return root, listeners

    def connect(self) -> None:
        """Mark the instance attached to a live document.

        ``on_mounted`` fires the first time only.
        """
        self.connected = True
        if not self._mounted:
            self._mounted = True
            self._run_hook(MOUNTED_HOOK)
        for child in self.children:
            child.connect()

    def disconnect(self) -> None:
        """Detach from the host and drop rendered output and nested instances."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        for child in self.children:
            child.disconnect()
        self.children = []
        self.boundary.clear()
        self.connected = False

    def attribute_changed(self, name: str) -> None:
        """Copy the re-coerced host attributes into the context and re-render."""
        logger.debug(f"{self.name}: attribute {name} changed")
        self.context.update(self.config.dataset_parser(self.host.attributes))
        self.render()

    def content_changed(self) -> None:
        """Copy the host light content into the context and re-render."""
        self.context[CONTENT_KEY] = self.host.inner_html
        self.render()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def dispatch(
        self,
        target: Tag | str,
        event_type: str,
        *,
        value: Any = None,
        detail: Any = None,
    ) -> Event:
        """Fire a synthetic event at ``target`` inside the boundary.

        ``target`` is an element or a CSS selector. With ``value``, the
        element's form value is set first (what a user typing would do).

        Raises:
            LookupError: The selector matches nothing.
            EventHandlerError: A selector-map handler raised.
        """
        if isinstance(target, str):
            element = self.boundary.select_one(target)
            if element is None:
                raise LookupError(f"No element matches {target!r} in {self.name}")
        else:
            element = target
        if value is not None:
            set_value(element, value)
        event = Event(event_type, element, value=value, detail=detail)
        with component_scope(self.name):
            return self.boundary.dispatch(event)

    def _bind_selector_maps(self) -> None:
        for selector, events in self.behavior.selector_maps(self.context):
            for element in self.boundary.select(selector):
                for event_type, handler in events.items():
                    self.boundary.listeners.add(
                        element, event_type, self._wrap_handler(selector, event_type, handler)
                    )

    def _wrap_handler(
        self, selector: str, event_type: str, handler: Callable[..., Any]
    ) -> Callable[[Event], None]:
        def listener(event: Event) -> None:
            try:
                call_handler(handler, event)
            except PetalError:
                raise
            except Exception as e:
                raise EventHandlerError(
                    f"{type(e).__name__}: {e}",
                    event=event_type,
                    element=f"{selector} {describe(event.current_target or event.target)}",
                    component=self.name,
                ) from e

        return listener

    def _run_hook(self, name: str) -> None:
        hook = self.behavior.hook(self.context, name)
        if hook is None:
            return
        with component_scope(self.name):
            try:
                hook()
            except PetalError:
                raise
            except Exception as e:
                raise LifecycleError(
                    f"Hook {name} failed: {type(e).__name__}: {e}",
                    component=self.name,
                ) from e

    # ------------------------------------------------------------------
    # Nested components
    # ------------------------------------------------------------------

    def _upgrade_children(self) -> None:
        for child in self.children:
            child.disconnect()
        self.children = []
        if self.registry is None:
            return
        for tag in self.registry.find_hosts(self.boundary.root):
            child = self.registry.create(tag)
            child.render()
            self.children.append(child)
            if self.connected:
                child.connect()

    # ------------------------------------------------------------------
    # Forms and serialization
    # ------------------------------------------------------------------

    def form_value(self) -> tuple[str, Any] | None:
        """``(name, value)`` this instance contributes to its form, if form-associated."""
        if not self.definition.form_associated:
            return None
        name = self.host.get_attribute("data-name") or self.host.get_attribute("name")
        if not name:
            return None
        return name, self.context.get("value")

    def shadow_template(self) -> Tag:
        """Boundary content as a ``<template shadowrootmode="open">`` element.

        Nested components are serialized into their host tags recursively.
        """
        fragment = clone_children(self.boundary.root, self.config.parser)
        originals = self.boundary.root.find_all(True)
        clones = fragment.find_all(True)
        for child in self.children:
            for index, tag in enumerate(originals):
                if tag is child.host.tag:
                    clones[index].insert(0, child.shadow_template())
                    break
        template = fragment.new_tag("template", attrs={"shadowrootmode": "open"})
        template.extend(list(fragment.contents))
        return template

    def serialize(self) -> str:
        """Host markup with the rendered output as a declarative shadow root."""
        shell = copy.copy(self.host.tag)
        shell.insert(0, self.shadow_template())
        return str(shell)

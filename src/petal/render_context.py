"""Petal RenderContext — per-render state kept out of the component context.

Tracks which component is rendering and how deeply renders are nested,
using a ContextVar so that a nested component render (or a re-entrant
``rerender()`` from an event handler) restores its parent's state on exit.

The evaluator and directive processor read the current component name from
here to label the errors they log, without it being threaded through every
call or injected into the user's context dict.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass
class RenderContext:
    """State of one render pass.

    Attributes:
        component: Name of the component being rendered.
        depth: How many renders enclose this one (1 for a top-level render).
        max_depth: Depth at which rendering is refused.
        stack: Component names of the enclosing renders, outermost first.
    """

    component: str | None = None
    depth: int = 1
    max_depth: int = 50
    stack: tuple[str, ...] = ()

    @property
    def exceeded(self) -> bool:
        return self.depth > self.max_depth

    def describe_stack(self) -> str:
        """Format the render chain, e.g. ``todo-app > todo-item > todo-item``."""
        return " > ".join((*self.stack, self.component or "<anonymous>"))


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "petal_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Current RenderContext, or None outside of a render."""
    return _render_context.get()


def current_component() -> str | None:
    """Name of the component currently rendering, if any."""
    ctx = _render_context.get()
    return ctx.component if ctx else None


@contextmanager
def render_context(component: str | None, max_depth: int = 50) -> Iterator[RenderContext]:
    """Enter a render of ``component`` nested inside the current one.

    The caller checks ``ctx.exceeded`` and refuses to render when it is set;
    the previous context is restored on exit either way.

    Example:
        with render_context("x-counter", max_depth=config.max_render_depth) as ctx:
            if ctx.exceeded:
                raise RenderDepthError(...)
            ...
    """
    parent = _render_context.get()
    if parent is None:
        ctx = RenderContext(component=component, max_depth=max_depth)
    else:
        stack = (*parent.stack, parent.component or "<anonymous>")
        ctx = RenderContext(
            component=component,
            depth=parent.depth + 1,
            max_depth=max_depth,
            stack=stack,
        )
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


@contextmanager
def component_scope(component: str | None) -> Iterator[None]:
    """Label work done outside a render (event dispatch, hooks) with ``component``.

    Unlike ``render_context`` this does not count towards render depth.
    """
    parent = _render_context.get()
    if parent is not None and parent.component == component:
        yield
        return
    ctx = RenderContext(
        component=component,
        depth=parent.depth if parent else 0,
        max_depth=parent.max_depth if parent else 50,
        stack=parent.stack if parent else (),
    )
    token = _render_context.set(ctx)
    try:
        yield
    finally:
        _render_context.reset(token)

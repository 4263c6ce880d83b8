"""Exceptions for the Petal rendering pipeline.

Exception Hierarchy:
PetalError (base)
├── ExpressionError          # Malformed or raising expression/statement
├── DirectiveError           # A directive could not be applied
├── CompilationError         # Unbalanced mustache sections
├── LifecycleError           # Behavior block, hook or render failure
│   └── RenderDepthError     # Runaway re-entrant rendering
├── EventHandlerError        # A bound selector-map handler raised
└── DefinitionNotFoundError  # Loader could not supply a definition

Propagation:
``ExpressionError`` and ``DirectiveError`` never leave the pipeline: the
evaluator and the directive processor log them and carry on, because one
bad attribute must not abort a render pass. ``CompilationError``,
``LifecycleError`` and ``EventHandlerError`` are raised out of the
component instance that failed; sibling instances are unaffected.

Example:
    ```
    P-CMP-001: Unbalanced section '{{#items}}' in component 'todo-list'
      Location: todo-list
      Hint: Close the section with {{/items}}
    ```

"""

from __future__ import annotations

from enum import Enum

from petal import terminal

_PETAL_DOCS_BASE = "https://petal.readthedocs.io/en/latest/errors"


class ErrorCode(Enum):
    """Searchable error codes, formatted ``P-{CATEGORY}-{NUMBER}``."""

    INVALID_EXPRESSION = "P-EXP-001"
    UNSUPPORTED_SYNTAX = "P-EXP-002"
    DIRECTIVE_FAILED = "P-DIR-001"
    UNBALANCED_SECTION = "P-CMP-001"
    LIFECYCLE_FAILED = "P-LIF-001"
    RENDER_DEPTH = "P-LIF-002"
    EVENT_HANDLER_FAILED = "P-EVT-001"
    DEFINITION_NOT_FOUND = "P-DEF-001"

    @property
    def docs_url(self) -> str:
        """Documentation URL for this error code."""
        return f"{_PETAL_DOCS_BASE}/#{self.value.lower()}"

    @property
    def category(self) -> str:
        """Error category (e.g., 'expression', 'lifecycle')."""
        prefix = self.value.split("-")[1]
        return {
            "EXP": "expression",
            "DIR": "directive",
            "CMP": "compilation",
            "LIF": "lifecycle",
            "EVT": "event",
            "DEF": "definition",
        }.get(prefix, "unknown")


class PetalError(Exception):
    """Base exception for all Petal errors.

    Subclasses build their message from structured fields so that callers
    can inspect ``component``, ``expression`` and friends instead of
    parsing ``str(exc)``.

    Attributes:
        code: ErrorCode for searchable, documentable error identification.
        message: Short description without location details.
        component: Name of the component being rendered, if known.
        expression: Expression, attribute or tag text that failed.
        suggestion: Optional actionable hint.
    """

    code: ErrorCode | None = None

    def __init__(
        self,
        message: str,
        *,
        component: str | None = None,
        expression: str | None = None,
        suggestion: str | None = None,
    ):
        self.message = message
        self.component = component
        self.expression = expression
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.component:
            parts.append(f"  Location: {terminal.location(self.component)}")
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format the error as a terminal diagnostic with code and docs link.

        Format::

            P-EXP-001: name 'cuont' is not defined
              Location: x-counter
              Expression: cuont + 1
              Docs: https://petal.readthedocs.io/en/latest/errors/#p-exp-001
        """
        header = self.message
        if self.code:
            header = f"{terminal.error_code(self.code.value)}: {header}"
        parts = [header]
        if self.component:
            parts.append(f"  Location: {terminal.location(self.component)}")
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        if self.code:
            parts.append(f"  {terminal.dim_text('Docs:')} {terminal.docs_url(self.code.docs_url)}")
        return "\n".join(parts)


class ExpressionError(PetalError):
    """An expression or statement could not be parsed or raised while running.

    Caught at the evaluator boundary and logged; rendering continues with
    ``None`` in place of the value.
    """

    code: ErrorCode | None = ErrorCode.INVALID_EXPRESSION


class DirectiveError(PetalError):
    """A directive could not be applied to its element.

    Attributes:
        attribute: The directive attribute name (``x-for``, ``@click``...).
    """

    code: ErrorCode | None = ErrorCode.DIRECTIVE_FAILED

    def __init__(self, message: str, *, attribute: str | None = None, **kwargs: str | None):
        self.attribute = attribute
        super().__init__(message, **kwargs)

    def _format_message(self) -> str:
        text = super()._format_message()
        if self.attribute:
            return f"{text}\n  Attribute: {self.attribute}"
        return text


class CompilationError(PetalError):
    """Template markup has a section that is opened but never closed (or vice versa)."""

    code: ErrorCode | None = ErrorCode.UNBALANCED_SECTION


class LifecycleError(PetalError):
    """A component failed while preparing, rendering or running a hook.

    The only error class, together with ``CompilationError`` and
    ``EventHandlerError``, that escapes a component instance.
    """

    code: ErrorCode | None = ErrorCode.LIFECYCLE_FAILED


class EventHandlerError(PetalError):
    """A handler from a behavior selector map raised.

    Attributes:
        event: Event type being dispatched.
        element: Short descriptor of the element the handler was bound to.
    """

    code: ErrorCode | None = ErrorCode.EVENT_HANDLER_FAILED

    def __init__(
        self,
        message: str,
        *,
        event: str,
        element: str,
        **kwargs: str | None,
    ):
        self.event = event
        self.element = element
        super().__init__(message, **kwargs)

    def _format_message(self) -> str:
        head = f"Unable to handle event '{self.event}' on element {self.element}"
        if self.component:
            head += f" for component {terminal.location(self.component)}"
        parts = [f"{head}: {self.message}"]
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class DefinitionNotFoundError(PetalError):
    """A loader could not find the requested component definition."""

    code: ErrorCode | None = ErrorCode.DEFINITION_NOT_FOUND


class RenderDepthError(LifecycleError):
    """Re-entrant renders nested deeper than ``RenderConfig.max_render_depth``.

    Usually a hook or handler that calls ``rerender()`` unconditionally.
    """

    code: ErrorCode | None = ErrorCode.RENDER_DEPTH

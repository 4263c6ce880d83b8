"""Tests for the Petal error hierarchy and its formatting."""

import pytest

from petal import (
    CompilationError,
    DefinitionNotFoundError,
    DirectiveError,
    ErrorCode,
    EventHandlerError,
    ExpressionError,
    LifecycleError,
    PetalError,
    RenderDepthError,
    terminal,
)


@pytest.fixture(autouse=True)
def _no_colors(monkeypatch):
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


class TestHierarchy:
    """Every error is a PetalError with its own code."""

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (ExpressionError, ErrorCode.INVALID_EXPRESSION),
            (DirectiveError, ErrorCode.DIRECTIVE_FAILED),
            (CompilationError, ErrorCode.UNBALANCED_SECTION),
            (LifecycleError, ErrorCode.LIFECYCLE_FAILED),
            (RenderDepthError, ErrorCode.RENDER_DEPTH),
            (DefinitionNotFoundError, ErrorCode.DEFINITION_NOT_FOUND),
        ],
    )
    def test_codes(self, error_class, code):
        err = error_class("boom")
        assert isinstance(err, PetalError)
        assert err.code is code

    def test_render_depth_is_a_lifecycle_error(self):
        assert issubclass(RenderDepthError, LifecycleError)

    def test_code_metadata(self):
        assert ErrorCode.UNBALANCED_SECTION.category == "compilation"
        assert ErrorCode.EVENT_HANDLER_FAILED.category == "event"
        assert ErrorCode.RENDER_DEPTH.docs_url.endswith("#p-lif-002")


class TestFormatting:
    """str() and format_compact()."""

    def test_message_with_location(self):
        err = CompilationError(
            "Unbalanced section '{{#items}}'",
            component="todo-list",
            suggestion="Close the section with {{/items}}",
        )
        assert str(err) == (
            "Unbalanced section '{{#items}}'\n"
            "  Location: todo-list\n"
            "  Hint: Close the section with {{/items}}"
        )

    def test_compact_includes_code_and_docs(self):
        err = ExpressionError("name 'cuont' is not defined", expression="cuont + 1")
        compact = err.format_compact()
        assert compact.splitlines()[0] == "P-EXP-001: name 'cuont' is not defined"
        assert "  Expression: cuont + 1" in compact
        assert "Docs: https://petal.readthedocs.io/en/latest/errors/#p-exp-001" in compact

    def test_directive_error_names_attribute(self):
        err = DirectiveError("Malformed iteration 'items'", attribute="x-for")
        assert err.attribute == "x-for"
        assert str(err).endswith("  Attribute: x-for")

    def test_event_handler_error(self):
        err = EventHandlerError(
            "ZeroDivisionError: division by zero",
            event="click",
            element="button <button#go>",
            component="x-counter",
        )
        assert str(err) == (
            "Unable to handle event 'click' on element button <button#go> "
            "for component x-counter: ZeroDivisionError: division by zero"
        )
        assert err.event == "click"

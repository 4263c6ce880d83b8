"""Tests for RenderContext: nesting, depth tracking and component labels."""

from petal import get_render_context, render_context
from petal.render_context import component_scope, current_component


class TestRenderContext:
    """ContextVar-based render state."""

    def test_none_outside_render(self):
        assert get_render_context() is None
        assert current_component() is None

    def test_nesting_and_restore(self):
        with render_context("x-app") as outer:
            assert outer.depth == 1
            with render_context("x-item") as inner:
                assert inner.depth == 2
                assert inner.stack == ("x-app",)
                assert current_component() == "x-item"
                assert inner.describe_stack() == "x-app > x-item"
            assert current_component() == "x-app"
        assert get_render_context() is None

    def test_exceeded(self):
        with render_context("a", max_depth=2), render_context("a", max_depth=2) as second:
            assert not second.exceeded
            with render_context("a", max_depth=2) as third:
                assert third.exceeded

    def test_restored_after_exception(self):
        try:
            with render_context("x-app"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_render_context() is None


class TestComponentScope:
    """Labels outside of renders."""

    def test_labels_without_counting_depth(self):
        with component_scope("x-counter"):
            assert current_component() == "x-counter"
            with render_context("x-counter") as ctx:
                assert ctx.depth == 1
        assert current_component() is None

    def test_same_component_is_reused(self):
        with render_context("x-a") as ctx, component_scope("x-a"):
            assert get_render_context() is ctx

"""Tests for the counter example."""


class TestCounterApp:
    """Verify the counter reacts to events and attribute changes."""

    def test_click_sequence(self, example_app) -> None:
        assert example_app.initial == "0"
        assert example_app.after_clicks == "10"
        assert example_app.after_step_change == "11"
        assert example_app.after_reset == "0"

    def test_reset_disabled_at_zero(self, example_app) -> None:
        assert example_app.counter.boundary.select_one(".reset").has_attr("disabled")
        example_app.counter.dispatch(".inc", "click")
        assert not example_app.counter.boundary.select_one(".reset").has_attr("disabled")

    def test_serialized_output(self, example_app) -> None:
        assert example_app.output.startswith('<x-counter data-step="1"><template shadowrootmode="open">')
        assert '<p class="count">0</p>' in example_app.output

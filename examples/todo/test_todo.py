"""Tests for the todo example."""


class TestTodoApp:
    """Verify imports, nesting and two-way binding end-to-end."""

    def test_static_render(self, example_app) -> None:
        html = example_app.static_output
        assert "<h2>Groceries</h2>" in html
        assert 'class="done">Milk</span>' in html
        assert "else ''\">Bread</span>" in html
        assert "1 of 2 left" in html
        assert '<link rel="html"' not in html

    def test_interaction(self, example_app) -> None:
        assert example_app.initial_summary == "1 of 2 left"
        assert example_app.final_summary == "1 of 3 left"
        assert example_app.final_items == [("Milk", True), ("Bread", True), ("Eggs", False)]

    def test_draft_is_cleared_after_add(self, example_app) -> None:
        assert example_app.todo_list.context["draft"] == ""
        assert example_app.todo_list.boundary.select_one("input")["value"] == ""

    def test_refs_follow_renders(self, example_app) -> None:
        todo_list = example_app.todo_list
        assert todo_list.context["refs"]["draft"] is todo_list.boundary.select_one("input")

    def test_empty_list(self, example_app) -> None:
        todo_list = example_app.todo_list
        todo_list.context["todos"] = []
        todo_list.render()
        assert todo_list.boundary.select_one(".empty").get_text() == "Nothing to do"
        assert todo_list.children == []

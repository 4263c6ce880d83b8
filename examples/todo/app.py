"""Todo list -- file-based definitions, nested components and two-way binding.

Loads component definitions from disk through ``<link rel="html">``
imports, renders the page statically, then drives a live instance:
type a draft, add it, and toggle an item.

Run:
    python app.py
"""

from pathlib import Path

from bs4 import BeautifulSoup

from petal import ComponentRegistry, FileSystemLoader

here = Path(__file__).parent
components_dir = here / "components"
page = (here / "index.html").read_text()

# Static render: every instance embedded as a declarative shadow root
static_registry = ComponentRegistry(loader=FileSystemLoader(components_dir))
static_output = static_registry.render_document(page)

# Interactive session
registry = ComponentRegistry(loader=FileSystemLoader(components_dir))
document = BeautifulSoup(page, "html.parser")
registry.define_from_document(document)
(todo_list,) = registry.mount(document)


def summary() -> str:
    return todo_list.boundary.select_one(".summary").get_text()


def items() -> list[tuple[str, bool]]:
    rows = []
    for child in todo_list.children:
        span = child.boundary.select_one("span")
        rows.append((span.get_text(), "done" in (span.get("class") or ())))
    return rows


initial_summary = summary()

todo_list.dispatch("input[name=draft]", "change", value="Eggs")
todo_list.dispatch(".add", "click")
todo_list.dispatch("li:nth-of-type(2) .toggle", "click")

final_summary = summary()
final_items = items()


def main() -> None:
    print(static_output)
    print()
    print(f"{initial_summary} -> {final_summary}")
    for label, done in final_items:
        print(f"[{'x' if done else ' '}] {label}")


if __name__ == "__main__":
    main()

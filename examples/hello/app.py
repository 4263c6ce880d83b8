"""Hello World -- the simplest petal example.

Define a component from a string and render a page that uses it.
No components directory needed.

Run:
    python app.py
"""

from petal import ComponentRegistry

HELLO = '<template data-name="x-hello" data-attrs="name"><p>Hello, {{name}}!</p></template>'

registry = ComponentRegistry()

# Define, mount and serialize in one go
output = registry.render_document(HELLO + '<x-hello data-name="World"></x-hello>')

# The mounted instance stays live
(hello,) = registry.components


def main() -> None:
    print(output)
    print()

    # Changing an observed attribute re-renders the instance
    for name in ["Petal", "Python"]:
        hello.host.set_attribute("data-name", name)
        print(hello.boundary.inner_html)


if __name__ == "__main__":
    main()

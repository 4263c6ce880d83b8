"""Counter -- behavior blocks, selector maps and @event directives.

Defines a component with an inline behavior block, mounts it on a page
and drives it with synthetic events.

Run:
    python app.py
"""

from bs4 import BeautifulSoup

from petal import ComponentRegistry

COUNTER = """
<template data-name="x-counter" data-attrs="step">
  <p class="count">{{count}}</p>
  <button class="inc">+{{step}}</button>
  <button class="reset" @click="count = 0" :disabled="count == 0">reset</button>
  <script>
    count = 0

    def increment():
        count += int(step)
        self.render()

    events = {".inc": {"click": increment}}
  </script>
</template>
"""

registry = ComponentRegistry()
registry.define_from_markup(COUNTER)

document = BeautifulSoup('<main><x-counter data-step="5"></x-counter></main>', "html.parser")
(counter,) = registry.mount(document)


def current() -> str:
    return counter.boundary.select_one(".count").get_text()


initial = current()

counter.dispatch(".inc", "click")
counter.dispatch(".inc", "click")
after_clicks = current()

# data-step is observed: changing it re-renders with the new step
counter.host.set_attribute("data-step", "1")
counter.dispatch(".inc", "click")
after_step_change = current()

counter.dispatch(".reset", "click")
after_reset = current()

output = counter.serialize()


def main() -> None:
    print(f"initial={initial} clicks={after_clicks} step=1 -> {after_step_change} reset -> {after_reset}")
    print()
    print(output)


if __name__ == "__main__":
    main()

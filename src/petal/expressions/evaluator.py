"""Evaluator — the error boundary around the expression interpreter.

Directive attributes and mustache-free expressions all come through here.
Anything that goes wrong while parsing or running them is turned into an
``ExpressionError`` and logged; the caller gets ``None`` (expression form)
or nothing (statement form) and the render keeps going.

Behavior blocks use ``run_script``, which raises instead: a broken behavior
block means the component cannot be prepared at all.

Example:
    >>> ev = Evaluator()
    >>> ctx = {"count": 1}
    >>> ev.evaluate("count + 1", ctx)
    2
    >>> ev.evaluate_statement("count += 1", ctx)
    >>> ctx["count"]
    2
"""

from __future__ import annotations

import ast
import logging
from collections.abc import MutableMapping
from typing import Any

from petal.exceptions import ExpressionError
from petal.expressions.grammar import parse_expression, parse_script, parse_statements
from petal.expressions.interpreter import Interpreter, Scope, _Return
from petal.render_context import current_component

logger = logging.getLogger(__name__)


def _bound_names(body: tuple[ast.stmt, ...]) -> list[str]:
    """Names a script binds at its top level, in first-binding order.

    Blocks of top-level ``if`` and ``for`` statements run in the same scope,
    so their bindings count; function bodies do not.
    """
    names: list[str] = []

    def add(target: ast.expr) -> None:
        if isinstance(target, ast.Name):
            if target.id not in names:
                names.append(target.id)
        elif isinstance(target, (ast.Tuple, ast.List)):
            for element in target.elts:
                add(element)

    def visit(statements: list[ast.stmt] | tuple[ast.stmt, ...]) -> None:
        for stmt in statements:
            if isinstance(stmt, ast.Assign):
                for target in stmt.targets:
                    add(target)
            elif isinstance(stmt, ast.AugAssign):
                add(stmt.target)
            elif isinstance(stmt, ast.FunctionDef):
                if stmt.name not in names:
                    names.append(stmt.name)
            elif isinstance(stmt, ast.If):
                visit(stmt.body)
                visit(stmt.orelse)
            elif isinstance(stmt, ast.For):
                add(stmt.target)
                visit(stmt.body)
                visit(stmt.orelse)

    visit(body)
    return names


class Evaluator:
    """Evaluates expressions and statements against a mutable context.

    The evaluator itself is stateless; parsed trees are cached per source
    string in :mod:`petal.expressions.grammar`, so one instance can be shared
    by every component of a registry.
    """

    def evaluate(
        self,
        expression: str,
        context: MutableMapping[str, Any],
        element: Any = None,
    ) -> Any | None:
        """Evaluate ``expression`` and return its value.

        Returns ``None`` (after logging) if the expression is malformed or
        raises.
        """
        try:
            node = parse_expression(expression)
            return Interpreter(expression).eval(node, Scope(context, {"el": element}))
        except Exception as e:
            self._report(e, expression)
            return None

    def evaluate_statement(
        self,
        statement: str,
        context: MutableMapping[str, Any],
        element: Any = None,
        event: Any = None,
    ) -> None:
        """Run ``statement`` for its effects on ``context``.

        ``event`` is bound as ``event`` alongside ``el``. Failures are
        logged, never raised.
        """
        try:
            body = parse_statements(statement)
            scope = Scope(context, {"el": element, "event": event})
            Interpreter(statement).exec_body(body, scope)
        except Exception as e:
            self._report(e, statement)

    def run_script(
        self,
        source: str,
        context: MutableMapping[str, Any],
        element: Any = None,
        instance: Any = None,
    ) -> list[str]:
        """Execute a behavior block once against ``context``.

        Top-level assignments and ``def``s land directly in ``context``;
        functions close over it. ``el`` is bound to ``element`` and ``self``
        to ``instance``. Returns the names the block bound.

        Raises:
            ExpressionError: The block is malformed or raised while running.
        """
        body = parse_script(source)
        scope = Scope(context, {"el": element, "self": instance})
        try:
            Interpreter(source).exec_body(body, scope)
        except _Return:
            pass
        except ExpressionError:
            raise
        except Exception as e:
            raise ExpressionError(
                f"{type(e).__name__}: {e}",
                component=current_component(),
            ) from e
        return _bound_names(body)

    def _report(self, error: Exception, expression: str) -> None:
        component = current_component()
        if not isinstance(error, ExpressionError):
            error = ExpressionError(
                f"{type(error).__name__}: {error}",
                component=component,
                expression=expression,
            )
        elif error.component is None and component is not None:
            error.component = component
        logger.warning(f"Expression evaluation error: {error.format_compact()}")

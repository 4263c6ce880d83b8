"""Parsing and validation of the expression language.

Expressions are written in Python syntax and parsed with :mod:`ast`. Every
tree is checked against an allow-list of node types before it is handed to
the interpreter, so the accepted language is exactly what is listed here:

- **expressions**: literals, names, attribute/subscript access, calls,
  operators, comparisons, ``a if c else b``, displays, f-strings, ``lambda``
- **statements**: expression statements, ``=``, ``+=`` and friends, ``pass``
- **scripts** (behavior blocks): statements plus ``def``, ``return``,
  ``if``/``elif``/``else`` and ``for``

Parsed trees are immutable in practice and cached per source string.
"""

from __future__ import annotations

import ast
import textwrap
from functools import lru_cache

from petal.exceptions import ErrorCode, ExpressionError

_EXPRESSION_NODES: frozenset[type[ast.AST]] = frozenset(
    {
        ast.Expression,
        ast.Constant,
        ast.Name,
        ast.Attribute,
        ast.Subscript,
        ast.Slice,
        ast.Call,
        ast.keyword,
        ast.BinOp,
        ast.UnaryOp,
        ast.BoolOp,
        ast.Compare,
        ast.IfExp,
        ast.List,
        ast.Tuple,
        ast.Dict,
        ast.Set,
        ast.JoinedStr,
        ast.FormattedValue,
        ast.Lambda,
        ast.arguments,
        ast.arg,
    }
)

_STATEMENT_NODES = _EXPRESSION_NODES | {
    ast.Module,
    ast.Expr,
    ast.Assign,
    ast.AugAssign,
    ast.Pass,
}

_SCRIPT_NODES = _STATEMENT_NODES | {
    ast.FunctionDef,
    ast.Return,
    ast.If,
    ast.For,
}

# Operator and context marker nodes carry no behavior of their own
_MARKER_BASES = (ast.operator, ast.unaryop, ast.boolop, ast.cmpop, ast.expr_context)


def _validate(tree: ast.AST, allowed: frozenset[type[ast.AST]], source: str) -> None:
    for node in ast.walk(tree):
        if isinstance(node, _MARKER_BASES):
            continue
        if type(node) not in allowed:
            raise unsupported(
                node,
                source,
                suggestion="Move complex logic into a behavior method and call it",
            )
        if isinstance(node, ast.Attribute) and node.attr.startswith("__"):
            raise ExpressionError(
                f"Access to dunder attribute '{node.attr}' is not allowed",
                expression=source,
            )
        if isinstance(node, ast.Name) and node.id.startswith("__"):
            raise ExpressionError(
                f"Access to dunder name '{node.id}' is not allowed",
                expression=source,
            )
        if isinstance(node, ast.FunctionDef) and node.decorator_list:
            raise ExpressionError("Decorators are not supported", expression=source)
        if isinstance(node, (ast.Lambda, ast.FunctionDef)):
            args = node.args
            if args.vararg or args.kwarg or args.kwonlyargs or args.posonlyargs:
                raise ExpressionError(
                    "Only plain positional parameters are supported",
                    expression=source,
                )


def _parse(source: str, mode: str, allowed: frozenset[type[ast.AST]]) -> ast.AST:
    try:
        tree = ast.parse(source.strip(), mode=mode)
    except SyntaxError as e:
        raise ExpressionError(
            f"Invalid syntax: {e.msg}",
            expression=source,
        ) from e
    _validate(tree, allowed, source)
    return tree


@lru_cache(maxsize=1024)
def parse_expression(source: str) -> ast.expr:
    """Parse a single expression.

    Raises:
        ExpressionError: Invalid or unsupported syntax.
    """
    tree = _parse(source, "eval", _EXPRESSION_NODES)
    assert isinstance(tree, ast.Expression)
    return tree.body


@lru_cache(maxsize=1024)
def parse_statements(source: str) -> tuple[ast.stmt, ...]:
    """Parse one or more simple statements (``;`` or newline separated).

    Raises:
        ExpressionError: Invalid or unsupported syntax.
    """
    tree = _parse(source, "exec", _STATEMENT_NODES)
    assert isinstance(tree, ast.Module)
    return tuple(tree.body)


@lru_cache(maxsize=256)
def parse_script(source: str) -> tuple[ast.stmt, ...]:
    """Parse a behavior block.

    The block is dedented as a whole first, since it usually sits indented
    inside a ``<script>`` element.

    Raises:
        ExpressionError: Invalid or unsupported syntax.
    """
    tree = _parse(textwrap.dedent(source), "exec", _SCRIPT_NODES)
    assert isinstance(tree, ast.Module)
    return tuple(tree.body)


def unsupported(
    node: ast.AST,
    source: str | None = None,
    *,
    suggestion: str | None = None,
) -> ExpressionError:
    """Error for syntax outside the accepted language (or out of place in it)."""
    err = ExpressionError(
        f"Unsupported syntax: {type(node).__name__}",
        expression=source,
        suggestion=suggestion,
    )
    err.code = ErrorCode.UNSUPPORTED_SYNTAX
    return err

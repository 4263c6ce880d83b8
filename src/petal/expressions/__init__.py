"""Expression language: Python-syntax expressions evaluated by a restricted interpreter."""

from petal.expressions.evaluator import Evaluator
from petal.expressions.grammar import parse_expression, parse_script, parse_statements
from petal.expressions.interpreter import SAFE_BUILTINS, Function, Scope

__all__ = [
    "SAFE_BUILTINS",
    "Evaluator",
    "Function",
    "Scope",
    "parse_expression",
    "parse_script",
    "parse_statements",
]

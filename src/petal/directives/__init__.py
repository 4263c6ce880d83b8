"""Directive processing: ``x-*``, ``:attr`` and ``@event`` attributes."""

from petal.directives.processor import DirectiveProcessor, parse_for_expression

__all__ = ["DirectiveProcessor", "parse_for_expression"]

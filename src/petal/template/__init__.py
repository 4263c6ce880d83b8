"""Mustache-style template compilation."""

from petal.template.compiler import render

__all__ = ["render"]

"""Syntax tree node kinds and tree consumers."""

from ttcn3.ast.nodes import Node, SourceLocation, walk

__all__ = ["Node", "SourceLocation", "walk"]

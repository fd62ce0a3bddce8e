"""Lossless lexer and error-tolerant parser for TTCN-3 source code."""

__version__ = "0.1.0"

from ttcn3.parser.parser import ParseResult, parse_file, parse_source

__all__ = ["ParseResult", "parse_file", "parse_source", "__version__"]

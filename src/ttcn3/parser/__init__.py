"""TTCN-3 parser: recursive descent with bounded backtracking and recovery."""

from ttcn3.parser.base import ParseError, UnexpectedEOF
from ttcn3.parser.parser import ParseResult, Parser, parse_file, parse_source, read_source
from ttcn3.parser.precedence import Precedence

__all__ = [
    "ParseError",
    "UnexpectedEOF",
    "ParseResult",
    "Parser",
    "Precedence",
    "parse_file",
    "parse_source",
    "read_source",
]

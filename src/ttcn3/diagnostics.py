"""Diagnostics reported by the lexer and parser.

Lexical problems never stop tokenization and syntax problems may be
recovered from, so both phases report through the same record type and
callers receive an ordered list alongside the tree.

Codes:
    L001  unrecognized character
    L002  unterminated charstring or block comment
    L003  malformed bit/hex/octet string literal
    P001  syntax error (unexpected token)
    P002  unexpected end of input
    P003  too many errors, parsing stopped
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from ttcn3.ast.nodes import SourceLocation


class Severity(Enum):
    """Severity of a diagnostic."""

    INFO = auto()
    WARNING = auto()   # recorded, the tree is still usable as is
    ERROR = auto()


class DiagnosticCode(Enum):
    UNRECOGNIZED_CHARACTER = "L001"
    UNTERMINATED_LITERAL = "L002"
    MALFORMED_LITERAL = "L003"
    SYNTAX_ERROR = "P001"
    UNEXPECTED_EOF = "P002"
    TOO_MANY_ERRORS = "P003"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding with its source span."""

    severity: Severity
    code: DiagnosticCode
    message: str
    loc: SourceLocation

    def __str__(self) -> str:
        loc = f"{self.loc.file}:{self.loc.line}:{self.loc.column}"
        return f"{loc}: {self.severity.name.lower()} {self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.name.lower(),
            "code": self.code.value,
            "message": self.message,
            "file": self.loc.file,
            "line": self.loc.line,
            "column": self.loc.column,
            "end_line": self.loc.end_line,
            "end_column": self.loc.end_column,
        }

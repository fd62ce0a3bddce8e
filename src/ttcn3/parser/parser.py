"""TTCN-3 recursive descent parser.

Transforms the token stream from the lexer into an immutable syntax tree.
Hand-written so that ambiguous constructs can be resolved with bounded
backtracking and so that syntax errors produce precise diagnostics.

A source unit is either a sequence of definitions or one bare
expression:

    source_file  ::= (definition ';'?)* | expression
    definition   ::= visibility? ( module | group | function | altstep
                   | testcase | type ... | const | var | template | ... )
    statement    ::= block | declaration | if | for | while | do | select
                   | alt | interleave | label | goto | break | continue
                   | return | reference (':=' expression | '->' redirect)?
    expression   ::= prefix (binary_op expression)*   (precedence climbing)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ttcn3.ast.nodes import Block, ErrorNode, Expr, Node, SourceFile, SourceLocation
from ttcn3.diagnostics import Diagnostic, DiagnosticCode, Severity
from ttcn3.lexer.lexer import Lexer
from ttcn3.lexer.tokens import Token, TokenType
from ttcn3.parser.base import ParseError
from ttcn3.parser.definitions import DefinitionParser
from ttcn3.parser.precedence import Precedence

logger = logging.getLogger(__name__)


class Parser(DefinitionParser):
    """Recursive descent parser for TTCN-3 source code.

    Usage::

        from ttcn3.lexer import Lexer
        from ttcn3.parser import Parser

        tokens = Lexer(source, "example.ttcn").tokenize()
        tree = Parser(tokens, "example.ttcn").parse()

    With ``recover=True`` (the default) syntax errors are recorded in
    ``diagnostics`` and the offending region becomes an `ErrorNode`; with
    ``recover=False`` the first error is raised as `ParseError`.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self) -> SourceFile:
        """Parse the whole token stream into a SourceFile."""
        start = self._current()

        if self._at_end() or self._starts_definition():
            definitions = self._parse_top_level()
            return SourceFile(loc=self._loc(start), definitions=definitions)

        expression = self._attempt(self._parse_bare_expression)
        if expression is not None:
            return SourceFile(loc=self._loc(start), expression=expression)

        logger.debug("%s: not a bare expression, parsing definitions", self.filename)
        definitions = self._parse_top_level()
        return SourceFile(loc=self._loc(start), definitions=definitions)

    def parse_expression(self, floor: int = Precedence.LOWEST) -> Expr:
        """Parse one expression binding at `floor` or tighter."""
        return self._parse_expression(floor)

    def parse_statement(self) -> Node:
        return self._parse_statement()

    def parse_block(self) -> Block:
        return self._parse_block()

    def parse_definition(self) -> Node:
        return self._parse_definition()

    # ------------------------------------------------------------------
    # Source unit
    # ------------------------------------------------------------------

    def _parse_bare_expression(self) -> Expr:
        expression = self._parse_expression()
        if not self._at_end():
            self._fail(f"Expected end of input after expression, got {self._current().value!r}")
        return expression

    def _parse_top_level(self) -> list[Node]:
        definitions: list[Node] = []
        while not self._at_end():
            if self._accept(TokenType.SEMICOLON):
                continue
            start = self.pos
            try:
                definitions.append(self._recovering(self._parse_definition, self._starts_definition))
            except ParseError:
                if not self.recover:
                    raise
                definitions.append(self._give_up(start))
                break
            self._accept(TokenType.SEMICOLON)
        return definitions

    def _give_up(self, start: int) -> ErrorNode:
        """Stop after too many errors; the rest of the input becomes one ErrorNode."""
        start_tok = self.tokens[start]
        message = f"Too many errors ({self.MAX_ERRORS}), parsing stopped"
        self.diagnostics.append(Diagnostic(
            severity=Severity.ERROR, code=DiagnosticCode.TOO_MANY_ERRORS,
            message=message, loc=self._loc(start_tok),
        ))
        self.pos = len(self.tokens) - 1
        text = "".join(t.full_text for t in self.tokens[start:-1])
        text = text[len(start_tok.full_text) - len(start_tok.value):]
        logger.warning("%s: %s", self.filename, message)
        return ErrorNode(loc=self._loc(start_tok), message=message, text=text)


@dataclass
class ParseResult:
    """Result of parsing: the tree, every diagnostic in source order, and the tokens."""

    tree: SourceFile
    diagnostics: list[Diagnostic] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self, locations: bool = True) -> dict[str, Any]:
        from ttcn3.ast.serde import to_dict

        return {
            "success": self.success,
            "tree": to_dict(self.tree, locations=locations),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def parse_source(source: str, filename: str = "<unknown>", recover: bool = True) -> ParseResult:
    """Tokenize and parse `source`.

    Never raises on malformed input: every problem is reported as a
    diagnostic. Without recovery a syntax error replaces the whole unit
    with a single ErrorNode.
    """
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize()
    parser = Parser(tokens, filename, recover=recover)

    try:
        tree = parser.parse()
    except ParseError as exc:
        parser._record(exc)
        tree = _abandoned(tokens, exc.message, source)
    except RecursionError:
        tok = parser._current()
        parser._record(ParseError("Input nested too deeply", tok))
        tree = _abandoned(tokens, "Input nested too deeply", source)

    diagnostics = sorted(lexer.diagnostics + parser.diagnostics, key=lambda d: d.loc.offset)
    logger.debug("%s: parsed with %d diagnostics", filename, len(diagnostics))
    return ParseResult(tree=tree, diagnostics=diagnostics, tokens=tokens)


def _abandoned(tokens: list[Token], message: str, source: str) -> SourceFile:
    loc = SourceLocation.between(tokens[0], tokens[-1])
    return SourceFile(loc=loc, definitions=[ErrorNode(loc=loc, message=message, text=source)])


def read_source(path: str | Path) -> str:
    """Read a source file. Tries UTF-8 (with and without BOM) before latin-1."""
    data = Path(path).read_bytes()
    for encoding in ("utf-8-sig", "utf-8"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.debug("%s: not valid UTF-8, decoding as latin-1", path)
    return data.decode("latin-1")


def parse_file(path: str | Path, recover: bool = True) -> ParseResult:
    """Read and parse a file."""
    return parse_source(read_source(path), str(path), recover=recover)

"""Hand-written lossless tokenizer for TTCN-3.

Design decisions:
- Every character of the source ends up in exactly one token, trivia
  included, so the original text can always be rebuilt from the stream.
- Whitespace and comments are trivia: `scan()` yields them, `tokenize()`
  folds them into the `leading` field of the next significant token.
- Lexing never stops. Unrecognized input becomes an ERROR token plus a
  diagnostic and scanning resumes at the next character.
- Quoted literals that are not well-formed bit/hex/octet strings become a
  single MALFORMED_STRING token with a warning.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import replace

from ttcn3.ast.nodes import SourceLocation
from ttcn3.diagnostics import Diagnostic, DiagnosticCode, Severity
from ttcn3.lexer.tokens import KEYWORDS, OPERATORS, TRIVIA, Token, TokenType

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9][0-9_]*)?")
_MODIFIER = re.compile(r"@[A-Za-z0-9_]+")
_STRING_SUFFIX = re.compile(r"[A-Za-z_]*")

_BIT_CHARS = frozenset("01*? ")
_HEX_CHARS = frozenset("0123456789ABCDEFabcdef*? ")

_QUOTED_KINDS: dict[str, tuple[TokenType, frozenset[str]]] = {
    "b": (TokenType.BITSTRING, _BIT_CHARS),
    "h": (TokenType.HEXSTRING, _HEX_CHARS),
    "o": (TokenType.OCTETSTRING, _HEX_CHARS),
}


def _is_space(ch: str) -> bool:
    # str.isspace() covers NBSP and the ideographic space, not the BOM.
    return ch.isspace() or ch == "\ufeff"


class Lexer:
    """Tokenizes TTCN-3 source code into a stream of `Token` objects.

    Usage::

        lexer = Lexer(source_text, filename="example.ttcn")
        tokens = lexer.tokenize()
        problems = lexer.diagnostics
    """

    def __init__(self, source: str, filename: str = "<unknown>") -> None:
        self.source = source
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into the parser stream.

        Trivia is attached to the following significant token; the list
        always ends with an EOF token holding any trailing trivia.
        """
        self.diagnostics = []
        tokens: list[Token] = []
        pending: list[Token] = []

        for tok in self.scan():
            if tok.type in TRIVIA:
                pending.append(tok)
                continue
            if pending:
                tok = replace(tok, leading=tuple(pending))
                pending = []
            tokens.append(tok)

        logger.debug("%s: %d tokens, %d lexical diagnostics",
                     self.filename, len(tokens), len(self.diagnostics))
        return tokens

    def scan(self, offset: int = 0) -> Iterator[Token]:
        """Lazily yield every token, trivia included, starting at `offset`.

        The generator ends with an EOF token. Token boundaries depend only
        on the starting offset, so scanning can be restarted anywhere.
        """
        source = self.source
        line = source.count("\n", 0, offset) + 1
        column = offset - (source.rfind("\n", 0, offset) + 1) + 1
        pos = offset

        while pos < len(source):
            token_type, end = self._scan_token(pos)
            text = source[pos:end]
            tok = Token(token_type, text, line, column, pos, self.filename)
            self._check_token(tok)
            yield tok

            newlines = text.count("\n")
            if newlines:
                line += newlines
                column = len(text) - text.rfind("\n")
            else:
                column += len(text)
            pos = end

        yield Token(TokenType.EOF, "", line, column, pos, self.filename)

    # ------------------------------------------------------------------
    # Token scanning
    # ------------------------------------------------------------------

    def _scan_token(self, pos: int) -> tuple[TokenType, int]:
        """Classify the token starting at `pos` and return its end offset."""
        source = self.source
        ch = source[pos]

        if _is_space(ch):
            end = pos + 1
            while end < len(source) and _is_space(source[end]):
                end += 1
            return TokenType.WHITESPACE, end

        if source.startswith("//", pos):
            end = pos
            while end < len(source) and source[end] not in "\r\n":
                end += 1
            return TokenType.COMMENT, end

        if source.startswith("/*", pos):
            close = source.find("*/", pos + 2)
            if close < 0:
                return TokenType.ERROR, len(source)
            return TokenType.COMMENT, close + 2

        if ch == '"':
            return self._scan_charstring(pos)

        if ch == "'":
            return self._scan_quoted(pos)

        match = _NUMBER.match(source, pos)
        if match:
            return TokenType.NUMBER, match.end()

        match = _IDENTIFIER.match(source, pos)
        if match:
            word = match.group()
            if word in KEYWORDS:
                return TokenType.KEYWORD, match.end()
            return TokenType.IDENTIFIER, match.end()

        match = _MODIFIER.match(source, pos)
        if match:
            return TokenType.MODIFIER, match.end()

        for spelling, token_type in OPERATORS:
            if source.startswith(spelling, pos):
                return token_type, pos + len(spelling)

        return TokenType.ERROR, pos + 1

    def _scan_charstring(self, pos: int) -> tuple[TokenType, int]:
        """Scan a double-quoted charstring; `\\"` and `""` escape the quote."""
        source = self.source
        i = pos + 1
        while i < len(source):
            ch = source[i]
            if ch == "\\" and i + 1 < len(source):
                i += 2
            elif ch == '"':
                if source.startswith('""', i):
                    i += 2
                else:
                    return TokenType.CHARSTRING, i + 1
            else:
                i += 1
        return TokenType.ERROR, self._end_of_line(pos)

    def _scan_quoted(self, pos: int) -> tuple[TokenType, int]:
        """Scan a single-quoted bit, hex or octet string."""
        source = self.source
        close = source.find("'", pos + 1)
        if close < 0:
            return TokenType.ERROR, self._end_of_line(pos)

        content = source[pos + 1:close]
        suffix_end = _STRING_SUFFIX.match(source, close + 1).end()
        suffix = source[close + 1:suffix_end]

        kind = _QUOTED_KINDS.get(suffix.lower()) if len(suffix) == 1 else None
        if kind is not None and content and all(c in kind[1] for c in content):
            return kind[0], suffix_end
        return TokenType.MALFORMED_STRING, suffix_end

    def _end_of_line(self, pos: int) -> int:
        end = self.source.find("\n", pos)
        return len(self.source) if end < 0 else end

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _check_token(self, tok: Token) -> None:
        """Record a diagnostic for ERROR and MALFORMED_STRING tokens."""
        if tok.type == TokenType.MALFORMED_STRING:
            self._report(
                tok, Severity.WARNING, DiagnosticCode.MALFORMED_LITERAL,
                f"Malformed string literal {tok.value!r}: expected a bitstring "
                f"('...'B), hexstring ('...'H) or octetstring ('...'O)",
            )
        elif tok.type == TokenType.ERROR:
            if tok.value.startswith(("/*", '"', "'")):
                what = "block comment" if tok.value.startswith("/*") else "string literal"
                self._report(tok, Severity.ERROR, DiagnosticCode.UNTERMINATED_LITERAL,
                             f"Unterminated {what}")
            else:
                self._report(tok, Severity.ERROR, DiagnosticCode.UNRECOGNIZED_CHARACTER,
                             f"Unexpected character: {tok.value!r}")

    def _report(self, tok: Token, severity: Severity, code: DiagnosticCode, message: str) -> None:
        self.diagnostics.append(Diagnostic(
            severity=severity, code=code, message=message,
            loc=SourceLocation.of_token(tok),
        ))

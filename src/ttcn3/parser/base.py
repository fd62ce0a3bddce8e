"""Token-stream cursor shared by all parser components.

Provides the primitive helpers every production uses (`_check`,
`_expect`, ...), speculative parsing with rollback (`_mark`, `_reset`,
`_attempt`) and resynchronisation after syntax errors.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import NoReturn, TypeVar

from ttcn3.ast.nodes import ErrorNode, Node, SourceLocation
from ttcn3.diagnostics import Diagnostic, DiagnosticCode, Severity
from ttcn3.lexer.tokens import SOFT_KEYWORDS, Token, TokenType

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OPENERS = frozenset({TokenType.LBRACE, TokenType.LPAREN, TokenType.LBRACKET})
_CLOSERS = frozenset({TokenType.RBRACE, TokenType.RPAREN, TokenType.RBRACKET})


class ParseError(Exception):
    """Raised on syntax errors with the offending token."""

    def __init__(self, message: str, token: Token):
        self.message = message
        self.token = token
        loc = f"{token.file}:{token.line}:{token.column}"
        super().__init__(f"{loc}: {message}")


class UnexpectedEOF(ParseError):
    """Raised when the input ends in the middle of a construct."""


def describe(tok: Token) -> str:
    """Human-readable description of a token for diagnostics."""
    if tok.type == TokenType.EOF:
        return "end of input"
    if tok.type == TokenType.ERROR:
        return f"invalid input {tok.value!r}"
    return repr(tok.value)


class ParserBase:
    """Cursor over a token list produced by `Lexer.tokenize()`.

    Speculative parses run with recovery switched off, so a failed
    alternative always surfaces as a `ParseError` and can be rolled back
    without leaving diagnostics or error nodes behind.
    """

    MAX_ERRORS = 100

    def __init__(self, tokens: list[Token], filename: str = "<unknown>", recover: bool = True) -> None:
        if not tokens or tokens[-1].type != TokenType.EOF:
            last = tokens[-1] if tokens else None
            eof = Token(
                TokenType.EOF, "",
                last.line if last else 1,
                last.column + len(last.value) if last else 1,
                last.end if last else 0,
                filename,
            )
            tokens = [*tokens, eof]
        self.tokens = tokens
        self.filename = filename
        self.recover = recover
        self.pos = 0
        self.diagnostics: list[Diagnostic] = []
        self._speculating = 0

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Token:
        """Look ahead at a token without consuming."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[idx]

    def _previous(self) -> Token:
        """Return the last consumed token."""
        return self.tokens[max(self.pos - 1, 0)]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        tok = self._current()
        if tok.type != TokenType.EOF:
            self.pos += 1
        return tok

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches without consuming."""
        return self._current().type == token_type

    def _check_keyword(self, *words: str) -> bool:
        return self._current().is_keyword(*words)

    def _accept(self, token_type: TokenType) -> Token | None:
        """Consume the current token if it matches, else leave it."""
        if self._check(token_type):
            return self._advance()
        return None

    def _accept_keyword(self, *words: str) -> Token | None:
        if self._check_keyword(*words):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, what: str | None = None) -> Token:
        """Consume current token if it matches, otherwise raise ParseError."""
        tok = self._current()
        if tok.type != token_type:
            self._fail(f"Expected {what or token_type.name}, got {describe(tok)}")
        return self._advance()

    def _expect_keyword(self, word: str) -> Token:
        tok = self._current()
        if not tok.is_keyword(word):
            self._fail(f"Expected '{word}', got {describe(tok)}")
        return self._advance()

    def _fail(self, message: str, tok: Token | None = None) -> NoReturn:
        tok = tok or self._current()
        if tok.type == TokenType.EOF:
            raise UnexpectedEOF(message, tok)
        raise ParseError(message, tok)

    def _at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _semicolon_before_close(self) -> bool:
        """True if a `;` at this nesting level comes before the next unmatched closer."""
        depth = 0
        for tok in self.tokens[self.pos:]:
            if tok.type in _OPENERS:
                depth += 1
            elif tok.type in _CLOSERS:
                if depth == 0:
                    return False
                depth -= 1
            elif tok.type == TokenType.SEMICOLON and depth == 0:
                return True
        return False

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    @staticmethod
    def _is_name(tok: Token) -> bool:
        """True for identifiers and for keywords usable as identifiers."""
        return tok.type == TokenType.IDENTIFIER or (
            tok.type == TokenType.KEYWORD and tok.value in SOFT_KEYWORDS
        )

    def _expect_name(self, what: str = "identifier") -> str:
        tok = self._current()
        if not self._is_name(tok):
            self._fail(f"Expected {what}, got {describe(tok)}")
        return self._advance().value

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    def _loc(self, start: Token) -> SourceLocation:
        """Span from `start` to the last consumed token."""
        end = self._previous()
        if self.pos == 0 or end.offset < start.offset:
            end = start
        return SourceLocation.between(start, end)

    # ------------------------------------------------------------------
    # Speculative parsing
    # ------------------------------------------------------------------

    def _mark(self) -> tuple[int, int]:
        return self.pos, len(self.diagnostics)

    def _reset(self, mark: tuple[int, int]) -> None:
        self.pos, count = mark
        del self.diagnostics[count:]

    def _attempt(self, parse_fn: Callable[[], T]) -> T | None:
        """Run `parse_fn` tentatively.

        Returns its result, or None after rolling back the position when
        it raises ParseError. The caller may still `_reset` to the mark it
        took before calling if the result is unacceptable.
        """
        mark = self._mark()
        self._speculating += 1
        try:
            return parse_fn()
        except ParseError as exc:
            logger.debug("speculative parse rolled back at %s:%d:%d: %s",
                         exc.token.file, exc.token.line, exc.token.column, exc.message)
            self._reset(mark)
            return None
        finally:
            self._speculating -= 1

    # ------------------------------------------------------------------
    # Diagnostics and recovery
    # ------------------------------------------------------------------

    def _record(self, exc: ParseError) -> None:
        code = DiagnosticCode.UNEXPECTED_EOF if isinstance(exc, UnexpectedEOF) else DiagnosticCode.SYNTAX_ERROR
        self.diagnostics.append(Diagnostic(
            severity=Severity.ERROR, code=code, message=exc.message,
            loc=SourceLocation.of_token(exc.token),
        ))

    def _error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)

    def _can_recover(self) -> bool:
        return self.recover and not self._speculating and self._error_count() < self.MAX_ERRORS

    def _recovering(self, parse_fn: Callable[[], Node], starts_item: Callable[[], bool]) -> Node:
        """Parse one list item, turning a syntax error into an ErrorNode.

        After an error the cursor skips to the next `;` or `}` at the
        item's nesting depth, or to a token on a later line that starts a
        new item. Without recovery the error propagates.
        """
        start = self.pos
        try:
            return parse_fn()
        except ParseError as exc:
            if not self._can_recover():
                raise
            self._record(exc)
            return self._skip_to_boundary(start, exc, starts_item)

    def _skip_to_boundary(self, start: int, exc: ParseError, starts_item: Callable[[], bool]) -> ErrorNode:
        # Braces opened by the failed item must be closed before stopping;
        # an unmatched `}` belongs to the enclosing block.
        braces = 0
        for tok in self.tokens[start:self.pos]:
            if tok.type == TokenType.LBRACE:
                braces += 1
            elif tok.type == TokenType.RBRACE and braces > 0:
                braces -= 1

        nesting = 0
        skip_from = self.pos
        while not self._at_end():
            tok = self._current()
            at_boundary = braces == 0 and nesting == 0
            if tok.type == TokenType.LBRACE:
                braces += 1
            elif tok.type == TokenType.RBRACE:
                if braces == 0:
                    break
                braces -= 1
            elif tok.type in _OPENERS:
                nesting += 1
            elif tok.type in _CLOSERS:
                nesting = max(nesting - 1, 0)
            elif tok.type == TokenType.SEMICOLON and at_boundary:
                self._advance()
                break
            elif (
                at_boundary and self.pos > skip_from
                and tok.line > self._previous().line and starts_item()
            ):
                break
            self._advance()

        if self.pos == start and not self._at_end():
            self._advance()

        start_tok = self.tokens[start]
        text = "".join(t.full_text for t in self.tokens[start:self.pos])
        text = text[len(start_tok.full_text) - len(start_tok.value):]
        logger.debug("recovered from %r, skipped %d tokens", exc.message, self.pos - start)
        return ErrorNode(loc=self._loc(start_tok), message=exc.message, text=text)

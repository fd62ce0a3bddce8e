"""`with { ... }` attribute blocks and length restrictions."""

from __future__ import annotations

from ttcn3.ast.nodes import (
    Attribute,
    Attributes,
    AttributeSpecifier,
    Boundary,
    CharstringLiteral,
    LengthSpec,
    NumberLiteral,
)
from ttcn3.lexer.tokens import TokenType
from ttcn3.parser.base import describe
from ttcn3.parser.expressions import ExpressionParser

ATTRIBUTE_KINDS = ("extension", "encode", "variant", "display", "optional")


class AttributeParser(ExpressionParser):

    def _parse_optional_attributes(self) -> Attributes | None:
        if not self._check_keyword("with"):
            return None
        start = self._advance()
        self._expect(TokenType.LBRACE, "'{'")
        items = []
        while not self._check(TokenType.RBRACE):
            items.append(self._parse_attribute())
            self._accept(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "'}'")
        return Attributes(loc=self._loc(start), items=items)

    def _parse_attribute(self) -> Attribute:
        """Parse `kind [override|@local] [(specifiers)] [{encodings}] "value"`."""
        start = self._current()
        if not start.is_keyword(*ATTRIBUTE_KINDS):
            self._fail(f"Expected attribute kind, got {describe(start)}")
        kind = self._advance().value

        modifier = None
        if self._check_keyword("override") or self._current().value == "@local":
            modifier = self._advance().value

        specifiers = None
        if self._accept(TokenType.LPAREN):
            specifiers = [self._parse_attribute_specifier()]
            while self._accept(TokenType.COMMA):
                if self._check(TokenType.RPAREN):
                    break
                specifiers.append(self._parse_attribute_specifier())
            self._expect(TokenType.RPAREN, "')'")

        encodings = None
        if self._accept(TokenType.LBRACE):
            encodings = [self._parse_charstring()]
            while self._accept(TokenType.COMMA):
                if self._check(TokenType.RBRACE):
                    break
                encodings.append(self._parse_charstring())
            self._expect(TokenType.RBRACE, "'}'")

        value = self._parse_charstring()
        return Attribute(
            loc=self._loc(start), kind=kind, modifier=modifier,
            specifiers=specifiers, encodings=encodings, value=value,
        )

    def _parse_attribute_specifier(self) -> AttributeSpecifier:
        start = self._current()
        reference = self._parse_type()
        exceptions = None
        if self._accept_keyword("except"):
            self._expect(TokenType.LBRACE, "'{'")
            exceptions = self._parse_references()
            self._expect(TokenType.RBRACE, "'}'")
        return AttributeSpecifier(loc=self._loc(start), reference=reference, exceptions=exceptions)

    def _parse_charstring(self) -> CharstringLiteral:
        tok = self._expect(TokenType.CHARSTRING, "string literal")
        return CharstringLiteral(loc=self._loc(tok), text=tok.value)

    # ------------------------------------------------------------------
    # Length restrictions
    # ------------------------------------------------------------------

    def _parse_optional_length(self) -> LengthSpec | None:
        if self._check_keyword("length"):
            return self._parse_length_spec()
        return None

    def _parse_length_spec(self) -> LengthSpec:
        """Parse `length ( [lower ..] upper )`; a single bound is the upper one."""
        start = self._expect_keyword("length")
        self._expect(TokenType.LPAREN, "'('")
        first = self._parse_boundary()
        lower = None
        upper = first
        if self._accept(TokenType.RANGE):
            lower = first
            upper = self._parse_boundary()
        self._expect(TokenType.RPAREN, "')'")
        return LengthSpec(loc=self._loc(start), lower=lower, upper=upper)

    def _parse_boundary(self) -> Boundary:
        start = self._current()
        exclusive = self._accept(TokenType.EXCLAMATION) is not None
        if self._check(TokenType.NUMBER):
            tok = self._advance()
            value = NumberLiteral(loc=self._loc(tok), text=tok.value)
        else:
            value = self._parse_reference()
        return Boundary(loc=self._loc(start), exclusive=exclusive, value=value)

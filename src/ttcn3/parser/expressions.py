"""Expression and reference parsing.

Binary operators are handled by precedence climbing over the table in
`ttcn3.parser.precedence`; everything binding tighter than the unary
operators (literals, references, postfix chains, `=>` and inline
templates) is parsed by recursive descent.
"""

from __future__ import annotations

import logging

from ttcn3.ast.nodes import (
    AnyValue,
    AnyValueOrNone,
    BinaryExpr,
    BitstringLiteral,
    BooleanLiteral,
    CallExpr,
    CharstringLiteral,
    CompositeLiteral,
    Expr,
    FieldAssignment,
    FromCall,
    FunctionLiteral,
    HexstringLiteral,
    Identifier,
    IndexExpr,
    InlineTemplate,
    MalformedStringLiteral,
    NotUsedLiteral,
    NullLiteral,
    NumberLiteral,
    OctetstringLiteral,
    OmitLiteral,
    RangeExpr,
    SelectorExpr,
    TemplateValues,
    TypeInstantiation,
    UnaryExpr,
    VerdictLiteral,
    is_reference,
)
from ttcn3.lexer.tokens import VERDICTS, Token, TokenType
from ttcn3.parser.base import ParserBase, describe
from ttcn3.parser.precedence import BINARY_OPERATORS, FAT_ARROW_PRECEDENCE, PREFIX_OPERATORS, Precedence

logger = logging.getLogger(__name__)

_LITERALS = {
    TokenType.NUMBER: NumberLiteral,
    TokenType.CHARSTRING: CharstringLiteral,
    TokenType.BITSTRING: BitstringLiteral,
    TokenType.HEXSTRING: HexstringLiteral,
    TokenType.OCTETSTRING: OctetstringLiteral,
    TokenType.MALFORMED_STRING: MalformedStringLiteral,
}

# Token types whose spelling may name an operator. Keywords are checked
# separately since only some of them (`and`, `mod`, ...) are operators.
_OPERATOR_TYPES = frozenset({
    TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
    TokenType.AMPERSAND, TokenType.EQUALS, TokenType.NOT_EQUALS,
    TokenType.LESS_THAN, TokenType.LESS_EQUAL, TokenType.GREATER_THAN,
    TokenType.GREATER_EQUAL, TokenType.SHIFT_LEFT, TokenType.SHIFT_RIGHT,
    TokenType.ROTATE_LEFT, TokenType.ROTATE_RIGHT, TokenType.EXCLAMATION,
    TokenType.INCREMENT, TokenType.DECREMENT,
})

_OPERAND_KEYWORDS = frozenset({
    "null", "omit", "true", "false", "this", "self", "any", "all",
    "function", "testcase", "not", "not4b",
}) | VERDICTS

_PORT_LIKE = ("port", "timer", "component")


def _operator(tok: Token, table) -> str | None:
    if tok.type in _OPERATOR_TYPES or tok.type == TokenType.KEYWORD:
        if tok.value in table:
            return tok.value
    return None


class ExpressionParser(ParserBase):
    """Expressions, references and type references.

    Function literals reuse the parameter, return-type and block
    productions provided by the statement and definition parsers.
    """

    # ------------------------------------------------------------------
    # Start sets
    # ------------------------------------------------------------------

    def _starts_reference(self, offset: int = 0) -> bool:
        tok = self._peek(offset)
        if self._is_name(tok) or tok.type == TokenType.UNDEFINED:
            return True
        if tok.is_keyword("this", "self"):
            return True
        if tok.is_keyword("any", "all"):
            return self._peek(offset + 1).is_keyword("from", *_PORT_LIKE)
        if tok.is_keyword("testcase"):
            return self._peek(offset + 1).type == TokenType.DOT
        return False

    def _starts_operand(self, tok: Token | None = None) -> bool:
        """True if `tok` (default: current) can begin an expression."""
        tok = tok or self._current()
        if tok.type in _LITERALS or tok.type in (
            TokenType.IDENTIFIER, TokenType.LPAREN, TokenType.LBRACE,
            TokenType.QUESTION, TokenType.STAR, TokenType.UNDEFINED,
            TokenType.PLUS, TokenType.MINUS, TokenType.EXCLAMATION,
            TokenType.INCREMENT, TokenType.DECREMENT,
        ):
            return True
        return tok.type == TokenType.KEYWORD and (
            tok.value in _OPERAND_KEYWORDS or self._is_name(tok)
        )

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, floor: int = Precedence.LOWEST) -> Expr:
        """Parse an expression whose binary operators bind at `floor` or tighter."""
        start = self._current()
        left = self._parse_prefix()

        while True:
            op = _operator(self._current(), BINARY_OPERATORS)
            if op is None:
                break
            level = BINARY_OPERATORS[op]
            if level < floor:
                break
            self._advance()
            right = self._parse_expression(level + 1)
            left = BinaryExpr(loc=self._loc(start), left=left, operator=op, right=right)

        return left

    def _parse_prefix(self) -> Expr:
        start = self._current()
        op = _operator(start, PREFIX_OPERATORS)
        if op is None:
            return self._parse_postfix()

        if op == "-" and not self._starts_operand(self._peek()):
            self._advance()
            return NotUsedLiteral(loc=self._loc(start))

        self._advance()
        operand = self._parse_expression(PREFIX_OPERATORS[op])
        return UnaryExpr(loc=self._loc(start), operator=op, operand=operand)

    def _parse_postfix(self) -> Expr:
        """Parse a primary, then `=>` or an inline template after a reference."""
        start = self._current()
        if not self._starts_reference():
            return self._parse_primary()

        ref = self._parse_reference()

        if self._accept(TokenType.FAT_ARROW):
            right = self._parse_expression(FAT_ARROW_PRECEDENCE)
            return BinaryExpr(loc=self._loc(start), left=ref, operator="=>", right=right)

        if self._accept(TokenType.COLON):
            value = self._parse_expression()
            return InlineTemplate(loc=self._loc(start), type=ref, value=value)

        return ref

    def _parse_primary(self) -> Expr:
        """Parse a literal, matching symbol, list or function literal."""
        tok = self._current()

        literal = _LITERALS.get(tok.type)
        if literal is not None:
            self._advance()
            return literal(loc=self._loc(tok), text=tok.value)

        if tok.type == TokenType.QUESTION:
            self._advance()
            return AnyValue(loc=self._loc(tok))

        if tok.type == TokenType.STAR:
            self._advance()
            return AnyValueOrNone(loc=self._loc(tok))

        if tok.type == TokenType.LPAREN:
            return self._parse_template_values()

        if tok.type == TokenType.LBRACE:
            return self._parse_composite_literal()

        if tok.type == TokenType.KEYWORD:
            if tok.value in ("true", "false"):
                self._advance()
                return BooleanLiteral(loc=self._loc(tok), text=tok.value)
            if tok.value in VERDICTS:
                self._advance()
                return VerdictLiteral(loc=self._loc(tok), value=tok.value)
            if tok.value == "null":
                self._advance()
                return NullLiteral(loc=self._loc(tok))
            if tok.value == "omit":
                self._advance()
                return OmitLiteral(loc=self._loc(tok))
            if tok.value == "function":
                return self._parse_function_literal()
            if tok.value == "testcase":
                self._advance()
                return Identifier(loc=self._loc(tok), name="testcase")

        self._fail(f"Expected expression, got {describe(tok)}")

    def _parse_template_values(self) -> TemplateValues:
        """Parse `( item, ... )` where each item may be a range `a .. b`."""
        start = self._expect(TokenType.LPAREN, "'('")
        values = [self._parse_template_item()]
        while self._accept(TokenType.COMMA):
            if self._check(TokenType.RPAREN):
                break
            values.append(self._parse_template_item())
        self._expect(TokenType.RPAREN, "')'")
        return TemplateValues(loc=self._loc(start), values=values)

    def _parse_template_item(self) -> Expr:
        start = self._current()
        value = self._parse_expression()
        if self._accept(TokenType.RANGE):
            upper = self._parse_expression()
            return RangeExpr(loc=self._loc(start), lower=value, upper=upper)
        return value

    def _parse_composite_literal(self) -> CompositeLiteral:
        start = self._expect(TokenType.LBRACE, "'{'")
        elements: list[Expr] = []
        if not self._check(TokenType.RBRACE):
            elements.append(self._parse_element())
            while self._accept(TokenType.COMMA):
                if self._check(TokenType.RBRACE):
                    break
                elements.append(self._parse_element())
        self._expect(TokenType.RBRACE, "'}'")
        return CompositeLiteral(loc=self._loc(start), elements=elements)

    def _parse_element(self) -> Expr:
        """Parse a list element or argument; `ref := value` names a field."""
        start = self._current()
        value = self._parse_expression()
        if is_reference(value) and self._accept(TokenType.ASSIGN):
            assigned = self._parse_expression()
            return FieldAssignment(loc=self._loc(start), target=value, value=assigned)
        return value

    def _parse_function_literal(self) -> FunctionLiteral:
        start = self._expect_keyword("function")
        modifiers = self._parse_modifiers()
        parameters = self._parse_parameters()
        runs_on, mtc, system = self._parse_component_clauses()
        return_type = self._parse_optional_return_type()
        exception = self._parse_optional_exception()
        body = self._parse_block()
        return FunctionLiteral(
            loc=self._loc(start), modifiers=modifiers, parameters=parameters,
            runs_on=runs_on, mtc=mtc, system=system, return_type=return_type,
            exception=exception, body=body,
        )

    def _parse_modifiers(self) -> list[str]:
        modifiers = []
        while self._check(TokenType.MODIFIER):
            modifiers.append(self._advance().value)
        return modifiers

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------

    def _parse_type(self) -> Expr:
        """Parse a type reference: selectors, indices and type arguments, no calls."""
        return self._parse_reference(allow_call=False)

    def _parse_reference(self, allow_call: bool = True) -> Expr:
        """Parse a name followed by `.field`, `[index]`, `(args)` and `<types>`."""
        start = self._current()
        expr = self._parse_reference_head()

        # Type arguments only follow a plain name.
        if self._previous() is start and self._is_name(start) and self._check(TokenType.LESS_THAN):
            expr = self._parse_type_arguments(expr, start, eager=not allow_call)

        while True:
            if self._accept(TokenType.DOT):
                tok = self._current()
                if tok.type not in (TokenType.IDENTIFIER, TokenType.KEYWORD):
                    self._fail(f"Expected field name, got {describe(tok)}")
                self._advance()
                expr = SelectorExpr(
                    loc=self._loc(start), operand=expr,
                    field=Identifier(loc=self._loc(tok), name=tok.value),
                )
            elif self._check(TokenType.LBRACKET) and self._starts_index():
                self._advance()
                indices = [self._parse_expression()]
                while self._accept(TokenType.COMMA):
                    if self._check(TokenType.RBRACKET):
                        break
                    indices.append(self._parse_expression())
                self._expect(TokenType.RBRACKET, "']'")
                expr = IndexExpr(loc=self._loc(start), operand=expr, indices=indices)
            elif allow_call and self._check(TokenType.LPAREN):
                arguments, variadic = self._parse_arguments()
                expr = CallExpr(
                    loc=self._loc(start), function=expr,
                    arguments=arguments, variadic=variadic,
                )
            else:
                break

        return expr

    def _starts_index(self) -> bool:
        """`[]` and `[else]` open the next alt arm, not an index."""
        nxt = self._peek()
        return nxt.type != TokenType.RBRACKET and not nxt.is_keyword("else")

    def _parse_reference_head(self) -> Expr:
        tok = self._current()

        if self._is_name(tok):
            self._advance()
            if tok.value == "universal" and self._current().value == "charstring":
                self._advance()
                return Identifier(loc=self._loc(tok), name="universal charstring")
            return Identifier(loc=self._loc(tok), name=tok.value)

        if tok.type == TokenType.UNDEFINED or tok.is_keyword("this", "self", "testcase"):
            self._advance()
            return Identifier(loc=self._loc(tok), name=tok.value)

        if tok.is_keyword("any", "all"):
            self._advance()
            if self._accept_keyword("from"):
                name_tok = self._current()
                name = self._expect_name()
                return FromCall(
                    loc=self._loc(tok), quantifier=tok.value,
                    argument=Identifier(loc=self._loc(name_tok), name=name),
                )
            kind = self._current()
            if not kind.is_keyword(*_PORT_LIKE):
                self._fail(f"Expected 'from', 'port', 'timer' or 'component', got {describe(kind)}")
            self._advance()
            return Identifier(loc=self._loc(tok), name=f"{tok.value} {kind.value}")

        self._fail(f"Expected reference, got {describe(tok)}")

    def _parse_type_arguments(self, base: Identifier, start: Token, eager: bool) -> Expr:
        """Parse `<T, ...>` after a name.

        In type positions the arguments are taken unconditionally. In
        expressions they are only taken when the closing `>` is followed by
        `(` or by something that cannot start an operand, otherwise `<` is
        the comparison operator.
        """
        if eager:
            return self._type_instantiation(base, start)

        mark = self._mark()
        result = self._attempt(lambda: self._type_instantiation(base, start))
        if result is None:
            return base
        if self._starts_operand() and not self._check(TokenType.LPAREN):
            logger.debug("'<' at %d:%d read as comparison", start.line, start.column)
            self._reset(mark)
            return base
        return result

    def _type_instantiation(self, base: Identifier, start: Token) -> TypeInstantiation:
        self._expect(TokenType.LESS_THAN, "'<'")
        arguments: list[Expr] = []
        if not self._check(TokenType.GREATER_THAN):
            arguments.append(self._parse_type())
            while self._accept(TokenType.COMMA):
                if self._check(TokenType.GREATER_THAN):
                    break
                arguments.append(self._parse_type())
        self._expect(TokenType.GREATER_THAN, "'>'")
        return TypeInstantiation(loc=self._loc(start), type=base, arguments=arguments)

    def _parse_arguments(self) -> tuple[list[Expr], bool]:
        """Parse a call's `( arg, ... )`, with an optional trailing `...`."""
        self._expect(TokenType.LPAREN, "'('")
        arguments: list[Expr] = []
        variadic = False
        while not self._check(TokenType.RPAREN):
            if self._accept(TokenType.ELLIPSIS):
                variadic = True
                break
            arguments.append(self._parse_element())
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN, "')'")
        return arguments, variadic

    def _parse_references(self) -> list[Expr]:
        """Parse a comma separated list of type references."""
        refs = [self._parse_type()]
        while self._accept(TokenType.COMMA):
            if not self._starts_reference():
                break
            refs.append(self._parse_type())
        return refs

"""Statement and local declaration parsing.

A few places need more than one token of lookahead:

    break/continue          A following name is a label only if what comes
                            after it can end the statement.
    return                  A following expression is the value unless it
                            is a reference that `:=` or `->` continues.
    var/const/modulepar     The type is optional. The head `type name` is
                            looked at first; when it fits, the declaration
                            is typed from there on.
"""

from __future__ import annotations

import logging

from ttcn3.ast.nodes import (
    AltBlock,
    AltStmt,
    Assignment,
    Block,
    BreakStmt,
    CatchClause,
    ConstDecl,
    ContinueStmt,
    Declarator,
    DoWhileStmt,
    Expr,
    ExprStmt,
    FinallyClause,
    ForRangeStmt,
    ForStmt,
    GotoStmt,
    GuardedElse,
    GuardedStmt,
    IfStmt,
    InterleaveStmt,
    LabelStmt,
    Node,
    PortDecl,
    Redirection,
    ReturnStmt,
    SelectCase,
    SelectClassStmt,
    SelectElse,
    SelectStmt,
    SelectTypeStmt,
    SelectUnionStmt,
    Template,
    TemplateRestriction,
    TimerDecl,
    VarDecl,
    WhileStmt,
)
from ttcn3.lexer.tokens import Token, TokenType
from ttcn3.parser.attributes import AttributeParser
from ttcn3.parser.base import ParseError, describe

logger = logging.getLogger(__name__)

STATEMENT_KEYWORDS = frozenset({
    "var", "const", "template", "timer", "port", "label", "goto", "break",
    "continue", "return", "if", "for", "while", "do", "select", "alt",
    "interleave",
})

DECLARATION_KEYWORDS = ("var", "const", "timer", "port", "template")

RESTRICTIONS = ("omit", "value", "present")

_SELECT_KINDS = {
    "union": SelectUnionStmt,
    "class": SelectClassStmt,
    "type": SelectTypeStmt,
}

_REDIRECT_CLAUSES = ("value", "sender", "verdict", "param", "timestamp")


class StatementParser(AttributeParser):

    # ------------------------------------------------------------------
    # Start sets
    # ------------------------------------------------------------------

    def _starts_statement(self) -> bool:
        tok = self._current()
        if tok.type == TokenType.LBRACE:
            return True
        if tok.type == TokenType.KEYWORD and tok.value in STATEMENT_KEYWORDS:
            return True
        return self._starts_reference()

    def _can_end_statement(self) -> bool:
        """True if the current token may follow a complete statement."""
        if self._current().type in (
            TokenType.SEMICOLON, TokenType.RBRACE, TokenType.RPAREN, TokenType.EOF,
        ):
            return True
        return self._starts_statement()

    def _at_declaration_end(self) -> bool:
        if self._current().type in (
            TokenType.SEMICOLON, TokenType.RBRACE, TokenType.RPAREN, TokenType.EOF,
        ):
            return True
        if self._check_keyword("with"):
            return True
        return self._starts_statement() or self._starts_definition()

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _parse_block(self) -> Block:
        start = self._current()
        statements = self._parse_statement_list()
        catches, finally_clause = self._parse_handlers()
        return Block(
            loc=self._loc(start), statements=statements,
            catches=catches, finally_clause=finally_clause,
        )

    def _parse_statement_list(self) -> list[Node]:
        """Parse `{ (statement ;?)* }`."""
        self._expect(TokenType.LBRACE, "'{'")
        statements: list[Node] = []
        while not self._check(TokenType.RBRACE) and not self._at_end():
            if self._accept(TokenType.SEMICOLON):
                continue
            statements.append(self._recovering(self._parse_statement, self._starts_statement))
            self._accept(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "'}'")
        return statements

    def _parse_handlers(self) -> tuple[list[CatchClause], FinallyClause | None]:
        catches = []
        while self._check_keyword("catch"):
            start = self._advance()
            statements = self._parse_statement_list()
            catches.append(CatchClause(loc=self._loc(start), statements=statements))
        finally_clause = None
        if self._check_keyword("finally"):
            start = self._advance()
            statements = self._parse_statement_list()
            finally_clause = FinallyClause(loc=self._loc(start), statements=statements)
        return catches, finally_clause

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Node:
        """Parse a single statement."""
        tok = self._current()

        if tok.type == TokenType.LBRACE:
            return self._parse_block()

        if tok.type == TokenType.KEYWORD:
            word = tok.value
            if word in DECLARATION_KEYWORDS:
                return self._parse_declaration()
            if word == "label":
                return self._parse_label_stmt()
            if word == "goto":
                return self._parse_goto_stmt()
            if word == "break":
                self._advance()
                return BreakStmt(loc=self._loc(tok), label=self._parse_trailing_label())
            if word == "continue":
                self._advance()
                return ContinueStmt(loc=self._loc(tok), label=self._parse_trailing_label())
            if word == "return":
                return self._parse_return_stmt()
            if word == "if":
                return self._parse_if_stmt()
            if word == "for":
                return self._parse_for_stmt()
            if word == "while":
                return self._parse_while_stmt()
            if word == "do":
                return self._parse_do_while_stmt()
            if word == "select":
                return self._parse_select_stmt()
            if word in ("alt", "interleave"):
                return self._parse_alt_stmt()

        if not self._starts_reference():
            self._fail(f"Expected statement, got {describe(tok)}")

        ref = self._parse_reference()
        if self._accept(TokenType.ASSIGN):
            right = self._parse_expression()
            return Assignment(loc=self._loc(tok), left=ref, right=right)
        if self._check(TokenType.ARROW):
            return self._parse_redirection(ref, tok)
        return ExprStmt(loc=self._loc(tok), expr=ref)

    def _parse_redirection(self, reference: Expr, start: Token) -> Redirection:
        """Parse `-> value v sender s ... @index value i` after a reference.

        Each clause may appear once, in any order.
        """
        self._expect(TokenType.ARROW, "'->'")
        clauses: dict[str, Expr] = {}
        while True:
            tok = self._current()
            if tok.value == "@index" and "index" not in clauses:
                self._advance()
                self._expect_keyword("value")
                clauses["index"] = self._parse_expression()
            elif tok.type == TokenType.KEYWORD and tok.value in _REDIRECT_CLAUSES \
                    and tok.value not in clauses:
                self._advance()
                clauses[tok.value] = self._parse_expression()
            else:
                break
        if not clauses:
            self._fail(f"Expected redirect clause, got {describe(self._current())}")
        return Redirection(loc=self._loc(start), reference=reference, **clauses)

    def _parse_label_stmt(self) -> LabelStmt:
        start = self._expect_keyword("label")
        name = self._expect_name("label name")
        return LabelStmt(loc=self._loc(start), name=name)

    def _parse_goto_stmt(self) -> GotoStmt:
        start = self._expect_keyword("goto")
        name = self._expect_name("label name")
        return GotoStmt(loc=self._loc(start), name=name)

    def _parse_trailing_label(self) -> str | None:
        """Take a name after break/continue only if the statement can end there."""
        if not self._is_name(self._current()):
            return None
        mark = self._mark()
        name = self._advance().value
        if self._can_end_statement():
            return name
        self._reset(mark)
        logger.debug("'%s' after %s starts the next statement", name, self._previous().value)
        return None

    def _parse_return_stmt(self) -> ReturnStmt:
        start = self._expect_keyword("return")
        if self._starts_operand():
            # A name followed by `:=` or `->` starts the next statement.
            mark = self._mark()
            value = self._parse_expression()
            if self._current().type not in (TokenType.ASSIGN, TokenType.ARROW):
                return ReturnStmt(loc=self._loc(start), value=value)
            self._reset(mark)
            logger.debug("return at %d:%d has no value", start.line, start.column)
        return ReturnStmt(loc=self._loc(start))

    def _parse_if_stmt(self) -> IfStmt:
        start = self._expect_keyword("if")
        self._expect(TokenType.LPAREN, "'('")
        init = self._parse_optional_init()
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "')'")
        then_block = self._parse_block()

        else_branch = None
        if self._accept_keyword("else"):
            if self._check_keyword("if"):
                else_branch = self._parse_if_stmt()
            else:
                else_branch = self._parse_block()

        return IfStmt(
            loc=self._loc(start), init=init, condition=condition,
            then_block=then_block, else_branch=else_branch,
        )

    def _parse_for_stmt(self) -> ForStmt | ForRangeStmt:
        start = self._expect_keyword("for")
        self._expect(TokenType.LPAREN, "'('")

        offset = 1 if self._check_keyword("var", "const") else 0
        if self._is_name(self._peek(offset)) and self._peek(offset + 1).is_keyword("in"):
            declaration = self._advance().value if offset else None
            name = self._expect_name()
            self._expect_keyword("in")
            range_ = self._parse_expression()
            self._expect(TokenType.RPAREN, "')'")
            body = self._parse_block()
            return ForRangeStmt(
                loc=self._loc(start), declaration=declaration,
                name=name, range=range_, body=body,
            )

        init = None if self._check(TokenType.SEMICOLON) else self._parse_init_statement()
        self._expect(TokenType.SEMICOLON, "';'")
        condition = None if self._check(TokenType.SEMICOLON) else self._parse_expression()
        self._expect(TokenType.SEMICOLON, "';'")
        post = None if self._check(TokenType.RPAREN) else self._parse_statement()
        self._expect(TokenType.RPAREN, "')'")
        body = self._parse_block()
        return ForStmt(loc=self._loc(start), init=init, condition=condition, post=post, body=body)

    def _parse_while_stmt(self) -> WhileStmt:
        start = self._expect_keyword("while")
        self._expect(TokenType.LPAREN, "'('")
        init = self._parse_optional_init()
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "')'")
        body = self._parse_block()
        return WhileStmt(loc=self._loc(start), init=init, condition=condition, body=body)

    def _parse_do_while_stmt(self) -> DoWhileStmt:
        start = self._expect_keyword("do")
        body = self._parse_block()
        self._expect_keyword("while")
        self._expect(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(TokenType.RPAREN, "')'")
        return DoWhileStmt(loc=self._loc(start), body=body, condition=condition)

    def _parse_select_stmt(self) -> SelectStmt:
        """Parse `select [union|class|type] ( [init;] expr ) case...`.

        The clauses may be wrapped in braces.
        """
        start = self._expect_keyword("select")
        node_type = SelectStmt
        if self._check_keyword(*_SELECT_KINDS):
            node_type = _SELECT_KINDS[self._advance().value]

        self._expect(TokenType.LPAREN, "'('")
        init = self._parse_optional_init()
        expression = self._parse_expression()
        self._expect(TokenType.RPAREN, "')'")

        braced = self._accept(TokenType.LBRACE) is not None
        clauses: list[SelectCase | SelectElse] = []
        while self._check_keyword("case"):
            if clauses and isinstance(clauses[-1], SelectElse):
                self._fail("'case else' must be the last clause")
            clauses.append(self._parse_select_clause())
        if not clauses:
            self._fail(f"Expected 'case', got {describe(self._current())}")
        if braced:
            self._expect(TokenType.RBRACE, "'}'")

        return node_type(loc=self._loc(start), init=init, expression=expression, clauses=clauses)

    def _parse_select_clause(self) -> SelectCase | SelectElse:
        start = self._expect_keyword("case")
        if self._accept_keyword("else"):
            return SelectElse(loc=self._loc(start), body=self._parse_block())
        self._expect(TokenType.LPAREN, "'('")
        expressions = [self._parse_expression()]
        while self._accept(TokenType.COMMA):
            if self._check(TokenType.RPAREN):
                break
            expressions.append(self._parse_expression())
        self._expect(TokenType.RPAREN, "')'")
        body = self._parse_block()
        return SelectCase(loc=self._loc(start), expressions=expressions, body=body)

    # ------------------------------------------------------------------
    # Alternatives
    # ------------------------------------------------------------------

    def _parse_alt_stmt(self) -> AltStmt | InterleaveStmt:
        start = self._advance()
        node_type = AltStmt if start.value == "alt" else InterleaveStmt
        nodefault = False
        if self._current().value == "@nodefault":
            self._advance()
            nodefault = True
        body = self._parse_alt_block()
        return node_type(loc=self._loc(start), nodefault=nodefault, body=body)

    def _starts_alt_item(self) -> bool:
        return self._check(TokenType.LBRACKET) or self._check_keyword(*DECLARATION_KEYWORDS)

    def _parse_alt_block(self) -> AltBlock:
        start = self._expect(TokenType.LBRACE, "'{'")
        items: list[Node] = []
        while not self._check(TokenType.RBRACE) and not self._at_end():
            if self._accept(TokenType.SEMICOLON):
                continue
            items.append(self._recovering(self._parse_alt_item, self._starts_alt_item))
            self._accept(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "'}'")
        catches, finally_clause = self._parse_handlers()
        return AltBlock(loc=self._loc(start), items=items, catches=catches, finally_clause=finally_clause)

    def _parse_alt_item(self) -> Node:
        if self._check_keyword(*DECLARATION_KEYWORDS):
            return self._parse_declaration()

        start = self._expect(TokenType.LBRACKET, "'['")
        if self._accept_keyword("else"):
            self._expect(TokenType.RBRACKET, "']'")
            return GuardedElse(loc=self._loc(start), body=self._parse_block())

        condition = None
        if not self._check(TokenType.RBRACKET):
            condition = self._parse_expression()
        self._expect(TokenType.RBRACKET, "']'")

        comm_start = self._current()
        communication: Node = self._parse_reference()
        if self._check(TokenType.ARROW):
            communication = self._parse_redirection(communication, comm_start)

        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        return GuardedStmt(loc=self._loc(start), condition=condition, communication=communication, body=body)

    # ------------------------------------------------------------------
    # Initializers
    # ------------------------------------------------------------------

    def _parse_optional_init(self) -> Node | None:
        """Parse the `init ;` prefix of if/while/select, if present."""
        if self._check_keyword(*DECLARATION_KEYWORDS):
            init = self._parse_declaration()
            self._expect(TokenType.SEMICOLON, "';'")
            return init
        if not self._starts_reference() or not self._semicolon_before_close():
            return None
        init = self._parse_assignment()
        self._expect(TokenType.SEMICOLON, "';'")
        return init

    def _parse_init_statement(self) -> Node:
        if self._check_keyword(*DECLARATION_KEYWORDS):
            return self._parse_declaration()
        return self._parse_assignment()

    def _parse_assignment(self) -> Assignment:
        start = self._current()
        left = self._parse_reference()
        self._expect(TokenType.ASSIGN, "':='")
        right = self._parse_expression()
        return Assignment(loc=self._loc(start), left=left, right=right)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _parse_declaration(self, start: Token | None = None, visibility: str | None = None) -> Node:
        """Parse a var, const, timer, port or template declaration."""
        start = start or self._current()
        word = self._current().value
        if word == "var":
            return self._parse_variable("var", VarDecl, start, visibility)
        if word == "const":
            return self._parse_variable("const", ConstDecl, start, visibility)
        if word == "timer":
            return self._parse_timer_decl(start, visibility)
        if word == "port":
            return self._parse_port_decl(start, visibility)
        return self._parse_template(start, visibility)

    def _parse_variable(self, keyword: str, node_type: type[VarDecl], start: Token,
                        visibility: str | None) -> VarDecl:
        self._expect_keyword(keyword)
        restriction = self._parse_optional_template_restriction()
        type_, declarators = self._parse_declaration_head()
        attributes = self._parse_optional_attributes()
        return node_type(
            loc=self._loc(start), visibility=visibility, template_restriction=restriction,
            type=type_, declarators=declarators, attributes=attributes,
        )

    def _parse_declaration_head(self) -> tuple[Expr | None, list[Declarator]]:
        """Parse `[type] declarator, ...`, preferring the typed reading.

        Only the head is tried ahead: a type, then a name followed by
        something a declarator may continue with. Once that holds the
        declaration is typed and any later error is reported where it
        occurs.
        """
        mark = self._mark()
        self._speculating += 1
        try:
            self._parse_type()
            self._expect_name()
            typed = self._at_declarator_continuation()
        except ParseError:
            typed = False
        finally:
            self._speculating -= 1
        self._reset(mark)

        if typed:
            return self._parse_type(), self._parse_declarators()
        tok = self._current()
        logger.debug("untyped declaration at %d:%d", tok.line, tok.column)
        return None, self._parse_declarators()

    def _at_declarator_continuation(self) -> bool:
        if self._current().type in (
            TokenType.ASSIGN, TokenType.COMMA, TokenType.LBRACKET, TokenType.LESS_THAN,
        ):
            return True
        return self._at_declaration_end()

    def _parse_declarators(self) -> list[Declarator]:
        declarators = [self._parse_declarator()]
        while self._accept(TokenType.COMMA):
            declarators.append(self._parse_declarator())
        if not self._at_declaration_end():
            self._fail(f"Expected ',', ':=' or end of declaration, got {describe(self._current())}")
        return declarators

    def _parse_declarator(self) -> Declarator:
        start = self._current()
        name = self._expect_name()
        type_parameters = self._parse_optional_type_parameters()
        array_def = self._parse_array_def()
        value = None
        if self._accept(TokenType.ASSIGN):
            value = self._parse_expression()
        return Declarator(
            loc=self._loc(start), name=name, type_parameters=type_parameters,
            array_def=array_def, value=value,
        )

    def _parse_array_def(self) -> list[Expr]:
        dims = []
        while self._accept(TokenType.LBRACKET):
            dims.append(self._parse_template_item())
            self._expect(TokenType.RBRACKET, "']'")
        return dims

    def _parse_optional_template_restriction(self) -> TemplateRestriction | None:
        """Parse `template [(omit|value|present)]` or a bare restriction word.

        A bare `omit`, `value` or `present` only counts when a name follows.
        """
        tok = self._current()
        if tok.is_keyword("template"):
            self._advance()
            restriction = None
            if (
                self._check(TokenType.LPAREN)
                and self._peek().is_keyword(*RESTRICTIONS)
                and self._peek(2).type == TokenType.RPAREN
            ):
                self._advance()
                restriction = self._advance().value
                self._advance()
            return TemplateRestriction(loc=self._loc(tok), template=True, restriction=restriction)
        if tok.is_keyword(*RESTRICTIONS) and self._starts_reference(1):
            self._advance()
            return TemplateRestriction(loc=self._loc(tok), restriction=tok.value)
        return None

    def _parse_timer_decl(self, start: Token, visibility: str | None) -> TimerDecl:
        self._expect_keyword("timer")
        declarators = self._parse_declarators()
        attributes = self._parse_optional_attributes()
        return TimerDecl(loc=self._loc(start), visibility=visibility,
                         declarators=declarators, attributes=attributes)

    def _parse_port_decl(self, start: Token, visibility: str | None) -> PortDecl:
        self._expect_keyword("port")
        type_ = self._parse_type()
        declarators = self._parse_declarators()
        attributes = self._parse_optional_attributes()
        return PortDecl(loc=self._loc(start), visibility=visibility, type=type_,
                        declarators=declarators, attributes=attributes)

    def _parse_template(self, start: Token, visibility: str | None) -> Template:
        """Parse `template [(r)] @mods Type name<..>(..) [modifies base] := value`."""
        self._expect_keyword("template")
        restriction = None
        if self._accept(TokenType.LPAREN):
            tok = self._current()
            if not tok.is_keyword(*RESTRICTIONS):
                self._fail(f"Expected 'omit', 'value' or 'present', got {describe(tok)}")
            restriction = self._advance().value
            self._expect(TokenType.RPAREN, "')'")
        modifiers = self._parse_modifiers()
        type_ = self._parse_type()
        name = self._expect_name("template name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters() if self._check(TokenType.LPAREN) else None
        modifies = None
        if self._accept_keyword("modifies"):
            modifies = self._parse_type()
        self._expect(TokenType.ASSIGN, "':='")
        value = self._parse_expression()
        attributes = self._parse_optional_attributes()
        return Template(
            loc=self._loc(start), visibility=visibility, restriction=restriction,
            modifiers=modifiers, type=type_, name=name, type_parameters=type_parameters,
            parameters=parameters, modifies=modifies, value=value, attributes=attributes,
        )

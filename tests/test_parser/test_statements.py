"""Tests for statement and local declaration parsing."""

import pytest

from ttcn3.ast.nodes import (
    AltStmt,
    Assignment,
    BinaryExpr,
    Block,
    BreakStmt,
    CallExpr,
    ConstDecl,
    ContinueStmt,
    Declarator,
    DoWhileStmt,
    ErrorNode,
    ExprStmt,
    ForRangeStmt,
    ForStmt,
    GotoStmt,
    GuardedElse,
    GuardedStmt,
    Identifier,
    IfStmt,
    InterleaveStmt,
    LabelStmt,
    NumberLiteral,
    PortDecl,
    Redirection,
    ReturnStmt,
    SelectCase,
    SelectElse,
    SelectStmt,
    SelectUnionStmt,
    Template,
    TemplateRestriction,
    TimerDecl,
    VarDecl,
    WhileStmt,
)
from ttcn3.diagnostics import DiagnosticCode
from ttcn3.lexer.lexer import Lexer
from ttcn3.lexer.tokens import TokenType
from ttcn3.parser.base import ParseError
from ttcn3.parser.parser import Parser, parse_source


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_stmt(source: str):
    """Parse one statement without recovery."""
    parser = Parser(Lexer(source).tokenize(), recover=False)
    return parser.parse_statement()


def parse_block(source: str) -> list:
    """Parse `{ ... }` and return its statements."""
    parser = Parser(Lexer(source).tokenize(), recover=False)
    block = parser.parse_block()
    assert parser._at_end()
    return block.statements


def parse_control(body: str):
    """Parse `body` as the statements of a control part, with recovery."""
    result = parse_source(f"control {{\n{body}\n}}")
    return result.tree.definitions[0].body.statements, result


def name(n: str) -> Identifier:
    return Identifier(name=n)


def num(text: str) -> NumberLiteral:
    return NumberLiteral(text=text)


# ---------------------------------------------------------------------------
# Simple statements
# ---------------------------------------------------------------------------

class TestSimpleStatements:
    def test_assignment(self):
        stmt = parse_stmt("x[1] := 2")
        assert isinstance(stmt, Assignment)
        assert stmt.right == num("2")

    def test_call_statement(self):
        stmt = parse_stmt("setverdict(pass)")
        assert isinstance(stmt, ExprStmt)
        assert isinstance(stmt.expr, CallExpr)

    def test_label_and_goto(self):
        assert parse_block("{ label L1; goto L1 }") == [LabelStmt(name="L1"), GotoStmt(name="L1")]

    def test_nested_block(self):
        statements = parse_block("{ { x := 1 } }")
        assert isinstance(statements[0], Block)

    def test_stray_semicolons(self):
        assert len(parse_block("{ ;; x := 1;; }")) == 1

    def test_statements_without_separators(self):
        statements = parse_block("{ x := 1\n f() }")
        assert [type(s) for s in statements] == [Assignment, ExprStmt]

    def test_catch_and_finally(self):
        parser = Parser(Lexer("{ f() } catch { g() } finally { h() }").tokenize())
        block = parser.parse_block()
        assert len(block.catches) == 1
        assert block.finally_clause.statements[0].expr.function == name("h")


# ---------------------------------------------------------------------------
# break / continue / return lookahead
# ---------------------------------------------------------------------------

class TestTrailingOperands:
    def test_bare_break(self):
        assert parse_block("{ break; }") == [BreakStmt()]

    def test_break_with_label(self):
        assert parse_block("{ break outer }") == [BreakStmt(label="outer")]

    def test_break_label_before_statement(self):
        assert parse_block("{ continue L x := 1 }") == [
            ContinueStmt(label="L"),
            Assignment(left=name("x"), right=num("1")),
        ]

    def test_name_after_break_starts_next_statement(self):
        statements = parse_block("{ break\n f() }")
        assert statements[0] == BreakStmt()
        assert statements[1] == ExprStmt(expr=CallExpr(function=name("f")))

    def test_return_value(self):
        stmt = parse_block("{ return x + 1 }")[0]
        assert stmt == ReturnStmt(value=BinaryExpr(left=name("x"), operator="+", right=num("1")))

    def test_bare_return(self):
        assert parse_block("{ return }") == [ReturnStmt()]

    def test_return_followed_by_assignment(self):
        statements = parse_block("{ return\n x := 1 }")
        assert statements == [ReturnStmt(), Assignment(left=name("x"), right=num("1"))]

    def test_return_followed_by_declaration(self):
        statements = parse_block("{ return var integer y }")
        assert statements[0] == ReturnStmt()
        assert isinstance(statements[1], VarDecl)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

class TestDeclarations:
    def test_typed_var(self):
        stmt = parse_stmt("var integer x := 1")
        assert stmt == VarDecl(
            type=name("integer"),
            declarators=[Declarator(name="x", value=num("1"))],
        )

    def test_untyped_var(self):
        stmt = parse_stmt("var x := 1")
        assert stmt.type is None
        assert stmt.declarators == [Declarator(name="x", value=num("1"))]

    def test_untyped_multiple(self):
        stmt = parse_stmt("var x := 1, y := 2")
        assert stmt.type is None
        assert [d.name for d in stmt.declarators] == ["x", "y"]

    def test_typed_reading_wins(self):
        statements = parse_block("{ var x\n y := 2 }")
        assert len(statements) == 1
        assert statements[0].type == name("x")
        assert statements[0].declarators[0].name == "y"

    def test_untyped_then_statement(self):
        statements = parse_block("{ var x := 1\n f() }")
        assert statements[0].type is None
        assert isinstance(statements[1], ExprStmt)

    def test_const_with_array(self):
        stmt = parse_stmt("const integer c[2] := { 1, 2 }")
        assert isinstance(stmt, ConstDecl)
        assert stmt.declarators[0].array_def == [num("2")]

    def test_template_variable(self):
        stmt = parse_stmt("var template (omit) T t := omit")
        assert stmt.template_restriction == TemplateRestriction(template=True, restriction="omit")
        assert stmt.type == name("T")

    def test_parametrized_type(self):
        stmt = parse_stmt("var List<integer> l")
        assert stmt.type.arguments == [name("integer")]

    def test_typed_head_keeps_initializer_error(self):
        statements, result = parse_control("var MyType x := f(;\ny := 1")
        assert isinstance(statements[0], ErrorNode)
        assert statements[0].text == "var MyType x := f(;"
        assert statements[1] == Assignment(left=name("y"), right=num("1"))
        assert len(result.errors) == 1
        assert (result.errors[0].loc.line, result.errors[0].loc.column) == (2, 19)

    def test_typed_head_without_recovery(self):
        with pytest.raises(ParseError) as excinfo:
            parse_stmt("var integer x := 1 + ;")
        assert excinfo.value.token.type == TokenType.SEMICOLON

    def test_timer(self):
        stmt = parse_stmt("timer t1 := 5.0, t2")
        assert isinstance(stmt, TimerDecl)
        assert [d.name for d in stmt.declarators] == ["t1", "t2"]

    def test_port(self):
        stmt = parse_stmt("port MyPort p1, p2")
        assert stmt == PortDecl(
            type=name("MyPort"), declarators=[Declarator(name="p1"), Declarator(name="p2")],
        )

    def test_local_template(self):
        stmt = parse_stmt("template integer t := ?")
        assert isinstance(stmt, Template)
        assert stmt.name == "t"
        assert stmt.parameters is None

    def test_template_with_parameters(self):
        stmt = parse_stmt("template (value) T t(integer p) modifies base := { f := p }")
        assert stmt.restriction == "value"
        assert stmt.parameters[0].name == "p"
        assert stmt.modifies == name("base")

    def test_declaration_with_attributes(self):
        stmt = parse_stmt('var integer x with { variant "x" }')
        assert stmt.attributes.items[0].kind == "variant"


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------

class TestControlFlow:
    def test_if_else_chain(self):
        stmt = parse_stmt("if (a) { f() } else if (b) { g() } else { h() }")
        assert isinstance(stmt, IfStmt)
        assert isinstance(stmt.else_branch, IfStmt)
        assert isinstance(stmt.else_branch.else_branch, Block)

    def test_if_with_declaration_init(self):
        stmt = parse_stmt("if (var integer x := f(); x > 0) {}")
        assert isinstance(stmt.init, VarDecl)
        assert stmt.condition.operator == ">"

    def test_if_with_assignment_init(self):
        stmt = parse_stmt("if (x := 1; x) {}")
        assert stmt.init == Assignment(left=name("x"), right=num("1"))
        assert stmt.condition == name("x")

    def test_if_without_init(self):
        stmt = parse_stmt("if (x) {}")
        assert stmt.init is None

    def test_for(self):
        stmt = parse_stmt("for (var integer i := 0; i < 10; i := i + 1) { f(i) }")
        assert isinstance(stmt, ForStmt)
        assert isinstance(stmt.init, VarDecl)
        assert stmt.condition.operator == "<"
        assert isinstance(stmt.post, Assignment)

    def test_for_with_empty_clauses(self):
        stmt = parse_stmt("for (;;) {}")
        assert stmt == ForStmt(body=Block())

    def test_for_range(self):
        stmt = parse_stmt("for (var x in items) {}")
        assert stmt == ForRangeStmt(declaration="var", name="x", range=name("items"), body=Block())

    def test_for_range_without_declaration(self):
        assert parse_stmt("for (x in items) {}").declaration is None

    def test_while(self):
        stmt = parse_stmt("while (i < n) { i := i + 1 }")
        assert isinstance(stmt, WhileStmt)

    def test_do_while(self):
        stmt = parse_stmt("do { i := i + 1 } while (i < 10)")
        assert isinstance(stmt, DoWhileStmt)
        assert stmt.condition.operator == "<"


class TestSelect:
    def test_select(self):
        stmt = parse_stmt("select (x) { case (1, 2) { f() } case else { g() } }")
        assert isinstance(stmt, SelectStmt)
        assert stmt.clauses[0] == SelectCase(
            expressions=[num("1"), num("2")],
            body=Block(statements=[ExprStmt(expr=CallExpr(function=name("f")))]),
        )
        assert isinstance(stmt.clauses[1], SelectElse)

    def test_case_list_trailing_comma(self):
        stmt = parse_stmt("select (x) { case (1, 2,) {} }")
        assert stmt.clauses[0].expressions == [num("1"), num("2")]

    def test_select_without_braces(self):
        stmt = parse_stmt("select (x) case (1) {} case else {}")
        assert len(stmt.clauses) == 2

    def test_select_union(self):
        stmt = parse_stmt("select union (u) { case (a) {} }")
        assert isinstance(stmt, SelectUnionStmt)

    def test_case_else_must_be_last(self):
        with pytest.raises(ParseError, match="must be the last clause"):
            parse_stmt("select (x) { case else {} case (1) {} }")

    def test_select_needs_a_case(self):
        with pytest.raises(ParseError, match="Expected 'case'"):
            parse_stmt("select (x) {}")


class TestAlt:
    def test_guarded_alternatives(self):
        stmt = parse_stmt("""alt {
            [] p.receive(T: ?) -> value v { setverdict(pass) }
            [x > 0] t.timeout
            [else] { stop }
        }""")
        assert isinstance(stmt, AltStmt)
        first, second, third = stmt.body.items
        assert first.condition is None
        assert isinstance(first.communication, Redirection)
        assert first.communication.value == name("v")
        assert second.condition.operator == ">"
        assert second.body is None
        assert isinstance(third, GuardedElse)

    def test_nodefault(self):
        stmt = parse_stmt("alt @nodefault { [] t.timeout }")
        assert stmt.nodefault is True

    def test_interleave(self):
        stmt = parse_stmt("interleave { [] p.receive {} [] q.receive {} }")
        assert isinstance(stmt, InterleaveStmt)
        assert len(stmt.body.items) == 2

    def test_local_declaration_in_alt(self):
        stmt = parse_stmt("alt { var integer i; [] t.timeout }")
        assert isinstance(stmt.body.items[0], VarDecl)
        assert isinstance(stmt.body.items[1], GuardedStmt)

    def test_arm_without_body_followed_by_arm(self):
        stmt = parse_stmt("alt {\n [] p.receive -> value v\n [] t.timeout\n}")
        assert stmt.body.items[0].communication.value == name("v")
        assert len(stmt.body.items) == 2


class TestRedirection:
    def test_full_redirect(self):
        stmt = parse_stmt("p.getcall(S: {}) -> param (a, b) sender s @index value i")
        assert isinstance(stmt, Redirection)
        assert stmt.sender == name("s")
        assert stmt.index == name("i")
        assert len(stmt.param.values) == 2

    def test_clause_order_is_free(self):
        stmt = parse_stmt("p.receive -> sender s value v timestamp t")
        assert (stmt.value, stmt.sender, stmt.timestamp) == (name("v"), name("s"), name("t"))

    def test_redirect_needs_a_clause(self):
        with pytest.raises(ParseError, match="redirect clause"):
            parse_stmt("p.receive -> x")


# ---------------------------------------------------------------------------
# Error recovery
# ---------------------------------------------------------------------------

class TestStatementRecovery:
    def test_bad_statement_becomes_error_node(self):
        statements, result = parse_control("x := ;\ny := 1;")
        assert isinstance(statements[0], ErrorNode)
        assert statements[1] == Assignment(left=name("y"), right=num("1"))
        assert len(result.errors) == 1
        assert result.errors[0].code == DiagnosticCode.SYNTAX_ERROR

    def test_error_node_keeps_skipped_text(self):
        statements, _ = parse_control("x := ;")
        assert statements[0].text == "x := ;"
        assert "Expected expression" in statements[0].message

    def test_recovery_at_next_line(self):
        statements, result = parse_control("x := 1 2 3\ny := 2")
        assert [type(s) for s in statements] == [Assignment, ErrorNode, Assignment]
        assert statements[1].text == "2 3"
        assert len(result.errors) == 1

    def test_unclosed_paren_does_not_swallow_block(self):
        statements, result = parse_control("x := (1 +\nf()")
        assert isinstance(statements[0], ErrorNode)
        assert statements[0].text == "x := (1 +\nf()"
        assert len(result.errors) == 1
        assert result.tree.definitions[0].body is not None

    def test_recovery_inside_nested_block(self):
        statements, result = parse_control("if (a) { x := ; }\ny := 2")
        assert isinstance(statements[0], IfStmt)
        assert isinstance(statements[0].then_block.statements[0], ErrorNode)
        assert isinstance(statements[1], Assignment)
        assert len(result.errors) == 1

    def test_several_errors_collected(self):
        _, result = parse_control("x := ;\ny := ;\nz := 1")
        assert len(result.errors) == 2

    @pytest.mark.parametrize("opener, closer", [
        ("var T x := function() { ", " }"),
        ("return function() { ", " }"),
        ("if (f(function() { ", " })) {}"),
    ])
    def test_nested_error_is_parsed_once(self, monkeypatch, opener, closer):
        depth = 20
        calls = []
        parse_statement = Parser._parse_statement

        def counting(self):
            calls.append(self.pos)
            return parse_statement(self)

        monkeypatch.setattr(Parser, "_parse_statement", counting)
        _, result = parse_control(opener * depth + "y := ;" + closer * depth)
        assert len(result.errors) == 1
        assert len(calls) <= 2 * depth

    def test_no_recovery_raises(self):
        with pytest.raises(ParseError):
            Parser(Lexer("{ x := ; }").tokenize(), recover=False).parse_block()

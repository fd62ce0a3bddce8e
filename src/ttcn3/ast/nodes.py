"""Immutable syntax tree node definitions for TTCN-3.

One dataclass per grammar rule. The dataclass fields are the rule's
schema: a field holding None, False, "" or an empty list is absent, and
absence is meaningful (a `Function` without `body` is a forward
declaration, a `BreakStmt` without `label` is unlabelled).

Source locations are carried by every node but excluded from equality,
so two trees compare equal when their kinds and fields match.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ttcn3.lexer.tokens import Token


# ---------------------------------------------------------------------------
# Source location
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Pinpoints a span in a source file.

    Lines and columns are 1-based; `end_column` and `end_offset` point
    just past the last character.
    """

    file: str
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None
    offset: int = 0
    end_offset: int = 0

    @classmethod
    def of_token(cls, tok: Token) -> SourceLocation:
        return cls.between(tok, tok)

    @classmethod
    def between(cls, start: Token, end: Token) -> SourceLocation:
        """Span from the first character of `start` to the last of `end`."""
        text = end.value
        newlines = text.count("\n")
        if newlines:
            end_line = end.line + newlines
            end_column = len(text) - text.rfind("\n")
        else:
            end_line = end.line
            end_column = end.column + len(text)
        return cls(
            file=start.file, line=start.line, column=start.column,
            end_line=end_line, end_column=end_column,
            offset=start.offset, end_offset=end.offset + len(text),
        )


# ---------------------------------------------------------------------------
# Base node
# ---------------------------------------------------------------------------

UNKNOWN_LOCATION = SourceLocation(file="<unknown>", line=0, column=0)


@dataclass(frozen=True)
class Node:
    """Base class for all syntax tree nodes."""

    loc: SourceLocation = field(default=UNKNOWN_LOCATION, compare=False, repr=False)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def populated_fields(self) -> dict[str, Any]:
        """Return the schema fields that are present, in declaration order."""
        result = {}
        for f in fields(self):
            if f.name == "loc":
                continue
            value = getattr(self, f.name)
            if value is None or value is False or value == "" or value == []:
                continue
            result[f.name] = value
        return result

    def children(self) -> Iterator[Node]:
        """Yield direct child nodes in field order."""
        for value in self.populated_fields().values():
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and all of its descendants, pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.children())))


@dataclass(frozen=True)
class Expr(Node):
    """Base for all expressions."""
    pass


@dataclass(frozen=True)
class Statement(Node):
    """Base for statements that are not also definitions."""
    pass


@dataclass(frozen=True)
class Definition(Node):
    """Base for module-level and nested definitions."""
    pass


@dataclass(frozen=True)
class ErrorNode(Node):
    """A region skipped during error recovery."""

    message: str = ""
    text: str = ""


# ---------------------------------------------------------------------------
# Source unit
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFile(Node):
    """Either a sequence of definitions or one bare expression, never both."""

    definitions: list[Node] = field(default_factory=list)
    expression: Expr | None = None


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NumberLiteral(Expr):
    text: str = ""

    @property
    def value(self) -> int | float:
        if any(c in self.text for c in ".eE"):
            return float(self.text.replace("_", ""))
        return int(self.text)


@dataclass(frozen=True)
class CharstringLiteral(Expr):
    text: str = ""  # as written, quotes included

    @property
    def value(self) -> str:
        return self.text[1:-1].replace('""', '"').replace('\\"', '"')


@dataclass(frozen=True)
class BitstringLiteral(Expr):
    text: str = ""

    @property
    def digits(self) -> str:
        return self.text[1:-2]


@dataclass(frozen=True)
class HexstringLiteral(Expr):
    text: str = ""

    @property
    def digits(self) -> str:
        return self.text[1:-2]


@dataclass(frozen=True)
class OctetstringLiteral(Expr):
    text: str = ""

    @property
    def digits(self) -> str:
        return self.text[1:-2]


@dataclass(frozen=True)
class MalformedStringLiteral(Expr):
    text: str = ""


@dataclass(frozen=True)
class BooleanLiteral(Expr):
    text: str = ""  # true, false

    @property
    def value(self) -> bool:
        return self.text == "true"


@dataclass(frozen=True)
class VerdictLiteral(Expr):
    value: str = ""  # none, pass, inconc, fail, error


@dataclass(frozen=True)
class NullLiteral(Expr):
    pass


@dataclass(frozen=True)
class OmitLiteral(Expr):
    pass


@dataclass(frozen=True)
class NotUsedLiteral(Expr):
    """The `-` placeholder for a field or argument left unchanged."""
    pass


@dataclass(frozen=True)
class AnyValue(Expr):
    """Matching symbol `?`."""
    pass


@dataclass(frozen=True)
class AnyValueOrNone(Expr):
    """Matching symbol `*`."""
    pass


# ---------------------------------------------------------------------------
# Operators and compound expressions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnaryExpr(Expr):
    operator: str = ""
    operand: Expr | None = None


@dataclass(frozen=True)
class BinaryExpr(Expr):
    left: Expr | None = None
    operator: str = ""
    right: Expr | None = None


@dataclass(frozen=True)
class TemplateValues(Expr):
    """A parenthesized list `( e, ... )`; one element is plain grouping."""

    values: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class RangeExpr(Expr):
    lower: Expr | None = None
    upper: Expr | None = None


@dataclass(frozen=True)
class CompositeLiteral(Expr):
    elements: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class FieldAssignment(Expr):
    """`target := value` inside a composite literal or argument list."""

    target: Expr | None = None
    value: Expr | None = None


@dataclass(frozen=True)
class InlineTemplate(Expr):
    type: Expr | None = None
    value: Expr | None = None


@dataclass(frozen=True)
class FunctionLiteral(Expr):
    modifiers: list[str] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    return_type: ReturnType | None = None
    exception: list[Expr] = field(default_factory=list)
    body: Block | None = None


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Identifier(Expr):
    """A plain name, or one of `this`, `self`, `???`, `any port` etc."""

    name: str = ""


@dataclass(frozen=True)
class SelectorExpr(Expr):
    operand: Expr | None = None
    field: Identifier | None = None


@dataclass(frozen=True)
class IndexExpr(Expr):
    operand: Expr | None = None
    indices: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class CallExpr(Expr):
    function: Expr | None = None
    arguments: list[Expr] = field(default_factory=list)
    variadic: bool = False


@dataclass(frozen=True)
class FromCall(Expr):
    """`any from x` / `all from x`; the argument is always a bare name."""

    quantifier: str = ""
    argument: Identifier | None = None


@dataclass(frozen=True)
class TypeInstantiation(Expr):
    type: Identifier | None = None
    arguments: list[Expr] = field(default_factory=list)


REFERENCE_KINDS = (Identifier, SelectorExpr, IndexExpr, CallExpr, FromCall, TypeInstantiation)


def is_reference(node: Node | None) -> bool:
    return isinstance(node, REFERENCE_KINDS)


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TemplateRestriction(Node):
    """`template`, `template (omit)` or a bare `omit`/`value`/`present`."""

    template: bool = False
    restriction: str | None = None


@dataclass(frozen=True)
class Parameter(Node):
    direction: str | None = None
    template_restriction: TemplateRestriction | None = None
    type: Expr | None = None
    name: str = ""
    array_def: list[Expr] = field(default_factory=list)
    variadic: bool = False
    default: Expr | None = None


@dataclass(frozen=True)
class TypeParameter(Node):
    type: Expr | None = None
    name: str = ""
    default: Expr | None = None


@dataclass(frozen=True)
class ReturnType(Node):
    template_restriction: TemplateRestriction | None = None
    type: Expr | None = None


@dataclass(frozen=True)
class Declarator(Node):
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    array_def: list[Expr] = field(default_factory=list)
    value: Expr | None = None


@dataclass(frozen=True)
class Boundary(Node):
    exclusive: bool = False
    value: Expr | None = None


@dataclass(frozen=True)
class LengthSpec(Node):
    lower: Boundary | None = None
    upper: Boundary | None = None


@dataclass(frozen=True)
class Field(Node):
    default: bool = False
    type: Expr | None = None
    name: str | None = None
    array_def: list[Expr] = field(default_factory=list)
    value_constraint: TemplateValues | None = None
    length_constraint: LengthSpec | None = None
    optional: bool = False


@dataclass(frozen=True)
class EnumeratedValue(Node):
    name: str = ""
    values: list[Expr] | None = None


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AttributeSpecifier(Node):
    reference: Expr | None = None
    exceptions: list[Expr] | None = None


@dataclass(frozen=True)
class Attribute(Node):
    kind: str = ""                      # extension, encode, variant, display, optional
    modifier: str | None = None         # override, @local
    specifiers: list[AttributeSpecifier] | None = None
    encodings: list[CharstringLiteral] | None = None
    value: CharstringLiteral | None = None


@dataclass(frozen=True)
class Attributes(Node):
    items: list[Attribute] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CatchClause(Node):
    statements: list[Node] = field(default_factory=list)


@dataclass(frozen=True)
class FinallyClause(Node):
    statements: list[Node] = field(default_factory=list)


@dataclass(frozen=True)
class Block(Statement):
    statements: list[Node] = field(default_factory=list)
    catches: list[CatchClause] = field(default_factory=list)
    finally_clause: FinallyClause | None = None


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExprStmt(Statement):
    expr: Expr | None = None


@dataclass(frozen=True)
class Assignment(Statement):
    left: Expr | None = None
    right: Expr | None = None


@dataclass(frozen=True)
class Redirection(Statement):
    reference: Expr | None = None
    value: Expr | None = None
    sender: Expr | None = None
    verdict: Expr | None = None
    param: Expr | None = None
    timestamp: Expr | None = None
    index: Expr | None = None


@dataclass(frozen=True)
class LabelStmt(Statement):
    name: str = ""


@dataclass(frozen=True)
class GotoStmt(Statement):
    name: str = ""


@dataclass(frozen=True)
class BreakStmt(Statement):
    label: str | None = None


@dataclass(frozen=True)
class ContinueStmt(Statement):
    label: str | None = None


@dataclass(frozen=True)
class ReturnStmt(Statement):
    value: Expr | None = None


@dataclass(frozen=True)
class IfStmt(Statement):
    init: Node | None = None
    condition: Expr | None = None
    then_block: Block | None = None
    else_branch: IfStmt | Block | None = None


@dataclass(frozen=True)
class ForStmt(Statement):
    init: Node | None = None
    condition: Expr | None = None
    post: Node | None = None
    body: Block | None = None


@dataclass(frozen=True)
class ForRangeStmt(Statement):
    declaration: str | None = None  # var, const
    name: str = ""
    range: Expr | None = None
    body: Block | None = None


@dataclass(frozen=True)
class WhileStmt(Statement):
    init: Node | None = None
    condition: Expr | None = None
    body: Block | None = None


@dataclass(frozen=True)
class DoWhileStmt(Statement):
    body: Block | None = None
    condition: Expr | None = None


@dataclass(frozen=True)
class SelectCase(Node):
    expressions: list[Expr] = field(default_factory=list)
    body: Block | None = None


@dataclass(frozen=True)
class SelectElse(Node):
    body: Block | None = None


@dataclass(frozen=True)
class SelectStmt(Statement):
    init: Node | None = None
    expression: Expr | None = None
    clauses: list[SelectCase | SelectElse] = field(default_factory=list)


@dataclass(frozen=True)
class SelectUnionStmt(SelectStmt):
    pass


@dataclass(frozen=True)
class SelectClassStmt(SelectStmt):
    pass


@dataclass(frozen=True)
class SelectTypeStmt(SelectStmt):
    pass


@dataclass(frozen=True)
class GuardedStmt(Node):
    """`[condition] communication body?`; an empty guard has no condition."""

    condition: Expr | None = None
    communication: Node | None = None
    body: Block | None = None


@dataclass(frozen=True)
class GuardedElse(Node):
    body: Block | None = None


@dataclass(frozen=True)
class AltBlock(Node):
    items: list[Node] = field(default_factory=list)
    catches: list[CatchClause] = field(default_factory=list)
    finally_clause: FinallyClause | None = None


@dataclass(frozen=True)
class AltStmt(Statement):
    nodefault: bool = False
    body: AltBlock | None = None


@dataclass(frozen=True)
class InterleaveStmt(Statement):
    nodefault: bool = False
    body: AltBlock | None = None


# ---------------------------------------------------------------------------
# Declarations (definitions that may also appear as statements)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VarDecl(Definition):
    visibility: str | None = None
    template_restriction: TemplateRestriction | None = None
    type: Expr | None = None
    declarators: list[Declarator] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ConstDecl(VarDecl):
    pass


@dataclass(frozen=True)
class ModuleParameter(VarDecl):
    pass


@dataclass(frozen=True)
class TimerDecl(Definition):
    visibility: str | None = None
    declarators: list[Declarator] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class PortDecl(Definition):
    visibility: str | None = None
    type: Expr | None = None
    declarators: list[Declarator] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Template(Definition):
    visibility: str | None = None
    restriction: str | None = None
    modifiers: list[str] = field(default_factory=list)
    type: Expr | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] | None = None
    modifies: Expr | None = None
    value: Expr | None = None
    attributes: Attributes | None = None


# ---------------------------------------------------------------------------
# Module structure
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Module(Definition):
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    language: list[CharstringLiteral] | None = None
    definitions: list[Node] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Group(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    definitions: list[Node] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Friend(Definition):
    private: bool = False
    modules: list[Expr] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ExceptSpec(Node):
    kind: str = ""
    references: list[Expr] = field(default_factory=list)
    all: bool = False


@dataclass(frozen=True)
class ImportItem(Node):
    reference: Expr | None = None
    exceptions: list[ExceptSpec] | None = None


@dataclass(frozen=True)
class ImportSpec(Node):
    kind: str = ""
    items: list[ImportItem] = field(default_factory=list)
    all: bool = False
    except_references: list[Expr] | None = None


@dataclass(frozen=True)
class ImportDefinition(Definition):
    visibility: str | None = None
    module: Expr | None = None
    local_name: str | None = None
    all: bool = False
    exceptions: list[ExceptSpec] | None = None
    specs: list[ImportSpec] = field(default_factory=list)
    attributes: Attributes | None = None


# ---------------------------------------------------------------------------
# Behaviour definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Function(Definition):
    """A function; without `body` it is a forward declaration."""

    visibility: str | None = None
    modifiers: list[str] = field(default_factory=list)
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    extends: Expr | None = None
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    return_type: ReturnType | None = None
    exception: list[Expr] = field(default_factory=list)
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ExternalFunction(Definition):
    visibility: str | None = None
    modifiers: list[str] = field(default_factory=list)
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    extends: Expr | None = None
    return_type: ReturnType | None = None
    exception: list[Expr] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Altstep(Definition):
    visibility: str | None = None
    modifiers: list[str] = field(default_factory=list)
    interleave: bool = False
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    exception: list[Expr] = field(default_factory=list)
    body: AltBlock | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Testcase(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    execute_on: Expr | None = None
    runs_on: Expr | None = None
    system: Expr | None = None
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Configuration(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    runs_on: Expr | None = None
    system: Expr | None = None
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Control(Definition):
    visibility: str | None = None
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Constructor(Definition):
    visibility: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    super_call: Expr | None = None
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Signature(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    exception: list[Expr] = field(default_factory=list)
    return_type: ReturnType | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ModeDefinition(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] | None = None
    runs_on: Expr | None = None
    attributes: Attributes | None = None


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AltstepType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class TestcaseType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    runs_on: Expr | None = None
    system: Expr | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class FunctionType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    parameters: list[Parameter] = field(default_factory=list)
    extends: Expr | None = None
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    return_type: ReturnType | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ClassType(Definition):
    visibility: str | None = None
    external: bool = False
    modifiers: list[str] = field(default_factory=list)
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    super_class: Expr | None = None
    runs_on: Expr | None = None
    mtc: Expr | None = None
    system: Expr | None = None
    definitions: list[Node] = field(default_factory=list)
    destructor: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class ComponentType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    extends: list[Expr] = field(default_factory=list)
    body: Block | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class Subtype(Definition):
    visibility: str | None = None
    super_type: Expr | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    array_def: list[Expr] = field(default_factory=list)
    value_constraint: TemplateValues | None = None
    length_constraint: LengthSpec | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class RecordType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    fields: list[Field] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class SetType(RecordType):
    pass


@dataclass(frozen=True)
class UnionType(RecordType):
    pass


@dataclass(frozen=True)
class RecordOfType(Definition):
    visibility: str | None = None
    length_constraint: LengthSpec | None = None
    element_type: Expr | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    element_value_constraint: TemplateValues | None = None
    element_length_constraint: LengthSpec | None = None
    attributes: Attributes | None = None


@dataclass(frozen=True)
class SetOfType(RecordOfType):
    pass


@dataclass(frozen=True)
class EnumeratedType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    values: list[EnumeratedValue] = field(default_factory=list)
    attributes: Attributes | None = None


@dataclass(frozen=True)
class MapType(Definition):
    visibility: str | None = None
    key_type: Expr | None = None
    value_type: Expr | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    attributes: Attributes | None = None


# ---------------------------------------------------------------------------
# Port types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PortTranslation(Node):
    """A message type, optionally `from|to outer_type with translator()`."""

    type: Expr | None = None
    direction: str | None = None
    outer_type: Expr | None = None
    translator: Expr | None = None


@dataclass(frozen=True)
class PortAddress(Node):
    translation: PortTranslation | None = None


@dataclass(frozen=True)
class PortMapParam(Node):
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class PortUnmapParam(Node):
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class PortMessageTypes(Node):
    direction: str = ""  # in, out, inout
    messages: list[PortTranslation] = field(default_factory=list)


@dataclass(frozen=True)
class PortType(Definition):
    visibility: str | None = None
    name: str = ""
    type_parameters: list[TypeParameter] | None = None
    map_to: list[Expr] = field(default_factory=list)
    connect_to: list[Expr] = field(default_factory=list)
    kind: str = ""  # procedure, message, stream, mixed
    realtime: bool = False
    port_attributes: list[Node] | None = None
    attributes: Attributes | None = None

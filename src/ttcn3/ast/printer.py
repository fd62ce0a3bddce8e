"""TTCN-3 source renderer.

Serializes a syntax tree back to source text with consistent layout:
one statement or definition per line, blocks indented, a `;` after every
list item. Parsing the rendered text again yields a tree equal to the
original (locations aside), so the renderer doubles as a formatter.

Usage:
    from ttcn3.ast.printer import render
    text = render(parse_source(source).tree)
"""

from __future__ import annotations

from dataclasses import dataclass

from ttcn3.ast.nodes import (
    Attributes,
    Block,
    CatchClause,
    ConstDecl,
    Declarator,
    Expr,
    FinallyClause,
    LengthSpec,
    ModuleParameter,
    Node,
    Parameter,
    ReturnType,
    SelectClassStmt,
    SelectTypeStmt,
    SelectUnionStmt,
    SetOfType,
    SetType,
    TemplateRestriction,
    TypeParameter,
    UnionType,
    VarDecl,
)

_VARIABLE_KEYWORDS = {VarDecl: "var", ConstDecl: "const", ModuleParameter: "modulepar"}

_SELECT_KEYWORDS = {SelectUnionStmt: "select union", SelectClassStmt: "select class",
                    SelectTypeStmt: "select type"}


@dataclass
class FormatOptions:
    """Configuration for the renderer."""
    indent: str = "    "
    blank_line_between_definitions: bool = True


class Printer:
    """Renders nodes to TTCN-3 text.

    Dispatch is by node class, walking the MRO so that subclasses such as
    `ConstDecl` share the renderer of their base.
    """

    def __init__(self, options: FormatOptions | None = None):
        self.options = options or FormatOptions()
        self._level = 0

    def print(self, node: Node) -> str:
        for cls in type(node).__mro__:
            method = getattr(self, f"_print_{cls.__name__}", None)
            if method is not None:
                return method(node)
        raise TypeError(f"Cannot render node kind {type(node).__name__}")

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    def _indent(self) -> str:
        return self.options.indent * self._level

    def _items(self, items: list[Node], separator: str = "\n") -> str:
        """Render `{ item; ... }` with one item per line."""
        if not items:
            return "{}"
        self._level += 1
        lines = [f"{self._indent()}{self.print(item)};" for item in items]
        self._level -= 1
        return "{\n" + separator.join(lines) + f"\n{self._indent()}}}"

    def _join(self, nodes: list[Node], sep: str = ", ") -> str:
        return sep.join(self.print(n) for n in nodes)

    @staticmethod
    def _words(*parts: str | None) -> str:
        return " ".join(p for p in parts if p)

    def _opt(self, prefix: str, node: Node | None) -> str | None:
        if node is None:
            return None
        return f"{prefix} {self.print(node)}" if prefix else self.print(node)

    def _refs(self, prefix: str, refs: list[Expr]) -> str | None:
        return f"{prefix} {self._join(refs)}" if refs else None

    def _exception(self, refs: list[Expr]) -> str | None:
        return f"exception ({self._join(refs)})" if refs else None

    def _params(self, params: list[Parameter] | None) -> str:
        if params is None:
            return ""
        return f"({self._join(params)})"

    def _name(self, name: str, type_parameters: list[TypeParameter] | None) -> str:
        if type_parameters is None:
            return name
        return f"{name}<{self._join(type_parameters)}>"

    def _dims(self, dims: list[Expr]) -> str:
        return "".join(f"[{self.print(d)}]" for d in dims)

    def _attributes(self, attributes: Attributes | None) -> str | None:
        return self.print(attributes) if attributes is not None else None

    def _handlers(self, catches: list[CatchClause], finally_clause: FinallyClause | None) -> str:
        parts = [self.print(c) for c in catches]
        if finally_clause is not None:
            parts.append(self.print(finally_clause))
        return "".join(f" {p}" for p in parts)

    # ------------------------------------------------------------------
    # Source unit
    # ------------------------------------------------------------------

    def _print_SourceFile(self, node) -> str:
        if node.expression is not None:
            return self.print(node.expression) + "\n"
        sep = "\n\n" if self.options.blank_line_between_definitions else "\n"
        return sep.join(f"{self.print(d)};" for d in node.definitions) + ("\n" if node.definitions else "")

    def _print_ErrorNode(self, node) -> str:
        return node.text

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _print_NumberLiteral(self, node) -> str:
        return node.text

    _print_CharstringLiteral = _print_NumberLiteral
    _print_BitstringLiteral = _print_NumberLiteral
    _print_HexstringLiteral = _print_NumberLiteral
    _print_OctetstringLiteral = _print_NumberLiteral
    _print_MalformedStringLiteral = _print_NumberLiteral
    _print_BooleanLiteral = _print_NumberLiteral

    def _print_VerdictLiteral(self, node) -> str:
        return node.value

    def _print_NullLiteral(self, node) -> str:
        return "null"

    def _print_OmitLiteral(self, node) -> str:
        return "omit"

    def _print_NotUsedLiteral(self, node) -> str:
        return "-"

    def _print_AnyValue(self, node) -> str:
        return "?"

    def _print_AnyValueOrNone(self, node) -> str:
        return "*"

    def _print_Identifier(self, node) -> str:
        return node.name

    def _print_UnaryExpr(self, node) -> str:
        operand = self.print(node.operand)
        # `- -a` must not fuse into the `--` token.
        if node.operator[:1].isalpha() or operand[:1] in ("+", "-"):
            return f"{node.operator} {operand}"
        return f"{node.operator}{operand}"

    def _print_BinaryExpr(self, node) -> str:
        return f"{self.print(node.left)} {node.operator} {self.print(node.right)}"

    def _print_TemplateValues(self, node) -> str:
        return f"({self._join(node.values)})"

    def _print_RangeExpr(self, node) -> str:
        return f"{self.print(node.lower)} .. {self.print(node.upper)}"

    def _print_CompositeLiteral(self, node) -> str:
        if not node.elements:
            return "{}"
        return f"{{ {self._join(node.elements)} }}"

    def _print_FieldAssignment(self, node) -> str:
        return f"{self.print(node.target)} := {self.print(node.value)}"

    def _print_InlineTemplate(self, node) -> str:
        return f"{self.print(node.type)}: {self.print(node.value)}"

    def _print_FunctionLiteral(self, node) -> str:
        head = "function" + "".join(f" {m}" for m in node.modifiers)
        return self._words(
            head + self._params(node.parameters),
            self._opt("runs on", node.runs_on), self._opt("mtc", node.mtc),
            self._opt("system", node.system), self._opt("", node.return_type),
            self._exception(node.exception), self.print(node.body),
        )

    def _print_SelectorExpr(self, node) -> str:
        return f"{self.print(node.operand)}.{self.print(node.field)}"

    def _print_IndexExpr(self, node) -> str:
        return f"{self.print(node.operand)}[{self._join(node.indices)}]"

    def _print_CallExpr(self, node) -> str:
        args = [self.print(a) for a in node.arguments]
        if node.variadic:
            args.append("...")
        return f"{self.print(node.function)}({', '.join(args)})"

    def _print_FromCall(self, node) -> str:
        return f"{node.quantifier} from {self.print(node.argument)}"

    def _print_TypeInstantiation(self, node) -> str:
        args = self._join(node.arguments)
        # `>>` would lex as a shift operator.
        close = " >" if args.endswith(">") else ">"
        return f"{self.print(node.type)}<{args}{close}"

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def _print_TemplateRestriction(self, node: TemplateRestriction) -> str:
        if node.template:
            return f"template ({node.restriction})" if node.restriction else "template"
        return node.restriction or ""

    def _print_Parameter(self, node: Parameter) -> str:
        text = self._words(
            node.direction, self._opt("", node.template_restriction),
            self.print(node.type), node.name,
        )
        text += self._dims(node.array_def)
        if node.variadic:
            text += " ..."
        if node.default is not None:
            text += f" := {self.print(node.default)}"
        return text

    def _print_TypeParameter(self, node: TypeParameter) -> str:
        text = f"in {self.print(node.type)} {node.name}"
        if node.default is not None:
            text += f" := {self.print(node.default)}"
        return text

    def _print_ReturnType(self, node: ReturnType) -> str:
        return self._words("return", self._opt("", node.template_restriction), self.print(node.type))

    def _print_Declarator(self, node: Declarator) -> str:
        text = self._name(node.name, node.type_parameters) + self._dims(node.array_def)
        if node.value is not None:
            text += f" := {self.print(node.value)}"
        return text

    def _print_Boundary(self, node) -> str:
        return ("!" if node.exclusive else "") + self.print(node.value)

    def _print_LengthSpec(self, node: LengthSpec) -> str:
        if node.lower is not None:
            return f"length({self.print(node.lower)} .. {self.print(node.upper)})"
        return f"length({self.print(node.upper)})"

    def _print_Field(self, node) -> str:
        return self._words(
            "@default" if node.default else None,
            self.print(node.type),
            (node.name or "") + self._dims(node.array_def),
            self._opt("", node.value_constraint), self._opt("", node.length_constraint),
            "optional" if node.optional else None,
        )

    def _print_EnumeratedValue(self, node) -> str:
        if node.values is None:
            return node.name
        return f"{node.name}({self._join(node.values)})"

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def _print_Attributes(self, node) -> str:
        return "with " + self._items(node.items)

    def _print_Attribute(self, node) -> str:
        specifiers = f"({self._join(node.specifiers)})" if node.specifiers else None
        encodings = f"{{{self._join(node.encodings)}}}" if node.encodings else None
        return self._words(node.kind, node.modifier, specifiers, encodings, self.print(node.value))

    def _print_AttributeSpecifier(self, node) -> str:
        if node.exceptions is None:
            return self.print(node.reference)
        return f"{self.print(node.reference)} except {{{self._join(node.exceptions)}}}"

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _print_Block(self, node: Block) -> str:
        return self._items(node.statements) + self._handlers(node.catches, node.finally_clause)

    def _print_CatchClause(self, node) -> str:
        return "catch " + self._items(node.statements)

    def _print_FinallyClause(self, node) -> str:
        return "finally " + self._items(node.statements)

    def _print_ExprStmt(self, node) -> str:
        return self.print(node.expr)

    def _print_Assignment(self, node) -> str:
        return f"{self.print(node.left)} := {self.print(node.right)}"

    def _print_Redirection(self, node) -> str:
        parts = [self.print(node.reference), "->"]
        for word in ("value", "sender", "verdict", "param", "timestamp"):
            value = getattr(node, word)
            if value is not None:
                parts.append(f"{word} {self.print(value)}")
        if node.index is not None:
            parts.append(f"@index value {self.print(node.index)}")
        return " ".join(parts)

    def _print_LabelStmt(self, node) -> str:
        return f"label {node.name}"

    def _print_GotoStmt(self, node) -> str:
        return f"goto {node.name}"

    def _print_BreakStmt(self, node) -> str:
        return self._words("break", node.label)

    def _print_ContinueStmt(self, node) -> str:
        return self._words("continue", node.label)

    def _print_ReturnStmt(self, node) -> str:
        return self._words("return", self._opt("", node.value))

    def _init(self, init: Node | None) -> str:
        return f"{self.print(init)}; " if init is not None else ""

    def _print_IfStmt(self, node) -> str:
        text = f"if ({self._init(node.init)}{self.print(node.condition)}) {self.print(node.then_block)}"
        if node.else_branch is not None:
            text += f" else {self.print(node.else_branch)}"
        return text

    def _print_ForStmt(self, node) -> str:
        init = self.print(node.init) if node.init is not None else ""
        condition = self.print(node.condition) if node.condition is not None else ""
        post = self.print(node.post) if node.post is not None else ""
        return f"for ({init}; {condition}; {post}) {self.print(node.body)}"

    def _print_ForRangeStmt(self, node) -> str:
        iterator = self._words(node.declaration, node.name)
        return f"for ({iterator} in {self.print(node.range)}) {self.print(node.body)}"

    def _print_WhileStmt(self, node) -> str:
        return f"while ({self._init(node.init)}{self.print(node.condition)}) {self.print(node.body)}"

    def _print_DoWhileStmt(self, node) -> str:
        return f"do {self.print(node.body)} while ({self.print(node.condition)})"

    def _print_SelectStmt(self, node) -> str:
        keyword = _SELECT_KEYWORDS.get(type(node), "select")
        head = f"{keyword} ({self._init(node.init)}{self.print(node.expression)})"
        self._level += 1
        clauses = [f"{self._indent()}{self.print(c)}" for c in node.clauses]
        self._level -= 1
        return f"{head} {{\n" + "\n".join(clauses) + f"\n{self._indent()}}}"

    def _print_SelectCase(self, node) -> str:
        return f"case ({self._join(node.expressions)}) {self.print(node.body)}"

    def _print_SelectElse(self, node) -> str:
        return f"case else {self.print(node.body)}"

    def _print_AltStmt(self, node) -> str:
        return self._words("alt", "@nodefault" if node.nodefault else None, self.print(node.body))

    def _print_InterleaveStmt(self, node) -> str:
        return self._words("interleave", "@nodefault" if node.nodefault else None, self.print(node.body))

    def _print_AltBlock(self, node) -> str:
        return self._items(node.items) + self._handlers(node.catches, node.finally_clause)

    def _print_GuardedStmt(self, node) -> str:
        guard = f"[{self.print(node.condition)}]" if node.condition is not None else "[]"
        return self._words(guard, self.print(node.communication), self._opt("", node.body))

    def _print_GuardedElse(self, node) -> str:
        return f"[else] {self.print(node.body)}"

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _print_VarDecl(self, node) -> str:
        return self._words(
            node.visibility, _VARIABLE_KEYWORDS[type(node)],
            self._opt("", node.template_restriction), self._opt("", node.type),
            self._join(node.declarators), self._attributes(node.attributes),
        )

    def _print_TimerDecl(self, node) -> str:
        return self._words(node.visibility, "timer", self._join(node.declarators),
                           self._attributes(node.attributes))

    def _print_PortDecl(self, node) -> str:
        return self._words(node.visibility, "port", self.print(node.type),
                           self._join(node.declarators), self._attributes(node.attributes))

    def _print_Template(self, node) -> str:
        restriction = f"({node.restriction})" if node.restriction else None
        return self._words(
            node.visibility, "template", restriction, *node.modifiers,
            self.print(node.type),
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("modifies", node.modifies), ":=", self.print(node.value),
            self._attributes(node.attributes),
        )

    # ------------------------------------------------------------------
    # Module structure
    # ------------------------------------------------------------------

    def _print_Module(self, node) -> str:
        language = f"language {self._join(node.language)}" if node.language else None
        return self._words(
            "module", self._name(node.name, node.type_parameters), language,
            self._items(node.definitions), self._attributes(node.attributes),
        )

    def _print_Group(self, node) -> str:
        return self._words(
            node.visibility, "group", self._name(node.name, node.type_parameters),
            self._items(node.definitions), self._attributes(node.attributes),
        )

    def _print_Friend(self, node) -> str:
        return self._words("private" if node.private else None, "friend module",
                           self._join(node.modules), self._attributes(node.attributes))

    def _print_ExceptSpec(self, node) -> str:
        return f"{node.kind} {'all' if node.all else self._join(node.references)}"

    def _print_ImportItem(self, node) -> str:
        if node.exceptions is None:
            return self.print(node.reference)
        return f"{self.print(node.reference)} except {self._items(node.exceptions)}"

    def _print_ImportSpec(self, node) -> str:
        if node.all:
            return self._words(node.kind, "all", self._refs("except", node.except_references or []))
        return f"{node.kind} {self._join(node.items)}"

    def _print_ImportDefinition(self, node) -> str:
        if node.all:
            body = "all"
            if node.exceptions is not None:
                body += " except " + self._items(node.exceptions)
        else:
            body = self._items(node.specs)
        local = f"-> {node.local_name}" if node.local_name else None
        return self._words(node.visibility, "import from", self.print(node.module), local,
                           body, self._attributes(node.attributes))

    # ------------------------------------------------------------------
    # Behaviour definitions
    # ------------------------------------------------------------------

    def _print_Function(self, node) -> str:
        return self._words(
            node.visibility, "function", *node.modifiers,
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("extends", node.extends), self._opt("runs on", node.runs_on),
            self._opt("mtc", node.mtc), self._opt("system", node.system),
            self._opt("", node.return_type), self._exception(node.exception),
            self._opt("", node.body), self._attributes(node.attributes),
        )

    def _print_ExternalFunction(self, node) -> str:
        return self._words(
            node.visibility, "external function", *node.modifiers,
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("extends", node.extends), self._opt("", node.return_type),
            self._exception(node.exception), self._attributes(node.attributes),
        )

    def _print_Altstep(self, node) -> str:
        return self._words(
            node.visibility, "altstep", *node.modifiers,
            "interleave" if node.interleave else None,
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("runs on", node.runs_on), self._opt("mtc", node.mtc),
            self._opt("system", node.system), self._exception(node.exception),
            self._opt("", node.body), self._attributes(node.attributes),
        )

    def _print_Testcase(self, node) -> str:
        return self._words(
            node.visibility, "testcase",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("execute on", node.execute_on), self._opt("runs on", node.runs_on),
            self._opt("system", node.system), self._opt("", node.body),
            self._attributes(node.attributes),
        )

    def _print_Configuration(self, node) -> str:
        return self._words(
            node.visibility, "configuration",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("runs on", node.runs_on), self._opt("system", node.system),
            self._opt("", node.body), self._attributes(node.attributes),
        )

    def _print_Control(self, node) -> str:
        return self._words(node.visibility, "control", self.print(node.body),
                           self._attributes(node.attributes))

    def _print_Constructor(self, node) -> str:
        return self._words(
            node.visibility, "constructor" + self._params(node.parameters),
            self._opt(":", node.super_call), self._opt("", node.body),
            self._attributes(node.attributes),
        )

    def _print_Signature(self, node) -> str:
        return self._words(
            node.visibility, "signature",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._exception(node.exception), self._opt("", node.return_type),
            self._attributes(node.attributes),
        )

    def _print_ModeDefinition(self, node) -> str:
        return self._words(
            node.visibility, "mode",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("runs on", node.runs_on), "{}", self._attributes(node.attributes),
        )

    # ------------------------------------------------------------------
    # Type definitions
    # ------------------------------------------------------------------

    def _print_AltstepType(self, node) -> str:
        return self._words(
            node.visibility, "type altstep",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("runs on", node.runs_on), self._opt("mtc", node.mtc),
            self._opt("system", node.system), self._attributes(node.attributes),
        )

    def _print_TestcaseType(self, node) -> str:
        return self._words(
            node.visibility, "type testcase",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("runs on", node.runs_on), self._opt("system", node.system),
            self._attributes(node.attributes),
        )

    def _print_FunctionType(self, node) -> str:
        return self._words(
            node.visibility, "type function",
            self._name(node.name, node.type_parameters) + self._params(node.parameters),
            self._opt("extends", node.extends), self._opt("runs on", node.runs_on),
            self._opt("mtc", node.mtc), self._opt("system", node.system),
            self._opt("", node.return_type), self._attributes(node.attributes),
        )

    def _print_ClassType(self, node) -> str:
        return self._words(
            node.visibility, "type", "external" if node.external else None, "class",
            *node.modifiers, self._name(node.name, node.type_parameters),
            self._opt("extends", node.super_class), self._opt("runs on", node.runs_on),
            self._opt("mtc", node.mtc), self._opt("system", node.system),
            self._items(node.definitions), self._opt("finally", node.destructor),
            self._attributes(node.attributes),
        )

    def _print_ComponentType(self, node) -> str:
        return self._words(
            node.visibility, "type component", self._name(node.name, node.type_parameters),
            self._refs("extends", node.extends), self._opt("", node.body),
            self._attributes(node.attributes),
        )

    def _print_Subtype(self, node) -> str:
        return self._words(
            node.visibility, "type", self.print(node.super_type),
            self._name(node.name, node.type_parameters) + self._dims(node.array_def),
            self._opt("", node.value_constraint), self._opt("", node.length_constraint),
            self._attributes(node.attributes),
        )

    def _print_RecordType(self, node) -> str:
        keyword = {SetType: "set", UnionType: "union"}.get(type(node), "record")
        if node.fields:
            self._level += 1
            lines = [f"{self._indent()}{self.print(f)}" for f in node.fields]
            self._level -= 1
            body = "{\n" + ",\n".join(lines) + f"\n{self._indent()}}}"
        else:
            body = "{}"
        return self._words(
            node.visibility, "type", keyword, self._name(node.name, node.type_parameters),
            body, self._attributes(node.attributes),
        )

    def _print_RecordOfType(self, node) -> str:
        keyword = "set" if isinstance(node, SetOfType) else "record"
        return self._words(
            node.visibility, "type", keyword, self._opt("", node.length_constraint), "of",
            self.print(node.element_type), self._name(node.name, node.type_parameters),
            self._opt("", node.element_value_constraint),
            self._opt("", node.element_length_constraint),
            self._attributes(node.attributes),
        )

    def _print_EnumeratedType(self, node) -> str:
        return self._words(
            node.visibility, "type enumerated", self._name(node.name, node.type_parameters),
            f"{{ {self._join(node.values)} }}" if node.values else "{}",
            self._attributes(node.attributes),
        )

    def _print_MapType(self, node) -> str:
        return self._words(
            node.visibility, "type map from", self.print(node.key_type),
            "to", self.print(node.value_type), self._name(node.name, node.type_parameters),
            self._attributes(node.attributes),
        )

    # ------------------------------------------------------------------
    # Port types
    # ------------------------------------------------------------------

    def _print_PortTranslation(self, node) -> str:
        if node.direction is None:
            return self.print(node.type)
        return (f"{self.print(node.type)} {node.direction} {self.print(node.outer_type)} "
                f"with {self.print(node.translator)}()")

    def _print_PortAddress(self, node) -> str:
        return f"address {self.print(node.translation)}"

    def _print_PortMapParam(self, node) -> str:
        return f"map param {self._params(node.parameters)}"

    def _print_PortUnmapParam(self, node) -> str:
        return f"unmap param {self._params(node.parameters)}"

    def _print_PortMessageTypes(self, node) -> str:
        return f"{node.direction} {self._join(node.messages)}"

    def _print_PortType(self, node) -> str:
        body = self._items(node.port_attributes) if node.port_attributes is not None else None
        return self._words(
            node.visibility, "type port", self._name(node.name, node.type_parameters),
            self._refs("map to", node.map_to), self._refs("connect to", node.connect_to),
            node.kind, "realtime" if node.realtime else None, body,
            self._attributes(node.attributes),
        )


def render(node: Node, options: FormatOptions | None = None) -> str:
    """Render `node` (usually a SourceFile) as TTCN-3 text."""
    return Printer(options).print(node)

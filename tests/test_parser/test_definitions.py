"""Tests for module-level and nested definition parsing."""

from ttcn3.ast.nodes import (
    Altstep,
    AltstepType,
    ClassType,
    ComponentType,
    Configuration,
    ConstDecl,
    Constructor,
    Control,
    EnumeratedType,
    EnumeratedValue,
    ErrorNode,
    ExceptSpec,
    ExternalFunction,
    Field,
    Friend,
    Function,
    FunctionType,
    Group,
    Identifier,
    ImportDefinition,
    MapType,
    ModeDefinition,
    Module,
    ModuleParameter,
    NumberLiteral,
    PortAddress,
    PortMapParam,
    PortMessageTypes,
    PortType,
    RangeExpr,
    RecordOfType,
    RecordType,
    SetOfType,
    Signature,
    Subtype,
    Template,
    Testcase,
    TestcaseType,
    TimerDecl,
    UnionType,
)
from ttcn3.diagnostics import DiagnosticCode
from ttcn3.parser.parser import Parser, parse_source


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse(source: str):
    """Parse source and return the top-level definitions, asserting no errors."""
    result = parse_source(source)
    assert result.errors == [], [str(d) for d in result.errors]
    return result.tree.definitions


def parse_one(source: str):
    definitions = parse(source)
    assert len(definitions) == 1
    return definitions[0]


def name(n: str) -> Identifier:
    return Identifier(name=n)


def num(text: str) -> NumberLiteral:
    return NumberLiteral(text=text)


# ---------------------------------------------------------------------------
# Modules and groups
# ---------------------------------------------------------------------------

class TestModules:
    def test_empty_module(self):
        assert parse_one("module M {}") == Module(name="M")

    def test_module_with_definitions(self):
        module = parse_one("""
            module Example {
                const integer x := 1;
                modulepar charstring PX_HOST := "localhost";
                control { f() }
            }
        """)
        assert [type(d) for d in module.definitions] == [ConstDecl, ModuleParameter, Control]

    def test_module_language(self):
        module = parse_one('module M language "TTCN-3:2018", "Ext" {}')
        assert [s.value for s in module.language] == ["TTCN-3:2018", "Ext"]

    def test_module_attributes(self):
        module = parse_one('module M {} with { encode "BER" }')
        assert module.attributes.items[0].value.value == "BER"

    def test_several_modules(self):
        assert [m.name for m in parse("module A {}\nmodule B {};")] == ["A", "B"]

    def test_module_cannot_have_visibility(self):
        result = parse_source("public module M {}")
        assert "cannot have a visibility" in result.errors[0].message

    def test_group(self):
        module = parse_one("module M { private group G { const integer x := 1 } }")
        group = module.definitions[0]
        assert isinstance(group, Group)
        assert group.visibility == "private"
        assert len(group.definitions) == 1

    def test_friend(self):
        module = parse_one("module M { friend module A, B; private friend module C }")
        assert module.definitions == [
            Friend(modules=[name("A"), name("B")]),
            Friend(private=True, modules=[name("C")]),
        ]

    def test_friend_list_trailing_comma(self):
        module = parse_one("module M { friend module A, B, ; }")
        assert module.definitions == [Friend(modules=[name("A"), name("B")])]

    def test_friend_visibility_is_not_friend_module(self):
        module = parse_one("module M { friend const integer x := 1 }")
        assert module.definitions[0].visibility == "friend"


class TestImports:
    def test_import_all(self):
        imp = parse_one("import from Other all")
        assert imp == ImportDefinition(module=name("Other"), all=True)

    def test_import_all_except(self):
        imp = parse_one("import from Other all except { type A, B; template all }")
        assert imp.exceptions == [
            ExceptSpec(kind="type", references=[name("A"), name("B")]),
            ExceptSpec(kind="template", all=True),
        ]

    def test_import_specs(self):
        imp = parse_one("""
            import from Lib -> L {
                type A, B;
                group G except { const c };
                function all except f, g;
                import all
            }
        """)
        assert imp.local_name == "L"
        assert [s.kind for s in imp.specs] == ["type", "group", "function", "import"]
        assert [i.reference for i in imp.specs[0].items] == [name("A"), name("B")]
        assert imp.specs[1].items[0].exceptions == [ExceptSpec(kind="const", references=[name("c")])]
        assert imp.specs[2].except_references == [name("f"), name("g")]
        assert imp.specs[3].all is True

    def test_public_import(self):
        assert parse_one("public import from X all").visibility == "public"


# ---------------------------------------------------------------------------
# Behaviour definitions
# ---------------------------------------------------------------------------

class TestFunctions:
    def test_full_function(self):
        func = parse_one("""
            function @deterministic f<in type T>(in integer x, out T y := 1)
                runs on C mtc M system S
                return template (value) T
                exception (E)
            {
                return y
            }
        """)
        assert isinstance(func, Function)
        assert func.modifiers == ["@deterministic"]
        assert func.type_parameters[0].type == name("type")
        assert [p.direction for p in func.parameters] == ["in", "out"]
        assert func.parameters[1].default == num("1")
        assert (func.runs_on, func.mtc, func.system) == (name("C"), name("M"), name("S"))
        assert func.return_type.template_restriction.restriction == "value"
        assert func.exception == [name("E")]
        assert len(func.body.statements) == 1

    def test_forward_declaration(self):
        func = parse_one("function f(integer x) return integer")
        assert func.body is None

    def test_parameter_forms(self):
        func = parse_one("function f(timer t, template (omit) T p, integer a[2], integer rest ...) {}")
        params = func.parameters
        assert params[0].type == name("timer")
        assert params[1].template_restriction.restriction == "omit"
        assert params[2].array_def == [num("2")]
        assert params[3].variadic is True

    def test_extends(self):
        assert parse_one("function f() extends g {}").extends == name("g")

    def test_external_function(self):
        func = parse_one("external function ef(octetstring x) return integer")
        assert isinstance(func, ExternalFunction)
        assert func.return_type.type == name("integer")

    def test_external_function_extends_before_parameters(self):
        func = parse_one("external function ef extends base (integer x)")
        assert func.extends == name("base")

    def test_altstep(self):
        alt = parse_one("altstep a_guard(timer t) runs on C { var integer i; [] t.timeout { stop } }")
        assert isinstance(alt, Altstep)
        assert len(alt.body.items) == 2

    def test_interleave_altstep(self):
        assert parse_one("altstep interleave a() {}").interleave is True

    def test_testcase(self):
        tc = parse_one("testcase tc_basic() runs on MTC system SYS { setverdict(pass) }")
        assert isinstance(tc, Testcase)
        assert tc.system == name("SYS")

    def test_testcase_execute_on(self):
        assert parse_one("testcase tc() execute on Cfg {}").execute_on == name("Cfg")

    def test_configuration(self):
        cfg = parse_one("configuration cfg() runs on C system S {}")
        assert isinstance(cfg, Configuration)

    def test_signature(self):
        sig = parse_one("signature S(in integer x) return integer exception (E1, E2)")
        assert isinstance(sig, Signature)
        assert sig.exception == [name("E1"), name("E2")]
        assert sig.return_type.type == name("integer")

    def test_signature_exception_first(self):
        sig = parse_one("signature S() exception (E) return boolean")
        assert sig.exception == [name("E")]
        assert sig.return_type is not None

    def test_mode(self):
        mode = parse_one("mode M(integer x) runs on C {}")
        assert isinstance(mode, ModeDefinition)
        assert mode.parameters[0].name == "x"

    def test_mode_without_parameters(self):
        assert parse_one("mode M {}").parameters is None

    def test_module_level_template(self):
        tmpl = parse_one("private template @fuzzy MyType t_x(integer p := 1) := { f := p }")
        assert isinstance(tmpl, Template)
        assert tmpl.visibility == "private"
        assert tmpl.modifiers == ["@fuzzy"]

    def test_module_level_timer(self):
        assert isinstance(parse_one("timer T_guard := 10.0"), TimerDecl)


# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------

class TestTypes:
    def test_record(self):
        rec = parse_one("""
            type record R {
                integer a,
                charstring b optional,
                @default integer c (1 .. 5),
                octetstring d length(2),
            }
        """)
        assert isinstance(rec, RecordType)
        assert rec.fields[0] == Field(type=name("integer"), name="a")
        assert rec.fields[1].optional is True
        assert rec.fields[2].default is True
        assert rec.fields[2].value_constraint.values == [RangeExpr(lower=num("1"), upper=num("5"))]
        assert rec.fields[3].length_constraint.upper.value == num("2")

    def test_union_and_set(self):
        union, set_ = parse("type union U { integer i, boolean b }\ntype set S {}")
        assert isinstance(union, UnionType)
        assert set_.fields == []

    def test_record_of(self):
        lst = parse_one("type record of integer IntList")
        assert lst == RecordOfType(element_type=name("integer"), name="IntList")

    def test_set_of_with_length(self):
        lst = parse_one("type set length(1 .. 10) of charstring Names")
        assert isinstance(lst, SetOfType)
        assert lst.length_constraint.lower.value == num("1")

    def test_enumerated(self):
        enum = parse_one("type enumerated Color { red, green(1), blue(2, 3) }")
        assert isinstance(enum, EnumeratedType)
        assert enum.values[0] == EnumeratedValue(name="red")
        assert enum.values[2].values == [num("2"), num("3")]

    def test_subtypes(self):
        byte, text, arr = parse(
            "type integer Byte (0 .. 255)\n"
            "type charstring Text length(1 .. !infinity)\n"
            "type integer Arr[3]\n"
        )
        assert isinstance(byte, Subtype)
        assert byte.super_type == name("integer")
        assert text.length_constraint.upper.exclusive is True
        assert text.length_constraint.upper.value == name("infinity")
        assert arr.array_def == [num("3")]

    def test_parametrized_subtype(self):
        sub = parse_one("type List<integer> IntList")
        assert sub.super_type.arguments == [name("integer")]

    def test_universal_charstring_subtype(self):
        assert parse_one("type universal charstring U").super_type == name("universal charstring")

    def test_map(self):
        assert parse_one("type map from charstring to integer Table") == MapType(
            key_type=name("charstring"), value_type=name("integer"), name="Table",
        )

    def test_component(self):
        comp = parse_one("type component C extends B, D { var integer x; port P p; timer t }")
        assert isinstance(comp, ComponentType)
        assert comp.extends == [name("B"), name("D")]
        assert len(comp.body.statements) == 3

    def test_class(self):
        cls = parse_one("""
            type external class @abstract C extends B runs on X {
                var integer x;
                constructor(integer a) : B(a) { x := a }
                function get() return integer { return x }
            } finally { log("bye") }
        """)
        assert isinstance(cls, ClassType)
        assert cls.external is True
        assert cls.modifiers == ["@abstract"]
        assert cls.super_class == name("B")
        assert isinstance(cls.definitions[1], Constructor)
        assert cls.definitions[1].super_call.function == name("B")
        assert cls.destructor is not None

    def test_behaviour_types(self):
        alt, tc, fn = parse(
            "type altstep A() runs on C\n"
            "type testcase T() runs on C system S\n"
            "type function F(integer x) return integer\n"
        )
        assert isinstance(alt, AltstepType)
        assert isinstance(tc, TestcaseType)
        assert isinstance(fn, FunctionType)
        assert fn.return_type.type == name("integer")

    def test_type_parameters(self):
        rec = parse_one("type record Pair<in type K, in type V := integer> { K key, V val }")
        assert [p.name for p in rec.type_parameters] == ["K", "V"]
        assert rec.type_parameters[1].default == name("integer")


class TestPortTypes:
    def test_message_port(self):
        port = parse_one("""
            type port P map to X connect to Y message realtime {
                in A, B;
                out C from D with f();
                address Addr;
                map param (integer x);
                var integer counter
            }
        """)
        assert isinstance(port, PortType)
        assert port.kind == "message"
        assert port.realtime is True
        assert port.map_to == [name("X")]
        attrs = port.port_attributes
        assert isinstance(attrs[0], PortMessageTypes)
        assert attrs[0].direction == "in"
        assert [m.type for m in attrs[0].messages] == [name("A"), name("B")]
        assert attrs[1].messages[0].direction == "from"
        assert attrs[1].messages[0].translator == name("f")
        assert isinstance(attrs[2], PortAddress)
        assert isinstance(attrs[3], PortMapParam)

    def test_procedure_port(self):
        port = parse_one("type port PP procedure { inout S1, S2 }")
        assert port.kind == "procedure"
        assert port.port_attributes[0].direction == "inout"

    def test_port_without_body(self):
        assert parse_one("type port P message").port_attributes is None


# ---------------------------------------------------------------------------
# Source units and recovery
# ---------------------------------------------------------------------------

class TestSourceUnits:
    def test_empty_source(self):
        result = parse_source("")
        assert result.tree.definitions == []
        assert result.tree.expression is None
        assert result.success

    def test_bare_expression(self):
        result = parse_source("1 + 2")
        assert result.tree.definitions == []
        assert result.tree.expression.operator == "+"

    def test_definitions_preferred_over_expression(self):
        result = parse_source("const integer x := 1")
        assert isinstance(result.tree.definitions[0], ConstDecl)


class TestDefinitionRecovery:
    def test_error_reported_inside_initializer(self):
        result = parse_source("module M { const integer x := 1 + ; }")
        module = result.tree.definitions[0]
        assert len(module.definitions) == 1
        assert isinstance(module.definitions[0], ErrorNode)
        assert module.definitions[0].text == "const integer x := 1 + ;"
        assert len(result.errors) == 1
        assert result.errors[0].loc.column == 35

    def test_bad_definition_in_module(self):
        result = parse_source("module M {\n  const integer x := ;\n  const integer y := 1\n}")
        module = result.tree.definitions[0]
        assert isinstance(module.definitions[0], ErrorNode)
        assert module.definitions[1].declarators[0].name == "y"
        assert len(result.errors) == 1

    def test_unknown_top_level_token(self):
        result = parse_source("foo bar\nmodule M {}")
        definitions = result.tree.definitions
        assert isinstance(definitions[0], ErrorNode)
        assert isinstance(definitions[1], Module)
        assert "Expected definition" in result.errors[0].message

    def test_unexpected_eof(self):
        result = parse_source("module M { const integer x := 1")
        assert result.errors[-1].code == DiagnosticCode.UNEXPECTED_EOF

    def test_without_recovery_whole_unit_is_error(self):
        source = "module M { const x := ; }"
        result = parse_source(source, recover=False)
        assert result.tree.definitions == [ErrorNode(message=result.errors[0].message, text=source)]
        assert len(result.errors) == 1

    def test_too_many_errors(self, monkeypatch):
        monkeypatch.setattr(Parser, "MAX_ERRORS", 3)
        body = "\n".join("const integer x := ;" for _ in range(6))
        result = parse_source(f"module M {{\n{body}\n}}")
        codes = [d.code for d in result.errors]
        assert codes.count(DiagnosticCode.SYNTAX_ERROR) == 3
        assert codes.count(DiagnosticCode.TOO_MANY_ERRORS) == 1
        assert result.tree.definitions == [
            ErrorNode(message="Too many errors (3), parsing stopped", text=f"module M {{\n{body}\n}}"),
        ]

    def test_deep_nesting_is_reported(self):
        source = "(" * 5000 + "1" + ")" * 5000
        result = parse_source(source)
        assert not result.success
        assert result.errors[0].message == "Input nested too deeply"

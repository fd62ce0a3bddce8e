"""Tests for `with` attribute blocks and length restrictions."""

from ttcn3.ast.nodes import (
    Attribute,
    AttributeSpecifier,
    Boundary,
    CharstringLiteral,
    ErrorNode,
    Identifier,
    LengthSpec,
    NumberLiteral,
    SelectorExpr,
)
from ttcn3.parser.parser import parse_source


def attributes_of(source: str) -> list[Attribute]:
    result = parse_source(source)
    assert result.errors == [], [str(d) for d in result.errors]
    return result.tree.definitions[0].attributes.items


def length_of(source: str) -> LengthSpec:
    result = parse_source(source)
    assert result.errors == [], [str(d) for d in result.errors]
    return result.tree.definitions[0].length_constraint


def text(value: str) -> CharstringLiteral:
    return CharstringLiteral(text=f'"{value}"')


class TestAttributes:
    def test_simple_attribute(self):
        assert attributes_of('type integer I with { encode "RAW" }') == [
            Attribute(kind="encode", value=text("RAW")),
        ]

    def test_several_attributes(self):
        attrs = attributes_of("""
            type record R { integer f } with {
                encode "BER";
                variant "untagged";
                extension "prototype(convert)"
            }
        """)
        assert [a.kind for a in attrs] == ["encode", "variant", "extension"]

    def test_modifiers(self):
        override, local = attributes_of('const integer c := 1 with { variant override "a"; encode @local "b" }')
        assert override.modifier == "override"
        assert local.modifier == "@local"

    def test_specifiers(self):
        (attr,) = attributes_of('type record R { integer f } with { variant (f, g.h) "x" }')
        assert attr.specifiers == [
            AttributeSpecifier(reference=Identifier(name="f")),
            AttributeSpecifier(reference=SelectorExpr(operand=Identifier(name="g"), field=Identifier(name="h"))),
        ]

    def test_specifier_exceptions(self):
        (attr,) = attributes_of('type record R { integer f } with { display (R except { a, b }) "hidden" }')
        assert attr.specifiers[0].exceptions == [Identifier(name="a"), Identifier(name="b")]

    def test_encodings(self):
        (attr,) = attributes_of('type integer I with { encode { "BER", "PER" } "v" }')
        assert attr.encodings == [text("BER"), text("PER")]
        assert attr.value == text("v")

    def test_optional_kind(self):
        (attr,) = attributes_of('module M {} with { optional "implicit omit" }')
        assert attr.kind == "optional"

    def test_semicolons_are_optional(self):
        attrs = attributes_of('type integer I with { encode "A" variant "B"; }')
        assert len(attrs) == 2

    def test_missing_value_is_reported(self):
        result = parse_source('type integer I with { encode }\ntype integer J')
        assert isinstance(result.tree.definitions[0], ErrorNode)
        assert result.tree.definitions[1].name == "J"
        assert "string literal" in result.errors[0].message


class TestLength:
    def test_single_bound_is_upper(self):
        assert length_of("type charstring S length(8)") == LengthSpec(
            upper=Boundary(value=NumberLiteral(text="8")),
        )

    def test_range(self):
        spec = length_of("type octetstring O length(1 .. 255)")
        assert spec.lower.value == NumberLiteral(text="1")
        assert spec.upper.value == NumberLiteral(text="255")

    def test_exclusive_bounds(self):
        spec = length_of("type charstring S length(!0 .. !10)")
        assert spec.lower.exclusive is True
        assert spec.upper.exclusive is True

    def test_reference_bound(self):
        spec = length_of("type bitstring B length(0 .. infinity)")
        assert spec.upper.value == Identifier(name="infinity")

    def test_constant_bound(self):
        spec = length_of("type hexstring H length(c_max)")
        assert spec.upper == Boundary(value=Identifier(name="c_max"))

    def test_list_element_length(self):
        result = parse_source("type record of charstring Names length(1 .. 10)")
        definition = result.tree.definitions[0]
        assert definition.length_constraint is None
        assert definition.element_length_constraint.upper.value == NumberLiteral(text="10")

    def test_unclosed_length_is_reported(self):
        result = parse_source("type charstring S length(1 .. 2")
        assert not result.success

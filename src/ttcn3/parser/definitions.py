"""Module-level and nested definition parsing.

Every definition is introduced by a keyword (after an optional
visibility), so dispatch is by the current token alone.
"""

from __future__ import annotations

import logging

from ttcn3.ast.nodes import (
    Altstep,
    AltstepType,
    ClassType,
    ComponentType,
    Configuration,
    Constructor,
    Control,
    EnumeratedType,
    EnumeratedValue,
    ExceptSpec,
    Expr,
    ExternalFunction,
    Field,
    Friend,
    Function,
    FunctionType,
    Group,
    Identifier,
    ImportDefinition,
    ImportItem,
    ImportSpec,
    MapType,
    ModeDefinition,
    Module,
    ModuleParameter,
    Node,
    Parameter,
    PortAddress,
    PortMapParam,
    PortMessageTypes,
    PortTranslation,
    PortType,
    PortUnmapParam,
    RecordOfType,
    RecordType,
    ReturnType,
    SetOfType,
    SetType,
    Signature,
    Subtype,
    Testcase,
    TestcaseType,
    TypeParameter,
    UnionType,
)
from ttcn3.lexer.tokens import Token, TokenType
from ttcn3.parser.base import describe
from ttcn3.parser.statements import DECLARATION_KEYWORDS, StatementParser

logger = logging.getLogger(__name__)

VISIBILITIES = ("public", "private", "friend")

DEFINITION_KEYWORDS = frozenset({
    "module", "group", "function", "external", "altstep", "testcase",
    "configuration", "control", "type", "const", "var", "template",
    "signature", "import", "modulepar", "constructor", "timer", "port",
    "friend", "public", "private",
})

DIRECTIONS = ("in", "out", "inout")

PORT_KINDS = ("procedure", "message", "stream", "mixed")

EXCEPT_KINDS = (
    "group", "type", "template", "const", "testcase", "altstep",
    "function", "signature", "modulepar",
)

IMPORT_KINDS = EXCEPT_KINDS[1:] + ("import",)


class DefinitionParser(StatementParser):

    # ------------------------------------------------------------------
    # Start sets
    # ------------------------------------------------------------------

    def _starts_definition(self) -> bool:
        tok = self._current()
        if tok.is_keyword("mode"):
            return self._is_name(self._peek())
        if not tok.is_keyword(*DEFINITION_KEYWORDS):
            return False
        if tok.value == "function":
            return not self._is_function_literal()
        if tok.value == "testcase":
            return self._peek().type != TokenType.DOT
        return True

    def _is_function_literal(self) -> bool:
        """`function` followed by `(` after its modifiers has no name."""
        offset = 1
        while self._peek(offset).type == TokenType.MODIFIER:
            offset += 1
        return self._peek(offset).type == TokenType.LPAREN

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _parse_definition_body(self) -> list[Node]:
        """Parse `{ (definition ;?)* }`."""
        self._expect(TokenType.LBRACE, "'{'")
        definitions: list[Node] = []
        while not self._check(TokenType.RBRACE) and not self._at_end():
            if self._accept(TokenType.SEMICOLON):
                continue
            definitions.append(self._recovering(self._parse_definition, self._starts_definition))
            self._accept(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "'}'")
        return definitions

    def _parse_definition(self) -> Node:
        """Parse a single definition, including its optional visibility."""
        start = self._current()

        if start.is_keyword("private") and self._peek().is_keyword("friend") \
                and self._peek(2).is_keyword("module"):
            self._advance()
            return self._parse_friend(start, private=True)
        if start.is_keyword("friend") and self._peek().is_keyword("module"):
            return self._parse_friend(start, private=False)

        visibility = None
        if start.is_keyword(*VISIBILITIES):
            visibility = self._advance().value

        tok = self._current()
        word = tok.value if tok.type == TokenType.KEYWORD else None

        if word == "module":
            if visibility:
                self._fail("A module cannot have a visibility", start)
            return self._parse_module(start)
        if word == "group":
            return self._parse_group(start, visibility)
        if word == "function":
            return self._parse_function(start, visibility)
        if word == "external":
            if self._peek().is_keyword("class"):
                self._fail(f"Expected definition, got {describe(tok)}")
            return self._parse_external_function(start, visibility)
        if word == "altstep":
            return self._parse_altstep(start, visibility)
        if word == "testcase":
            return self._parse_testcase(start, visibility)
        if word == "configuration":
            return self._parse_configuration(start, visibility)
        if word == "control":
            self._advance()
            body = self._parse_block()
            attributes = self._parse_optional_attributes()
            return Control(loc=self._loc(start), visibility=visibility, body=body, attributes=attributes)
        if word == "constructor":
            return self._parse_constructor(start, visibility)
        if word == "type":
            return self._parse_type_definition(start, visibility)
        if word == "signature":
            return self._parse_signature(start, visibility)
        if word == "import":
            return self._parse_import(start, visibility)
        if word == "modulepar":
            return self._parse_variable("modulepar", ModuleParameter, start, visibility)
        if word == "mode" and self._is_name(self._peek()):
            return self._parse_mode(start, visibility)
        if word in DECLARATION_KEYWORDS:
            return self._parse_declaration(start, visibility)

        self._fail(f"Expected definition, got {describe(tok)}")

    def _parse_module(self, start: Token) -> Module:
        self._expect_keyword("module")
        name = self._expect_name("module name")
        type_parameters = self._parse_optional_type_parameters()
        language = None
        if self._accept_keyword("language"):
            language = [self._parse_charstring()]
            while self._accept(TokenType.COMMA):
                language.append(self._parse_charstring())
        definitions = self._parse_definition_body()
        attributes = self._parse_optional_attributes()
        return Module(
            loc=self._loc(start), name=name, type_parameters=type_parameters,
            language=language, definitions=definitions, attributes=attributes,
        )

    def _parse_group(self, start: Token, visibility: str | None) -> Group:
        self._expect_keyword("group")
        name = self._expect_name("group name")
        type_parameters = self._parse_optional_type_parameters()
        definitions = self._parse_definition_body()
        attributes = self._parse_optional_attributes()
        return Group(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, definitions=definitions, attributes=attributes,
        )

    def _parse_friend(self, start: Token, private: bool) -> Friend:
        self._expect_keyword("friend")
        self._expect_keyword("module")
        modules = self._parse_references()
        attributes = self._parse_optional_attributes()
        return Friend(loc=self._loc(start), private=private, modules=modules, attributes=attributes)

    def _parse_function(self, start: Token, visibility: str | None) -> Function:
        """Parse a function; without a body it is a forward declaration."""
        self._expect_keyword("function")
        modifiers = self._parse_modifiers()
        name = self._expect_name("function name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        extends = self._parse_type() if self._accept_keyword("extends") else None
        runs_on, mtc, system = self._parse_component_clauses()
        return_type = self._parse_optional_return_type()
        exception = self._parse_optional_exception()
        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return Function(
            loc=self._loc(start), visibility=visibility, modifiers=modifiers, name=name,
            type_parameters=type_parameters, parameters=parameters, extends=extends,
            runs_on=runs_on, mtc=mtc, system=system, return_type=return_type,
            exception=exception, body=body, attributes=attributes,
        )

    def _parse_external_function(self, start: Token, visibility: str | None) -> ExternalFunction:
        self._expect_keyword("external")
        self._expect_keyword("function")
        modifiers = self._parse_modifiers()
        name = self._expect_name("function name")
        type_parameters = self._parse_optional_type_parameters()
        extends = self._parse_type() if self._accept_keyword("extends") else None
        parameters = self._parse_parameters()
        if extends is None and self._accept_keyword("extends"):
            extends = self._parse_type()
        return_type = self._parse_optional_return_type()
        exception = self._parse_optional_exception()
        attributes = self._parse_optional_attributes()
        return ExternalFunction(
            loc=self._loc(start), visibility=visibility, modifiers=modifiers, name=name,
            type_parameters=type_parameters, parameters=parameters, extends=extends,
            return_type=return_type, exception=exception, attributes=attributes,
        )

    def _parse_altstep(self, start: Token, visibility: str | None) -> Altstep:
        self._expect_keyword("altstep")
        modifiers = self._parse_modifiers()
        interleave = self._accept_keyword("interleave") is not None
        name = self._expect_name("altstep name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        runs_on, mtc, system = self._parse_component_clauses()
        exception = self._parse_optional_exception()
        body = self._parse_alt_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return Altstep(
            loc=self._loc(start), visibility=visibility, modifiers=modifiers,
            interleave=interleave, name=name, type_parameters=type_parameters,
            parameters=parameters, runs_on=runs_on, mtc=mtc, system=system,
            exception=exception, body=body, attributes=attributes,
        )

    def _parse_testcase(self, start: Token, visibility: str | None) -> Testcase:
        self._expect_keyword("testcase")
        name = self._expect_name("testcase name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        execute_on = runs_on = system = None
        if self._accept_keyword("execute"):
            self._expect_keyword("on")
            execute_on = self._parse_type()
        elif self._check_keyword("runs"):
            runs_on, system = self._parse_runs_on_system()
        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return Testcase(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            execute_on=execute_on, runs_on=runs_on, system=system,
            body=body, attributes=attributes,
        )

    def _parse_configuration(self, start: Token, visibility: str | None) -> Configuration:
        self._expect_keyword("configuration")
        name = self._expect_name("configuration name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        runs_on, system = self._parse_runs_on_system()
        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return Configuration(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            runs_on=runs_on, system=system, body=body, attributes=attributes,
        )

    def _parse_constructor(self, start: Token, visibility: str | None) -> Constructor:
        """Parse `constructor (params) [: Super(args)] [block]`."""
        self._expect_keyword("constructor")
        parameters = self._parse_parameters()
        super_call = None
        if self._accept(TokenType.COLON):
            super_call = self._parse_reference()
        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return Constructor(
            loc=self._loc(start), visibility=visibility, parameters=parameters,
            super_call=super_call, body=body, attributes=attributes,
        )

    def _parse_signature(self, start: Token, visibility: str | None) -> Signature:
        self._expect_keyword("signature")
        name = self._expect_name("signature name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        exception = self._parse_optional_exception()
        return_type = self._parse_optional_return_type()
        if not exception:
            exception = self._parse_optional_exception()
        attributes = self._parse_optional_attributes()
        return Signature(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            exception=exception, return_type=return_type, attributes=attributes,
        )

    def _parse_mode(self, start: Token, visibility: str | None) -> ModeDefinition:
        self._expect_keyword("mode")
        name = self._expect_name("mode name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters() if self._check(TokenType.LPAREN) else None
        runs_on = None
        if self._accept_keyword("runs"):
            self._expect_keyword("on")
            runs_on = self._parse_type()
        self._expect(TokenType.LBRACE, "'{'")
        self._expect(TokenType.RBRACE, "'}'")
        attributes = self._parse_optional_attributes()
        return ModeDefinition(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            runs_on=runs_on, attributes=attributes,
        )

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _parse_import(self, start: Token, visibility: str | None) -> ImportDefinition:
        self._expect_keyword("import")
        self._expect_keyword("from")
        module = self._parse_type()
        local_name = None
        if self._accept(TokenType.ARROW):
            local_name = self._expect_name()

        import_all = False
        exceptions = None
        specs: list[ImportSpec] = []
        if self._accept_keyword("all"):
            import_all = True
            if self._accept_keyword("except"):
                exceptions = self._parse_except_block()
        else:
            self._expect(TokenType.LBRACE, "'{' or 'all'")
            while not self._check(TokenType.RBRACE):
                specs.append(self._parse_import_spec())
                self._accept(TokenType.SEMICOLON)
            self._expect(TokenType.RBRACE, "'}'")

        attributes = self._parse_optional_attributes()
        return ImportDefinition(
            loc=self._loc(start), visibility=visibility, module=module,
            local_name=local_name, all=import_all, exceptions=exceptions,
            specs=specs, attributes=attributes,
        )

    def _parse_except_block(self) -> list[ExceptSpec]:
        self._expect(TokenType.LBRACE, "'{'")
        specs = []
        while not self._check(TokenType.RBRACE):
            start = self._current()
            if not start.is_keyword(*EXCEPT_KINDS):
                self._fail(f"Expected definition kind, got {describe(start)}")
            kind = self._advance().value
            if self._accept_keyword("all"):
                specs.append(ExceptSpec(loc=self._loc(start), kind=kind, all=True))
            else:
                references = self._parse_references()
                specs.append(ExceptSpec(loc=self._loc(start), kind=kind, references=references))
            self._accept(TokenType.SEMICOLON)
        self._expect(TokenType.RBRACE, "'}'")
        return specs

    def _parse_import_spec(self) -> ImportSpec:
        start = self._current()
        if start.is_keyword("group"):
            self._advance()
            items = [self._parse_import_item()]
            while self._accept(TokenType.COMMA):
                items.append(self._parse_import_item())
            return ImportSpec(loc=self._loc(start), kind="group", items=items)

        if not start.is_keyword(*IMPORT_KINDS):
            self._fail(f"Expected import kind, got {describe(start)}")
        kind = self._advance().value
        if self._accept_keyword("all"):
            except_references = None
            if self._accept_keyword("except"):
                except_references = self._parse_references()
            return ImportSpec(loc=self._loc(start), kind=kind, all=True, except_references=except_references)

        items = []
        for ref in self._parse_references():
            items.append(ImportItem(loc=ref.loc, reference=ref))
        return ImportSpec(loc=self._loc(start), kind=kind, items=items)

    def _parse_import_item(self) -> ImportItem:
        start = self._current()
        reference = self._parse_type()
        exceptions = None
        if self._accept_keyword("except"):
            exceptions = self._parse_except_block()
        return ImportItem(loc=self._loc(start), reference=reference, exceptions=exceptions)

    # ------------------------------------------------------------------
    # Type definitions
    # ------------------------------------------------------------------

    def _parse_type_definition(self, start: Token, visibility: str | None) -> Node:
        self._expect_keyword("type")
        tok = self._current()
        nxt = self._peek()

        if tok.is_keyword("altstep"):
            return self._parse_altstep_type(start, visibility)
        if tok.is_keyword("testcase"):
            return self._parse_testcase_type(start, visibility)
        if tok.is_keyword("function"):
            return self._parse_function_type(start, visibility)
        if tok.is_keyword("class") or (tok.is_keyword("external") and nxt.is_keyword("class")):
            return self._parse_class_type(start, visibility)
        if tok.is_keyword("component"):
            return self._parse_component_type(start, visibility)
        if tok.is_keyword("record", "set"):
            if nxt.is_keyword("of", "length"):
                return self._parse_list_type(start, visibility)
            return self._parse_structured_type(start, visibility)
        if tok.is_keyword("union"):
            return self._parse_structured_type(start, visibility)
        if tok.is_keyword("enumerated"):
            return self._parse_enumerated_type(start, visibility)
        if tok.is_keyword("map") and nxt.is_keyword("from"):
            return self._parse_map_type(start, visibility)
        if tok.is_keyword("port") and self._is_name(nxt):
            return self._parse_port_type(start, visibility)
        return self._parse_subtype(start, visibility)

    def _parse_altstep_type(self, start: Token, visibility: str | None) -> AltstepType:
        self._expect_keyword("altstep")
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        runs_on, mtc, system = self._parse_component_clauses()
        attributes = self._parse_optional_attributes()
        return AltstepType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            runs_on=runs_on, mtc=mtc, system=system, attributes=attributes,
        )

    def _parse_testcase_type(self, start: Token, visibility: str | None) -> TestcaseType:
        self._expect_keyword("testcase")
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        runs_on, system = self._parse_runs_on_system()
        attributes = self._parse_optional_attributes()
        return TestcaseType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters,
            runs_on=runs_on, system=system, attributes=attributes,
        )

    def _parse_function_type(self, start: Token, visibility: str | None) -> FunctionType:
        self._expect_keyword("function")
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        parameters = self._parse_parameters()
        extends = self._parse_type() if self._accept_keyword("extends") else None
        runs_on, mtc, system = self._parse_component_clauses()
        return_type = self._parse_optional_return_type()
        attributes = self._parse_optional_attributes()
        return FunctionType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, parameters=parameters, extends=extends,
            runs_on=runs_on, mtc=mtc, system=system, return_type=return_type,
            attributes=attributes,
        )

    def _parse_class_type(self, start: Token, visibility: str | None) -> ClassType:
        external = self._accept_keyword("external") is not None
        self._expect_keyword("class")
        modifiers = self._parse_modifiers()
        name = self._expect_name("class name")
        type_parameters = self._parse_optional_type_parameters()
        super_class = self._parse_type() if self._accept_keyword("extends") else None
        runs_on, mtc, system = self._parse_component_clauses()
        definitions = self._parse_definition_body()
        destructor = self._parse_block() if self._accept_keyword("finally") else None
        attributes = self._parse_optional_attributes()
        return ClassType(
            loc=self._loc(start), visibility=visibility, external=external,
            modifiers=modifiers, name=name, type_parameters=type_parameters,
            super_class=super_class, runs_on=runs_on, mtc=mtc, system=system,
            definitions=definitions, destructor=destructor, attributes=attributes,
        )

    def _parse_component_type(self, start: Token, visibility: str | None) -> ComponentType:
        self._expect_keyword("component")
        name = self._expect_name("component name")
        type_parameters = self._parse_optional_type_parameters()
        extends = self._parse_references() if self._accept_keyword("extends") else []
        body = self._parse_block() if self._check(TokenType.LBRACE) else None
        attributes = self._parse_optional_attributes()
        return ComponentType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, extends=extends, body=body,
            attributes=attributes,
        )

    def _parse_structured_type(self, start: Token, visibility: str | None) -> RecordType:
        keyword = self._advance().value
        node_type = {"record": RecordType, "set": SetType, "union": UnionType}[keyword]
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        self._expect(TokenType.LBRACE, "'{'")
        fields: list[Field] = []
        if not self._check(TokenType.RBRACE):
            fields.append(self._parse_field())
            while self._accept(TokenType.COMMA):
                if self._check(TokenType.RBRACE):
                    break
                fields.append(self._parse_field())
        self._expect(TokenType.RBRACE, "'}'")
        attributes = self._parse_optional_attributes()
        return node_type(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, fields=fields, attributes=attributes,
        )

    def _parse_field(self) -> Field:
        """Parse `[@default] Type [name] [dims] [(values)] [length(..)] [optional]`."""
        start = self._current()
        default = False
        if start.value == "@default":
            self._advance()
            default = True
        type_ = self._parse_type()
        name = self._expect_name() if self._is_name(self._current()) else None
        array_def = self._parse_array_def()
        value_constraint = self._parse_template_values() if self._check(TokenType.LPAREN) else None
        length_constraint = self._parse_optional_length()
        optional = self._accept_keyword("optional") is not None
        return Field(
            loc=self._loc(start), default=default, type=type_, name=name,
            array_def=array_def, value_constraint=value_constraint,
            length_constraint=length_constraint, optional=optional,
        )

    def _parse_list_type(self, start: Token, visibility: str | None) -> RecordOfType:
        keyword = self._advance().value
        node_type = RecordOfType if keyword == "record" else SetOfType
        length_constraint = self._parse_optional_length()
        self._expect_keyword("of")
        element_type = self._parse_type()
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        element_value_constraint = self._parse_template_values() if self._check(TokenType.LPAREN) else None
        element_length_constraint = self._parse_optional_length()
        attributes = self._parse_optional_attributes()
        return node_type(
            loc=self._loc(start), visibility=visibility, length_constraint=length_constraint,
            element_type=element_type, name=name, type_parameters=type_parameters,
            element_value_constraint=element_value_constraint,
            element_length_constraint=element_length_constraint, attributes=attributes,
        )

    def _parse_enumerated_type(self, start: Token, visibility: str | None) -> EnumeratedType:
        self._expect_keyword("enumerated")
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        self._expect(TokenType.LBRACE, "'{'")
        values: list[EnumeratedValue] = []
        while not self._check(TokenType.RBRACE):
            values.append(self._parse_enumerated_value())
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "'}'")
        attributes = self._parse_optional_attributes()
        return EnumeratedType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, values=values, attributes=attributes,
        )

    def _parse_enumerated_value(self) -> EnumeratedValue:
        start = self._current()
        name = self._expect_name("enumeration value")
        values = None
        if self._accept(TokenType.LPAREN):
            values = [self._parse_template_item()]
            while self._accept(TokenType.COMMA):
                values.append(self._parse_template_item())
            self._expect(TokenType.RPAREN, "')'")
        return EnumeratedValue(loc=self._loc(start), name=name, values=values)

    def _parse_map_type(self, start: Token, visibility: str | None) -> MapType:
        self._expect_keyword("map")
        self._expect_keyword("from")
        key_type = self._parse_type()
        self._expect_keyword("to")
        value_type = self._parse_type()
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        attributes = self._parse_optional_attributes()
        return MapType(
            loc=self._loc(start), visibility=visibility, key_type=key_type,
            value_type=value_type, name=name, type_parameters=type_parameters,
            attributes=attributes,
        )

    def _parse_subtype(self, start: Token, visibility: str | None) -> Subtype:
        super_type = self._parse_type()
        name = self._expect_name("type name")
        type_parameters = self._parse_optional_type_parameters()
        array_def = self._parse_array_def()
        value_constraint = self._parse_template_values() if self._check(TokenType.LPAREN) else None
        length_constraint = self._parse_optional_length()
        attributes = self._parse_optional_attributes()
        return Subtype(
            loc=self._loc(start), visibility=visibility, super_type=super_type,
            name=name, type_parameters=type_parameters, array_def=array_def,
            value_constraint=value_constraint, length_constraint=length_constraint,
            attributes=attributes,
        )

    # ------------------------------------------------------------------
    # Port types
    # ------------------------------------------------------------------

    def _parse_port_type(self, start: Token, visibility: str | None) -> PortType:
        self._expect_keyword("port")
        name = self._expect_name("port type name")
        type_parameters = self._parse_optional_type_parameters()
        map_to: list[Expr] = []
        if self._accept_keyword("map"):
            self._expect_keyword("to")
            map_to = self._parse_references()
        connect_to: list[Expr] = []
        if self._accept_keyword("connect"):
            self._expect_keyword("to")
            connect_to = self._parse_references()

        tok = self._current()
        if not tok.is_keyword(*PORT_KINDS):
            self._fail(f"Expected port kind, got {describe(tok)}")
        kind = self._advance().value
        realtime = self._accept_keyword("realtime") is not None

        port_attributes = None
        if self._accept(TokenType.LBRACE):
            port_attributes = []
            while not self._check(TokenType.RBRACE):
                port_attributes.append(self._parse_port_attribute())
                self._accept(TokenType.SEMICOLON)
            self._expect(TokenType.RBRACE, "'}'")

        attributes = self._parse_optional_attributes()
        return PortType(
            loc=self._loc(start), visibility=visibility, name=name,
            type_parameters=type_parameters, map_to=map_to, connect_to=connect_to,
            kind=kind, realtime=realtime, port_attributes=port_attributes,
            attributes=attributes,
        )

    def _parse_port_attribute(self) -> Node:
        start = self._current()
        if start.is_keyword("var", "const"):
            return self._parse_declaration()
        if self._accept_keyword("address"):
            translation = self._parse_port_translation()
            return PortAddress(loc=self._loc(start), translation=translation)
        if start.is_keyword("map", "unmap") and self._peek().is_keyword("param"):
            self._advance()
            self._advance()
            parameters = self._parse_parameters()
            node_type = PortMapParam if start.value == "map" else PortUnmapParam
            return node_type(loc=self._loc(start), parameters=parameters)
        if start.is_keyword(*DIRECTIONS):
            direction = self._advance().value
            messages = [self._parse_port_translation()]
            while self._accept(TokenType.COMMA):
                if not self._starts_reference():
                    break
                messages.append(self._parse_port_translation())
            return PortMessageTypes(loc=self._loc(start), direction=direction, messages=messages)
        self._fail(f"Expected port attribute, got {describe(start)}")

    def _parse_port_translation(self) -> PortTranslation:
        """Parse `Type [from|to Outer with translator()]`."""
        start = self._current()
        type_ = self._parse_type()
        if not self._check_keyword("from", "to"):
            return PortTranslation(loc=self._loc(start), type=type_)
        direction = self._advance().value
        outer_type = self._parse_type()
        self._expect_keyword("with")
        translator = self._parse_type()
        self._expect(TokenType.LPAREN, "'('")
        self._expect(TokenType.RPAREN, "')'")
        return PortTranslation(
            loc=self._loc(start), type=type_, direction=direction,
            outer_type=outer_type, translator=translator,
        )

    # ------------------------------------------------------------------
    # Formal parameters and signature clauses
    # ------------------------------------------------------------------

    def _parse_parameters(self) -> list[Parameter]:
        self._expect(TokenType.LPAREN, "'('")
        parameters: list[Parameter] = []
        while not self._check(TokenType.RPAREN):
            parameters.append(self._parse_parameter())
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.RPAREN, "')'")
        return parameters

    def _parse_parameter(self) -> Parameter:
        start = self._current()
        direction = self._advance().value if start.is_keyword(*DIRECTIONS) else None
        template_restriction = self._parse_optional_template_restriction()
        if self._check_keyword("timer"):
            tok = self._advance()
            type_: Expr = Identifier(loc=self._loc(tok), name="timer")
        else:
            type_ = self._parse_type()
        name = self._expect_name("parameter name")
        array_def = self._parse_array_def()
        variadic = self._accept(TokenType.ELLIPSIS) is not None
        default = self._parse_expression() if self._accept(TokenType.ASSIGN) else None
        return Parameter(
            loc=self._loc(start), direction=direction,
            template_restriction=template_restriction, type=type_, name=name,
            array_def=array_def, variadic=variadic, default=default,
        )

    def _parse_optional_type_parameters(self) -> list[TypeParameter] | None:
        """Parse `<in T name, ...>` after a name being defined."""
        if not self._check(TokenType.LESS_THAN):
            return None
        nxt = self._peek()
        if not (nxt.is_keyword("in") or nxt.type == TokenType.GREATER_THAN):
            return None
        self._advance()
        type_parameters = []
        while not self._check(TokenType.GREATER_THAN):
            type_parameters.append(self._parse_type_parameter())
            if not self._accept(TokenType.COMMA):
                break
        self._expect(TokenType.GREATER_THAN, "'>'")
        return type_parameters

    def _parse_type_parameter(self) -> TypeParameter:
        start = self._expect_keyword("in")
        if self._check_keyword("type", "signature"):
            tok = self._advance()
            type_: Expr = Identifier(loc=self._loc(tok), name=tok.value)
        else:
            type_ = self._parse_type()
        name = self._expect_name("type parameter name")
        default = self._parse_type() if self._accept(TokenType.ASSIGN) else None
        return TypeParameter(loc=self._loc(start), type=type_, name=name, default=default)

    def _parse_optional_return_type(self) -> ReturnType | None:
        if not self._check_keyword("return"):
            return None
        start = self._advance()
        template_restriction = self._parse_optional_template_restriction()
        type_ = self._parse_type()
        return ReturnType(loc=self._loc(start), template_restriction=template_restriction, type=type_)

    def _parse_optional_exception(self) -> list[Expr]:
        if not self._accept_keyword("exception"):
            return []
        self._expect(TokenType.LPAREN, "'('")
        references = self._parse_references()
        self._expect(TokenType.RPAREN, "')'")
        return references

    def _parse_component_clauses(self) -> tuple[Expr | None, Expr | None, Expr | None]:
        """Parse the optional `runs on`, `mtc` and `system` clauses."""
        runs_on = mtc = system = None
        if self._accept_keyword("runs"):
            self._expect_keyword("on")
            runs_on = self._parse_type()
        if self._accept_keyword("mtc"):
            mtc = self._parse_type()
        if self._accept_keyword("system"):
            system = self._parse_type()
        return runs_on, mtc, system

    def _parse_runs_on_system(self) -> tuple[Expr, Expr | None]:
        self._expect_keyword("runs")
        self._expect_keyword("on")
        runs_on = self._parse_type()
        system = self._parse_type() if self._accept_keyword("system") else None
        return runs_on, system

"""Tests for the parse_source / parse_file entry points and ParseResult."""

import pytest

from ttcn3 import parse_file, parse_source
from ttcn3.ast.nodes import ConstDecl, ErrorNode, MalformedStringLiteral, Module
from ttcn3.diagnostics import DiagnosticCode, Severity
from ttcn3.lexer.lexer import Lexer
from ttcn3.parser import ParseError, Parser, read_source


SAMPLE = """\
// Example module
module Sample {
    import from Types all;

    type record Pair { integer key, charstring val optional }

    function f_add(integer a, integer b) return integer {
        return a + b;
    }

    testcase tc_pair() runs on MTC {
        var Pair p := { key := f_add(1, 2), val := omit };
        if (p.key == 3) { setverdict(pass) } else { setverdict(fail) }
    }

    control {
        execute(tc_pair());  /* run it */
    }
}
"""


class TestParseSource:
    def test_sample_parses_cleanly(self):
        result = parse_source(SAMPLE, "sample.ttcn")
        assert result.success
        assert result.diagnostics == []
        module = result.tree.definitions[0]
        assert isinstance(module, Module)
        assert len(module.definitions) == 5

    def test_tokens_reproduce_source(self):
        result = parse_source(SAMPLE)
        assert "".join(t.full_text for t in result.tokens) == SAMPLE

    def test_locations_carry_filename(self):
        result = parse_source(SAMPLE, "sample.ttcn")
        module = result.tree.definitions[0]
        assert module.loc.file == "sample.ttcn"
        assert (module.loc.line, module.loc.column) == (2, 1)
        assert module.loc.end_line == 19

    def test_lexer_and_parser_diagnostics_are_merged(self):
        result = parse_source("const integer x := 1;\n#\nconst integer y := 2")
        codes = [d.code for d in result.diagnostics]
        assert codes == [DiagnosticCode.UNRECOGNIZED_CHARACTER, DiagnosticCode.SYNTAX_ERROR]
        assert [type(d) for d in result.tree.definitions] == [ConstDecl, ErrorNode, ConstDecl]

    def test_diagnostics_in_source_order(self):
        result = parse_source("module M {\n  const integer a := ;\n  var x := '12'B;\n  const b := ;\n}")
        offsets = [d.loc.offset for d in result.diagnostics]
        assert offsets == sorted(offsets)
        assert len(result.errors) == 2
        assert len(result.warnings) == 1

    def test_malformed_literal_is_a_warning(self):
        result = parse_source("const bitstring b := '102'B")
        assert result.success
        assert result.warnings[0].code == DiagnosticCode.MALFORMED_LITERAL
        value = result.tree.definitions[0].declarators[0].value
        assert value == MalformedStringLiteral(text="'102'B")

    def test_unterminated_string(self):
        result = parse_source('const charstring s := "abc')
        assert result.errors[0].code == DiagnosticCode.UNTERMINATED_LITERAL

    def test_parser_raises_without_recovery(self):
        parser = Parser(Lexer("module M { const := 1 }").tokenize(), recover=False)
        with pytest.raises(ParseError) as excinfo:
            parser.parse()
        assert excinfo.value.token.value == ":="

    def test_parser_without_eof_token(self):
        tokens = Lexer("x").tokenize()[:-1]
        tree = Parser(tokens).parse()
        assert tree.expression.name == "x"


class TestParseResult:
    def test_to_dict(self):
        result = parse_source("module M {}")
        assert result.to_dict(locations=False) == {
            "success": True,
            "tree": {"kind": "SourceFile", "definitions": [{"kind": "Module", "name": "M"}]},
            "diagnostics": [],
        }

    def test_diagnostic_to_dict(self):
        result = parse_source("module M {", "m.ttcn")
        (diag,) = result.to_dict()["diagnostics"]
        assert diag["severity"] == "error"
        assert diag["code"] == "P002"
        assert diag["file"] == "m.ttcn"

    def test_diagnostic_str(self):
        result = parse_source("@", "m.ttcn")
        assert str(result.diagnostics[0]).startswith("m.ttcn:1:1: error L001:")

    def test_error_severity(self):
        result = parse_source("}")
        assert all(d.severity == Severity.ERROR for d in result.errors)
        assert not result.success


class TestParseFile:
    def test_parse_file(self, tmp_path):
        path = tmp_path / "m.ttcn"
        path.write_text("module FromDisk {}", encoding="utf-8")
        result = parse_file(path)
        assert result.tree.definitions[0].name == "FromDisk"
        assert result.tree.loc.file == str(path)

    def test_byte_order_mark_is_dropped(self, tmp_path):
        path = tmp_path / "bom.ttcn"
        path.write_bytes(b"\xef\xbb\xbfmodule M {}")
        assert read_source(path) == "module M {}"

    def test_latin1_fallback(self, tmp_path):
        path = tmp_path / "latin.ttcn"
        path.write_bytes('const charstring s := "café"'.encode("latin-1"))
        result = parse_file(path)
        assert result.success
        assert result.tree.definitions[0].declarators[0].value.value == "café"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "absent.ttcn")

"""Tests for the ttcn3 command line tool."""

import json

import pytest

from ttcn3 import __version__
from ttcn3.cli import main


@pytest.fixture
def module_file(tmp_path):
    path = tmp_path / "m.ttcn"
    path.write_text("module M {const integer x:=1}", encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path):
    path = tmp_path / "broken.ttcn"
    path.write_text("module M { const integer x := ; }", encoding="utf-8")
    return path


class TestUsage:
    def test_help(self, capsys):
        assert main(["--help"]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert capsys.readouterr().out.strip() == f"ttcn3 {__version__}"

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "Usage:" in capsys.readouterr().out

    def test_missing_file_argument(self, capsys):
        assert main(["parse"]) == 1
        assert "requires a file argument" in capsys.readouterr().out

    def test_file_not_found(self, tmp_path, capsys):
        assert main(["parse", str(tmp_path / "nope.ttcn")]) == 1
        assert "file not found" in capsys.readouterr().out

    def test_unknown_command(self, module_file, capsys):
        assert main(["explode", str(module_file)]) == 1
        assert "unknown command 'explode'" in capsys.readouterr().out


class TestCommands:
    def test_tokenize(self, module_file, capsys):
        assert main(["tokenize", str(module_file)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Token(KEYWORD, 'module', 1:1)"
        assert lines[-1] == "Token(EOF, 1:30)"

    def test_tokenize_reports_bad_characters(self, tmp_path, capsys):
        path = tmp_path / "bad.ttcn"
        path.write_text("x # y", encoding="utf-8")
        assert main(["tokenize", str(path)]) == 1
        assert "L001" in capsys.readouterr().err

    def test_parse_tree(self, module_file, capsys):
        assert main(["parse", str(module_file)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[:3] == ["SourceFile", "  Module M", "    ConstDecl"]
        assert "        NumberLiteral '1'" in out

    def test_parse_json(self, module_file, capsys):
        assert main(["parse", str(module_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["definitions"][0]["name"] == "M"

    def test_parse_with_errors(self, broken_file, capsys):
        assert main(["parse", str(broken_file)]) == 1
        captured = capsys.readouterr()
        assert "ErrorNode" in captured.out
        assert "P001" in captured.err

    def test_check_ok(self, module_file, capsys):
        assert main(["check", str(module_file)]) == 0
        assert capsys.readouterr().out.strip().endswith(": OK")

    def test_check_fail(self, broken_file, capsys):
        assert main(["check", str(broken_file)]) == 1
        out = capsys.readouterr().out
        assert "ERROR P001: 1:" in out
        assert "FAIL (1 error(s), 0 warning(s))" in out

    def test_check_warn(self, tmp_path, capsys):
        path = tmp_path / "warn.ttcn"
        path.write_text("const bitstring b := '12'B", encoding="utf-8")
        assert main(["check", str(path)]) == 0
        assert "WARN (1 warning(s))" in capsys.readouterr().out

    def test_format(self, module_file, capsys):
        assert main(["format", str(module_file)]) == 0
        assert capsys.readouterr().out == "module M {\n    const integer x := 1;\n};\n"

    def test_format_refuses_invalid_input(self, broken_file, capsys):
        assert main(["format", str(broken_file)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "P001" in captured.err

    def test_verbose_flag_is_accepted(self, module_file, capsys):
        assert main(["check", str(module_file), "--verbose"]) == 0

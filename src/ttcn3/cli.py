"""TTCN-3 syntax tool CLI entry point.

Usage:
    ttcn3 tokenize <file.ttcn>          Display the token stream
    ttcn3 parse <file.ttcn> [--json]    Parse and display the syntax tree
    ttcn3 check <file.ttcn>             Report lexical and syntax diagnostics
    ttcn3 format <file.ttcn>            Print the file in canonical layout

Options:
    --verbose       Log parser decisions to stderr
    --version       Show the version and exit
    -h, --help      Show this message and exit
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from ttcn3.ast.nodes import Node
from ttcn3.ast.printer import render
from ttcn3.ast.serde import to_json
from ttcn3.diagnostics import Severity
from ttcn3.lexer.lexer import Lexer
from ttcn3.parser.parser import ParseResult, parse_source, read_source


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]

    flags = {a for a in args if a.startswith("-")}
    args = [a for a in args if not a.startswith("-")]

    if "--help" in flags or "-h" in flags:
        print(__doc__.strip())
        return 0

    if "--version" in flags:
        from ttcn3 import __version__
        print(f"ttcn3 {__version__}")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if "--verbose" in flags else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(args) < 1:
        print(__doc__.strip())
        return 1

    command = args[0]

    if len(args) < 2:
        print(f"Error: command '{command}' requires a file argument")
        return 1

    filepath = Path(args[1])
    if not filepath.exists():
        print(f"Error: file not found: {filepath}")
        return 1

    source = read_source(filepath)
    filename = str(filepath)

    if command == "tokenize":
        return _cmd_tokenize(source, filename)
    elif command == "parse":
        return _cmd_parse(source, filename, as_json="--json" in flags)
    elif command == "check":
        return _cmd_check(source, filename)
    elif command == "format":
        return _cmd_format(source, filename)
    else:
        print(f"Error: unknown command '{command}'")
        print(__doc__.strip())
        return 1


def _cmd_tokenize(source: str, filename: str) -> int:
    """Display the token stream, trivia excluded."""
    lexer = Lexer(source, filename)
    for tok in lexer.tokenize():
        print(tok)
    for diagnostic in lexer.diagnostics:
        print(diagnostic, file=sys.stderr)
    return 1 if any(d.severity == Severity.ERROR for d in lexer.diagnostics) else 0


def _cmd_parse(source: str, filename: str, as_json: bool = False) -> int:
    """Parse the file and display the tree."""
    result = parse_source(source, filename)
    if as_json:
        print(to_json(result.tree, indent=2))
    else:
        _print_tree(result.tree)
    _print_diagnostics(result, sys.stderr)
    return 0 if result.success else 1


def _cmd_check(source: str, filename: str) -> int:
    """Report every diagnostic, then a one-line verdict."""
    result = parse_source(source, filename)

    for d in result.diagnostics:
        print(f"  {d.severity.name:<5} {d.code.value}: {d.loc.line}:{d.loc.column}: {d.message}")

    errors = result.errors
    warnings = result.warnings
    if result.diagnostics:
        print()
    if errors:
        print(f"{filename}: FAIL ({len(errors)} error(s), {len(warnings)} warning(s))")
        return 1
    elif warnings:
        print(f"{filename}: WARN ({len(warnings)} warning(s))")
        return 0
    else:
        print(f"{filename}: OK")
        return 0


def _cmd_format(source: str, filename: str) -> int:
    """Print the canonical rendering; refuses to format invalid input."""
    result = parse_source(source, filename)
    if not result.success:
        _print_diagnostics(result, sys.stderr)
        return 1
    sys.stdout.write(render(result.tree))
    return 0


def _print_diagnostics(result: ParseResult, stream) -> None:
    for diagnostic in result.diagnostics:
        print(diagnostic, file=stream)


def _print_tree(node: Node, depth: int = 0) -> None:
    """Print one line per node, children indented below their parent."""
    label = _label(node)
    print(f"{'  ' * depth}{node.kind}{' ' + label if label else ''}")
    for child in node.children():
        _print_tree(child, depth + 1)


def _label(node: Node) -> str:
    fields = node.populated_fields()
    for key in ("name", "text", "operator", "value", "kind", "quantifier"):
        value = fields.get(key)
        if isinstance(value, str):
            return repr(value) if key in ("text", "value") else value
    return ""


if __name__ == "__main__":
    sys.exit(main())

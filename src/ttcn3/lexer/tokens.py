"""Token types and Token dataclass for the TTCN-3 lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Every distinct token class the TTCN-3 lexer can produce."""

    # Structure
    EOF = auto()
    ERROR = auto()          # unrecognized input, kept so the parser can resync

    # Trivia (never reaches the parser as a token of its own)
    WHITESPACE = auto()
    COMMENT = auto()

    # Words
    IDENTIFIER = auto()
    KEYWORD = auto()
    MODIFIER = auto()       # @nodefault, @local, @default ...

    # Literals
    NUMBER = auto()
    CHARSTRING = auto()
    BITSTRING = auto()
    HEXSTRING = auto()
    OCTETSTRING = auto()
    MALFORMED_STRING = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    DOT = auto()
    RANGE = auto()          # ..
    ELLIPSIS = auto()       # ...
    ASSIGN = auto()         # :=
    ARROW = auto()          # ->
    FAT_ARROW = auto()      # =>

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    AMPERSAND = auto()
    EQUALS = auto()         # ==
    NOT_EQUALS = auto()     # !=
    LESS_THAN = auto()
    LESS_EQUAL = auto()
    GREATER_THAN = auto()
    GREATER_EQUAL = auto()
    SHIFT_LEFT = auto()     # <<
    SHIFT_RIGHT = auto()    # >>
    ROTATE_LEFT = auto()    # <@
    ROTATE_RIGHT = auto()   # @>
    EXCLAMATION = auto()
    INCREMENT = auto()      # ++
    DECREMENT = auto()      # --
    QUESTION = auto()       # ?
    UNDEFINED = auto()      # ???


# Operator spellings, longest first so the scanner can take the first match.
OPERATORS: tuple[tuple[str, TokenType], ...] = (
    ("???", TokenType.UNDEFINED),
    ("...", TokenType.ELLIPSIS),
    (":=", TokenType.ASSIGN),
    ("->", TokenType.ARROW),
    ("=>", TokenType.FAT_ARROW),
    ("==", TokenType.EQUALS),
    ("!=", TokenType.NOT_EQUALS),
    ("<=", TokenType.LESS_EQUAL),
    (">=", TokenType.GREATER_EQUAL),
    ("<<", TokenType.SHIFT_LEFT),
    (">>", TokenType.SHIFT_RIGHT),
    ("<@", TokenType.ROTATE_LEFT),
    ("@>", TokenType.ROTATE_RIGHT),
    ("..", TokenType.RANGE),
    ("++", TokenType.INCREMENT),
    ("--", TokenType.DECREMENT),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    (",", TokenType.COMMA),
    (";", TokenType.SEMICOLON),
    (":", TokenType.COLON),
    (".", TokenType.DOT),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.STAR),
    ("/", TokenType.SLASH),
    ("&", TokenType.AMPERSAND),
    ("<", TokenType.LESS_THAN),
    (">", TokenType.GREATER_THAN),
    ("!", TokenType.EXCLAMATION),
    ("?", TokenType.QUESTION),
)


# Reserved spellings. An identifier-shaped word is a keyword only when the
# whole word matches; `forward` stays an identifier.
KEYWORDS: frozenset[str] = frozenset({
    "address", "all", "alt", "altstep", "and", "and4b", "any", "break",
    "case", "catch", "class", "component", "configuration", "connect",
    "const", "constructor", "continue", "control", "display", "do", "else",
    "encode", "enumerated", "error", "except", "exception", "execute",
    "extends", "extension", "external", "fail", "false", "finally", "for",
    "friend", "from", "function", "goto", "group", "if", "import", "in",
    "inconc", "inout", "interleave", "label", "language", "length", "map",
    "message", "mixed", "mod", "mode", "modifies", "module", "modulepar",
    "mtc", "none", "not", "not4b", "null", "of", "omit", "on", "optional",
    "or", "or4b", "out", "override", "param", "pass", "port", "present",
    "private", "procedure", "public", "realtime", "record", "rem", "return",
    "runs", "select", "self", "sender", "set", "signature", "stream",
    "system", "template", "testcase", "this", "timer", "timestamp", "to",
    "true", "type", "union", "unmap", "value", "var", "variant", "verdict",
    "while", "with", "xor", "xor4b",
})

# Keywords that are also accepted where a name or reference is expected.
SOFT_KEYWORDS: frozenset[str] = frozenset({
    "address", "connect", "display", "encode", "execute", "extension", "language",
    "map", "message", "mixed", "mode", "mtc", "param", "present",
    "procedure", "realtime", "sender", "stream", "system", "timestamp",
    "to", "unmap", "value", "variant", "verdict", "override",
})

VERDICTS: frozenset[str] = frozenset({"none", "pass", "inconc", "fail", "error"})

TRIVIA: frozenset[TokenType] = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})


@dataclass(frozen=True, slots=True)
class Token:
    """A single token produced by the lexer.

    `value` is the exact source text of the token. `offset` is the
    character offset of its first character, so `source[offset:end]`
    gives the token back. `leading` holds the whitespace and comments
    that precede a significant token in the parser stream.
    """

    type: TokenType
    value: str
    line: int
    column: int
    offset: int = 0
    file: str = "<unknown>"
    leading: tuple[Token, ...] = ()

    @property
    def end(self) -> int:
        return self.offset + len(self.value)

    @property
    def full_text(self) -> str:
        """Source text of the token including its leading trivia."""
        return "".join(t.value for t in self.leading) + self.value

    def is_keyword(self, *spellings: str) -> bool:
        return self.type == TokenType.KEYWORD and (not spellings or self.value in spellings)

    def __repr__(self) -> str:
        if self.type == TokenType.EOF:
            return f"Token(EOF, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

"""TTCN-3 lexer: lossless tokenizer with attached trivia."""

from ttcn3.lexer.tokens import Token, TokenType
from ttcn3.lexer.lexer import Lexer

__all__ = ["Token", "TokenType", "Lexer"]

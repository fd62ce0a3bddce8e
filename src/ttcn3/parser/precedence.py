"""Operator precedence table for TTCN-3 expressions.

Higher levels bind tighter. The tables are read-only module constants and
are shared by every parser instance.
"""

from __future__ import annotations

from enum import Enum, IntEnum, auto
from types import MappingProxyType


class Precedence(IntEnum):
    LOWEST = 0
    LOGICAL_OR = 20
    LOGICAL_XOR = 30
    LOGICAL_AND = 40
    LOGICAL_NOT = 50
    EQUALITY = 60
    RELATIONAL = 70
    SHIFT = 80
    BITWISE_OR = 90
    BITWISE_XOR = 100
    BITWISE_AND = 110
    BITWISE_NOT = 120
    ADDITIVE = 130
    MULTIPLICATIVE = 140
    UNARY = 145
    PRIMARY = 150


class Associativity(Enum):
    LEFT = auto()
    RIGHT = auto()


BINARY_OPERATORS = MappingProxyType({
    "*": Precedence.MULTIPLICATIVE,
    "/": Precedence.MULTIPLICATIVE,
    "mod": Precedence.MULTIPLICATIVE,
    "rem": Precedence.MULTIPLICATIVE,
    "+": Precedence.ADDITIVE,
    "-": Precedence.ADDITIVE,
    "&": Precedence.ADDITIVE,
    "and4b": Precedence.BITWISE_AND,
    "xor4b": Precedence.BITWISE_XOR,
    "or4b": Precedence.BITWISE_OR,
    "<<": Precedence.SHIFT,
    ">>": Precedence.SHIFT,
    "<@": Precedence.SHIFT,
    "@>": Precedence.SHIFT,
    "<": Precedence.RELATIONAL,
    ">": Precedence.RELATIONAL,
    "<=": Precedence.RELATIONAL,
    ">=": Precedence.RELATIONAL,
    "==": Precedence.EQUALITY,
    "!=": Precedence.EQUALITY,
    "and": Precedence.LOGICAL_AND,
    "xor": Precedence.LOGICAL_XOR,
    "or": Precedence.LOGICAL_OR,
})

# Prefix operators are right-associative: the operand is parsed at the
# operator's own level, so `- - a` nests and `not a == b` is `not (a == b)`.
PREFIX_OPERATORS = MappingProxyType({
    "+": Precedence.UNARY,
    "-": Precedence.UNARY,
    "!": Precedence.UNARY,
    "++": Precedence.UNARY,
    "--": Precedence.UNARY,
    "not4b": Precedence.BITWISE_NOT,
    "not": Precedence.LOGICAL_NOT,
})

# `=>` takes a reference on its left and binds at the primary level.
FAT_ARROW_PRECEDENCE = Precedence.PRIMARY


def associativity(operator: str, prefix: bool = False) -> Associativity:
    """Return how repeated uses of `operator` nest."""
    if prefix:
        if operator not in PREFIX_OPERATORS:
            raise KeyError(operator)
        return Associativity.RIGHT
    if operator not in BINARY_OPERATORS and operator != "=>":
        raise KeyError(operator)
    return Associativity.LEFT


def binary_precedence(operator: str) -> Precedence | None:
    """Binding power of a binary operator, or None if it is not one."""
    if operator == "=>":
        return FAT_ARROW_PRECEDENCE
    return BINARY_OPERATORS.get(operator)

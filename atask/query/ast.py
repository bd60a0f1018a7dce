"""
Expression tree for the atask query language.

A parsed query is a tree of four node types:

    And(left, right)     both sides match
    Or(left, right)      either side matches
    Not(inner)           inner does not match
    Comparison(field, op, value)

Nodes are frozen dataclasses, so a tree can be shared between threads and
reused across any number of records. ``str(expr)`` renders a canonical query
that parses back to an equal tree.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .lexer import KEYWORDS, QUOTE_CHARS, is_literal_char


class Operator(Enum):
    """Comparison operators. ':' and '=' both mean EQ."""
    EQ = "="
    NOT_EQ = "!="
    GT = ">"
    LT = "<"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, text: str) -> "Operator":
        if text == ":":
            return cls.EQ
        return cls(text)


def _quote(value: str) -> str:
    bare = (
        value
        and value[0] not in QUOTE_CHARS
        and value.lower() not in KEYWORDS
        and all(is_literal_char(c) for c in value)
    )
    quote = "'" if '"' in value else '"'
    # A value holding both quote kinds can only be written bare
    if bare and (quote in value or not any(c in QUOTE_CHARS for c in value)):
        return value
    return f"{quote}{value}{quote}"


@dataclass(frozen=True)
class Comparison:
    """Leaf node: ``field op value``."""
    field: str
    op: Operator
    value: str

    def __str__(self):
        op = ":" if self.op is Operator.EQ else self.op.symbol
        return f"{self.field}{op}{_quote(self.value)}"


@dataclass(frozen=True)
class Not:
    inner: "Expr"

    def __str__(self):
        return f"NOT {_wrap(self.inner, Not)}"


@dataclass(frozen=True)
class And:
    left: "Expr"
    right: "Expr"

    def __str__(self):
        return f"{_wrap(self.left, And)} AND {_wrap(self.right, And, right=True)}"


@dataclass(frozen=True)
class Or:
    left: "Expr"
    right: "Expr"

    def __str__(self):
        return f"{_wrap(self.left, Or)} OR {_wrap(self.right, Or, right=True)}"


Expr = Union[And, Or, Not, Comparison]

# Binding strength, loosest first
_PRECEDENCE = {Or: 1, And: 2, Not: 3, Comparison: 4}


def _wrap(child: "Expr", parent: type, right: bool = False) -> str:
    """Parenthesize a child that binds looser than its parent."""
    child_level = _PRECEDENCE[type(child)]
    parent_level = _PRECEDENCE[parent]
    # Binary operators fold left, so an equal-precedence right child needs
    # parentheses to keep its shape.
    if child_level < parent_level or (right and child_level == parent_level):
        return f"({child})"
    return str(child)

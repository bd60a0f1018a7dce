"""
Tokenizer for the atask query language.

Turns a query string such as ``area:work AND NOT status:done`` into a flat
list of tokens. Keywords are case-insensitive bare words. A literal is a run
of characters other than ASCII whitespace, operators and parentheses, or a
quoted string when the token starts with a quote. Quotes inside a bare word
are kept as ordinary characters (``title:don't``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import LexError


class TokenType(Enum):
    IDENT = "identifier"
    STRING = "string"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    EOF = "end of query"


@dataclass(frozen=True)
class Token:
    """A single lexeme with its offset in the query string."""
    type: TokenType
    text: str
    position: int

    def describe(self) -> str:
        """Human readable name used in error messages."""
        if self.type == TokenType.EOF:
            return self.type.value
        return self.text


KEYWORDS = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
}

WHITESPACE = frozenset(" \t\r\n\f\v")
OPERATOR_CHARS = frozenset(":=!<>")
QUOTE_CHARS = frozenset("\"'")
PAREN_CHARS = frozenset("()")


def is_literal_char(ch: str) -> bool:
    # Quotes only open a string at the start of a token
    return ch.isprintable() and not (
        ch in WHITESPACE
        or ch in OPERATOR_CHARS
        or ch in PAREN_CHARS
    )


def tokenize(text: str) -> List[Token]:
    """
    Convert a query string into tokens.

    The returned list always ends with an EOF token whose position is the
    length of the input.

    Args:
        text: Raw query string

    Returns:
        List of tokens in source order

    Raises:
        LexError: On an unterminated quote or a character that cannot
            start any token
    """
    tokens: List[Token] = []
    pos = 0
    length = len(text)

    while pos < length:
        ch = text[pos]

        if ch in WHITESPACE:
            pos += 1
            continue

        if ch == "(":
            tokens.append(Token(TokenType.LPAREN, ch, pos))
            pos += 1
            continue

        if ch == ")":
            tokens.append(Token(TokenType.RPAREN, ch, pos))
            pos += 1
            continue

        if ch == "!":
            # '!' only exists as the first half of '!='
            if pos + 1 < length and text[pos + 1] == "=":
                tokens.append(Token(TokenType.OPERATOR, "!=", pos))
                pos += 2
                continue
            raise LexError(pos, ch, "Expected '=' after '!'")

        if ch in OPERATOR_CHARS:
            tokens.append(Token(TokenType.OPERATOR, ch, pos))
            pos += 1
            continue

        if ch in QUOTE_CHARS:
            end = text.find(ch, pos + 1)
            if end == -1:
                raise LexError(pos, ch, f"Unterminated quoted literal starting with {ch}")
            tokens.append(Token(TokenType.STRING, text[pos + 1:end], pos))
            pos = end + 1
            continue

        if not ch.isprintable():
            raise LexError(pos, ch)

        start = pos
        while pos < length and is_literal_char(text[pos]):
            pos += 1
        word = text[start:pos]
        token_type = KEYWORDS.get(word.lower(), TokenType.IDENT)
        tokens.append(Token(token_type, word, start))

    tokens.append(Token(TokenType.EOF, "", length))
    return tokens

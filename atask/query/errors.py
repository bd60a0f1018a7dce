"""
Error types for the atask query language.

Every error is detected while turning text into a tree; evaluation never
fails. Each error carries the offset into the query string so callers can
point at the offending character.
"""

from typing import Optional


class QueryError(ValueError):
    """Base class for all query errors."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        return f"{self.message} (at position {self.position})"

    def describe(self, query: str) -> str:
        """
        Render the error under the query with a caret at the offset.

        Example:
            status:(open
                   ^
            Unbalanced parenthesis '(' (at position 7)
        """
        caret = " " * min(self.position, len(query)) + "^"
        return f"{query}\n{caret}\n{self}"


class LexError(QueryError):
    """Illegal character or unterminated quoted literal."""

    def __init__(self, position: int, character: str, message: Optional[str] = None):
        self.character = character
        super().__init__(message or f"Unexpected character {character!r}", position)


class UnknownField(QueryError):
    """Comparison references a field absent from the registry."""

    def __init__(self, field: str, position: int):
        self.field = field
        super().__init__(f"Unknown field {field!r}", position)


class OperatorNotSupported(QueryError):
    """Operator not valid for the field's kind."""

    def __init__(self, field: str, operator: str, position: int):
        self.field = field
        self.operator = operator
        super().__init__(
            f"Operator {operator!r} is not supported for field {field!r}", position
        )


class InvalidLiteral(QueryError):
    """Value is neither a valid literal nor a special value for the field."""

    def __init__(self, field: str, value: str, position: int, expected: str = "an integer"):
        self.field = field
        self.value = value
        super().__init__(
            f"Invalid value {value!r} for field {field!r}: expected {expected}", position
        )


class UnbalancedParens(QueryError):
    """A '(' without its ')' or a ')' without its '('."""

    def __init__(self, paren: str, position: int):
        self.paren = paren
        super().__init__(f"Unbalanced parenthesis {paren!r}", position)


class UnexpectedEndOfInput(QueryError):
    """Query ended where more tokens were required."""

    def __init__(self, expected: str, position: int):
        self.expected = expected
        super().__init__(f"Unexpected end of query, expected {expected}", position)


class UnexpectedToken(QueryError):
    """A token appeared where the grammar does not allow it."""

    def __init__(self, token: str, expected: str, position: int):
        self.token = token
        self.expected = expected
        super().__init__(f"Unexpected {token!r}, expected {expected}", position)

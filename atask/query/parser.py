"""
Recursive-descent parser for the atask query language.

Grammar, loosest binding first:

    expr        := or_expr
    or_expr     := and_expr ( "OR" and_expr )*
    and_expr    := not_expr ( "AND" not_expr )*
    not_expr    := "NOT" not_expr | primary
    primary     := "(" expr ")" | comparison
    comparison  := FIELD OPERATOR VALUE

Examples:
    status:open AND priority:p1
    area:work AND (priority:p1 OR priority:p2)
    content:blocker AND NOT status:done
    estimate>5
    due:soon AND NOT status:done

Fields are checked against the registry while parsing, so a returned tree
only references known fields with operators and literals they accept.
"""

import logging
from typing import List

from .ast import And, Comparison, Expr, Not, Operator, Or
from .errors import (
    InvalidLiteral,
    OperatorNotSupported,
    UnbalancedParens,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnknownField,
)
from .fields import lookup_field
from .lexer import Token, TokenType, tokenize

logger = logging.getLogger(__name__)


def check_parens(tokens: List[Token]) -> None:
    """
    Verify parentheses pair up before parsing.

    Raises:
        UnbalancedParens: At a ')' with no opener, or at the innermost '('
            still open when the tokens run out
    """
    open_positions: List[int] = []
    for token in tokens:
        if token.type == TokenType.LPAREN:
            open_positions.append(token.position)
        elif token.type == TokenType.RPAREN:
            if not open_positions:
                raise UnbalancedParens(")", token.position)
            open_positions.pop()
    if open_positions:
        raise UnbalancedParens("(", open_positions[-1])


class QueryParser:
    """
    Parser over a token list.

    A parser instance is used for a single query; ``parse_query`` is the
    convenient entry point.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType, expected: str) -> Token:
        token = self._peek()
        if token.type == token_type:
            return self._advance()
        if token.type == TokenType.EOF:
            raise UnexpectedEndOfInput(expected, token.position)
        raise UnexpectedToken(token.describe(), expected, token.position)

    def parse(self) -> Expr:
        check_parens(self.tokens)
        expr = self._parse_or()
        token = self._peek()
        if token.type != TokenType.EOF:
            raise UnexpectedToken(token.describe(), "AND, OR or end of query", token.position)
        return expr

    def _parse_or(self) -> Expr:
        node = self._parse_and()
        while self._peek().type == TokenType.OR:
            self._advance()
            node = Or(node, self._parse_and())
        return node

    def _parse_and(self) -> Expr:
        node = self._parse_not()
        while self._peek().type == TokenType.AND:
            self._advance()
            node = And(node, self._parse_not())
        return node

    def _parse_not(self) -> Expr:
        if self._peek().type == TokenType.NOT:
            self._advance()
            return Not(self._parse_not())
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        token = self._peek()
        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_or()
            self._expect(TokenType.RPAREN, "')'")
            return expr
        return self._parse_comparison()

    def _parse_comparison(self) -> Comparison:
        field_token = self._expect(TokenType.IDENT, "a field name")
        spec = lookup_field(field_token.text)
        if spec is None:
            raise UnknownField(field_token.text, field_token.position)

        op_token = self._expect(TokenType.OPERATOR, f"an operator after {field_token.text!r}")
        op = Operator.from_token(op_token.text)
        if not spec.supports(op):
            raise OperatorNotSupported(spec.name, op_token.text, op_token.position)

        value_token = self._peek()
        if value_token.type not in (TokenType.IDENT, TokenType.STRING):
            if value_token.type == TokenType.EOF:
                raise UnexpectedEndOfInput(f"a value for {field_token.text!r}", value_token.position)
            raise UnexpectedToken(
                value_token.describe(), f"a value for {field_token.text!r}", value_token.position
            )
        self._advance()

        expected = spec.check_literal(op, value_token.text)
        if expected is not None:
            raise InvalidLiteral(spec.name, value_token.text, value_token.position, expected)

        return Comparison(spec.name, op, value_token.text)


def parse_query(query: str) -> Expr:
    """
    Parse a query string into an expression tree.

    Args:
        query: Query text typed by the user

    Returns:
        Immutable expression tree

    Raises:
        QueryError: A LexError, UnknownField, OperatorNotSupported,
            InvalidLiteral, UnbalancedParens, UnexpectedEndOfInput or
            UnexpectedToken carrying the offending offset
    """
    tokens = tokenize(query)
    expr = QueryParser(tokens).parse()
    logger.debug(f"Parsed query {query!r} as {expr}")
    return expr

"""
atask Query Language - boolean filters over task records.

A query is a boolean expression over ``field<op>value`` comparisons:

    status:open AND priority:p1
    area:work AND (priority:p1 OR priority:p2)
    content:blocker AND NOT status:done
    estimate>5
    project_id:empty
    due:soon AND NOT status:done

Operators:
    :  =   equals (both spellings mean the same)
    !=     not equals
    >  <   greater / less than (numeric fields only)

Precedence (tightest to loosest):
    1. NOT
    2. AND
    3. OR
    Parentheses override precedence.

Example usage:

    from atask.query import parse_query, evaluate, EvalConfig

    expr = parse_query("due:overdue AND NOT status:done")
    config = EvalConfig(soon_horizon=3)
    late = [t for t in tasks if evaluate(expr, t, config)]
"""

# Tokens
from .lexer import Token, TokenType, tokenize

# Expression tree
from .ast import And, Comparison, Expr, Not, Operator, Or

# Errors
from .errors import (
    InvalidLiteral,
    LexError,
    OperatorNotSupported,
    QueryError,
    UnbalancedParens,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnknownField,
)

# Field registry
from .fields import FIELDS, FieldKind, FieldSpec, iter_fields, lookup_field

# Parser
from .parser import QueryParser, parse_query

# Evaluator
from .evaluator import EvalConfig, RecordView, evaluate, filter_records, matches

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'tokenize',

    # Expression tree
    'Expr',
    'And',
    'Or',
    'Not',
    'Comparison',
    'Operator',

    # Errors
    'QueryError',
    'LexError',
    'UnknownField',
    'OperatorNotSupported',
    'InvalidLiteral',
    'UnbalancedParens',
    'UnexpectedEndOfInput',
    'UnexpectedToken',

    # Fields
    'FIELDS',
    'FieldKind',
    'FieldSpec',
    'iter_fields',
    'lookup_field',

    # Parser
    'QueryParser',
    'parse_query',

    # Evaluator
    'EvalConfig',
    'RecordView',
    'evaluate',
    'filter_records',
    'matches',
]

"""Evaluator for query expressions against task records."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Protocol, TypeVar

from .ast import And, Comparison, Expr, Not, Or
from .fields import lookup_field

logger = logging.getLogger(__name__)

DEFAULT_SOON_HORIZON = 3


class RecordView(Protocol):
    """
    Read-only surface the evaluator needs from a record.

    Any object with these attributes can be filtered; attributes that are
    missing are treated as unset.
    """
    status: str
    priority: str
    area: str
    assignee: str
    recur: str
    project_id: str
    title: str
    content: str
    due_date: str
    start_date: str
    estimate: Optional[int]
    index_id: Optional[int]
    tags: Iterable[str]


@dataclass(frozen=True)
class EvalConfig:
    """
    Ambient settings for evaluation.

    Attributes:
        soon_horizon: Days ahead (inclusive) that count as due ``soon``
        today: Reference day for ``overdue``, ``today``, ``week`` and ``soon``
    """
    soon_horizon: int = DEFAULT_SOON_HORIZON
    today: date = field(default_factory=date.today)

    def __post_init__(self):
        if self.soon_horizon < 0:
            raise ValueError(f"soon_horizon must be non-negative, got {self.soon_horizon}")


def evaluate(expr: Expr, record: RecordView, config: EvalConfig) -> bool:
    """
    Evaluate a parsed query against one record.

    ``And`` and ``Or`` short-circuit. The function reads the tree, the record
    and the config without changing any of them.

    Args:
        expr: Tree returned by ``parse_query``
        record: Record to test
        config: Evaluation settings

    Returns:
        True if the record matches

    Raises:
        TypeError: If the tree contains a node that is not part of the AST
        ValueError: If a hand-built Comparison names an unregistered field
    """
    if isinstance(expr, Comparison):
        spec = lookup_field(expr.field)
        if spec is None:
            raise ValueError(f"Unknown field in expression: {expr.field}")
        return spec.compare(record, expr.op, expr.value, config)
    elif isinstance(expr, And):
        return evaluate(expr.left, record, config) and evaluate(expr.right, record, config)
    elif isinstance(expr, Or):
        return evaluate(expr.left, record, config) or evaluate(expr.right, record, config)
    elif isinstance(expr, Not):
        return not evaluate(expr.inner, record, config)
    else:
        raise TypeError(f"Unknown expression type: {type(expr)}")


R = TypeVar("R")


def filter_records(
    expr: Expr,
    records: Iterable[R],
    config: EvalConfig,
    max_workers: Optional[int] = None,
) -> List[R]:
    """
    Keep the records matching an expression.

    The result preserves input order. With ``max_workers`` greater than one
    the records are evaluated on a thread pool sharing the same tree.

    Args:
        expr: Parsed query
        records: Candidate records
        config: Evaluation settings
        max_workers: Thread pool size, None or 1 for sequential evaluation

    Returns:
        Matching records in input order
    """
    candidates = list(records)

    if max_workers and max_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(lambda r: evaluate(expr, r, config), candidates))
    else:
        results = [evaluate(expr, r, config) for r in candidates]

    matched = [r for r, ok in zip(candidates, results) if ok]
    logger.debug(f"Query {expr} matched {len(matched)} of {len(candidates)} records")
    return matched


def matches(query: str, record: RecordView, config: Optional[EvalConfig] = None) -> bool:
    """Parse ``query`` and evaluate it against a single record."""
    from .parser import parse_query

    return evaluate(parse_query(query), record, config or EvalConfig())

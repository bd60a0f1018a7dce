"""
Field registry for the atask query language.

Every queryable field is one entry in a static table. The entry decides
which record attribute is read, which operators are legal and how the
literal is compared, so neither the parser nor the evaluator needs to know
anything about individual field names.

Kinds:
    EXACT_STRING  case-sensitive equality       status, priority, area, ...
    DATE          calendar-day comparisons      due-date, start-date
    NUMERIC       integer comparisons           estimate, index-id
    TAG_SET       membership in the tag set     tag, tags
    FULL_TEXT     case-insensitive substring    content, title
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterator, Mapping, Optional, Tuple

from .ast import Operator

if TYPE_CHECKING:
    from .evaluator import EvalConfig


class FieldKind(Enum):
    EXACT_STRING = "string"
    DATE = "date"
    NUMERIC = "number"
    TAG_SET = "tags"
    FULL_TEXT = "text"


# Special values
EMPTY = "empty"
SET = "set"
OVERDUE = "overdue"
TODAY = "today"
WEEK = "week"
SOON = "soon"

WEEK_DAYS = 7

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)

Comparator = Callable[[Any, Operator, str, "EvalConfig"], bool]


# =============================================================================
# Value helpers
# =============================================================================

def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    if value is None:
        return True
    return str(value).strip() == ""


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse a date-like value to a calendar day.

    Accepts ``date``/``datetime`` objects and ISO strings with or without a
    time part (``2024-03-01``, ``2024-03-01T09:30``, ``2024-03-01 09:30Z``).
    The time of day is dropped. Anything after the date other than a time
    part makes the value malformed (``2024-03-01garbage``).

    Returns:
        The calendar date, or None if the value is blank or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_blank(value):
        return None

    s = str(value).strip()
    if not _ISO_DATE_RE.match(s):
        return None
    try:
        return datetime.fromisoformat(s.replace('Z', '+00:00')).date()
    except ValueError:
        pass
    # fromisoformat on older interpreters rejects some time suffixes
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def parse_integer(value: Any) -> Optional[int]:
    """Coerce a record's numeric attribute to int, None when unset or malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    s = str(value).strip()
    if _INTEGER_RE.match(s):
        return int(s)
    return None


def _apply_negation(op: Operator, matched: bool) -> bool:
    if op is Operator.NOT_EQ:
        return not matched
    return matched


# =============================================================================
# Comparators
# =============================================================================

def compare_exact_string(actual: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
    if value == EMPTY:
        matched = is_blank(actual)
    elif value == SET:
        matched = not is_blank(actual)
    else:
        matched = actual is not None and str(actual) == value
    return _apply_negation(op, matched)


def compare_date(actual: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
    if value == EMPTY:
        return _apply_negation(op, is_blank(actual))
    if value == SET:
        return _apply_negation(op, not is_blank(actual))

    day = parse_calendar_date(actual)
    today = config.today

    if value in (OVERDUE, TODAY, WEEK, SOON):
        if day is None:
            matched = False
        else:
            days_until = (day - today).days
            if value == OVERDUE:
                matched = days_until < 0
            elif value == TODAY:
                matched = days_until == 0
            elif value == WEEK:
                matched = 0 <= days_until <= WEEK_DAYS
            else:
                matched = 0 <= days_until <= config.soon_horizon
        return _apply_negation(op, matched)

    wanted = parse_calendar_date(value)
    if wanted is not None:
        matched = day is not None and day == wanted
    else:
        matched = not is_blank(actual) and str(actual).strip() == value
    return _apply_negation(op, matched)


def compare_numeric(actual: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
    number = parse_integer(actual)

    if value == EMPTY:
        return _apply_negation(op, number is None)
    if value == SET:
        return _apply_negation(op, number is not None)

    wanted = int(value)
    if op is Operator.GT:
        return number is not None and number > wanted
    if op is Operator.LT:
        return number is not None and number < wanted
    return _apply_negation(op, number is not None and number == wanted)


def compare_tag_set(actual: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
    if actual is None:
        return False
    if isinstance(actual, str):
        return actual == value
    return any(tag == value for tag in actual)


def compare_full_text(actual: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
    if actual is None:
        return False
    return value.lower() in str(actual).lower()


# =============================================================================
# Literal validation
# =============================================================================

def _check_numeric_literal(op: Operator, value: str) -> Optional[str]:
    """Return a description of the expected literal, or None if valid."""
    if value in (EMPTY, SET):
        if op in (Operator.EQ, Operator.NOT_EQ):
            return None
        return "an integer"
    if _INTEGER_RE.match(value):
        return None
    return f"an integer, '{EMPTY}' or '{SET}'"


def _accept_any_literal(op: Operator, value: str) -> Optional[str]:
    return None


@dataclass(frozen=True)
class KindRule:
    """Behaviour shared by every field of one kind."""
    operators: FrozenSet[Operator]
    comparator: Comparator
    special_values: Tuple[str, ...] = ()
    check_literal: Callable[[Operator, str], Optional[str]] = _accept_any_literal


_EQUALITY = frozenset({Operator.EQ, Operator.NOT_EQ})

KIND_RULES: Mapping[FieldKind, KindRule] = MappingProxyType({
    FieldKind.EXACT_STRING: KindRule(
        operators=_EQUALITY,
        comparator=compare_exact_string,
        special_values=(EMPTY, SET),
    ),
    FieldKind.DATE: KindRule(
        operators=_EQUALITY,
        comparator=compare_date,
        special_values=(OVERDUE, TODAY, WEEK, SOON, EMPTY, SET),
    ),
    FieldKind.NUMERIC: KindRule(
        operators=frozenset({Operator.EQ, Operator.NOT_EQ, Operator.GT, Operator.LT}),
        comparator=compare_numeric,
        special_values=(EMPTY, SET),
        check_literal=_check_numeric_literal,
    ),
    FieldKind.TAG_SET: KindRule(
        operators=frozenset({Operator.EQ}),
        comparator=compare_tag_set,
    ),
    FieldKind.FULL_TEXT: KindRule(
        operators=frozenset({Operator.EQ}),
        comparator=compare_full_text,
    ),
})


# =============================================================================
# Registry
# =============================================================================

@dataclass(frozen=True)
class FieldSpec:
    """
    One queryable field.

    Attributes:
        name: Canonical field name used in parsed trees
        kind: Semantic kind deciding operators and comparison
        attribute: RecordView attribute the value is read from
        aliases: Other names accepted in queries
        description: One line shown by ``atask fields``
    """
    name: str
    kind: FieldKind
    attribute: str
    aliases: Tuple[str, ...] = ()
    description: str = ""

    @property
    def rule(self) -> KindRule:
        return KIND_RULES[self.kind]

    @property
    def operators(self) -> FrozenSet[Operator]:
        return self.rule.operators

    @property
    def special_values(self) -> Tuple[str, ...]:
        return self.rule.special_values

    def supports(self, op: Operator) -> bool:
        return op in self.rule.operators

    def check_literal(self, op: Operator, value: str) -> Optional[str]:
        return self.rule.check_literal(op, value)

    def read(self, record: Any) -> Any:
        """Read this field's raw value from a record, None when absent."""
        return getattr(record, self.attribute, None)

    def compare(self, record: Any, op: Operator, value: str, config: "EvalConfig") -> bool:
        return self.rule.comparator(self.read(record), op, value, config)


_FIELD_LIST = (
    FieldSpec("status", FieldKind.EXACT_STRING, "status",
              description="Task status (open, done, paused, delegated, dropped)"),
    FieldSpec("priority", FieldKind.EXACT_STRING, "priority",
              description="Priority (p1, p2, p3)"),
    FieldSpec("area", FieldKind.EXACT_STRING, "area",
              description="Area of responsibility"),
    FieldSpec("assignee", FieldKind.EXACT_STRING, "assignee",
              description="Person the task is assigned to"),
    FieldSpec("recur", FieldKind.EXACT_STRING, "recur",
              description="Recurrence pattern"),
    FieldSpec("project-id", FieldKind.EXACT_STRING, "project_id",
              aliases=("project_id", "project"),
              description="Index ID of the owning project"),
    FieldSpec("due-date", FieldKind.DATE, "due_date",
              aliases=("due_date", "due"),
              description="Due date (YYYY-MM-DD)"),
    FieldSpec("start-date", FieldKind.DATE, "start_date",
              aliases=("start_date", "start"),
              description="Start date (YYYY-MM-DD)"),
    FieldSpec("estimate", FieldKind.NUMERIC, "estimate",
              description="Effort estimate"),
    FieldSpec("index-id", FieldKind.NUMERIC, "index_id",
              aliases=("index_id", "id"),
              description="Sequential task number"),
    FieldSpec("tag", FieldKind.TAG_SET, "tags",
              aliases=("tags",),
              description="Tag membership"),
    FieldSpec("content", FieldKind.FULL_TEXT, "content",
              aliases=("body", "text"),
              description="Substring of the task body"),
    FieldSpec("title", FieldKind.FULL_TEXT, "title",
              description="Substring of the title"),
)


def _build_index(specs: Tuple[FieldSpec, ...]) -> Mapping[str, FieldSpec]:
    index: Dict[str, FieldSpec] = {}
    for spec in specs:
        for name in (spec.name,) + spec.aliases:
            if name in index:
                raise ValueError(f"Duplicate field name: {name}")
            index[name] = spec
    return MappingProxyType(index)


FIELDS: Mapping[str, FieldSpec] = MappingProxyType({spec.name: spec for spec in _FIELD_LIST})
FIELD_INDEX: Mapping[str, FieldSpec] = _build_index(_FIELD_LIST)


def lookup_field(name: str) -> Optional[FieldSpec]:
    """Resolve a field name or alias (case-insensitive) to its spec."""
    return FIELD_INDEX.get(name.lower())


def iter_fields() -> Iterator[FieldSpec]:
    """Iterate canonical field specs in registry order."""
    return iter(_FIELD_LIST)

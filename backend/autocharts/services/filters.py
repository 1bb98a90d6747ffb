"""
Filter predicate evaluation.

A row is kept when it satisfies every condition. Operators are looked up in
a dispatch table; an operator missing from the table lets the row through so
that an unrecognized filter never hides data.
"""
import logging
from typing import Any, Callable, Dict, List

from autocharts.core.schemas import FilterCondition, Record
from autocharts.services.coercion import CoercedValue, coerce, is_bool, is_missing, stringify

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, FilterCondition], bool]

ORDERED_KINDS = ('number', 'date')


def _comparable(*items: CoercedValue) -> bool:
    """True when every operand is a number, or every operand is a date."""
    kinds = {item.kind for item in items}
    return len(kinds) == 1 and kinds.pop() in ORDERED_KINDS


def _equals(cell: Any, condition: FilterCondition) -> bool:
    left, right = coerce(cell), coerce(condition.value)
    return left.kind == right.kind and left.value == right.value


def _ordering(compare: Callable[[Any, Any], bool]) -> Predicate:
    def predicate(cell: Any, condition: FilterCondition) -> bool:
        left, right = coerce(cell), coerce(condition.value)
        return _comparable(left, right) and compare(left.value, right.value)
    return predicate


def _text(test: Callable[[str, str], bool]) -> Predicate:
    def predicate(cell: Any, condition: FilterCondition) -> bool:
        if is_missing(cell):
            return False
        return test(stringify(cell), stringify(condition.value))
    return predicate


def _is_boolean(cell: Any, expected: bool) -> bool:
    """Raw boolean identity; the string "true" is not True."""
    return is_bool(cell) and bool(cell) is expected


def _between(cell: Any, condition: FilterCondition) -> bool:
    value, low, high = coerce(cell), coerce(condition.value), coerce(condition.value2)
    return _comparable(value, low, high) and low.value <= value.value <= high.value


OPERATORS: Dict[str, Predicate] = {
    '==': _equals,
    '!=': lambda cell, condition: not _equals(cell, condition),
    '>': _ordering(lambda a, b: a > b),
    '<': _ordering(lambda a, b: a < b),
    '>=': _ordering(lambda a, b: a >= b),
    '<=': _ordering(lambda a, b: a <= b),
    'contains': _text(lambda text, needle: needle in text),
    'startsWith': _text(lambda text, prefix: text.startswith(prefix)),
    'endsWith': _text(lambda text, suffix: text.endswith(suffix)),
    'between': _between,
    '==true': lambda cell, condition: _is_boolean(cell, True),
    '==false': lambda cell, condition: _is_boolean(cell, False),
}


def evaluate_condition(row: Record, condition: FilterCondition) -> bool:
    predicate = OPERATORS.get(condition.operator)
    if predicate is None:
        logger.debug(f"Unknown filter operator '{condition.operator}', condition ignored")
        return True
    return predicate(row.get(condition.column), condition)


def apply_filters(dataset: List[Record], conditions: List[FilterCondition]) -> List[Record]:
    """
    Rows of dataset satisfying all conditions, in their original order.

    The dataset itself is never modified; with no conditions a shallow copy
    is returned.
    """
    if not conditions:
        return list(dataset)

    filtered = [row for row in dataset if all(evaluate_condition(row, c) for c in conditions)]
    logger.debug(f"Filters kept {len(filtered)} of {len(dataset)} rows")
    return filtered


def upsert_filter(filters: List[FilterCondition], new_filter: FilterCondition) -> List[FilterCondition]:
    """Replace the filter on the same column, or append when there is none."""
    for index, existing in enumerate(filters):
        if existing.column == new_filter.column:
            return filters[:index] + [new_filter] + filters[index + 1:]
    return filters + [new_filter]


def remove_filter(filters: List[FilterCondition], target: FilterCondition) -> List[FilterCondition]:
    """Drop every filter matching target's column, operator and value."""
    return [
        f for f in filters
        if not (f.column == target.column and f.operator == target.operator and f.value == target.value)
    ]


"""
Grouping and aggregation for chart data.
"""
import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

import numpy as np

from autocharts.core.schemas import AggregationSpec, Record
from autocharts.services.coercion import parse_numeric_value, stringify

logger = logging.getLogger(__name__)

# Upstream serializers write these for absent values; they are not categories
MISSING_GROUP_MARKERS = frozenset(('undefined', 'null'))

REDUCERS: Dict[str, Callable[[np.ndarray], float]] = {
    'sum': lambda values: float(values.sum()),
    'count': lambda values: int(values.size),
    'average': lambda values: float(values.mean()),
    'min': lambda values: float(values.min()),
    'max': lambda values: float(values.max()),
}

N = TypeVar('N', int, float)


def group_key(raw) -> Optional[str]:
    """Trimmed text of a grouping cell, or None when it marks a missing group."""
    key = stringify(raw).strip()
    if not key or key in MISSING_GROUP_MARKERS:
        return None
    return key


def group_values(dataset: List[Record], group_column: str, value_column: str) -> Dict[str, List[float]]:
    """
    Bucket the numeric values of value_column by group key.

    Rows whose value is not numeric still register their group (possibly
    with no values); callers decide what an empty bucket means.
    """
    groups: Dict[str, List[float]] = {}
    for row in dataset:
        key = group_key(row.get(group_column))
        if key is None:
            continue
        bucket = groups.setdefault(key, [])
        value = parse_numeric_value(row.get(value_column))
        if value is not None:
            bucket.append(value)
    return groups


def aggregate(dataset: List[Record], spec: AggregationSpec) -> Dict[str, float]:
    """
    Group rows by spec.group_column and reduce spec.value_column.

    Groups are reported in order of first appearance. A group whose rows
    carry no numeric value is dropped instead of reported as zero.
    """
    reducer = REDUCERS[spec.function]
    result: Dict[str, float] = {}
    skipped = 0
    for key, values in group_values(dataset, spec.group_column, spec.value_column).items():
        if not values:
            skipped += 1
            continue
        result[key] = reducer(np.asarray(values, dtype='float64'))

    if skipped:
        logger.debug(f"Dropped {skipped} groups of '{spec.group_column}' with no numeric '{spec.value_column}'")
    return result


def value_counts(dataset: List[Record], column: str) -> Dict[str, int]:
    """Row count per distinct value of column, in order of first appearance."""
    counts: Dict[str, int] = {}
    for row in dataset:
        key = group_key(row.get(column))
        if key is not None:
            counts[key] = counts.get(key, 0) + 1
    return counts


def top_entries(mapping: Mapping[str, N], limit: Optional[int] = None, descending: bool = True) -> List[Tuple[str, N]]:
    """Entries sorted by value (stable for ties) and truncated to limit."""
    entries = sorted(mapping.items(), key=lambda item: item[1], reverse=descending)
    return entries if limit is None else entries[:limit]

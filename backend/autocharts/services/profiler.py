"""
Column profiler.

Infers the type of every column of a record list and computes per-column
statistics. Type voting is all-or-nothing: one cell that fails a check
downgrades the whole column to the next looser type, ending at 'string'.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from autocharts.core.performance import track_performance
from autocharts.core.schemas import ColumnProfile, Record
from autocharts.services.coercion import (
    as_datetime,
    as_number,
    is_blank,
    is_integer_text,
    is_missing,
    stringify,
)

logger = logging.getLogger(__name__)

SAMPLE_VALUE_COUNT = 5

# A numeric column is treated as a discrete axis below these limits
CATEGORICAL_UNIQUE_RATIO = 0.2
CATEGORICAL_MAX_UNIQUE = 10


def column_names(dataset: List[Record]) -> List[str]:
    """Column order is fixed by the first record."""
    if not dataset:
        return []
    return list(dataset[0].keys())


def column_values(dataset: List[Record], column: str) -> List[Any]:
    """All cells of a column; keys missing from a record read as None."""
    return [row.get(column) for row in dataset]


def _all(values: List[Any], check: Callable[[Any], bool]) -> bool:
    return all(check(value) for value in values)


def infer_column_type(values: List[Any]) -> str:
    """
    Vote a column type over its non-null, non-blank values.

    Returns 'integer', 'number', 'date', 'string', or 'unknown' when there
    is nothing to vote on.
    """
    if not values:
        return 'unknown'
    if _all(values, is_integer_text):
        return 'integer'
    if _all(values, lambda v: as_number(v) is not None):
        return 'number'
    if _all(values, lambda v: as_datetime(v) is not None):
        return 'date'
    return 'string'


def _numeric_stats(values: List[Any], unique_count: int) -> Dict[str, Any]:
    numbers = pd.Series([as_number(v) for v in values], dtype='float64').dropna()
    if numbers.empty:
        return {}
    is_categorical = (
        unique_count / len(values) < CATEGORICAL_UNIQUE_RATIO
        and unique_count <= CATEGORICAL_MAX_UNIQUE
    )
    return {
        'min': float(numbers.min()),
        'max': float(numbers.max()),
        'mean': float(numbers.mean()),
        'is_likely_categorical': bool(is_categorical),
    }


def _date_stats(values: List[Any], unique_count: int) -> Dict[str, Any]:
    dates: List[datetime] = [d for d in (as_datetime(v) for v in values) if d is not None]
    if not dates:
        return {}
    return {
        'min_date': min(dates),
        'max_date': max(dates),
        'is_likely_time_series': unique_count > 1,
    }


def profile_column(name: str, cells: List[Any], sample_size: Optional[int] = None) -> ColumnProfile:
    """Profile a single column given all of its cells in row order."""
    present = [v for v in cells if not is_missing(v) and not is_blank(v)]
    null_count = sum(1 for v in cells if is_missing(v))
    empty_count = sum(1 for v in cells if is_blank(v))
    unique_count = len({stringify(v) for v in present})

    voters = present[:sample_size] if sample_size else present
    dtype = infer_column_type(voters)

    stats: Dict[str, Any] = {}
    if dtype in ('integer', 'number'):
        stats = _numeric_stats(present, unique_count)
    elif dtype == 'date':
        stats = _date_stats(present, unique_count)

    return ColumnProfile(
        name=name,
        dtype=dtype,
        null_count=null_count,
        empty_count=empty_count,
        unique_count=unique_count,
        sample_values=present[:SAMPLE_VALUE_COUNT],
        **stats
    )


@track_performance("profile_dataset")
def profile_dataset(dataset: List[Record], sample_size: Optional[int] = None) -> Dict[str, ColumnProfile]:
    """
    Profile every column of a dataset.

    Args:
        dataset: Records sharing the column set of the first record
        sample_size: Limit type voting to the first N present values of each
            column. None votes over every value.

    Returns:
        Column name -> ColumnProfile, in column order. Empty for an empty
        dataset. Never raises on bad cells.
    """
    profile: Dict[str, ColumnProfile] = {}
    for name in column_names(dataset):
        profile[name] = profile_column(name, column_values(dataset, name), sample_size)

    logger.debug(f"Profiled {len(dataset)} rows x {len(profile)} columns")
    return profile


def numeric_columns(profile: Dict[str, ColumnProfile], include_categorical: bool = False) -> List[str]:
    return [
        name for name, column in profile.items()
        if column.is_numeric and (include_categorical or not column.is_likely_categorical)
    ]


def date_columns(profile: Dict[str, ColumnProfile]) -> List[str]:
    return [name for name, column in profile.items() if column.dtype == 'date']


def categorical_columns(profile: Dict[str, ColumnProfile]) -> List[str]:
    """String columns plus numeric columns flagged as categorical."""
    return [
        name for name, column in profile.items()
        if column.dtype == 'string' or (column.is_numeric and column.is_likely_categorical)
    ]

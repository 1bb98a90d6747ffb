"""
Column transforms: explicit type conversion and calculated columns.

Both return a new dataset; the input records are left untouched.
"""
import logging
import math
import numbers
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from autocharts.core.schemas import Record
from autocharts.services.coercion import as_datetime, as_number, is_blank, is_bool, is_missing, stringify
from autocharts.services.profiler import column_names, column_values

logger = logging.getLogger(__name__)

TRUE_TEXT = frozenset(('true', '1'))
FALSE_TEXT = frozenset(('false', '0'))


def to_boolean(raw: Any) -> Optional[bool]:
    if is_bool(raw):
        return bool(raw)
    if isinstance(raw, numbers.Real):
        return {1: True, 0: False}.get(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in TRUE_TEXT:
            return True
        if text in FALSE_TEXT:
            return False
    return None


CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    'number': as_number,
    'boolean': to_boolean,
    'date': as_datetime,
    'string': stringify,
}


def convert_column_type(dataset: List[Record], column: str, new_type: str) -> List[Record]:
    """
    Convert the cells of one column to new_type.

    Cells that fail to convert become None; missing and blank cells are kept
    as they are. An unknown new_type returns an unchanged copy.
    """
    converter = CONVERTERS.get(new_type)
    if converter is None:
        logger.warning(f"Unsupported column type '{new_type}', data left unchanged")
        return [dict(row) for row in dataset]

    converted = []
    for row in dataset:
        new_row = dict(row)
        value = new_row.get(column)
        if not (is_missing(value) or is_blank(value)):
            new_row[column] = converter(value)
        converted.append(new_row)
    return converted


def _formula_frame(dataset: List[Record]) -> pd.DataFrame:
    """Frame of the dataset with fully numeric columns cast to float."""
    frame = pd.DataFrame.from_records(dataset, columns=column_names(dataset))
    for name in frame.columns:
        present = [v for v in column_values(dataset, name) if not is_missing(v) and not is_blank(v)]
        parsed = [as_number(v) for v in present]
        if present and all(n is not None for n in parsed):
            frame[name] = [as_number(v) for v in column_values(dataset, name)]
            frame[name] = frame[name].astype('float64')
    return frame


def _clean_result(value: Any) -> Any:
    if is_missing(value):
        return None
    if hasattr(value, 'item'):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def add_calculated_column(dataset: List[Record], name: str, formula: str) -> List[Record]:
    """
    Append a column computed from a formula over the existing columns.

    The formula uses pandas eval syntax, e.g. "price * quantity" or
    "`unit price` * qty". Division by zero and other non-finite results
    become None.

    Raises:
        ValueError: empty dataset, existing column name, or a formula that
            cannot be evaluated over this data
    """
    if not dataset:
        raise ValueError("No data loaded to add a calculated column to")
    if name in column_names(dataset):
        raise ValueError(f"Column '{name}' already exists")

    frame = _formula_frame(dataset)
    try:
        result = frame.eval(formula)
    except Exception as e:
        raise ValueError(f"Error evaluating formula: {e}") from e

    if isinstance(result, pd.DataFrame):
        raise ValueError("Formula must produce a single value per row, not assign columns")
    if not isinstance(result, pd.Series):
        result = pd.Series([result] * len(frame))

    values = [_clean_result(v) for v in result.tolist()]
    logger.info(f"Added calculated column '{name}' ({sum(v is not None for v in values)} values)")
    return [{**row, name: value} for row, value in zip(dataset, values)]

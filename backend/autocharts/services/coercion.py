"""
Value coercion.

Normalizes a raw cell into a typed value. The checks run in a fixed order:
integer text, then any finite number, then a calendar date, then plain
string. "2024" therefore stays a number instead of becoming January 1st.
"""
import math
import numbers
import re
from datetime import date, datetime, time
from typing import Any, NamedTuple, Optional

import numpy as np
import pandas as pd

INTEGER_PATTERN = re.compile(r'^-?(0|[1-9]\d*)$')
NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
ISO_DATE_PATTERN = re.compile(
    r'^\d{4}-\d{2}(-\d{2})?'
    r'([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?)?'
    r'(Z|[+-]\d{2}:?\d{2})?$'
)
CURRENCY_SYMBOLS = re.compile(r'[$€£¥%,]')

# Tried in order after ISO 8601; none of them depend on the process locale
DATE_FORMATS = (
    '%Y/%m/%d',
    '%Y/%m/%d %H:%M',
    '%Y/%m/%d %H:%M:%S',
    '%m/%d/%Y',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y %H:%M:%S',
    '%b %d, %Y',
    '%B %d, %Y',
    '%b %d %Y',
    '%B %d %Y',
    '%d %b %Y',
    '%d %B %Y',
)

# JavaScript-style integral float rendering stops here
_MAX_PLAIN_INTEGER = 1e21


class CoercedValue(NamedTuple):
    kind: str  # 'number', 'date', 'boolean', 'string' or 'null'
    value: Any
    text: str


NULL = CoercedValue('null', None, '')


def is_missing(raw: Any) -> bool:
    """True for absent cells: None, NaN and NaT."""
    if raw is None or raw is pd.NaT:
        return True
    if isinstance(raw, (float, np.floating)):
        return math.isnan(raw)
    return False


def is_bool(raw: Any) -> bool:
    return isinstance(raw, (bool, np.bool_))


def stringify(raw: Any) -> str:
    """
    Canonical text form of a cell.

    Integral floats render without a trailing ".0" so that 3.0 and "3" agree,
    booleans render as true/false and dates as ISO 8601. Missing cells
    render as the empty string.
    """
    if is_missing(raw):
        return ''
    if is_bool(raw):
        return 'true' if raw else 'false'
    if isinstance(raw, numbers.Integral):
        return str(int(raw))
    if isinstance(raw, numbers.Real):
        number = finite_float(raw)
        if number is None:
            return str(raw)
        if number.is_integer() and abs(number) < _MAX_PLAIN_INTEGER:
            return str(int(number))
        return repr(number)
    if isinstance(raw, (datetime, date)):
        return raw.isoformat()
    return str(raw)


def is_blank(raw: Any) -> bool:
    """Present but empty once trimmed (e.g. "" or "   ")."""
    return not is_missing(raw) and stringify(raw).strip() == ''


def is_integer_text(raw: Any) -> bool:
    if is_missing(raw) or is_bool(raw):
        return False
    return INTEGER_PATTERN.match(stringify(raw).strip()) is not None


def finite_float(raw: Any) -> Optional[float]:
    """float(raw) when it is finite; ints beyond the float range give None."""
    try:
        number = float(raw)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def parse_number(text: str) -> Optional[float]:
    """Parse a plain decimal literal; NaN, infinities and hex are rejected."""
    if not NUMBER_PATTERN.match(text):
        return None
    return finite_float(text)


def _normalize_timestamp(value) -> Optional[datetime]:
    if value is None or value is pd.NaT:
        return None
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts.to_pydatetime()


def parse_date(text: str) -> Optional[datetime]:
    """Parse ISO 8601, US and month-name date text into a naive datetime."""
    if ISO_DATE_PATTERN.match(text):
        try:
            return _normalize_timestamp(pd.to_datetime(text, format='ISO8601'))
        except (ValueError, OverflowError):
            return None

    for fmt in DATE_FORMATS:
        try:
            return _normalize_timestamp(pd.to_datetime(text, format=fmt))
        except (ValueError, OverflowError):
            continue
    return None


def as_number(raw: Any) -> Optional[float]:
    """Strict numeric reading of a cell, or None."""
    if is_missing(raw) or is_bool(raw):
        return None
    if isinstance(raw, numbers.Real):
        return finite_float(raw)
    if isinstance(raw, (datetime, date)):
        return None
    return parse_number(stringify(raw).strip())


def as_datetime(raw: Any) -> Optional[datetime]:
    """Date reading of a cell, or None. Bare numbers are never dates."""
    if is_missing(raw) or is_bool(raw) or isinstance(raw, numbers.Real):
        return None
    if isinstance(raw, datetime):
        return _normalize_timestamp(raw)
    if isinstance(raw, date):
        return datetime.combine(raw, time())
    return parse_date(stringify(raw).strip())


def parse_numeric_value(raw: Any) -> Optional[float]:
    """
    Lenient numeric reading used for aggregation.

    Accepts everything as_number does plus text decorated with currency
    symbols, percent signs or thousands separators ("$1,200", "15%").
    """
    number = as_number(raw)
    if number is not None or not isinstance(raw, str):
        return number
    cleaned = CURRENCY_SYMBOLS.sub('', raw).strip()
    return parse_number(cleaned) if cleaned else None


def coerce(raw: Any) -> CoercedValue:
    """
    Classify a raw cell as number, date, boolean, string or null.

    Blank text counts as null here; the profiler tells blanks and missing
    cells apart on its own.
    """
    if is_missing(raw):
        return NULL
    if is_bool(raw):
        return CoercedValue('boolean', bool(raw), stringify(raw))
    if isinstance(raw, numbers.Real):
        number = finite_float(raw)
        if number is not None:
            return CoercedValue('number', number, stringify(raw))
    if isinstance(raw, (datetime, date)):
        return CoercedValue('date', as_datetime(raw), stringify(raw))

    text = stringify(raw).strip()
    if not text:
        return NULL

    number = parse_number(text)
    if number is not None:
        return CoercedValue('number', number, text)

    parsed_date = parse_date(text)
    if parsed_date is not None:
        return CoercedValue('date', parsed_date, text)

    return CoercedValue('string', text, text)

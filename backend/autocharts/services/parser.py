"""
Upload parsing: turns CSV, TSV, Excel or JSON bytes into records.

Cells are handed to the engine as raw as possible. Delimited text is read
as strings (empty cells stay ""), so type inference happens in the profiler
rather than in pandas.
"""
import logging
from io import BytesIO
from pathlib import Path
from typing import List

import pandas as pd
from fastapi import HTTPException, UploadFile

from autocharts.core.config import get_settings
from autocharts.core.errors import ErrorCodes, get_error_response
from autocharts.core.performance import track_performance
from autocharts.core.sanitization import clean_column_name, sanitize_filename
from autocharts.core.schemas import Record

logger = logging.getLogger(__name__)

DELIMITERS = {'.csv': ',', '.tsv': '\t', '.txt': '\t'}
EXCEL_EXTENSIONS = {'.xlsx', '.xls'}
ALLOWED_EXTENSIONS = set(DELIMITERS) | EXCEL_EXTENSIONS | {'.json'}


def _bad_request(code: str, detail: str = None) -> HTTPException:
    return HTTPException(status_code=400, detail=get_error_response(code, detail))


def validate_file_extension(filename: str) -> str:
    """Return the lower-cased extension, or raise for unsupported files."""
    file_ext = Path(filename or '').suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise _bad_request(
            ErrorCodes.INVALID_FILE_TYPE,
            f"Got '{file_ext or 'no extension'}', expected one of {', '.join(sorted(ALLOWED_EXTENSIONS))}."
        )
    return file_ext


def _read_delimited(contents: bytes, sep: str) -> pd.DataFrame:
    options = dict(sep=sep, dtype=str, keep_default_na=False, skip_blank_lines=True)
    try:
        return pd.read_csv(BytesIO(contents), **options)
    except UnicodeDecodeError:
        logger.info("File is not UTF-8, retrying as latin1")
        return pd.read_csv(BytesIO(contents), encoding='latin1', **options)


def read_frame(contents: bytes, file_ext: str) -> pd.DataFrame:
    """Read file bytes into a DataFrame according to the extension."""
    if file_ext in DELIMITERS:
        return _read_delimited(contents, DELIMITERS[file_ext])
    if file_ext in EXCEL_EXTENSIONS:
        return pd.read_excel(BytesIO(contents))
    # JSON: an array of objects
    return pd.read_json(BytesIO(contents), orient='records', dtype=False, convert_dates=False)


def clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows and columns with no content and normalize header names."""
    if df.empty:
        return df
    empty = df.isna() | (df.astype(str).apply(lambda column: column.str.strip()) == '')
    df = df.loc[~empty.all(axis=1), ~empty.all(axis=0)]
    df.columns = [clean_column_name(name, i) for i, name in enumerate(df.columns)]
    return df


def frame_to_records(df: pd.DataFrame) -> List[Record]:
    """Records with NaN/NaT replaced by None and numpy scalars unboxed."""
    return df.astype(object).where(df.notna(), None).to_dict(orient='records')


def validate_frame(df: pd.DataFrame) -> None:
    settings = get_settings()
    if len(df) > settings.max_file_rows:
        raise _bad_request(
            ErrorCodes.PARSE_ERROR,
            f"The file has {len(df):,} rows; the limit is {settings.max_file_rows:,}."
        )
    if len(df.columns) > settings.max_file_columns:
        raise _bad_request(
            ErrorCodes.PARSE_ERROR,
            f"The file has {len(df.columns)} columns; the limit is {settings.max_file_columns}."
        )


def parse_contents(contents: bytes, filename: str) -> List[Record]:
    """
    Parse raw upload bytes into records.

    Raises:
        HTTPException: unsupported extension, unreadable or empty content,
            or a file beyond the configured row/column limits
    """
    file_ext = validate_file_extension(filename)
    if not contents:
        raise _bad_request(ErrorCodes.FILE_EMPTY)

    try:
        df = read_frame(contents, file_ext)
    except (ValueError, UnicodeDecodeError, pd.errors.ParserError) as e:
        logger.warning(f"Could not parse {sanitize_filename(filename)}: {e}")
        raise _bad_request(ErrorCodes.PARSE_ERROR)

    validate_frame(df)
    df = clean_frame(df)
    if df.empty:
        raise _bad_request(ErrorCodes.FILE_EMPTY)

    logger.info(f"Parsed {sanitize_filename(filename)}: {df.shape[0]} rows x {df.shape[1]} columns")
    return frame_to_records(df)


@track_performance("parse_file")
async def parse_file(file: UploadFile) -> List[Record]:
    """Read an uploaded file and parse it into records."""
    contents = await file.read()
    return parse_contents(contents, file.filename or '')

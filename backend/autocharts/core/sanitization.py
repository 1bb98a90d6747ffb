"""
Sanitization of user-provided names before they reach logs or headers.
"""
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """Strip path components and control characters from an upload name."""
    if not filename:
        return "unknown"

    filename = filename.split('/')[-1].split('\\')[-1]
    filename = _CONTROL_CHARS.sub('', filename).strip('. ')
    return filename[:max_length] or "unknown"


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """Flatten a value onto one line so it cannot forge log entries."""
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', str(value))
    value = _CONTROL_CHARS.sub('', value)
    if len(value) > max_length:
        value = value[:max_length] + "..."
    return value


def clean_column_name(name, position: int) -> str:
    """
    Normalize a header cell into a usable column name.

    Blank headers and pandas' "Unnamed: N" placeholders become "Column N"
    (1-based position).
    """
    text = '' if name is None else ' '.join(str(name).split())
    if not text or text.startswith('Unnamed:'):
        return f"Column {position + 1}"
    return _CONTROL_CHARS.sub('', text)

"""
Error codes and user-facing messages for the API layer.

The engine itself never raises for bad data; these cover uploads and
malformed requests.
"""
from typing import Dict, Optional


class ErrorCodes:
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_COLUMN = "INVALID_COLUMN"
    INVALID_FORMULA = "INVALID_FORMULA"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "Your file is too large",
        "detail": "The upload exceeds the configured size limit.",
        "suggestion": "Split the file or export only the columns you need."
    },
    ErrorCodes.FILE_EMPTY: {
        "message": "Your file looks empty",
        "detail": "No rows could be read from the uploaded file.",
        "suggestion": "Check that the file was saved with its data and a header row."
    },
    ErrorCodes.INVALID_FILE_TYPE: {
        "message": "Unsupported file type",
        "detail": "Accepted formats are CSV, TSV, Excel (.xlsx, .xls) and JSON.",
        "suggestion": "Export your sheet as CSV or Excel and upload it again."
    },
    ErrorCodes.PARSE_ERROR: {
        "message": "We could not read your file",
        "detail": "The file content does not match its format.",
        "suggestion": "Re-save the file and make sure the first row holds the column names."
    },
    ErrorCodes.INVALID_COLUMN: {
        "message": "Unknown or invalid column",
        "detail": "The request refers to a column the dataset does not have.",
        "suggestion": "Pick a column from the current dataset."
    },
    ErrorCodes.INVALID_FORMULA: {
        "message": "The formula could not be evaluated",
        "detail": "Formulas may use arithmetic over numeric columns.",
        "suggestion": "Quote column names containing spaces with backticks, e.g. `unit price` * qty."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Too many requests",
        "detail": "Uploads are rate limited per client.",
        "suggestion": "Wait a minute and try again."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Something unexpected happened",
        "detail": "The request failed for an unknown reason.",
        "suggestion": "Try again; if it keeps failing try a different file."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Build the error payload for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional text appended to the detail

    Returns:
        Dictionary with code, message, detail and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response

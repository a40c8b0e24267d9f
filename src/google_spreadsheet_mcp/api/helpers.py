"""
Helper functions for Google Drive and Sheets API operations.

Covers A1 notation arithmetic, Drive query escaping, table rendering for
responses, and mapping of Google API errors to tool errors.
"""

import re
from typing import Any

from googleapiclient.errors import HttpError

from google_spreadsheet_mcp.types import CellPosition, RemoteCallError
from google_spreadsheet_mcp.utils import log


# --- A1 Notation ---
_RANGE_START_REGEX = re.compile(r"^\$?([A-Za-z]*)\$?(\d*)")


def column_index_to_letter(index: int) -> str:
    """
    Convert a 1-based column index to its letter form.

    Columns use bijective base-26 (there is no zero digit), so one is
    subtracted before every division: 1 -> A, 26 -> Z, 27 -> AA, 703 -> AAA.

    Raises:
        ValueError: If index is less than 1
    """
    if index < 1:
        raise ValueError(f"Column index must be 1 or greater, got {index}")

    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_letter_to_index(letters: str) -> int:
    """Convert column letters to a 1-based index. A=1, Z=26, AA=27."""
    result = 0
    for char in letters.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result


def parse_range_start(a1_range: str) -> CellPosition:
    """
    Get the start cell of an A1 range as a 1-based (column, row) position.

    Only the start cell is looked at ("B3:D10" -> column 2, row 3). A missing
    column part means column 1, a missing row part means row 1. The range is
    not validated; this only feeds display headers.

    Args:
        a1_range: Range in A1 notation, optionally prefixed with "Sheet!"

    Returns:
        CellPosition of the start cell
    """
    if "!" in a1_range:
        a1_range = a1_range.rsplit("!", 1)[1]

    match = _RANGE_START_REGEX.match(a1_range.strip())
    letters, digits = match.groups() if match else ("", "")

    column = column_letter_to_index(letters) if letters else 1
    row = int(digits) if digits else 1
    return CellPosition(column=max(column, 1), row=max(row, 1))


def quote_sheet_title(title: str) -> str:
    """Quote a sheet title for use as an A1 range prefix ('My Sheet')."""
    return "'" + title.replace("'", "''") + "'"


def sheet_range(title: str, a1_range: str | None = None) -> str:
    """Build a full A1 range such as 'Sheet 1'!A1:B2, or the whole sheet if no range."""
    if not a1_range:
        return quote_sheet_title(title)
    return f"{quote_sheet_title(title)}!{a1_range}"


def row_span(start_row: int, count: int) -> str:
    """A1 range covering whole rows, e.g. (10, 2) -> '10:11'."""
    return f"{start_row}:{start_row + count - 1}"


def column_span(start_column: int, count: int) -> str:
    """A1 range covering whole columns, e.g. (3, 2) -> 'C:D'."""
    return (
        f"{column_index_to_letter(start_column)}:"
        f"{column_index_to_letter(start_column + count - 1)}"
    )


# --- Drive Query Helper ---
def escape_query_value(value: str) -> str:
    """Escape a string for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


# --- Table Rendering ---
def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    return text.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ")


def format_table(
    values: list[list[Any]],
    start_column: int = 1,
    start_row: int = 1,
    min_rows: int = 0,
    min_columns: int = 0,
) -> str:
    """
    Render cell values as a Markdown table headed by column letters and row numbers.

    Args:
        values: 2-D list of cell values (rows may be ragged)
        start_column: 1-based column of the first value
        start_row: 1-based row of the first value
        min_rows: Pad with blank rows up to this many rows
        min_columns: Pad with blank columns up to this many columns

    Returns:
        Markdown table text (no trailing newline)
    """
    rows = [list(row) for row in values]
    while len(rows) < min_rows:
        rows.append([])

    width = max([len(row) for row in rows] + [min_columns])

    header = ["   "] + [
        column_index_to_letter(start_column + offset) for offset in range(width)
    ]
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join("---" for _ in header) + "|",
    ]

    for offset, row in enumerate(rows):
        cells = [_format_cell(cell) for cell in row]
        cells += [""] * (width - len(cells))
        lines.append("| " + " | ".join([str(start_row + offset)] + cells) + " |")

    return "\n".join(lines)


# --- Error Mapping ---
def _status_code(error: Exception, error_message: str) -> int | None:
    """HTTP status of a failed call; guessed from the message for non-HttpError exceptions."""
    if isinstance(error, HttpError):
        return int(error.resp.status)
    for status in (404, 403, 400):
        if str(status) in error_message:
            return status
    return None


def api_error(error: Exception, action: str, subject: str = "") -> RemoteCallError:
    """
    Map a failed Google API call to a RemoteCallError.

    Args:
        error: The exception raised by the API client
        action: What was being attempted, e.g. "copy file"
        subject: Optional name of the target, included in not-found messages

    Returns:
        RemoteCallError to raise
    """
    error_message = str(error)
    log(f"Google API error while trying to {action}: {error_message}")

    status = _status_code(error, error_message)
    target = f" ({subject})" if subject else ""
    if status == 404:
        return RemoteCallError(f"Failed to {action}: not found{target}.")
    if status == 403:
        return RemoteCallError(
            f"Failed to {action}: permission denied{target}. "
            f"Ensure the authenticated user has access."
        )
    if status == 400:
        return RemoteCallError(f"Failed to {action}: invalid request: {error_message}")
    return RemoteCallError(f"Failed to {action}: {error_message}")

"""
Google Sheets operations for Google Spreadsheet MCP Server.

Spreadsheets are addressed by their path under the root folder and tabs by
their title. Row and column positions are 1-based; the Sheets API's 0-based
half-open index ranges are computed here.

Writes that overwrite or delete data read the affected cells first and echo
them back so a caller can undo by hand. Nothing is restored automatically.
"""

from typing import Any

from google_spreadsheet_mcp.api.helpers import (
    api_error,
    column_index_to_letter,
    column_span,
    format_table,
    parse_range_start,
    row_span,
    sheet_range,
)
from google_spreadsheet_mcp.api.paths import resolve_spreadsheet
from google_spreadsheet_mcp.auth import get_drive_client, get_sheets_client
from google_spreadsheet_mcp.config import get_config
from google_spreadsheet_mcp.types import (
    InvalidArgumentError,
    NotFoundError,
    RemoteCallError,
    SheetTab,
)
from google_spreadsheet_mcp.utils import log

ROWS = "ROWS"
COLUMNS = "COLUMNS"

_DIMENSION_NOUNS = {ROWS: "row", COLUMNS: "column"}


# --- Lookup Helpers ---
def get_tabs(sheets, spreadsheet_id: str) -> list[SheetTab]:
    """Fetch the tabs of a spreadsheet in display order."""
    try:
        response = (
            sheets.spreadsheets()
            .get(
                spreadsheetId=spreadsheet_id,
                fields="sheets.properties(sheetId,title,index)",
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "get spreadsheet", spreadsheet_id)

    tabs = []
    for position, sheet in enumerate(response.get("sheets", [])):
        properties = sheet.get("properties", {})
        tabs.append(
            SheetTab(
                sheet_id=properties.get("sheetId", 0),
                title=properties.get("title", ""),
                index=properties.get("index", position),
            )
        )
    return tabs


def resolve_tab(sheets, spreadsheet_id: str, title: str) -> int:
    """
    Find the sheet ID of the tab with exactly this title.

    Raises:
        NotFoundError: If no tab has the title
    """
    for tab in get_tabs(sheets, spreadsheet_id):
        if tab.title == title:
            return tab.sheet_id
    raise NotFoundError(f"Sheet not found: {title}")


def _open_spreadsheet(spreadsheet: str) -> tuple[Any, str]:
    """Resolve a spreadsheet path; returns (sheets client, spreadsheet ID)."""
    drive = get_drive_client()
    sheets = get_sheets_client()
    config = get_config()
    return sheets, resolve_spreadsheet(drive, config.folder_id, spreadsheet)


def _open_tab(spreadsheet: str, sheet: str) -> tuple[Any, str, int]:
    """Resolve a spreadsheet path and tab title; returns (sheets client, spreadsheet ID, sheet ID)."""
    if not sheet:
        raise InvalidArgumentError("A sheet name is required.")
    sheets, spreadsheet_id = _open_spreadsheet(spreadsheet)
    return sheets, spreadsheet_id, resolve_tab(sheets, spreadsheet_id, sheet)


def _batch_update(sheets, spreadsheet_id: str, requests: list[dict], action: str) -> dict:
    """Send structural requests to spreadsheets.batchUpdate."""
    try:
        return (
            sheets.spreadsheets()
            .batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": requests})
            .execute()
        )
    except Exception as e:
        raise api_error(e, action)


def _read_values(
    sheets, spreadsheet_id: str, a1_range: str, render_option: str = "FORMATTED_VALUE"
) -> list[list[Any]]:
    try:
        response = (
            sheets.spreadsheets()
            .values()
            .get(
                spreadsheetId=spreadsheet_id,
                range=a1_range,
                valueRenderOption=render_option,
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "read values", a1_range)
    return response.get("values", [])


def _rename_request(sheet_id: int, title: str) -> dict:
    return {
        "updateSheetProperties": {
            "properties": {"sheetId": sheet_id, "title": title},
            "fields": "title",
        }
    }


def _require_positive(value: int | None, name: str) -> None:
    if value is None or value <= 0:
        raise InvalidArgumentError(f"{name} must be greater than 0, got {value}.")


# --- Tab Operations ---
def list_sheets(spreadsheet: str) -> str:
    """
    List the tabs of a spreadsheet.

    Args:
        spreadsheet: Spreadsheet path relative to the root folder

    Returns:
        Numbered list of tab titles with their sheet IDs
    """
    sheets, spreadsheet_id = _open_spreadsheet(spreadsheet)
    log(f"Listing sheets in spreadsheet: {spreadsheet}")

    tabs = get_tabs(sheets, spreadsheet_id)
    if not tabs:
        return f"Spreadsheet '{spreadsheet}' has no sheets."

    result = f"Spreadsheet '{spreadsheet}' has {len(tabs)} sheet(s):\n\n"
    for tab in tabs:
        result += f"  {tab.index + 1}. {tab.title} (ID: {tab.sheet_id})\n"
    return result


def copy_sheet(
    src_spreadsheet: str, src_sheet: str, dst_spreadsheet: str, dst_sheet: str
) -> str:
    """
    Copy a tab into another (or the same) spreadsheet under a new title.

    Runs in two steps: the Sheets API copies the tab under a title it picks
    ("Copy of ..."), then the copy is renamed by its returned sheet ID. If the
    rename fails the copy is left in place under the API's title.

    Returns:
        Success message naming the source and destination

    Raises:
        ToolError: For missing spreadsheets or tabs, or API failures
    """
    if not dst_sheet:
        raise InvalidArgumentError("Destination sheet name cannot be empty.")

    log(f"Copying sheet {src_spreadsheet}/{src_sheet} to {dst_spreadsheet}/{dst_sheet}")
    sheets, src_id, src_sheet_id = _open_tab(src_spreadsheet, src_sheet)
    _, dst_id = _open_spreadsheet(dst_spreadsheet)

    try:
        copied = (
            sheets.spreadsheets()
            .sheets()
            .copyTo(
                spreadsheetId=src_id,
                sheetId=src_sheet_id,
                body={"destinationSpreadsheetId": dst_id},
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "copy sheet", src_sheet)

    new_sheet_id = copied.get("sheetId")
    copied_title = copied.get("title", src_sheet)

    try:
        (
            sheets.spreadsheets()
            .batchUpdate(
                spreadsheetId=dst_id,
                body={"requests": [_rename_request(new_sheet_id, dst_sheet)]},
            )
            .execute()
        )
    except Exception as e:
        error = api_error(e, "rename copied sheet")
        raise RemoteCallError(
            f"{error} The sheet was copied to '{dst_spreadsheet}' as "
            f"'{copied_title}' (sheet ID: {new_sheet_id}) and was not removed."
        )

    return (
        f"Sheet '{src_spreadsheet}/{src_sheet}' successfully copied to "
        f"'{dst_spreadsheet}/{dst_sheet}' (sheet ID: {new_sheet_id})"
    )


def rename_sheet(spreadsheet: str, sheet: str, new_name: str) -> str:
    """
    Rename a tab.

    Raises:
        ToolError: For an empty name, missing spreadsheet or tab, or API failures
    """
    if not new_name or not new_name.strip():
        raise InvalidArgumentError("New sheet name cannot be empty.")

    sheets, spreadsheet_id, sheet_id = _open_tab(spreadsheet, sheet)
    log(f"Renaming sheet {spreadsheet}/{sheet} to {new_name}")

    _batch_update(sheets, spreadsheet_id, [_rename_request(sheet_id, new_name)], "rename sheet")

    return f"Sheet '{spreadsheet}/{sheet}' successfully renamed to '{new_name}'"


# --- Reading ---
def get_sheet_data(spreadsheet: str, sheet: str, range: str | None = None) -> str:
    """
    Read cell values from a tab.

    Args:
        spreadsheet: Spreadsheet path relative to the root folder
        sheet: Tab title
        range: Optional A1 range within the tab (e.g. "A1:C10"); whole tab if omitted

    Returns:
        Table with letter column headers and 1-based row numbers, plus totals
    """
    sheets, spreadsheet_id, _ = _open_tab(spreadsheet, sheet)
    a1_range = sheet_range(sheet, range)
    log(f"Reading data from {spreadsheet}: {a1_range}")

    values = _read_values(sheets, spreadsheet_id, a1_range)

    row_count = len(values)
    column_count = max((len(row) for row in values), default=0)

    if row_count == 0 or column_count == 0:
        return (
            f"No data found in {a1_range}.\n"
            f"Total rows: 0, Total columns: 0"
        )

    start = parse_range_start(range) if range else parse_range_start("A1")

    result = f"Data from {a1_range}:\n\n"
    result += format_table(values, start.column, start.row) + "\n\n"
    result += f"Total rows: {row_count}, Total columns: {column_count}"
    return result


# --- Dimension Operations ---
def _insert_dimension(
    spreadsheet: str, sheet: str, dimension: str, count: int, start: int | None
) -> str:
    noun = _DIMENSION_NOUNS[dimension]
    _require_positive(count, "count")
    if start is not None:
        _require_positive(start, f"start_{noun}")

    sheets, spreadsheet_id, sheet_id = _open_tab(spreadsheet, sheet)

    if start is None:
        request = {
            "appendDimension": {
                "sheetId": sheet_id,
                "dimension": dimension,
                "length": count,
            }
        }
        where = "at the end"
    else:
        request = {
            "insertDimension": {
                "range": {
                    "sheetId": sheet_id,
                    "dimension": dimension,
                    "startIndex": start - 1,
                    "endIndex": start - 1 + count,
                },
                "inheritFromBefore": False,
            }
        }
        label = column_index_to_letter(start) if dimension == COLUMNS else str(start)
        where = f"before {noun} {label}"

    log(f"Adding {count} {noun}(s) {where} in {spreadsheet}/{sheet}")
    _batch_update(sheets, spreadsheet_id, [request], f"add {noun}s")

    return f"Added {count} {noun}(s) {where} in sheet '{sheet}'"


def _delete_dimension(
    spreadsheet: str, sheet: str, dimension: str, count: int, start: int
) -> str:
    noun = _DIMENSION_NOUNS[dimension]
    _require_positive(count, "count")
    _require_positive(start, f"start_{noun}")

    sheets, spreadsheet_id, sheet_id = _open_tab(spreadsheet, sheet)

    if dimension == ROWS:
        span = row_span(start, count)
        first, last = str(start), str(start + count - 1)
    else:
        span = column_span(start, count)
        first, last = column_index_to_letter(start), column_index_to_letter(start + count - 1)

    log(f"Deleting {noun}s {first}-{last} from {spreadsheet}/{sheet}")
    previous = _read_values(sheets, spreadsheet_id, sheet_range(sheet, span), "FORMULA")

    request = {
        "deleteDimension": {
            "range": {
                "sheetId": sheet_id,
                "dimension": dimension,
                "startIndex": start - 1,
                "endIndex": start - 1 + count,
            }
        }
    }
    _batch_update(sheets, spreadsheet_id, [request], f"delete {noun}s")

    if dimension == ROWS:
        table = format_table(previous, 1, start, min_rows=count)
    else:
        table = format_table(previous, start, 1, min_columns=count)

    return (
        f"Deleted {count} {noun}(s) ({noun}s {first}-{last}) from sheet '{sheet}'.\n\n"
        f"Previous data:\n{table}"
    )


def add_rows(spreadsheet: str, sheet: str, count: int, start_row: int | None = None) -> str:
    """
    Insert blank rows before start_row (1-based), or append them at the end.

    Inserted rows do not inherit formatting from the row above.
    """
    return _insert_dimension(spreadsheet, sheet, ROWS, count, start_row)


def add_columns(
    spreadsheet: str, sheet: str, count: int, start_column: int | None = None
) -> str:
    """Insert blank columns before start_column (1-based), or append them at the end."""
    return _insert_dimension(spreadsheet, sheet, COLUMNS, count, start_column)


def delete_rows(spreadsheet: str, sheet: str, count: int, start_row: int) -> str:
    """Delete count rows starting at start_row (1-based), returning their previous contents."""
    return _delete_dimension(spreadsheet, sheet, ROWS, count, start_row)


def delete_columns(spreadsheet: str, sheet: str, count: int, start_column: int) -> str:
    """Delete count columns starting at start_column (1-based), returning their previous contents."""
    return _delete_dimension(spreadsheet, sheet, COLUMNS, count, start_column)


# --- Cell Updates ---
def _format_previous(a1_range: str, values: list[list[Any]]) -> str:
    if not values:
        return "(all cells were empty)"
    start = parse_range_start(a1_range)
    return format_table(values, start.column, start.row)


def update_cells(spreadsheet: str, sheet: str, range: str, data: list[list[Any]]) -> str:
    """
    Write a 2-D grid of values into a range.

    Values are entered as if typed by a user, so formulas and locale-formatted
    numbers and dates are parsed by Sheets.

    Args:
        spreadsheet: Spreadsheet path relative to the root folder
        sheet: Tab title
        range: A1 range within the tab (e.g. "A1:C3")
        data: Rows of values

    Returns:
        Updated cell count and the values that were overwritten
    """
    if not range:
        raise InvalidArgumentError("A cell range is required.")
    if not data:
        raise InvalidArgumentError("Data to write cannot be empty.")

    sheets, spreadsheet_id, _ = _open_tab(spreadsheet, sheet)
    a1_range = sheet_range(sheet, range)
    log(f"Updating cells {a1_range} in {spreadsheet}")

    previous = _read_values(sheets, spreadsheet_id, a1_range, "FORMULA")

    try:
        response = (
            sheets.spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=a1_range,
                valueInputOption="USER_ENTERED",
                body={"values": data},
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "update cells", a1_range)

    result = f"Updated {response.get('updatedCells', 0)} cell(s) in {a1_range}.\n\n"
    result += "Previous values:\n"
    result += _format_previous(range, previous)
    return result


def batch_update_cells(
    spreadsheet: str, sheet: str, ranges: dict[str, list[list[Any]]]
) -> str:
    """
    Write several ranges of one tab in a single request.

    Ranges are handled in sorted order. Each range is read before the write
    so its previous values can be reported; the ranges are assumed not to
    overlap.

    Args:
        spreadsheet: Spreadsheet path relative to the root folder
        sheet: Tab title
        ranges: Map of A1 range to rows of values

    Returns:
        Totals for the write and one previous-values table per range
    """
    if not ranges:
        raise InvalidArgumentError("At least one range is required.")
    for a1, values in ranges.items():
        if not a1:
            raise InvalidArgumentError("Range names cannot be empty.")
        if not values:
            raise InvalidArgumentError(f"Data for range {a1} cannot be empty.")

    sheets, spreadsheet_id, _ = _open_tab(spreadsheet, sheet)
    ordered = sorted(ranges)
    log(f"Batch updating {len(ordered)} range(s) in {spreadsheet}/{sheet}")

    previous = {
        a1: _read_values(sheets, spreadsheet_id, sheet_range(sheet, a1), "FORMULA")
        for a1 in ordered
    }

    body = {
        "valueInputOption": "USER_ENTERED",
        "data": [
            {"range": sheet_range(sheet, a1), "values": ranges[a1]} for a1 in ordered
        ],
    }

    try:
        response = (
            sheets.spreadsheets()
            .values()
            .batchUpdate(spreadsheetId=spreadsheet_id, body=body)
            .execute()
        )
    except Exception as e:
        raise api_error(e, "batch update cells")

    total_cells = response.get(
        "totalUpdatedCells",
        sum(item.get("updatedCells", 0) for item in response.get("responses", [])),
    )
    total_sheets = response.get("totalUpdatedSheets", 0)

    result = (
        f"Batch update completed: {total_cells} cell(s) updated in "
        f"{len(ordered)} range(s) across {total_sheets} sheet(s).\n"
    )
    for a1 in ordered:
        result += f"\nPrevious values for {a1}:\n"
        result += _format_previous(a1, previous[a1]) + "\n"
    return result

"""
Google Spreadsheet MCP Server

Main MCP server entry point with all tool definitions.
Uses FastMCP framework for MCP protocol implementation.

IMPORTANT: All logging must use stderr, never stdout.
The MCP protocol uses stdout for JSON-RPC communication.
"""

import sys
from typing import Annotated, Any

from fastmcp import FastMCP

from google_spreadsheet_mcp.api import drive, sheets
from google_spreadsheet_mcp.auth import get_auth_client
from google_spreadsheet_mcp.config import get_config
from google_spreadsheet_mcp.types import ConfigError
from google_spreadsheet_mcp.utils import log


# Create MCP server
mcp = FastMCP(
    name="Google Drive & Sheets MCP Server",
    instructions="""
    MCP server for Google Drive file management and Google Sheets operations.

    Workflow:
    1) Use google_drive_list_files to browse and find spreadsheets
    2) Use google_sheets_list_sheets to see sheets in a spreadsheet
    3) Use google_sheets_read_data to view content
    4) Use other google_sheets_* tools to modify data

    Paths are relative to the configured root folder, e.g. "Reports/2024/Budget".
    Row and column numbers are 1-based. Tools that overwrite or delete data
    return the previous values so changes can be undone by hand.
    """,
)


# === DRIVE TOOLS ===


@mcp.tool(annotations={"readOnlyHint": True})
def google_drive_list_files(
    path: Annotated[
        str, "Folder path relative to the root folder. Leave empty for the root."
    ] = "",
) -> str:
    """
    Browse and list files and folders in Google Drive.

    Use this to explore directory structure and find spreadsheets before working with them.
    """
    return drive.list_files(path)


@mcp.tool()
def google_drive_copy_file(
    src_path: Annotated[str, "Path of the file to copy"],
    dst_path: Annotated[
        str,
        "Destination path including the new name. End with '/' to keep the source name.",
    ],
) -> str:
    """
    Copy a file to another location in Google Drive.
    """
    return drive.copy_file(src_path, dst_path)


@mcp.tool()
def google_drive_rename_file(
    path: Annotated[str, "Path of the file or folder to rename"],
    new_name: Annotated[str, "New name (not a path)"],
) -> str:
    """
    Rename a file or folder in Google Drive.
    """
    return drive.rename_file(path, new_name)


# === SHEETS TOOLS ===


@mcp.tool(annotations={"readOnlyHint": True})
def google_sheets_list_sheets(
    spreadsheet: Annotated[str, "Spreadsheet path relative to the root folder"],
) -> str:
    """
    List all sheets (tabs) within a Google Spreadsheet.

    Use this after finding the spreadsheet with google_drive_list_files.
    """
    return sheets.list_sheets(spreadsheet)


@mcp.tool()
def google_sheets_copy_sheet(
    src_spreadsheet: Annotated[str, "Source spreadsheet path"],
    src_sheet: Annotated[str, "Name of the sheet to copy"],
    dst_spreadsheet: Annotated[str, "Destination spreadsheet path (may be the same)"],
    dst_sheet: Annotated[str, "Name for the copied sheet"],
) -> str:
    """
    Copy a sheet from one Google Spreadsheet to another.
    """
    return sheets.copy_sheet(src_spreadsheet, src_sheet, dst_spreadsheet, dst_sheet)


@mcp.tool()
def google_sheets_rename_sheet(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Current sheet name"],
    new_name: Annotated[str, "New sheet name"],
) -> str:
    """
    Rename a sheet (tab) within a Google Spreadsheet.
    """
    return sheets.rename_sheet(spreadsheet, sheet, new_name)


@mcp.tool(annotations={"readOnlyHint": True})
def google_sheets_read_data(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    range: Annotated[
        str | None, "Cell range in A1 notation (e.g. 'A1:C10'). Reads the whole sheet if omitted."
    ] = None,
) -> str:
    """
    Read data from a specific sheet in a Google Spreadsheet.

    This is how you 'open' and view spreadsheet content.
    """
    return sheets.get_sheet_data(spreadsheet, sheet, range)


@mcp.tool()
def google_sheets_add_rows(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    count: Annotated[int, "Number of rows to add (greater than 0)"],
    start_row: Annotated[
        int | None, "1-based row to insert before. Appends at the end if omitted."
    ] = None,
) -> str:
    """
    Insert new empty rows in a Google Sheet.
    """
    return sheets.add_rows(spreadsheet, sheet, count, start_row)


@mcp.tool()
def google_sheets_add_columns(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    count: Annotated[int, "Number of columns to add (greater than 0)"],
    start_column: Annotated[
        int | None, "1-based column to insert before (A=1). Appends at the end if omitted."
    ] = None,
) -> str:
    """
    Insert new empty columns in a Google Sheet.
    """
    return sheets.add_columns(spreadsheet, sheet, count, start_column)


@mcp.tool(annotations={"destructiveHint": True})
def google_sheets_delete_rows(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    count: Annotated[int, "Number of rows to delete (greater than 0)"],
    start_row: Annotated[int, "1-based first row to delete"],
) -> str:
    """
    Delete rows from a Google Sheet.

    The deleted rows' contents are returned so they can be restored by hand.
    """
    return sheets.delete_rows(spreadsheet, sheet, count, start_row)


@mcp.tool(annotations={"destructiveHint": True})
def google_sheets_delete_columns(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    count: Annotated[int, "Number of columns to delete (greater than 0)"],
    start_column: Annotated[int, "1-based first column to delete (A=1)"],
) -> str:
    """
    Delete columns from a Google Sheet.

    The deleted columns' contents are returned so they can be restored by hand.
    """
    return sheets.delete_columns(spreadsheet, sheet, count, start_column)


@mcp.tool()
def google_sheets_update_cells(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    range: Annotated[str, "Cell range in A1 notation (e.g. 'A1:C3')"],
    data: Annotated[list[list[Any]], "2D array of values, one inner list per row"],
) -> str:
    """
    Update cell values in a specific range of a Google Sheet.

    Values are parsed as if typed by a user, so formulas like '=SUM(A1:A3)' work.
    """
    return sheets.update_cells(spreadsheet, sheet, range, data)


@mcp.tool()
def google_sheets_batch_update_cells(
    spreadsheet: Annotated[str, "Spreadsheet path"],
    sheet: Annotated[str, "Sheet name"],
    ranges: Annotated[
        dict[str, list[list[Any]]],
        "Map of A1 range to 2D array of values, e.g. {'A1:B2': [[1, 2], [3, 4]]}",
    ],
) -> str:
    """
    Update multiple cell ranges in a Google Sheet in a single operation.
    """
    return sheets.batch_update_cells(spreadsheet, sheet, ranges)


def main() -> None:
    """Run the Google Spreadsheet MCP Server."""
    log("Starting Google Spreadsheet MCP Server...")

    try:
        config = get_config()
    except ConfigError as e:
        log(f"Failed to load configuration: {e}")
        sys.exit(1)
    log(f"Root folder ID: {config.folder_id}")

    # Authorize up front so the OAuth prompt appears before serving
    try:
        get_auth_client()
    except Exception as e:
        log(f"Failed to authorize Google API client: {e}")
        sys.exit(1)

    mcp.run()


if __name__ == "__main__":
    main()

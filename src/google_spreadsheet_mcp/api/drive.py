"""
Google Drive operations for Google Spreadsheet MCP Server.

Handles listing, copying and renaming files addressed by paths relative to
the configured root folder.
"""

from google_spreadsheet_mcp.api.helpers import api_error
from google_spreadsheet_mcp.api.paths import (
    normalize_path,
    resolve_parent_and_leaf,
    resolve_path,
)
from google_spreadsheet_mcp.auth import get_drive_client
from google_spreadsheet_mcp.config import get_config
from google_spreadsheet_mcp.types import (
    FOLDER_MIME_TYPE,
    DriveFile,
    InvalidArgumentError,
    InvalidPathError,
)
from google_spreadsheet_mcp.utils import log

LIST_PAGE_SIZE = 100


def _list_children(drive, folder_id: str) -> list[DriveFile]:
    """Fetch every non-trashed direct child of a folder, following pagination."""
    files: list[DriveFile] = []
    page_token = None

    while True:
        params = {
            "q": f"'{folder_id}' in parents and trashed = false",
            "pageSize": LIST_PAGE_SIZE,
            "fields": "nextPageToken,files(id,name,mimeType,size,createdTime,modifiedTime,parents)",
            "supportsAllDrives": True,
            "includeItemsFromAllDrives": True,
        }
        if page_token:
            params["pageToken"] = page_token

        try:
            response = drive.files().list(**params).execute()
        except Exception as e:
            raise api_error(e, "list files")

        files.extend(DriveFile.from_api(item) for item in response.get("files", []))

        page_token = response.get("nextPageToken")
        if not page_token:
            return files


def _format_file_line(file: DriveFile) -> str:
    if file.kind_label == "Spreadsheet":
        line = f"  📊 {file.name} [{file.kind_label}]"
    elif file.kind_label:
        line = f"  📄 {file.name} [{file.kind_label}]"
    else:
        line = f"  📄 {file.name}"
    if file.size is not None:
        line += f" ({file.size:,} bytes)"
    return line


def list_files(path: str | None = "") -> str:
    """
    List the folders and files directly inside a folder.

    Args:
        path: Folder path relative to the root folder ("" for the root)

    Returns:
        Formatted listing with folders and files each sorted by name

    Raises:
        ToolError: For invalid paths, missing folders, or API failures
    """
    drive = get_drive_client()
    config = get_config()
    display_path = normalize_path(path) or "/"
    log(f"Listing files in: {display_path}")

    folder_id = resolve_path(drive, config.folder_id, path, FOLDER_MIME_TYPE)
    children = _list_children(drive, folder_id)

    folders = sorted((f for f in children if f.is_folder), key=lambda f: f.name)
    others = sorted((f for f in children if not f.is_folder), key=lambda f: f.name)

    result = f"Contents of '{display_path}' ({len(children)} items):\n\n"

    result += f"**Folders ({len(folders)}):**\n"
    if folders:
        for folder in folders:
            result += f"  📁 {folder.name}/\n"
    else:
        result += "  No folders found\n"
    result += "\n"

    result += f"**Files ({len(others)}):**\n"
    if others:
        for file in others:
            result += _format_file_line(file) + "\n"
    else:
        result += "  No files found\n"

    return result


def copy_file(src_path: str, dst_path: str) -> str:
    """
    Copy a file to another location.

    When dst_path ends with "/" the copy goes into that folder under the
    source file's name.

    Args:
        src_path: Path of the file to copy
        dst_path: Destination path, including the new name unless it ends with "/"

    Returns:
        Success message with the new file ID

    Raises:
        ToolError: For invalid paths, missing files, or API failures
    """
    drive = get_drive_client()
    config = get_config()
    log(f"Copying file {src_path} to {dst_path}")

    if not normalize_path(src_path):
        raise InvalidPathError("Invalid path: a source file path is required.")

    src_id = resolve_path(drive, config.folder_id, src_path)

    try:
        src_file = (
            drive.files()
            .get(fileId=src_id, fields="id,name,mimeType", supportsAllDrives=True)
            .execute()
        )
    except Exception as e:
        raise api_error(e, "get source file", src_path)

    dst_parent_id, dst_name = resolve_parent_and_leaf(drive, config.folder_id, dst_path)
    if not dst_name:
        dst_name = src_file.get("name", "")

    try:
        response = (
            drive.files()
            .copy(
                fileId=src_id,
                body={"name": dst_name, "parents": [dst_parent_id]},
                fields="id,name",
                supportsAllDrives=True,
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "copy file", src_path)

    return (
        f"File copied successfully. New file ID: {response.get('id')}\n"
        f"Name: \"{response.get('name', dst_name)}\""
    )


def rename_file(path: str, new_name: str) -> str:
    """
    Rename a file or folder in place.

    Args:
        path: Path of the file to rename
        new_name: New name (not a path)

    Returns:
        Confirmation including the applied name

    Raises:
        ToolError: For an empty name, invalid paths, missing files, or API failures
    """
    if not new_name or not new_name.strip():
        raise InvalidArgumentError("New name cannot be empty.")

    drive = get_drive_client()
    config = get_config()
    log(f'Renaming file {path} to "{new_name}"')

    if not normalize_path(path):
        raise InvalidPathError("Invalid path: the root folder cannot be renamed.")

    file_id = resolve_path(drive, config.folder_id, path)

    try:
        response = (
            drive.files()
            .update(
                fileId=file_id,
                body={"name": new_name},
                fields="id,name",
                supportsAllDrives=True,
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, "rename file", path)

    return f"File '{path}' successfully renamed to '{response.get('name', new_name)}'"

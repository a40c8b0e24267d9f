"""
Path resolution for Google Drive.

Drive has no native paths: files point at their parents and names are not
unique among siblings. These functions walk a slash-delimited path one
segment at a time from the configured root folder, turning it into a file ID.
"""

from google_spreadsheet_mcp.api.helpers import api_error, escape_query_value
from google_spreadsheet_mcp.types import (
    FOLDER_MIME_TYPE,
    SPREADSHEET_MIME_TYPE,
    InvalidPathError,
    NotFoundError,
)
from google_spreadsheet_mcp.utils import log


def normalize_path(path: str | None) -> str:
    """
    Validate and normalize a path relative to the root folder.

    Empty segments, "." segments and the trailing slash are dropped.
    The check is purely lexical; Drive is never consulted.

    Args:
        path: Path such as "Reports/2024/Q1"

    Returns:
        Normalized path, "" for the root folder itself

    Raises:
        InvalidPathError: If the path is absolute or contains a ".." segment
    """
    path = path or ""
    if path.startswith("/"):
        raise InvalidPathError(
            f"Invalid path '{path}': absolute paths are not allowed, "
            f"paths are relative to the root folder."
        )

    segments = [segment for segment in path.split("/") if segment not in ("", ".")]
    if ".." in segments:
        raise InvalidPathError(
            f"Invalid path '{path}': directory traversal is not allowed."
        )

    return "/".join(segments)


def _find_children(
    drive, parent_id: str, name: str, mime_type: str | None
) -> list[dict]:
    """List non-trashed children of parent_id named name, optionally of one MIME type."""
    query = (
        f"'{escape_query_value(parent_id)}' in parents "
        f"and name = '{escape_query_value(name)}' and trashed = false"
    )
    if mime_type:
        query += f" and mimeType = '{mime_type}'"

    try:
        response = (
            drive.files()
            .list(
                q=query,
                fields="files(id,name,mimeType)",
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            )
            .execute()
        )
    except Exception as e:
        raise api_error(e, f"look up '{name}'")

    return response.get("files", [])


def resolve_path(
    drive, root_id: str, path: str | None, leaf_mime_type: str | None = None
) -> str:
    """
    Resolve a path to a Drive file ID.

    Every segment but the last must be a folder. The last segment must have
    leaf_mime_type when one is given. When several siblings share a name the
    first one Drive returns wins, and that choice may differ between calls.

    Args:
        drive: Google Drive API client
        root_id: ID of the folder paths are relative to
        path: Relative path; "" or "." is the root itself
        leaf_mime_type: Required MIME type of the final segment

    Returns:
        File ID of the final segment (root_id for an empty path)

    Raises:
        InvalidPathError: If the path escapes the root
        NotFoundError: If a segment does not exist; names the path consumed so far
    """
    normalized = normalize_path(path)
    if not normalized:
        return root_id

    segments = normalized.split("/")
    parent_id = root_id

    for position, segment in enumerate(segments):
        is_last = position == len(segments) - 1
        mime_type = leaf_mime_type if is_last else FOLDER_MIME_TYPE

        matches = _find_children(drive, parent_id, segment, mime_type)
        consumed = "/".join(segments[: position + 1])

        if not matches:
            if not is_last:
                raise NotFoundError(f"Folder not found: {consumed}")
            if mime_type == SPREADSHEET_MIME_TYPE:
                raise NotFoundError(f"Spreadsheet not found: {consumed}")
            if mime_type == FOLDER_MIME_TYPE:
                raise NotFoundError(f"Folder not found: {consumed}")
            raise NotFoundError(f"File not found: {consumed}")

        if len(matches) > 1:
            log(
                f"Found {len(matches)} items named '{segment}' at '{consumed}', "
                f"using the first (ID: {matches[0].get('id')})"
            )

        parent_id = matches[0]["id"]

    return parent_id


def resolve_parent_and_leaf(drive, root_id: str, path: str | None) -> tuple[str, str]:
    """
    Resolve the folder part of a path, leaving the final name unresolved.

    Used for copy and rename destinations where the final name need not exist.
    A trailing slash means "into this folder": the whole path is the folder
    and the returned leaf name is empty.

    Returns:
        (parent folder ID, leaf name)

    Raises:
        InvalidPathError: If the path is empty or escapes the root
        NotFoundError: If a folder along the path does not exist
    """
    into_folder = (path or "").endswith("/")
    normalized = normalize_path(path)
    if not normalized:
        raise InvalidPathError("Invalid path: a destination path is required.")

    if into_folder:
        return resolve_path(drive, root_id, normalized, FOLDER_MIME_TYPE), ""

    directory, _, leaf = normalized.rpartition("/")
    if not directory:
        return root_id, leaf

    return resolve_path(drive, root_id, directory, FOLDER_MIME_TYPE), leaf


def resolve_spreadsheet(drive, root_id: str, path: str | None) -> str:
    """
    Resolve a spreadsheet path to its spreadsheet ID.

    Raises:
        InvalidPathError: If the path is empty or escapes the root
        NotFoundError: If a folder or the spreadsheet does not exist
    """
    if not normalize_path(path):
        raise InvalidPathError("Invalid path: a spreadsheet name is required.")
    return resolve_path(drive, root_id, path, SPREADSHEET_MIME_TYPE)

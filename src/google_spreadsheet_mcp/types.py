"""
Type definitions and error kinds for Google Spreadsheet MCP Server.
"""

from dataclasses import dataclass, field

from fastmcp.exceptions import ToolError

# --- MIME types ---
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"

# Labels for Google-native document kinds shown in folder listings
KIND_LABELS = {
    "application/vnd.google-apps.document": "Document",
    SPREADSHEET_MIME_TYPE: "Spreadsheet",
    "application/vnd.google-apps.presentation": "Presentation",
    "application/vnd.google-apps.form": "Form",
}


# --- Drive Types ---
@dataclass
class DriveFile:
    """A file or folder as returned by the Drive API."""

    id: str
    name: str
    mime_type: str = ""
    size: int | None = None
    created_time: str | None = None
    modified_time: str | None = None
    parents: list[str] = field(default_factory=list)

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @property
    def kind_label(self) -> str | None:
        return KIND_LABELS.get(self.mime_type)

    @classmethod
    def from_api(cls, data: dict) -> "DriveFile":
        """Build a DriveFile from a Drive API `files` resource."""
        size = data.get("size")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            mime_type=data.get("mimeType", ""),
            size=int(size) if size is not None else None,
            created_time=data.get("createdTime"),
            modified_time=data.get("modifiedTime"),
            parents=list(data.get("parents", [])),
        )


# --- Sheets Types ---
@dataclass
class SheetTab:
    """One tab (sheet) inside a spreadsheet."""

    sheet_id: int
    title: str
    index: int = 0


@dataclass
class CellPosition:
    """1-based column and row of a single cell."""

    column: int
    row: int


# --- Custom Exceptions ---
class InvalidPathError(ToolError):
    """Raised for traversal attempts, absolute paths, or a missing required path."""


class NotFoundError(ToolError):
    """Raised when a path segment or a named tab does not exist."""


class InvalidArgumentError(ToolError):
    """Raised for empty names, non-positive counts, or missing range/data."""


class RemoteCallError(ToolError):
    """Raised when a Google API call itself fails."""


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""

"""
Tests for Drive file records and error kinds.
"""

import pytest
from fastmcp.exceptions import ToolError

from google_spreadsheet_mcp.types import (
    FOLDER_MIME_TYPE,
    SPREADSHEET_MIME_TYPE,
    ConfigError,
    DriveFile,
    InvalidArgumentError,
    InvalidPathError,
    NotFoundError,
    RemoteCallError,
)


class TestDriveFile:
    """Tests for DriveFile.from_api."""

    def test_from_api_converts_fields(self):
        drive_file = DriveFile.from_api(
            {
                "id": "f1",
                "name": "notes.txt",
                "mimeType": "text/plain",
                "size": "1536",
                "modifiedTime": "2024-01-01T00:00:00Z",
                "parents": ["p1"],
            }
        )

        assert drive_file.id == "f1"
        assert drive_file.size == 1536
        assert drive_file.modified_time == "2024-01-01T00:00:00Z"
        assert drive_file.parents == ["p1"]
        assert drive_file.kind_label is None
        assert not drive_file.is_folder

    def test_native_files_have_no_size(self):
        drive_file = DriveFile.from_api(
            {"id": "s1", "name": "Budget", "mimeType": SPREADSHEET_MIME_TYPE}
        )

        assert drive_file.size is None
        assert drive_file.kind_label == "Spreadsheet"

    def test_folder(self):
        assert DriveFile.from_api({"id": "d1", "name": "x", "mimeType": FOLDER_MIME_TYPE}).is_folder


class TestErrorKinds:
    """Tool-facing errors are reported to the client as tool errors."""

    @pytest.mark.parametrize(
        "error_cls", [InvalidPathError, NotFoundError, InvalidArgumentError, RemoteCallError]
    )
    def test_tool_errors(self, error_cls):
        assert issubclass(error_cls, ToolError)

    def test_config_error_is_not_a_tool_error(self):
        assert not issubclass(ConfigError, ToolError)

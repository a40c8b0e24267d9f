"""Tests for resolving root-relative paths to Drive file IDs."""

import pytest

from google_spreadsheet_mcp.api.paths import (
    normalize_path,
    resolve_parent_and_leaf,
    resolve_path,
    resolve_spreadsheet,
)
from google_spreadsheet_mcp.types import (
    FOLDER_MIME_TYPE,
    SPREADSHEET_MIME_TYPE,
    InvalidPathError,
    NotFoundError,
    RemoteCallError,
)

ROOT = "root123"


def listing(*items):
    """Build a files.list response from (id, name, mimeType) tuples."""
    return {"files": [{"id": i, "name": n, "mimeType": m} for i, n, m in items]}


def list_queries(drive):
    return [call.kwargs["q"] for call in drive.files.return_value.list.call_args_list]


class TestNormalizePath:
    """Tests for lexical path validation."""

    @pytest.mark.parametrize("path", ["", ".", "./", None, ".//."])
    def test_root_forms_normalize_to_empty(self, path):
        assert normalize_path(path) == ""

    def test_collapses_dots_and_slashes(self):
        assert normalize_path("a//b/./c/") == "a/b/c"

    def test_rejects_absolute_path(self):
        with pytest.raises(InvalidPathError):
            normalize_path("/etc/passwd")

    @pytest.mark.parametrize("path", ["..", "../x", "a/../b", "a/b/..", "a/../../etc"])
    def test_rejects_parent_segments(self, path):
        with pytest.raises(InvalidPathError) as exc_info:
            normalize_path(path)
        assert "traversal" in str(exc_info.value)

    def test_names_starting_with_dots_are_allowed(self):
        assert normalize_path("..hidden/file") == "..hidden/file"


class TestResolvePath:
    """Tests for segment-by-segment resolution."""

    @pytest.mark.parametrize("path", ["", "."])
    def test_root_returns_root_without_store_calls(self, mock_drive_client, path):
        assert resolve_path(mock_drive_client, ROOT, path) == ROOT
        mock_drive_client.files.assert_not_called()

    @pytest.mark.parametrize("path", ["../secret", "/Reports", "a/../b"])
    def test_invalid_path_makes_no_store_calls(self, mock_drive_client, path):
        with pytest.raises(InvalidPathError):
            resolve_path(mock_drive_client, ROOT, path)
        mock_drive_client.files.assert_not_called()

    def test_walks_folders_then_typed_leaf(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.side_effect = [
            listing(("a1", "Archive", FOLDER_MIME_TYPE)),
            listing(("y1", "2024", FOLDER_MIME_TYPE)),
            listing(("s1", "Report.xlsx", SPREADSHEET_MIME_TYPE)),
        ]

        result = resolve_path(
            mock_drive_client, ROOT, "Archive/2024/Report.xlsx", SPREADSHEET_MIME_TYPE
        )

        assert result == "s1"
        queries = list_queries(mock_drive_client)
        assert len(queries) == 3

        assert f"'{ROOT}' in parents" in queries[0]
        assert "name = 'Archive'" in queries[0]
        assert f"mimeType = '{FOLDER_MIME_TYPE}'" in queries[0]

        assert "'a1' in parents" in queries[1]
        assert "name = '2024'" in queries[1]
        assert f"mimeType = '{FOLDER_MIME_TYPE}'" in queries[1]

        assert "'y1' in parents" in queries[2]
        assert "name = 'Report.xlsx'" in queries[2]
        assert f"mimeType = '{SPREADSHEET_MIME_TYPE}'" in queries[2]

        for query in queries:
            assert "trashed = false" in query

    def test_missing_segment_reports_consumed_prefix(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.side_effect = [
            listing(("a1", "Archive", FOLDER_MIME_TYPE)),
            {"files": []},
        ]

        with pytest.raises(NotFoundError) as exc_info:
            resolve_path(
                mock_drive_client, ROOT, "Archive/2024/Report.xlsx", SPREADSHEET_MIME_TYPE
            )

        message = str(exc_info.value)
        assert "Archive/2024" in message
        assert "Report.xlsx" not in message
        assert len(list_queries(mock_drive_client)) == 2

    def test_leaf_without_type_filter(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("f1", "notes.txt", "text/plain")
        )

        assert resolve_path(mock_drive_client, ROOT, "notes.txt") == "f1"
        assert "mimeType" not in list_queries(mock_drive_client)[0]

    def test_duplicate_names_use_first_match(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("first", "Dup", FOLDER_MIME_TYPE),
            ("second", "Dup", FOLDER_MIME_TYPE),
        )

        assert resolve_path(mock_drive_client, ROOT, "Dup") == "first"

    def test_quotes_in_names_are_escaped(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("f1", "Bob's file", "text/plain")
        )

        resolve_path(mock_drive_client, ROOT, "Bob's file")

        assert "name = 'Bob\\'s file'" in list_queries(mock_drive_client)[0]

    def test_api_failure_raises_remote_call_error(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.side_effect = Exception(
            "HttpError 500 backend error"
        )

        with pytest.raises(RemoteCallError):
            resolve_path(mock_drive_client, ROOT, "Reports")


class TestResolveParentAndLeaf:
    """Tests for resolving copy/rename destinations."""

    def test_leaf_directly_under_root(self, mock_drive_client):
        assert resolve_parent_and_leaf(mock_drive_client, ROOT, "Copy.txt") == (
            ROOT,
            "Copy.txt",
        )
        mock_drive_client.files.assert_not_called()

    def test_nested_leaf_resolves_only_directory(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("b1", "Backup", FOLDER_MIME_TYPE)
        )

        result = resolve_parent_and_leaf(mock_drive_client, ROOT, "Backup/Copy.txt")

        assert result == ("b1", "Copy.txt")
        queries = list_queries(mock_drive_client)
        assert len(queries) == 1
        assert "name = 'Backup'" in queries[0]

    def test_trailing_slash_gives_empty_leaf(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("b1", "Backup", FOLDER_MIME_TYPE)
        )

        assert resolve_parent_and_leaf(mock_drive_client, ROOT, "Backup/") == ("b1", "")

    @pytest.mark.parametrize("path", ["", ".", "./"])
    def test_empty_path_is_invalid(self, mock_drive_client, path):
        with pytest.raises(InvalidPathError):
            resolve_parent_and_leaf(mock_drive_client, ROOT, path)

    def test_traversal_is_invalid(self, mock_drive_client):
        with pytest.raises(InvalidPathError):
            resolve_parent_and_leaf(mock_drive_client, ROOT, "../outside.txt")
        mock_drive_client.files.assert_not_called()


class TestResolveSpreadsheet:
    """Tests for spreadsheet-typed resolution."""

    def test_requires_spreadsheet_type(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = listing(
            ("s1", "Budget", SPREADSHEET_MIME_TYPE)
        )

        assert resolve_spreadsheet(mock_drive_client, ROOT, "Budget") == "s1"
        assert f"mimeType = '{SPREADSHEET_MIME_TYPE}'" in list_queries(mock_drive_client)[0]

    def test_missing_spreadsheet(self, mock_drive_client):
        mock_drive_client.files.return_value.list.return_value.execute.return_value = {
            "files": []
        }

        with pytest.raises(NotFoundError) as exc_info:
            resolve_spreadsheet(mock_drive_client, ROOT, "Budget")
        assert "Spreadsheet not found: Budget" in str(exc_info.value)

    def test_empty_name_is_invalid(self, mock_drive_client):
        with pytest.raises(InvalidPathError):
            resolve_spreadsheet(mock_drive_client, ROOT, "")
        mock_drive_client.files.assert_not_called()

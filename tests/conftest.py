"""
Pytest configuration and fixtures for Google Spreadsheet MCP Server tests.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from google_spreadsheet_mcp.config import Config, reset_config


ROOT_FOLDER_ID = "root123"


@pytest.fixture
def mock_drive_client():
    """
    Provide a mock Google Drive API client.
    """
    return MagicMock()


@pytest.fixture
def mock_sheets_client():
    """
    Provide a mock Google Sheets API client.
    """
    return MagicMock()


@pytest.fixture
def config():
    """
    Provide a configuration rooted at ROOT_FOLDER_ID.
    """
    return Config(
        folder_id=ROOT_FOLDER_ID,
        client_secret_path=Path("client_secret.json"),
        token_path=Path("token.json"),
    )


@pytest.fixture(autouse=True)
def _clear_cached_config():
    """Keep the process-wide config cache from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_tabs():
    """
    Provide a spreadsheets.get response with two tabs.
    """
    return {
        "sheets": [
            {"properties": {"sheetId": 0, "title": "Sheet1", "index": 0}},
            {"properties": {"sheetId": 42, "title": "Data", "index": 1}},
        ]
    }

"""Tests for environment-sourced configuration."""

from pathlib import Path

import pytest

from google_spreadsheet_mcp.config import (
    DEFAULT_CLIENT_SECRET_PATH,
    DEFAULT_OAUTH_PORT,
    get_config,
    load_config,
)
from google_spreadsheet_mcp.types import ConfigError

ENV_VARS = [
    "MCPGS_FOLDER_ID",
    "MCPGS_CLIENT_SECRET_PATH",
    "MCPGS_TOKEN_PATH",
    "MCPGS_SERVICE_ACCOUNT_PATH",
    "MCPGS_OAUTH_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for reading MCPGS_* variables."""

    def test_folder_id_is_required(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert "MCPGS_FOLDER_ID" in str(exc_info.value)

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("MCPGS_FOLDER_ID", "folder1")

        config = load_config()

        assert config.folder_id == "folder1"
        assert config.client_secret_path == DEFAULT_CLIENT_SECRET_PATH
        assert config.token_path == Path.home() / ".mcp_google_spreadsheet.json"
        assert config.service_account_path is None
        assert config.oauth_port == DEFAULT_OAUTH_PORT

    def test_explicit_values(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MCPGS_FOLDER_ID", "folder1")
        monkeypatch.setenv("MCPGS_CLIENT_SECRET_PATH", str(tmp_path / "secret.json"))
        monkeypatch.setenv("MCPGS_TOKEN_PATH", str(tmp_path / "token.json"))
        monkeypatch.setenv("MCPGS_SERVICE_ACCOUNT_PATH", str(tmp_path / "sa.json"))
        monkeypatch.setenv("MCPGS_OAUTH_PORT", "9090")

        config = load_config()

        assert config.client_secret_path == tmp_path / "secret.json"
        assert config.token_path == tmp_path / "token.json"
        assert config.service_account_path == tmp_path / "sa.json"
        assert config.oauth_port == 9090

    @pytest.mark.parametrize("port", ["abc", "0", "70000"])
    def test_invalid_port(self, monkeypatch, port):
        monkeypatch.setenv("MCPGS_FOLDER_ID", "folder1")
        monkeypatch.setenv("MCPGS_OAUTH_PORT", port)

        with pytest.raises(ConfigError):
            load_config()

    def test_get_config_caches(self, monkeypatch):
        monkeypatch.setenv("MCPGS_FOLDER_ID", "first")
        first = get_config()
        monkeypatch.setenv("MCPGS_FOLDER_ID", "second")

        assert get_config() is first
        assert get_config().folder_id == "first"

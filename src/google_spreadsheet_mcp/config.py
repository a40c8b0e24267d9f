"""
Environment-sourced configuration for Google Spreadsheet MCP Server.

All settings use the MCPGS_ prefix:
- MCPGS_FOLDER_ID: Required. Drive folder that every path is resolved against
- MCPGS_CLIENT_SECRET_PATH: OAuth client secret JSON (default: ./credentials/credentials.json)
- MCPGS_TOKEN_PATH: Saved OAuth token (default: ~/.mcp_google_spreadsheet.json)
- MCPGS_SERVICE_ACCOUNT_PATH: Optional service account key; skips the OAuth flow
- MCPGS_OAUTH_PORT: Loopback port for the OAuth callback (default: 8080)
"""

import os
from dataclasses import dataclass
from pathlib import Path

from google_spreadsheet_mcp.types import ConfigError

ENV_PREFIX = "MCPGS_"

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CLIENT_SECRET_PATH = PROJECT_ROOT / "credentials" / "credentials.json"
DEFAULT_TOKEN_FILENAME = ".mcp_google_spreadsheet.json"
DEFAULT_OAUTH_PORT = 8080


@dataclass(frozen=True)
class Config:
    """Resolved server settings."""

    folder_id: str
    client_secret_path: Path
    token_path: Path
    service_account_path: Path | None = None
    oauth_port: int = DEFAULT_OAUTH_PORT


def _env(name: str) -> str:
    return os.environ.get(ENV_PREFIX + name, "").strip()


def load_config() -> Config:
    """
    Read configuration from the environment.

    Returns:
        Config with defaults applied

    Raises:
        ConfigError: If MCPGS_FOLDER_ID is missing or MCPGS_OAUTH_PORT is not a port number
    """
    folder_id = _env("FOLDER_ID")
    if not folder_id:
        raise ConfigError(
            f"{ENV_PREFIX}FOLDER_ID environment variable not set. "
            "Set it to the ID of the Drive folder this server may access."
        )

    client_secret = _env("CLIENT_SECRET_PATH")
    client_secret_path = Path(client_secret) if client_secret else DEFAULT_CLIENT_SECRET_PATH

    # Fall back to a token file in the home directory
    token = _env("TOKEN_PATH")
    token_path = Path(token) if token else Path.home() / DEFAULT_TOKEN_FILENAME

    service_account = _env("SERVICE_ACCOUNT_PATH")

    port_raw = _env("OAUTH_PORT")
    try:
        oauth_port = int(port_raw) if port_raw else DEFAULT_OAUTH_PORT
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}OAUTH_PORT must be an integer, got {port_raw!r}")
    if not 0 < oauth_port < 65536:
        raise ConfigError(f"{ENV_PREFIX}OAUTH_PORT out of range: {oauth_port}")

    return Config(
        folder_id=folder_id,
        client_secret_path=client_secret_path,
        token_path=token_path,
        service_account_path=Path(service_account) if service_account else None,
        oauth_port=oauth_port,
    )


_config: Config | None = None


def get_config() -> Config:
    """Get the process-wide configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration."""
    global _config
    _config = None

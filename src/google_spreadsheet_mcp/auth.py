"""
OAuth2 authentication for Google Spreadsheet MCP Server.

Supports two authentication methods:
1. OAuth2 loopback flow (default) - User authorizes via browser
2. Service account authentication - For automated/server environments
"""

import time
import webbrowser
from http.server import HTTPServer, BaseHTTPRequestHandler
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from google.oauth2.credentials import Credentials
from google.oauth2.service_account import Credentials as ServiceAccountCredentials
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request
from googleapiclient.discovery import build

from google_spreadsheet_mcp.config import get_config
from google_spreadsheet_mcp.utils import log

# Scopes required for Google Drive and Sheets access
SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
]

CALLBACK_PATH = "/oauth2callback"
AUTH_TIMEOUT_SECONDS = 120


class OAuthCallbackHandler(BaseHTTPRequestHandler):
    """HTTP request handler for OAuth callback."""

    def log_message(self, format: str, *args) -> None:
        """Suppress HTTP request logging."""
        pass

    def do_GET(self) -> None:
        """Handle GET request from OAuth callback."""
        parsed = urlparse(self.path)
        params = parse_qs(parsed.query)

        if parsed.path != CALLBACK_PATH:
            # favicon request or similar
            self.send_response(404)
            self.end_headers()
            return

        if "error" in params:
            error = params["error"][0]
            self.send_response(400)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            self.wfile.write(
                f"<html><body><h1>Authentication Failed</h1>"
                f"<p>Error: {error}</p>"
                f"<p>You can close this window.</p></body></html>".encode()
            )
            self.server.auth_code = None
            self.server.auth_error = error
            return

        if "code" in params:
            code = params["code"][0]
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            self.wfile.write(
                b"<html><body><h1>Authentication Successful!</h1>"
                b"<p>You can close this window and return to the application.</p></body></html>"
            )
            self.server.auth_code = code
            self.server.auth_error = None
            return

        self.send_response(400)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(b"<html><body><h1>No code in request</h1></body></html>")
        self.server.auth_error = "no code in request"


def _wait_for_auth_code(port: int, timeout: int = AUTH_TIMEOUT_SECONDS) -> str:
    """
    Start a temporary HTTP server and wait for OAuth callback.

    The listener only lives for one authorization round-trip and is closed
    on success, error or timeout.

    Args:
        port: Port to listen on
        timeout: Timeout in seconds (default 2 minutes)

    Returns:
        Authorization code from callback

    Raises:
        Exception: If authentication fails or times out
    """
    server = HTTPServer(("localhost", port), OAuthCallbackHandler)
    server.auth_code = None
    server.auth_error = None

    log(f"Listening for OAuth callback on http://localhost:{port}{CALLBACK_PATH}")

    deadline = time.monotonic() + timeout
    try:
        while server.auth_code is None and server.auth_error is None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            server.timeout = remaining
            server.handle_request()
    finally:
        server.server_close()

    if server.auth_error:
        raise Exception(f"OAuth error: {server.auth_error}")

    if not server.auth_code:
        raise Exception("Authentication timed out or no code received")

    return server.auth_code


def _authorize_with_service_account(path: Path) -> ServiceAccountCredentials:
    """
    Authorize using a service account key file.

    Args:
        path: Path to the service account key file

    Returns:
        Service account credentials

    Raises:
        Exception: If service account file not found or invalid
    """
    if not path.exists():
        raise Exception(f"Service account key file not found at path: {path}")

    try:
        credentials = ServiceAccountCredentials.from_service_account_file(
            str(path), scopes=SCOPES
        )
        log("Service Account authentication successful!")
        return credentials
    except Exception as e:
        log(f"Error loading service account key: {e}")
        raise Exception(
            "Failed to authorize using the service account. "
            "Ensure the key file is valid and the path is correct."
        )


def _load_saved_credentials(token_path: Path) -> Credentials | None:
    """
    Load saved OAuth credentials from token file.

    Expired credentials with a refresh token are refreshed and saved again.

    Returns:
        Credentials if found and valid, None otherwise
    """
    if not token_path.exists():
        return None

    try:
        credentials = Credentials.from_authorized_user_file(str(token_path), SCOPES)
        if credentials and credentials.valid:
            return credentials
        if credentials and credentials.expired and credentials.refresh_token:
            credentials.refresh(Request())
            _save_credentials(credentials, token_path)
            return credentials
        return None
    except Exception as e:
        log(f"Error loading saved credentials: {e}")
        return None


def _save_credentials(credentials: Credentials, token_path: Path) -> None:
    """
    Save OAuth credentials to token file.

    Args:
        credentials: Credentials to save
        token_path: Destination file
    """
    try:
        with open(token_path, "w") as f:
            f.write(credentials.to_json())
        log(f"Token stored to {token_path}")
    except Exception as e:
        log(f"Error saving credentials: {e}")


def _authenticate(client_secret_path: Path, token_path: Path, port: int) -> Credentials:
    """
    Perform OAuth2 authentication via loopback flow.

    Returns:
        OAuth2 credentials

    Raises:
        Exception: If authentication fails
    """
    if not client_secret_path.exists():
        raise Exception(f"Credentials file not found at {client_secret_path}")

    redirect_uri = f"http://localhost:{port}{CALLBACK_PATH}"
    log(f"Using loopback OAuth flow with redirect URI: {redirect_uri}")

    flow = InstalledAppFlow.from_client_secrets_file(
        str(client_secret_path), scopes=SCOPES, redirect_uri=redirect_uri
    )

    auth_url, _ = flow.authorization_url(
        access_type="offline", include_granted_scopes="true"
    )

    log("\n" + "=" * 60)
    log("Authorize this app by visiting this URL in your browser:")
    log("\n" + auth_url + "\n")
    log("=" * 60 + "\n")

    if not webbrowser.open(auth_url):
        log("Could not open browser automatically. Please open the URL above.")

    code = _wait_for_auth_code(port)
    log("Received authorization code, exchanging for tokens...")

    try:
        flow.fetch_token(code=code)
        credentials = flow.credentials
        if credentials.refresh_token:
            _save_credentials(credentials, token_path)
        else:
            log("Did not receive refresh token. Token might expire.")
        log("Authentication successful!")
        return credentials
    except Exception as e:
        log(f"Error retrieving access token: {e}")
        raise Exception("Authentication failed")


def authorize() -> Credentials | ServiceAccountCredentials:
    """
    Authorize with Google APIs.

    Checks for a service account key first, then falls back to OAuth2 flow.

    Returns:
        Valid credentials for Google API access
    """
    config = get_config()

    if config.service_account_path:
        log("Service account path detected. Attempting service account authentication...")
        return _authorize_with_service_account(config.service_account_path)

    log("No service account path detected. Falling back to standard OAuth 2.0 flow...")
    credentials = _load_saved_credentials(config.token_path)
    if credentials:
        log("Using saved credentials.")
        return credentials
    log("Starting authentication flow...")
    return _authenticate(config.client_secret_path, config.token_path, config.oauth_port)


# Global clients (initialized lazily)
_auth_client = None
_sheets_client = None
_drive_client = None


def get_auth_client():
    """
    Get the authenticated credentials.

    Returns:
        Google auth credentials
    """
    global _auth_client

    if _auth_client is None:
        log("Attempting to authorize Google API client...")
        _auth_client = authorize()
        log("Google API client authorized successfully.")

    return _auth_client


def get_sheets_client():
    """
    Get the Google Sheets API client.

    Returns:
        Google Sheets API client resource
    """
    global _sheets_client

    if _sheets_client is None:
        _sheets_client = build("sheets", "v4", credentials=get_auth_client())
    return _sheets_client


def get_drive_client():
    """
    Get the Google Drive API client.

    Returns:
        Google Drive API client resource
    """
    global _drive_client

    if _drive_client is None:
        _drive_client = build("drive", "v3", credentials=get_auth_client())
    return _drive_client

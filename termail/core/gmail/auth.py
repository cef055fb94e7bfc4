"""OAuth2 credentials for the Gmail API.

Reuses a cached token when possible, refreshes it when expired, and
otherwise runs the installed-app consent flow in the system browser.
"""

import os
from pathlib import Path
from typing import List

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from termail.utils.errors import MissingCredentialsError, StartupFailure
from termail.utils.logging import get_logger

logger = get_logger(__name__)


def _token_from_file(token_path: Path, scopes: List[str]) -> Credentials | None:
    if not token_path.exists():
        return None
    try:
        return Credentials.from_authorized_user_file(str(token_path), scopes)
    except (ValueError, OSError) as e:
        logger.warning(f"Ignoring unreadable token cache {token_path}: {e}")
        return None


def _save_token(token_path: Path, credentials: Credentials) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(token_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(credentials.to_json())


def _token_from_web(credentials_path: Path, scopes: List[str], port: int) -> Credentials:
    if not credentials_path.exists():
        raise MissingCredentialsError(
            f"Client secrets file not found: {credentials_path}",
            details={"path": str(credentials_path)},
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes)
    return flow.run_local_server(
        port=port,
        open_browser=True,
        authorization_prompt_message="Opening this URL in your browser:\n{url}",
        success_message="Authorization successful! You can close this window.",
        access_type="offline",
    )


def load_credentials(
    credentials_path: str | Path,
    token_path: str | Path,
    scopes: List[str],
    port: int = 8080,
) -> Credentials:
    """Return valid Gmail credentials.

    Raises:
        StartupFailure: If no valid credentials can be obtained.
    """
    credentials_path = Path(credentials_path).expanduser()
    token_path = Path(token_path).expanduser()

    credentials = _token_from_file(token_path, scopes)
    if credentials and credentials.valid:
        return credentials

    try:
        if credentials and credentials.expired and credentials.refresh_token:
            try:
                credentials.refresh(Request())
            except RefreshError as e:
                logger.warning(f"Token refresh failed, asking for consent again: {e}")
                credentials = _token_from_web(credentials_path, scopes, port)
        else:
            credentials = _token_from_web(credentials_path, scopes, port)
    except StartupFailure:
        raise
    except Exception as e:
        raise StartupFailure("Unable to retrieve token from web") from e

    try:
        _save_token(token_path, credentials)
    except OSError as e:
        raise StartupFailure(f"Unable to cache oauth token: {e}") from e

    return credentials

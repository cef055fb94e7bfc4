"""Gmail provider built on the Gmail REST API"""

from typing import Any, Dict, List

import requests
from google.auth.transport.requests import AuthorizedSession

from termail.core.gmail.auth import load_credentials
from termail.core.models import RawMessage
from termail.utils.config_manager import AppConfig
from termail.utils.errors import ProviderError, StartupFailure, TermailError
from termail.utils.logging import get_logger, log_call

logger = get_logger(__name__)

API_URL = "https://gmail.googleapis.com/gmail/v1/users/me"
REQUEST_TIMEOUT = 30


class GmailProvider:
    """MailProvider over an authorized HTTP session."""

    def __init__(self, session: Any, timeout: float = REQUEST_TIMEOUT):
        self._session = session
        self._timeout = timeout

    def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.get(f"{API_URL}/{path}", params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise ProviderError("Gmail is unreachable") from e

        if response.status_code != 200:
            raise ProviderError(f"Gmail request failed (HTTP {response.status_code})")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError("Gmail returned an unreadable response") from e

    def list_recent(self, page_size: int) -> List[str]:
        data = self._get_json("messages", {"maxResults": page_size, "q": ""})
        return [message["id"] for message in data.get("messages", [])]

    def get(self, message_id: str) -> RawMessage:
        return RawMessage.from_api(self._get_json(f"messages/{message_id}", {"format": "full"}))


@log_call
def build_provider(config: AppConfig) -> GmailProvider:
    """Authenticate and return a ready GmailProvider.

    Raises:
        StartupFailure: If no usable handle can be built.
    """
    credentials = load_credentials(
        config.gmail.credentials_path,
        config.gmail.token_path,
        config.gmail.scopes,
        config.gmail.redirect_port,
    )

    try:
        session = AuthorizedSession(credentials)
    except TermailError:
        raise
    except Exception as e:
        raise StartupFailure("Unable to create the Gmail client") from e

    logger.info("Gmail client ready")
    return GmailProvider(session)

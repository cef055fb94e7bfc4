"""Mail provider interface consumed by the fetch task."""

from typing import List, Protocol

from termail.core.models import RawMessage


class MailProvider(Protocol):
    """An authenticated handle on a mailbox.

    Both calls block and raise ``ProviderError`` on failure.
    """

    def list_recent(self, page_size: int) -> List[str]:
        """Return the ids of up to ``page_size`` most recent messages."""
        ...

    def get(self, message_id: str) -> RawMessage:
        """Return the full message with the given id."""
        ...

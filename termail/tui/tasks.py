"""Runs the fetch task and turns its outcome into an event."""

from termail.core.fetch import fetch_messages
from termail.core.provider import MailProvider
from termail.tui.events import FetchErr, FetchOk
from termail.utils.config_manager import FetchConfig
from termail.utils.errors import TermailError
from termail.utils.logging import get_logger

logger = get_logger(__name__)


async def perform_fetch(provider: MailProvider, config: FetchConfig | None = None) -> FetchOk | FetchErr:
    """Fetch messages; never raises, the outcome is the returned event."""
    config = config or FetchConfig()
    try:
        messages = await fetch_messages(
            provider,
            page_size=config.page_size,
            max_depth=config.max_part_depth,
        )
    except TermailError as e:
        return FetchErr(e)
    except Exception as e:
        logger.exception("Unexpected error during fetch")
        return FetchErr(e)

    return FetchOk(tuple(messages))

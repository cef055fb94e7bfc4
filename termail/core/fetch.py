"""Fetch task - retrieves and normalizes the most recent messages"""

import asyncio
import time
from typing import List

from termail.core.models import MessageSummary
from termail.core.parser import DEFAULT_MAX_DEPTH, summarize
from termail.core.provider import MailProvider
from termail.utils.errors import ItemFailure, ListFailure, TermailError
from termail.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20


async def _fetch_one(
    provider: MailProvider, message_id: str, max_depth: int
) -> MessageSummary:
    try:
        raw = await asyncio.to_thread(provider.get, message_id)
        return summarize(raw, max_depth)
    except TermailError as e:
        raise ItemFailure(details={"message_id": message_id}) from e
    except Exception as e:
        raise ItemFailure(f"Unexpected error: {e}", details={"message_id": message_id}) from e


@async_log_call
async def fetch_messages(
    provider: MailProvider,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[MessageSummary]:
    """Fetch up to ``page_size`` recent messages in provider order.

    Messages that fail to download are dropped from the result.

    Raises:
        ListFailure: If the listing call fails.
    """
    start_time = time.time()

    try:
        message_ids = await asyncio.to_thread(provider.list_recent, page_size)
    except Exception as e:
        logger.error(f"Listing messages failed: {e}")
        raise ListFailure(details={"page_size": page_size}) from e

    logger.info(f"Found {len(message_ids)} messages to fetch")

    summaries: List[MessageSummary] = []
    dropped = 0
    for message_id in message_ids:
        try:
            summaries.append(await _fetch_one(provider, message_id, max_depth))
        except ItemFailure as e:
            dropped += 1
            logger.warning(f"Dropping message {message_id}: {e.__cause__ or e.message}")

    logger.info(
        f"Fetch completed: {len(summaries)} messages, {dropped} dropped "
        f"in {time.time() - start_time:.2f}s"
    )
    return summaries

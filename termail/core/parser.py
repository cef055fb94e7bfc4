"""Message parsing: body extraction, headers and dates."""

import base64
import binascii
import codecs
import re
from datetime import datetime
from email.message import Message
from typing import Iterable, Optional, Tuple

from termail.core.models import NO_SUBJECT, ZERO_INSTANT, MessagePart, MessageSummary, RawMessage
from termail.utils.errors import DecodeFailure
from termail.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 32

DEFAULT_CHARSET = "utf-8"

# Tried in order, first match wins. %d accepts both "2" and "02".
DATE_FORMATS = (
    "%a, %d %b %Y %H:%M:%S %z",
    "%d %b %Y %H:%M:%S %z",
)

_TRAILING_COMMENT = re.compile(r"\s*\([^()]*\)\s*$")


## Body Extraction


def part_charset(part: MessagePart) -> str:
    """Charset declared by the part's Content-Type header, or UTF-8."""
    for name, value in part.headers:
        if name.lower() != "content-type":
            continue
        header = Message()
        header["Content-Type"] = value
        charset = header.get_content_charset()
        if not charset:
            break
        try:
            return codecs.lookup(charset).name
        except LookupError:
            logger.debug(f"Unknown charset {charset!r}, decoding as {DEFAULT_CHARSET}")
            break
    return DEFAULT_CHARSET


def decode_data(data: str, charset: str = DEFAULT_CHARSET) -> str:
    """Decode a base64url payload into text in the given charset.

    Raises:
        DecodeFailure: If the payload is not valid base64url.
    """
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError, UnicodeEncodeError) as e:
        raise DecodeFailure("Message part is not valid base64url") from e
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode(DEFAULT_CHARSET, errors="replace")


def _try_decode(part: MessagePart) -> Optional[str]:
    if not part.data:
        return None
    try:
        return decode_data(part.data, part_charset(part))
    except DecodeFailure:
        logger.debug("Skipping undecodable message part")
        return None


def _walk(part: MessagePart, depth: int, max_depth: int) -> str:
    if depth > max_depth:
        raise DecodeFailure(
            f"MIME tree deeper than {max_depth} levels",
            details={"max_depth": max_depth},
        )

    content = _try_decode(part)
    if content is not None:
        return content

    for child in part.parts:
        if child.mime_type == "text/plain":
            content = _try_decode(child)
            if content is not None:
                return content

    if part.parts:
        return _walk(part.parts[0], depth + 1, max_depth)

    return ""


def extract_body(payload: MessagePart, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Extract the readable body of a message.

    The walk is depth first and left biased: inline data on the current part
    wins, then the first plain text child, then the first child is searched
    the same way. A tree deeper than ``max_depth`` yields an empty body.
    """
    try:
        return _walk(payload, 0, max_depth)
    except DecodeFailure as e:
        logger.warning(f"Falling back to empty body: {e.message}")
        return ""


## Headers


def _try_parse_date(value: str) -> Optional[datetime]:
    text = _TRAILING_COMMENT.sub("", value.strip())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_date(value: str) -> datetime:
    """Parse a Date header, returning ZERO_INSTANT when no format matches."""
    return _try_parse_date(value) or ZERO_INSTANT


def extract_headers(headers: Iterable[Tuple[str, str]]) -> Tuple[str, str, datetime]:
    """Return (sender, subject, timestamp) from exact-name headers."""
    sender, subject, timestamp = "", "", ZERO_INSTANT

    for name, value in headers:
        match name:
            case "From":
                sender = value
            case "Subject":
                subject = value
            case "Date":
                # an unparseable later Date keeps the earlier timestamp
                timestamp = _try_parse_date(value) or timestamp

    return sender, subject or NO_SUBJECT, timestamp


def summarize(message: RawMessage, max_depth: int = DEFAULT_MAX_DEPTH) -> MessageSummary:
    """Normalize a raw provider message into a MessageSummary."""
    sender, subject, timestamp = extract_headers(message.payload.headers)
    return MessageSummary(
        id=message.id,
        sender=sender,
        subject=subject,
        timestamp=timestamp,
        body=extract_body(message.payload, max_depth),
    )

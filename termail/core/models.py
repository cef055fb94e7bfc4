"""Mail domain models"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

NO_SUBJECT = "(no subject)"

# Timestamp used when a Date header is missing or cannot be parsed
ZERO_INSTANT = datetime(1, 1, 1, tzinfo=timezone.utc)

DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class MessagePart:
    """One node of a message's MIME tree.

    ``data`` holds the part's inline body as base64url text, exactly as the
    provider sends it; it is empty when the part only has children.
    """

    mime_type: str = ""
    headers: Tuple[Tuple[str, str], ...] = ()
    data: str = ""
    parts: Tuple["MessagePart", ...] = ()

    @classmethod
    def from_api(cls, payload: Optional[dict[str, Any]]) -> "MessagePart":
        """Create a MessagePart from a Gmail API ``payload`` dictionary."""
        if not payload:
            return cls()

        body = payload.get("body") or {}
        return cls(
            mime_type=payload.get("mimeType", ""),
            headers=tuple(
                (header.get("name", ""), header.get("value", ""))
                for header in payload.get("headers") or []
            ),
            data=body.get("data") or "",
            parts=tuple(cls.from_api(part) for part in payload.get("parts") or []),
        )


@dataclass(frozen=True)
class RawMessage:
    """A full message as returned by the provider."""

    id: str
    payload: MessagePart = field(default_factory=MessagePart)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RawMessage":
        return cls(id=data.get("id", ""), payload=MessagePart.from_api(data.get("payload")))


@dataclass(frozen=True)
class MessageSummary:
    """Normalized, immutable view of one retrieved message."""

    id: str
    sender: str
    subject: str
    timestamp: datetime
    body: str

    def __post_init__(self):
        if not self.subject:
            object.__setattr__(self, "subject", NO_SUBJECT)

    @property
    def display_date(self) -> str:
        return self.timestamp.strftime(DISPLAY_DATE_FORMAT)

    @property
    def description(self) -> str:
        """Second line shown under the subject in the message list."""
        return f"From: {self.sender} | {self.display_date}"

    @property
    def filter_value(self) -> str:
        return self.subject


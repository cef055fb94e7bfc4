"""Session state: mode, message list and detail viewport."""

from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import Iterable, List, Optional, Tuple

from rich.text import Text

from termail.core.models import MessageSummary
from termail.utils.console import get_console

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

# Rows taken by the title, status and help lines around the list
LIST_CHROME_HEIGHT = 6
# Each list item is a subject line, a description line and a spacer
LIST_ITEM_HEIGHT = 3

# Columns and rows taken by the header, rule, padding and hint around the body
DETAIL_CHROME_WIDTH = 4
DETAIL_CHROME_HEIGHT = 7


class Mode(Enum):
    """Which screen the session is showing."""

    LOADING = "loading"
    BROWSING = "browsing"
    READING = "reading"
    FAILED = "failed"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def wrap_text(content: str, width: int) -> List[str]:
    """Hard-wrap text to ``width`` terminal cells, keeping blank lines.

    Wide characters count as two cells; words longer than the width are folded.
    """
    width = max(1, width)
    console = get_console()
    lines: List[str] = []
    for line in content.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        line = line.expandtabs(4).rstrip()
        if not line:
            lines.append("")
            continue
        wrapped = Text(line).wrap(console, width, justify="left", overflow="fold")
        lines.extend(part.plain.rstrip() for part in wrapped)
    return lines


@dataclass(frozen=True)
class MessageList:
    """Ordered messages plus a live subject filter and a selection.

    ``selected`` indexes ``visible``, never ``items``; it is ``None`` exactly
    when nothing is visible.
    """

    items: Tuple[MessageSummary, ...] = ()
    filter_text: str = ""
    selected: Optional[int] = None

    @classmethod
    def of(cls, items: Iterable[MessageSummary]) -> "MessageList":
        return cls(items=tuple(items), selected=0).clamped()

    @cached_property
    def visible(self) -> Tuple[MessageSummary, ...]:
        needle = self.filter_text.casefold()
        if not needle:
            return self.items
        return tuple(item for item in self.items if needle in item.filter_value.casefold())

    def clamped(self) -> "MessageList":
        count = len(self.visible)
        if count == 0:
            selected = None
        else:
            selected = _clamp(self.selected or 0, 0, count - 1)
        if selected == self.selected:
            return self
        return replace(self, selected=selected)

    def with_filter(self, filter_text: str) -> "MessageList":
        return replace(self, filter_text=filter_text).clamped()

    def move(self, delta: int) -> "MessageList":
        if self.selected is None:
            return self
        return replace(self, selected=self.selected + delta).clamped()

    @property
    def selected_item(self) -> Optional[MessageSummary]:
        if self.selected is None:
            return None
        return self.visible[self.selected]


@dataclass(frozen=True)
class DetailView:
    """Scrolling window over one message's wrapped body."""

    summary: MessageSummary
    viewport_width: int
    viewport_height: int
    scroll_offset: int = 0

    @classmethod
    def open(cls, summary: MessageSummary, width: int, height: int) -> "DetailView":
        return cls(summary=summary, viewport_width=max(1, width), viewport_height=max(1, height))

    @property
    def content(self) -> str:
        return self.summary.body

    @cached_property
    def lines(self) -> Tuple[str, ...]:
        return tuple(wrap_text(self.content, self.viewport_width))

    @property
    def max_offset(self) -> int:
        return max(0, len(self.lines) - self.viewport_height)

    @property
    def half_page(self) -> int:
        return max(1, self.viewport_height // 2)

    @property
    def visible_lines(self) -> Tuple[str, ...]:
        return self.lines[self.scroll_offset : self.scroll_offset + self.viewport_height]

    def scroll(self, delta: int) -> "DetailView":
        offset = _clamp(self.scroll_offset + delta, 0, self.max_offset)
        if offset == self.scroll_offset:
            return self
        return replace(self, scroll_offset=offset)

    def resize(self, width: int, height: int) -> "DetailView":
        resized = replace(self, viewport_width=max(1, width), viewport_height=max(1, height))
        return replace(resized, scroll_offset=_clamp(self.scroll_offset, 0, resized.max_offset))


@dataclass(frozen=True)
class Session:
    """The single state object owned by the event loop."""

    mode: Mode = Mode.LOADING
    messages: MessageList = field(default_factory=MessageList)
    detail: Optional[DetailView] = None
    error: Optional[str] = None
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    show_help: bool = False
    filtering: bool = False
    spinner_frame: int = 0

    def __post_init__(self):
        if (self.detail is not None) != (self.mode is Mode.READING):
            raise ValueError(f"detail view must be set only while reading (mode={self.mode.value})")
        if (self.error is not None) != (self.mode is Mode.FAILED):
            raise ValueError(f"error must be set only when failed (mode={self.mode.value})")
        if self.filtering and self.mode is not Mode.BROWSING:
            raise ValueError("filter input is only available while browsing")

    @property
    def list_height(self) -> int:
        return max(1, self.height - LIST_CHROME_HEIGHT)

    @property
    def list_page(self) -> int:
        """How many list items fit on screen."""
        return max(1, self.list_height // LIST_ITEM_HEIGHT)

    @property
    def viewport_size(self) -> Tuple[int, int]:
        return (
            max(1, self.width - DETAIL_CHROME_WIDTH),
            max(1, self.height - DETAIL_CHROME_HEIGHT),
        )

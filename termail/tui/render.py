"""Renderer: a pure function from session state to a terminal frame."""

from typing import List

from rich.cells import cell_len
from rich.spinner import Spinner
from rich.text import Text

from termail.tui.keymap import KeyBinding, KeyMap
from termail.tui.state import DetailView, Mode, Session
from termail.tui.theme import Theme

LIST_TITLE = "Gmail Inbox"

SPINNER = "dots"

MARGIN = "  "


def _fit(text: str, width: int) -> str:
    """Truncate ``text`` to ``width`` terminal cells with an ellipsis."""
    text = " ".join(text.split())
    if width <= 0:
        return ""
    if cell_len(text) <= width:
        return text
    fitted = Text(text)
    fitted.truncate(width, overflow="ellipsis")
    return fitted.plain


def spinner_glyph(frame: int) -> str:
    """The loading spinner glyph shown for tick number ``frame``."""
    frames = Spinner(SPINNER).frames
    return frames[frame % len(frames)]


def _help_line(bindings: List[KeyBinding]) -> str:
    return " • ".join(f"{binding.help_key} {binding.help_text}" for binding in bindings)


def _append_help(frame: Text, session: Session, keymap: KeyMap, theme: Theme) -> None:
    if session.show_help:
        for column in keymap.full_help():
            frame.append(MARGIN + _help_line(column) + "\n", style=theme.help)
    else:
        frame.append(MARGIN + _help_line(keymap.short_help()) + "\n", style=theme.help)


def render_loading(session: Session, theme: Theme) -> Text:
    frame = Text("\n\n   ")
    frame.append(spinner_glyph(session.spinner_frame), style=theme.spinner)
    frame.append(" Loading emails...\n\n")
    return frame


def render_failed(session: Session, keymap: KeyMap, theme: Theme) -> Text:
    frame = Text("\n")
    frame.append(f"Error: {session.error}", style=theme.error)
    frame.append("\n\n")
    frame.append(
        MARGIN + _help_line([KeyBinding(keymap.refresh.keys, keymap.refresh.help_key, "retry"), keymap.quit]),
        style=theme.help,
    )
    frame.append("\n")
    return frame


def render_list(session: Session, keymap: KeyMap, theme: Theme) -> Text:
    messages = session.messages
    visible = messages.visible
    width = max(1, session.width - 2 * len(MARGIN))

    frame = Text()
    frame.append(MARGIN + LIST_TITLE + "\n", style=theme.title)

    if session.filtering or messages.filter_text:
        cursor = "_" if session.filtering else ""
        frame.append(MARGIN + _fit(f"Filter: {messages.filter_text}{cursor}", width) + "\n", style=theme.filter)
    else:
        frame.append("\n")
    frame.append("\n")

    if visible and messages.selected is not None:
        page = session.list_page
        start = (messages.selected // page) * page
        for index, item in enumerate(visible[start : start + page], start=start):
            if index == messages.selected:
                frame.append(MARGIN + "│ " + _fit(item.subject, width - 2) + "\n", style=theme.selected_title)
                frame.append(MARGIN + "│ " + _fit(item.description, width - 2) + "\n", style=theme.selected_desc)
            else:
                frame.append(MARGIN + "  " + _fit(item.subject, width - 2) + "\n", style=theme.item_title)
                frame.append(MARGIN + "  " + _fit(item.description, width - 2) + "\n", style=theme.item_desc)
            frame.append("\n")

    if not messages.items:
        status = "No messages."
    elif not visible:
        status = "No matches."
    else:
        noun = "item" if len(visible) == 1 else "items"
        status = f"{len(visible)} {noun}"
    frame.append(MARGIN + status + "\n", style=theme.info)
    frame.append("\n")

    _append_help(frame, session, keymap, theme)
    return frame


def render_detail(session: Session, detail: DetailView, keymap: KeyMap, theme: Theme) -> Text:
    summary = detail.summary
    width = detail.viewport_width

    frame = Text()
    frame.append(MARGIN + _fit(summary.subject, width) + "\n", style=theme.title)
    frame.append(MARGIN + _fit(f"From: {summary.sender}", width) + "\n", style=theme.info)
    frame.append(MARGIN + f"Date: {summary.display_date}" + "\n", style=theme.info)
    frame.append(MARGIN + "─" * width + "\n", style=theme.rule)

    for line in detail.visible_lines:
        frame.append(MARGIN + line + "\n")

    frame.append("\n")
    if session.show_help:
        frame.append(MARGIN + _help_line(keymap.reading_help() + [keymap.quit]) + "\n", style=theme.help)
    else:
        frame.append(MARGIN + f"↑/↓: scroll • {keymap.back.help_key}: back • {keymap.help.help_key}: help" + "\n", style=theme.help)
    return frame


def render(session: Session, theme: Theme, keymap: KeyMap) -> Text:
    """Derive the frame for the current session."""
    match session.mode:
        case Mode.LOADING:
            return render_loading(session, theme)
        case Mode.FAILED:
            return render_failed(session, keymap, theme)
        case Mode.BROWSING:
            return render_list(session, keymap, theme)
        case Mode.READING:
            assert session.detail is not None
            return render_detail(session, session.detail, keymap, theme)

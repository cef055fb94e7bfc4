"""Session reducer: ``(session, event) -> (session, tasks)``.

All state transitions live here. The reducer never performs side effects;
it returns task requests for the event loop to run.
"""

from dataclasses import replace
from typing import List, Tuple, assert_never

from termail.tui.events import (
    Event,
    FetchErr,
    FetchOk,
    FetchRequested,
    KeyPress,
    QuitRequested,
    Resize,
    Task,
    Tick,
)
from termail.tui.keymap import KeyMap
from termail.tui.state import DEFAULT_HEIGHT, DEFAULT_WIDTH, DetailView, MessageList, Mode, Session
from termail.utils.errors import format_error_message
from termail.utils.logging import get_logger

logger = get_logger(__name__)

Transition = Tuple[Session, List[Task]]

DEFAULT_KEYMAP = KeyMap.from_config()


def init_session(width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> Transition:
    """Initial session, loading, with the first fetch requested."""
    return Session(width=width, height=height), [FetchRequested()]


def reduce(session: Session, event: Event, keymap: KeyMap = DEFAULT_KEYMAP) -> Transition:
    """Apply one event to the session."""
    match event:
        case Resize(width=width, height=height):
            return _on_resize(session, width, height), []
        case KeyPress():
            return _on_key(session, event, keymap)
        case FetchOk(messages=messages):
            return _on_fetch_ok(session, messages), []
        case FetchErr(error=error):
            return _on_fetch_err(session, error), []
        case Tick():
            if session.mode is Mode.LOADING:
                return replace(session, spinner_frame=session.spinner_frame + 1), []
            return session, []
        case _:
            assert_never(event)


## System events


def _on_resize(session: Session, width: int, height: int) -> Session:
    resized = replace(session, width=max(1, width), height=max(1, height))
    if resized.detail is not None:
        resized = replace(resized, detail=resized.detail.resize(*resized.viewport_size))
    return resized


def _on_fetch_ok(session: Session, messages) -> Session:
    if session.mode is not Mode.LOADING:
        logger.debug(f"Ignoring fetch result while {session.mode.value}")
        return session

    previous = session.messages
    fetched = MessageList(
        items=tuple(messages),
        filter_text=previous.filter_text,
        selected=previous.selected or 0,
    ).clamped()
    logger.info(f"Showing {len(fetched.items)} messages")
    return replace(session, mode=Mode.BROWSING, messages=fetched)


def _on_fetch_err(session: Session, error: BaseException) -> Session:
    if session.mode is not Mode.LOADING:
        logger.debug(f"Ignoring fetch error while {session.mode.value}")
        return session

    logger.error(f"Fetch failed: {error}")
    return replace(session, mode=Mode.FAILED, error=format_error_message(error))


def _start_fetch(session: Session) -> Transition:
    loading = replace(
        session,
        mode=Mode.LOADING,
        detail=None,
        error=None,
        filtering=False,
        spinner_frame=0,
    )
    return loading, [FetchRequested()]


## Key presses


def _on_key(session: Session, event: KeyPress, keymap: KeyMap) -> Transition:
    if session.filtering:
        return _on_filter_key(session, event, keymap)

    if keymap.quit.matches(event):
        if session.mode is Mode.LOADING:
            logger.warning("Quitting with a fetch still in flight")
        return session, [QuitRequested()]

    if keymap.help.matches(event):
        return replace(session, show_help=not session.show_help), []

    match session.mode:
        case Mode.LOADING:
            return session, []
        case Mode.FAILED:
            if keymap.refresh.matches(event):
                return _start_fetch(session)
            return session, []
        case Mode.BROWSING:
            return _on_browsing_key(session, event, keymap)
        case Mode.READING:
            return _on_reading_key(session, event, keymap), []
        case _:
            assert_never(session.mode)


def _on_browsing_key(session: Session, event: KeyPress, keymap: KeyMap) -> Transition:
    messages = session.messages

    if keymap.up.matches(event):
        return replace(session, messages=messages.move(-1)), []
    if keymap.down.matches(event):
        return replace(session, messages=messages.move(1)), []
    if keymap.page_up.matches(event):
        return replace(session, messages=messages.move(-session.list_page)), []
    if keymap.page_down.matches(event):
        return replace(session, messages=messages.move(session.list_page)), []

    if keymap.select.matches(event):
        item = messages.selected_item
        if item is None:
            return session, []
        detail = DetailView.open(item, *session.viewport_size)
        return replace(session, mode=Mode.READING, detail=detail), []

    if keymap.refresh.matches(event):
        return _start_fetch(session)
    if keymap.filter.matches(event):
        return replace(session, filtering=True), []
    if keymap.back.matches(event) and messages.filter_text:
        return replace(session, messages=messages.with_filter("")), []

    return session, []


def _on_filter_key(session: Session, event: KeyPress, keymap: KeyMap) -> Transition:
    messages = session.messages

    if keymap.select.matches(event):
        return replace(session, filtering=False), []
    if keymap.back.matches(event):
        return replace(session, filtering=False, messages=messages.with_filter("")), []
    if event.key == "backspace":
        return replace(session, messages=messages.with_filter(messages.filter_text[:-1])), []
    if event.character and event.character.isprintable():
        return replace(session, messages=messages.with_filter(messages.filter_text + event.character)), []

    if keymap.up.matches(event):
        return replace(session, messages=messages.move(-1)), []
    if keymap.down.matches(event):
        return replace(session, messages=messages.move(1)), []
    if keymap.quit.matches(event):
        return session, [QuitRequested()]

    return session, []


def _on_reading_key(session: Session, event: KeyPress, keymap: KeyMap) -> Session:
    detail = session.detail
    assert detail is not None

    if keymap.back.matches(event):
        return replace(session, mode=Mode.BROWSING, detail=None)

    if keymap.up.matches(event):
        detail = detail.scroll(-1)
    elif keymap.down.matches(event):
        detail = detail.scroll(1)
    elif keymap.half_up.matches(event) or keymap.page_up.matches(event):
        detail = detail.scroll(-detail.half_page)
    elif keymap.half_down.matches(event) or keymap.page_down.matches(event):
        detail = detail.scroll(detail.half_page)
    else:
        return session

    return replace(session, detail=detail)

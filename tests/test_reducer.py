"""
Tests for the session reducer

Tests cover:
- Startup and fetch results
- Browsing, filtering and reading key handling
- Refresh and quit from each mode
- Resize handling
- Ignored and unknown events
"""
import pytest

from termail.tui.events import FetchErr, FetchOk, FetchRequested, KeyPress, QuitRequested, Resize, Tick
from termail.tui.keymap import KeyMap
from termail.tui.reducer import init_session, reduce
from termail.tui.state import Mode
from termail.utils.config_manager import KeyBindingsConfig
from termail.utils.errors import ListFailure, ProviderError

from .test_helpers import MessageTestHelper


CHARACTERS = {"space": " ", "slash": "/", "question_mark": "?", "enter": "\r", "escape": "\x1b"}


def key(name):
    """Build a KeyPress the way the terminal reports it"""
    character = name if len(name) == 1 else CHARACTERS.get(name)
    return KeyPress(name, character)


def press(session, *keys, keymap=None):
    """Feed keys to the reducer, returning the final session and all tasks"""
    tasks = []
    for name in keys:
        if keymap is None:
            session, new_tasks = reduce(session, key(name))
        else:
            session, new_tasks = reduce(session, key(name), keymap)
        tasks.extend(new_tasks)
    return session, tasks


@pytest.fixture
def browsing(summaries):
    """A session browsing three messages"""
    session, _ = init_session()
    session, _ = reduce(session, FetchOk(tuple(summaries)))
    return session


@pytest.fixture
def reading():
    """A session reading a 40-line message in a 80x24 terminal"""
    body = "\n".join(f"line {i}" for i in range(40))
    session, _ = init_session()
    session, _ = reduce(session, FetchOk((MessageTestHelper.create_summary(body=body),)))
    session, _ = reduce(session, key("enter"))
    return session


class TestStartup:
    """Tests for the initial session"""

    def test_init_requests_fetch(self):
        """Test startup is loading with exactly one fetch requested"""
        session, tasks = init_session()

        assert session.mode is Mode.LOADING
        assert tasks == [FetchRequested()]

    def test_fetch_ok_with_no_messages(self):
        """Test an empty result browses an empty list"""
        session, _ = init_session()

        session, tasks = reduce(session, FetchOk(()))

        assert session.mode is Mode.BROWSING
        assert session.messages.visible == ()
        assert session.messages.selected is None
        assert tasks == []

    def test_fetch_ok_selects_first_message(self, browsing):
        """Test a successful fetch browses with the first item selected"""
        assert browsing.mode is Mode.BROWSING
        assert browsing.messages.selected == 0

    def test_fetch_err_fails(self):
        """Test a fetch error moves to failed with the cause shown"""
        session, _ = init_session()
        error = ListFailure()
        error.__cause__ = ProviderError("quota exceeded")

        session, tasks = reduce(session, FetchErr(error))

        assert session.mode is Mode.FAILED
        assert "quota exceeded" in session.error
        assert tasks == []

    def test_tick_advances_spinner_while_loading(self):
        """Test ticks animate the loading indicator"""
        session, _ = init_session()

        session, _ = reduce(session, Tick())
        session, _ = reduce(session, Tick())

        assert session.spinner_frame == 2

    def test_tick_ignored_when_not_loading(self, browsing):
        """Test ticks leave other modes untouched"""
        session, tasks = reduce(browsing, Tick())

        assert session is browsing
        assert tasks == []


class TestRefresh:
    """Tests for refresh and the single in-flight fetch"""

    def test_refresh_from_failed(self):
        """Test refresh after a failure issues exactly one fetch"""
        session, _ = init_session()
        session, _ = reduce(session, FetchErr(ListFailure()))

        session, tasks = press(session, "r")

        assert session.mode is Mode.LOADING
        assert session.error is None
        assert tasks == [FetchRequested()]

    def test_refresh_from_browsing(self, browsing):
        """Test refresh while browsing reloads"""
        session, tasks = press(browsing, "r")

        assert session.mode is Mode.LOADING
        assert tasks == [FetchRequested()]

    def test_refresh_ignored_while_loading(self):
        """Test a refresh during a fetch does not start another"""
        session, _ = init_session()

        session, tasks = press(session, "r", "r")

        assert session.mode is Mode.LOADING
        assert tasks == []

    def test_fetch_result_outside_loading_is_ignored(self, browsing, summaries):
        """Test a late fetch result cannot change a browsing session"""
        session, _ = reduce(browsing, FetchOk(tuple(summaries[:1])))
        assert session is browsing

        session, _ = reduce(browsing, FetchErr(ListFailure()))
        assert session is browsing

    def test_refetch_replaces_list_and_keeps_filter(self, browsing, summaries):
        """Test a new fetch result replaces the list wholesale"""
        session, _ = press(browsing, "/", "2", "enter", "r")
        fresh = MessageTestHelper.create_summaries(count=5)

        session, _ = reduce(session, FetchOk(tuple(fresh)))

        assert session.messages.items == tuple(fresh)
        assert session.messages.filter_text == "2"
        assert [m.id for m in session.messages.visible] == ["msg_2"]


class TestBrowsing:
    """Tests for list navigation"""

    def test_down_and_up_move_selection(self, browsing):
        """Test arrow keys and j/k move the selection"""
        session, _ = press(browsing, "down", "j")
        assert session.messages.selected == 2

        session, _ = press(session, "up", "k", "k")
        assert session.messages.selected == 0

    def test_page_down_moves_by_page(self):
        """Test page keys move by the number of items on screen"""
        session, _ = init_session(height=12)
        session, _ = reduce(session, FetchOk(tuple(MessageTestHelper.create_summaries(count=10))))

        session, _ = press(session, "pagedown")
        assert session.messages.selected == session.list_page == 2

        session, _ = press(session, "pageup")
        assert session.messages.selected == 0

    def test_select_opens_reader_at_top(self, browsing):
        """Test enter opens the selected message scrolled to the top"""
        session, _ = press(browsing, "down", "enter")

        assert session.mode is Mode.READING
        assert session.detail.summary.id == "msg_1"
        assert session.detail.scroll_offset == 0

    def test_back_preserves_selection(self, browsing):
        """Test returning from the reader keeps the selected index"""
        session, _ = press(browsing, "down", "down", "enter", "escape")

        assert session.mode is Mode.BROWSING
        assert session.detail is None
        assert session.messages.selected == 2

    def test_select_on_empty_list_is_noop(self):
        """Test enter with nothing selected stays browsing"""
        session, _ = init_session()
        session, _ = reduce(session, FetchOk(()))

        after, tasks = press(session, "enter")

        assert after is session
        assert tasks == []

    def test_help_toggles(self, browsing):
        """Test the help key toggles the full help"""
        session, _ = press(browsing, "question_mark")
        assert session.show_help

        session, _ = press(session, "question_mark")
        assert not session.show_help

    def test_unknown_key_is_noop(self, browsing):
        """Test unbound keys change nothing and raise nothing"""
        session, tasks = press(browsing, "f12", "x")

        assert session is browsing
        assert tasks == []


class TestFiltering:
    """Tests for incremental subject filtering"""

    def test_typing_filters_incrementally(self, browsing):
        """Test characters typed after / narrow the list"""
        session, _ = press(browsing, "slash", "j", "e", "c", "t", "space", "1")

        assert session.filtering
        assert session.messages.filter_text == "ject 1"
        assert [m.id for m in session.messages.visible] == ["msg_1"]

    def test_letters_are_text_while_filtering(self, browsing):
        """Test bound letters such as j, r and Q are typed, not dispatched"""
        session, tasks = press(browsing, "slash", "j", "r", "Q")

        assert session.mode is Mode.BROWSING
        assert session.messages.filter_text == "jrQ"
        assert tasks == []

    def test_backspace_removes_last_character(self, browsing):
        """Test backspace edits the filter"""
        session, _ = press(browsing, "slash", "x", "1", "backspace", "backspace")

        assert session.messages.filter_text == ""
        assert len(session.messages.visible) == 3

    def test_enter_accepts_filter(self, browsing):
        """Test enter leaves filter input with the filter applied"""
        session, _ = press(browsing, "slash", "2", "enter")

        assert not session.filtering
        assert session.mode is Mode.BROWSING
        assert [m.id for m in session.messages.visible] == ["msg_2"]

    def test_escape_clears_filter(self, browsing):
        """Test escape during input clears the filter"""
        session, _ = press(browsing, "slash", "2", "escape")

        assert not session.filtering
        assert session.messages.filter_text == ""

    def test_escape_clears_applied_filter(self, browsing):
        """Test escape while browsing a filtered list clears the filter"""
        session, _ = press(browsing, "slash", "2", "enter", "escape")

        assert session.messages.filter_text == ""
        assert len(session.messages.visible) == 3

    def test_ctrl_c_quits_while_filtering(self, browsing):
        """Test the non-printable quit key still quits"""
        _, tasks = press(browsing, "slash", "ctrl+c")

        assert tasks == [QuitRequested()]


class TestReading:
    """Tests for the reader viewport"""

    def test_scroll_line_by_line(self, reading):
        """Test down and up scroll one line"""
        session, _ = press(reading, "down", "down", "j", "up")

        assert session.detail.scroll_offset == 2

    def test_half_page_scroll(self, reading):
        """Test half page keys scroll by half the viewport"""
        half = reading.detail.half_page

        session, _ = press(reading, "ctrl+d")
        assert session.detail.scroll_offset == half

        session, _ = press(session, "pagedown")
        assert session.detail.scroll_offset == 2 * half

        session, _ = press(session, "ctrl+u", "pageup", "pageup")
        assert session.detail.scroll_offset == 0

    def test_scroll_never_passes_end(self, reading):
        """Test scrolling stops at the last page"""
        session, _ = press(reading, *["ctrl+d"] * 20)

        assert session.detail.scroll_offset == session.detail.max_offset

    def test_refresh_not_available_while_reading(self, reading):
        """Test refresh is not bound in the reader"""
        session, tasks = press(reading, "r")

        assert session is reading
        assert tasks == []


class TestQuit:
    """Tests for quitting"""

    @pytest.mark.parametrize("mode", ["loading", "browsing", "reading", "failed"])
    def test_quit_from_every_mode(self, mode, browsing, reading):
        """Test quit is accepted in every mode"""
        session = {
            "loading": init_session()[0],
            "browsing": browsing,
            "reading": reading,
            "failed": reduce(init_session()[0], FetchErr(ListFailure()))[0],
        }[mode]

        after, tasks = press(session, "Q")

        assert after is session
        assert tasks == [QuitRequested()]

    def test_ctrl_c_quits(self, browsing):
        """Test ctrl+c is bound to quit"""
        assert press(browsing, "ctrl+c")[1] == [QuitRequested()]


class TestResize:
    """Tests for terminal resize"""

    def test_resize_updates_dimensions(self, browsing):
        """Test resize records the new size"""
        session, tasks = reduce(browsing, Resize(120, 40))

        assert (session.width, session.height) == (120, 40)
        assert tasks == []

    def test_resize_while_reading_reclamps(self, reading):
        """Test a taller terminal pulls the offset back into range"""
        session, _ = press(reading, *["ctrl+d"] * 20)

        session, _ = reduce(session, Resize(80, 40))

        detail = session.detail
        assert detail.viewport_height == 33
        assert detail.scroll_offset == max(0, len(detail.lines) - 33)

    def test_resize_while_reading_rewraps(self, reading):
        """Test the viewport width follows the terminal width"""
        session, _ = reduce(reading, Resize(30, 24))

        assert session.detail.viewport_width == 26


class TestRebinding:
    """Tests for configurable key bindings"""

    def test_rebound_quit_key(self, browsing):
        """Test a rebinding changes dispatch without code changes"""
        keymap = KeyMap.from_config(KeyBindingsConfig(quit=["q"], down=["n"]))

        session, tasks = press(browsing, "n", keymap=keymap)
        assert session.messages.selected == 1
        assert tasks == []

        _, tasks = press(browsing, "q", keymap=keymap)
        assert tasks == [QuitRequested()]

        _, tasks = press(browsing, "Q", keymap=keymap)
        assert tasks == []


class TestInvariants:
    """Tests that every transition keeps the session consistent"""

    def test_random_walk_keeps_invariants(self, summaries):
        """Test a long key sequence never produces an inconsistent session"""
        session, _ = init_session()
        session, _ = reduce(session, FetchOk(tuple(summaries)))
        sequence = ["down", "enter", "down", "escape", "slash", "1", "enter", "enter",
                    "escape", "escape", "up", "r", "x", "question_mark"]

        for name in sequence:
            session, _ = reduce(session, key(name))
            assert (session.detail is not None) == (session.mode is Mode.READING)
            if session.messages.visible:
                assert 0 <= session.messages.selected < len(session.messages.visible)
            else:
                assert session.messages.selected is None

        assert session.mode is Mode.LOADING
        assert session.show_help

"""Textual host for the session reducer.

Terminal events become reducer events; the tasks the reducer returns are
run here. ``apply_event`` is the only place ``self.session`` changes.
"""

from typing import Iterable, Optional, assert_never

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from termail.core.provider import MailProvider
from termail.tui.events import Event, FetchRequested, KeyPress, QuitRequested, Resize, Task, Tick
from termail.tui.keymap import KeyMap
from termail.tui.reducer import init_session, reduce
from termail.tui.render import render
from termail.tui.tasks import perform_fetch
from termail.tui.theme import get_theme
from termail.utils.config_manager import AppConfig
from termail.utils.logging import get_logger

logger = get_logger(__name__)


class InboxApp(App):
    CSS = """
    Screen {
        overflow: hidden;
    }

    #frame {
        width: 100%;
        height: 100%;
    }
    """
    TITLE = "termail"
    ENABLE_COMMAND_PALETTE = False

    # Textual's own quit shortcuts go through the key table like any other key
    BINDINGS = [
        Binding("ctrl+c", "forward_key('ctrl+c')", show=False, priority=True),
        Binding("ctrl+q", "forward_key('ctrl+q')", show=False, priority=True),
    ]

    def __init__(self, provider: MailProvider, settings: Optional[AppConfig] = None):
        super().__init__()
        self.provider = provider
        self.app_config = settings or AppConfig()
        self.keymap = KeyMap.from_config(self.app_config.keys)
        self.colours = get_theme(self.app_config.ui.theme)
        self.session, self._startup_tasks = init_session()
        self.fetch_count = 0
        self._frame_drawn = False

    def compose(self) -> ComposeResult:
        yield Static(id="frame")

    def on_mount(self) -> None:
        self.set_interval(self.app_config.ui.tick_interval, self._tick)
        self.apply_event(Resize(self.size.width, self.size.height))
        self._run_tasks(self._startup_tasks)
        self._startup_tasks = []

    # --- Event Handlers ---
    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.apply_event(KeyPress(event.key, event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(Resize(event.size.width, event.size.height))

    def action_forward_key(self, key: str) -> None:
        self.apply_event(KeyPress(key))

    def _tick(self) -> None:
        self.apply_event(Tick())

    def apply_event(self, event: Event) -> None:
        """Run one event through the reducer, then its tasks, then redraw."""
        previous = self.session
        self.session, tasks = reduce(previous, event, self.keymap)
        if self.session.mode is not previous.mode:
            logger.debug(f"{previous.mode.value} -> {self.session.mode.value}")
        self._run_tasks(tasks)
        if self.session is not previous or not self._frame_drawn:
            self._draw()

    def _draw(self) -> None:
        self.query_one("#frame", Static).update(render(self.session, self.colours, self.keymap))
        self._frame_drawn = True

    # --- Tasks ---
    def _run_tasks(self, tasks: Iterable[Task]) -> None:
        for task in tasks:
            match task:
                case FetchRequested():
                    self.fetch_count += 1
                    self.run_worker(
                        self._fetch(),
                        name="fetch",
                        group="fetch",
                        exclusive=True,
                        exit_on_error=False,
                    )
                case QuitRequested():
                    self.exit(return_code=0)
                case _:
                    assert_never(task)

    async def _fetch(self) -> None:
        logger.info("Fetching messages")
        self.apply_event(await perform_fetch(self.provider, self.app_config.fetch))

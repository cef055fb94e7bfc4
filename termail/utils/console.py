"""Centralised console management module"""

from io import StringIO
from typing import Optional

from rich.console import Console, RenderableType
from rich.markup import escape

_console: Optional[Console] = None


def get_console() -> Console:
    """Get the shared Console instance"""
    global _console

    if _console is None:
        _console = Console(stderr=True)

    return _console


def get_buffer_console(width: int = 80, height: int = 24) -> tuple[Console, StringIO]:
    """Get a Console for capturing output to a buffer"""
    buffer = StringIO()

    console = Console(
        file=buffer,
        force_terminal=False,
        color_system=None,
        width=width,
        height=height,
        legacy_windows=False,
        record=True,
    )

    return console, buffer


def render_to_text(renderable: RenderableType, width: int = 80, height: int = 24) -> str:
    """Render a renderable to plain text, as a terminal of the given size would show it"""
    console, _ = get_buffer_console(width, height)
    console.print(renderable)
    return console.export_text()


## Convenience Print Functions


def print_error(message: str, console: Optional[Console] = None) -> None:
    """Print an error message to the console"""
    output_console = console or get_console()
    output_console.print(f"[red]{escape(message)}[/]", markup=True, highlight=False)

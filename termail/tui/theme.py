"""Colour themes passed explicitly to the renderer."""

from dataclasses import dataclass

from termail.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Theme:
    """Rich style strings for every part of the frame."""

    title: str
    info: str
    help: str
    spinner: str
    selected_title: str
    selected_desc: str
    item_title: str
    item_desc: str
    rule: str
    error: str
    filter: str


THEMES = {
    "dark": Theme(
        title="bold #FF75B7",
        info="#9B9B9B",
        help="#626262",
        spinner="color(205)",
        selected_title="color(170)",
        selected_desc="color(241)",
        item_title="#DDDDDD",
        item_desc="#777777",
        rule="#444444",
        error="bold red",
        filter="#569cd6",
    ),
    "light": Theme(
        title="bold #D6337F",
        info="#555555",
        help="#8A8A8A",
        spinner="#D6337F",
        selected_title="bold #007acc",
        selected_desc="#007acc",
        item_title="#1e1e1e",
        item_desc="#666666",
        rule="#BBBBBB",
        error="bold #C00000",
        filter="#007acc",
    ),
    "solarized": Theme(
        title="bold #b58900",
        info="#93a1a1",
        help="#586e75",
        spinner="#cb4b16",
        selected_title="bold #268bd2",
        selected_desc="#2aa198",
        item_title="#93a1a1",
        item_desc="#657b83",
        rule="#073642",
        error="bold #dc322f",
        filter="#859900",
    ),
}

DEFAULT_THEME = "dark"


def get_theme(name: str) -> Theme:
    """Look up a theme by name, falling back to the dark theme."""
    theme = THEMES.get(name.lower())
    if theme is None:
        logger.warning(f"Unknown theme '{name}', using '{DEFAULT_THEME}'")
        return THEMES[DEFAULT_THEME]
    return theme

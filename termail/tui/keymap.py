"""Key binding table."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from termail.tui.events import KeyPress
from termail.utils.config_manager import KeyBindingsConfig


@dataclass(frozen=True)
class KeyBinding:
    keys: Tuple[str, ...]
    help_key: str
    help_text: str

    def matches(self, event: KeyPress) -> bool:
        return event.key in self.keys or (
            event.character is not None and event.character in self.keys
        )


def _binding(keys: List[str], help_text: str, help_key: Optional[str] = None) -> KeyBinding:
    return KeyBinding(tuple(keys), help_key or "/".join(keys), help_text)


@dataclass(frozen=True)
class KeyMap:
    """Actions and the keys bound to them.

    Dispatch only ever asks ``keymap.<action>.matches(event)``, so rebinding
    is a matter of building a different KeyMap.
    """

    up: KeyBinding
    down: KeyBinding
    page_up: KeyBinding
    page_down: KeyBinding
    half_up: KeyBinding
    half_down: KeyBinding
    select: KeyBinding
    back: KeyBinding
    help: KeyBinding
    quit: KeyBinding
    refresh: KeyBinding
    filter: KeyBinding

    @classmethod
    def from_config(cls, config: Optional[KeyBindingsConfig] = None) -> "KeyMap":
        config = config or KeyBindingsConfig()
        return cls(
            up=_binding(config.up, "up", _label(config.up)),
            down=_binding(config.down, "down", _label(config.down)),
            page_up=_binding(config.page_up, "page up", _label(config.page_up)),
            page_down=_binding(config.page_down, "page down", _label(config.page_down)),
            half_up=_binding(config.half_up, "half page up", _label(config.half_up)),
            half_down=_binding(config.half_down, "half page down", _label(config.half_down)),
            select=_binding(config.select, "select", _label(config.select)),
            back=_binding(config.back, "back", _label(config.back)),
            help=_binding(config.help, "toggle help", _label(config.help)),
            quit=_binding(config.quit, "quit", _label(config.quit)),
            refresh=_binding(config.refresh, "refresh", _label(config.refresh)),
            filter=_binding(config.filter, "filter", _label(config.filter)),
        )

    def short_help(self) -> List[KeyBinding]:
        return [self.help, self.quit]

    def full_help(self) -> List[List[KeyBinding]]:
        return [
            [self.up, self.down, self.page_up, self.page_down],
            [self.select, self.back, self.refresh, self.filter],
            [self.help, self.quit],
        ]

    def reading_help(self) -> List[KeyBinding]:
        return [self.up, self.down, self.half_down, self.back, self.help]


_ARROWS = {
    "up": "↑",
    "down": "↓",
    "escape": "esc",
    "pageup": "pgup",
    "pagedown": "pgdown",
    "question_mark": "?",
    "slash": "/",
}


def _label(keys: List[str]) -> str:
    """Short label for help text, e.g. ``↑/k`` for ``["up", "k"]``."""
    labels: List[str] = []
    for key in keys:
        label = _ARROWS.get(key, key)
        if label not in labels:
            labels.append(label)
    return "/".join(labels)

"""Events consumed by the reducer and tasks it requests."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from termail.core.models import MessageSummary


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPress:
    """A key press. ``key`` is the key name, ``character`` the printable text if any."""

    key: str
    character: Optional[str] = None


@dataclass(frozen=True)
class FetchOk:
    messages: Tuple[MessageSummary, ...]


@dataclass(frozen=True)
class FetchErr:
    error: BaseException


@dataclass(frozen=True)
class Tick:
    pass


Event = Union[Resize, KeyPress, FetchOk, FetchErr, Tick]


@dataclass(frozen=True)
class FetchRequested:
    """Start the fetch task."""


@dataclass(frozen=True)
class QuitRequested:
    """Leave the event loop and exit the process with status 0."""


Task = Union[FetchRequested, QuitRequested]

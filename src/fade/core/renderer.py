"""Contract between the slideshow core and whatever draws it."""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Protocol

from fade.core.modes import ModeKind


class Role(Enum):
    CURRENT = auto()
    COMPARISON = auto()
    TRIPTYCH_LEFT = auto()
    TRIPTYCH_MIDDLE = auto()
    TRIPTYCH_RIGHT = auto()


class Icon(Enum):
    PAUSE = auto()
    PLAY = auto()


class Direction(Enum):
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()


class Renderer(Protocol):
    """Presentation side of the slideshow.

    The core decides which image goes where; a renderer only draws. It holds
    no navigation state of its own.
    """

    def set_mode(self, mode: ModeKind) -> None: ...

    def show_image(self, role: Role, handle: Any, dimmed: bool, fade: bool = False) -> None: ...

    def set_dimmed(self, role: Role, dimmed: bool) -> None: ...

    def set_titles(self, titles: list[str]) -> None: ...

    def set_divider(self, position: float) -> None: ...

    def show_status(self, text: str) -> None: ...

    def show_icon(self, icon: Icon) -> None: ...

    def clear_status(self) -> None: ...

    def flash_arrow(self, direction: Direction) -> None: ...

    def flash_dash(self, direction: Direction) -> None: ...

    def show_all_trashed(self, text: str) -> None: ...

    def close(self) -> None: ...

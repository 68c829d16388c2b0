"""Routes abstract input events to the session according to the active mode."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from fade.core.modes import ModeKind
from fade.core.renderer import Direction

if TYPE_CHECKING:
    from fade.core.session import SlideshowSession

logger = logging.getLogger(__name__)

# Fraction of the width (of the window, or of one triptych panel) that
# counts as a left/right click zone.
CLICK_EDGE_FRACTION = 0.10


class EventKind(Enum):
    ADVANCE = auto()
    RETREAT = auto()
    TAG_UP = auto()
    TAG_DOWN = auto()
    PAUSE = auto()
    TOGGLE_COMPARE = auto()
    TOGGLE_TRIPTYCH = auto()
    QUIT = auto()
    CLICK = auto()
    DRAG_DIVIDER = auto()


@dataclass(frozen=True)
class InputEvent:
    """One user action.

    ``position`` is the horizontal pointer position as a fraction of the
    window width, for CLICK and DRAG_DIVIDER.
    """

    kind: EventKind
    position: float | None = None


def normal_click_zone(position: float) -> Direction | None:
    """Left or right edge strip of a single-image view."""
    if position < CLICK_EDGE_FRACTION:
        return Direction.LEFT
    if position > 1.0 - CLICK_EDGE_FRACTION:
        return Direction.RIGHT
    return None


def triptych_click_zone(position: float) -> Direction | None:
    """Side panels plus the tenth of the middle panel next to each of them.

    The three panels split the width in thirds.
    """
    panel = 1.0 / 3.0
    margin = panel * CLICK_EDGE_FRACTION
    if position < panel + margin:
        return Direction.LEFT
    if position > 2 * panel - margin:
        return Direction.RIGHT
    return None


class InputDispatcher:
    """Maps input events onto session operations.

    Quit is honoured in every mode. Everything else is ignored once the
    session has finished.
    """

    def __init__(self, session: SlideshowSession):
        self.session = session

    def dispatch(self, event: InputEvent) -> bool:
        """Handle ``event``. Returns False if it had no meaning in this mode."""
        if event.kind == EventKind.QUIT:
            self.session.quit()
            return True
        if not self.session.accepting_input:
            return False

        kind = self.session.modes.kind
        if kind == ModeKind.COMPARE:
            handled = self._dispatch_compare(event)
        elif kind == ModeKind.TRIPTYCH:
            handled = self._dispatch_triptych(event)
        else:
            handled = self._dispatch_normal(event)
        if not handled:
            logger.debug(f"Ignored {event.kind.name} in {kind.value} mode")
        return handled

    def _dispatch_normal(self, event: InputEvent) -> bool:
        s = self.session
        kind = event.kind
        if kind == EventKind.PAUSE:
            s.toggle_pause()
        elif kind == EventKind.ADVANCE:
            s.go_next()
        elif kind == EventKind.RETREAT:
            s.go_previous()
        elif kind == EventKind.TAG_UP:
            s.tag_current(Direction.UP)
        elif kind == EventKind.TAG_DOWN:
            s.tag_current(Direction.DOWN)
        elif kind == EventKind.TOGGLE_COMPARE:
            s.enter_compare()
        elif kind == EventKind.TOGGLE_TRIPTYCH:
            s.enter_triptych()
        elif kind == EventKind.CLICK and event.position is not None:
            zone = normal_click_zone(event.position)
            if zone == Direction.LEFT:
                s.go_previous()
            elif zone == Direction.RIGHT:
                s.go_next()
            else:
                s.toggle_pause()
        else:
            return False
        return True

    def _dispatch_compare(self, event: InputEvent) -> bool:
        s = self.session
        kind = event.kind
        if kind == EventKind.ADVANCE:
            s.advance_comparison(forward=True)
        elif kind == EventKind.RETREAT:
            s.advance_comparison(forward=False)
        elif kind == EventKind.TAG_UP:
            s.tag_comparison(Direction.UP)
        elif kind == EventKind.TAG_DOWN:
            s.tag_comparison(Direction.DOWN)
        elif kind == EventKind.TOGGLE_COMPARE:
            s.exit_compare()
        elif kind == EventKind.TOGGLE_TRIPTYCH:
            s.enter_triptych()
        elif kind == EventKind.DRAG_DIVIDER and event.position is not None:
            s.set_divider(event.position)
        else:
            # Pause and clicks have no meaning while comparing.
            return False
        return True

    def _dispatch_triptych(self, event: InputEvent) -> bool:
        s = self.session
        kind = event.kind
        if kind == EventKind.ADVANCE:
            s.triptych_navigate(forward=True)
        elif kind == EventKind.RETREAT:
            s.triptych_navigate(forward=False)
        elif kind == EventKind.TAG_UP:
            s.tag_current(Direction.UP)
        elif kind == EventKind.TAG_DOWN:
            s.tag_current(Direction.DOWN)
        elif kind == EventKind.TOGGLE_TRIPTYCH:
            s.exit_triptych()
        elif kind == EventKind.TOGGLE_COMPARE:
            s.enter_compare()
        elif kind == EventKind.CLICK and event.position is not None:
            zone = triptych_click_zone(event.position)
            if zone is None:
                return False
            s.triptych_navigate(forward=zone == Direction.RIGHT)
        else:
            return False
        return True

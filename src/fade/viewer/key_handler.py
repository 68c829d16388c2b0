"""Keyboard routing onto slideshow input events."""

from __future__ import annotations

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QKeyEvent

from fade.core.dispatcher import EventKind, InputEvent

# Mapping: (Qt.Key, frozenset of modifiers) → EventKind
_KEY_MAP: dict[tuple[int, frozenset], EventKind] = {
    (Qt.Key.Key_Right, frozenset()): EventKind.ADVANCE,
    (Qt.Key.Key_Left, frozenset()): EventKind.RETREAT,
    (Qt.Key.Key_Up, frozenset()): EventKind.TAG_UP,
    (Qt.Key.Key_Down, frozenset()): EventKind.TAG_DOWN,
    (Qt.Key.Key_Space, frozenset()): EventKind.PAUSE,
    (Qt.Key.Key_S, frozenset()): EventKind.TOGGLE_COMPARE,
    (Qt.Key.Key_T, frozenset()): EventKind.TOGGLE_TRIPTYCH,
    (Qt.Key.Key_Escape, frozenset()): EventKind.QUIT,
    (Qt.Key.Key_Q, frozenset()): EventKind.QUIT,
}


def lookup_key(key: int, modifiers: frozenset = frozenset()) -> EventKind | None:
    return _KEY_MAP.get((key, modifiers))


class KeyHandler(QObject):
    """Routes keyboard events to input events via a signal."""

    event_triggered = pyqtSignal(object)  # InputEvent

    def handle_key_event(self, event: QKeyEvent) -> bool:
        """Process a key event. Returns True if it mapped to an input event."""
        modifiers = event.modifiers()

        # Build modifier set (ignore KeypadModifier)
        mod_set: set = set()
        if modifiers & Qt.KeyboardModifier.ControlModifier:
            mod_set.add(Qt.KeyboardModifier.ControlModifier)
        if modifiers & Qt.KeyboardModifier.ShiftModifier:
            mod_set.add(Qt.KeyboardModifier.ShiftModifier)
        if modifiers & Qt.KeyboardModifier.AltModifier:
            mod_set.add(Qt.KeyboardModifier.AltModifier)

        kind = lookup_key(event.key(), frozenset(mod_set))
        if kind is None:
            return False
        self.event_triggered.emit(InputEvent(kind))
        return True

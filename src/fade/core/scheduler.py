"""Timed callbacks with one pending timer per purpose."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable


class Purpose(Enum):
    ADVANCE = auto()       # auto-advance to the next image
    TAG_ADVANCE = auto()   # delayed move after a Favorite/Trash tag
    STATUS_DECAY = auto()  # hide the transient icon/notice
    RESCAN = auto()        # periodic directory rescan


@dataclass(frozen=True)
class Token:
    purpose: Purpose
    serial: int


class Scheduler:
    """Arms and cancels one-shot timers keyed by purpose.

    Scheduling a purpose first cancels whatever was pending for it, so two
    timers of the same purpose never coexist. Callbacks run on the thread
    that owns the scheduler. Subclasses supply the actual timer via
    ``_arm`` and ``_disarm``.
    """

    def __init__(self):
        self._pending: dict[Purpose, tuple[Token, Any]] = {}
        self._serials = itertools.count(1)

    def schedule(self, purpose: Purpose, delay: float, callback: Callable[[], None]) -> Token:
        self.cancel_purpose(purpose)
        token = Token(purpose, next(self._serials))

        def fire() -> None:
            entry = self._pending.get(purpose)
            if entry is None or entry[0] != token:
                return
            del self._pending[purpose]
            callback()

        handle = self._arm(max(0.0, delay), fire)
        self._pending[purpose] = (token, handle)
        return token

    def cancel(self, token: Token) -> bool:
        entry = self._pending.get(token.purpose)
        if entry is None or entry[0] != token:
            return False
        del self._pending[token.purpose]
        self._disarm(entry[1])
        return True

    def cancel_purpose(self, purpose: Purpose) -> bool:
        entry = self._pending.pop(purpose, None)
        if entry is None:
            return False
        self._disarm(entry[1])
        return True

    def cancel_all(self) -> None:
        for purpose in list(self._pending):
            self.cancel_purpose(purpose)

    def is_pending(self, purpose: Purpose) -> bool:
        return purpose in self._pending

    def _arm(self, delay: float, fire: Callable[[], None]) -> Any:
        raise NotImplementedError

    def _disarm(self, handle: Any) -> None:
        raise NotImplementedError

"""Single-slot speculative image preloading."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)

# fetch(index, path): start loading in the background; the result must come
# back through PreloadCache.on_delivery on the control thread.
FetchFunction = Callable[[int, str], None]


class SlotState(Enum):
    PENDING = auto()
    READY = auto()


@dataclass
class PreloadSlot:
    target_index: int
    target_path: str
    state: SlotState = SlotState.PENDING
    handle: Any = None


class PreloadCache:
    """Tracks at most one outstanding background load.

    A new request supersedes the previous one: the old load may still run
    to completion, but its delivery no longer matches the target and is
    dropped.
    """

    def __init__(self, fetch: FetchFunction):
        self._fetch = fetch
        self._slot: PreloadSlot | None = None

    @property
    def slot(self) -> PreloadSlot | None:
        return self._slot

    @property
    def target_index(self) -> int | None:
        return self._slot.target_index if self._slot else None

    def request_preload(self, index: int, path: str) -> None:
        self._slot = PreloadSlot(target_index=index, target_path=path)
        self._fetch(index, path)

    def cancel(self) -> None:
        self._slot = None

    def on_delivery(self, index: int, path: str, handle: Any) -> bool:
        """Apply a finished load if it is still the current target."""
        slot = self._slot
        if slot is None or slot.target_index != index or slot.target_path != path:
            logger.debug(f"Dropping stale preload for index {index}")
            return False
        slot.state = SlotState.READY
        slot.handle = handle
        return True

    def take(self, index: int, path: str | None = None) -> Any:
        """Return the preloaded handle for ``index`` if it is ready, else None.

        A hit consumes the slot.
        """
        slot = self._slot
        if slot is None or slot.state != SlotState.READY or slot.target_index != index:
            return None
        if path is not None and slot.target_path != path:
            return None
        self._slot = None
        return slot.handle

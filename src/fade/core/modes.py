"""View modes and the transitions between them.

The active mode is a tagged union: auxiliary indices only exist on the
variant that uses them, so a comparison index outside Compare mode (or side
panels outside Triptych mode) cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Callable, ClassVar, Union

if TYPE_CHECKING:
    from fade.core.playlist import NavigationEngine


class ModeKind(Enum):
    NORMAL = "normal"
    COMPARE = "compare"
    TRIPTYCH = "triptych"


@dataclass(frozen=True)
class NormalMode:
    kind: ClassVar[ModeKind] = ModeKind.NORMAL


@dataclass(frozen=True)
class CompareMode:
    """Reference (current item) on the left, navigable comparison on the right.

    ``divider_position`` is the fraction of the width showing the reference;
    1.0 shows it fully.
    """

    comparison_index: int
    divider_position: float = 1.0
    kind: ClassVar[ModeKind] = ModeKind.COMPARE


@dataclass(frozen=True)
class TriptychMode:
    """Previous / current / next-untrashed side by side.

    A side index is None when no item other than the current one fills it.
    """

    left_index: int | None
    right_index: int | None
    kind: ClassVar[ModeKind] = ModeKind.TRIPTYCH


ModeState = Union[NormalMode, CompareMode, TriptychMode]

NORMAL = NormalMode()


class ModeController:
    """Owns the active mode and its auxiliary indices.

    Entering a mode is only legal from Normal; callers leave the active mode
    first. The pause state seen on entry is remembered so it can be restored
    on exit.
    """

    def __init__(self, navigation: NavigationEngine):
        self._nav = navigation
        self._state: ModeState = NORMAL
        self.was_paused_before_mode = False

    @property
    def state(self) -> ModeState:
        return self._state

    @property
    def kind(self) -> ModeKind:
        return self._state.kind

    def is_active(self, kind: ModeKind) -> bool:
        return self._state.kind == kind

    @property
    def comparison_index(self) -> int | None:
        if isinstance(self._state, CompareMode):
            return self._state.comparison_index
        return None

    @property
    def divider_position(self) -> float | None:
        if isinstance(self._state, CompareMode):
            return self._state.divider_position
        return None

    # --- Compare ---

    def enter_compare(self, paused: bool) -> CompareMode | None:
        """Switch to Compare against the next eligible item.

        Returns None (and stays in Normal) if there is nothing to compare
        with.
        """
        self._require(ModeKind.NORMAL)
        current = self._nav.playlist.current_index
        if current is None:
            return None
        target = self._nav.next_comparison_index(after=current, exclude=current)
        if target is None:
            return None
        self.was_paused_before_mode = paused
        self._state = CompareMode(comparison_index=target)
        return self._state

    def exit_compare(self) -> bool:
        """Return to Normal. Returns the pause state to restore."""
        self._require(ModeKind.COMPARE)
        self._state = NORMAL
        return self.was_paused_before_mode

    def advance_comparison(
        self, forward: bool, loadable: Callable[[int], bool] | None = None
    ) -> int | None:
        """Move the comparison pointer; None (and no change) if it cannot move.

        Forward skips Trash; backward does not. Both skip the reference item.
        Candidates rejected by ``loadable`` are stepped over.
        """
        state = self._require(ModeKind.COMPARE)
        current = self._nav.playlist.current_index
        start = state.comparison_index
        candidate = start
        for _ in range(len(self._nav.playlist)):
            if forward:
                candidate = self._nav.next_comparison_index(candidate, exclude=current)
            else:
                candidate = self._nav.previous_comparison_index(candidate, exclude=current)
            if candidate is None or candidate == start:
                return None
            if loadable is None or loadable(candidate):
                self._state = replace(state, comparison_index=candidate)
                return candidate
        return None

    def set_comparison(self, index: int) -> CompareMode:
        state = self._require(ModeKind.COMPARE)
        if index == self._nav.playlist.current_index:
            raise ValueError("Comparison item must differ from the reference item")
        self._state = replace(state, comparison_index=index)
        return self._state

    def set_divider(self, position: float) -> CompareMode:
        state = self._require(ModeKind.COMPARE)
        self._state = replace(state, divider_position=max(0.0, min(1.0, position)))
        return self._state

    def relocate_comparison(self, path: str | None) -> CompareMode | None:
        """Re-find the comparison item after the item list was replaced.

        Falls back to the next eligible target; None means Compare can no
        longer continue.
        """
        state = self._require(ModeKind.COMPARE)
        playlist = self._nav.playlist
        current = playlist.current_index
        index = playlist.index_of(path) if path is not None else None
        if index is None or index == current:
            index = self._nav.next_comparison_index(after=current, exclude=current)
        if index is None:
            return None
        self._state = replace(state, comparison_index=index)
        return self._state

    # --- Triptych ---

    def enter_triptych(self, paused: bool) -> TriptychMode:
        self._require(ModeKind.NORMAL)
        self.was_paused_before_mode = paused
        self._state = self._triptych_sides()
        return self._state

    def refresh_triptych(self, loadable: Callable[[int], bool] | None = None) -> TriptychMode:
        """Recompute the side panels around the current item.

        Side candidates rejected by ``loadable`` are stepped over.
        """
        self._require(ModeKind.TRIPTYCH)
        self._state = self._triptych_sides(loadable)
        return self._state

    def triptych_step(self, forward: bool) -> int | None:
        state = self._require(ModeKind.TRIPTYCH)
        return state.right_index if forward else state.left_index

    def exit_triptych(self) -> bool:
        self._require(ModeKind.TRIPTYCH)
        self._state = NORMAL
        return self.was_paused_before_mode

    def reset(self) -> None:
        """Drop back to Normal unconditionally (used on shutdown)."""
        self._state = NORMAL

    def _triptych_sides(self, loadable: Callable[[int], bool] | None = None) -> TriptychMode:
        current = self._nav.playlist.current_index
        return TriptychMode(
            left_index=self._side(self._nav.previous_index, current, loadable),
            right_index=self._side(self._nav.next_untrashed_index, current, loadable),
        )

    def _side(
        self,
        step: Callable[[int], int | None],
        current: int | None,
        loadable: Callable[[int], bool] | None,
    ) -> int | None:
        index = step(current)
        for _ in range(len(self._nav.playlist)):
            if index is None or index == current:
                return None
            if loadable is None or loadable(index):
                return index
            index = step(index)
        return None

    def _require(self, kind: ModeKind):
        if self._state.kind != kind:
            raise RuntimeError(f"Expected {kind.value} mode, currently {self._state.kind.value}")
        return self._state

"""Tests for the view-mode state machine."""

import pytest

from fade.core.modes import CompareMode, ModeController, ModeKind, NormalMode, TriptychMode
from fade.core.playlist import NavigationEngine, Playlist
from fade.tags.tag_cycle import Tag

from conftest import MemoryTagStore


def make_modes(names=("a", "b", "c"), trashed=(), loop=True, current=0):
    store = MemoryTagStore({n: Tag.TRASH for n in trashed})
    nav = NavigationEngine(Playlist(names, current), store.tag_of, loop=loop)
    return ModeController(nav), nav, store


def active_kinds(modes):
    return [kind for kind in ModeKind if modes.is_active(kind)]


class TestCompare:
    def test_enter_targets_next_item(self):
        modes, _, _ = make_modes()
        state = modes.enter_compare(paused=False)
        assert state == CompareMode(comparison_index=1, divider_position=1.0)
        assert modes.comparison_index == 1

    def test_advance_then_stop_at_end_without_loop(self):
        modes, _, _ = make_modes(loop=False)
        modes.enter_compare(paused=False)
        assert modes.advance_comparison(forward=True) == 2
        assert modes.advance_comparison(forward=True) is None
        assert modes.comparison_index == 2

    def test_enter_skips_trash(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"), trashed=["b"])
        assert modes.enter_compare(paused=False).comparison_index == 2

    def test_enter_refused_without_target(self):
        modes, _, _ = make_modes(("a", "b"), trashed=["b"])
        assert modes.enter_compare(paused=False) is None
        assert modes.is_active(ModeKind.NORMAL)

    def test_backward_includes_trash_but_not_reference(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"), trashed=["d"])
        modes.enter_compare(paused=False)
        assert modes.advance_comparison(forward=False) == 3
        assert modes.advance_comparison(forward=False) == 2

    def test_unloadable_candidates_are_stepped_over(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"))
        modes.enter_compare(paused=False)
        assert modes.advance_comparison(True, loadable=lambda i: i != 2) == 3

    def test_no_loadable_candidate(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"))
        modes.enter_compare(paused=False)
        assert modes.advance_comparison(True, loadable=lambda i: False) is None
        assert modes.comparison_index == 1

    def test_exit_restores_pause(self):
        modes, _, _ = make_modes()
        modes.enter_compare(paused=True)
        assert modes.exit_compare() is True
        assert modes.comparison_index is None
        assert modes.state == NormalMode()

    def test_divider_clamped(self):
        modes, _, _ = make_modes()
        modes.enter_compare(paused=False)
        assert modes.set_divider(1.7).divider_position == 1.0
        assert modes.set_divider(-0.2).divider_position == 0.0
        assert modes.set_divider(0.4).divider_position == 0.4

    def test_comparison_cannot_be_reference(self):
        modes, _, _ = make_modes()
        modes.enter_compare(paused=False)
        with pytest.raises(ValueError):
            modes.set_comparison(0)

    def test_relocate_follows_item(self):
        modes, nav, _ = make_modes(("a", "b", "c"))
        modes.enter_compare(paused=False)
        nav.playlist.merge(["c", "a", "x", "b"])
        assert modes.relocate_comparison("b").comparison_index == 3

    def test_relocate_falls_back_when_item_gone(self):
        modes, nav, _ = make_modes(("a", "b", "c"))
        modes.enter_compare(paused=False)
        nav.playlist.merge(["a", "c"])
        assert modes.relocate_comparison("b").comparison_index == 1

    def test_relocate_gives_up_when_nothing_left(self):
        modes, nav, _ = make_modes(("a", "b"))
        modes.enter_compare(paused=False)
        nav.playlist.merge(["a"])
        assert modes.relocate_comparison("b") is None

    def test_operations_require_compare(self):
        modes, _, _ = make_modes()
        with pytest.raises(RuntimeError):
            modes.advance_comparison(forward=True)
        with pytest.raises(RuntimeError):
            modes.exit_compare()


class TestTriptych:
    def test_sides(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"), current=1)
        assert modes.enter_triptych(paused=False) == TriptychMode(left_index=0, right_index=2)

    def test_left_includes_trash_right_skips_it(self):
        modes, _, _ = make_modes(("a", "b", "c", "d"), trashed=["a", "c"], current=1)
        state = modes.enter_triptych(paused=False)
        assert state.left_index == 0
        assert state.right_index == 3

    def test_single_item(self):
        modes, _, _ = make_modes(("a",))
        assert modes.enter_triptych(paused=False) == TriptychMode(None, None)

    def test_right_falls_back_to_current(self):
        modes, _, _ = make_modes(("a", "b"), trashed=["b"])
        state = modes.enter_triptych(paused=False)
        assert state.left_index == 1
        assert state.right_index is None

    def test_navigate(self):
        modes, nav, _ = make_modes(("a", "b", "c", "d"), current=1)
        modes.enter_triptych(paused=False)
        target = modes.triptych_step(forward=True)
        nav.playlist.current_index = target
        assert modes.refresh_triptych() == TriptychMode(left_index=1, right_index=3)
        assert modes.triptych_step(forward=False) == 1

    def test_unloadable_sides_are_stepped_over(self):
        modes, _, _ = make_modes(("a", "b", "c", "d", "e"), current=2)
        modes.enter_triptych(paused=False)
        state = modes.refresh_triptych(loadable=lambda i: i not in (1, 3))
        assert state == TriptychMode(left_index=0, right_index=4)

    def test_no_loadable_side(self):
        modes, _, _ = make_modes(("a", "b", "c"))
        modes.enter_triptych(paused=False)
        assert modes.refresh_triptych(loadable=lambda i: i == 0) == TriptychMode(None, None)

    def test_exit_restores_pause(self):
        modes, _, _ = make_modes()
        modes.enter_triptych(paused=False)
        assert modes.exit_triptych() is False
        assert modes.is_active(ModeKind.NORMAL)


class TestExclusivity:
    def test_one_mode_at_a_time(self):
        modes, _, _ = make_modes()
        assert active_kinds(modes) == [ModeKind.NORMAL]
        modes.enter_compare(paused=False)
        assert active_kinds(modes) == [ModeKind.COMPARE]
        modes.exit_compare()
        modes.enter_triptych(paused=False)
        assert active_kinds(modes) == [ModeKind.TRIPTYCH]
        assert modes.comparison_index is None

    def test_entering_requires_normal(self):
        modes, _, _ = make_modes()
        modes.enter_compare(paused=False)
        with pytest.raises(RuntimeError):
            modes.enter_triptych(paused=False)

    def test_reset(self):
        modes, _, _ = make_modes()
        modes.enter_triptych(paused=False)
        modes.reset()
        assert modes.is_active(ModeKind.NORMAL)

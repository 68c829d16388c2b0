"""The running slideshow: the one owner of navigation state.

User input (through the dispatcher), timers (through the scheduler) and
directory rescans all funnel into ``SlideshowSession`` on a single thread.
The only work done elsewhere is background decoding for the preload slot,
whose result comes back through ``on_preload_delivered``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from fade.config.config import SlideshowSettings
from fade.core.errors import EmptyPlaylistError
from fade.core.modes import ModeController, ModeKind
from fade.core.playlist import NavigationEngine, Playlist
from fade.core.preload import FetchFunction, PreloadCache
from fade.core.reconciler import DirectoryReconciler, RescanResult
from fade.core.renderer import Direction, Icon, Renderer, Role
from fade.core.scheduler import Purpose, Scheduler
from fade.tags.store import TagStore
from fade.tags.tag_cycle import Tag

logger = logging.getLogger(__name__)

ALL_TRASHED_TEXT = "No untrashed images"
ONE_UNTRASHED_TEXT = "1 untrashed image"
NO_COMPARE_TEXT = "No next image to compare"

TAG_LABELS = {
    Tag.FAVORITE: "\U0001F7E2 Favorite",
    Tag.TRASH: "\U0001F534 Trash",
}

# Synchronous image load; returns None when the file cannot be decoded.
Loader = Callable[[str], Any]


class SlideshowSession:
    """Drives navigation, tagging, view modes, preloading and rescans."""

    def __init__(
        self,
        settings: SlideshowSettings,
        paths: Iterable[str],
        tag_store: TagStore,
        renderer: Renderer,
        scheduler: Scheduler,
        loader: Loader,
        preload_fetch: FetchFunction,
        reconciler: DirectoryReconciler | None = None,
    ):
        self.settings = settings
        self.playlist = Playlist(paths)
        self.tags = tag_store
        self.renderer = renderer
        self.scheduler = scheduler
        self._load = loader
        self.navigation = NavigationEngine(self.playlist, tag_store.tag_of, loop=settings.loop)
        self.modes = ModeController(self.navigation)
        self.preload = PreloadCache(preload_fetch)
        self.reconciler = reconciler or DirectoryReconciler(
            settings.directory,
            randomize=settings.randomize,
            supported_formats=settings.supported_formats,
            ignore_hidden=settings.ignore_hidden,
        )
        self.paused = False
        self.all_trashed = False
        self.started = False
        self.finished = False

    # --- Lifecycle ---

    def start(self) -> None:
        """Show the first item and arm the advance and rescan timers."""
        if self.playlist.is_empty:
            raise EmptyPlaylistError(str(self.settings.directory))

        start_index = None
        if self.settings.start_file:
            start_index = self.playlist.index_of(str(self.settings.start_file))
            if start_index is None:
                logger.warning(f"Start file not in playlist: {self.settings.start_file}")
        if start_index is None:
            start_index = self.navigation.first_untrashed_index()

        self.started = True
        self._schedule_rescan()

        if start_index is None:
            self._enter_all_trashed()
            return

        self.playlist.current_index = start_index
        if not self._display(start_index):
            logger.error("None of the images could be loaded")
        self._preload_next()
        self._schedule_advance()

        if self.settings.start_mode == ModeKind.COMPARE.value:
            self.enter_compare()
        elif self.settings.start_mode == ModeKind.TRIPTYCH.value:
            self.enter_triptych()

    def quit(self) -> None:
        """End the session from any mode."""
        if self.finished:
            return
        self.finished = True
        self.modes.reset()
        self.scheduler.cancel_all()
        self.preload.cancel()
        self.renderer.close()

    @property
    def accepting_input(self) -> bool:
        return self.started and not self.finished

    # --- Normal-mode navigation ---

    def go_next(self) -> bool:
        if not self.accepting_input:
            return False
        index = self.navigation.next_untrashed_index()
        if index is None or not self._jump_to(index):
            self._no_successor(rearm=False)
            return False
        self.renderer.flash_arrow(Direction.RIGHT)
        return True

    def go_previous(self) -> bool:
        if not self.accepting_input:
            return False
        index = self.navigation.previous_index()
        if index is None or not self._jump_to(index, backward=True):
            return False
        self.renderer.flash_arrow(Direction.LEFT)
        return True

    def toggle_pause(self) -> None:
        self.set_paused(not self.paused)

    def set_paused(self, paused: bool) -> None:
        self.paused = paused
        if paused:
            self.scheduler.cancel_purpose(Purpose.ADVANCE)
            self._show_icon(Icon.PAUSE)
        else:
            self._show_icon(Icon.PLAY)
            self._schedule_advance()

    def tag_current(self, direction: Direction) -> Tag:
        """Tag the displayed item (the middle panel in Triptych)."""
        path = self.playlist.current_path
        tag = self._retag(path, direction)
        role = Role.TRIPTYCH_MIDDLE if self.modes.is_active(ModeKind.TRIPTYCH) else Role.CURRENT
        self.renderer.set_dimmed(role, tag == Tag.TRASH)
        self._update_titles()
        self._check_recovered()

        if self.modes.is_active(ModeKind.TRIPTYCH):
            action = self._tag_advance_triptych
        else:
            action = self._tag_advance_normal
        self._react_to_tag(tag, direction, self.settings.tag_advance_delay, action)
        return tag

    # --- Compare mode ---

    def enter_compare(self) -> bool:
        if not self.accepting_input:
            return False
        if self.modes.is_active(ModeKind.TRIPTYCH):
            self.exit_triptych()

        loaded: dict[int, Any] = {}
        state = self.modes.enter_compare(self.paused)
        if state is None or not self._try_load(state.comparison_index, loaded):
            if state is not None:
                self.modes.exit_compare()
            self._notify(NO_COMPARE_TEXT)
            return False

        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        if not self.paused:
            self.set_paused(True)
        self.renderer.set_mode(ModeKind.COMPARE)
        self._show_comparison(state.comparison_index, loaded[state.comparison_index])
        self.renderer.set_divider(state.divider_position)
        return True

    def exit_compare(self) -> None:
        was_paused = self.modes.exit_compare()
        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        self.renderer.set_mode(ModeKind.NORMAL)
        self._update_titles()
        self._restore_pause(was_paused)

    def advance_comparison(self, forward: bool) -> bool:
        """Move only the comparison pointer; the reference stays put."""
        loaded: dict[int, Any] = {}
        target = self.modes.advance_comparison(
            forward, lambda index: self._try_load(index, loaded)
        )
        if target is None:
            return False
        self._show_comparison(target, loaded[target])
        self.renderer.flash_arrow(Direction.RIGHT if forward else Direction.LEFT)
        return True

    def tag_comparison(self, direction: Direction) -> Tag:
        path = self.playlist[self.modes.comparison_index]
        tag = self._retag(path, direction)
        self.renderer.set_dimmed(Role.COMPARISON, tag == Tag.TRASH)
        self._update_titles()
        self._react_to_tag(
            tag, direction, self.settings.compare_advance_delay, self._tag_advance_compare
        )
        return tag

    def set_divider(self, position: float) -> None:
        if not self.modes.is_active(ModeKind.COMPARE):
            return
        state = self.modes.set_divider(position)
        self.renderer.set_divider(state.divider_position)

    # --- Triptych mode ---

    def enter_triptych(self) -> bool:
        if not self.accepting_input:
            return False
        if self.modes.is_active(ModeKind.COMPARE):
            self.exit_compare()
        self.modes.enter_triptych(self.paused)
        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        if not self.paused:
            self.set_paused(True)
        self.renderer.set_mode(ModeKind.TRIPTYCH)
        self._load_triptych_panels()
        return True

    def exit_triptych(self) -> None:
        was_paused = self.modes.exit_triptych()
        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        self.renderer.set_mode(ModeKind.NORMAL)
        if self.all_trashed:
            self.renderer.show_all_trashed(ALL_TRASHED_TEXT)
        else:
            self._display(self.playlist.current_index)
        self._restore_pause(was_paused)
        self._preload_next()
        self._schedule_advance()

    def triptych_navigate(self, forward: bool) -> bool:
        target = self.modes.triptych_step(forward)
        if target is None:
            return False
        self.playlist.current_index = target
        self.renderer.flash_arrow(Direction.RIGHT if forward else Direction.LEFT)
        self._load_triptych_panels()
        return True

    # --- Rescan ---

    def rescan(self) -> RescanResult | None:
        """Merge a fresh directory listing into the playlist."""
        if not self.accepting_input:
            return None
        comparison_path = None
        if self.modes.is_active(ModeKind.COMPARE):
            comparison_path = self.playlist[self.modes.comparison_index]

        result = self.reconciler.rescan(self.playlist)
        if result is None:
            return None
        if result.seed is not None:
            logger.debug(f"Rescan shuffle seed: {result.seed}")
        self.preload.cancel()

        now_all_trashed = self.navigation.all_trashed()
        moved_away = result.current_moved_away(self.playlist)
        if self.modes.is_active(ModeKind.COMPARE):
            self._relocate_comparison(comparison_path)
            if self.modes.is_active(ModeKind.COMPARE) and moved_away and not now_all_trashed:
                self._display(self.playlist.current_index)
                moved_away = False

        if self.all_trashed and not now_all_trashed:
            self._leave_all_trashed()
        elif not self.all_trashed and now_all_trashed:
            self._enter_all_trashed()
        elif not self.all_trashed:
            if self.modes.is_active(ModeKind.NORMAL) and moved_away:
                self._display(self.playlist.current_index)
            elif self.modes.is_active(ModeKind.TRIPTYCH):
                self._load_triptych_panels()
            else:
                self._update_titles()
        self._preload_next()
        return result

    def on_preload_delivered(self, index: int, path: str, handle: Any) -> bool:
        return self.preload.on_delivery(index, path, handle)

    def title_for(self, path: str) -> str:
        title = Path(path).name
        label = TAG_LABELS.get(self.tags.tag_of(path))
        if label:
            title += f"  {label}"
        return title

    # --- Internals: display ---

    def _display(
        self,
        index: int,
        fade: bool = False,
        origin: int | None = None,
        backward: bool = False,
    ) -> bool:
        """Show ``index`` as the current item, skipping unloadable files.

        Unloadable items are stepped over in the direction of travel. The
        search gives up rather than land on ``origin``, the item the move
        started from; the current index is left alone when nothing loads.
        """
        first = index
        if backward:
            step = self.navigation.previous_index
        else:
            step = self.navigation.next_untrashed_index
        for _ in range(len(self.playlist)):
            path = self.playlist[index]
            handle = self.preload.take(index, path)
            if handle is None:
                handle = self._load(path)
            if handle is not None:
                self.playlist.current_index = index
                self.renderer.show_image(Role.CURRENT, handle, self._is_dimmed(path), fade)
                self._update_titles()
                return True
            logger.warning(f"Skipping unloadable image {path}")
            index = step(origin=index)
            if index is None or index == first or index == origin:
                break
        return False

    def _jump_to(self, index: int, backward: bool = False) -> bool:
        """Instant switch to ``index`` (manual navigation)."""
        self.scheduler.cancel_purpose(Purpose.ADVANCE)
        origin = self.playlist.current_index
        was_all_trashed = self.all_trashed
        self.all_trashed = False
        if not self._display(index, origin=origin, backward=backward):
            self.all_trashed = was_all_trashed
            self._schedule_advance()
            return False
        if was_all_trashed:
            logger.info("Leaving all-trashed state")
        self._preload_next()
        self._schedule_advance()
        return True

    def _try_load(self, index: int, loaded: dict[int, Any]) -> bool:
        path = self.playlist[index]
        handle = self._load(path)
        if handle is None:
            logger.warning(f"Skipping unloadable image {path}")
            return False
        loaded[index] = handle
        return True

    def _show_comparison(self, index: int, handle: Any) -> None:
        path = self.playlist[index]
        self.renderer.show_image(Role.COMPARISON, handle, self._is_dimmed(path))
        self._update_titles()

    def _relocate_comparison(self, comparison_path: str | None) -> None:
        state = self.modes.relocate_comparison(comparison_path)
        if state is None:
            self.exit_compare()
            return
        index = state.comparison_index
        if self.playlist[index] == comparison_path:
            return
        loaded: dict[int, Any] = {}
        if not self._try_load(index, loaded):
            index = self.modes.advance_comparison(
                True, lambda candidate: self._try_load(candidate, loaded)
            )
            if index is None:
                self.exit_compare()
                return
        self._show_comparison(index, loaded[index])

    def _load_triptych_panels(self) -> None:
        loaded: dict[int, Any] = {}

        def loadable(index: int) -> bool:
            return index in loaded or self._try_load(index, loaded)

        current = self.playlist.current_index
        for _ in range(len(self.playlist)):
            if loadable(current):
                self.playlist.current_index = current
                break
            current = self.navigation.next_untrashed_index(origin=current)
            if current is None or current == self.playlist.current_index:
                current = self.playlist.current_index
                logger.error("None of the images could be loaded")
                break

        state = self.modes.refresh_triptych(loadable)
        panels = (
            (Role.TRIPTYCH_LEFT, state.left_index),
            (Role.TRIPTYCH_MIDDLE, current),
            (Role.TRIPTYCH_RIGHT, state.right_index),
        )
        for role, index in panels:
            if index is None:
                index = current
            path = self.playlist[index]
            self.renderer.show_image(role, loaded.get(index), self._is_dimmed(path))
        self._update_titles()

    def _update_titles(self) -> None:
        kind = self.modes.kind
        current = self.playlist.current_path
        if current is None:
            return
        if kind == ModeKind.COMPARE:
            comparison = self.playlist[self.modes.comparison_index]
            titles = [self.title_for(current), self.title_for(comparison)]
        elif kind == ModeKind.TRIPTYCH:
            state = self.modes.state
            titles = [
                self.title_for(self.playlist[state.left_index]) if state.left_index is not None else "",
                self.title_for(current),
                self.title_for(self.playlist[state.right_index]) if state.right_index is not None else "",
            ]
        elif self.all_trashed:
            titles = [ALL_TRASHED_TEXT]
        else:
            titles = [self.title_for(current)]
        self.renderer.set_titles(titles)

    def _is_dimmed(self, path: str) -> bool:
        return self.tags.tag_of(path) == Tag.TRASH

    def _show_icon(self, icon: Icon) -> None:
        self.renderer.show_icon(icon)
        self.scheduler.schedule(
            Purpose.STATUS_DECAY, self.settings.status_icon_seconds, self.renderer.clear_status
        )

    def _notify(self, text: str) -> None:
        self.renderer.show_status(text)
        self.scheduler.schedule(
            Purpose.STATUS_DECAY, self.settings.status_message_seconds, self.renderer.clear_status
        )

    # --- Internals: timers ---

    def _schedule_advance(self) -> None:
        if (
            self.finished
            or self.paused
            or self.all_trashed
            or not self.modes.is_active(ModeKind.NORMAL)
        ):
            self.scheduler.cancel_purpose(Purpose.ADVANCE)
            return
        self.scheduler.schedule(Purpose.ADVANCE, self.settings.duration, self._on_advance_timer)

    def _on_advance_timer(self) -> None:
        if self.finished or self.paused or self.all_trashed:
            return
        if not self.modes.is_active(ModeKind.NORMAL):
            return
        index = self.navigation.next_untrashed_index()
        origin = self.playlist.current_index
        if index is None or not self._display(index, fade=True, origin=origin):
            self._no_successor(rearm=True)
            return
        self._preload_next()
        self._schedule_advance()

    def _no_successor(self, rearm: bool) -> None:
        """No untrashed item follows the current one."""
        if not self.navigation.loop:
            logger.info("Reached the end of the playlist")
            self.quit()
            return
        if self.navigation.is_trashed(self.playlist.current_index):
            self._enter_all_trashed()
            return
        self._notify(ONE_UNTRASHED_TEXT)
        if rearm:
            self._schedule_advance()

    def _schedule_rescan(self) -> None:
        self.scheduler.schedule(Purpose.RESCAN, self.settings.scan_interval, self._on_rescan_timer)

    def _on_rescan_timer(self) -> None:
        if self.finished:
            return
        self.rescan()
        self._schedule_rescan()

    def _preload_next(self) -> None:
        self.preload.cancel()
        if self.all_trashed or not self.modes.is_active(ModeKind.NORMAL):
            return
        index = self.navigation.next_untrashed_index()
        if index is not None:
            self.preload.request_preload(index, self.playlist[index])

    def _restore_pause(self, was_paused: bool) -> None:
        if not was_paused and self.paused:
            self.set_paused(False)

    # --- Internals: tagging ---

    def _retag(self, path: str, direction: Direction) -> Tag:
        if direction == Direction.UP:
            return self.tags.step_up(path)
        return self.tags.step_down(path)

    def _react_to_tag(
        self,
        tag: Tag,
        direction: Direction,
        delay: float,
        action: Callable[[], None],
    ) -> bool:
        """Schedule the follow-up move after a tag change.

        Favorite or Trash moves on after ``delay``; Untagged only flashes a
        dash. Returns True if a move was scheduled.
        """
        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        if tag in (Tag.FAVORITE, Tag.TRASH):
            self.renderer.flash_arrow(direction)
            self.scheduler.cancel_purpose(Purpose.ADVANCE)
            self.scheduler.schedule(Purpose.TAG_ADVANCE, delay, action)
            return True
        self.renderer.flash_dash(direction)
        if not self.scheduler.is_pending(Purpose.ADVANCE):
            self._schedule_advance()
        return False

    def _tag_advance_normal(self) -> None:
        if self.modes.is_active(ModeKind.NORMAL):
            self.go_next()

    def _tag_advance_compare(self) -> None:
        if not self.modes.is_active(ModeKind.COMPARE):
            return
        if not self.advance_comparison(forward=True):
            self.exit_compare()
            self._notify(ONE_UNTRASHED_TEXT)

    def _tag_advance_triptych(self) -> None:
        if not self.modes.is_active(ModeKind.TRIPTYCH):
            return
        index = self.navigation.next_untrashed_index()
        if index is not None:
            self.playlist.current_index = index
        self._load_triptych_panels()

    # --- Internals: all-trashed state ---

    def _check_recovered(self) -> None:
        if self.all_trashed and not self.navigation.all_trashed():
            self._leave_all_trashed()

    def _enter_all_trashed(self) -> None:
        if self.all_trashed:
            return
        logger.info("Every image is tagged Trash")
        self.all_trashed = True
        self.scheduler.cancel_purpose(Purpose.ADVANCE)
        self.scheduler.cancel_purpose(Purpose.TAG_ADVANCE)
        self.preload.cancel()
        if self.modes.is_active(ModeKind.COMPARE):
            self.exit_compare()
        elif self.modes.is_active(ModeKind.TRIPTYCH):
            self.exit_triptych()
        self.renderer.show_all_trashed(ALL_TRASHED_TEXT)
        self._update_titles()

    def _leave_all_trashed(self) -> None:
        logger.info("Leaving all-trashed state")
        self.all_trashed = False
        if self.modes.is_active(ModeKind.TRIPTYCH):
            self._load_triptych_panels()
            return
        current = self.playlist.current_index
        target = current
        if self.navigation.is_trashed(current):
            target = self.navigation.next_untrashed_index()
            if target is None:
                target = self.navigation.first_untrashed_index()
        if target is not None:
            self._display(target)
        self._preload_next()
        self._schedule_advance()

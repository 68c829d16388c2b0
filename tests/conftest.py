"""Shared test doubles: a manual clock scheduler, an in-memory tag store and
a renderer that records what it was asked to draw."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from fade.config.config import SlideshowSettings
from fade.core.modes import ModeKind
from fade.core.reconciler import DirectoryReconciler
from fade.core.renderer import Direction, Icon, Role
from fade.core.scheduler import Purpose, Scheduler
from fade.core.session import SlideshowSession
from fade.tags.store import TagStore
from fade.tags.tag_cycle import Tag

PHOTO_DIR = Path("/photos")


class ManualScheduler(Scheduler):
    """Scheduler driven by an explicit clock instead of real time."""

    def __init__(self):
        super().__init__()
        self.now = 0.0
        self._timers: dict[int, tuple[float, Callable[[], None]]] = {}
        self._ids = itertools.count()

    def _arm(self, delay: float, fire: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._timers[handle] = (self.now + delay, fire)
        return handle

    def _disarm(self, handle: int) -> None:
        self._timers.pop(handle, None)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in deadline order."""
        target = self.now + seconds
        while True:
            due = [(deadline, h) for h, (deadline, _) in self._timers.items() if deadline <= target]
            if not due:
                break
            deadline, handle = min(due)
            self.now = deadline
            _, fire = self._timers.pop(handle)
            fire()
        self.now = target

    def delay_of(self, purpose: Purpose) -> float | None:
        """Seconds until the pending timer of ``purpose`` fires."""
        entry = self._pending.get(purpose)
        if entry is None:
            return None
        return self._timers[entry[1]][0] - self.now

    def fire(self, purpose: Purpose) -> None:
        delay = self.delay_of(purpose)
        assert delay is not None, f"No pending {purpose.name} timer"
        self.advance(delay)


class MemoryTagStore(TagStore):
    def __init__(self, tags: dict[str, Tag] | None = None, **kwargs):
        super().__init__(**kwargs)
        self.markers: dict[str, list[str]] = {}
        self.fail_writes = False
        for path, tag in (tags or {}).items():
            self.put(path, tag)

    def put(self, path: str, tag: Tag) -> None:
        """Set a tag behind the slideshow's back, as another program would."""
        if tag == Tag.FAVORITE:
            self.markers[path] = [self.favorite_marker]
        elif tag == Tag.TRASH:
            self.markers[path] = [self.trash_marker]
        else:
            self.markers.pop(path, None)

    def get_tags(self, path: str) -> list[str]:
        return list(self.markers.get(path, []))

    def set_tags(self, path: str, tags: Iterable[str]) -> bool:
        if self.fail_writes:
            return False
        self.markers[path] = list(tags)
        return True


class RecordingRenderer:
    """Keeps the latest state of everything drawn, plus a call log."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.mode = ModeKind.NORMAL
        self.images: dict[Role, tuple[Any, bool]] = {}
        self.fades: list[bool] = []
        self.titles: list[str] = []
        self.divider: float | None = None
        self.status = ""
        self.icon: Icon | None = None
        self.arrows: list[Direction] = []
        self.dashes: list[Direction] = []
        self.banner = ""
        self.closed = False

    def set_mode(self, mode: ModeKind) -> None:
        self.calls.append(("set_mode", mode))
        self.mode = mode
        if mode != ModeKind.COMPARE:
            self.images.pop(Role.COMPARISON, None)

    def show_image(self, role: Role, handle: Any, dimmed: bool, fade: bool = False) -> None:
        self.calls.append(("show_image", role, handle, dimmed, fade))
        self.images[role] = (handle, dimmed)
        if role == Role.CURRENT:
            self.fades.append(fade)
            self.banner = ""

    def set_dimmed(self, role: Role, dimmed: bool) -> None:
        handle, _ = self.images.get(role, (None, False))
        self.images[role] = (handle, dimmed)

    def set_titles(self, titles: list[str]) -> None:
        self.titles = list(titles)

    def set_divider(self, position: float) -> None:
        self.divider = position

    def show_status(self, text: str) -> None:
        self.calls.append(("show_status", text))
        self.status = text
        self.icon = None

    def show_icon(self, icon: Icon) -> None:
        self.icon = icon
        self.status = ""

    def clear_status(self) -> None:
        self.status = ""
        self.icon = None

    def flash_arrow(self, direction: Direction) -> None:
        self.arrows.append(direction)

    def flash_dash(self, direction: Direction) -> None:
        self.dashes.append(direction)

    def show_all_trashed(self, text: str) -> None:
        self.calls.append(("show_all_trashed", text))
        self.banner = text

    def close(self) -> None:
        self.closed = True

    def handle(self, role: Role = Role.CURRENT) -> Any:
        return self.images.get(role, (None, False))[0]


def photo(name: str) -> str:
    return str(PHOTO_DIR / name)


def handle_for(path: str) -> str:
    return f"image:{Path(path).name}"


class Harness:
    """A session wired to fakes, with a mutable directory listing."""

    def __init__(
        self,
        names: list[str],
        tags: dict[str, Tag] | None = None,
        unloadable: Iterable[str] = (),
        **settings_kwargs,
    ):
        self.listing = [photo(n) for n in names]
        self.unloadable = {photo(n) for n in unloadable}
        self.fetches: list[tuple[int, str]] = []
        self.loads: list[str] = []
        self.store = MemoryTagStore({photo(n): t for n, t in (tags or {}).items()})
        self.renderer = RecordingRenderer()
        self.scheduler = ManualScheduler()
        self.settings = SlideshowSettings(directory=PHOTO_DIR, **settings_kwargs)
        self.reconciler = DirectoryReconciler(
            PHOTO_DIR,
            lister=lambda directory, formats, hidden: list(self.listing),
        )
        self.session = SlideshowSession(
            self.settings,
            self.listing,
            self.store,
            self.renderer,
            self.scheduler,
            loader=self._load,
            preload_fetch=lambda index, path: self.fetches.append((index, path)),
            reconciler=self.reconciler,
        )

    def _load(self, path: str) -> Any:
        self.loads.append(path)
        if path in self.unloadable:
            return None
        return handle_for(path)

    @property
    def current_name(self) -> str | None:
        path = self.session.playlist.current_path
        return Path(path).name if path else None

    def shown(self, role: Role = Role.CURRENT) -> str | None:
        handle = self.renderer.handle(role)
        return handle.split(":", 1)[1] if handle else None

    def tag(self, name: str) -> Tag:
        return self.store.tag_of(photo(name))

    def deliver_preload(self) -> bool:
        """Complete the most recent preload request."""
        index, path = self.fetches[-1]
        return self.session.on_preload_delivered(index, path, handle_for(path))


@pytest.fixture
def harness_factory():
    def make(names=("a.jpg", "b.jpg", "c.jpg"), start=True, **kwargs) -> Harness:
        harness = Harness(list(names), **kwargs)
        if start:
            harness.session.start()
        return harness

    return make

"""Ordered item list and the navigation rules over it."""

from __future__ import annotations

from typing import Callable, Iterable

from fade.tags.tag_cycle import Tag


class Playlist:
    """Ordered image paths plus the index of the item on screen.

    When the list is non-empty ``current_index`` is always a valid position;
    an empty list has no current index.
    """

    def __init__(self, paths: Iterable[str] = (), current_index: int = 0):
        self._paths: list[str] = list(paths)
        self._current: int | None = None
        if self._paths:
            self.current_index = current_index

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self):
        return iter(self._paths)

    def __getitem__(self, index: int) -> str:
        return self._paths[index]

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    @property
    def is_empty(self) -> bool:
        return not self._paths

    @property
    def current_index(self) -> int | None:
        return self._current

    @current_index.setter
    def current_index(self, index: int) -> None:
        if not 0 <= index < len(self._paths):
            raise IndexError(f"Index {index} out of range for {len(self._paths)} items")
        self._current = index

    @property
    def current_path(self) -> str | None:
        if self._current is None:
            return None
        return self._paths[self._current]

    def index_of(self, path: str) -> int | None:
        try:
            return self._paths.index(path)
        except ValueError:
            return None

    def merge(self, new_paths: Iterable[str]) -> int | None:
        """Replace the item list, keeping the viewer on the same item.

        If the current item is still listed, the current index follows it to
        its new position; otherwise the old index is clamped to the new
        length. An empty ``new_paths`` is ignored. Returns the new index.
        """
        new_paths = list(new_paths)
        if not new_paths:
            return self._current
        old_path = self.current_path
        old_index = self._current or 0
        self._paths = new_paths
        new_index = self.index_of(old_path) if old_path is not None else None
        if new_index is None:
            new_index = min(old_index, len(new_paths) - 1)
        self._current = new_index
        return new_index


class NavigationEngine:
    """Computes navigation targets over a playlist.

    Tags are looked up live through ``tag_of`` on every call. Every method
    returns ``None`` when there is no eligible target; ``origin`` defaults to
    the playlist's current index.
    """

    def __init__(
        self,
        playlist: Playlist,
        tag_of: Callable[[str], Tag],
        loop: bool = True,
    ):
        self.playlist = playlist
        self._tag_of = tag_of
        self.loop = loop

    def is_trashed(self, index: int) -> bool:
        return self._tag_of(self.playlist[index]) == Tag.TRASH

    def all_trashed(self) -> bool:
        return all(self._tag_of(path) == Tag.TRASH for path in self.playlist)

    def next_untrashed_index(self, origin: int | None = None) -> int | None:
        """Next non-Trash index after ``origin``, never ``origin`` itself."""
        count = len(self.playlist)
        origin = self._origin(origin)
        if origin is None:
            return None
        candidate = origin
        for _ in range(count):
            candidate += 1
            if candidate >= count:
                if not self.loop:
                    return None
                candidate = 0
            if candidate == origin:
                return None
            if not self.is_trashed(candidate):
                return candidate
        return None

    def previous_index(self, origin: int | None = None) -> int | None:
        """Index before ``origin``, Trash included, wrapping to the end."""
        origin = self._origin(origin)
        if origin is None:
            return None
        return (origin - 1) % len(self.playlist)

    def first_untrashed_index(self) -> int | None:
        for index in range(len(self.playlist)):
            if not self.is_trashed(index):
                return index
        return None

    def next_comparison_index(self, after: int, exclude: int | None = None) -> int | None:
        """Next non-Trash index after ``after``, skipping ``exclude``.

        Used for the comparison pointer; ``exclude`` is the reference item.
        Returning to ``after`` means there is nothing to move to.
        """
        count = len(self.playlist)
        if count == 0:
            return None
        candidate = after
        for _ in range(count):
            candidate += 1
            if candidate >= count:
                if not self.loop:
                    return None
                candidate = 0
            if candidate == after:
                return None
            if candidate == exclude:
                continue
            if not self.is_trashed(candidate):
                return candidate
        return None

    def previous_comparison_index(self, before: int, exclude: int | None = None) -> int | None:
        """Previous index before ``before`` (Trash included), skipping ``exclude``."""
        count = len(self.playlist)
        if count == 0:
            return None
        candidate = before
        for _ in range(count):
            candidate -= 1
            if candidate < 0:
                if not self.loop:
                    return None
                candidate = count - 1
            if candidate == before:
                return None
            if candidate == exclude:
                continue
            return candidate
        return None

    def _origin(self, origin: int | None) -> int | None:
        if self.playlist.is_empty:
            return None
        if origin is None:
            return self.playlist.current_index
        return origin

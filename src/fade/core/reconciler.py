"""Periodic re-listing of the image directory merged into the live playlist."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from fade.core.playlist import Playlist
from fade.scanner.listing import SUPPORTED_FORMATS, draw_seed, list_images, shuffle_paths

logger = logging.getLogger(__name__)


@dataclass
class RescanResult:
    """Outcome of a rescan that replaced the playlist."""

    previous_path: str | None
    current_index: int
    seed: int | None = None
    items_changed: bool = False

    def current_moved_away(self, playlist: Playlist) -> bool:
        """True if the item on screen is no longer the one at the current index."""
        return self.previous_path != playlist.current_path


class DirectoryReconciler:
    """Lists a directory and folds new listings into a playlist.

    With randomization on, every listing is shuffled with a freshly drawn
    seed; the seed used for the initial listing is never reused.
    """

    def __init__(
        self,
        directory: str | Path,
        randomize: bool = False,
        supported_formats: Iterable[str] = SUPPORTED_FORMATS,
        ignore_hidden: bool = True,
        lister: Callable[..., list[str]] = list_images,
        seed_source: Callable[[], int] = draw_seed,
    ):
        self._directory = Path(directory)
        self._randomize = randomize
        self._formats = tuple(supported_formats)
        self._ignore_hidden = ignore_hidden
        self._lister = lister
        self._seed_source = seed_source

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def randomize(self) -> bool:
        return self._randomize

    def listing(self, seed: int | None = None) -> tuple[list[str], int | None]:
        """List the directory in display order.

        Returns the paths and the shuffle seed used (None when unshuffled).
        """
        paths = self._lister(self._directory, self._formats, self._ignore_hidden)
        if not self._randomize or not paths:
            return paths, None
        if seed is None:
            seed = self._seed_source()
        return shuffle_paths(paths, seed), seed

    def rescan(self, playlist: Playlist) -> RescanResult | None:
        """Re-list the directory and merge it into ``playlist``.

        Returns None when the listing came back empty; the playlist is then
        left untouched.
        """
        paths, seed = self.listing()
        if not paths:
            logger.debug(f"Rescan of {self._directory} found no images; keeping playlist")
            return None

        old_paths = playlist.paths
        previous_path = playlist.current_path
        index = playlist.merge(paths)
        items_changed = set(old_paths) != set(paths)
        if items_changed:
            logger.info(f"Rescan of {self._directory}: {len(old_paths)} -> {len(paths)} images")
        return RescanResult(
            previous_path=previous_path,
            current_index=index,
            seed=seed,
            items_changed=items_changed,
        )

"""Filesystem-level persistence of curation markers.

A tag store maps an image path to a raw set of marker strings. The
three-valued curation tag is derived from that set on every read, so edits
made outside the slideshow (a file manager, another instance) are always
picked up. Failures never propagate: a failed read looks like an untagged
file and a failed write leaves the previous tag in place.
"""

from __future__ import annotations

import errno
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable

from fade.tags.tag_cycle import (
    DEFAULT_FAVORITE_MARKER,
    DEFAULT_TRASH_MARKER,
    Tag,
    markers_for_tag,
    tag_down,
    tag_from_markers,
    tag_up,
)

logger = logging.getLogger(__name__)

XDG_TAGS_ATTR = "user.xdg.tags"

_MISSING_ATTR_ERRNOS = {
    code for code in (getattr(errno, "ENODATA", None), getattr(errno, "ENOATTR", None))
    if code is not None
}

SIDECAR_SCHEMA = """
CREATE TABLE IF NOT EXISTS file_tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    tag TEXT NOT NULL,
    position INTEGER DEFAULT 0,
    UNIQUE(filename, tag)
);

CREATE INDEX IF NOT EXISTS idx_file_tags_filename ON file_tags(filename);
"""


class TagStore:
    """Base class for marker persistence.

    Subclasses implement ``get_tags`` and ``set_tags``; both must swallow
    their own I/O errors and log them.
    """

    def __init__(
        self,
        favorite_marker: str = DEFAULT_FAVORITE_MARKER,
        trash_marker: str = DEFAULT_TRASH_MARKER,
    ):
        self.favorite_marker = favorite_marker
        self.trash_marker = trash_marker

    def get_tags(self, path: str) -> list[str]:
        raise NotImplementedError

    def set_tags(self, path: str, tags: Iterable[str]) -> bool:
        """Replace the marker set of ``path``. Returns False on failure."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def tag_of(self, path: str) -> Tag:
        return tag_from_markers(
            self.get_tags(path), self.favorite_marker, self.trash_marker
        )

    def is_trashed(self, path: str) -> bool:
        return self.tag_of(path) == Tag.TRASH

    def apply(self, path: str, tag: Tag) -> Tag:
        """Persist ``tag`` for ``path`` and return the tag now on disk."""
        markers = self.get_tags(path)
        new_markers = markers_for_tag(
            markers, tag, self.favorite_marker, self.trash_marker
        )
        if new_markers != markers:
            self.set_tags(path, new_markers)
        return self.tag_of(path)

    def step_up(self, path: str) -> Tag:
        return self.apply(path, tag_up(self.tag_of(path)))

    def step_down(self, path: str) -> Tag:
        return self.apply(path, tag_down(self.tag_of(path)))


class XattrTagStore(TagStore):
    """Markers kept in the freedesktop ``user.xdg.tags`` extended attribute."""

    @staticmethod
    def is_supported(directory: str | Path) -> bool:
        """True if the platform and the filesystem under ``directory`` accept
        user extended attributes."""
        if not hasattr(os, "getxattr"):
            return False
        try:
            os.getxattr(str(directory), XDG_TAGS_ATTR)
        except OSError as e:
            return e.errno in _MISSING_ATTR_ERRNOS
        return True

    def get_tags(self, path: str) -> list[str]:
        try:
            raw = os.getxattr(path, XDG_TAGS_ATTR)
        except OSError as e:
            if e.errno not in _MISSING_ATTR_ERRNOS:
                logger.warning(f"Could not read tags of {path}: {e}")
            return []
        return [t.strip() for t in raw.decode("utf-8", "replace").split(",") if t.strip()]

    def set_tags(self, path: str, tags: Iterable[str]) -> bool:
        tags = list(tags)
        try:
            if tags:
                os.setxattr(path, XDG_TAGS_ATTR, ",".join(tags).encode("utf-8"))
            else:
                os.removexattr(path, XDG_TAGS_ATTR)
        except OSError as e:
            if not tags and e.errno in _MISSING_ATTR_ERRNOS:
                return True
            logger.warning(f"Could not write tags of {path}: {e}")
            return False
        return True


class SidecarTagStore(TagStore):
    """Markers kept in a small SQLite database next to the images.

    Paths are stored relative to the database directory so the folder can be
    moved without losing its tags.
    """

    def __init__(
        self,
        db_path: str | Path,
        favorite_marker: str = DEFAULT_FAVORITE_MARKER,
        trash_marker: str = DEFAULT_TRASH_MARKER,
    ):
        super().__init__(favorite_marker, trash_marker)
        self._db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """Open (creating if needed) the database and its schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(SIDECAR_SCHEMA)
        self._conn.commit()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        if self._conn is None:
            self.open()
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def get_tags(self, path: str) -> list[str]:
        try:
            if self._conn is None:
                self.open()
            rows = self._conn.execute(
                "SELECT tag FROM file_tags WHERE filename = ? ORDER BY position, id",
                (self._key(path),),
            ).fetchall()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Could not read tags of {path}: {e}")
            return []
        return [row[0] for row in rows]

    def set_tags(self, path: str, tags: Iterable[str]) -> bool:
        key = self._key(path)
        try:
            with self.transaction() as conn:
                conn.execute("DELETE FROM file_tags WHERE filename = ?", (key,))
                conn.executemany(
                    "INSERT OR IGNORE INTO file_tags (filename, tag, position) VALUES (?, ?, ?)",
                    [(key, tag, pos) for pos, tag in enumerate(tags)],
                )
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Could not write tags of {path}: {e}")
            return False
        return True

    def _key(self, path: str) -> str:
        p = Path(path).resolve()
        try:
            rel = p.relative_to(self._db_path.parent.resolve())
        except ValueError:
            rel = p
        return rel.as_posix()


def open_tag_store(
    directory: str | Path,
    backend: str = "auto",
    database: str = ".fade_tags.db",
    favorite_marker: str = DEFAULT_FAVORITE_MARKER,
    trash_marker: str = DEFAULT_TRASH_MARKER,
) -> TagStore:
    """Build the tag store configured for ``directory``.

    ``auto`` prefers extended attributes and falls back to the sidecar
    database when the filesystem does not support them.
    """
    directory = Path(directory)
    if backend not in ("auto", "xattr", "database"):
        raise ValueError(f"Unknown tag backend: {backend}")

    if backend == "xattr" or (backend == "auto" and XattrTagStore.is_supported(directory)):
        logger.info("Using extended-attribute tag store")
        return XattrTagStore(favorite_marker, trash_marker)

    db_path = Path(database)
    if not db_path.is_absolute():
        db_path = directory / db_path
    logger.info(f"Using sidecar tag database {db_path}")
    return SidecarTagStore(db_path, favorite_marker, trash_marker)

"""Tag values and the up/down cycling law between them."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class Tag(Enum):
    UNTAGGED = "untagged"
    FAVORITE = "favorite"
    TRASH = "trash"


DEFAULT_FAVORITE_MARKER = "Green"
DEFAULT_TRASH_MARKER = "Red"

_UP = {
    Tag.TRASH: Tag.UNTAGGED,
    Tag.UNTAGGED: Tag.FAVORITE,
    Tag.FAVORITE: Tag.FAVORITE,  # ceiling
}

_DOWN = {
    Tag.FAVORITE: Tag.UNTAGGED,
    Tag.UNTAGGED: Tag.TRASH,
    Tag.TRASH: Tag.TRASH,  # floor
}


def tag_up(tag: Tag) -> Tag:
    """One step toward Favorite: Trash -> Untagged -> Favorite."""
    return _UP[tag]


def tag_down(tag: Tag) -> Tag:
    """One step toward Trash: Favorite -> Untagged -> Trash."""
    return _DOWN[tag]


def tag_from_markers(
    markers: Iterable[str],
    favorite_marker: str = DEFAULT_FAVORITE_MARKER,
    trash_marker: str = DEFAULT_TRASH_MARKER,
) -> Tag:
    """Derive the tag from a raw marker set. Trash wins over Favorite."""
    markers = set(markers)
    if trash_marker in markers:
        return Tag.TRASH
    if favorite_marker in markers:
        return Tag.FAVORITE
    return Tag.UNTAGGED


def markers_for_tag(
    markers: Iterable[str],
    tag: Tag,
    favorite_marker: str = DEFAULT_FAVORITE_MARKER,
    trash_marker: str = DEFAULT_TRASH_MARKER,
) -> list[str]:
    """Return ``markers`` rewritten so they represent ``tag``.

    Both curation markers are removed before the new one is added, so the
    result never carries Favorite and Trash together. Unrelated markers keep
    their order.
    """
    result = [m for m in markers if m not in (favorite_marker, trash_marker)]
    if tag == Tag.FAVORITE:
        result.append(favorite_marker)
    elif tag == Tag.TRASH:
        result.append(trash_marker)
    return result

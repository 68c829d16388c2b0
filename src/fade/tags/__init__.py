"""Three-state curation tags and their persistence."""

from fade.tags.tag_cycle import Tag, tag_down, tag_up
from fade.tags.store import (
    SidecarTagStore,
    TagStore,
    XattrTagStore,
    open_tag_store,
)

__all__ = [
    "Tag",
    "tag_up",
    "tag_down",
    "TagStore",
    "XattrTagStore",
    "SidecarTagStore",
    "open_tag_store",
]

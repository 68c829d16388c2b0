"""Tests for the tag store backends."""

import os
from pathlib import Path

import pytest

from fade.tags.store import (
    SidecarTagStore,
    XattrTagStore,
    open_tag_store,
)
from fade.tags.tag_cycle import Tag

from conftest import MemoryTagStore


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "a.jpg"
    path.write_bytes(b"not really a jpeg")
    return str(path)


class TestTagStoreBase:
    def test_step_up_and_down(self):
        store = MemoryTagStore()
        assert store.step_up("a.jpg") == Tag.FAVORITE
        assert store.step_up("a.jpg") == Tag.FAVORITE
        assert store.step_down("a.jpg") == Tag.UNTAGGED
        assert store.step_down("a.jpg") == Tag.TRASH
        assert store.is_trashed("a.jpg")

    def test_apply_keeps_unrelated_markers(self):
        store = MemoryTagStore()
        store.markers["a.jpg"] = ["Blue", "Green"]
        assert store.apply("a.jpg", Tag.TRASH) == Tag.TRASH
        assert store.markers["a.jpg"] == ["Blue", "Red"]

    def test_failed_write_keeps_previous_tag(self):
        store = MemoryTagStore({"a.jpg": Tag.FAVORITE})
        store.fail_writes = True
        assert store.step_down("a.jpg") == Tag.FAVORITE

    def test_reads_are_live(self):
        store = MemoryTagStore()
        assert store.tag_of("a.jpg") == Tag.UNTAGGED
        store.put("a.jpg", Tag.TRASH)
        assert store.tag_of("a.jpg") == Tag.TRASH


class TestSidecarTagStore:
    def test_round_trip(self, tmp_path, image):
        store = SidecarTagStore(tmp_path / ".fade_tags.db")
        assert store.get_tags(image) == []
        assert store.set_tags(image, ["Blue", "Green"])
        assert store.get_tags(image) == ["Blue", "Green"]
        assert store.tag_of(image) == Tag.FAVORITE
        store.close()

    def test_persists_across_instances(self, tmp_path, image):
        db = tmp_path / ".fade_tags.db"
        store = SidecarTagStore(db)
        store.step_down(image)
        store.close()

        reopened = SidecarTagStore(db)
        assert reopened.tag_of(image) == Tag.TRASH
        reopened.close()

    def test_clearing_tags(self, tmp_path, image):
        store = SidecarTagStore(tmp_path / ".fade_tags.db")
        store.set_tags(image, ["Red"])
        store.set_tags(image, [])
        assert store.get_tags(image) == []
        assert store.tag_of(image) == Tag.UNTAGGED
        store.close()

    def test_keys_are_relative_to_database(self, tmp_path, image):
        store = SidecarTagStore(tmp_path / ".fade_tags.db")
        store.set_tags(image, ["Green"])
        with store.transaction() as conn:
            names = [row[0] for row in conn.execute("SELECT filename FROM file_tags")]
        assert names == ["a.jpg"]
        store.close()

    def test_custom_markers(self, tmp_path, image):
        store = SidecarTagStore(tmp_path / "tags.db", favorite_marker="keep", trash_marker="bin")
        assert store.step_down(image) == Tag.TRASH
        assert store.get_tags(image) == ["bin"]
        store.close()


class TestXattrTagStore:
    @pytest.fixture(autouse=True)
    def _require_xattr(self, tmp_path):
        if not XattrTagStore.is_supported(tmp_path):
            pytest.skip("filesystem does not support user extended attributes")

    def test_round_trip(self, image):
        store = XattrTagStore()
        assert store.get_tags(image) == []
        assert store.set_tags(image, ["Blue", "Green"])
        assert store.get_tags(image) == ["Blue", "Green"]
        assert os.getxattr(image, "user.xdg.tags") == b"Blue,Green"

    def test_clearing_removes_attribute(self, image):
        store = XattrTagStore()
        store.set_tags(image, ["Red"])
        assert store.set_tags(image, [])
        assert store.get_tags(image) == []
        # Clearing an already-missing attribute is not an error.
        assert store.set_tags(image, [])

    def test_missing_file_reads_untagged(self, tmp_path):
        store = XattrTagStore()
        assert store.tag_of(str(tmp_path / "gone.jpg")) == Tag.UNTAGGED


class TestOpenTagStore:
    def test_database_backend(self, tmp_path):
        store = open_tag_store(tmp_path, backend="database")
        assert isinstance(store, SidecarTagStore)
        assert store.db_path == tmp_path / ".fade_tags.db"

    def test_absolute_database_path(self, tmp_path):
        db = tmp_path / "elsewhere" / "tags.db"
        store = open_tag_store(tmp_path, backend="database", database=str(db))
        assert store.db_path == db

    def test_auto_picks_a_backend(self, tmp_path):
        store = open_tag_store(tmp_path)
        if XattrTagStore.is_supported(tmp_path):
            assert isinstance(store, XattrTagStore)
        else:
            assert isinstance(store, SidecarTagStore)

    def test_markers_are_passed_through(self, tmp_path):
        store = open_tag_store(tmp_path, backend="database", favorite_marker="keep")
        assert store.favorite_marker == "keep"
        assert store.trash_marker == "Red"

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError):
            open_tag_store(tmp_path, backend="cloud")

"""Tests for directory listing and seeded shuffling."""

from pathlib import Path

import pytest

from fade.scanner.listing import MAX_SEED, draw_seed, list_images, shuffle_paths


@pytest.fixture
def photo_dir(tmp_path):
    for name in ("b.jpg", "a.PNG", "c.JPEG", "notes.txt", ".hidden.jpg", "d.gif"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "e.jpg").write_bytes(b"x")
    (tmp_path / "folder.jpg").mkdir()
    return tmp_path


class TestListImages:
    def test_filters_and_sorts(self, photo_dir):
        names = [Path(p).name for p in list_images(photo_dir)]
        assert names == ["a.PNG", "b.jpg", "c.JPEG"]

    def test_returns_full_paths(self, photo_dir):
        files = list_images(photo_dir)
        assert all(Path(p).parent == photo_dir for p in files)

    def test_hidden_included_when_asked(self, photo_dir):
        names = [Path(p).name for p in list_images(photo_dir, ignore_hidden=False)]
        assert ".hidden.jpg" in names

    def test_custom_formats(self, photo_dir):
        names = [Path(p).name for p in list_images(photo_dir, supported_formats=["gif"])]
        assert names == ["d.gif"]

    def test_missing_directory(self, tmp_path):
        assert list_images(tmp_path / "nope") == []


class TestShuffle:
    PATHS = [f"{i:02d}.jpg" for i in range(20)]

    def test_same_seed_same_order(self):
        assert shuffle_paths(self.PATHS, 42) == shuffle_paths(self.PATHS, 42)

    def test_different_seeds_differ(self):
        assert shuffle_paths(self.PATHS, 1) != shuffle_paths(self.PATHS, 2)

    def test_is_a_permutation(self):
        shuffled = shuffle_paths(self.PATHS, 7)
        assert sorted(shuffled) == self.PATHS

    def test_input_untouched(self):
        paths = list(self.PATHS)
        shuffle_paths(paths, 3)
        assert paths == self.PATHS

    def test_full_64_bit_range(self):
        assert sorted(shuffle_paths(self.PATHS, MAX_SEED)) == self.PATHS

    @pytest.mark.parametrize("seed", [-1, MAX_SEED + 1])
    def test_out_of_range_seed(self, seed):
        with pytest.raises(ValueError):
            shuffle_paths(self.PATHS, seed)

    def test_draw_seed_in_range(self):
        for _ in range(10):
            assert 0 <= draw_seed() <= MAX_SEED

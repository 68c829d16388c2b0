"""Tests for the single-slot preload cache."""

from unittest.mock import MagicMock

from fade.core.preload import PreloadCache, SlotState


class TestPreloadCache:
    def test_request_starts_fetch(self):
        fetch = MagicMock()
        cache = PreloadCache(fetch)
        cache.request_preload(3, "c.jpg")
        fetch.assert_called_once_with(3, "c.jpg")
        assert cache.target_index == 3
        assert cache.slot.state == SlotState.PENDING

    def test_delivery_then_take(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(3, "c.jpg")
        assert cache.on_delivery(3, "c.jpg", "handle")
        assert cache.take(3) == "handle"
        # A hit consumes the slot.
        assert cache.take(3) is None
        assert cache.slot is None

    def test_take_before_ready_misses(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(3, "c.jpg")
        assert cache.take(3) is None
        assert cache.slot is not None

    def test_take_other_index_misses(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(3, "c.jpg")
        cache.on_delivery(3, "c.jpg", "handle")
        assert cache.take(4) is None
        assert cache.take(3, "other.jpg") is None
        assert cache.take(3, "c.jpg") == "handle"

    def test_stale_delivery_dropped(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(1, "a.jpg")
        cache.request_preload(2, "b.jpg")
        assert not cache.on_delivery(1, "a.jpg", "old")
        assert cache.slot.state == SlotState.PENDING
        assert cache.on_delivery(2, "b.jpg", "new")
        assert cache.take(2) == "new"

    def test_same_index_different_item_is_stale(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(1, "a.jpg")
        assert not cache.on_delivery(1, "z.jpg", "wrong")

    def test_cancel(self):
        cache = PreloadCache(MagicMock())
        cache.request_preload(1, "a.jpg")
        cache.cancel()
        assert not cache.on_delivery(1, "a.jpg", "late")
        assert cache.take(1) is None

"""Tests for ResultCache service."""

import threading

import pytest

from gpfs_exporter.services.result_cache import ResultCache
from gpfs_exporter.utils.metrics import LinkStatus


@pytest.fixture
def cache():
    return ResultCache(enabled=True)


class TestEnabledCache:
    def test_initially_empty(self, cache):
        assert cache.get() is None
        assert cache.enabled

    def test_set_then_get(self, cache):
        cache.set(LinkStatus("started"))
        assert cache.get() == LinkStatus("started")

    def test_set_overwrites(self, cache):
        cache.set(LinkStatus("started"))
        cache.set(LinkStatus("disabled"))
        assert cache.get().status == "disabled"

    def test_empty_list_is_present(self, cache):
        cache.set([])
        assert cache.get() == []

    def test_clear(self, cache):
        cache.set(LinkStatus("started"))
        cache.clear()
        assert cache.get() is None


class TestDisabledCache:
    def test_get_always_absent(self):
        cache = ResultCache(enabled=False)
        cache.set(LinkStatus("started"))

        assert cache.get() is None
        assert not cache.enabled

    def test_clear_is_noop(self):
        cache = ResultCache()
        cache.clear()
        assert cache.get() is None


def test_independent_instances():
    a = ResultCache(enabled=True)
    b = ResultCache(enabled=True)
    a.set("mmpmon")

    assert b.get() is None


def test_concurrent_writers(cache):
    """Concurrent set/get never observes a torn or missing value once populated."""
    cache.set(0)
    errors = []

    def worker(n):
        for i in range(500):
            cache.set(n * 1000 + i)
            if cache.get() is None:
                errors.append(n)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert isinstance(cache.get(), int)

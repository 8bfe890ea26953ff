"""
Tests for the cache backends and the backend factory.
"""

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
import redis

from modules.validation.core.exceptions import BackingStoreUnavailable
from modules.validation.storage import (
    CACHE_BACKENDS,
    MemoryCacheBackend,
    NullCacheBackend,
    RedisCacheBackend,
    create_cache_backend,
)
from modules.validation.storage.core import backend_class, register_backend
from shared.utils.config import Settings


class TestMemoryCacheBackend:

    def setup_method(self):
        self.now = 1000.0
        self.backend = MemoryCacheBackend(clock=lambda: self.now)

    def test_set_get_delete(self):
        self.backend.set("k", {"valid": True}, ttl=10)
        assert self.backend.get("k") == {"valid": True}
        self.backend.delete("k")
        assert self.backend.get("k") is None

    def test_expiry(self):
        self.backend.set("k", 1, ttl=10)
        self.now += 9
        assert self.backend.get("k") == 1
        self.now += 1
        assert self.backend.get("k") is None

    def test_incr_decr(self):
        assert self.backend.incr("c", 60) == 1
        assert self.backend.incr("c", 60) == 2
        assert self.backend.decr("c") == 1
        assert self.backend.decr("c") == 0
        assert self.backend.get("c") is None
        assert self.backend.decr("c") == 0

    def test_counter_expires(self):
        self.backend.incr("c", 60)
        self.now += 60
        assert self.backend.incr("c", 60) == 1

    def test_cleanup_expired(self):
        self.backend.set("a", 1, ttl=1)
        self.backend.set("b", 1, ttl=100)
        self.now += 5
        assert self.backend.cleanup_expired() == 1
        assert len(self.backend) == 1

    def test_writes_sweep_expired_entries(self):
        for i in range(1000):
            self.backend.set(f"k{i}", i, ttl=1)
        self.now += 10
        self.backend.set("fresh", 1, ttl=60)
        assert len(self.backend) == 1
        assert self.backend.get("fresh") == 1

    def test_sweeps_are_rate_limited(self):
        backend = MemoryCacheBackend({"sweep_interval": 5}, clock=lambda: self.now)
        backend.set("a", 1, ttl=1)
        self.now += 2
        backend.set("b", 1, ttl=1)
        assert len(backend) == 1

        # "b" has expired, but the last sweep was 2s ago
        self.now += 2
        backend.set("c", 1, ttl=60)
        assert len(backend) == 2

        self.now += 4
        backend.set("d", 1, ttl=60)
        assert len(backend) == 2
        assert backend.get("c") == 1

    def test_max_entries_evicts_oldest_writes(self):
        backend = MemoryCacheBackend({"max_entries": 3}, clock=lambda: self.now)
        for key in ("a", "b", "c"):
            backend.set(key, key, ttl=60)
        backend.set("a", "a2", ttl=60)
        backend.set("d", "d", ttl=60)
        assert len(backend) == 3
        assert backend.get("b") is None
        assert [backend.get(k) for k in ("a", "c", "d")] == ["a2", "c", "d"]


def test_memory_incr_is_atomic():
    backend = MemoryCacheBackend()
    with ThreadPoolExecutor(max_workers=8) as pool:
        counts = list(pool.map(lambda _: backend.incr("c", 60), range(200)))
    assert sorted(counts) == list(range(1, 201))


def test_null_backend_stores_nothing_but_counts():
    backend = NullCacheBackend()
    backend.set("k", 1, ttl=10)
    assert backend.get("k") is None
    assert backend.incr("c", 60) == 1
    assert backend.incr("c", 60) == 2
    assert backend.decr("c") == 1


class TestRedisCacheBackend:
    """Redis backend against a mocked client."""

    def setup_method(self):
        self.client = MagicMock()
        self.decr_script = MagicMock(return_value=0)
        self.client.register_script.return_value = self.decr_script
        self.pipe = MagicMock()
        self.client.pipeline.return_value.__enter__.return_value = self.pipe
        self.backend = RedisCacheBackend({"name": "redis"}, client=self.client)

    def test_get_decodes_json(self):
        self.client.get.return_value = json.dumps({"valid": True, "errors": []})
        assert self.backend.get("k") == {"valid": True, "errors": []}

    def test_get_missing(self):
        self.client.get.return_value = None
        assert self.backend.get("k") is None

    def test_get_undecodable(self):
        self.client.get.return_value = "{not json"
        assert self.backend.get("k") is None

    def test_set_encodes_json_with_ttl(self):
        self.backend.set("k", {"valid": False}, ttl=3600)
        self.client.set.assert_called_once_with("k", json.dumps({"valid": False}), ex=3600)

    def test_incr_uses_transaction(self):
        self.pipe.execute.return_value = [3, True]
        assert self.backend.incr("c", 60) == 3
        self.client.pipeline.assert_called_once_with(transaction=True)
        self.pipe.incr.assert_called_once_with("c")
        self.pipe.expire.assert_called_once_with("c", 60)

    def test_decr_runs_script(self):
        self.decr_script.return_value = 2
        assert self.backend.decr("c") == 2
        self.decr_script.assert_called_once_with(keys=["c"])

    @pytest.mark.parametrize("error", [redis.TimeoutError("slow"), redis.ConnectionError("down")])
    def test_errors_become_backing_store_unavailable(self, error):
        self.client.get.side_effect = error
        self.client.set.side_effect = error
        self.pipe.execute.side_effect = error
        self.decr_script.side_effect = error

        with pytest.raises(BackingStoreUnavailable):
            self.backend.get("k")
        with pytest.raises(BackingStoreUnavailable):
            self.backend.set("k", 1, ttl=1)
        with pytest.raises(BackingStoreUnavailable):
            self.backend.incr("c", 60)
        with pytest.raises(BackingStoreUnavailable):
            self.backend.decr("c")

    def test_health_check(self):
        self.client.ping.return_value = True
        assert self.backend.health_check() is True
        self.client.ping.side_effect = redis.ConnectionError("down")
        assert self.backend.health_check() is False

    def test_close_leaves_injected_client_open(self, monkeypatch):
        closed = []
        monkeypatch.setattr("shared.utils.redis_client.close_redis", lambda: closed.append(True))
        self.backend.close()
        assert closed == []

    def test_close_releases_shared_client(self, monkeypatch):
        closed = []
        monkeypatch.setattr("shared.utils.redis_client.get_redis_client", lambda: self.client)
        monkeypatch.setattr("shared.utils.redis_client.close_redis", lambda: closed.append(True))
        RedisCacheBackend({"name": "redis"}).close()
        assert closed == [True]


class TestFactory:

    def test_registered_backends(self):
        assert {"memory", "redis", "none"} <= set(CACHE_BACKENDS)

    def test_memory(self):
        backend = create_cache_backend(Settings(CACHE_BACKEND="memory"))
        assert isinstance(backend, MemoryCacheBackend)
        assert backend.backend_name == "memory"

    def test_none(self):
        assert isinstance(create_cache_backend(Settings(CACHE_BACKEND="none")), NullCacheBackend)

    def test_unreachable_redis_falls_back_to_memory(self, monkeypatch):
        def refuse():
            raise ConnectionError("Redis connection failed")

        monkeypatch.setattr("shared.utils.redis_client.get_redis_client", refuse)
        backend = create_cache_backend(Settings(CACHE_BACKEND="redis"))
        assert isinstance(backend, MemoryCacheBackend)

    def test_unknown_backend_name(self):
        with pytest.raises(ValueError, match="Unknown cache backend 'memcached'"):
            backend_class("memcached")

    def test_backend_name_cannot_be_taken_over(self):
        with pytest.raises(ValueError, match="already registered"):
            register_backend("memory")(NullCacheBackend)
        assert CACHE_BACKENDS["memory"] is MemoryCacheBackend

    def test_reregistering_same_class_is_allowed(self):
        assert register_backend("memory")(MemoryCacheBackend) is MemoryCacheBackend

    def test_memory_bound_comes_from_settings(self):
        backend = create_cache_backend(Settings(CACHE_BACKEND="memory", CACHE_MAX_ENTRIES=2))
        for key in ("a", "b", "c"):
            backend.set(key, 1, ttl=60)
        assert len(backend) == 2
        assert backend.get("a") is None

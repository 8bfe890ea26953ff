"""
In-process cache backend.

Dictionary store with per-entry expiry, guarded by a single lock so that
counter updates are atomic across threads.
"""

import math
import threading
import time
from typing import Any, Callable, Dict, Optional

from modules.validation.storage.core.backend import CacheBackend
from modules.validation.storage.core.registry import register_backend
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


@register_backend("memory")
class MemoryCacheBackend(CacheBackend):
    """
    In-memory cache with TTL expiration.

    Features:
    - TTL-based expiration (checked on read; writes sweep once the earliest
      entry has expired, at most every ``sweep_interval`` seconds)
    - Bounded size: once ``max_entries`` is reached the oldest writes are evicted
    - Atomic incr/decr under one lock

    Config:
        max_entries: Upper bound on stored keys (default 10000)
        sweep_interval: Minimum seconds between expiry sweeps (default 1)
    """

    DEFAULT_MAX_ENTRIES = 10000
    DEFAULT_SWEEP_INTERVAL = 1.0

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(config)
        self.max_entries = int(self.config.get("max_entries") or self.DEFAULT_MAX_ENTRIES)
        self.sweep_interval = float(self.config.get("sweep_interval") or self.DEFAULT_SWEEP_INTERVAL)
        self._store: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._next_expiry = math.inf
        self._last_sweep = -math.inf

    def _live_entry(self, key: str) -> Optional[Dict[str, Any]]:
        # Caller holds the lock
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() >= entry["expires_at"]:
            del self._store[key]
            logger.debug(f"Cache expired: {key}")
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._live_entry(key)
            return None if entry is None else entry["value"]

    def _drop_expired(self, now: float) -> int:
        # Caller holds the lock
        expired_keys = [key for key, entry in self._store.items() if now >= entry["expires_at"]]
        for key in expired_keys:
            del self._store[key]
        self._next_expiry = min((e["expires_at"] for e in self._store.values()), default=math.inf)
        self._last_sweep = now
        return len(expired_keys)

    def _put(self, key: str, value: Any, ttl: int) -> None:
        # Caller holds the lock
        now = self._clock()
        if now >= self._next_expiry and now - self._last_sweep >= self.sweep_interval:
            removed = self._drop_expired(now)
            logger.debug(f"Swept {removed} expired cache entries")

        # Re-inserting moves the key to the end, so eviction follows write order
        self._store.pop(key, None)
        while len(self._store) >= self.max_entries:
            del self._store[next(iter(self._store))]

        expires_at = now + ttl
        self._store[key] = {"value": value, "expires_at": expires_at}
        self._next_expiry = min(self._next_expiry, expires_at)

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._put(key, value, ttl)
        logger.debug(f"Cache set: {key} (TTL: {ttl}s)")

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def incr(self, key: str, ttl: int) -> int:
        with self._lock:
            entry = self._live_entry(key)
            count = (int(entry["value"]) if entry else 0) + 1
            self._put(key, count, ttl)
            return count

    def decr(self, key: str) -> int:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return 0
            count = int(entry["value"]) - 1
            if count <= 0:
                del self._store[key]
                return 0
            entry["value"] = count
            return count

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns the number removed."""
        with self._lock:
            removed = self._drop_expired(self._clock())

        if removed:
            logger.info(f"Cleaned up {removed} expired cache entries")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._next_expiry = math.inf
        logger.info("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
